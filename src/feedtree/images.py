from __future__ import annotations

import html as _html_mod
import re
from typing import Optional

_RE_IMG_SRC = re.compile(
    r"""<img\b[^>]*?(?<![\w-])src\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+))""",
    re.IGNORECASE,
)


def first_image_url(text: Optional[str]) -> Optional[str]:
    """Return the ``src`` of the first ``<img>`` element found in an HTML blob.

    Used as a fallback image source for items without an explicit image.
    Malformed markup simply yields no match.
    """
    if not text or "<" not in text:
        return None

    for match in _RE_IMG_SRC.finditer(text):
        src = next((group for group in match.groups() if group is not None), "")
        src = src.strip()
        if src:
            return _html_mod.unescape(src) if "&" in src else src
    return None
