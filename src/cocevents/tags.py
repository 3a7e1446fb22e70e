"""Tag normalization.

Player and clan tags are typed by humans, so the same entity shows up as
``#2pp``, ``2PP`` or ``#2oo``. Every watch-set key goes through
:func:`validate_tag` first so that equality is plain string equality.
"""

from __future__ import annotations

import re
from urllib.parse import quote

_TAG_PATTERN = re.compile(r"[0289PYLQGRJCUV]{3,9}")


def validate_tag(value: str | None) -> str | None:
    """Return the normalized ``#TAG`` form of *value*, or ``None`` if invalid.

    The letter ``O`` is read as a zero (tags never contain it) and a leading
    ``#`` is optional.
    """
    if not value:
        return None
    cleaned = value.strip().upper().replace("O", "0").replace("#", "")
    match = _TAG_PATTERN.search(cleaned)
    if match is None:
        return None
    return f"#{match.group(0)}"


def encode_tag(tag: str) -> str:
    """Percent-encode a normalized tag for use as a path segment."""
    return quote(tag, safe="")
