"""Text helpers for slugs and excerpts."""
from __future__ import annotations

import re
import unicodedata

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(value: str, max_length: int = 80) -> str:
    """Return a lowercase, hyphen-separated slug for `value`.

    Accents are folded to ASCII and runs of other characters collapse to a
    single hyphen. Falls back to "untitled" when nothing usable remains.
    """
    normalized = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode()
    slug = _NON_ALNUM.sub("-", normalized.lower()).strip("-")
    slug = slug[:max_length].rstrip("-")
    return slug or "untitled"


def truncate(value: str, length: int = 200) -> str:
    """Shorten `value` to `length` characters, ending with an ellipsis if cut."""
    value = value.strip()
    if len(value) <= length:
        return value
    return value[: length - 1].rstrip() + "…"
