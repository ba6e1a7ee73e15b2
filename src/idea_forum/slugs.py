from __future__ import annotations

import re
from typing import Awaitable, Callable

SLUG_MAX_LEN = 50
FALLBACK_SLUG = "untitled"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """Lower-case, collapse non ``[a-z0-9]`` runs to '-', trim hyphens, cut to 50 chars."""
    slug = _NON_ALNUM.sub("-", text.lower()).strip("-")[:SLUG_MAX_LEN]
    return slug or FALLBACK_SLUG


async def unique_slug(text: str, is_taken: Callable[[str], Awaitable[bool]]) -> str:
    """Return ``slugify(text)``, suffixed with -1, -2, ... until ``is_taken`` says no."""
    base = slugify(text)
    slug = base
    counter = 1
    while await is_taken(slug):
        slug = f"{base}-{counter}"
        counter += 1
    return slug
