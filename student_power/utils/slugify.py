"""Slug derivation for catalog names."""

import re

_INVALID_CHARS = re.compile(r"[^\w\s-]", re.ASCII)
_SEPARATORS = re.compile(r"[\s_]+", re.ASCII)
_REPEATED_HYPHENS = re.compile(r"-{2,}")


def slugify(text: str) -> str:
    """Convert text into a lowercase, hyphenated, URL-safe slug.

    The result is either empty or matches ``^[a-z0-9]+(-[a-z0-9]+)*$``,
    and ``slugify(slugify(x)) == slugify(x)``.

    Args:
        text: Display name to convert.

    Returns:
        Slug string (possibly empty when text has no ASCII word characters).
    """
    slug = str(text).lower().strip()
    slug = _INVALID_CHARS.sub("", slug)
    slug = _SEPARATORS.sub("-", slug)
    slug = _REPEATED_HYPHENS.sub("-", slug)
    return slug.strip("-")
