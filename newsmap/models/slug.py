from typing import Optional


def normalize_slug(value: Optional[str]) -> str:
    """Canonical form of a slug as it appears in a URL path: no surrounding whitespace or slashes.

    An empty result means the record has no usable slug.
    """
    return (value or "").strip().strip("/").strip()
