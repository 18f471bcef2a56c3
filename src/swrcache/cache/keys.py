"""Cache key construction.

Key format: {part}:{part}:...

Callers build collision-free keys by joining identifying parts (resource
name, id, variant) with a fixed delimiter. The cache itself treats keys as
opaque strings compared by exact match.
"""

from __future__ import annotations

DELIMITER = ":"


def cache_key(*parts: str | int) -> str:
    """Join parts into a cache key, e.g. cache_key("product", 42) -> "product:42"."""
    return DELIMITER.join(str(part) for part in parts)


class CacheKeys:
    """Cache key generator following a consistent naming convention."""

    DELIMITER = DELIMITER

    @classmethod
    def build(cls, *parts: str | int) -> str:
        """Join parts with the key delimiter."""
        if not parts:
            raise ValueError("A cache key needs at least one part")
        return cls.DELIMITER.join(str(part) for part in parts)

    @classmethod
    def resource(cls, name: str, identifier: str | int, *variant: str | int) -> str:
        """Key for a single resource, optionally narrowed by a variant."""
        return cls.build(name, identifier, *variant)

    @classmethod
    def collection(cls, name: str, *filters: str | int) -> str:
        """Key for a list of resources, e.g. collection("products", "page", 2)."""
        return cls.build(name, "list", *filters)

    @classmethod
    def parse(cls, key: str) -> list[str]:
        """Split a key back into its parts."""
        return key.split(cls.DELIMITER)

    @classmethod
    def prefix_of(cls, key: str) -> str:
        """First part of the key, usually the resource name."""
        return key.split(cls.DELIMITER, 1)[0]
