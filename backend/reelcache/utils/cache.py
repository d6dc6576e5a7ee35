"""Cache key helpers.

Keys are ``<route>:<param>=<value>:...`` with parameters sorted by name, so
the same request always maps to the same key regardless of argument order.
"""

from typing import Any


def _normalize(value: Any) -> str:
    if value is None:
        return "anon"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (list, tuple, set, frozenset)):
        if not value:
            return "default"
        return ",".join(sorted(_normalize(v) for v in value))
    return str(value).strip().lower()


def build_cache_key(route: str, **params: Any) -> str:
    """Build a normalized cache key for a route and its query parameters.

    Example:
        >>> build_cache_key("films", genre="Drama", limit=20)
        'films:genre=drama:limit=20'
    """
    parts = [route.strip().lower()]
    for name in sorted(params):
        parts.append(f"{name}={_normalize(params[name])}")
    return ":".join(parts)


def cache_prefix(route: str) -> str:
    """Prefix shared by every key built for ``route``."""
    return f"{route.strip().lower()}:"
