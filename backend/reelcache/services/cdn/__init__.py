"""CDN cache-header module.

Maps cache policies to Cache-Control, Vary and CDN-Cache-Control headers.
"""

from .service import (
    CDNPolicies,
    NO_STORE,
    apply_cache_headers,
    build_cache_headers,
)

__all__ = [
    "CDNPolicies",
    "NO_STORE",
    "apply_cache_headers",
    "build_cache_headers",
]
