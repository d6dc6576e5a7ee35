"""Edge cache-policy emitter.

Turns a ``CachePolicy`` into outbound caching headers so the CDN and
browsers can keep responses without going back to the origin. The CDN is
trusted to honor the headers; nothing here verifies that it does.

Header grammar:
- Never cache (edge == browser == 0): ``Cache-Control: no-store, no-cache,
  must-revalidate, proxy-revalidate`` plus ``Pragma: no-cache`` and
  ``Expires: 0``.
- Otherwise: ``public|private, max-age=<browser>, s-maxage=<edge>[,
  stale-while-revalidate=<n>]``.
- ``Vary`` is always set; ``CDN-Cache-Control`` only when edge > 0.
"""

import logging
from typing import Any

from reelcache.models import CachePolicy

logger = logging.getLogger(__name__)

NO_STORE = "no-store, no-cache, must-revalidate, proxy-revalidate"


class CDNPolicies:
    """Preset policies, selected by intent."""

    #: Static catalog data, cached aggressively
    CATALOG = CachePolicy(edge=300, browser=60, stale_while_revalidate=600)
    #: User-specific data, never cached at the edge
    PRIVATE = CachePolicy(edge=0, browser=0, vary_auth=True)
    #: Trending and recommendations, short cache
    DYNAMIC = CachePolicy(edge=60, browser=30, stale_while_revalidate=120)
    #: Generic API responses
    API = CachePolicy(edge=30, browser=10, stale_while_revalidate=60)
    #: Never cache
    NO_CACHE = CachePolicy(edge=0, browser=0)


def build_cache_headers(policy: CachePolicy) -> dict[str, str]:
    """Build the caching headers for ``policy``."""
    headers: dict[str, str] = {}

    if policy.edge == 0 and policy.browser == 0:
        headers["Cache-Control"] = NO_STORE
        headers["Pragma"] = "no-cache"
        headers["Expires"] = "0"
    else:
        parts = ["private" if policy.vary_auth else "public"]
        parts.append(f"max-age={policy.browser}")
        parts.append(f"s-maxage={policy.edge}")
        if policy.stale_while_revalidate:
            parts.append(f"stale-while-revalidate={policy.stale_while_revalidate}")
        headers["Cache-Control"] = ", ".join(parts)

    vary = ["Accept-Encoding"]
    if policy.vary_auth:
        vary.append("Authorization")
    headers["Vary"] = ", ".join(vary)

    if policy.edge > 0:
        headers["CDN-Cache-Control"] = f"max-age={policy.edge}"

    return headers


def apply_cache_headers(response: Any, policy: CachePolicy) -> None:
    """Write the caching headers for ``policy`` onto ``response``.

    Args:
        response: Any object with a mutable ``headers`` mapping, such as a
            Starlette/FastAPI ``Response``.
        policy: The cache policy to express.
    """
    headers = build_cache_headers(policy)
    for name, value in headers.items():
        response.headers[name] = value
    logger.debug(f"[CDN] Cache-Control: {headers['Cache-Control']}")
