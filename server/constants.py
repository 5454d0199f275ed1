"""Centralized constants for cache policy, upstream paths and auth.

Single source of truth for values that are fixed by contract rather than
configured per deployment.
"""

from typing import FrozenSet, Tuple

# =============================================================================
# CACHE TTLS (seconds)
# =============================================================================

GAMES_LIST_TTL = 3600       # 1 hour
GAME_DETAIL_TTL = 86400     # 24 hours
GAME_SEARCH_TTL = 1800      # 30 minutes

# =============================================================================
# UPSTREAM CATALOG
# =============================================================================

GAMES_PATH = "/games"
SEARCH_KEY_PREFIX = "/search/"

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 20
SEARCH_PAGE_SIZE = 10

# Listing parameters in cache-key order. "path" is always first.
LISTING_KEY_FIELDS: Tuple[str, ...] = (
    "search",
    "page",
    "page_size",
    "platforms",
    "genres",
    "ordering",
    "esrb_rating",
)

# Optional listing filters forwarded upstream only when set
LISTING_OPTIONAL_FILTERS: Tuple[str, ...] = (
    "search",
    "platforms",
    "genres",
    "ordering",
    "esrb_rating",
)

# =============================================================================
# AUTH
# =============================================================================

BCRYPT_ROUNDS = 10
JWT_ALGORITHM = "HS256"

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 6

# Routes that require an open session (exact match or prefix)
PROTECTED_PATHS: FrozenSet[str] = frozenset([
    "/api/auth/logout",
    "/api/auth/user",
    "/api/favorites",
])

PROTECTED_PREFIXES: Tuple[str, ...] = (
    "/api/favorites/",
)
