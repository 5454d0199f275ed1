"""In-process cache entry model for upstream catalog responses."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CacheEntry:
    """A cached upstream payload with an absolute expiry.

    ``payload`` is the decoded JSON body exactly as the upstream returned it;
    it is stored and handed back verbatim. Entries are never mutated: writing
    the same key again replaces the entry with a new id.
    """

    id: int
    key: str
    payload: Any
    expires_at: int  # Unix timestamp (seconds)

    def is_expired(self, now: int) -> bool:
        return self.expires_at <= now
