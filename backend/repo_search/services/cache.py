import json
import time
from typing import Any, Callable, Dict, Optional, Tuple

from ..schemas import SearchRequest
from .query import sanitize_query


def cache_key(request: SearchRequest) -> str:
    """Key a request by its normalized fields, so cosmetic whitespace shares an entry."""
    return json.dumps(
        {
            "query": sanitize_query(request.query),
            "page": request.page,
            "per_page": request.per_page,
            "sort": request.sort,
            "order": request.order,
            "include_forks": request.include_forks,
            "language": request.language or "",
            "targets_proxy": request.targets_proxy,
        },
        sort_keys=True,
    )


class InMemoryCache:
    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self.store: Dict[str, Tuple[float, Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self.store.get(key)
        if not entry:
            return None
        expires_at, value = entry
        if self.clock() > expires_at:
            self.store.pop(key, None)
            return None
        return value

    def set(self, key: str, value: Any):
        now = self.clock()
        self.evict_expired(now)
        self.store[key] = (now + self.ttl_seconds, value)

    def evict_expired(self, now: Optional[float] = None) -> int:
        """Drop every stale entry; returns how many were removed."""
        now = self.clock() if now is None else now
        stale = [key for key, (expires_at, _) in self.store.items() if now > expires_at]
        for key in stale:
            del self.store[key]
        return len(stale)

    def clear(self):
        self.store.clear()
