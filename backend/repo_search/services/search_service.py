import asyncio
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

from loguru import logger

from ..client import coerce_request
from ..datasources.base import DataSource
from ..errors import EmptyQuery, RateLimited, SearchError
from ..schemas import SearchRequest, SearchResult
from .cache import InMemoryCache, cache_key
from .pagination import clamp_page, page_count
from .query import sanitize_query

DEFAULT_MAX_RETRIES = 2
DEFAULT_RETRY_DELAY_SECONDS = 1.0
MAX_RETRY_DELAY_SECONDS = 30.0


def should_retry(failures: int, error: BaseException, max_retries: int = DEFAULT_MAX_RETRIES) -> bool:
    """Retry policy: rate limits and 403s never, other retryable errors up to ``max_retries`` times."""
    if isinstance(error, RateLimited):
        return False
    if not isinstance(error, SearchError) or not error.retryable:
        return False
    if error.status_code == 403:
        return False
    return failures <= max_retries


def retry_delay(failures: int, base: float = DEFAULT_RETRY_DELAY_SECONDS) -> float:
    """Seconds to wait before the next attempt: doubles per failure, capped at 30s."""
    return min(base * 2 ** (failures - 1), MAX_RETRY_DELAY_SECONDS)


class RepoSearchService:
    """Caller-side wrapper around the search core.

    Serves fresh results from the cache, shares one upstream call between
    identical concurrent searches, and retries according to ``should_retry``.
    """

    def __init__(
        self,
        github: DataSource,
        proxy: Optional[DataSource] = None,
        cache: Optional[InMemoryCache] = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.github = github
        self.proxy = proxy
        self.cache = cache
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds
        self.sleep = sleep
        self._in_flight: Dict[str, asyncio.Task] = {}

    def _source_for(self, request: SearchRequest) -> DataSource:
        if request.targets_proxy:
            if self.proxy is None:
                raise RuntimeError("proxy mode requested but no proxy data source configured")
            return self.proxy
        return self.github

    async def search(self, params: Union[SearchRequest, Mapping[str, Any]]) -> SearchResult:
        request = coerce_request(params)
        if not sanitize_query(request.query):
            raise EmptyQuery()

        key = cache_key(request)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug(f"[service] cache hit {key}")
                return cached

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._search_with_retry(request))
            self._in_flight[key] = task
            task.add_done_callback(lambda _t, k=key: self._in_flight.pop(k, None))
        else:
            logger.debug(f"[service] joining in-flight search {key}")
        # shield so one cancelled caller does not cancel the shared call
        result = await asyncio.shield(task)

        if self.cache is not None:
            self.cache.set(key, result)
        return result

    async def _search_with_retry(self, request: SearchRequest) -> SearchResult:
        source = self._source_for(request)
        failures = 0
        while True:
            try:
                return await source.search_repositories(request)
            except SearchError as exc:
                failures += 1
                if not should_retry(failures, exc, self.max_retries):
                    raise
                delay = retry_delay(failures, self.retry_delay_seconds)
                logger.info(
                    f"[service] retrying after {type(exc).__name__} in {delay:.1f}s (attempt {failures + 1})"
                )
                await self.sleep(delay)

    async def search_page(
        self, params: Union[SearchRequest, Mapping[str, Any]]
    ) -> Dict[str, Any]:
        """Search, then report the page count and the page navigation should settle on."""
        request = coerce_request(params)
        result = await self.search(request)
        total_pages = page_count(result.total_count, request.per_page)
        return {
            "result": result,
            "total_pages": total_pages,
            "page": clamp_page(request.page, total_pages),
        }
