from typing import Dict, Optional, Protocol

import httpx
from loguru import logger

from ..errors import TransportUnavailable
from ..schemas import SearchRequest, SearchResult
from ..services.normalizer import normalize_response
from ..services.request_builder import build_search_params


class DataSource(Protocol):
    async def search_repositories(self, request: SearchRequest) -> SearchResult:
        ...


class HttpSearchSource:
    """One GET per search: build params, send them to ``path``, normalize the reply."""

    path: str = "/search/repositories"
    name: str = "search"

    def __init__(
        self,
        base_url: str,
        headers: Dict[str, str],
        timeout: float = 20,
        proxy: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.headers = headers
        client_kwargs = {"base_url": base_url, "timeout": timeout}
        if proxy:
            client_kwargs["proxy"] = proxy
        if transport is not None:
            client_kwargs["transport"] = transport
        self.client = httpx.AsyncClient(**client_kwargs)

    async def search_repositories(self, request: SearchRequest) -> SearchResult:
        built = build_search_params(request)
        logger.debug(f"[{self.name}] GET {self.path} params={built.params}")
        try:
            resp = await self.client.get(self.path, params=built.params, headers=self.headers)
        except httpx.RequestError as exc:
            logger.warning(f"[{self.name}] request error: {type(exc).__name__} {exc!r}")
            raise TransportUnavailable() from exc
        return normalize_response(resp.status_code, resp.headers, resp.content)

    async def aclose(self) -> None:
        await self.client.aclose()
