from typing import Optional

import httpx

from ..config import Settings, get_settings
from .base import HttpSearchSource


class ProxyAdapter(HttpSearchSource):
    """Sends searches to the repo-search proxy, which holds the GitHub token."""

    path = "/search"
    name = "proxy"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        super().__init__(
            base_url=str(self.settings.search_proxy_url),
            headers={"Accept": "application/vnd.github+json"},
            timeout=self.settings.request_timeout_seconds,
            transport=transport,
        )
