from typing import Optional

import httpx

from ..config import Settings, get_settings
from .base import HttpSearchSource


class GitHubAdapter(HttpSearchSource):
    """Talks to the GitHub search API directly, token attached when configured."""

    path = "/search/repositories"
    name = "github"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": self.settings.user_agent,
        }
        if self.settings.github_token:
            headers["Authorization"] = f"Bearer {self.settings.github_token}"
        super().__init__(
            base_url=str(self.settings.github_base_url),
            headers=headers,
            timeout=self.settings.request_timeout_seconds,
            proxy=self.settings.github_proxy,
            transport=transport,
        )
