# tests/conftest.py
import copy
import json

import httpx
import pytest

from repo_search.config import Settings

SAMPLE_REPO = {
    "id": 1,
    "name": "repo-one",
    "full_name": "octocat/repo-one",
    "description": "Test repo",
    "html_url": "https://github.com/octocat/repo-one",
    "language": "TypeScript",
    "stargazers_count": 10,
    "forks_count": 2,
    "updated_at": "2024-01-01T00:00:00Z",
    "owner": {
        "login": "octocat",
        "avatar_url": "https://avatars.githubusercontent.com/u/1?v=4",
        "html_url": "https://github.com/octocat",
    },
}


def make_repo(**overrides):
    repo = copy.deepcopy(SAMPLE_REPO)
    repo.update(overrides)
    return repo


def make_payload(items=None, total_count=None, incomplete_results=False):
    items = [make_repo()] if items is None else items
    return {
        "total_count": len(items) if total_count is None else total_count,
        "incomplete_results": incomplete_results,
        "items": items,
    }


class RecordingHandler:
    """MockTransport handler that replays queued responses and remembers every request."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


def json_reply(body, status_code=200, headers=None):
    return httpx.Response(
        status_code,
        content=json.dumps(body).encode(),
        headers={"Content-Type": "application/json", **(headers or {})},
    )


@pytest.fixture
def settings():
    return Settings(
        GITHUB_TOKEN="test-token",
        GITHUB_BASE_URL="https://api.github.test",
        SEARCH_PROXY_URL="https://proxy.test",
        USER_AGENT="repo-search-tests",
    )


@pytest.fixture
def anon_settings():
    return Settings(
        GITHUB_TOKEN=None,
        GITHUB_BASE_URL="https://api.github.test",
        SEARCH_PROXY_URL="https://proxy.test",
    )
