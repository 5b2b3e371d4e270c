import httpx
import pytest

from conftest import RecordingHandler, json_reply, make_payload, make_repo
from repo_search.client import search_repositories
from repo_search.datasources.github_adapter import GitHubAdapter
from repo_search.datasources.proxy_adapter import ProxyAdapter
from repo_search.errors import (
    EmptyQuery,
    InvalidParameters,
    MalformedUpstreamResponse,
    RateLimited,
    TransportUnavailable,
    UpstreamRejected,
)


def base_params(**overrides):
    params = {
        "query": "react hooks",
        "page": 1,
        "per_page": 10,
        "sort": "stars",
        "order": "asc",
        "include_forks": False,
    }
    params.update(overrides)
    return params


@pytest.mark.asyncio
async def test_direct_mode_hits_github_with_token(settings):
    handler = RecordingHandler(json_reply(make_payload(total_count=2500), headers={"x-ratelimit-reset": "1700000000"}))
    github = GitHubAdapter(settings, transport=httpx.MockTransport(handler))

    result = await search_repositories(base_params(), github=github)

    sent = handler.requests[0]
    assert sent.url.host == "api.github.test"
    assert sent.url.path == "/search/repositories"
    assert sent.url.params["q"] == "react hooks fork:false"
    assert sent.url.params["sort"] == "stars"
    assert sent.url.params["order"] == "asc"
    assert sent.headers["Authorization"] == "Bearer test-token"
    assert sent.headers["Accept"] == "application/vnd.github+json"
    assert sent.headers["User-Agent"] == "repo-search-tests"
    assert result.total_count == 1000
    assert result.rate_limit_reset == 1700000000
    assert result.items[0].full_name == "octocat/repo-one"
    await github.aclose()


@pytest.mark.asyncio
async def test_no_authorization_header_without_token(anon_settings):
    handler = RecordingHandler(json_reply(make_payload()))
    github = GitHubAdapter(anon_settings, transport=httpx.MockTransport(handler))

    await search_repositories(base_params(), github=github)

    assert "Authorization" not in handler.requests[0].headers
    await github.aclose()


@pytest.mark.asyncio
async def test_proxy_mode_sends_structured_filters(settings):
    handler = RecordingHandler(json_reply(make_payload([make_repo(language="Go")])))
    proxy = ProxyAdapter(settings, transport=httpx.MockTransport(handler))

    result = await search_repositories(
        base_params(targets_proxy=True, language="Go", sort="best", order="desc"), proxy=proxy
    )

    sent = handler.requests[0]
    assert sent.url.host == "proxy.test"
    assert sent.url.path == "/search"
    assert dict(sent.url.params) == {
        "q": "react hooks",
        "page": "1",
        "per_page": "10",
        "forks": "exclude",
        "language": "Go",
    }
    assert "Authorization" not in sent.headers
    assert result.languages == ["Go"]
    await proxy.aclose()


@pytest.mark.asyncio
async def test_proxy_rate_limit_becomes_rate_limited(settings):
    reply = json_reply({"error": "GitHub rate limit hit.", "resetAt": 1700000000}, 429, {"Retry-After": "42"})
    proxy = ProxyAdapter(settings, transport=httpx.MockTransport(RecordingHandler(reply)))

    with pytest.raises(RateLimited) as excinfo:
        await search_repositories(base_params(targets_proxy=True), proxy=proxy)
    assert excinfo.value.retry_after_seconds == 42
    await proxy.aclose()


@pytest.mark.asyncio
async def test_network_failure_is_transport_unavailable(settings):
    handler = RecordingHandler(httpx.ConnectError("connection refused"))
    github = GitHubAdapter(settings, transport=httpx.MockTransport(handler))

    with pytest.raises(TransportUnavailable) as excinfo:
        await search_repositories(base_params(), github=github)
    assert excinfo.value.retryable
    await github.aclose()


@pytest.mark.asyncio
async def test_upstream_rejection(settings):
    handler = RecordingHandler(json_reply({"message": "Validation Failed"}, 422))
    github = GitHubAdapter(settings, transport=httpx.MockTransport(handler))

    with pytest.raises(UpstreamRejected) as excinfo:
        await search_repositories(base_params(), github=github)
    assert excinfo.value.status_code == 422
    assert excinfo.value.message == "Validation Failed"
    await github.aclose()


@pytest.mark.asyncio
async def test_malformed_payload(settings):
    handler = RecordingHandler(json_reply({"total_count": 1, "items": "nope"}))
    github = GitHubAdapter(settings, transport=httpx.MockTransport(handler))

    with pytest.raises(MalformedUpstreamResponse):
        await search_repositories(base_params(), github=github)
    await github.aclose()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [{"page": 0}, {"page": 101}, {"per_page": 51}, {"sort": "forks"}, {"order": "up"}, {"language": "x" * 41}],
)
async def test_invalid_parameters_never_reach_transport(settings, overrides):
    handler = RecordingHandler(json_reply(make_payload()))
    github = GitHubAdapter(settings, transport=httpx.MockTransport(handler))

    with pytest.raises(InvalidParameters) as excinfo:
        await search_repositories(base_params(**overrides), github=github)
    assert excinfo.value.details
    assert handler.requests == []
    await github.aclose()


@pytest.mark.asyncio
async def test_blank_query_never_reaches_transport(settings):
    handler = RecordingHandler(json_reply(make_payload()))
    github = GitHubAdapter(settings, transport=httpx.MockTransport(handler))

    with pytest.raises(EmptyQuery):
        await search_repositories(base_params(query="    "), github=github)
    assert handler.requests == []
    await github.aclose()
