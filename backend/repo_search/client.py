from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from .datasources.base import DataSource
from .datasources.github_adapter import GitHubAdapter
from .datasources.proxy_adapter import ProxyAdapter
from .errors import InvalidParameters
from .schemas import SearchRequest, SearchResult


def _format_error(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()))
    return f"{location}: {error['msg']}" if location else error["msg"]


def validation_details(exc: ValidationError) -> list[str]:
    return [_format_error(error) for error in exc.errors()]


def coerce_request(params: Union[SearchRequest, Mapping[str, Any]]) -> SearchRequest:
    if isinstance(params, SearchRequest):
        return params
    try:
        return SearchRequest.model_validate(dict(params))
    except ValidationError as exc:
        raise InvalidParameters(validation_details(exc)) from exc


async def search_repositories(
    params: Union[SearchRequest, Mapping[str, Any]],
    *,
    github: Optional[DataSource] = None,
    proxy: Optional[DataSource] = None,
) -> SearchResult:
    """Run one search, either against GitHub or through the search proxy.

    Raises a ``SearchError`` subclass on any failure; nothing is retried here.
    Sources created on the fly are closed before returning.
    """
    request = coerce_request(params)
    source = proxy if request.targets_proxy else github
    owned = source is None
    if owned:
        source = ProxyAdapter() if request.targets_proxy else GitHubAdapter()
    try:
        return await source.search_repositories(request)
    finally:
        if owned:
            await source.aclose()
