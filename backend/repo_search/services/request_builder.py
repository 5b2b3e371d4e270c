from dataclasses import dataclass
from typing import Dict

from ..errors import EmptyQuery
from ..schemas import SearchRequest
from .query import compose_qualifiers, join_query, sanitize_query


@dataclass(frozen=True)
class BuiltRequest:
    params: Dict[str, str]
    sanitized_query: str


def build_search_params(request: SearchRequest) -> BuiltRequest:
    """Turn a validated request into upstream query parameters.

    Direct mode embeds the fork/language qualifiers in ``q``. Proxy mode sends
    the bare query and lets the proxy embed them from ``forks``/``language``.
    Only deviations from GitHub's default order are sent when sorting by best
    match.
    """
    sanitized = sanitize_query(request.query)
    if not sanitized:
        raise EmptyQuery()

    if request.targets_proxy:
        q = sanitized
    else:
        q = join_query(sanitized, compose_qualifiers(request.include_forks, request.language))

    params: Dict[str, str] = {
        "q": q,
        "page": str(request.page),
        "per_page": str(request.per_page),
    }

    if request.sort != "best":
        params["sort"] = request.sort
        params["order"] = request.order
    elif request.order != "desc":
        params["order"] = request.order

    if request.targets_proxy:
        params["forks"] = "include" if request.include_forks else "exclude"
        if request.language:
            params["language"] = request.language

    return BuiltRequest(params=params, sanitized_query=sanitized)
