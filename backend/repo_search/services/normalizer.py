import json
from typing import Any, Iterable, List, Mapping, Optional, Union

import httpx
from loguru import logger
from pydantic import ValidationError

from ..errors import (
    DEFAULT_RETRY_AFTER_SECONDS,
    MalformedUpstreamResponse,
    RateLimited,
    UpstreamRejected,
)
from ..schemas import Repository, SearchResult, UpstreamSearchPayload
from .pagination import cap_total

GENERIC_FAILURE_MESSAGE = "GitHub search failed."


def _parse_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def is_rate_limited(status_code: int, headers: httpx.Headers) -> bool:
    # 429 is what the search proxy answers with once GitHub runs dry
    return headers.get("x-ratelimit-remaining") == "0" or status_code == 429


def rate_limit_error(headers: httpx.Headers) -> RateLimited:
    retry_after = _parse_int(headers.get("retry-after"))
    if retry_after is None:
        retry_after = DEFAULT_RETRY_AFTER_SECONDS
    return RateLimited(
        retry_after_seconds=retry_after,
        reset_at_epoch=_parse_int(headers.get("x-ratelimit-reset")),
    )


def _rejection(status_code: int, payload: Any) -> UpstreamRejected:
    message = GENERIC_FAILURE_MESSAGE
    details = None
    if isinstance(payload, dict):
        if isinstance(payload.get("message"), str):
            message = payload["message"]
        elif isinstance(payload.get("error"), str):
            message = payload["error"]
        raw_details = payload.get("details")
        if isinstance(raw_details, list) and all(isinstance(d, str) for d in raw_details):
            details = raw_details
    return UpstreamRejected(status_code, message, details)


def distinct_languages(items: Iterable[Repository]) -> List[str]:
    seen = {}
    for repo in items:
        if repo.language is not None:
            seen.setdefault(repo.language, None)
    return list(seen)


def normalize_response(
    status_code: int,
    headers: Union[httpx.Headers, Mapping[str, str]],
    body: Union[str, bytes],
) -> SearchResult:
    """Validate a raw search response and shape it into a SearchResult.

    Rate limiting wins over everything else, then JSON parsing, then the HTTP
    status, then the payload schema. A payload that fails the schema is
    rejected as a whole.
    """
    headers = httpx.Headers(headers)

    if is_rate_limited(status_code, headers):
        error = rate_limit_error(headers)
        logger.warning(
            f"[search] rate limited, retry after {error.retry_after_seconds}s, reset at {error.reset_at_epoch}"
        )
        raise error

    try:
        payload = json.loads(body)
    except ValueError as exc:
        logger.error(f"[search] failed to parse response body (status={status_code}): {exc}")
        raise MalformedUpstreamResponse("Unexpected response from GitHub.") from exc

    if not 200 <= status_code < 300:
        error = _rejection(status_code, payload)
        logger.warning(f"[search] upstream rejected request: {status_code} {error.message}")
        raise error

    try:
        parsed = UpstreamSearchPayload.model_validate(payload)
    except ValidationError as exc:
        logger.error(f"[search] payload failed validation: {exc.error_count()} error(s)\n{exc}")
        raise MalformedUpstreamResponse() from exc

    return SearchResult(
        items=parsed.items,
        total_count=cap_total(parsed.total_count),
        incomplete_results=parsed.incomplete_results,
        rate_limit_reset=_parse_int(headers.get("x-ratelimit-reset")),
        languages=distinct_languages(parsed.items),
    )
