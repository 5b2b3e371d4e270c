import json
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Dict, Optional

from fastapi import BackgroundTasks, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError

from .client import validation_details
from .config import configure_logging, get_settings
from .datasources.github_adapter import GitHubAdapter
from .errors import (
    EmptyQuery,
    InvalidParameters,
    MalformedUpstreamResponse,
    RateLimited,
    SearchError,
    TransportUnavailable,
)
from .schemas import ErrorBody, ProxySearchParams, ProxySearchResponse, SearchRequest
from .services.query import sanitize_query, strip_search_syntax

settings = get_settings()
configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    yield
    await github.aclose()


app = FastAPI(title="Repo Search Proxy", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET"],
    allow_headers=["*"],
)

github = GitHubAdapter(settings)


def json_response(body, status_code: int = 200, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    merged = {"Access-Control-Allow-Origin": "*"}
    if headers:
        merged.update(headers)
    if hasattr(body, "model_dump"):
        body = body.model_dump(mode="json", exclude_none=True)
    return JSONResponse(content=body, status_code=status_code, headers=merged)


def error_response(exc: SearchError) -> JSONResponse:
    if isinstance(exc, RateLimited):
        return json_response(
            ErrorBody(error=exc.message, resetAt=exc.reset_at_epoch),
            429,
            {
                "Retry-After": str(exc.retry_after_seconds),
                "x-ratelimit-reset": "" if exc.reset_at_epoch is None else str(exc.reset_at_epoch),
            },
        )
    if isinstance(exc, (TransportUnavailable, MalformedUpstreamResponse)):
        return json_response(ErrorBody(error=exc.message), 502)
    return json_response(ErrorBody(error=exc.message, details=exc.details), exc.status_code)


async def log_request(path: str, status: int):
    try:
        logger.info(json.dumps({"path": path, "status": status, "at": int(time.time() * 1000)}))
    except Exception as exc:
        logger.warning(f"[proxy] request log failed: {exc!r}")


def parse_proxy_params(request: Request) -> SearchRequest:
    try:
        params = ProxySearchParams.model_validate(dict(request.query_params))
    except ValidationError as exc:
        raise InvalidParameters(validation_details(exc)) from exc

    query = strip_search_syntax(sanitize_query(params.q))
    if not query:
        raise EmptyQuery("Query cannot be empty")

    return SearchRequest(
        query=query,
        page=params.page,
        per_page=params.per_page,
        sort=params.sort,
        order=params.order,
        include_forks=params.forks == "include",
        language=params.language,
        targets_proxy=False,
    )


@app.get("/health")
async def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/search")
async def search(request: Request, background_tasks: BackgroundTasks):
    try:
        search_request = parse_proxy_params(request)
        result = await github.search_repositories(search_request)
    except SearchError as exc:
        logger.info(f"[proxy] {request.url.path} -> {exc.status_code} {type(exc).__name__}")
        return error_response(exc)

    background_tasks.add_task(log_request, str(request.url), 200)

    body = ProxySearchResponse(
        total_count=result.total_count,
        incomplete_results=result.incomplete_results,
        items=result.items,
    )
    return json_response(
        body.model_dump(mode="json"),
        200,
        {
            "Cache-Control": "private, max-age=60",
            "x-ratelimit-reset": "" if result.rate_limit_reset is None else str(result.rate_limit_reset),
        },
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
