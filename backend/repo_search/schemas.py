from typing import Annotated, List, Literal, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    StrictBool,
    StrictInt,
    StrictStr,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from .services.query import MAX_LANGUAGE_LENGTH, MAX_QUERY_LENGTH, clean_language

SortOption = Literal["best", "stars", "updated"]
OrderOption = Literal["asc", "desc"]
ForksOption = Literal["include", "exclude"]

RESULTS_PER_PAGE = 10
MAX_PAGE = 100
MAX_PER_PAGE = 50

_http_url = TypeAdapter(HttpUrl)


def _check_url(value: str) -> str:
    # validate the shape but keep the upstream string verbatim
    try:
        _http_url.validate_python(value)
    except ValidationError:
        raise ValueError(f"not a valid URL: {value!r}")
    return value


UrlStr = Annotated[StrictStr, AfterValidator(_check_url)]


class SearchRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    query: str
    page: int = Field(default=1, ge=1, le=MAX_PAGE)
    per_page: int = Field(default=RESULTS_PER_PAGE, ge=1, le=MAX_PER_PAGE)
    sort: SortOption = "best"
    order: OrderOption = "desc"
    include_forks: bool = False
    language: Optional[str] = Field(default=None, max_length=MAX_LANGUAGE_LENGTH)
    targets_proxy: bool = False

    @field_validator("language", mode="before")
    @classmethod
    def _clean_language(cls, value):
        if isinstance(value, str):
            return clean_language(value)
        return value


class Owner(BaseModel):
    login: StrictStr
    avatar_url: UrlStr
    html_url: UrlStr


class Repository(BaseModel):
    id: StrictInt
    name: StrictStr
    full_name: StrictStr
    description: Optional[StrictStr]
    html_url: UrlStr
    language: Optional[StrictStr]
    stargazers_count: StrictInt
    forks_count: StrictInt
    updated_at: StrictStr
    owner: Owner


class UpstreamSearchPayload(BaseModel):
    total_count: StrictInt
    incomplete_results: StrictBool
    items: List[Repository]


class SearchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: List[Repository]
    total_count: int
    incomplete_results: bool
    rate_limit_reset: Optional[int] = None
    languages: List[str] = []


class ProxySearchParams(BaseModel):
    """Query string accepted by the proxy's GET /search."""

    q: str = Field(min_length=1, max_length=MAX_QUERY_LENGTH)
    page: int = Field(default=1, ge=1, le=MAX_PAGE)
    per_page: int = Field(default=RESULTS_PER_PAGE, ge=1, le=MAX_PER_PAGE)
    sort: SortOption = "best"
    order: OrderOption = "desc"
    language: Optional[str] = Field(default=None, max_length=MAX_LANGUAGE_LENGTH)
    forks: ForksOption = "exclude"

    @field_validator("q", mode="before")
    @classmethod
    def _trim_query(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("language", mode="before")
    @classmethod
    def _trim_language(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("language")
    @classmethod
    def _strip_brackets(cls, value):
        return clean_language(value)


class ProxySearchResponse(BaseModel):
    total_count: int
    incomplete_results: bool
    items: List[Repository]


class ErrorBody(BaseModel):
    error: str
    details: Optional[List[str]] = None
    resetAt: Optional[int] = None
