from typing import Any, Dict, Mapping, Optional

from ..schemas import MAX_PAGE
from .query import clean_language

DEFAULT_QUERY = "react"


def parse_page(value: Optional[str]) -> int:
    try:
        page = int(value or "")
    except ValueError:
        return 1
    if page < 1:
        return 1
    return min(page, MAX_PAGE)


def parse_sort(value: Optional[str]) -> str:
    return value if value in ("stars", "updated") else "best"


def parse_order(value: Optional[str]) -> str:
    return "asc" if value == "asc" else "desc"


def parse_forks(value: Optional[str]) -> bool:
    return value == "include"


def parse_search_state(params: Mapping[str, str]) -> Dict[str, Any]:
    """Read search state out of a shareable URL's query string.

    Anything missing or unrecognised falls back to its default, so a hand-edited
    URL still produces a usable request. An absent ``q`` means the default query;
    an empty one stays empty.
    """
    return {
        "query": params["q"] if "q" in params else DEFAULT_QUERY,
        "page": parse_page(params.get("page")),
        "sort": parse_sort(params.get("sort")),
        "order": parse_order(params.get("order")),
        "include_forks": parse_forks(params.get("forks")),
        "language": clean_language(params.get("language")),
    }


def to_query_params(state: Mapping[str, Any]) -> Dict[str, str]:
    """Inverse of ``parse_search_state``; defaults and empty values are left out."""
    out = {"q": state.get("query", "").strip(), "page": str(state.get("page", 1))}
    if state.get("sort", "best") != "best":
        out["sort"] = state["sort"]
    if state.get("order", "desc") != "desc":
        out["order"] = state["order"]
    if state.get("include_forks"):
        out["forks"] = "include"
    if state.get("language"):
        out["language"] = state["language"]
    return out
