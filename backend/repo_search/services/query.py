import re
from typing import List, Optional

MAX_QUERY_LENGTH = 120
MAX_LANGUAGE_LENGTH = 40

_WHITESPACE = re.compile(r"\s+")
# letters, digits, whitespace and -_.:+/ survive; \w covers letters, digits and "_"
_SEARCH_SYNTAX = re.compile(r"[^\w\s\-.:+/]")
_ANGLE_BRACKETS = re.compile(r"[<>]")


def sanitize_query(raw: str) -> str:
    collapsed = _WHITESPACE.sub(" ", raw).strip()
    # trim again so truncation never leaves a trailing space
    return collapsed[:MAX_QUERY_LENGTH].strip()


def strip_search_syntax(value: str) -> str:
    """Drop characters that could smuggle extra qualifiers into the proxy's query."""
    return _SEARCH_SYNTAX.sub("", value).strip()


def clean_language(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = _ANGLE_BRACKETS.sub("", value.strip()).strip()
    return cleaned or None


def compose_qualifiers(include_forks: bool, language: Optional[str] = None) -> List[str]:
    qualifiers = [f"fork:{'true' if include_forks else 'false'}"]
    language = clean_language(language)
    if language:
        qualifiers.append(f"language:{language}")
    return qualifiers


def join_query(query: str, qualifiers: List[str]) -> str:
    return " ".join([query, *qualifiers]).strip()
