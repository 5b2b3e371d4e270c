import math
from typing import List

from ..schemas import RESULTS_PER_PAGE

# GitHub's search API never serves more than the first 1000 results
SEARCH_RESULT_CAP = 1000


def cap_total(total_count: int) -> int:
    return min(total_count, SEARCH_RESULT_CAP)


def page_count(total_count: int, per_page: int = RESULTS_PER_PAGE) -> int:
    return max(1, math.ceil(cap_total(total_count) / per_page))


def clamp_page(page: int, total_pages: int) -> int:
    """Pull a page number back into [1, total_pages] after the result set shrinks."""
    return max(1, min(page, max(1, total_pages)))


def page_window(current: int, total: int, size: int = 5) -> List[int]:
    """Page numbers to show around ``current``, at most ``size`` of them."""
    start = max(1, min(current - size // 2, total - size + 1))
    end = min(total, start + size - 1)
    return list(range(start, end + 1))
