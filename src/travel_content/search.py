"""Article Search & Filter Engine

In-memory fuzzy search over the article collection combined with exact
facet filters, a recency sort and pagination. The blog listing derives
every page through ``derive_results``; the global search overlay uses
``global_search`` with its own field weights and tie-break chain.

Fuzzy scoring:
  - Each weighted field is compared with rapidfuzz's partial ratio, so
    typos and partial words still match; a field shorter than the query
    is compared whole with the plain ratio
  - A field score is ``1 - similarity / 100`` (0 = perfect)
  - A field matches when its score is at most THRESHOLD
  - The item score is the product of ``field_score ** weight`` over the
    matching fields, with weights normalized to sum to 1
"""

import math
from typing import Dict, List, Optional, Sequence

from rapidfuzz import fuzz, utils

from .models import Article, ResultPage, SearchMatch, SearchQuery

THRESHOLD = 0.35
MIN_MATCH_CHAR_LENGTH = 2
EPSILON = 0.001

LISTING_WEIGHTS: Dict[str, float] = {
    "title": 0.4,
    "city": 0.25,
    "description": 0.2,
    "tags": 0.1,
    "category": 0.05,
}

GLOBAL_WEIGHTS: Dict[str, float] = {
    "title": 0.4,
    "city": 0.3,
    "description": 0.15,
    "keywords": 0.1,
    "tags": 0.04,
    "category": 0.01,
}

GLOBAL_RAW_LIMIT = 30
GLOBAL_RESULT_LIMIT = 10


def _field_values(article: Article, field: str) -> List[str]:
    value = getattr(article, field, None)
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


def _field_score(query: str, values: Sequence[str]) -> Optional[float]:
    """Best (lowest) score of ``query`` against any value, or None if none match."""
    best: Optional[float] = None
    for value in values:
        processed = utils.default_process(value)
        if len(processed) < MIN_MATCH_CHAR_LENGTH:
            continue
        if len(query) <= len(processed):
            similarity = fuzz.partial_ratio(query, processed)
        else:
            # a field shorter than the query must resemble all of it
            similarity = fuzz.ratio(query, processed)
        score = 1.0 - similarity / 100.0
        if score <= THRESHOLD and (best is None or score < best):
            best = score
    return best


def fuzzy_match(
    collection: Sequence[Article],
    text: str,
    weights: Dict[str, float],
) -> List[SearchMatch]:
    """Score every article against ``text`` and return matches, best first."""
    query = utils.default_process(text)
    if len(query) < MIN_MATCH_CHAR_LENGTH:
        return []

    total_weight = sum(weights.values())
    matches: List[SearchMatch] = []
    for article in collection:
        combined = 1.0
        matched = False
        for field, weight in weights.items():
            score = _field_score(query, _field_values(article, field))
            if score is None:
                continue
            matched = True
            combined *= max(score, EPSILON) ** (weight / total_weight)
        if matched:
            matches.append(SearchMatch(item=article, score=combined))

    # sorted() is stable, so equal scores keep collection order
    return sorted(matches, key=lambda m: m.score)


def search(collection: Sequence[Article], free_text: str) -> List[Article]:
    """
    Free-text search over the listing fields.

    Empty or whitespace-only text returns the whole collection in its
    original order; otherwise matches are returned best first.
    """
    if not free_text or not free_text.strip():
        return list(collection)
    return [m.item for m in fuzzy_match(collection, free_text, LISTING_WEIGHTS)]


def apply_facets(
    articles: Sequence[Article],
    city: str = "",
    category: str = "",
) -> List[Article]:
    """Exact-value AND filter; an empty value leaves that facet unconstrained."""
    result = list(articles)
    if city:
        result = [a for a in result if a.city == city]
    if category:
        result = [a for a in result if a.category == category]
    return result


def sort_by_recency(articles: Sequence[Article]) -> List[Article]:
    return sorted(articles, key=lambda a: a.pub_date, reverse=True)


def paginate(articles: Sequence[Article], page_size: int, page: int) -> ResultPage:
    """
    Slice one page out of ``articles``.

    ``total_pages`` is ``ceil(len / page_size)`` with a floor of 1, and the
    requested page is clamped into ``[1, total_pages]`` instead of raising.
    """
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")

    total_items = len(articles)
    total_pages = max(math.ceil(total_items / page_size), 1)
    safe_page = min(max(page, 1), total_pages)
    start = (safe_page - 1) * page_size

    return ResultPage(
        items=list(articles[start:start + page_size]),
        page=safe_page,
        total_pages=total_pages,
        total_items=total_items,
    )


def derive_results(
    collection: Sequence[Article],
    query: SearchQuery,
    page_size: int,
) -> ResultPage:
    """Pure derivation of the listing page for ``query``."""
    results = search(collection, query.free_text)
    results = apply_facets(results, query.city, query.category)
    results = sort_by_recency(results)
    return paginate(results, page_size, query.page)


def global_search(
    collection: Sequence[Article],
    text: str,
    limit: int = GLOBAL_RESULT_LIMIT,
) -> List[Article]:
    """
    Quick-search overlay ranking.

    Takes the top raw fuzzy matches and re-ranks them: articles whose city
    starts with the query first, then featured articles, then by score.
    """
    if not text or not text.strip():
        return []

    raw = fuzzy_match(collection, text, GLOBAL_WEIGHTS)[:GLOBAL_RAW_LIMIT]
    query_lower = text.strip().lower()

    def rank(match: SearchMatch):
        city_first = 0 if match.item.city.lower().startswith(query_lower) else 1
        featured_first = 0 if match.item.featured else 1
        return (city_first, featured_first, match.score)

    return [m.item for m in sorted(raw, key=rank)[:limit]]


def available_cities(collection: Sequence[Article]) -> List[str]:
    """Sorted distinct city values for the city facet."""
    return sorted({a.city for a in collection})


def page_window(page: int, total_pages: int) -> List[Optional[int]]:
    """
    Page numbers for the pagination strip; None marks an ellipsis.

    Up to seven pages are listed in full. Beyond that the strip shows the
    first page, the current page and its neighbours, and the last page.
    """
    if total_pages <= 7:
        return list(range(1, total_pages + 1))

    pages: List[Optional[int]] = [1]
    if page > 3:
        pages.append(None)
    for p in range(max(2, page - 1), min(total_pages - 1, page + 1) + 1):
        pages.append(p)
    if page < total_pages - 2:
        pages.append(None)
    pages.append(total_pages)
    return pages
