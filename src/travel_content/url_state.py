"""Query State & URL Sync

Keeps the blog listing's search state in an explicit object and mirrors
it into the page address so results are shareable and survive a reload.

Two named effects:
  - hydrate: read the query string once, at initial load
  - write-through: serialize the state after every change

Parameters are ``q``, ``city``, ``category`` and ``page`` (1-based). Each
is omitted from the URL while it holds its default value.
"""

import logging
from typing import Callable, List, Optional, Sequence
from urllib.parse import parse_qs, urlencode

from .models import Article, ResultPage, SearchQuery
from .search import derive_results

logger = logging.getLogger(__name__)

FILTER_FIELDS = ("free_text", "city", "category")


def parse_query_string(query_string: str) -> SearchQuery:
    """Build a SearchQuery from ``?q=...&city=...``; bad pages fall back to 1."""
    params = parse_qs(query_string.lstrip("?"))

    def first(name: str) -> str:
        values = params.get(name)
        return values[0] if values else ""

    try:
        page = int(first("page") or "1")
    except ValueError:
        page = 1

    return SearchQuery(
        free_text=first("q"),
        city=first("city"),
        category=first("category"),
        page=max(page, 1),
    )


def serialize_query(query: SearchQuery) -> str:
    params = []
    if query.free_text:
        params.append(("q", query.free_text))
    if query.city:
        params.append(("city", query.city))
    if query.category:
        params.append(("category", query.category))
    if query.page > 1:
        params.append(("page", str(query.page)))
    return urlencode(params)


def query_url(query: SearchQuery, base: str = "/") -> str:
    qs = serialize_query(query)
    return f"{base}?{qs}" if qs else base


def update_query(query: SearchQuery, **changes) -> SearchQuery:
    """
    Return a copy of ``query`` with ``changes`` applied.

    Changing any filter (free text, city, category) starts over at page 1,
    since the previous page position belongs to a different result set.
    """
    updated = query.model_copy(update=changes)
    if any(getattr(updated, f) != getattr(query, f) for f in FILTER_FIELDS):
        updated = updated.model_copy(update={"page": 1})
    return updated


class SearchSession:
    """Blog listing state over a fixed article collection."""

    def __init__(
        self,
        collection: Sequence[Article],
        page_size: int,
        replace_url: Optional[Callable[[str], None]] = None,
        base: str = "/",
    ):
        self.collection: List[Article] = list(collection)
        self.page_size = page_size
        self.base = base
        self.query = SearchQuery()
        self._replace_url = replace_url
        self._hydrated = False

    def hydrate(self, location_search: str) -> SearchQuery:
        """Load state from the address once; later calls are ignored."""
        if self._hydrated:
            logger.debug("Search state already hydrated; ignoring %r", location_search)
            return self.query
        self._hydrated = True
        self.query = parse_query_string(location_search)
        return self.query

    def _write_through(self) -> None:
        if self._replace_url is not None:
            self._replace_url(query_url(self.query, self.base))

    def _apply(self, **changes) -> SearchQuery:
        self.query = update_query(self.query, **changes)
        self._write_through()
        return self.query

    def set_free_text(self, text: str) -> SearchQuery:
        return self._apply(free_text=text)

    def set_city(self, city: str) -> SearchQuery:
        return self._apply(city=city)

    def set_category(self, category: str) -> SearchQuery:
        return self._apply(category=category)

    def set_page(self, page: int) -> SearchQuery:
        return self._apply(page=page)

    def clear_filters(self) -> SearchQuery:
        self.query = SearchQuery()
        self._write_through()
        return self.query

    @property
    def has_active_filters(self) -> bool:
        return bool(self.query.free_text or self.query.city or self.query.category)

    def results(self) -> ResultPage:
        """Derive the current page, clamping the stored page into range."""
        page = derive_results(self.collection, self.query, self.page_size)
        if page.page != self.query.page:
            self.query = self.query.model_copy(update={"page": page.page})
            self._write_through()
        return page
