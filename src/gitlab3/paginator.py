"""Lazy traversal of page/per_page collection endpoints.

GitLab v3 list endpoints take `page` (1-based) and `per_page` query params
and answer with a plain JSON array. A page shorter than `per_page`, or an
empty page, is the last one.

A Paginator is single-pass and owns its cursor and buffer. It is either
consumed record by record (`next(paginator)`, `for record in paginator`) or
page by page (`next_page()`, `pages()`, `all()`), never both.
"""

import logging
from collections.abc import Callable, Iterator, Mapping
from enum import Enum
from typing import Any

from . import metrics
from .errors import ContractError, GitLabError

logger = logging.getLogger("gitlab3.paginator")

__all__ = ["Paginator", "PaginatorModeError", "PaginatorState"]


class PaginatorModeError(GitLabError, RuntimeError):
    """Raised when record and page consumption are mixed on one Paginator."""

    pass


class PaginatorState(str, Enum):
    """Paginator lifecycle.

    EMPTY: nothing fetched yet
    BUFFERED: a page is held and records (or further pages) may remain
    EXHAUSTED: no records left and no further fetch will happen
    """

    EMPTY = "empty"
    BUFFERED = "buffered"
    EXHAUSTED = "exhausted"


def _page_number(name: str, value: Any) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ContractError(f"{name} must be an integer, got {value!r}") from None
    if number < 1:
        raise ContractError(f"{name} must be at least 1, got {number}")
    return number


class Paginator:
    """Single-pass iterator over a paginated endpoint.

    Wraps a callable `method(*fixed_args, params=...)` returning one page as
    a list, typically a bound GitLabClient method such as
    `client.list_issues`.

    Attributes:
        page: Number of the next page to fetch (starts at params["page"] or 1)
        per_page: Requested page size, or None to use the server default
        state: Current PaginatorState

    Example:
        >>> issues = Paginator(client.list_issues, 42, params={"per_page": 50})
        >>> for issue in issues:
        ...     print(issue["title"])
    """

    def __init__(
        self,
        method: Callable[..., Any],
        *fixed_args: Any,
        params: Mapping[str, Any] | None = None,
    ) -> None:
        self._method = method
        self._args = fixed_args
        self._params = dict(params or {})

        page = self._params.pop("page", None)
        self.page = _page_number("page", page) if page is not None else 1
        per_page = self._params.get("per_page")
        self.per_page = _page_number("per_page", per_page) if per_page is not None else None

        self.state = PaginatorState.EMPTY
        self._buffer: list[Any] = []
        self._cursor = 0
        self._last_page_seen = False
        self._mode: str | None = None

    def __repr__(self) -> str:
        name = getattr(self._method, "__name__", repr(self._method))
        return f"<Paginator {name}{self._args!r} page={self.page} state={self.state.value}>"

    # --- Record mode ---

    def __iter__(self) -> Iterator[Any]:
        return self

    def __next__(self) -> Any:
        """Return the next record, fetching the next page when needed.

        Raises:
            StopIteration: Once exhausted, on this and every later call.
            PaginatorModeError: If page mode was used on this instance.
        """
        self._claim("records")
        while True:
            if self._cursor < len(self._buffer):
                record = self._buffer[self._cursor]
                self._cursor += 1
                return record

            if self._last_page_seen:
                self.state = PaginatorState.EXHAUSTED
                raise StopIteration

            self._buffer = self._fetch()
            self._cursor = 0

    # --- Page mode ---

    def next_page(self) -> list[Any]:
        """Fetch and return the next whole page.

        Raises:
            StopIteration: Once exhausted (an empty page, or after a short page).
            PaginatorModeError: If record mode was used on this instance.
        """
        self._claim("pages")
        if self._last_page_seen:
            self.state = PaginatorState.EXHAUSTED
            raise StopIteration

        page = self._fetch()
        if not page:
            raise StopIteration
        return page

    def pages(self) -> Iterator[list[Any]]:
        """Yield the remaining pages one at a time."""
        while True:
            try:
                yield self.next_page()
            except StopIteration:
                return

    def all(self) -> list[Any]:
        """Drain every remaining page and return all records in fetch order.

        Walks the collection to its end with no upper bound, so on a large
        collection this can take a long time and hold every record in memory.
        """
        records: list[Any] = []
        for page in self.pages():
            records.extend(page)
        return records

    # --- Internals ---

    def _claim(self, mode: str) -> None:
        if self._mode is None:
            self._mode = mode
        elif self._mode != mode:
            raise PaginatorModeError(
                f"Paginator already consumed by {self._mode}; cannot switch to {mode}"
            )

    def _fetch(self) -> list[Any]:
        """Fetch self.page. State is only touched once the call succeeded."""
        params = dict(self._params)
        params["page"] = self.page

        logger.debug(
            "gitlab_page_fetch",
            extra={"page": self.page, "per_page": self.per_page},
        )
        result = self._method(*self._args, params=params)

        # None is the 404-on-GET absent value
        page = list(result) if result is not None else []
        self.page += 1
        metrics.pages_fetched_total.labels(mode=self._mode or "records").inc()

        if not page or (self.per_page is not None and len(page) < self.per_page):
            self._last_page_seen = True
        self.state = PaginatorState.BUFFERED if page else PaginatorState.EXHAUSTED
        return page
