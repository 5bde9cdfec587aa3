"""Unit tests for the Paginator.

Tests Paginator with:
- Record mode over short last pages and empty last pages
- Page mode (next_page, pages, all)
- Exhaustion without further backend calls
- Mode mixing guard
- Error propagation and retry from unchanged state
"""

from unittest.mock import Mock

import pytest
from prometheus_client import REGISTRY

from gitlab3.errors import ContractError
from gitlab3.mediator import ApiError
from gitlab3.paginator import Paginator, PaginatorModeError, PaginatorState

# =============================================================================
# Record Mode
# =============================================================================


class TestRecordMode:
    """next(paginator) walks records across pages."""

    def test_pages_2_2_1_yield_five_records_then_stop(self, page_backend):
        """Short third page ends the sequence after five records."""
        backend, calls = page_backend([["a", "b"], ["c", "d"], ["e"]])
        paginator = Paginator(backend, 42, params={"per_page": 2})

        records = [next(paginator) for _ in range(5)]

        assert records == ["a", "b", "c", "d", "e"]
        with pytest.raises(StopIteration):
            next(paginator)
        assert len(calls) == 3

    def test_exhausted_paginator_never_refetches(self, page_backend):
        """Repeated next() after exhaustion keeps stopping without backend calls."""
        backend, calls = page_backend([["a", "b"], ["c", "d"], ["e"]])
        paginator = Paginator(backend, 42, params={"per_page": 2})
        list(paginator)

        for _ in range(3):
            with pytest.raises(StopIteration):
                next(paginator)

        assert len(calls) == 3
        assert paginator.state is PaginatorState.EXHAUSTED

    def test_full_last_page_ends_on_empty_page(self, page_backend):
        """Without a short page the terminating signal is an empty page."""
        backend, calls = page_backend([["a", "b"], ["c", "d"]])
        paginator = Paginator(backend, params={"per_page": 2})

        assert list(paginator) == ["a", "b", "c", "d"]
        assert len(calls) == 3

    def test_server_default_page_size_stops_on_empty_page(self, page_backend):
        """Without per_page only an empty page ends iteration."""
        backend, calls = page_backend([["a", "b", "c"], ["d"]])
        paginator = Paginator(backend)

        assert list(paginator) == ["a", "b", "c", "d"]
        assert len(calls) == 3
        assert all("per_page" not in call for call in calls)

    def test_page_numbers_increment_and_fixed_args_forwarded(self):
        """Each fetch passes the fixed args and the next page number."""
        backend = Mock(side_effect=[[1, 2], [3]])
        paginator = Paginator(backend, 7, "x", params={"per_page": 2, "state": "opened"})

        assert list(paginator) == [1, 2, 3]

        first, second = backend.call_args_list
        assert first.args == (7, "x")
        assert first.kwargs["params"] == {"per_page": 2, "state": "opened", "page": 1}
        assert second.kwargs["params"] == {"per_page": 2, "state": "opened", "page": 2}

    def test_initial_page_taken_from_params(self, page_backend):
        """Iteration starts at the page given in params."""
        backend, calls = page_backend([["a"], ["b"], ["c"]])
        paginator = Paginator(backend, params={"page": 2, "per_page": 1})

        assert next(paginator) == "b"
        assert calls[0]["page"] == 2

    def test_caller_params_not_mutated(self, page_backend):
        """The page number is merged into a copy of params."""
        backend, _ = page_backend([["a"]])
        params = {"per_page": 5}
        list(Paginator(backend, params=params))

        assert params == {"per_page": 5}

    def test_absent_page_treated_as_empty(self):
        """A None page (404 on GET) ends the sequence."""
        backend = Mock(return_value=None)
        paginator = Paginator(backend, 1)

        assert list(paginator) == []
        assert backend.call_count == 1

    def test_state_transitions(self, page_backend):
        """EMPTY -> BUFFERED -> EXHAUSTED."""
        backend, _ = page_backend([["a", "b"], ["c"]])
        paginator = Paginator(backend, params={"per_page": 2})
        assert paginator.state is PaginatorState.EMPTY

        next(paginator)
        assert paginator.state is PaginatorState.BUFFERED

        list(paginator)
        assert paginator.state is PaginatorState.EXHAUSTED


# =============================================================================
# Page Mode
# =============================================================================


class TestPageMode:
    """next_page(), pages() and all()."""

    def test_next_page_then_empty_page(self, page_backend):
        """[[a, b], []] yields one page, then stops after exactly two calls."""
        backend, calls = page_backend([["a", "b"], []])
        paginator = Paginator(backend)

        assert paginator.next_page() == ["a", "b"]
        with pytest.raises(StopIteration):
            paginator.next_page()
        assert len(calls) == 2

        with pytest.raises(StopIteration):
            paginator.next_page()
        assert len(calls) == 2

    def test_short_page_stops_without_another_fetch(self, page_backend):
        """After a short page next_page() stops without calling the backend."""
        backend, calls = page_backend([["a", "b"], ["c"]])
        paginator = Paginator(backend, params={"per_page": 2})

        assert paginator.next_page() == ["a", "b"]
        assert paginator.next_page() == ["c"]
        with pytest.raises(StopIteration):
            paginator.next_page()
        assert len(calls) == 2

    def test_all_concatenates_pages_in_order(self, page_backend):
        """all() equals the concatenation of the pages in fetch order."""
        pages = [["a", "b"], ["c", "d"], ["e"]]
        backend, calls = page_backend(pages)

        records = Paginator(backend, 42, params={"per_page": 2}).all()

        assert records == ["a", "b", "c", "d", "e"]
        assert [call["page"] for call in calls] == [1, 2, 3]

    def test_pages_generator(self, page_backend):
        backend, _ = page_backend([[1, 2], [3, 4], []])
        assert list(Paginator(backend).pages()) == [[1, 2], [3, 4]]

    def test_page_number_advances(self, page_backend):
        backend, _ = page_backend([[1], [2], [3]])
        paginator = Paginator(backend, params={"per_page": 1})

        paginator.next_page()
        paginator.next_page()

        assert paginator.page == 3


# =============================================================================
# Mode Guard
# =============================================================================


class TestModeGuard:
    """Record and page consumption cannot be mixed."""

    def test_next_page_after_next_raises(self, page_backend):
        backend, _ = page_backend([["a", "b"], ["c"]])
        paginator = Paginator(backend, params={"per_page": 2})
        next(paginator)

        with pytest.raises(PaginatorModeError):
            paginator.next_page()

    def test_next_after_all_raises(self, page_backend):
        backend, _ = page_backend([["a"]])
        paginator = Paginator(backend, params={"per_page": 2})
        paginator.all()

        with pytest.raises(PaginatorModeError):
            next(paginator)

    def test_mode_error_is_runtime_error(self):
        assert issubclass(PaginatorModeError, RuntimeError)


# =============================================================================
# Error Propagation
# =============================================================================


class TestErrorPropagation:
    """Backend errors propagate and leave state untouched."""

    def test_api_error_propagates_from_next(self):
        backend = Mock(side_effect=ApiError(500, "GET", "/projects/1/issues", "boom"))
        paginator = Paginator(backend, 1)

        with pytest.raises(ApiError) as exc_info:
            next(paginator)

        assert exc_info.value.status == 500
        assert paginator.page == 1
        assert paginator.state is PaginatorState.EMPTY

    def test_retry_after_failed_fetch_refetches_same_page(self):
        """A failed fetch can be retried by calling again."""
        error = ApiError(502, "GET", "/projects/1/issues", "bad gateway")
        backend = Mock(side_effect=[["a", "b"], error, ["c"]])
        paginator = Paginator(backend, 1, params={"per_page": 2})

        assert next(paginator) == "a"
        assert next(paginator) == "b"
        with pytest.raises(ApiError):
            next(paginator)
        assert next(paginator) == "c"

        pages_requested = [call.kwargs["params"]["page"] for call in backend.call_args_list]
        assert pages_requested == [1, 2, 2]

    def test_error_from_next_page_keeps_page_number(self):
        error = ApiError(403, "GET", "/projects/1/issues", "forbidden")
        backend = Mock(side_effect=[error, ["a"]])
        paginator = Paginator(backend, 1)

        with pytest.raises(ApiError):
            paginator.next_page()
        assert paginator.page == 1
        assert paginator.next_page() == ["a"]


# =============================================================================
# Page Parameters and Metrics
# =============================================================================


class TestPageParameters:
    def test_none_page_starts_at_first_page(self, page_backend):
        backend, calls = page_backend([["a"]])

        paginator = Paginator(backend, params={"page": None})

        assert paginator.page == 1
        assert paginator.all() == ["a"]
        assert calls[0]["page"] == 1

    def test_string_page_accepted(self, page_backend):
        backend, calls = page_backend([["a"], ["b"]])

        assert Paginator(backend, params={"page": "2"}).all() == ["b"]

    @pytest.mark.parametrize("page", ["two", 0, 1.5j])
    def test_invalid_page_rejected(self, page):
        with pytest.raises(ContractError):
            Paginator(Mock(), params={"page": page})

    def test_invalid_per_page_rejected(self):
        with pytest.raises(ContractError):
            Paginator(Mock(), params={"per_page": "many"})

    def test_pages_counted_by_mode(self, page_backend):
        backend, _ = page_backend([["a", "b"], ["c"]])
        labels = {"mode": "pages"}
        before = REGISTRY.get_sample_value("gitlab3_pages_fetched_total", labels) or 0.0

        Paginator(backend, params={"per_page": 2}).all()

        assert REGISTRY.get_sample_value("gitlab3_pages_fetched_total", labels) == before + 2
