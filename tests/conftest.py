"""Shared pytest fixtures for gitlab3 tests.

Fixture Organization:
    - Environment isolation: GITLAB_* variables and the config singleton
    - Transport fixtures: httpx.MockTransport-backed mediators (no network)
    - Backend stubs: page-serving callables for paginator tests

References:
    - pytest fixtures docs: https://docs.pytest.org/en/stable/how-to/fixtures.html
    - httpx mock transport: https://www.python-httpx.org/advanced/transports/#mock-transports
"""

import logging
import os
from collections.abc import Callable, Generator

import httpx
import pytest

from gitlab3.config import reset_config
from gitlab3.mediator import Mediator

BASE_URL = "https://gitlab.example.com/api/v3"
TOKEN = "test-token-123"


# =============================================================================
# Environment Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Drop GITLAB_* variables and any .env file from the test's view."""
    for key in list(os.environ):
        if key.upper().startswith("GITLAB_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_config()
    yield
    reset_config()


@pytest.fixture(autouse=True)
def restore_gitlab3_logger():
    """Undo configure_logging() side effects so caplog keeps working."""
    logger = logging.getLogger("gitlab3")
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    logger.handlers = handlers
    logger.setLevel(level)
    logger.propagate = propagate


# =============================================================================
# Transport Fixtures
# =============================================================================


@pytest.fixture
def make_mediator() -> Generator[Callable[..., Mediator], None, None]:
    """Factory for Mediators whose requests are answered by a handler function.

    Example:
        def test_x(make_mediator):
            mediator = make_mediator(lambda request: httpx.Response(200, json=[]))
    """
    clients: list[httpx.Client] = []

    def _make(handler: Callable[[httpx.Request], httpx.Response], **kwargs) -> Mediator:
        client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(client)
        kwargs.setdefault("private_token", TOKEN)
        return Mediator(BASE_URL, http_client=client, **kwargs)

    yield _make

    for client in clients:
        client.close()


@pytest.fixture
def captured() -> list[httpx.Request]:
    """List that request handlers append to."""
    return []


# =============================================================================
# Backend Stubs
# =============================================================================


def make_page_backend(pages: list[list]):
    """Build a list-endpoint stand-in serving `pages` by the page param.

    Returns:
        (callable, calls) where calls records the params of each invocation.
    """
    calls: list[dict] = []

    def list_records(*args, params=None):
        calls.append(dict(params or {}))
        index = int(params["page"]) - 1
        return list(pages[index]) if index < len(pages) else []

    return list_records, calls


@pytest.fixture
def page_backend():
    """Factory fixture around make_page_backend."""
    return make_page_backend
