"""Request mediator for the GitLab v3 REST API.

Turns an endpoint descriptor plus caller arguments into one httpx request
and interprets the response:

- 2xx: body decoded as JSON (or text/bytes when the endpoint says so)
- 404 on GET: None, the "absent" value, so callers can tell a missing
  resource from a bad request
- anything else: ApiError carrying status, verb, path and the raw body

Nothing is retried here. Transport failures (httpx.HTTPError) reach the
caller unchanged; retry policy belongs to the caller or the transport.

Reference: https://github.com/gitlabhq/gitlabhq/blob/7-14-stable/doc/api/README.md
"""

import json
import logging
from collections.abc import Mapping
from datetime import date, datetime
from enum import Enum
from typing import Any

import httpx

from . import metrics
from .__version__ import __version__
from .config import GitLabConfig, get_config
from .encoding import encode_form, encode_query, prune_params
from .endpoints import CONTENT_TYPES, VERBS, Endpoint, get_endpoint, resolve_path
from .errors import ContractError, GitLabError

logger = logging.getLogger("gitlab3.mediator")

__all__ = ["ApiError", "Mediator", "ResponseDecodeError"]


class ApiError(GitLabError):
    """Raised when GitLab answers with a non-2xx status.

    A 404 on a GET is not an error (the mediator returns None instead).

    Attributes:
        status: HTTP status code, preserved exactly
        verb: Request verb
        path: Resolved request path (relative to the API base URL)
        body: Raw response body, for diagnostics
    """

    def __init__(self, status: int, verb: str, path: str, body: str) -> None:
        self.status = status
        self.verb = verb
        self.path = path
        self.body = body
        super().__init__(f"GitLab API error {status} on {verb} {path}: {body[:200]}")


class ResponseDecodeError(GitLabError):
    """Raised when a 2xx response body cannot be decoded as declared."""

    def __init__(self, status: int, verb: str, path: str, body: str) -> None:
        self.status = status
        self.verb = verb
        self.path = path
        self.body = body
        super().__init__(f"Undecodable {status} response for {verb} {path}")


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise ContractError(f"Parameter value of type {type(value).__name__} is not JSON serializable")


class Mediator:
    """Builds, dispatches and decodes GitLab API requests over httpx.

    Holds only immutable configuration (base URL, credential, headers), so
    one instance may be shared between threads as long as the underlying
    httpx.Client is.

    Attributes:
        base_url: API base URL, e.g. https://gitlab.example.com/api/v3
        token_location: "header" (PRIVATE-TOKEN) or "query" (private_token)
        body_encoding: "form" or "json" for POST/PUT bodies

    Example:
        >>> with Mediator("https://gitlab.example.com/api/v3", "s3cr3t") as mediator:
        ...     project = mediator.call("get_project", "group/project")
    """

    # Timeout configuration, used when no explicit timeout is given
    CONNECT_TIMEOUT = 5.0  # seconds
    READ_TIMEOUT = 30.0  # seconds
    WRITE_TIMEOUT = 5.0  # seconds
    POOL_TIMEOUT = 5.0  # seconds

    TOKEN_HEADER = "PRIVATE-TOKEN"
    TOKEN_QUERY_PARAM = "private_token"
    SUDO_HEADER = "SUDO"

    def __init__(
        self,
        base_url: str,
        private_token: str | None = None,
        *,
        token_location: str = "header",
        sudo: str | int | None = None,
        body_encoding: str = "form",
        timeout: httpx.Timeout | float | None = None,
        verify: bool = True,
        user_agent: str = f"gitlab3/{__version__}",
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize the mediator.

        Args:
            base_url: API base URL including the /api/v3 prefix
            private_token: Token attached to every request (optional for
                public endpoints and for the session endpoint)
            token_location: "header" or "query"
            sudo: User to impersonate through the SUDO header
            body_encoding: "form" or "json"
            timeout: httpx timeout, passed through unmodified
            verify: Verify TLS certificates
            user_agent: User-Agent header value
            http_client: Pre-built httpx.Client (not closed by close())

        Raises:
            ContractError: On an unknown token_location or body_encoding.
        """
        if token_location not in ("header", "query"):
            raise ContractError(f"token_location must be header or query, got {token_location!r}")
        if body_encoding not in ("form", "json"):
            raise ContractError(f"body_encoding must be form or json, got {body_encoding!r}")

        self.base_url = base_url.rstrip("/")
        self.token_location = token_location
        self.body_encoding = body_encoding
        self._private_token = private_token

        self._headers: dict[str, str] = {
            "Accept": "application/json",
            "User-Agent": user_agent,
        }
        if private_token and token_location == "header":
            self._headers[self.TOKEN_HEADER] = private_token
        if sudo is not None:
            self._headers[self.SUDO_HEADER] = str(sudo)

        if http_client is not None:
            self._client = http_client
            self._owns_client = False
        else:
            if timeout is None:
                timeout = httpx.Timeout(
                    connect=self.CONNECT_TIMEOUT,
                    read=self.READ_TIMEOUT,
                    write=self.WRITE_TIMEOUT,
                    pool=self.POOL_TIMEOUT,
                )
            self._client = httpx.Client(timeout=timeout, verify=verify)
            self._owns_client = True

    @classmethod
    def from_config(
        cls, config: GitLabConfig | None = None, **kwargs: Any
    ) -> "Mediator":
        """Build a mediator from GitLabConfig (defaults to get_config())."""
        config = config or get_config()
        token = config.private_token.get_secret_value() if config.private_token else None
        kwargs.setdefault(
            "timeout",
            httpx.Timeout(
                connect=config.connect_timeout,
                read=config.read_timeout,
                write=config.write_timeout,
                pool=config.pool_timeout,
            ),
        )
        return cls(
            config.url,
            token,
            token_location=config.token_location,
            sudo=config.sudo,
            body_encoding=config.body_encoding,
            verify=config.verify_ssl,
            user_agent=config.user_agent,
            **kwargs,
        )

    def __enter__(self) -> "Mediator":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the httpx client if this mediator created it."""
        if self._owns_client:
            self._client.close()

    # --- Descriptor dispatch ---

    def call(
        self,
        endpoint: Endpoint | str,
        *path_args: Any,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        """Invoke an endpoint descriptor.

        Positional path_args are bound to the endpoint's placeholders in
        order of appearance.

        Args:
            endpoint: Endpoint descriptor or its name in ENDPOINTS
            *path_args: One value per path placeholder
            params: Request params, for endpoints that accept them

        Returns:
            Decoded response body, or None (absent value / no return value).

        Raises:
            ContractError: On wrong path arity or unexpected params
            ApiError: On a non-2xx response other than 404 on GET
        """
        if isinstance(endpoint, str):
            endpoint = get_endpoint(endpoint)

        names = endpoint.placeholders
        if len(path_args) != len(names):
            raise ContractError(
                f"{endpoint.name} takes {len(names)} path argument(s) "
                f"({', '.join(names) or 'none'}), got {len(path_args)}"
            )
        if params and not endpoint.accepts_params:
            raise ContractError(f"{endpoint.name} does not accept params")

        return self.request(
            endpoint.verb,
            endpoint.path,
            dict(zip(names, path_args)),
            params,
            returns_value=endpoint.returns_value,
            content_type=endpoint.content_type,
        )

    # --- Core HTTP ---

    def request(
        self,
        verb: str,
        path_template: str,
        path_args: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
        *,
        returns_value: bool = True,
        content_type: str = "json",
    ) -> Any:
        """Issue one API request and decode the response.

        Params go into the query string for GET/DELETE and into the body
        for POST/PUT. Every contract check happens before dispatch.

        Args:
            verb: GET, POST, PUT or DELETE
            path_template: Path with `:name` placeholders
            path_args: Placeholder values
            params: Request params (scalars, sequences, nested mappings)
            returns_value: Discard the decoded body when False
            content_type: json, text or binary

        Returns:
            Decoded body; None for an empty body, a 404 on GET, or when
            returns_value is False.

        Raises:
            ContractError: On an unknown verb/content type, unresolvable
                path or malformed params
            ApiError: On a non-2xx response other than 404 on GET
            ResponseDecodeError: When a 2xx JSON body does not parse
            httpx.HTTPError: On transport failures, unchanged
        """
        verb = verb.upper()
        if verb not in VERBS:
            raise ContractError(f"Unsupported verb {verb!r}")
        if content_type not in CONTENT_TYPES:
            raise ContractError(f"Unsupported content type {content_type!r}")

        path = resolve_path(path_template, path_args)
        headers = dict(self._headers)
        query: list[tuple[str, str]] = []
        content: bytes | None = None

        if verb in ("GET", "DELETE"):
            query = encode_query(params)
        elif self.body_encoding == "json":
            content = json.dumps(prune_params(params), default=_json_default).encode("utf-8")
            headers["Content-Type"] = "application/json"
        else:
            content = encode_form(params)
            headers["Content-Type"] = "application/x-www-form-urlencoded"

        if self.token_location == "query" and self._private_token:
            query.append((self.TOKEN_QUERY_PARAM, self._private_token))

        logger.info("gitlab_request", extra={"verb": verb, "path": path})
        logger.debug(
            "gitlab_request_params",
            extra={"verb": verb, "path": path, "params": dict(params or {})},
        )

        with metrics.request_duration_seconds.labels(verb=verb).time():
            response = self._client.request(
                verb,
                f"{self.base_url}{path}",
                params=query or None,
                content=content,
                headers=headers,
            )
        metrics.requests_total.labels(verb=verb, status=str(response.status_code)).inc()

        return self._handle_response(verb, path, response, returns_value, content_type)

    def _handle_response(
        self,
        verb: str,
        path: str,
        response: httpx.Response,
        returns_value: bool,
        content_type: str,
    ) -> Any:
        status = response.status_code

        if 200 <= status < 300:
            if not returns_value:
                return None
            return self._decode(verb, path, response, content_type)

        if status == 404 and verb == "GET":
            logger.info("gitlab_not_found", extra={"verb": verb, "path": path})
            return None

        logger.warning(
            "gitlab_api_error",
            extra={"verb": verb, "path": path, "status_code": status},
        )
        raise ApiError(status, verb, path, response.text)

    def _decode(
        self, verb: str, path: str, response: httpx.Response, content_type: str
    ) -> Any:
        if not response.content:
            return None
        if content_type == "binary":
            return response.content
        if content_type == "text":
            return response.text
        try:
            return response.json()
        except ValueError as e:
            logger.error(
                "gitlab_response_decode_failed",
                extra={"verb": verb, "path": path, "error": str(e)},
            )
            raise ResponseDecodeError(response.status_code, verb, path, response.text) from e
