"""Exception hierarchy shared by the gitlab3 modules.

Request-level failures (ApiError, ResponseDecodeError) live in mediator.py,
paginator misuse in paginator.py. This module only holds the base class and
the contract error raised before any network call is made.
"""


class GitLabError(Exception):
    """Base class for all errors raised by gitlab3."""

    pass


class ContractError(GitLabError, ValueError):
    """Raised when a call is malformed on the caller's side.

    Missing or unknown path arguments, unsupported parameter values and
    params passed to an endpoint that takes none all end up here. Raised
    locally, before the request is dispatched.
    """

    pass
