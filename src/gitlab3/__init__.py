"""gitlab3 - synchronous client for the GitLab v3 REST API.

- Configuration management with environment overrides (GITLAB_*)
- Request mediator: path templating, parameter encoding, status handling
- Paginator over page/per_page collection endpoints
- GitLabClient with one method per API endpoint

Python Version: 3.10+ required
"""

from .__version__ import __version__
from .client import GitLabClient
from .config import GitLabConfig, get_config, reset_config
from .endpoints import ENDPOINTS, Endpoint, get_endpoint, resolve_path
from .errors import ContractError, GitLabError
from .logging_config import StructuredFormatter, configure_logging
from .mediator import ApiError, Mediator, ResponseDecodeError
from .paginator import Paginator, PaginatorModeError, PaginatorState

__all__ = [
    "ENDPOINTS",
    "ApiError",
    "ContractError",
    "Endpoint",
    "GitLabClient",
    "GitLabConfig",
    "GitLabError",
    "Mediator",
    "Paginator",
    "PaginatorModeError",
    "PaginatorState",
    "ResponseDecodeError",
    "StructuredFormatter",
    "__version__",
    "configure_logging",
    "get_config",
    "get_endpoint",
    "reset_config",
    "resolve_path",
]
