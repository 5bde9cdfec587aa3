"""Configuration management with pydantic-settings for gitlab3.

- Automatic .env file loading with environment variables taking precedence
- GITLAB_ prefix for every setting (GITLAB_URL, GITLAB_PRIVATE_TOKEN, ...)
- SecretStr for the private token
- Frozen config (immutable after load, safe to share between threads)

References:
- Pydantic Settings: https://docs.pydantic.dev/latest/concepts/pydantic_settings/
"""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .__version__ import __version__

logger = logging.getLogger("gitlab3.config")

__all__ = [
    "DEFAULT_URL",
    "GitLabConfig",
    "get_config",
    "reset_config",
]

DEFAULT_URL = "https://gitlab.com/api/v3"


class GitLabConfig(BaseSettings):
    """Configuration for the GitLab API client.

    Loads from (in order of precedence):
    1. Environment variables (highest priority)
    2. .env file in the working directory
    3. Default values (lowest priority)

    Attributes:
        url: Base URL of the API, including the /api/v3 prefix
        private_token: Personal private token sent with every request
        token_location: Send the token as PRIVATE-TOKEN header or private_token query param
        sudo: Optional user (id or username) to impersonate via the SUDO header
        body_encoding: Encoding of POST/PUT bodies (form or json)
        connect_timeout: Connection establishment timeout in seconds
        read_timeout: Read timeout for API responses in seconds
        write_timeout: Write timeout for request bodies in seconds
        pool_timeout: Connection pool acquisition timeout in seconds
        verify_ssl: Verify TLS certificates
        user_agent: User-Agent header value
        default_per_page: per_page applied by paginate() when the caller sets none
    """

    model_config = SettingsConfigDict(
        env_prefix="GITLAB_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,  # Use defaults instead of empty strings
        case_sensitive=False,
        validate_default=True,
        frozen=True,
        extra="ignore",
    )

    url: str = Field(
        default=DEFAULT_URL,
        description="GitLab API base URL including the /api/v3 prefix",
    )

    private_token: SecretStr | None = Field(
        default=None, description="Private token used to authenticate requests"
    )

    token_location: Literal["header", "query"] = Field(
        default="header",
        description="Where the private token travels: PRIVATE-TOKEN header or private_token query parameter",
    )

    sudo: str | None = Field(
        default=None,
        description="User id or username to act as (admin tokens only)",
    )

    body_encoding: Literal["form", "json"] = Field(
        default="form", description="Encoding used for POST/PUT request bodies"
    )

    connect_timeout: float = Field(default=5.0, gt=0, le=120)
    read_timeout: float = Field(default=30.0, gt=0, le=600)
    write_timeout: float = Field(default=5.0, gt=0, le=120)
    pool_timeout: float = Field(default=5.0, gt=0, le=120)

    verify_ssl: bool = Field(default=True, description="Verify TLS certificates")

    user_agent: str = Field(default=f"gitlab3/{__version__}")

    default_per_page: int | None = Field(
        default=None,
        ge=1,
        le=100,
        description="per_page used by paginate() when not given explicitly (GitLab caps at 100)",
    )

    @field_validator("url")
    @classmethod
    def normalize_url(cls, v: str) -> str:
        """Strip trailing slashes and require an http(s) scheme."""
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"url must start with http:// or https://, got {v!r}")
        return v

    @model_validator(mode="after")
    def warn_on_plain_http_token(self) -> "GitLabConfig":
        if self.private_token is not None and self.url.startswith("http://"):
            logger.warning(
                "private_token_over_plain_http",
                extra={"url": self.url},
            )
        return self


# Module-level singleton with lru_cache for thread-safety
@lru_cache(maxsize=1)
def get_config() -> GitLabConfig:
    """Get global configuration singleton.

    First call loads from environment + .env file, subsequent calls return
    the cached instance.

    Raises:
        ValidationError: If configuration values are invalid.

    Example:
        >>> config = get_config()
        >>> config.url
        'https://gitlab.com/api/v3'
        >>> config is get_config()
        True
    """
    return GitLabConfig()


def reset_config() -> None:
    """Reset configuration singleton for testing.

    Warning:
        Only use in test code. Production code should not reset config.
    """
    get_config.cache_clear()
