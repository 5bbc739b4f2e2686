"""
ci_signing.secrets.config

Environment-driven configuration for secret providers.
"""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from .exceptions import CredentialMissingError, ClientInitError

# Environment variables
GITLAB_TOKEN_ENV_VAR = "GITLAB_TOKEN"
GITLAB_HOST_ENV_VAR = "GITLAB_HOST"
GITLAB_TIMEOUT_ENV_VAR = "GITLAB_TIMEOUT"
PROVIDER_ENV_VAR = "CI_SECRET_PROVIDER"

# Defaults
DEFAULT_GITLAB_BASE_URL = "https://gitlab.com/api/v4/"
DEFAULT_GITLAB_TIMEOUT = 30.0
DEFAULT_PUBLIC_KEY_PATH = "cosign.pub"


def get_required_env(key: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Get a required environment variable or raise CredentialMissingError."""
    environ = os.environ if environ is None else environ
    value = environ.get(key)
    if value is None or value == "":
        raise CredentialMissingError(key)
    return value


def get_optional_env(
    key: str,
    default: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """Get an optional environment variable with optional default."""
    environ = os.environ if environ is None else environ
    return environ.get(key, default)


@dataclass(frozen=True)
class GitLabConfig:
    """Credentials and endpoint for the GitLab API, resolved once per call."""

    token: str = field(repr=False)
    host: Optional[str] = None
    timeout: float = DEFAULT_GITLAB_TIMEOUT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GitLabConfig":
        """
        Build the configuration from environment variables.

        Raises:
            CredentialMissingError: If GITLAB_TOKEN is not set
            ClientInitError: If GITLAB_TIMEOUT is not a positive number
        """
        token = get_required_env(GITLAB_TOKEN_ENV_VAR, environ)
        host = get_optional_env(GITLAB_HOST_ENV_VAR, environ=environ) or None

        raw_timeout = get_optional_env(GITLAB_TIMEOUT_ENV_VAR, environ=environ)
        timeout = DEFAULT_GITLAB_TIMEOUT
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError as e:
                raise ClientInitError(
                    f'Invalid {GITLAB_TIMEOUT_ENV_VAR} value "{raw_timeout}"'
                ) from e
            if timeout <= 0:
                raise ClientInitError(f"{GITLAB_TIMEOUT_ENV_VAR} must be positive")

        return cls(token=token, host=host, timeout=timeout)
