"""
ci_signing.secrets.gitlab_client

Minimal GitLab REST API v4 client for project CI/CD variables.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union
from urllib.parse import quote

import httpx

from .config import DEFAULT_GITLAB_BASE_URL, DEFAULT_GITLAB_TIMEOUT, GitLabConfig

logger = logging.getLogger(__name__)

API_VERSION_PATH = "api/v4/"
ENV_VARIABLE_TYPE = "env_var"
FILE_VARIABLE_TYPE = "file"


class GitLabAPIError(Exception):
    """Raised when a GitLab API request fails or returns an error status."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response: Optional[httpx.Response] = None,
    ):
        self.status_code = status_code
        self.response = response
        super().__init__(message)


@dataclass(frozen=True)
class ProjectVariable:
    """A project-level CI/CD variable as returned by the API."""

    key: str
    value: str
    variable_type: str = ENV_VARIABLE_TYPE
    protected: bool = False
    masked: bool = False
    environment_scope: str = "*"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProjectVariable":
        return cls(
            key=data.get("key", ""),
            value=data.get("value", ""),
            variable_type=data.get("variable_type", ENV_VARIABLE_TYPE),
            protected=bool(data.get("protected", False)),
            masked=bool(data.get("masked", False)),
            environment_scope=data.get("environment_scope", "*"),
        )


@dataclass(frozen=True)
class CreateVariableOptions:
    """Request body for creating a project variable."""

    key: str
    value: str
    variable_type: str = ENV_VARIABLE_TYPE
    protected: bool = False
    masked: bool = False
    environment_scope: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        payload = {
            "key": self.key,
            "value": self.value,
            "variable_type": self.variable_type,
            "protected": self.protected,
            "masked": self.masked,
        }
        # Omitted scope means the platform default
        if self.environment_scope is not None:
            payload["environment_scope"] = self.environment_scope
        return payload


def normalize_base_url(url: str) -> str:
    """
    Normalize a GitLab host or API URL to the v4 API root.

    "https://gitlab.example.com" becomes "https://gitlab.example.com/api/v4/".

    Raises:
        ValueError: If the URL has no http(s) scheme or no host
    """
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as e:
        raise ValueError(f"invalid GitLab base URL {url!r}: {e}") from e

    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ValueError(
            f"invalid GitLab base URL {url!r}: expected http(s)://host[/path]"
        )

    path = parsed.path
    if not path.endswith("/"):
        path += "/"
    if not path.endswith(API_VERSION_PATH):
        path += API_VERSION_PATH
    return f"{parsed.scheme}://{parsed.netloc.decode('ascii')}{path}"


def _encode_path_segment(value: Union[int, str]) -> str:
    return quote(str(value), safe="")


class GitLabClient:
    """Synchronous GitLab client bound to a single base URL."""

    def __init__(
        self,
        token: str,
        base_url: Optional[str] = None,
        timeout: float = DEFAULT_GITLAB_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            token: Personal, project or group access token
            base_url: GitLab host or API URL (defaults to gitlab.com)
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)

        Raises:
            ValueError: If the base URL is malformed
        """
        self.base_url = normalize_base_url(base_url or DEFAULT_GITLAB_BASE_URL)
        self._http = httpx.Client(
            base_url=self.base_url,
            headers={"PRIVATE-TOKEN": token, "Accept": "application/json"},
            timeout=timeout,
            follow_redirects=False,
            transport=transport,
        )

    @classmethod
    def from_config(
        cls, config: GitLabConfig, transport: Optional[httpx.BaseTransport] = None
    ) -> "GitLabClient":
        return cls(
            token=config.token,
            base_url=config.host,
            timeout=config.timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "GitLabClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(
        self, method: str, path: str, json: Optional[Dict[str, Any]] = None
    ) -> httpx.Response:
        try:
            response = self._http.request(method, path, json=json)
        except httpx.HTTPError as e:
            raise GitLabAPIError(f"{method} {self.base_url}{path}: {e}") from e

        logger.debug("%s %s -> %s", method, response.request.url, response.status_code)

        if response.status_code >= 400:
            raise GitLabAPIError(
                f"{method} {response.request.url}: "
                f"{response.status_code} {_error_message(response)}",
                status_code=response.status_code,
                response=response,
            )
        return response

    def create_variable(
        self, project: Union[int, str], options: CreateVariableOptions
    ) -> Tuple[Optional[ProjectVariable], httpx.Response]:
        """Create a new project variable; existing keys are rejected by GitLab."""
        path = f"projects/{_encode_path_segment(project)}/variables"
        response = self._request("POST", path, json=options.to_payload())
        return _parse_variable(response), response

    def get_variable(
        self, project: Union[int, str], key: str
    ) -> Tuple[Optional[ProjectVariable], httpx.Response]:
        """Fetch a single project variable by key."""
        path = (
            f"projects/{_encode_path_segment(project)}"
            f"/variables/{_encode_path_segment(key)}"
        )
        response = self._request("GET", path)
        return _parse_variable(response), response


def _parse_variable(response: httpx.Response) -> Optional[ProjectVariable]:
    # Non-2xx responses that reach here (e.g. redirects) carry no variable
    if not response.is_success:
        return None
    try:
        data = response.json()
    except ValueError as e:
        raise GitLabAPIError(
            f"invalid JSON in response from {response.request.url}: {e}",
            status_code=response.status_code,
            response=response,
        ) from e
    if not isinstance(data, dict):
        raise GitLabAPIError(
            f"unexpected response body from {response.request.url}",
            status_code=response.status_code,
            response=response,
        )
    return ProjectVariable.from_dict(data)


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict):
        for field_name in ("message", "error"):
            if field_name in data:
                return str(data[field_name])
    return response.text
