"""
ci_signing.secrets.gitlab_provider

GitLab project CI/CD variable provider implementation.
"""

import logging
from typing import Callable, Mapping, Optional, Type, Union

import httpx

from .config import (
    DEFAULT_PUBLIC_KEY_PATH,
    GITLAB_HOST_ENV_VAR,
    GitLabConfig,
)
from .exceptions import (
    ClientInitError,
    RemoteReadError,
    RemoteWriteError,
)
from .gitlab_client import (
    ENV_VARIABLE_TYPE,
    CreateVariableOptions,
    GitLabAPIError,
    GitLabClient,
)
from .keys import PassFunc, generate_key_pair
from .provider import (
    PASSWORD_POLICY,
    PRIVATE_KEY_POLICY,
    PUBLIC_KEY_POLICY,
    SecretProvider,
    VariablePolicy,
    write_public_key,
)

logger = logging.getLogger(__name__)

REFERENCE_SCHEME = "gitlab"

_WRITTEN_MESSAGES = {
    PASSWORD_POLICY.name: "Password",
    PRIVATE_KEY_POLICY.name: "Private key",
    PUBLIC_KEY_POLICY.name: "Public key",
}

ClientFactory = Callable[[GitLabConfig], GitLabClient]


def _check_status(
    response: httpx.Response,
    error_cls: Union[Type[RemoteWriteError], Type[RemoteReadError]],
    variable: str,
    scope: str,
) -> None:
    # Anything outside the 2xx class is an error even without a transport failure
    if response.status_code < 200 or response.status_code >= 300:
        raise error_cls(variable, response.text, scope=scope)


class GitLabProvider(SecretProvider):
    """Stores signing keys as GitLab project CI/CD variables."""

    def __init__(
        self,
        config: Optional[GitLabConfig] = None,
        client_factory: Optional[ClientFactory] = None,
        public_key_path: str = DEFAULT_PUBLIC_KEY_PATH,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize GitLab provider.

        Args:
            config: Fixed configuration; resolved from the environment per call if omitted
            client_factory: Builds a client from a config (defaults to GitLabClient.from_config)
            public_key_path: Local path the public key is copied to
            environ: Environment mapping used instead of os.environ
        """
        self._config = config
        self._client_factory = client_factory or GitLabClient.from_config
        self.public_key_path = public_key_path
        self._environ = environ

    def get_name(self) -> str:
        """Return provider name."""
        return REFERENCE_SCHEME

    def _resolve_config(self) -> GitLabConfig:
        if self._config is not None:
            return self._config
        return GitLabConfig.from_env(self._environ)

    def _build_client(self, config: GitLabConfig) -> GitLabClient:
        try:
            return self._client_factory(config)
        except (ValueError, TypeError, httpx.InvalidURL) as e:
            raise ClientInitError(f"could not create GitLab client: {e}") from e

    def _create_variable(
        self, client: GitLabClient, scope: str, policy: VariablePolicy, value: bytes
    ) -> None:
        try:
            options = CreateVariableOptions(
                key=policy.name,
                value=value.decode("utf-8"),
                variable_type=ENV_VARIABLE_TYPE,
                protected=policy.protected,
                masked=policy.masked,
                environment_scope=policy.environment_scope,
            )
        except UnicodeDecodeError as e:
            raise RemoteWriteError(policy.name, e, scope=scope) from e

        try:
            _, response = client.create_variable(scope, options)
        except GitLabAPIError as e:
            logger.warning(
                'If you are using a self-hosted gitlab please set the "%s" '
                "your server name.",
                GITLAB_HOST_ENV_VAR,
            )
            raise RemoteWriteError(policy.name, e, scope=scope) from e

        _check_status(response, RemoteWriteError, policy.name, scope)
        logger.info(
            '%s written to "%s" variable', _WRITTEN_MESSAGES[policy.name], policy.name
        )

    def put_secret(self, scope: str, pass_func: PassFunc) -> None:
        """
        Create the password, private key and public key variables in a project.

        The three writes are not transactional: a failure leaves any earlier
        variables in place and aborts the rest.
        """
        config = self._resolve_config()
        client = self._build_client(config)

        with client:
            keys = generate_key_pair(pass_func)
            logger.debug("Provisioning signing keys into GitLab project %s", scope)

            self._create_variable(client, scope, PASSWORD_POLICY, keys.password)
            self._create_variable(client, scope, PRIVATE_KEY_POLICY, keys.private_bytes)
            self._create_variable(client, scope, PUBLIC_KEY_POLICY, keys.public_bytes)

        write_public_key(keys.public_bytes, self.public_key_path)

    def get_secret(self, scope: str, variable_name: str) -> str:
        """Return the raw value of a project variable."""
        config = self._resolve_config()
        client = self._build_client(config)

        with client:
            try:
                variable, response = client.get_variable(scope, variable_name)
            except GitLabAPIError as e:
                raise RemoteReadError(variable_name, e, scope=scope) from e

            _check_status(response, RemoteReadError, variable_name, scope)

        return variable.value
