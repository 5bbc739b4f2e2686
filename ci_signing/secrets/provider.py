"""
ci_signing.secrets.provider

Abstract base class for signing-secret providers and the secrets they manage.
"""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from .config import DEFAULT_PUBLIC_KEY_PATH
from .exceptions import LocalPersistError
from .keys import PassFunc

logger = logging.getLogger(__name__)

PASSWORD_VARIABLE = "COSIGN_PASSWORD"
PRIVATE_KEY_VARIABLE = "COSIGN_PRIVATE_KEY"
PUBLIC_KEY_VARIABLE = "COSIGN_PUBLIC_KEY"


@dataclass(frozen=True)
class VariablePolicy:
    """Sensitivity settings applied when a variable is created."""

    name: str
    protected: bool = False
    masked: bool = False
    # None leaves the platform default in place
    environment_scope: Optional[str] = None


# Masked variables must be single-line with a restricted charset on GitLab,
# which PEM key material does not satisfy.
PASSWORD_POLICY = VariablePolicy(PASSWORD_VARIABLE, environment_scope="*")
PRIVATE_KEY_POLICY = VariablePolicy(PRIVATE_KEY_VARIABLE)
PUBLIC_KEY_POLICY = VariablePolicy(PUBLIC_KEY_VARIABLE)

WELL_KNOWN_VARIABLES = (PASSWORD_VARIABLE, PRIVATE_KEY_VARIABLE, PUBLIC_KEY_VARIABLE)


class SecretProvider(ABC):
    """Provisions signing keys into a platform's secret store."""

    @abstractmethod
    def get_name(self) -> str:
        """
        Returns the provider name.

        Returns:
            str: Provider name (e.g., 'gitlab', 'k8s')
        """
        pass

    @abstractmethod
    def put_secret(self, scope: str, pass_func: PassFunc) -> None:
        """
        Generates a key pair and stores it under the given scope.

        Args:
            scope: Platform-defined target (project path, namespace/name, ...)
            pass_func: Callback supplying the private key password

        Raises:
            CredentialMissingError: If platform credentials are not configured
            ClientInitError: If the platform client cannot be constructed
            KeyGenerationError: If the key pair cannot be generated
            RemoteWriteError: If a secret cannot be written remotely
            LocalPersistError: If the public key cannot be written locally
        """
        pass

    @abstractmethod
    def get_secret(self, scope: str, variable_name: str) -> str:
        """
        Fetches a single stored value.

        Args:
            scope: Platform-defined target
            variable_name: One of the well-known variable names

        Returns:
            str: The stored value, uninterpreted

        Raises:
            CredentialMissingError: If platform credentials are not configured
            ClientInitError: If the platform client cannot be constructed
            RemoteReadError: If the value cannot be read
        """
        pass


def write_public_key(public_bytes: bytes, path: str = DEFAULT_PUBLIC_KEY_PATH) -> str:
    """
    Write the public key to a local file readable by the owner only.

    Raises:
        LocalPersistError: If the file cannot be written
    """
    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "wb") as f:
            # The creation mode does not apply to a file that already exists
            os.fchmod(f.fileno(), 0o600)
            f.write(public_bytes)
    except OSError as e:
        raise LocalPersistError(path, e) from e

    logger.info("Public key also written to %s", path)
    return path
