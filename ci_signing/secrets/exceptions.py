"""
ci_signing.secrets.exceptions

Custom exceptions for the secrets package.
"""

from typing import Optional


class SecretProviderError(Exception):
    """Base exception for secret provider errors."""

    pass


class CredentialMissingError(SecretProviderError):
    """Raised when a required credential environment variable is not set."""

    def __init__(self, variable: str):
        self.variable = variable
        super().__init__(f'could not find "{variable}"')


class ClientInitError(SecretProviderError):
    """Raised when a platform client cannot be constructed."""

    pass


class KeyGenerationError(SecretProviderError):
    """Raised when a signing key pair cannot be generated."""

    pass


class PasswordMismatchError(SecretProviderError):
    """Raised when a password and its confirmation differ."""

    pass


class InvalidKeyError(SecretProviderError):
    """Raised when key material cannot be loaded."""

    pass


class RemoteWriteError(SecretProviderError):
    """Raised when a variable cannot be written to the remote store."""

    def __init__(
        self, variable: str, cause: Optional[object] = None, scope: Optional[str] = None
    ):
        self.variable = variable
        self.cause = cause
        self.scope = scope
        message = f'could not create "{variable}" variable'
        if scope is not None:
            message = f"{message} in {scope}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class RemoteReadError(SecretProviderError):
    """Raised when a variable cannot be read from the remote store."""

    def __init__(
        self, variable: str, cause: Optional[object] = None, scope: Optional[str] = None
    ):
        self.variable = variable
        self.cause = cause
        self.scope = scope
        message = f'could not retrieve "{variable}" variable'
        if scope is not None:
            message = f"{message} from {scope}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class LocalPersistError(SecretProviderError):
    """Raised when the public key cannot be written to local storage."""

    def __init__(self, path: str, cause: Optional[object] = None):
        self.path = path
        self.cause = cause
        super().__init__(f"could not write public key to {path}: {cause}")


class ProviderNotFoundError(SecretProviderError):
    """Raised when no suitable secret provider can be found."""

    pass


class InvalidReferenceError(SecretProviderError):
    """Raised when a key reference or scope cannot be parsed."""

    pass
