"""
ci_signing.secrets

Signing-secret provider package.

This package provides a pluggable interface for storing a password-protected
signing key pair in CI platform secret stores, supporting GitLab project
variables and Kubernetes Secrets.
"""

from .provider import (
    SecretProvider,
    VariablePolicy,
    PASSWORD_VARIABLE,
    PRIVATE_KEY_VARIABLE,
    PUBLIC_KEY_VARIABLE,
    write_public_key,
)
from .keys import KeyPair, generate_key_pair, load_private_key, load_public_key
from .passwords import fixed_password, get_pass_from_term, read_password
from .config import GitLabConfig
from .gitlab_provider import GitLabProvider
from .kubernetes_provider import KubernetesProvider
from .factory import get_secret_provider, parse_reference, provider_for_reference
from .exceptions import (
    SecretProviderError,
    CredentialMissingError,
    ClientInitError,
    KeyGenerationError,
    PasswordMismatchError,
    InvalidKeyError,
    RemoteWriteError,
    RemoteReadError,
    LocalPersistError,
    ProviderNotFoundError,
    InvalidReferenceError,
)

__all__ = [
    # Abstract classes
    "SecretProvider",
    "VariablePolicy",
    "PASSWORD_VARIABLE",
    "PRIVATE_KEY_VARIABLE",
    "PUBLIC_KEY_VARIABLE",
    "write_public_key",
    # Key generation
    "KeyPair",
    "generate_key_pair",
    "load_private_key",
    "load_public_key",
    "fixed_password",
    "get_pass_from_term",
    "read_password",
    # GitLab implementation
    "GitLabConfig",
    "GitLabProvider",
    # Kubernetes implementation
    "KubernetesProvider",
    # Factory functions
    "get_secret_provider",
    "parse_reference",
    "provider_for_reference",
    # Exceptions
    "SecretProviderError",
    "CredentialMissingError",
    "ClientInitError",
    "KeyGenerationError",
    "PasswordMismatchError",
    "InvalidKeyError",
    "RemoteWriteError",
    "RemoteReadError",
    "LocalPersistError",
    "ProviderNotFoundError",
    "InvalidReferenceError",
]

__version__ = "0.1.0"
