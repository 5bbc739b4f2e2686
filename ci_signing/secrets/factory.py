"""
ci_signing.secrets.factory

Factory for creating secret providers.
"""

import os
from typing import Optional, Tuple

from .config import PROVIDER_ENV_VAR
from .exceptions import InvalidReferenceError, ProviderNotFoundError
from .gitlab_provider import GitLabProvider
from .kubernetes_provider import KubernetesProvider
from .provider import SecretProvider

REFERENCE_SEPARATOR = "://"


def get_secret_provider(provider_name: Optional[str] = None) -> SecretProvider:
    """
    Get a secret provider instance using explicit configuration.

    Args:
        provider_name: Explicit provider name ("gitlab", "k8s" or "kubernetes")

    Returns:
        SecretProvider instance

    Raises:
        ProviderNotFoundError: If provider is not specified or invalid
    """
    # Get provider name from parameter or environment variable
    if provider_name is None:
        provider_name = os.environ.get(PROVIDER_ENV_VAR)

    if not provider_name:
        raise ProviderNotFoundError(
            "Secret provider must be explicitly specified. "
            f"Set {PROVIDER_ENV_VAR} environment variable to 'gitlab' or 'k8s'."
        )

    provider_name = provider_name.lower().strip()

    if provider_name == "gitlab":
        return GitLabProvider()

    if provider_name in ("k8s", "kubernetes"):
        return KubernetesProvider()

    raise ProviderNotFoundError(
        f"Invalid secret provider name: '{provider_name}'. "
        "Valid options are: 'gitlab', 'k8s'"
    )


def parse_reference(reference: str) -> Tuple[str, str]:
    """
    Split a "<scheme>://<scope>" key reference.

    Example: "gitlab://group/project" -> ("gitlab", "group/project")

    Raises:
        InvalidReferenceError: If the reference has no scheme or no scope
    """
    scheme, sep, scope = reference.partition(REFERENCE_SEPARATOR)
    if not sep or not scheme or not scope:
        raise InvalidReferenceError(
            f'Invalid key reference "{reference}": expected "<provider>://<scope>"'
        )
    return scheme.lower(), scope


def provider_for_reference(reference: str) -> Tuple[SecretProvider, str]:
    """Resolve a key reference to its provider and the provider-specific scope."""
    scheme, scope = parse_reference(reference)
    return get_secret_provider(scheme), scope
