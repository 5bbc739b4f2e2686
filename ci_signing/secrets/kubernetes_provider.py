"""
ci_signing.secrets.kubernetes_provider

Kubernetes Secret provider implementation.
"""

import base64
import binascii
import logging
import os
from typing import Dict, Mapping, Optional, Tuple

from kubernetes import client, config
from kubernetes.config import ConfigException

from .config import DEFAULT_PUBLIC_KEY_PATH
from .exceptions import (
    ClientInitError,
    InvalidReferenceError,
    RemoteReadError,
    RemoteWriteError,
)
from .keys import KeyPair, PassFunc, generate_key_pair
from .provider import (
    PASSWORD_VARIABLE,
    PRIVATE_KEY_VARIABLE,
    PUBLIC_KEY_VARIABLE,
    SecretProvider,
    write_public_key,
)

logger = logging.getLogger(__name__)

REFERENCE_SCHEME = "k8s"

# Secret data keys, by well-known variable name
PRIVATE_KEY_DATA_KEY = "cosign.key"
PUBLIC_KEY_DATA_KEY = "cosign.pub"
PASSWORD_DATA_KEY = "cosign.password"

DATA_KEYS = {
    PASSWORD_VARIABLE: PASSWORD_DATA_KEY,
    PRIVATE_KEY_VARIABLE: PRIVATE_KEY_DATA_KEY,
    PUBLIC_KEY_VARIABLE: PUBLIC_KEY_DATA_KEY,
}


def is_running_in_cluster(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Check if running inside a Kubernetes cluster."""
    environ = os.environ if environ is None else environ
    return bool(environ.get("KUBERNETES_SERVICE_HOST"))


def parse_scope(scope: str) -> Tuple[str, str]:
    """
    Split a "namespace/name" scope.

    Raises:
        InvalidReferenceError: If the scope is not exactly two non-empty parts
    """
    parts = scope.split("/")
    if len(parts) != 2 or not all(parts):
        raise InvalidReferenceError(
            f'Kubernetes scope must be "<namespace>/<name>", got "{scope}"'
        )
    return parts[0], parts[1]


def _encode(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


def _secret_data(keys: KeyPair) -> Dict[str, str]:
    return {
        PRIVATE_KEY_DATA_KEY: _encode(keys.private_bytes),
        PUBLIC_KEY_DATA_KEY: _encode(keys.public_bytes),
        PASSWORD_DATA_KEY: _encode(keys.password),
    }


class KubernetesProvider(SecretProvider):
    """Stores signing keys in a single Kubernetes Secret."""

    def __init__(
        self,
        core_v1_api: Optional[client.CoreV1Api] = None,
        public_key_path: str = DEFAULT_PUBLIC_KEY_PATH,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize Kubernetes provider.

        Args:
            core_v1_api: Preconfigured API client; loaded from cluster or kubeconfig if omitted
            public_key_path: Local path the public key is copied to
            environ: Environment mapping used instead of os.environ
        """
        self._core_v1_api = core_v1_api
        self.public_key_path = public_key_path
        self._environ = environ

    def get_name(self) -> str:
        """Return provider name."""
        return REFERENCE_SCHEME

    def _get_client(self) -> client.CoreV1Api:
        if self._core_v1_api is not None:
            return self._core_v1_api

        try:
            if is_running_in_cluster(self._environ):
                config.load_incluster_config()
            else:
                config.load_kube_config()
        except (ConfigException, OSError) as e:
            raise ClientInitError(f"could not load Kubernetes configuration: {e}") from e

        return client.CoreV1Api()

    def put_secret(self, scope: str, pass_func: PassFunc) -> None:
        """
        Create a Secret holding the key pair and its password.

        An existing Secret with the same name is never overwritten.
        """
        namespace, name = parse_scope(scope)
        v1_client = self._get_client()
        keys = generate_key_pair(pass_func)

        body = client.V1Secret(
            api_version="v1",
            kind="Secret",
            metadata=client.V1ObjectMeta(name=name, namespace=namespace),
            type="Opaque",
            data=_secret_data(keys),
        )

        try:
            v1_client.create_namespaced_secret(namespace=namespace, body=body)
        except client.exceptions.ApiException as e:
            if e.status == 409:
                logger.warning(
                    "Secret %s already exists in namespace %s; delete it first to "
                    "generate a new key pair",
                    name,
                    namespace,
                )
            raise RemoteWriteError(name, e, scope=namespace) from e
        logger.info("Created secret %s in namespace %s", name, namespace)

        write_public_key(keys.public_bytes, self.public_key_path)

    def get_secret(self, scope: str, variable_name: str) -> str:
        """Return a value from the Secret, by variable name or data key."""
        namespace, name = parse_scope(scope)
        v1_client = self._get_client()
        data_key = DATA_KEYS.get(variable_name, variable_name)

        try:
            secret = v1_client.read_namespaced_secret(name=name, namespace=namespace)
        except client.exceptions.ApiException as e:
            raise RemoteReadError(variable_name, e, scope=scope) from e

        data = secret.data or {}
        if data_key not in data:
            raise RemoteReadError(
                variable_name,
                f"secret {name} in namespace {namespace} missing key '{data_key}'",
                scope=scope,
            )

        try:
            return base64.b64decode(data[data_key], validate=True).decode("utf-8")
        except (binascii.Error, ValueError) as e:
            raise RemoteReadError(variable_name, e, scope=scope) from e
