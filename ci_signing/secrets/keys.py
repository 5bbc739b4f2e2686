"""
ci_signing.secrets.keys

Password-protected signing key pair generation.
"""

from dataclasses import dataclass, field
from typing import Callable, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from .exceptions import InvalidKeyError, KeyGenerationError

# Called with confirm=True when the password should be asked for twice.
PassFunc = Callable[[bool], Union[bytes, str]]


@dataclass(frozen=True)
class KeyPair:
    """A freshly generated signing key pair, held in memory only."""

    private_bytes: bytes = field(repr=False)
    public_bytes: bytes
    password: bytes = field(repr=False)


def generate_key_pair(pass_func: PassFunc) -> KeyPair:
    """
    Generate an ECDSA P-256 key pair with an encrypted private key.

    Args:
        pass_func: Callback returning the password used to encrypt the key

    Returns:
        KeyPair with PEM-encoded private and public key material

    Raises:
        KeyGenerationError: If the callback or the key generation fails
    """
    try:
        password = pass_func(True)
    except Exception as e:
        raise KeyGenerationError(f"could not read password: {e}") from e

    if isinstance(password, str):
        password = password.encode("utf-8")
    if not isinstance(password, bytes):
        raise KeyGenerationError(
            f"password callback returned {type(password).__name__}, expected bytes"
        )

    # PEM encryption needs a non-empty passphrase; never fall back to a plain key
    if not password:
        raise KeyGenerationError(
            "an empty password cannot protect the private key; supply a non-empty password"
        )

    try:
        private_key = ec.generate_private_key(ec.SECP256R1())
        private_bytes = private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.BestAvailableEncryption(password),
        )
        public_bytes = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyGenerationError(f"generating key pair: {e}") from e

    return KeyPair(
        private_bytes=private_bytes, public_bytes=public_bytes, password=password
    )


def load_private_key(private_bytes: bytes, password: bytes):
    """Decrypt and load a PEM private key produced by generate_key_pair."""
    try:
        return serialization.load_pem_private_key(
            private_bytes, password=password or None
        )
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise InvalidKeyError(f"could not load private key: {e}") from e


def load_public_key(public_bytes: bytes):
    """Load a PEM public key."""
    try:
        return serialization.load_pem_public_key(public_bytes)
    except (ValueError, UnsupportedAlgorithm) as e:
        raise InvalidKeyError(f"could not load public key: {e}") from e
