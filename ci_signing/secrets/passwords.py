"""
ci_signing.secrets.passwords

Password callbacks for key generation.
"""

import getpass
import os
from typing import Callable, Optional

from .exceptions import PasswordMismatchError

PASSWORD_ENV_VAR = "COSIGN_PASSWORD"


def get_pass_from_term(confirm: bool) -> bytes:
    """
    Prompt for the private key password on the terminal.

    Args:
        confirm: Ask for the password a second time and compare

    Raises:
        PasswordMismatchError: If the confirmation does not match
    """
    password = getpass.getpass("Enter password for private key: ")
    if not confirm:
        return password.encode("utf-8")

    confirmation = getpass.getpass("Enter password for private key again: ")
    if password != confirmation:
        raise PasswordMismatchError("passwords do not match")
    return password.encode("utf-8")


def read_password(confirm: bool, environ: Optional[dict] = None) -> bytes:
    """Use COSIGN_PASSWORD when set (even if empty), otherwise prompt."""
    environ = os.environ if environ is None else environ
    if PASSWORD_ENV_VAR in environ:
        return environ[PASSWORD_ENV_VAR].encode("utf-8")
    return get_pass_from_term(confirm)


def fixed_password(value) -> Callable[[bool], bytes]:
    """Return a callback that always yields the given password."""
    if isinstance(value, str):
        value = value.encode("utf-8")

    def pass_func(confirm: bool) -> bytes:
        return value

    return pass_func
