"""Unit tests for password callbacks."""

import pytest

from ci_signing.secrets import passwords
from ci_signing.secrets.exceptions import PasswordMismatchError


def _answers(monkeypatch, *values):
    prompts = []
    queue = list(values)

    def fake_getpass(prompt):
        prompts.append(prompt)
        return queue.pop(0)

    monkeypatch.setattr(passwords.getpass, "getpass", fake_getpass)
    return prompts


class TestGetPassFromTerm:
    def test_confirmed_password(self, monkeypatch):
        prompts = _answers(monkeypatch, "pw", "pw")

        assert passwords.get_pass_from_term(True) == b"pw"
        assert prompts == [
            "Enter password for private key: ",
            "Enter password for private key again: ",
        ]

    def test_mismatch_raises(self, monkeypatch):
        _answers(monkeypatch, "pw", "other")

        with pytest.raises(PasswordMismatchError, match="passwords do not match"):
            passwords.get_pass_from_term(True)

    def test_no_confirmation(self, monkeypatch):
        prompts = _answers(monkeypatch, "pw")

        assert passwords.get_pass_from_term(False) == b"pw"
        assert len(prompts) == 1


class TestReadPassword:
    def test_environment_variable_wins(self, monkeypatch):
        prompts = _answers(monkeypatch)

        assert passwords.read_password(True, {"COSIGN_PASSWORD": "from-env"}) == b"from-env"
        assert prompts == []

    def test_empty_environment_variable_is_used(self, monkeypatch):
        """A set but empty COSIGN_PASSWORD means an empty password, not a prompt."""
        prompts = _answers(monkeypatch)

        assert passwords.read_password(True, {"COSIGN_PASSWORD": ""}) == b""
        assert prompts == []

    def test_falls_back_to_prompt(self, monkeypatch):
        _answers(monkeypatch, "typed", "typed")

        assert passwords.read_password(True, {}) == b"typed"


def test_fixed_password_encodes_str():
    pass_func = passwords.fixed_password("pw")
    assert pass_func(True) == b"pw"
    assert pass_func(False) == b"pw"
