"""
Shared fixtures for the secrets unit tests.

FakeGitLab emulates the project variables endpoints of the GitLab v4 API
behind an httpx.MockTransport, so providers run against a real GitLabClient
without network access.
"""

import json
import re
from typing import Dict, List, Optional, Set, Tuple
from urllib.parse import unquote

import httpx
import pytest

from ci_signing.secrets.config import GitLabConfig
from ci_signing.secrets.gitlab_client import GitLabClient

_VARIABLES_PATH = re.compile(r"^/api/v4/projects/([^/]+)/variables(?:/([^/]+))?$")


class FakeGitLab:
    """In-memory GitLab project variable store."""

    def __init__(self):
        self.variables: Dict[str, Dict[str, dict]] = {}
        self.requests: List[httpx.Request] = []
        self.created: List[Tuple[str, dict]] = []
        self.fail_keys: Set[str] = set()
        self.status_override: Optional[int] = None
        self.transport = httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        match = _VARIABLES_PATH.match(request.url.raw_path.decode("ascii"))
        if not match:
            return httpx.Response(404, json={"message": "404 Not Found"})

        project = unquote(match.group(1))
        key = unquote(match.group(2)) if match.group(2) else None
        store = self.variables.setdefault(project, {})

        if self.status_override is not None:
            return httpx.Response(self.status_override, text="moved elsewhere")

        if request.method == "POST" and key is None:
            payload = json.loads(request.content)
            if payload["key"] in self.fail_keys:
                return httpx.Response(500, json={"message": "500 Internal Server Error"})
            if payload["key"] in store:
                return httpx.Response(
                    400,
                    json={"message": {"key": [f"({payload['key']}) has already been taken"]}},
                )
            variable = {
                "key": payload["key"],
                "value": payload["value"],
                "variable_type": payload.get("variable_type", "env_var"),
                "protected": payload.get("protected", False),
                "masked": payload.get("masked", False),
                "environment_scope": payload.get("environment_scope", "*"),
            }
            store[payload["key"]] = variable
            self.created.append((project, payload))
            return httpx.Response(201, json=variable)

        if request.method == "GET" and key is not None:
            if key in self.fail_keys:
                return httpx.Response(500, json={"message": "500 Internal Server Error"})
            if key not in store:
                return httpx.Response(404, json={"message": "404 Variable Not Found"})
            return httpx.Response(200, json=store[key])

        return httpx.Response(405, json={"error": "405 Method Not Allowed"})


@pytest.fixture
def fake_gitlab():
    return FakeGitLab()


@pytest.fixture
def gitlab_env():
    """Environment with a GitLab token and no host override."""
    return {"GITLAB_TOKEN": "glpat-test-token"}


@pytest.fixture
def client_factory(fake_gitlab):
    """Client factory wired to the fake GitLab; records built clients."""
    built = []

    def factory(config: GitLabConfig) -> GitLabClient:
        gitlab_client = GitLabClient.from_config(config, transport=fake_gitlab.transport)
        built.append(gitlab_client)
        return gitlab_client

    factory.built = built
    return factory


@pytest.fixture
def pub_key_path(tmp_path):
    return str(tmp_path / "cosign.pub")
