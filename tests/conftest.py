"""Shared fixtures: settings, mock HTTP transports and connections."""
import json
from typing import Callable

import httpx
import pytest

from ado_core.config import AuthMethod, Settings
from ado_core.connection import AzureDevOpsConnection

ORG_URL = "https://dev.azure.com/testorg"


def make_settings(**overrides) -> Settings:
    values = {
        "organization_url": ORG_URL,
        "auth_method": AuthMethod.PAT,
        "personal_access_token": "test-pat",
    }
    values.update(overrides)
    return Settings(**values)


def make_connection(handler: Callable[[httpx.Request], httpx.Response], **overrides) -> AzureDevOpsConnection:
    """Connection whose HTTP traffic goes to `handler` instead of the network."""
    settings = make_settings(**overrides)
    client = httpx.AsyncClient(base_url=ORG_URL + "/", transport=httpx.MockTransport(handler))
    return AzureDevOpsConnection(settings, http_client=client)


def json_response(status_code: int, body) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(body).encode(), headers={"Content-Type": "application/json"})


def search_hit(index: int, **overrides) -> dict:
    """One code search result the way the search API returns it."""
    hit = {
        "fileName": f"example{index}.ts",
        "path": f"/src/example{index}.ts",
        "matches": {"content": [{"charOffset": 17, "length": 7}]},
        "collection": {"name": "DefaultCollection"},
        "project": {"name": "TestProject", "id": "project-id"},
        "repository": {"name": "TestRepo", "id": "repo-id", "type": "git"},
        "versions": [{"branchName": "main", "changeId": f"commit-{index}"}],
        "contentId": f"content-hash-{index}",
    }
    hit.update(overrides)
    return hit


@pytest.fixture
def settings() -> Settings:
    return make_settings()
