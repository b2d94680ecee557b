"""Tests for work item, project and repository operations over a mocked transport."""
import asyncio
import json

import httpx
import pytest

from ado_core import projects, repositories, work_items
from ado_core.errors import AzureDevOpsResourceNotFoundError, AzureDevOpsValidationError
from ado_core.projects import resolve_project_id
from ado_core.work_items import DEFAULT_WIQL, build_patch_document
from ado_mcp.dispatcher import ToolFailure, ToolInvocationRequest, ToolSuccess, invoke

from conftest import json_response, make_connection


class Recorder:
    """MockTransport handler that answers by (method, path suffix)."""

    def __init__(self, routes):
        self.routes = routes
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        for (method, suffix), body in self.routes.items():
            if request.method == method and request.url.path.endswith(suffix):
                return json_response(200, body)
        return json_response(404, {"message": f"No route for {request.method} {request.url.path}"})


class TestPatchDocument:
    """Options become JSON-patch add operations."""

    def test_known_and_additional_fields(self):
        document = build_patch_document({
            "title": "Test Work Item",
            "description": None,
            "priority": 2,
            "additional_fields": {"System.Tags": "api; backend"},
        })
        assert document == [
            {"op": "add", "path": "/fields/System.Title", "value": "Test Work Item"},
            {"op": "add", "path": "/fields/Microsoft.VSTS.Common.Priority", "value": 2},
            {"op": "add", "path": "/fields/System.Tags", "value": "api; backend"},
        ]

    def test_empty(self):
        assert build_patch_document({}) == []


class TestWorkItemOperations:

    def test_create_work_item(self):
        recorder = Recorder({("POST", "/_apis/wit/workitems/$Task"): {"id": 123}})
        connection = make_connection(recorder)

        result = asyncio.run(work_items.create_work_item(
            connection, "testproject", "Task", {"title": "Test Work Item", "description": "This is a test"}
        ))

        assert result == {"id": 123}
        request = recorder.requests[0]
        assert request.url.path == "/testorg/testproject/_apis/wit/workitems/$Task"
        assert request.headers["Content-Type"] == "application/json-patch+json"
        assert json.loads(request.content) == [
            {"op": "add", "path": "/fields/System.Title", "value": "Test Work Item"},
            {"op": "add", "path": "/fields/System.Description", "value": "This is a test"},
        ]

    def test_create_requires_title(self):
        connection = make_connection(Recorder({}))
        with pytest.raises(AzureDevOpsValidationError) as exc_info:
            asyncio.run(work_items.create_work_item(connection, "testproject", "Task", {}))
        assert exc_info.value.message == "Title is required"

    def test_update_requires_a_field(self):
        connection = make_connection(Recorder({}))
        with pytest.raises(AzureDevOpsValidationError):
            asyncio.run(work_items.update_work_item(connection, 5, {}))

    def test_update_work_item(self):
        recorder = Recorder({("PATCH", "/_apis/wit/workitems/5"): {"id": 5, "rev": 2}})
        connection = make_connection(recorder)

        result = asyncio.run(work_items.update_work_item(connection, 5, {"state": "Resolved"}))

        assert result == {"id": 5, "rev": 2}
        assert json.loads(recorder.requests[0].content) == [
            {"op": "add", "path": "/fields/System.State", "value": "Resolved"}
        ]

    def test_list_work_items_pages_the_id_list(self):
        recorder = Recorder({
            ("POST", "/_apis/wit/wiql"): {"workItems": [{"id": i} for i in range(1, 11)]},
            ("GET", "/_apis/wit/workitems"): {"value": [{"id": 3}, {"id": 4}]},
        })
        connection = make_connection(recorder)

        result = asyncio.run(work_items.list_work_items(connection, "project1", skip=2, top=2))

        assert result == [{"id": 3}, {"id": 4}]
        wiql_request, batch_request = recorder.requests
        assert json.loads(wiql_request.content) == {"query": DEFAULT_WIQL}
        assert batch_request.url.params["ids"] == "3,4"

    def test_list_work_items_by_saved_query_and_team(self):
        recorder = Recorder({
            ("GET", "/_apis/wit/wiql/q-1"): {"workItemRelations": [
                {"source": None, "target": {"id": 7}},
                {"source": {"id": 7}, "target": {"id": 8}},
                {"source": {"id": 7}, "target": {"id": 8}},
            ]},
            ("GET", "/_apis/wit/workitems"): {"value": [{"id": 7}, {"id": 8}]},
        })
        connection = make_connection(recorder)

        result = asyncio.run(work_items.list_work_items(connection, "project1", team_id="Team A", query_id="q-1"))

        assert result == [{"id": 7}, {"id": 8}]
        assert recorder.requests[0].url.path == "/testorg/project1/Team A/_apis/wit/wiql/q-1"
        assert recorder.requests[1].url.params["ids"] == "7,8"

    def test_list_work_items_with_no_matches(self):
        recorder = Recorder({("POST", "/_apis/wit/wiql"): {"workItems": []}})
        connection = make_connection(recorder)
        assert asyncio.run(work_items.list_work_items(connection, "project1", wiql="SELECT 1")) == []
        assert len(recorder.requests) == 1


class TestProjectsAndRepositories:

    def test_resolve_project_id(self):
        connection = make_connection(Recorder({}), default_project="Fallback")
        assert resolve_project_id(connection, "Explicit") == "Explicit"
        assert resolve_project_id(connection, None) == "Fallback"

    def test_resolve_project_id_without_default(self):
        connection = make_connection(Recorder({}))
        with pytest.raises(AzureDevOpsValidationError):
            resolve_project_id(connection, None)

    def test_list_projects(self):
        recorder = Recorder({("GET", "/_apis/projects"): {"count": 1, "value": [{"id": "p1", "name": "Project 1"}]}})
        connection = make_connection(recorder)
        assert asyncio.run(projects.list_projects(connection, top=10)) == [{"id": "p1", "name": "Project 1"}]
        assert recorder.requests[0].url.params["$top"] == "10"

    def test_get_project(self):
        recorder = Recorder({("GET", "/_apis/projects/project1"): {"id": "p1", "name": "project1"}})
        connection = make_connection(recorder)
        result = asyncio.run(projects.get_project(connection, "project1", include_capabilities=True))
        assert result["name"] == "project1"
        assert recorder.requests[0].url.params["includeCapabilities"] == "true"

    def test_list_repositories(self):
        recorder = Recorder({("GET", "/_apis/git/repositories"): {"value": [{"id": "repo1"}]}})
        connection = make_connection(recorder)
        assert asyncio.run(repositories.list_repositories(connection, "project1")) == [{"id": "repo1"}]

    def test_get_file_content(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, content="# Title\n".encode())

        connection = make_connection(handler)
        result = asyncio.run(repositories.get_file_content(connection, "project1", "repo1", "/README.md", "abc123"))

        assert result == {"path": "/README.md", "version": "abc123", "content": "# Title\n"}
        request = seen[0]
        assert request.url.path == "/testorg/project1/_apis/git/repositories/repo1/items"
        assert request.url.params["path"] == "/README.md"
        assert request.url.params["versionDescriptor.version"] == "abc123"
        assert request.headers["Accept"] == "application/octet-stream"

    def test_get_repository_empty_body_is_not_found(self):
        connection = make_connection(lambda request: json_response(200, {}))
        with pytest.raises(AzureDevOpsResourceNotFoundError) as exc_info:
            asyncio.run(repositories.get_repository(connection, "project1", "missing"))
        assert exc_info.value.message == "Repository 'missing' not found in project 'project1'"


class TestHandlersThroughDispatcher:
    """Typed arguments are projected onto operations."""

    def test_create_work_item_tool(self):
        recorder = Recorder({("POST", "/_apis/wit/workitems/$Bug"): {"id": 9, "fields": {"System.Title": "Crash"}}})
        connection = make_connection(recorder)

        response = asyncio.run(invoke(connection, ToolInvocationRequest("create_work_item", {
            "projectId": "testproject",
            "workItemType": "Bug",
            "title": "Crash",
            "assignedTo": "dev@example.com",
        })))

        assert isinstance(response, ToolSuccess)
        assert json.loads(response.text) == {"id": 9, "fields": {"System.Title": "Crash"}}
        assert json.loads(recorder.requests[0].content) == [
            {"op": "add", "path": "/fields/System.Title", "value": "Crash"},
            {"op": "add", "path": "/fields/System.AssignedTo", "value": "dev@example.com"},
        ]

    def test_default_project_used_when_omitted(self):
        recorder = Recorder({("GET", "/Fallback/_apis/git/repositories"): {"value": []}})
        connection = make_connection(recorder, default_project="Fallback")

        response = asyncio.run(invoke(connection, ToolInvocationRequest("list_repositories", {})))

        assert isinstance(response, ToolSuccess)
        assert response.payload == []

    def test_missing_project_without_default(self):
        connection = make_connection(Recorder({}))
        response = asyncio.run(invoke(connection, ToolInvocationRequest("list_repositories", {})))
        assert isinstance(response, ToolFailure)
        assert response.message.startswith("Validation Error: projectId is required")

    def test_search_code_tool_omits_unset_content(self):
        hit = {
            "fileName": "a.py", "path": "/a.py",
            "repository": {"id": "r", "name": "R", "type": "git"},
            "project": {"id": "p", "name": "P"},
            "versions": [{"branchName": "main", "changeId": "c1"}],
            "matches": {},
        }
        connection = make_connection(lambda request: json_response(200, {"count": 1, "results": [hit]}))

        response = asyncio.run(invoke(connection, ToolInvocationRequest("search_code", {"searchText": "a"})))

        assert isinstance(response, ToolSuccess)
        payload = json.loads(response.text)
        assert payload["count"] == 1
        assert payload["results"][0] == hit
