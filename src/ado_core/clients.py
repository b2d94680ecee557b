"""Thin wrappers over the Azure DevOps REST API.

Each wrapper maps one remote endpoint to one coroutine and returns the
decoded response. Failure classification happens in
AzureDevOpsConnection.request, so nothing here catches exceptions.
"""
from typing import Any, Optional
from urllib.parse import quote

JSON_PATCH_HEADERS = {"Content-Type": "application/json-patch+json"}
SEARCH_HOST = "https://almsearch.dev.azure.com"


def _segment(value: str) -> str:
    return quote(value, safe="")


class _Api:
    def __init__(self, connection):
        self.connection = connection


class CoreApi(_Api):
    """Projects."""

    async def get_projects(
        self,
        top: Optional[int] = None,
        skip: Optional[int] = None,
        state_filter: Optional[str] = None,
    ) -> list[dict]:
        response = await self.connection.request(
            "GET", "_apis/projects",
            params={"$top": top, "$skip": skip, "stateFilter": state_filter},
        )
        return response.json().get("value", [])

    async def get_project(
        self,
        project_id: str,
        include_capabilities: Optional[bool] = None,
        include_history: Optional[bool] = None,
    ) -> dict:
        params = {}
        if include_capabilities is not None:
            params["includeCapabilities"] = str(include_capabilities).lower()
        if include_history is not None:
            params["includeHistory"] = str(include_history).lower()
        response = await self.connection.request("GET", f"_apis/projects/{_segment(project_id)}", params=params)
        return response.json()


class WorkItemTrackingApi(_Api):
    """Work items and WIQL queries."""

    async def get_work_item(self, work_item_id: int, expand: Optional[str] = None) -> dict:
        response = await self.connection.request(
            "GET", f"_apis/wit/workitems/{work_item_id}", params={"$expand": expand}
        )
        return response.json()

    async def get_work_items(self, ids: list[int], expand: Optional[str] = None) -> list[dict]:
        if not ids:
            return []
        response = await self.connection.request(
            "GET", "_apis/wit/workitems",
            params={"ids": ",".join(str(i) for i in ids), "$expand": expand},
        )
        return response.json().get("value", [])

    async def query_by_wiql(
        self,
        project: str,
        wiql: str,
        team: Optional[str] = None,
        top: Optional[int] = None,
    ) -> dict:
        scope = _segment(project) if not team else f"{_segment(project)}/{_segment(team)}"
        response = await self.connection.request(
            "POST", f"{scope}/_apis/wit/wiql", params={"$top": top}, json={"query": wiql}
        )
        return response.json()

    async def query_by_id(self, project: str, query_id: str, team: Optional[str] = None) -> dict:
        scope = _segment(project) if not team else f"{_segment(project)}/{_segment(team)}"
        response = await self.connection.request("GET", f"{scope}/_apis/wit/wiql/{_segment(query_id)}")
        return response.json()

    async def create_work_item(self, project: str, work_item_type: str, document: list[dict]) -> dict:
        response = await self.connection.request(
            "POST", f"{_segment(project)}/_apis/wit/workitems/${_segment(work_item_type)}",
            json=document, headers=JSON_PATCH_HEADERS,
        )
        return response.json()

    async def update_work_item(self, work_item_id: int, document: list[dict]) -> dict:
        response = await self.connection.request(
            "PATCH", f"_apis/wit/workitems/{work_item_id}", json=document, headers=JSON_PATCH_HEADERS
        )
        return response.json()


class GitApi(_Api):
    """Repositories and file content."""

    async def get_repositories(self, project: str, include_links: Optional[bool] = None) -> list[dict]:
        params = {} if include_links is None else {"includeLinks": str(include_links).lower()}
        response = await self.connection.request(
            "GET", f"{_segment(project)}/_apis/git/repositories", params=params
        )
        return response.json().get("value", [])

    async def get_repository(self, project: str, repository_id: str) -> dict:
        response = await self.connection.request(
            "GET", f"{_segment(project)}/_apis/git/repositories/{_segment(repository_id)}"
        )
        return response.json()

    async def get_item_content(
        self,
        repository_id: str,
        path: str,
        project: str,
        version: Optional[str] = None,
    ) -> bytes:
        """Raw bytes of one file. `version` is a commit id when given."""
        params: dict[str, Any] = {"path": path, "download": "false"}
        if version:
            params["versionDescriptor.version"] = version
            params["versionDescriptor.versionType"] = "commit"
        response = await self.connection.request(
            "GET", f"{_segment(project)}/_apis/git/repositories/{_segment(repository_id)}/items",
            params=params, headers={"Accept": "application/octet-stream"},
        )
        return response.content


class SearchApi(_Api):
    """Code search, served from the almsearch host rather than the organization URL."""

    def search_url(self, project: Optional[str] = None) -> str:
        organization = _segment(self.connection.organization)
        if project:
            return f"{SEARCH_HOST}/{organization}/{_segment(project)}/_apis/search/codesearchresults"
        return f"{SEARCH_HOST}/{organization}/_apis/search/codesearchresults"

    async def fetch_code_search_results(self, body: dict, project: Optional[str] = None) -> dict:
        response = await self.connection.request(
            "POST", self.search_url(project), json=body, headers={"Content-Type": "application/json"}
        )
        return response.json()
