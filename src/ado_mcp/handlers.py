"""Tool handlers.

Every handler has the same shape:
- Accept: the AzureDevOpsConnection and the tool's validated argument model
- Return: a JSON-serializable value (dicts, lists or pydantic models)
- Raise: AzureDevOpsError subclasses for classified failures

Handlers only project typed arguments onto the ado_core operations; the
dispatcher owns validation, error rendering and serialization.
"""
import logging
from typing import Any

from ado_core import projects, repositories, search, work_items
from ado_core.connection import AzureDevOpsConnection
from ado_core.projects import resolve_project_id
from ado_core.schemas import (
    CodeSearchResponse,
    CreateWorkItemArgs,
    GetFileContentArgs,
    GetProjectArgs,
    GetRepositoryArgs,
    GetWorkItemArgs,
    ListProjectsArgs,
    ListRepositoriesArgs,
    ListWorkItemsArgs,
    SearchCodeArgs,
    UpdateWorkItemArgs,
)

logger = logging.getLogger("azure-devops-mcp.handlers")


# ============================================================================
# Project Handlers
# ============================================================================

async def handle_list_projects(connection: AzureDevOpsConnection, arguments: ListProjectsArgs) -> list[dict]:
    return await projects.list_projects(connection, top=arguments.top, skip=arguments.skip)


async def handle_get_project(connection: AzureDevOpsConnection, arguments: GetProjectArgs) -> dict:
    return await projects.get_project(
        connection,
        resolve_project_id(connection, arguments.project_id),
        include_capabilities=arguments.include_capabilities,
        include_history=arguments.include_history,
    )


# ============================================================================
# Work Item Handlers
# ============================================================================

async def handle_get_work_item(connection: AzureDevOpsConnection, arguments: GetWorkItemArgs) -> dict:
    return await work_items.get_work_item(connection, arguments.work_item_id, expand=arguments.expand)


async def handle_list_work_items(connection: AzureDevOpsConnection, arguments: ListWorkItemsArgs) -> list[dict]:
    return await work_items.list_work_items(
        connection,
        resolve_project_id(connection, arguments.project_id),
        team_id=arguments.team_id,
        query_id=arguments.query_id,
        wiql=arguments.wiql,
        top=arguments.top,
        skip=arguments.skip,
    )


async def handle_create_work_item(connection: AzureDevOpsConnection, arguments: CreateWorkItemArgs) -> dict:
    """Create a work item; everything except project and type becomes a field."""
    options: dict[str, Any] = arguments.model_dump(
        exclude={"project_id", "work_item_type"}, exclude_none=True
    )
    return await work_items.create_work_item(
        connection,
        resolve_project_id(connection, arguments.project_id),
        arguments.work_item_type,
        options,
    )


async def handle_update_work_item(connection: AzureDevOpsConnection, arguments: UpdateWorkItemArgs) -> dict:
    options: dict[str, Any] = arguments.model_dump(exclude={"work_item_id"}, exclude_none=True)
    return await work_items.update_work_item(connection, arguments.work_item_id, options)


# ============================================================================
# Repository Handlers
# ============================================================================

async def handle_list_repositories(
    connection: AzureDevOpsConnection,
    arguments: ListRepositoriesArgs,
) -> list[dict]:
    return await repositories.list_repositories(
        connection,
        resolve_project_id(connection, arguments.project_id),
        include_links=arguments.include_links,
    )


async def handle_get_repository(connection: AzureDevOpsConnection, arguments: GetRepositoryArgs) -> dict:
    return await repositories.get_repository(
        connection,
        resolve_project_id(connection, arguments.project_id),
        arguments.repository_id,
    )


async def handle_get_file_content(connection: AzureDevOpsConnection, arguments: GetFileContentArgs) -> dict:
    return await repositories.get_file_content(
        connection,
        resolve_project_id(connection, arguments.project_id),
        arguments.repository_id,
        arguments.path,
        version=arguments.version,
    )


# ============================================================================
# Search Handlers
# ============================================================================

async def handle_search_code(connection: AzureDevOpsConnection, arguments: SearchCodeArgs) -> CodeSearchResponse:
    """Search code; the project is optional here and never defaulted (org-wide search)."""
    return await search.search_code(connection, arguments)
