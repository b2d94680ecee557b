"""Project operations."""
import logging
from typing import Optional

from .errors import AzureDevOpsValidationError, wrap_unexpected

logger = logging.getLogger("ado-core.projects")


def resolve_project_id(connection, project_id: Optional[str]) -> str:
    """Return the explicit project or fall back to the configured default.

    Raises:
        AzureDevOpsValidationError: If neither is available
    """
    resolved = project_id or connection.settings.default_project
    if not resolved:
        raise AzureDevOpsValidationError(
            "projectId is required (no default project is configured)"
        )
    return resolved


@wrap_unexpected("Failed to list projects")
async def list_projects(
    connection,
    top: Optional[int] = None,
    skip: Optional[int] = None,
    state_filter: Optional[str] = None,
) -> list[dict]:
    core_api = await connection.get_core_api()
    projects = await core_api.get_projects(top=top, skip=skip, state_filter=state_filter)
    logger.info(f"Listed {len(projects)} projects")
    return projects


@wrap_unexpected("Failed to get project")
async def get_project(
    connection,
    project_id: str,
    include_capabilities: Optional[bool] = None,
    include_history: Optional[bool] = None,
) -> dict:
    core_api = await connection.get_core_api()
    project = await core_api.get_project(
        project_id, include_capabilities=include_capabilities, include_history=include_history
    )
    logger.info(f"Retrieved project {project_id}")
    return project
