"""Git repository operations."""
import logging
from typing import Optional

from .enrichment import normalize_content
from .errors import AzureDevOpsResourceNotFoundError, wrap_unexpected

logger = logging.getLogger("ado-core.repositories")


@wrap_unexpected("Failed to list repositories")
async def list_repositories(connection, project_id: str, include_links: Optional[bool] = None) -> list[dict]:
    git_api = await connection.get_git_api()
    repositories = await git_api.get_repositories(project_id, include_links=include_links)
    logger.info(f"Listed {len(repositories)} repositories in project {project_id}")
    return repositories


@wrap_unexpected("Failed to get repository")
async def get_repository(connection, project_id: str, repository_id: str) -> dict:
    git_api = await connection.get_git_api()
    repository = await git_api.get_repository(project_id, repository_id)
    if not repository:
        raise AzureDevOpsResourceNotFoundError(
            f"Repository '{repository_id}' not found in project '{project_id}'"
        )
    logger.info(f"Retrieved repository {repository_id} in project {project_id}")
    return repository


@wrap_unexpected("Failed to get file content")
async def get_file_content(
    connection,
    project_id: str,
    repository_id: str,
    path: str,
    version: Optional[str] = None,
) -> dict:
    """Return {path, version, content} with the body normalized to text."""
    git_api = await connection.get_git_api()
    raw = await git_api.get_item_content(repository_id, path, project_id, version)
    content = normalize_content(raw)
    logger.info(f"Retrieved {path} from repository {repository_id}")
    return {"path": path, "version": version, "content": content or ""}
