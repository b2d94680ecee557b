"""Work item operations.

Creation and updates are expressed as JSON-patch documents against field
reference names (System.Title, System.AssignedTo, ...).
"""
import logging
from typing import Any, Optional

from .errors import AzureDevOpsValidationError, wrap_unexpected

logger = logging.getLogger("ado-core.work_items")

# Used when list_work_items gets neither a saved query nor WIQL text
DEFAULT_WIQL = "SELECT [System.Id] FROM WorkItems WHERE [System.TeamProject] = @project ORDER BY [System.Id] DESC"

# The work item batch endpoint accepts at most 200 ids per call
MAX_BATCH_SIZE = 200

# Option name -> field reference name
FIELD_REFERENCES: dict[str, str] = {
    "title": "System.Title",
    "description": "System.Description",
    "assigned_to": "System.AssignedTo",
    "area_path": "System.AreaPath",
    "iteration_path": "System.IterationPath",
    "priority": "Microsoft.VSTS.Common.Priority",
    "state": "System.State",
}


def build_patch_document(options: dict[str, Any]) -> list[dict]:
    """Translate field options into JSON-patch `add` operations.

    None values are skipped. `additional_fields` entries are keyed by their
    reference name already and are appended last.
    """
    document = []
    for option, reference in FIELD_REFERENCES.items():
        value = options.get(option)
        if value is not None:
            document.append({"op": "add", "path": f"/fields/{reference}", "value": value})

    for reference, value in (options.get("additional_fields") or {}).items():
        document.append({"op": "add", "path": f"/fields/{reference}", "value": value})
    return document


def _extract_ids(query_result: dict) -> list[int]:
    """Work item ids from a flat or a link query result, first occurrence wins."""
    if query_result.get("workItems"):
        return [item["id"] for item in query_result["workItems"]]

    ids = []
    for relation in query_result.get("workItemRelations") or []:
        target = relation.get("target")
        if target and target["id"] not in ids:
            ids.append(target["id"])
    return ids


@wrap_unexpected("Failed to get work item")
async def get_work_item(connection, work_item_id: int, expand: Optional[str] = None) -> dict:
    wit_api = await connection.get_work_item_tracking_api()
    work_item = await wit_api.get_work_item(work_item_id, expand=expand)
    logger.info(f"Retrieved work item {work_item_id}")
    return work_item


@wrap_unexpected("Failed to list work items")
async def list_work_items(
    connection,
    project_id: str,
    team_id: Optional[str] = None,
    query_id: Optional[str] = None,
    wiql: Optional[str] = None,
    top: Optional[int] = None,
    skip: Optional[int] = None,
) -> list[dict]:
    """Run a saved query or WIQL text and return the matching work items.

    `skip` and `top` page through the id list returned by the query; details
    are then fetched in batches.
    """
    wit_api = await connection.get_work_item_tracking_api()
    if query_id:
        query_result = await wit_api.query_by_id(project_id, query_id, team=team_id)
    else:
        query_result = await wit_api.query_by_wiql(project_id, wiql or DEFAULT_WIQL, team=team_id)

    ids = _extract_ids(query_result)
    start = skip or 0
    ids = ids[start:start + top] if top is not None else ids[start:]

    work_items = []
    for offset in range(0, len(ids), MAX_BATCH_SIZE):
        work_items.extend(await wit_api.get_work_items(ids[offset:offset + MAX_BATCH_SIZE]))

    logger.info(f"Listed {len(work_items)} work items in project {project_id}")
    return work_items


@wrap_unexpected("Failed to create work item")
async def create_work_item(
    connection,
    project_id: str,
    work_item_type: str,
    options: dict[str, Any],
) -> dict:
    """Create a work item. `options` must contain a title."""
    if not options.get("title"):
        raise AzureDevOpsValidationError("Title is required")

    wit_api = await connection.get_work_item_tracking_api()
    work_item = await wit_api.create_work_item(project_id, work_item_type, build_patch_document(options))
    logger.info(f"Created {work_item_type} {work_item.get('id')} in project {project_id}")
    return work_item


@wrap_unexpected("Failed to update work item")
async def update_work_item(connection, work_item_id: int, options: dict[str, Any]) -> dict:
    document = build_patch_document(options)
    if not document:
        raise AzureDevOpsValidationError("At least one field must be provided to update")

    wit_api = await connection.get_work_item_tracking_api()
    work_item = await wit_api.update_work_item(work_item_id, document)
    logger.info(f"Updated work item {work_item_id} ({len(document)} fields)")
    return work_item
