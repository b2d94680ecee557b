"""Code search across an organization or a single project."""
import logging
from typing import Optional

from .enrichment import enrich_results_with_content
from .errors import wrap_unexpected
from .schemas import CodeSearchResponse, SearchCodeArgs, SearchCodeFilters

logger = logging.getLogger("ado-core.search")


def merge_filters(project_id: Optional[str], filters: Optional[SearchCodeFilters]) -> dict[str, list[str]]:
    """Combine the implicit Project filter with caller filters.

    Caller values are appended to the implicit project, never replacing it.
    """
    merged: dict[str, list[str]] = {}
    if project_id:
        merged["Project"] = [project_id]

    if filters is not None:
        for key, values in filters.model_dump(by_alias=True, exclude_none=True).items():
            existing = merged.setdefault(key, [])
            existing.extend(value for value in values if value not in existing)
    return merged


def build_search_request(options: SearchCodeArgs) -> dict:
    """Request body for the codesearchresults endpoint. Unset paging and flags are omitted."""
    body = {
        "searchText": options.search_text,
        "$skip": options.skip,
        "$top": options.top,
        "filters": merge_filters(options.project_id, options.filters),
        "includeFacets": True,
        "includeSnippet": options.include_snippet,
    }
    return {k: v for k, v in body.items() if v is not None}


@wrap_unexpected("Failed to search code")
async def search_code(connection, options: SearchCodeArgs) -> CodeSearchResponse:
    """
    Search for code in Azure DevOps repositories.

    With a project the project-scoped endpoint is used, otherwise the
    organization-wide one. File content is fetched only when
    `include_content` is set; the git client is not touched otherwise.

    Args:
        connection: AzureDevOpsConnection
        options: Validated search arguments

    Returns:
        CodeSearchResponse with optional file content on each result
    """
    search_api = await connection.get_search_api()
    payload = await search_api.fetch_code_search_results(
        build_search_request(options), project=options.project_id
    )
    response = CodeSearchResponse.model_validate(payload)
    logger.info(
        f"Code search for '{options.search_text}' returned {len(response.results)} "
        f"of {response.count} results"
    )

    if options.include_content and response.results:
        await enrich_results_with_content(connection, response.results)

    return response
