"""Attach file content to code search results.

Fetches run concurrently (bounded by a semaphore) and each one fails on its
own: a result whose fetch fails keeps `content` unset and the rest of the
batch carries on. Not even a failure to acquire the git client fails the
search; the results are simply returned without bodies.
"""
import asyncio
import json
import logging
from typing import Any, Optional, Sequence

from .schemas import CodeSearchResult

logger = logging.getLogger("ado-core.enrichment")

UNDISPLAYABLE_CONTENT = "[Content could not be displayed]"


def normalize_content(content: Any) -> Optional[str]:
    """Turn whatever the git API returned into text.

    Decision table, first match wins:
    - None -> None (nothing to attach)
    - bytes-like -> UTF-8 decode, invalid sequences replaced
    - str -> unchanged
    - object with its own __str__ -> str(obj)
    - anything else -> JSON text, or UNDISPLAYABLE_CONTENT if that fails
    """
    if content is None:
        return None
    if isinstance(content, (bytes, bytearray, memoryview)):
        return bytes(content).decode("utf-8", errors="replace")
    if isinstance(content, str):
        return content
    try:
        if type(content).__str__ is not object.__str__:
            return str(content)
        return json.dumps(content)
    except Exception as e:
        logger.warning(f"Failed to render content of type {type(content).__name__}: {e}")
        return UNDISPLAYABLE_CONTENT


async def enrich_results_with_content(
    connection,
    results: Sequence[CodeSearchResult],
    max_concurrency: Optional[int] = None,
) -> None:
    """Fetch every result's file in parallel and set `content` where it succeeds.

    Args:
        connection: AzureDevOpsConnection (its git client is acquired once)
        results: Search results, enriched in place
        max_concurrency: In-flight fetch cap (defaults to the connection setting)
    """
    if not results:
        return

    try:
        git_api = await connection.get_git_api()
    except Exception as e:
        logger.error(f"Failed to enrich results with content: {e}")
        return

    limit = max_concurrency or connection.settings.max_concurrent_fetches
    semaphore = asyncio.Semaphore(limit)

    async def fetch(result: CodeSearchResult) -> None:
        async with semaphore:
            try:
                content = await git_api.get_item_content(
                    result.repository.id,
                    result.path,
                    result.project.name,
                    result.version_ref,
                )
            except Exception as e:
                logger.warning(f"Failed to fetch content for {result.path}: {e}")
                return

        text = normalize_content(content)
        if text is not None:
            result.content = text

    await asyncio.gather(*(fetch(result) for result in results))

    enriched = sum(1 for result in results if result.content is not None)
    logger.info(f"Enriched {enriched} of {len(results)} search results with content")
