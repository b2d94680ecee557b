"""Tool registry for the Azure DevOps MCP server.

Each tool is one ToolDescriptor pairing a name with its argument model and
its handler. The registry is built once at import time and never changes, so
it can be shared by any number of concurrent tool calls.
"""
import inspect
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Iterable, Mapping

from mcp.types import Tool

from ado_core.schemas import (
    CreateWorkItemArgs,
    GetFileContentArgs,
    GetProjectArgs,
    GetRepositoryArgs,
    GetWorkItemArgs,
    ListProjectsArgs,
    ListRepositoriesArgs,
    ListWorkItemsArgs,
    SearchCodeArgs,
    ToolArguments,
    UpdateWorkItemArgs,
)

from . import handlers

Handler = Callable[[Any, ToolArguments], Awaitable[Any]]


@dataclass(frozen=True)
class ToolDescriptor:
    """A callable tool: name, description, argument schema and handler."""

    name: str
    description: str
    arguments_model: type[ToolArguments]
    handler: Handler

    def __post_init__(self):
        # The handler's `arguments` annotation must be the schema it is registered with
        parameter = inspect.signature(self.handler).parameters.get("arguments")
        if (
            parameter is not None
            and parameter.annotation is not inspect.Parameter.empty
            and parameter.annotation is not self.arguments_model
        ):
            raise TypeError(
                f"Handler for {self.name} expects {parameter.annotation!r}, "
                f"but the tool is registered with {self.arguments_model.__name__}"
            )

    @property
    def input_schema(self) -> dict:
        return self.arguments_model.model_json_schema(by_alias=True)

    def to_tool(self) -> Tool:
        return Tool(name=self.name, description=self.description, inputSchema=self.input_schema)


def build_registry(descriptors: Iterable[ToolDescriptor]) -> Mapping[str, ToolDescriptor]:
    """Index descriptors by name. Duplicate names are a programming error."""
    registry: dict[str, ToolDescriptor] = {}
    for descriptor in descriptors:
        if descriptor.name in registry:
            raise ValueError(f"Tool already registered: {descriptor.name}")
        registry[descriptor.name] = descriptor
    return MappingProxyType(registry)


TOOL_REGISTRY: Mapping[str, ToolDescriptor] = build_registry([
    # ============================================================================
    # Project Tools
    # ============================================================================
    ToolDescriptor(
        name="list_projects",
        description="List all projects in the Azure DevOps organization. "
                    "Use get_project() for details about one project.",
        arguments_model=ListProjectsArgs,
        handler=handlers.handle_list_projects,
    ),
    ToolDescriptor(
        name="get_project",
        description="Get details of a specific project. Errors: Not Found (no such project).",
        arguments_model=GetProjectArgs,
        handler=handlers.handle_get_project,
    ),
    # ============================================================================
    # Work Item Tools
    # ============================================================================
    ToolDescriptor(
        name="get_work_item",
        description="Get a work item by ID. Use expand='All' to include relations and links.",
        arguments_model=GetWorkItemArgs,
        handler=handlers.handle_get_work_item,
    ),
    ToolDescriptor(
        name="list_work_items",
        description="List work items in a project using a saved query (queryId) or WIQL text. "
                    "Without either, returns the project's work items, newest first.",
        arguments_model=ListWorkItemsArgs,
        handler=handlers.handle_list_work_items,
    ),
    ToolDescriptor(
        name="create_work_item",
        description="Create a new work item. Title and work item type are required. "
                    "Use additionalFields for any other field, keyed by reference name.",
        arguments_model=CreateWorkItemArgs,
        handler=handlers.handle_create_work_item,
    ),
    ToolDescriptor(
        name="update_work_item",
        description="Update fields of an existing work item. At least one field is required.",
        arguments_model=UpdateWorkItemArgs,
        handler=handlers.handle_update_work_item,
    ),
    # ============================================================================
    # Repository Tools
    # ============================================================================
    ToolDescriptor(
        name="list_repositories",
        description="List Git repositories in a project.",
        arguments_model=ListRepositoriesArgs,
        handler=handlers.handle_list_repositories,
    ),
    ToolDescriptor(
        name="get_repository",
        description="Get details of a specific Git repository.",
        arguments_model=GetRepositoryArgs,
        handler=handlers.handle_get_repository,
    ),
    ToolDescriptor(
        name="get_file_content",
        description="Get the content of a file in a Git repository, optionally at a commit.",
        arguments_model=GetFileContentArgs,
        handler=handlers.handle_get_file_content,
    ),
    # ============================================================================
    # Search Tools
    # ============================================================================
    ToolDescriptor(
        name="search_code",
        description="Search for code across repositories. Scope to a project with projectId "
                    "and narrow with filters (Repository, Path, Branch, CodeElement). "
                    "Set includeContent to attach each file's full content.",
        arguments_model=SearchCodeArgs,
        handler=handlers.handle_search_code,
    ),
])


def get_tools() -> list[Tool]:
    """Public descriptors of every registered tool, for tool discovery."""
    return [descriptor.to_tool() for descriptor in TOOL_REGISTRY.values()]
