"""Pydantic schemas for tool arguments and code search payloads.

Tool argument models are strict: numbers are never parsed out of strings,
unknown fields are rejected, and field names travel in camelCase on the wire
(workItemId, projectId, ...). Code search models describe remote data and are
lenient: unknown remote fields are kept so nothing is lost on the way back.
"""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ToolArguments(BaseModel):
    """Base for every tool's argument schema."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )


# Project Schemas

class ListProjectsArgs(ToolArguments):
    top: Optional[int] = Field(None, strict=True, ge=1, description="Maximum number of projects to return")
    skip: Optional[int] = Field(None, strict=True, ge=0, description="Number of projects to skip")


class GetProjectArgs(ToolArguments):
    project_id: Optional[str] = Field(None, description="Project ID or name (defaults to the configured project)")
    include_capabilities: Optional[bool] = Field(None, strict=True, description="Include project capabilities")
    include_history: Optional[bool] = Field(None, strict=True, description="Include project history")


# Work Item Schemas

class GetWorkItemArgs(ToolArguments):
    work_item_id: int = Field(..., strict=True, description="The ID of the work item")
    expand: Optional[str] = Field(
        None, description="Related data to include: None, Relations, Fields, Links or All"
    )


class ListWorkItemsArgs(ToolArguments):
    project_id: Optional[str] = Field(None, description="Project ID or name (defaults to the configured project)")
    team_id: Optional[str] = Field(None, description="Team ID or name to scope the query")
    query_id: Optional[str] = Field(None, description="ID of a saved query to run")
    wiql: Optional[str] = Field(None, description="WIQL query text (ignored when queryId is given)")
    top: Optional[int] = Field(None, strict=True, ge=1, description="Maximum number of work items to return")
    skip: Optional[int] = Field(None, strict=True, ge=0, description="Number of work items to skip")


class CreateWorkItemArgs(ToolArguments):
    project_id: Optional[str] = Field(None, description="Project ID or name (defaults to the configured project)")
    work_item_type: str = Field(..., min_length=1, description="Work item type, e.g. 'Task', 'Bug', 'User Story'")
    title: str = Field(..., min_length=1, description="Title of the work item")
    description: Optional[str] = Field(None, description="Description (HTML allowed)")
    assigned_to: Optional[str] = Field(None, description="User to assign the work item to")
    area_path: Optional[str] = Field(None, description="Area path")
    iteration_path: Optional[str] = Field(None, description="Iteration path")
    priority: Optional[int] = Field(None, strict=True, description="Priority (1 is highest)")
    additional_fields: Optional[dict[str, Any]] = Field(
        None, description="Other fields keyed by reference name, e.g. {'System.Tags': 'api'}"
    )


class UpdateWorkItemArgs(ToolArguments):
    work_item_id: int = Field(..., strict=True, description="The ID of the work item to update")
    title: Optional[str] = Field(None, min_length=1, description="New title")
    description: Optional[str] = Field(None, description="New description (HTML allowed)")
    assigned_to: Optional[str] = Field(None, description="User to assign the work item to")
    area_path: Optional[str] = Field(None, description="New area path")
    iteration_path: Optional[str] = Field(None, description="New iteration path")
    priority: Optional[int] = Field(None, strict=True, description="New priority (1 is highest)")
    state: Optional[str] = Field(None, description="New state, e.g. 'Active', 'Resolved'")
    additional_fields: Optional[dict[str, Any]] = Field(
        None, description="Other fields keyed by reference name"
    )


# Repository Schemas

class ListRepositoriesArgs(ToolArguments):
    project_id: Optional[str] = Field(None, description="Project ID or name (defaults to the configured project)")
    include_links: Optional[bool] = Field(None, strict=True, description="Include reference links")


class GetRepositoryArgs(ToolArguments):
    project_id: Optional[str] = Field(None, description="Project ID or name (defaults to the configured project)")
    repository_id: str = Field(..., min_length=1, description="Repository ID or name")


class GetFileContentArgs(ToolArguments):
    project_id: Optional[str] = Field(None, description="Project ID or name (defaults to the configured project)")
    repository_id: str = Field(..., min_length=1, description="Repository ID or name")
    path: str = Field(..., min_length=1, description="Path of the file, e.g. '/src/app.py'")
    version: Optional[str] = Field(None, description="Commit ID to read from (defaults to the default branch)")


# Search Schemas

class SearchCodeFilters(BaseModel):
    """Search facets. Keys keep the PascalCase names the search API expects."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    project: Optional[list[str]] = Field(None, alias="Project", description="Project names")
    repository: Optional[list[str]] = Field(None, alias="Repository", description="Repository names")
    path: Optional[list[str]] = Field(None, alias="Path", description="Path prefixes")
    branch: Optional[list[str]] = Field(None, alias="Branch", description="Branch names")
    code_element: Optional[list[str]] = Field(
        None, alias="CodeElement", description="Code element kinds, e.g. 'class', 'function'"
    )


class SearchCodeArgs(ToolArguments):
    search_text: str = Field(..., min_length=1, description="Text to search for")
    project_id: Optional[str] = Field(None, description="Project to search in (omit for organization-wide search)")
    filters: Optional[SearchCodeFilters] = Field(None, description="Optional search filters")
    top: Optional[int] = Field(None, strict=True, ge=1, le=1000, description="Number of results to return")
    skip: Optional[int] = Field(None, strict=True, ge=0, description="Number of results to skip")
    include_snippet: Optional[bool] = Field(None, strict=True, description="Include matching snippets in results")
    include_content: Optional[bool] = Field(None, strict=True, description="Fetch full file content for every result")


class RemoteModel(BaseModel):
    """Lenient model for data returned by the platform."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class CodeSearchRepository(RemoteModel):
    id: str
    name: str
    type: Optional[str] = None


class CodeSearchProject(RemoteModel):
    id: str
    name: str


class CodeSearchVersion(RemoteModel):
    branch_name: Optional[str] = None
    change_id: Optional[str] = None


class CodeSearchResult(RemoteModel):
    """One search hit. `content` stays unset unless enrichment fetched the file."""

    file_name: str
    path: str
    repository: CodeSearchRepository
    project: CodeSearchProject
    versions: list[CodeSearchVersion] = Field(default_factory=list)
    matches: dict[str, Any] = Field(default_factory=dict)
    content: Optional[str] = None

    @property
    def version_ref(self) -> Optional[str]:
        return self.versions[0].change_id if self.versions else None


class CodeSearchResponse(RemoteModel):
    count: int
    results: list[CodeSearchResult] = Field(default_factory=list)
