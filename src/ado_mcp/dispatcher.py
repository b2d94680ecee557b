"""Tool call dispatch: the single boundary between the agent and the platform.

invoke() resolves the tool, validates its arguments, runs the handler and
turns the outcome into a ToolSuccess or a ToolFailure. No exception raised
by validation, a handler or serialization gets past it, so one broken tool
call never takes the server down with it.
"""
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from ado_core.errors import AzureDevOpsError, AzureDevOpsValidationError, ErrorKind

from .formatters import format_payload, format_validation_error
from .tools import TOOL_REGISTRY, ToolDescriptor

logger = logging.getLogger("azure-devops-mcp.dispatcher")

# Prefix shown to the agent for each error kind
ERROR_LABELS: dict[ErrorKind, str] = {
    ErrorKind.GENERIC: "Azure DevOps API Error",
    ErrorKind.AUTHENTICATION: "Authentication Failed",
    ErrorKind.VALIDATION: "Validation Error",
    ErrorKind.RESOURCE_NOT_FOUND: "Not Found",
    ErrorKind.PERMISSION: "Permission Denied",
}


@dataclass(frozen=True)
class ToolInvocationRequest:
    name: str
    arguments: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class ToolSuccess:
    payload: Any
    text: str
    is_error = False


@dataclass(frozen=True)
class ToolFailure:
    message: str
    is_error = True

    @property
    def text(self) -> str:
        return self.message


ToolResponse = Union[ToolSuccess, ToolFailure]


def render_failure(error: Exception) -> str:
    """Render any exception as `<KindLabel>: <message>`.

    Classified errors keep their kind; everything else is generic and keeps
    its own message (or its type name when the message is empty).
    """
    if isinstance(error, AzureDevOpsError):
        return f"{ERROR_LABELS[error.kind]}: {error.message}"
    message = str(error) or type(error).__name__
    return f"{ERROR_LABELS[ErrorKind.GENERIC]}: {message}"


async def invoke(
    connection,
    request: ToolInvocationRequest,
    registry: Mapping[str, ToolDescriptor] = TOOL_REGISTRY,
) -> ToolResponse:
    """
    Execute one tool call.

    Steps:
    1) look up the descriptor (unknown name -> failure, nothing runs)
    2) require an arguments object (absent -> failure, nothing runs)
    3) validate arguments against the tool's model
    4) await the handler
    5) classify any failure from steps 3-4 or serialization
    6) serialize the result as pretty JSON

    Args:
        connection: AzureDevOpsConnection shared by all calls
        request: Tool name and raw arguments
        registry: Tool table (defaults to TOOL_REGISTRY)

    Returns:
        ToolSuccess or ToolFailure, never raises for tool-level problems
    """
    descriptor = registry.get(request.name)
    if descriptor is None:
        logger.warning(f"Unknown tool requested: {request.name}")
        return ToolFailure(f"Unknown tool: {request.name}")

    if request.arguments is None:
        logger.warning(f"Tool {request.name} called without arguments")
        return ToolFailure("Arguments are required")

    try:
        try:
            arguments = descriptor.arguments_model.model_validate(request.arguments)
        except ValidationError as e:
            raise AzureDevOpsValidationError(
                format_validation_error(e), e.errors(include_url=False, include_context=False)
            ) from e

        result = await descriptor.handler(connection, arguments)
        text = format_payload(result)

    except AzureDevOpsError as e:
        message = render_failure(e)
        logger.error(f"Tool {request.name} failed: {message}")
        return ToolFailure(message)

    except Exception as e:
        message = render_failure(e)
        logger.exception(f"Unexpected error during {request.name} call: {type(e).__name__}: {e}")
        return ToolFailure(message)

    logger.info(f"Tool {request.name} succeeded")
    return ToolSuccess(payload=result, text=text)
