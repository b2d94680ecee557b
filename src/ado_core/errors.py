"""Domain error taxonomy for Azure DevOps operations.

Every failure that leaves the platform layer is one of five kinds:
- GENERIC: anything without a more specific classification
- AUTHENTICATION: credentials could not be obtained or were rejected at connect time
- VALIDATION: bad input (tool arguments or a 400 from the remote API)
- RESOURCE_NOT_FOUND: 404 from the remote API
- PERMISSION: 401/403 from the remote API

Remote-call wrappers classify HTTP failures here as early as possible.
Anything else is left untouched and classified by the dispatcher.
"""
import enum
import functools
from typing import Any, Optional

import httpx


class ErrorKind(str, enum.Enum):
    """Closed set of domain error kinds."""
    GENERIC = "generic"
    AUTHENTICATION = "authentication"
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    PERMISSION = "permission"


class AzureDevOpsError(Exception):
    """Base class for classified Azure DevOps failures."""

    kind: ErrorKind = ErrorKind.GENERIC

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AzureDevOpsAuthenticationError(AzureDevOpsError):
    """Raised when a credential cannot be acquired or is rejected."""

    kind = ErrorKind.AUTHENTICATION


class AzureDevOpsValidationError(AzureDevOpsError):
    """Raised for invalid input. `details` carries the raw remote error body, if any."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.details = details


class AzureDevOpsResourceNotFoundError(AzureDevOpsError):
    """Raised when the requested resource does not exist."""

    kind = ErrorKind.RESOURCE_NOT_FOUND


class AzureDevOpsPermissionError(AzureDevOpsError):
    """Raised when the caller is not allowed to access the resource."""

    kind = ErrorKind.PERMISSION


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None


def _response_message(exc: httpx.HTTPStatusError, body: Any) -> str:
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return str(exc)


def classify_http_error(exc: httpx.HTTPStatusError) -> AzureDevOpsError:
    """Map an HTTP status failure onto the domain taxonomy.

    404 -> not found, 400 -> validation (with the response body as details),
    401/403 -> permission, anything else -> generic.
    """
    status = exc.response.status_code
    body = _response_body(exc.response)
    message = _response_message(exc, body)

    if status == 404:
        return AzureDevOpsResourceNotFoundError(f"Resource not found: {message}")
    if status == 400:
        return AzureDevOpsValidationError(f"Invalid request: {message}", body)
    if status in (401, 403):
        return AzureDevOpsPermissionError(f"Permission denied: {message}")
    return AzureDevOpsError(f"Azure DevOps API error: {message}")


def classify_request_error(exc: httpx.RequestError) -> AzureDevOpsError:
    """Network-level failures (DNS, connect, timeout) are always generic."""
    return AzureDevOpsError(f"Connection failed: {type(exc).__name__}: {exc}")


def wrap_unexpected(action: str):
    """Decorate an async operation so unclassified failures become generic errors.

    Already classified AzureDevOpsError instances pass through unchanged;
    anything else is re-raised as AzureDevOpsError("<action>: <message>").
    """
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except AzureDevOpsError:
                raise
            except Exception as e:
                raise AzureDevOpsError(f"{action}: {e}") from e
        return wrapper
    return decorator
