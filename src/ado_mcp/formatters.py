"""Formatting for tool responses.

Successful results are rendered as pretty-printed JSON. Validation failures
are rendered as one line listing every offending field, because the caller
is an agent that reads the message to decide how to fix its arguments.
"""
import json
from typing import Any

from pydantic import BaseModel, ValidationError

# Python type -> JSON type name used in validation messages
JSON_TYPE_NAMES: dict[type, str] = {
    str: "string",
    bool: "boolean",
    int: "number",
    float: "number",
    list: "array",
    tuple: "array",
    dict: "object",
    type(None): "null",
}


def to_jsonable(payload: Any) -> Any:
    """Dump pydantic models (by alias, unset fields omitted) anywhere in the payload."""
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json", by_alias=True, exclude_unset=True)
    if isinstance(payload, dict):
        return {key: to_jsonable(value) for key, value in payload.items()}
    if isinstance(payload, (list, tuple)):
        return [to_jsonable(item) for item in payload]
    return payload


def format_payload(payload: Any) -> str:
    """Serialize a handler result as JSON with 2-space indentation."""
    return json.dumps(to_jsonable(payload), indent=2)


def _json_type(value: Any) -> str:
    return JSON_TYPE_NAMES.get(type(value), type(value).__name__)


def format_validation_error(error: ValidationError) -> str:
    """Render every field error as `<path>: <message>`.

    Type mismatches also name the JSON type that was received. Example:
        Invalid input: workItemId: Input should be a valid integer (received string)
    """
    details = []
    for err in error.errors(include_url=False):
        path = ".".join(str(part) for part in err["loc"]) or "arguments"
        detail = f"{path}: {err['msg']}"
        if err["type"] not in ("missing", "extra_forbidden") and "input" in err:
            detail += f" (received {_json_type(err['input'])})"
        details.append(detail)
    return "Invalid input: " + "; ".join(details)
