from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

import requests
from pydantic import ValidationError

from service_health.checks.http_check import check_endpoint
from service_health.formatting import format_check_result
from service_health.models import CheckHttpEndpointParams

logger = logging.getLogger(__name__)

TOOL_NAME = "check_http_endpoint"

TOOL_DEFINITION: Dict[str, Any] = {
    "name": TOOL_NAME,
    "description": (
        "Check if an HTTP/HTTPS endpoint is healthy and responsive. "
        "This tool will test connectivity, measure response time, and validate status codes. "
        "Perfect for monitoring APIs, websites, and web services."
    ),
    "inputSchema": {
        "type": "object",
        "properties": {
            "url": {
                "type": "string",
                "format": "uri",
                "description": "The URL to check (e.g., https://google.com)",
            },
            "method": {
                "type": "string",
                "enum": ["GET", "POST", "PUT", "DELETE"],
                "default": "GET",
                "description": "HTTP method to use",
            },
            "timeout": {
                "type": "number",
                "minimum": 1000,
                "maximum": 30000,
                "default": 10000,
                "description": "Request timeout in milliseconds",
            },
            "expectedStatus": {
                "type": "number",
                "minimum": 100,
                "maximum": 599,
                "default": 200,
                "description": "Expected HTTP status code",
            },
            "headers": {
                "type": "object",
                "additionalProperties": {"type": "string"},
                "description": "Optional HTTP headers to include",
            },
        },
        "required": ["url"],
    },
}


def format_validation_error(exc: ValidationError) -> str:
    issues = ", ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    )
    return f"❌ Input validation failed: {issues}"


def check_http_endpoint(
    arguments: Mapping[str, Any] | None,
    *,
    session: requests.Session | None = None,
) -> str:
    """Validate tool arguments, run the check and render the text report."""
    try:
        params = CheckHttpEndpointParams.model_validate(dict(arguments or {}))
    except ValidationError as exc:
        logger.info("Invalid arguments for %s: %s", TOOL_NAME, exc)
        return format_validation_error(exc)

    try:
        result = check_endpoint(params.to_request(), session=session)
        return format_check_result(result)
    except Exception as exc:
        logger.exception("Tool %s failed", TOOL_NAME)
        return f"❌ Unexpected error: {exc}"
