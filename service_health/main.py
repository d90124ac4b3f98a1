import logging
from typing import Any

import anyio
from fastapi import Body, FastAPI, Header, HTTPException

from service_health.api_schemas import HealthResponse, ToolCallResponse, ToolListResponse
from service_health.config import settings
from service_health.tools import TOOL_DEFINITION, TOOL_NAME, check_http_endpoint

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Service Health",
    version=settings.SERVER_VERSION,
    description=(
        "Runs single SSRF-guarded HTTP health checks and returns a formatted "
        "verdict (healthy, warning or unhealthy)."
    ),
)


def check_api_key(x_api_key: str | None) -> None:
    if settings.API_KEY and x_api_key != settings.API_KEY:
        raise HTTPException(status_code=401, detail="Unauthorized")


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["system"],
    summary="Health Check",
    description="Liveness endpoint used by probes and orchestration.",
)
def health():
    return {"status": "ok", "name": settings.SERVER_NAME, "version": settings.SERVER_VERSION}


@app.get(
    "/api/tools",
    response_model=ToolListResponse,
    tags=["tools"],
    summary="List Tools",
    description="Tool definitions exposed by this server.",
)
def list_tools():
    return {"tools": [TOOL_DEFINITION]}


@app.post(
    f"/api/tools/{TOOL_NAME}",
    response_model=ToolCallResponse,
    tags=["tools"],
    summary="Check HTTP Endpoint",
    description="Runs one health check and returns the formatted report text.",
)
async def call_check_http_endpoint(
    arguments: dict[str, Any] = Body(...),
    x_api_key: str | None = Header(default=None),
):
    check_api_key(x_api_key)
    logger.info("tool call name=%s url=%s", TOOL_NAME, arguments.get("url"))
    try:
        text = await anyio.to_thread.run_sync(check_http_endpoint, arguments)
    except Exception as exc:
        logger.exception("Unhandled error invoking %s", TOOL_NAME)
        raise HTTPException(status_code=500, detail=f"Tool execution failed: {exc}") from exc
    return {"tool": TOOL_NAME, "text": text}
