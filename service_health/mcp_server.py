from __future__ import annotations

import logging
from typing import Any

import anyio
from mcp.server.fastmcp import FastMCP

from service_health.config import settings
from service_health.tools import TOOL_DEFINITION, TOOL_NAME, check_http_endpoint

logger = logging.getLogger(__name__)


def create_server(name: str, version: str) -> FastMCP:
    server = FastMCP(name=name, instructions=f"{name} {version}: HTTP endpoint health checks")

    # Parameters stay untyped so shape errors reach CheckHttpEndpointParams
    # and come back as report text rather than a protocol error.
    @server.tool(name=TOOL_NAME, description=TOOL_DEFINITION["description"])
    async def check_http_endpoint_tool(
        url: Any = None,
        method: Any = "GET",
        timeout: Any = 10000,
        expectedStatus: Any = 200,
        headers: Any = None,
    ) -> str:
        arguments = {
            "url": url,
            "method": method,
            "timeout": timeout,
            "expectedStatus": expectedStatus,
            "headers": headers,
        }
        return await anyio.to_thread.run_sync(check_http_endpoint, arguments)

    # Advertise the declared schema instead of the one inferred from the untyped signature.
    server._tool_manager.get_tool(TOOL_NAME).parameters = TOOL_DEFINITION["inputSchema"]
    return server


def main() -> None:
    # stdout carries the MCP stream; logging.basicConfig writes to stderr.
    logging.basicConfig(level=settings.LOG_LEVEL)
    server = create_server(settings.SERVER_NAME, settings.SERVER_VERSION)
    logger.info("%s %s starting on stdio (tools: %s)", settings.SERVER_NAME, settings.SERVER_VERSION, TOOL_NAME)
    server.run()


if __name__ == "__main__":
    main()
