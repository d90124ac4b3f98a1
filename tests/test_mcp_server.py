import asyncio
import unittest
from unittest.mock import patch

from service_health.mcp_server import create_server
from service_health.tools import TOOL_DEFINITION


def _text(call_result) -> str:
    # call_tool returns either content blocks or (content blocks, structured output).
    content = call_result[0] if isinstance(call_result, tuple) else call_result
    return content[0].text


class McpServerTests(unittest.TestCase):
    def test_registers_check_http_endpoint(self) -> None:
        server = create_server("service-health-test", "0.0.1")

        tools = asyncio.run(server.list_tools())

        self.assertEqual([tool.name for tool in tools], ["check_http_endpoint"])
        self.assertEqual(tools[0].inputSchema, TOOL_DEFINITION["inputSchema"])
        self.assertEqual(tools[0].inputSchema["required"], ["url"])

    def test_tool_call_forwards_arguments(self) -> None:
        server = create_server("service-health-test", "0.0.1")

        with patch("service_health.mcp_server.check_http_endpoint", return_value="report") as tool_mock:
            asyncio.run(
                server.call_tool(
                    "check_http_endpoint",
                    {"url": "https://example.com/", "expectedStatus": 204},
                )
            )

        tool_mock.assert_called_once_with(
            {
                "url": "https://example.com/",
                "method": "GET",
                "timeout": 10000,
                "expectedStatus": 204,
                "headers": None,
            }
        )

    def test_badly_shaped_arguments_return_validation_text(self) -> None:
        server = create_server("service-health-test", "0.0.1")
        cases = [
            ({"url": "https://example.com/", "timeout": "soon"}, "timeout:"),
            ({"url": "https://example.com/", "headers": {"X-Count": 3}}, "headers.X-Count:"),
            ({"url": 5}, "url:"),
            ({}, "url:"),
        ]

        for arguments, field in cases:
            with self.subTest(arguments=arguments):
                with patch("service_health.tools.check_endpoint") as check_mock:
                    result = asyncio.run(server.call_tool("check_http_endpoint", arguments))

                check_mock.assert_not_called()
                text = _text(result)
                self.assertTrue(text.startswith("❌ Input validation failed: "))
                self.assertIn(field, text)


if __name__ == "__main__":
    unittest.main()
