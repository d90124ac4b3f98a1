import unittest
from unittest.mock import Mock, patch

from service_health.tools import TOOL_DEFINITION, TOOL_NAME, check_http_endpoint


class ToolDefinitionTests(unittest.TestCase):
    def test_definition_shape(self) -> None:
        self.assertEqual(TOOL_DEFINITION["name"], TOOL_NAME)
        self.assertEqual(TOOL_DEFINITION["inputSchema"]["required"], ["url"])
        self.assertEqual(
            set(TOOL_DEFINITION["inputSchema"]["properties"]),
            {"url", "method", "timeout", "expectedStatus", "headers"},
        )


class CheckHttpEndpointToolTests(unittest.TestCase):
    def test_input_validation_failures_skip_the_checker(self) -> None:
        cases = [
            ({}, "url:"),
            ({"url": "https://example.com/", "timeout": 500}, "timeout:"),
            ({"url": "https://example.com/", "timeout": 60000}, "timeout:"),
            ({"url": "https://example.com/", "expectedStatus": 700}, "expectedStatus:"),
            ({"url": "https://example.com/", "method": "PATCH"}, "method:"),
            ({"url": "https://example.com/", "headers": {"X-Count": 3}}, "headers.X-Count:"),
        ]
        for arguments, field in cases:
            with self.subTest(arguments=arguments):
                with patch("service_health.tools.check_endpoint") as check_mock:
                    text = check_http_endpoint(arguments)

                check_mock.assert_not_called()
                self.assertTrue(text.startswith("❌ Input validation failed: "))
                self.assertIn(field, text)

    def test_defaults_are_applied(self) -> None:
        with patch("service_health.tools.check_endpoint") as check_mock, patch(
            "service_health.tools.format_check_result", return_value="report"
        ):
            text = check_http_endpoint({"url": "https://example.com/"})

        self.assertEqual(text, "report")
        request = check_mock.call_args.args[0]
        self.assertEqual(request.method, "GET")
        self.assertEqual(request.timeout_ms, 10000)
        self.assertEqual(request.expected_status, 200)
        self.assertEqual(request.headers, {})

    def test_blocked_url_is_reported_as_unhealthy(self) -> None:
        session = Mock()

        text = check_http_endpoint({"url": "http://192.168.1.1/"}, session=session)

        session.request.assert_not_called()
        self.assertIn("**Status:** UNHEALTHY", text)
        self.assertIn("**Message:** Invalid URL provided", text)
        self.assertIn("**Response Time:** 0ms", text)
        self.assertNotIn("**HTTP Status:**", text)

    def test_warning_report(self) -> None:
        session = Mock()
        session.request.return_value = Mock(status_code=204, headers={})

        text = check_http_endpoint(
            {"url": "https://example.com/", "method": "DELETE", "expectedStatus": 200},
            session=session,
        )

        self.assertIn("**Status:** WARNING", text)
        self.assertIn("**HTTP Status:** 204", text)
        self.assertEqual(session.request.call_args.args[0], "DELETE")

    def test_unexpected_error_is_reported(self) -> None:
        with patch("service_health.tools.check_endpoint", side_effect=RuntimeError("bad state")):
            with self.assertLogs("service_health.tools", level="ERROR"):
                text = check_http_endpoint({"url": "https://example.com/"})

        self.assertEqual(text, "❌ Unexpected error: bad state")


if __name__ == "__main__":
    unittest.main()
