import unittest
from unittest.mock import MagicMock, patch

import httpx

from ada_cli.errors import ToolExecutionError
from ada_cli.tools.web import MAX_CONTENT_SIZE, USER_AGENT, webfetch


@patch("ada_cli.tools.web.httpx.Client")
class TestWebFetch(unittest.TestCase):
    """Tests for the `webfetch` tool."""

    def _client(self, MockClient):
        client = MagicMock()
        MockClient.return_value.__enter__.return_value = client
        return client

    def test_returns_body(self, MockClient):
        client = self._client(MockClient)
        client.get.return_value.text = "hello"

        self.assertEqual(webfetch("https://example.com"), "hello")
        client.get.assert_called_once_with("https://example.com")
        kwargs = MockClient.call_args.kwargs
        self.assertEqual(kwargs["headers"], {"User-Agent": USER_AGENT})
        self.assertTrue(kwargs["follow_redirects"])

    def test_large_body_is_truncated(self, MockClient):
        client = self._client(MockClient)
        client.get.return_value.text = "x" * (MAX_CONTENT_SIZE + 5)

        result = webfetch("https://example.com")

        self.assertTrue(result.startswith("x" * MAX_CONTENT_SIZE + "..."))
        self.assertIn(f"total size: {MAX_CONTENT_SIZE + 5} characters", result)

    def test_http_error_status(self, MockClient):
        client = self._client(MockClient)
        request = httpx.Request("GET", "https://example.com/missing")
        response = httpx.Response(404, request=request)
        client.get.return_value.raise_for_status.side_effect = httpx.HTTPStatusError(
            "not found", request=request, response=response
        )

        with self.assertRaisesRegex(ToolExecutionError, "status: 404"):
            webfetch("https://example.com/missing")

    def test_network_error(self, MockClient):
        client = self._client(MockClient)
        client.get.side_effect = httpx.ConnectError("unreachable")

        with self.assertLogs("ada_cli.tools.web", level="WARNING") as logs:
            with self.assertRaisesRegex(ToolExecutionError, "Failed to fetch"):
                webfetch("https://example.com")

        self.assertEqual(logs.records[0].args, ("https://example.com", client.get.side_effect))

    def test_non_http_url_is_rejected(self, MockClient):
        with self.assertRaises(ToolExecutionError):
            webfetch("file:///etc/passwd")
        MockClient.assert_not_called()


if __name__ == "__main__":
    unittest.main()
