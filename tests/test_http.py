"""Tests for the requests-backed HTTP capability."""

from unittest.mock import MagicMock, patch

import pytest
import requests


class TestHttpClient:
    @patch("arxivsync.http.requests.request")
    def test_returns_status_text_and_lowercased_headers(self, mock_request):
        from arxivsync.http import HttpClient

        resp = MagicMock()
        resp.status_code = 429
        resp.text = "slow down"
        resp.headers = {"Retry-After": "30"}
        mock_request.return_value = resp

        result = HttpClient(timeout=5).request("https://example.com", method="POST", body="a=1")
        assert result.status == 429
        assert result.text == "slow down"
        assert result.header("Retry-After") == "30"
        _, kwargs = mock_request.call_args
        assert kwargs["timeout"] == 5
        assert kwargs["data"] == "a=1"
        assert "User-Agent" in kwargs["headers"]

    @patch("arxivsync.http.requests.request")
    def test_transport_failure_raises_transport_error(self, mock_request):
        from arxivsync.http import HttpClient, TransportError

        mock_request.side_effect = requests.exceptions.ConnectionError("dns")
        with pytest.raises(TransportError):
            HttpClient().request("https://example.com")
