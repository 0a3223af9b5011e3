"""Tests for backend/autotrader/bitvavo_api/curl_logging.py"""

import logging

import httpx

from autotrader.bitvavo_api.curl_logging import format_curl, log_request_as_curl, redact_headers


def _request():
    return httpx.Request(
        "POST",
        "https://api.bitvavo.com/v2/order",
        headers={
            "Bitvavo-Access-Key": "my-key",
            "Bitvavo-Access-Signature": "abc123",
            "X-Api-Secret": "hunter2",
            "Content-Type": "application/json",
        },
        content=b'{"market":"BTC-EUR"}',
    )


class TestRedactHeaders:
    def test_key_and_secret_headers_redacted(self):
        redacted = dict(redact_headers([("Bitvavo-Access-Key", "k"), ("X-Secret", "s"), ("Accept", "a")]))
        assert redacted == {"Bitvavo-Access-Key": "REDACTED", "X-Secret": "REDACTED", "Accept": "a"}

    def test_match_is_case_insensitive(self):
        assert dict(redact_headers([("x-api-key", "k")])) == {"x-api-key": "REDACTED"}


class TestFormatCurl:
    def test_credentials_never_in_output(self):
        curl = format_curl(_request())

        assert curl.startswith("curl -X POST 'https://api.bitvavo.com/v2/order'")
        assert "my-key" not in curl
        assert "hunter2" not in curl
        assert "REDACTED" in curl
        assert "-d '{\"market\":\"BTC-EUR\"}'" in curl

    def test_get_without_body_has_no_data_flag(self):
        curl = format_curl(httpx.Request("GET", "https://api.bitvavo.com/v2/time"))
        assert " -d " not in curl


class TestLogRequestAsCurl:
    async def test_logs_at_debug(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="autotrader.bitvavo_api.curl_logging"):
            await log_request_as_curl(_request())

        assert "curl -X POST" in caplog.text
        assert "my-key" not in caplog.text

    async def test_silent_above_debug(self, caplog):
        with caplog.at_level(logging.INFO, logger="autotrader.bitvavo_api.curl_logging"):
            await log_request_as_curl(_request())
        assert "curl" not in caplog.text
