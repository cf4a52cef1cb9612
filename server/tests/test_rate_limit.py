"""Tests for rate limiting and client IP extraction."""

import json
from unittest.mock import MagicMock, patch

import pytest

from photosearch.core.rate_limit import (
    RETRY_AFTER_SECONDS,
    _get_trusted_proxies,
    _is_trusted_proxy,
    get_client_ip,
    rate_limit_exceeded_handler,
)


@pytest.fixture(autouse=True)
def _clear_cache():
    """Clear the lru_cache between tests so each test controls its own config."""
    _get_trusted_proxies.cache_clear()
    yield
    _get_trusted_proxies.cache_clear()


def _make_settings(trusted_proxies: str):
    settings = MagicMock()
    settings.trusted_proxies = trusted_proxies
    return settings


def _make_request(*, client_host: str = "10.0.0.1", headers: dict | None = None):
    request = MagicMock()
    request.client = MagicMock()
    request.client.host = client_host
    request.headers = headers or {}
    return request


class TestTrustedProxies:
    def test_parses_ips_and_cidrs(self):
        with patch(
            "photosearch.core.rate_limit.get_settings",
            return_value=_make_settings("1.2.3.4, 172.16.0.0/12,"),
        ):
            exact, networks = _get_trusted_proxies()

        assert exact == frozenset({"1.2.3.4"})
        assert len(networks) == 1

    def test_cidr_membership(self):
        with patch(
            "photosearch.core.rate_limit.get_settings",
            return_value=_make_settings("172.16.0.0/12"),
        ):
            assert _is_trusted_proxy("172.20.1.1")
            assert not _is_trusted_proxy("8.8.8.8")
            assert not _is_trusted_proxy("not-an-ip")


class TestGetClientIp:
    def test_direct_connection(self):
        with patch(
            "photosearch.core.rate_limit.get_settings", return_value=_make_settings("127.0.0.1")
        ):
            request = _make_request(client_host="203.0.113.9")
            assert get_client_ip(request) == "203.0.113.9"

    def test_forwarded_headers_ignored_from_untrusted_peer(self):
        with patch(
            "photosearch.core.rate_limit.get_settings", return_value=_make_settings("127.0.0.1")
        ):
            request = _make_request(
                client_host="203.0.113.9",
                headers={"X-Real-IP": "1.1.1.1", "X-Forwarded-For": "2.2.2.2"},
            )
            assert get_client_ip(request) == "203.0.113.9"

    def test_real_ip_preferred_from_trusted_proxy(self):
        with patch(
            "photosearch.core.rate_limit.get_settings", return_value=_make_settings("127.0.0.1")
        ):
            request = _make_request(
                client_host="127.0.0.1",
                headers={"X-Real-IP": " 1.1.1.1 ", "X-Forwarded-For": "2.2.2.2"},
            )
            assert get_client_ip(request) == "1.1.1.1"

    def test_forwarded_for_first_entry(self):
        with patch(
            "photosearch.core.rate_limit.get_settings", return_value=_make_settings("127.0.0.1")
        ):
            request = _make_request(
                client_host="127.0.0.1", headers={"X-Forwarded-For": "2.2.2.2, 10.0.0.5"}
            )
            assert get_client_ip(request) == "2.2.2.2"


class TestRateLimitExceededHandler:
    def test_uses_error_envelope(self):
        response = rate_limit_exceeded_handler(MagicMock(), MagicMock())

        assert response.status_code == 429
        assert response.headers["Retry-After"] == str(RETRY_AFTER_SECONDS)
        body = json.loads(response.body)
        assert body["retryable"] is True
        assert "Rate limit" in body["error"]
