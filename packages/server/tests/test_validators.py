"""Tests for profile field format validators."""

import pytest

from codecorps.core.validators import ensure_url_scheme, is_email, is_twitter_handle, is_url


@pytest.mark.parametrize("value", ["test@user.com", "user_1@email.com", "first.last@codecorps.org"])
def test_valid_emails(value):
    assert is_email(value)


@pytest.mark.parametrize("value", ["notanemail", "missing@", "@nodomain.com", "two@@ats.com"])
def test_invalid_emails(value):
    assert not is_email(value)


@pytest.mark.parametrize("value", ["codecorps", "code_corps", "a", "fifteen_chars15"])
def test_valid_twitter_handles(value):
    assert is_twitter_handle(value)


@pytest.mark.parametrize("value", ["bad @ twitter", "@codecorps", "sixteen_chars_16", ""])
def test_invalid_twitter_handles(value):
    assert not is_twitter_handle(value)


@pytest.mark.parametrize(
    "value",
    ["http://example.com", "https://codecorps.org/about?x=1", "codecorps.org", "http://sub.domain.io/path"],
)
def test_valid_urls(value):
    assert is_url(value)


@pytest.mark.parametrize("value", ["bad <> website", "http://bad <> website", "nodot", "http://"])
def test_invalid_urls(value):
    assert not is_url(value)


class TestEnsureUrlScheme:
    def test_prefixes_bare_host(self):
        assert ensure_url_scheme("example.com") == "http://example.com"

    def test_keeps_http(self):
        assert ensure_url_scheme("http://example.com") == "http://example.com"

    def test_keeps_https(self):
        assert ensure_url_scheme("HTTPS://example.com") == "HTTPS://example.com"
