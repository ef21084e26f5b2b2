"""Tests for JIRA client creation in Jira Sprint Metrics."""

from unittest.mock import patch

import pytest

from .config import ConfigError
from .jira_client import create_jira_client, get_jira_connection_params, normalize_value

CONNECTION = {
    "domain": "https://example.atlassian.net",
    "email": "me@example.com",
    "api_token": "secret",
    "http_proxy": None,
    "https_proxy": None,
    "jira_client_options": {},
}


@pytest.mark.parametrize(
    "value, expected",
    [
        ("secret", "secret"),
        ("  secret\n", "secret"),
        ('"secret"', "secret"),
        ("'secret'", "secret"),
        ("\"'secret'\"", "secret"),
        ('""', None),
        ("", None),
        (None, None),
    ],
)
def test_normalize_value(value, expected):
    """Test quotes and whitespace are stripped from credentials."""
    assert normalize_value(value) == expected


def test_get_jira_connection_params():
    assert get_jira_connection_params(CONNECTION) == (
        "https://example.atlassian.net",
        "me@example.com",
        "secret",
    )


def test_get_jira_connection_params_from_environment():
    """Test missing options fall back to environment variables."""
    environment = {
        "JIRA_URL": "https://env.atlassian.net",
        "JIRA_EMAIL": '"env@example.com"',
        "JIRA_API_TOKEN": "env-token",
    }
    with patch.dict("os.environ", environment):
        assert get_jira_connection_params({"email": "me@example.com"}) == (
            "https://env.atlassian.net",
            "me@example.com",
            "env-token",
        )


def test_get_jira_connection_params_missing():
    """Test every missing parameter is named."""
    with patch.dict("os.environ", {}, clear=True):
        with pytest.raises(ConfigError) as e:
            get_jira_connection_params({"domain": "https://example.atlassian.net"})

    assert "email, api_token" in str(e.value)


def test_create_jira_client(mocker):
    """Test the client authenticates with the email and API token."""
    jira = mocker.patch("jira_sprint_metrics.jira_client.JIRA")

    client = create_jira_client(
        dict(
            CONNECTION,
            https_proxy="http://proxy.local",
            jira_client_options={"verify": False},
        )
    )

    assert client is jira.return_value
    jira.assert_called_once_with(
        options={
            "server": "https://example.atlassian.net",
            "rest_api_version": 3,
            "verify": False,
        },
        basic_auth=("me@example.com", "secret"),
        proxies={"https": "http://proxy.local"},
    )


def test_create_jira_client_missing_credentials(mocker):
    jira = mocker.patch("jira_sprint_metrics.jira_client.JIRA")

    with patch.dict("os.environ", {}, clear=True):
        with pytest.raises(ConfigError):
            create_jira_client(dict(CONNECTION, api_token=None))

    jira.assert_not_called()
