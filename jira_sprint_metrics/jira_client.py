"""JIRA client utilities for Jira Sprint Metrics.

Jira Cloud authenticates with an account email and an API token. Both, and
the site URL, can come from the configuration file, the command line or the
`JIRA_URL`, `JIRA_EMAIL` and `JIRA_API_TOKEN` environment variables.
"""

import logging
import os

from jira import JIRA

from .config import ConfigError

logger = logging.getLogger(__name__)

ENVIRONMENT_VARIABLES = {
    "url": "JIRA_URL",
    "email": "JIRA_EMAIL",
    "api_token": "JIRA_API_TOKEN",
}


def normalize_value(value):
    """Strip whitespace and surrounding quotes from a credential.

    Docker's `--env-file` keeps the quotes written in `.env` files, which
    breaks authentication.
    """
    if not value:
        return None
    value = str(value).strip()
    while value and (value[0] in "\"'" or value[-1] in "\"'"):
        stripped = value.strip('"').strip("'")
        if stripped == value:
            break
        value = stripped
    value = value.strip()
    return value or None


def get_jira_connection_params(connection):
    """Return `(url, email, api_token)` from the connection options.

    Raises:
        ConfigError: If any of the three is missing
    """
    url = normalize_value(
        connection.get("domain") or os.environ.get(ENVIRONMENT_VARIABLES["url"])
    )
    email = normalize_value(
        connection.get("email") or os.environ.get(ENVIRONMENT_VARIABLES["email"])
    )
    api_token = normalize_value(
        connection.get("api_token") or os.environ.get(ENVIRONMENT_VARIABLES["api_token"])
    )

    missing = [
        name
        for name, value in (("url", url), ("email", email), ("api_token", api_token))
        if not value
    ]
    if missing:
        raise ConfigError(
            f"Missing required JIRA connection parameters: {', '.join(missing)}. "
            f"Provide them via the `Connection` section, the command line or "
            f"environment variables ({', '.join(ENVIRONMENT_VARIABLES.values())})."
        )

    return url, email, api_token


def create_jira_client(connection):
    """Create a JIRA client with the given connection options."""
    url, email, api_token = get_jira_connection_params(connection)

    jira_options = {"server": url, "rest_api_version": 3}
    jira_options.update(connection.get("jira_client_options") or {})

    proxies = None
    if connection.get("http_proxy") or connection.get("https_proxy"):
        proxies = {}
        if connection.get("http_proxy"):
            proxies["http"] = connection["http_proxy"]
        if connection.get("https_proxy"):
            proxies["https"] = connection["https_proxy"]

    logger.info("Connecting to %s as %s", url, email)

    return JIRA(
        options=jira_options,
        basic_auth=(email, api_token),
        proxies=proxies,
    )
