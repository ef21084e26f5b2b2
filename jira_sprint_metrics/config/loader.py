"""Configuration loader for Jira Sprint Metrics.

The configuration file is YAML with case-insensitive keys, for example:

    Connection:
        Domain: https://example.atlassian.net
        Email: me@example.com
        API token: secret

    Default board: 42

    Boards:
        - ID: 42
          Name: Platform
          Default team velocity: 40
          Story points field: customfield_10016
          Groomed statuses: [TO PLAN, TO COMMIT]
          Ungroomed statuses: [TO GROOM, TO REFINE]
          Finish line statuses: [In Review, QA]
          Status order: [To Do, In Progress, In Review, QA]
          Sprints:
              Sprint 12:
                  Total business days: 9
                  Team velocity: 35
                  Notes: Public holiday
"""

import logging
import os.path

import yaml

from ..models import (
    DEFAULT_GROOMED_STATUSES,
    DEFAULT_STORY_POINTS_FIELD,
    DEFAULT_UNGROOMED_STATUSES,
    BoardConfig,
    SprintOverride,
)
from .exceptions import ConfigError
from .type_utils import expand_key, force_int, force_list, force_optional_float
from .yaml_utils import ordered_load

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = ("jira-config.yml", "jira-config.yaml")
USER_CONFIG_DIRECTORY = ".jira-sprint-metrics"


def _create_default_options():
    """Create default options dictionary."""
    return {
        "connection": {
            "domain": None,
            "email": None,
            "api_token": None,
            "http_proxy": None,
            "https_proxy": None,
            "jira_client_options": {},
        },
        "settings": {
            "max_results": False,
        },
        "boards": {},
        "default_board": None,
    }


def _parse_connection_config(config, options):
    """Parse connection configuration."""
    if "connection" not in config:
        return

    conn_config = config["connection"]
    conn_options = options["connection"]

    field_mappings = [
        ("domain", "domain"),
        ("email", "email"),
        ("username", "email"),
        ("api token", "api_token"),
        ("http proxy", "http_proxy"),
        ("https proxy", "https_proxy"),
        ("jira client options", "jira_client_options"),
    ]

    for config_key, option_key in field_mappings:
        if config_key in conn_config:
            conn_options[option_key] = conn_config[config_key]


def _parse_settings_config(config, options):
    """Parse general settings."""
    if expand_key("max_results") in config:
        options["settings"]["max_results"] = force_int(
            "max_results", config[expand_key("max_results")]
        )


def _parse_sprint_overrides(sprints_config):
    """Parse the per-sprint overrides of a board."""
    overrides = {}
    if not sprints_config:
        return overrides

    for sprint_name, values in sprints_config.items():
        values = values or {}
        total_days = values.get("total business days")
        if total_days is not None:
            total_days = force_int("total_business_days", total_days)
            if total_days <= 0:
                raise ConfigError(
                    f"`Total business days` for sprint `{sprint_name}` "
                    f"must be greater than zero, got {total_days}"
                )

        overrides[str(sprint_name)] = SprintOverride(
            total_business_days=total_days,
            team_velocity=force_optional_float(
                "team_velocity", values.get("team velocity")
            ),
            notes=values.get("notes"),
        )
    return overrides


def _parse_board_config(board_config):
    """Parse a single entry of the `Boards` section into a `BoardConfig`."""
    if "id" not in board_config:
        raise ConfigError("Every entry in `Boards` must have an `ID`")

    board_id = force_int("board_id", board_config["id"])

    # `Custom fields` nests the grooming settings in older configuration files
    custom_fields = board_config.get("custom fields") or {}

    def lookup(key, default=None):
        if key in board_config:
            return board_config[key]
        return custom_fields.get(key, default)

    groomed = force_list(lookup("groomed statuses")) or list(DEFAULT_GROOMED_STATUSES)
    ungroomed = force_list(lookup("ungroomed statuses")) or list(
        DEFAULT_UNGROOMED_STATUSES
    )

    velocity = force_optional_float(
        "default_team_velocity", board_config.get("default team velocity")
    )
    if velocity is not None and velocity <= 0:
        raise ConfigError(
            f"`Default team velocity` for board {board_id} must be greater than zero"
        )

    return BoardConfig(
        id=board_id,
        name=str(board_config.get("name") or f"Board {board_id}"),
        default_team_velocity=velocity,
        story_points_field=str(
            lookup("story points field") or DEFAULT_STORY_POINTS_FIELD
        ),
        groomed_statuses=tuple(str(s) for s in groomed),
        ungroomed_statuses=tuple(str(s) for s in ungroomed),
        finish_line_statuses=frozenset(
            str(s) for s in force_list(board_config.get("finish line statuses"))
        ),
        status_order=tuple(
            str(s) for s in force_list(board_config.get("status order"))
        ),
        sprint_overrides=_parse_sprint_overrides(board_config.get("sprints")),
    )


def _parse_boards_config(config, options):
    """Parse the `Boards` section."""
    if "boards" not in config or not config["boards"]:
        raise ConfigError("`Boards` section not found")

    for board_config in force_list(config["boards"]):
        board = _parse_board_config(board_config)
        if board.id in options["boards"]:
            raise ConfigError(f"Board {board.id} is configured more than once")
        options["boards"][board.id] = board

    if "default board" in config:
        default_board = force_int("default_board", config["default board"])
        if default_board not in options["boards"]:
            raise ConfigError(
                f"`Default board` ({default_board}) must exist in `Boards`: "
                f"{sorted(options['boards'])}"
            )
        options["default_board"] = default_board
    elif len(options["boards"]) == 1:
        options["default_board"] = next(iter(options["boards"]))
        logger.info("`Default board` automatically set to %s", options["default_board"])


def config_to_options(data):
    """
    Parse YAML config data and return options dict.
    """
    try:
        config = ordered_load(data, yaml.SafeLoader)
    except yaml.YAMLError as e:
        raise ConfigError("Unable to parse YAML configuration file.") from e

    if config is None:
        raise ConfigError("Configuration file is empty") from None

    if not hasattr(config, "items"):
        raise ConfigError("Configuration file must contain a mapping") from None

    options = _create_default_options()

    _parse_connection_config(config, options)
    _parse_settings_config(config, options)
    _parse_boards_config(config, options)

    return options


def find_config_file(cwd=None, home=None):
    """Return the first configuration file found in the default locations.

    Looks in the working directory first, then in `~/.jira-sprint-metrics/`.
    Returns `None` when no file exists.
    """
    cwd = cwd or os.getcwd()
    home = home or os.path.expanduser("~")

    candidates = [os.path.join(cwd, name) for name in CONFIG_FILENAMES] + [
        os.path.join(home, USER_CONFIG_DIRECTORY, "config.yml")
    ]

    for candidate in candidates:
        if os.path.exists(candidate):
            logger.debug("Using configuration file %s", candidate)
            return candidate
    return None
