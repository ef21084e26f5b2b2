"""Configuration module for Jira Sprint Metrics.

This module provides configuration loading and error handling utilities.
"""

from .exceptions import ConfigError
from .loader import config_to_options, find_config_file

__all__ = ["config_to_options", "find_config_file", "ConfigError"]
