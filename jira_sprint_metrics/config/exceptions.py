"""Configuration exceptions for Jira Sprint Metrics.

This module provides custom exception classes for configuration-related errors.
"""


class ConfigError(Exception):
    """
    Exception raised for errors in the configuration.

    This covers both invalid configuration files and configuration values
    that make a metric impossible to compute, such as a sprint with zero
    business days.
    """
