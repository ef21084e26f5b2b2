"""Shared column definitions for Jira Sprint Metrics.

This module centralizes column name lists used when issues are grouped with
pandas.
"""

ISSUE_COLUMNS = [
    "key",
    "summary",
    "points",
    "status",
    "assignee",
]
