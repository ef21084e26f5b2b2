"""Calculators for Jira Sprint Metrics.

Each calculator fetches the issue set it needs through the query manager and
derives one metric from it.
"""
