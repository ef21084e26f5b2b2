"""Jira Sprint Metrics - sprint health reports computed from JIRA data.

This package provides calculators for drift score, grooming risk, workload
balance and sprint scope changes, and renders them as text reports.
"""
