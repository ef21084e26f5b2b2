"""Test configuration and fixtures for Jira Sprint Metrics.

The fixtures model board 42 with an active two-week sprint, "Sprint 12",
running from Monday 2024-01-01 to Friday 2024-01-12, and a future sprint,
"Sprint 13", that is being groomed.
"""

import datetime

import pytest

from .models import BoardConfig, Sprint
from .querymanager import QueryManager
from .test_classes import (
    POINTS_FIELD,
    FauxJIRA,
    FauxSprint,
    make_issue,
    sprint_change,
)

UTC = datetime.timezone.utc

# Fake a portion of the JIRA API

ACTIVE_SPRINT = FauxSprint(
    12,
    "Sprint 12",
    "active",
    start="2024-01-01T09:00:00.000Z",
    end="2024-01-12T17:00:00.000Z",
    goal="Ship the importer",
)
FUTURE_SPRINT = FauxSprint(
    13,
    "Sprint 13",
    "future",
    start="2024-01-15T09:00:00.000Z",
    end="2024-01-26T17:00:00.000Z",
)
CLOSED_SPRINT = FauxSprint(
    11,
    "Sprint 11",
    "closed",
    start="2023-12-11T09:00:00.000Z",
    end="2023-12-22T17:00:00.000Z",
)


def _sprint_issues():
    """Issues of Sprint 12.

    A-5 and A-6 were moved into the sprint after it started.
    """
    return [
        make_issue("A-1", 5, "Done", "Alice Smith", sprints=[ACTIVE_SPRINT]),
        make_issue("A-2", 3, "In Review", "Bob Jones", sprints=[ACTIVE_SPRINT]),
        make_issue("A-3", 8, "In Progress", "Alice Smith", sprints=[ACTIVE_SPRINT]),
        make_issue("A-4", 2, "To Do", None, sprints=[ACTIVE_SPRINT]),
        make_issue(
            "A-5",
            None,
            "To Do",
            "Bob Jones",
            sprints=[ACTIVE_SPRINT],
            changes=[
                sprint_change(
                    "2024-01-03T10:00:00.000+0000",
                    [CLOSED_SPRINT, ACTIVE_SPRINT],
                    from_sprints=[CLOSED_SPRINT],
                )
            ],
        ),
        make_issue(
            "A-6",
            1,
            "Done",
            "Bob Jones",
            sprints=[ACTIVE_SPRINT],
            changes=[sprint_change("2024-01-04T10:00:00.000+0000", [ACTIVE_SPRINT])],
        ),
    ]


def _grooming_issues():
    """Issues of Sprint 13, in grooming statuses."""
    return [
        make_issue("B-1", 3, "TO PLAN", "Alice Smith", sprints=[FUTURE_SPRINT]),
        make_issue("B-2", None, "TO GROOM", "Bob Jones", sprints=[FUTURE_SPRINT]),
        make_issue("B-3", None, "TO REFINE", None, sprints=[FUTURE_SPRINT]),
        make_issue("B-4", 5, "TO COMMIT", "Bob Jones", sprints=[FUTURE_SPRINT]),
    ]


# Fixtures


@pytest.fixture(name="base_fields")
def fields():
    """The JIRA field definitions."""
    return [
        {"id": "summary", "name": "Summary"},
        {"id": "status", "name": "Status"},
        {"id": POINTS_FIELD, "name": "Story Points"},
        {"id": "customfield_10020", "name": "Sprint"},
    ]


@pytest.fixture(name="board")
def board_config():
    """Board 42 with one finish-line status and a status order."""
    return BoardConfig(
        id=42,
        name="Platform",
        finish_line_statuses=frozenset(["In Review"]),
        status_order=("To Do", "In Progress", "In Review"),
    )


@pytest.fixture(name="sprint")
def active_sprint():
    """Sprint 12 as normalized by the query manager."""
    return Sprint(
        id=12,
        name="Sprint 12",
        state="active",
        start=datetime.datetime(2024, 1, 1, 9, tzinfo=UTC),
        end=datetime.datetime(2024, 1, 12, 17, tzinfo=UTC),
        goal="Ship the importer",
    )


@pytest.fixture(name="future_sprint")
def next_sprint():
    """Sprint 13 as normalized by the query manager."""
    return Sprint(
        id=13,
        name="Sprint 13",
        state="future",
        start=datetime.datetime(2024, 1, 15, 9, tzinfo=UTC),
        end=datetime.datetime(2024, 1, 26, 17, tzinfo=UTC),
    )


@pytest.fixture(name="today")
def report_date():
    """Monday of the second week of Sprint 12: five business days elapsed."""
    return datetime.date(2024, 1, 8)


@pytest.fixture(name="jira")
def faux_jira(base_fields):
    """A JIRA with the issues and sprints of board 42."""
    return FauxJIRA(
        fields=base_fields,
        issues=_sprint_issues() + _grooming_issues(),
        sprints=[CLOSED_SPRINT, ACTIVE_SPRINT, FUTURE_SPRINT],
        statuses=["To Do", "In Progress", "In Review", "Done", "TO PLAN", "TO GROOM"],
    )


@pytest.fixture(name="failing_jira")
def broken_jira(base_fields):
    """A JIRA that rejects every request."""
    return FauxJIRA(fields=base_fields, issues=[], error="Service Unavailable")


@pytest.fixture(name="query_manager")
def jira_query_manager(jira):
    return QueryManager(jira)


@pytest.fixture(name="settings")
def calculator_settings(board, sprint, today):
    """Settings for running the progress calculators on Sprint 12."""
    return {
        "board": board,
        "sprint": sprint,
        "sprint_name": sprint.name,
        "points_field": POINTS_FIELD,
        "today": today,
        "time_shift": 0,
    }
