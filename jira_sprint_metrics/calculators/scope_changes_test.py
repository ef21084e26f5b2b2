"""Tests for sprint scope changes in Jira Sprint Metrics."""

import datetime

from ..calculator import run_calculators
from ..models import Issue, Sprint, SprintChange
from ..querymanager import normalize_issue
from ..test_classes import POINTS_FIELD, FauxSprint, make_issue, sprint_change
from .remaining import InitialScopeCalculator
from .scope_changes import (
    ScopeChangeCalculator,
    calculate_scope_changes,
    sprint_assignment_date,
    was_added_after_start,
)

UTC = datetime.timezone.utc


def _issue(key, points, history=(), assignee="Alice"):
    return Issue(
        key=key,
        summary=f"Issue {key}",
        points=points,
        status="To Do",
        assignee=assignee,
        sprint_history=tuple(history),
    )


def _moved(day, to_ids, from_ids=(), hour=10):
    return SprintChange(
        created=datetime.datetime(2024, 1, day, hour, tzinfo=UTC),
        from_ids=tuple(from_ids),
        to_ids=tuple(to_ids),
    )


def test_was_added_after_start(sprint):
    """Test issues moved in after the start are added scope."""
    assert was_added_after_start(_issue("A-1", 3, [_moved(3, [12])]), sprint)
    assert not was_added_after_start(_issue("A-2", 3, [_moved(1, [12], hour=8)]), sprint)
    assert not was_added_after_start(_issue("A-3", 3), sprint)


def test_was_added_after_start_uses_latest_assignment(sprint):
    """Test the latest change that puts the issue in the sprint decides."""
    issue = _issue(
        "A-1",
        3,
        [_moved(1, [12], hour=8), _moved(2, [13], [12]), _moved(4, [12], [13])],
    )
    assert sprint_assignment_date(issue, 12).day == 4
    assert was_added_after_start(issue, sprint)


def test_was_added_after_start_matches_sprint_ids(sprint):
    """Test only changes to the sprint's own id count."""
    issue = _issue("A-1", 3, [_moved(3, [1])])
    assert sprint_assignment_date(issue, 12) is None
    assert not was_added_after_start(issue, sprint)


def test_was_added_after_start_naive_timestamps(sprint):
    """Test naive changelog timestamps are compared as UTC."""
    issue = _issue(
        "A-1", 3, [SprintChange(datetime.datetime(2024, 1, 2, 12), to_ids=(12,))]
    )
    assert was_added_after_start(issue, sprint)



def _closed_sprint(sprint_id, name):
    return Sprint(
        id=sprint_id,
        name=name,
        state="closed",
        start=datetime.datetime(2024, 1, 8, 9, tzinfo=UTC),
        end=datetime.datetime(2024, 1, 19, 17, tzinfo=UTC),
    )


def test_was_added_after_start_ignores_rollover():
    """Test rolling unfinished work over to the next sprint does not add it."""
    sprint = _closed_sprint(2, "Sprint 2")
    issue = _issue(
        "A-1",
        3,
        [
            _moved(5, [2]),
            # Sprint 2 stays in the field when the issue moves on to Sprint 3
            _moved(19, [2, 3], [2], hour=18),
        ],
    )

    assert sprint_assignment_date(issue, 2).day == 5
    assert not was_added_after_start(issue, sprint)


def test_was_added_after_start_sprint_name_with_comma():
    """Test sprints are matched on ids, whatever their names contain."""
    quarter = FauxSprint(7, "Sprint 7, Q2", "closed")
    raw = make_issue(
        "A-1",
        3,
        sprints=[quarter],
        changes=[sprint_change("2024-01-10T10:00:00.000+0000", [quarter])],
    )

    issue = normalize_issue(raw, POINTS_FIELD)

    assert was_added_after_start(issue, _closed_sprint(7, "Sprint 7, Q2"))
    assert not was_added_after_start(issue, _closed_sprint(8, "Q2"))

def test_calculate_scope_changes(sprint):
    """Test added scope and the estimated removals."""
    issues = [
        _issue("A-1", 5),
        _issue("A-2", 3, [_moved(3, [12])], assignee="Bob"),
        _issue("A-3", None, [_moved(4, [12])], assignee="Bob"),
    ]

    changes = calculate_scope_changes(sprint, 10, issues)

    assert changes.initial_points == 10
    assert changes.current_points == 8
    assert changes.net_point_change == -2
    assert changes.current_issue_count == 3
    assert changes.added_issue_count == 2
    assert [i.key for i in changes.added_issues] == ["A-2", "A-3"]
    assert changes.added_points == 3
    assert changes.added_by_assignee["Bob"].count == 2
    assert changes.added_by_assignee["Bob"].points == 3
    assert changes.removed_issue_count == 0
    assert changes.estimated_removed_points == 5
    assert changes.is_estimated


def test_calculate_scope_changes_no_negative_removals(sprint):
    """Test scope growth beyond the added issues removes nothing."""
    changes = calculate_scope_changes(sprint, 2, [_issue("A-1", 5)])
    assert changes.net_point_change == 3
    assert changes.estimated_removed_points == 0


def test_calculate_scope_changes_is_repeatable(sprint):
    """Test running twice on the same issues gives the same answer."""
    issues = [_issue("A-1", 5), _issue("A-2", 3, [_moved(3, [12])])]
    assert calculate_scope_changes(sprint, 6, issues) == calculate_scope_changes(
        sprint, 6, issues
    )


def test_calculate_scope_changes_future_sprint(future_sprint):
    """Test a sprint that has not started has no changes."""
    changes = calculate_scope_changes(future_sprint, 12, [_issue("A-1", 5)])

    assert changes.initial_points == 12
    assert changes.current_points == 12
    assert changes.net_point_change == 0
    assert changes.added_issue_count == 0
    assert not changes.is_estimated


def test_scope_change_calculator(query_manager, settings):
    """Test the scope changes of Sprint 12 from the changelog."""
    results = run_calculators(
        [InitialScopeCalculator, ScopeChangeCalculator], query_manager, settings
    )

    changes = results[ScopeChangeCalculator]
    assert changes.initial_points == 19
    assert changes.current_points == 19
    assert sorted(i.key for i in changes.added_issues) == ["A-5", "A-6"]
    assert changes.added_points == 1
    assert changes.estimated_removed_points == 1

    assert query_manager.jira.queries[-1] == 'sprint = "Sprint 12" ORDER BY created ASC'
    assert query_manager.jira.search_kwargs[-1]["expand"] == "changelog"


def test_scope_change_calculator_future_sprint(query_manager, settings, future_sprint):
    """Test future sprints are not queried for changes."""
    settings["sprint"] = future_sprint

    results = run_calculators([ScopeChangeCalculator], query_manager, settings)

    assert results[ScopeChangeCalculator].current_points == 0
    assert not query_manager.jira.queries
