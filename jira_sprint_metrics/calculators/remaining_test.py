"""Tests for remaining and completed work in Jira Sprint Metrics."""

from ..calculator import run_calculators
from ..models import UNASSIGNED, CompletedWork, InitialScope, Issue, RemainingWork
from ..querymanager import QueryManager
from .remaining import (
    CompletedWorkCalculator,
    InitialScopeCalculator,
    RemainingWorkCalculator,
    group_by_assignee,
    summarize_completed,
    summarize_remaining,
)


def _issue(key, points, status="To Do", assignee=UNASSIGNED):
    return Issue(key=key, summary=f"Issue {key}", points=points, status=status, assignee=assignee)


def test_summarize_remaining_excludes_finish_line():
    """Test finish-line issues are listed but not counted."""
    issues = [
        _issue("A-1", 5, "In Progress", "Alice"),
        _issue("A-2", 3, "In Review", "Bob"),
        _issue("A-3", 2, "To Do"),
        _issue("A-4", None, "To Do", "Bob"),
        _issue("A-5", 1, "In Progress", "Alice"),
    ]

    remaining = summarize_remaining(issues, frozenset(["In Review"]))

    assert remaining.total_points == 8
    assert remaining.workload == {"Alice": 6, UNASSIGNED: 2, "Bob": 0}
    assert remaining.unassigned_points == 2
    assert remaining.assignee_workload == {"Alice": 6, "Bob": 0}
    assert {s: g.points for s, g in remaining.issues_by_status.items()} == {
        "In Progress": 6,
        "In Review": 3,
        "To Do": 2,
    }
    assert [i.key for i in remaining.issues_by_status["To Do"].issues] == ["A-3", "A-4"]
    assert isinstance(remaining.total_points, float)


def test_summarize_remaining_empty():
    """Test an empty sprint has no remaining work."""
    remaining = summarize_remaining([], frozenset(["In Review"]))
    assert remaining.total_points == 0
    assert remaining.workload == {}
    assert remaining.issues_by_status == {}


def test_summarize_remaining_workload_sums_to_total():
    """Test the workload always adds up to the total."""
    issues = [
        _issue("A-1", 5, "In Progress", "Alice"),
        _issue("A-2", 8, "To Do"),
        _issue("A-3", 3, "QA", "Carol"),
    ]
    remaining = summarize_remaining(issues)
    assert sum(remaining.workload.values()) == remaining.total_points == 16


def test_summarize_completed_deduplicates_by_key():
    """Test issues found by both queries are counted once, with the higher points."""
    done = [_issue("A-1", 5, "Done"), _issue("A-2", 2, "Done")]
    finish_line = [_issue("A-2", 3, "Done"), _issue("A-3", 1, "In Review")]

    completed = summarize_completed(done, finish_line)

    assert completed.unique_issue_count == 3
    assert completed.total_points == 9
    assert [i.key for i in completed.issues] == ["A-1", "A-2", "A-3"]
    assert summarize_completed(done, done).total_points == 7


def test_group_by_assignee():
    """Test group_by_assignee functionality."""
    grouped = group_by_assignee(
        [_issue("A-1", 5, assignee="Alice"), _issue("A-2", None, assignee="Alice"),
         _issue("A-3", 2)]
    )

    assert grouped["Alice"].count == 2
    assert grouped["Alice"].points == 5
    assert [i.key for i in grouped["Alice"].issues] == ["A-1", "A-2"]
    assert grouped[UNASSIGNED].count == 1
    assert group_by_assignee([]) == {}


def test_calculators(query_manager, settings):
    """Test the aggregator calculators against the Sprint 12 issues."""
    results = run_calculators(
        [InitialScopeCalculator, RemainingWorkCalculator, CompletedWorkCalculator],
        query_manager,
        settings,
    )

    initial = results[InitialScopeCalculator]
    assert initial.total_points == 19
    assert len(initial.issues) == 6

    remaining = results[RemainingWorkCalculator]
    assert remaining.total_points == 10
    assert remaining.workload == {"Bob Jones": 0, "Alice Smith": 8, UNASSIGNED: 2}
    assert remaining.issues_by_status["In Review"].points == 3

    completed = results[CompletedWorkCalculator]
    assert completed.total_points == 9
    assert sorted(i.key for i in completed.issues) == ["A-1", "A-2", "A-6"]

    assert query_manager.jira.queries == [
        "sprint = 12",
        'sprint = "Sprint 12" AND status != "Done"',
        'sprint = "Sprint 12" AND status = "Done"',
        'sprint = "Sprint 12" AND status IN ("In Review")',
    ]


def test_calculators_degrade_on_query_error(failing_jira, settings):
    """Test failing fetches give empty results and warnings."""
    warnings = []
    results = run_calculators(
        [InitialScopeCalculator, RemainingWorkCalculator, CompletedWorkCalculator],
        QueryManager(failing_jira),
        settings,
        warnings,
    )

    assert results[InitialScopeCalculator] == InitialScope()
    assert results[RemainingWorkCalculator] == RemainingWork()
    assert results[CompletedWorkCalculator] == CompletedWork()
    assert len(warnings) == 3
