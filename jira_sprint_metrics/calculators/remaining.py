"""Remaining and completed work for Jira Sprint Metrics.

This module sums the points left in a sprint, the workload per assignee and
the points that already crossed the finish line.
"""

import logging
from typing import Dict, Iterable

import pandas as pd

from ..calculator import Calculator
from ..columns import ISSUE_COLUMNS
from ..models import (
    AssigneeChanges,
    CompletedWork,
    InitialScope,
    RemainingWork,
    StatusGroup,
)
from ..querymanager import IssueFilter

logger = logging.getLogger(__name__)

DONE_STATUS = "Done"


def issues_frame(issues) -> pd.DataFrame:
    """Build a DataFrame of issues, with unestimated points counted as 0."""
    return pd.DataFrame(
        [
            {
                "key": i.key,
                "summary": i.summary,
                "points": i.points_or_zero,
                "status": i.status,
                "assignee": i.assignee,
            }
            for i in issues
        ],
        columns=ISSUE_COLUMNS,
    )


def sum_points(issues: Iterable) -> float:
    """Sum the points of `issues`, counting unestimated issues as 0."""
    return float(sum(i.points_or_zero for i in issues))


def summarize_remaining(issues, finish_line_statuses=frozenset()) -> RemainingWork:
    """Summarize the not-done issues of a sprint.

    Issues in a finish-line status are listed by status but are not counted
    in the total or in anyone's workload.
    """
    issues = tuple(issues)
    frame = issues_frame(issues)

    counted = frame[~frame["status"].isin(list(finish_line_statuses))]
    workload = counted.groupby("assignee", sort=False)["points"].sum()
    status_points = frame.groupby("status", sort=False)["points"].sum()

    return RemainingWork(
        total_points=float(counted["points"].sum()),
        workload={str(k): float(v) for k, v in workload.items()},
        issues_by_status={
            str(status): StatusGroup(
                points=float(points),
                issues=tuple(i for i in issues if i.status == status),
            )
            for status, points in status_points.items()
        },
        issues=issues,
    )


def summarize_completed(*issue_sets) -> CompletedWork:
    """Merge the completed issue sets, keeping one instance per issue key.

    The same issue can be returned by more than one query; the instance with
    the higher points wins.
    """
    by_key = {}
    for issues in issue_sets:
        for issue in issues:
            existing = by_key.get(issue.key)
            if existing is None or issue.points_or_zero > existing.points_or_zero:
                by_key[issue.key] = issue

    unique = tuple(by_key.values())
    return CompletedWork(total_points=sum_points(unique), issues=unique)


def group_by_assignee(issues) -> Dict[str, AssigneeChanges]:
    """Count and sum the points of `issues` per assignee."""
    issues = tuple(issues)
    frame = issues_frame(issues)
    grouped = frame.groupby("assignee", sort=False)["points"].agg(["count", "sum"])

    return {
        str(assignee): AssigneeChanges(
            count=int(row["count"]),
            points=float(row["sum"]),
            issues=tuple(i for i in issues if i.assignee == assignee),
        )
        for assignee, row in grouped.iterrows()
    }


class InitialScopeCalculator(Calculator):
    """Sum the points of every issue in the sprint, looked up by sprint id."""

    def run(self):
        sprint = self.settings["sprint"]
        result = self.query_manager.search(
            IssueFilter(sprint_id=sprint.id), self.settings["points_field"]
        )
        return InitialScope(total_points=sum_points(result.issues), issues=result.issues)

    def empty_result(self):
        return InitialScope()


class RemainingWorkCalculator(Calculator):
    """Points remaining in the sprint, by status and by assignee."""

    def run(self):
        sprint = self.settings["sprint"]
        board = self.settings["board"]
        result = self.query_manager.search(
            IssueFilter(
                sprint_name=sprint.name, status_op="!=", statuses=(DONE_STATUS,)
            ),
            self.settings["points_field"],
        )
        return summarize_remaining(result.issues, board.finish_line_statuses)

    def empty_result(self):
        return RemainingWork()


class CompletedWorkCalculator(Calculator):
    """Points that are done or in a finish-line status."""

    def run(self):
        sprint = self.settings["sprint"]
        board = self.settings["board"]
        points_field = self.settings["points_field"]

        done = self.query_manager.search(
            IssueFilter(sprint_name=sprint.name, status_op="=", statuses=(DONE_STATUS,)),
            points_field,
        )
        finish_line = self.query_manager.search(
            IssueFilter(
                sprint_name=sprint.name,
                status_op="IN",
                statuses=tuple(sorted(board.finish_line_statuses)),
            ),
            points_field,
        )

        completed = summarize_completed(done.issues, finish_line.issues)
        logger.debug(
            "%d completed issues (%d done, %d at the finish line)",
            completed.unique_issue_count,
            len(done.issues),
            len(finish_line.issues),
        )
        return completed

    def empty_result(self):
        return CompletedWork()
