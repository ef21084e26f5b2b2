"""Scope changes for Jira Sprint Metrics.

Issues added to a sprint after it started are found from the `Sprint` field
changes in the issue changelog, matched on sprint ids. Issues removed from
the sprint no longer show up in a sprint query, so removals are estimated
from the point totals.
"""

import datetime
import logging

from ..calculator import Calculator
from ..models import SprintScopeChanges
from ..querymanager import IssueFilter
from .remaining import InitialScopeCalculator, group_by_assignee, sum_points

logger = logging.getLogger(__name__)


def _as_aware(value):
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value


def sprint_assignment_date(issue, sprint_id):
    """Return when `issue` was last put in sprint `sprint_id`, or `None`."""
    assignments = [
        change.created for change in issue.sprint_history if change.assigns(sprint_id)
    ]
    return max(assignments, key=_as_aware) if assignments else None


def was_added_after_start(issue, sprint) -> bool:
    """Whether `issue` was put in `sprint` after the sprint started.

    Issues without a matching changelog entry were in the sprint from the
    start.
    """
    if sprint.start is None:
        return False
    assigned = sprint_assignment_date(issue, sprint.id)
    if assigned is None:
        return False
    return _as_aware(assigned) > _as_aware(sprint.start)


def calculate_scope_changes(sprint, initial_total_points, current_issues) -> SprintScopeChanges:
    """Compare the current issues of a sprint with its initial scope."""
    if sprint.is_future:
        return SprintScopeChanges(
            initial_points=initial_total_points, current_points=initial_total_points
        )

    current_issues = tuple(current_issues)
    current_points = sum_points(current_issues)
    net_point_change = current_points - initial_total_points

    added = tuple(i for i in current_issues if was_added_after_start(i, sprint))
    added_points = sum_points(added)

    return SprintScopeChanges(
        initial_points=initial_total_points,
        current_points=current_points,
        net_point_change=net_point_change,
        current_issue_count=len(current_issues),
        added_issue_count=len(added),
        added_issues=added,
        added_points=added_points,
        added_by_assignee=group_by_assignee(added),
        estimated_removed_points=max(0.0, added_points - net_point_change),
        is_estimated=True,
    )


class ScopeChangeCalculator(Calculator):
    """Scope added to and removed from the sprint since it started."""

    def run(self):
        sprint = self.settings["sprint"]
        initial = self.get_result(InitialScopeCalculator)
        initial_points = initial.total_points if initial is not None else 0.0

        if sprint.is_future:
            logger.debug("Sprint `%s` has not started, no scope changes", sprint.name)
            return calculate_scope_changes(sprint, initial_points, ())

        result = self.query_manager.search(
            IssueFilter(sprint_name=sprint.name, order_by="created ASC"),
            self.settings["points_field"],
            expand="changelog",
        )
        return calculate_scope_changes(sprint, initial_points, result.issues)
