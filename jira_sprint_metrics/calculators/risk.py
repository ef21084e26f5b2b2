"""Grooming risk for Jira Sprint Metrics."""

import logging

from ..calculator import Calculator
from ..models import RISK_HIGH, RISK_LOW, RISK_MEDIUM, GroomingMetrics, RiskResult
from ..querymanager import IssueFilter
from ..utils import round2

logger = logging.getLogger(__name__)

HIGH_RISK_THRESHOLD = 0.66
MEDIUM_RISK_THRESHOLD = 0.33


def risk_level(score) -> str:
    """Map a risk score to a level. Both thresholds are exclusive."""
    if score > HIGH_RISK_THRESHOLD:
        return RISK_HIGH
    if score > MEDIUM_RISK_THRESHOLD:
        return RISK_MEDIUM
    return RISK_LOW


def calculate_risk(issues, finish_line_statuses=frozenset()) -> RiskResult:
    """Score how much of the work still needs grooming.

    An issue is groomed once it has story points, including zero. Unpointed
    issues in a finish-line status are nearly done and are not counted as
    needing grooming.
    """
    issues = tuple(issues)
    groomed = [i for i in issues if i.is_pointed]
    unpointed = [i for i in issues if not i.is_pointed]

    needing_grooming = tuple(i for i in unpointed if i.status not in finish_line_statuses)
    finish_line_unpointed = tuple(i for i in unpointed if i.status in finish_line_statuses)

    total = len(groomed) + len(needing_grooming)
    score = round2(1 - len(groomed) / total) if total > 0 else 0.0

    return RiskResult(
        groomed_count=len(groomed),
        total_needing_grooming=total,
        risk_score=score,
        risk_level=risk_level(score),
        unpointed_needing_grooming=needing_grooming,
        finish_line_unpointed=finish_line_unpointed,
    )


class GroomingCalculator(Calculator):
    """Issues of the sprint in a groomed or ungroomed status."""

    def run(self):
        board = self.settings["board"]
        sprint_name = self.settings["sprint_name"]

        result = self.query_manager.search(
            IssueFilter(
                sprint_name=sprint_name,
                status_op="IN",
                statuses=tuple(board.ungroomed_statuses) + tuple(board.groomed_statuses),
            ),
            self.settings["points_field"],
        )

        return GroomingMetrics(
            groomed_statuses=tuple(board.groomed_statuses),
            ungroomed_statuses=tuple(board.ungroomed_statuses),
            issues=result.issues,
            total=result.total,
        )

    def empty_result(self):
        board = self.settings["board"]
        return GroomingMetrics(
            groomed_statuses=tuple(board.groomed_statuses),
            ungroomed_statuses=tuple(board.ungroomed_statuses),
        )


class RiskCalculator(Calculator):
    """Grooming risk of the issues found by the `GroomingCalculator`."""

    def run(self):
        grooming = self.get_result(GroomingCalculator, GroomingMetrics())
        risk = calculate_risk(grooming.issues, self.settings["board"].finish_line_statuses)
        logger.debug(
            "Risk score %s (%s): %d of %d issues groomed",
            risk.risk_score,
            risk.risk_level,
            risk.groomed_count,
            risk.total_needing_grooming,
        )
        return risk

    def empty_result(self):
        return RiskResult()
