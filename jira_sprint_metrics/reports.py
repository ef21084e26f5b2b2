"""Report assembly for Jira Sprint Metrics.

Runs the calculators for a sprint and collects their results into the
`ProgressReport` and `PlanningReport` records the formatters render.
"""

import logging

from .calculator import run_calculators
from .calculators.drift import DriftCalculator, SprintCalendarCalculator
from .calculators.remaining import (
    CompletedWorkCalculator,
    InitialScopeCalculator,
    RemainingWorkCalculator,
)
from .calculators.risk import GroomingCalculator, RiskCalculator
from .calculators.scope_changes import ScopeChangeCalculator
from .models import (
    CompletedWork,
    GroomingMetrics,
    PlanningReport,
    ProgressReport,
    RemainingWork,
    RiskResult,
)

logger = logging.getLogger(__name__)

PROGRESS_CALCULATORS = (
    SprintCalendarCalculator,  # fails fast on undated sprints
    InitialScopeCalculator,
    RemainingWorkCalculator,
    CompletedWorkCalculator,
    DriftCalculator,  # needs the three above
    GroomingCalculator,
    RiskCalculator,
    ScopeChangeCalculator,
)

PLANNING_CALCULATORS = (
    GroomingCalculator,
    RiskCalculator,
)


def report_settings(query_manager, board, sprint_name, **extra):
    """Build the settings shared by the calculators of one report."""
    settings = {
        "board": board,
        "sprint_name": sprint_name,
        "points_field": query_manager.resolve_points_field(board.story_points_field),
    }
    settings.update(extra)
    return settings


def build_progress_report(query_manager, board, sprint, today=None, time_shift=0):
    """Calculate the progress metrics of a started sprint.

    Raises:
        ConfigError: If the sprint has no dates or no business days
    """
    settings = report_settings(
        query_manager,
        board,
        sprint.name,
        sprint=sprint,
        today=today,
        time_shift=time_shift,
    )

    warnings = []
    results = run_calculators(PROGRESS_CALCULATORS, query_manager, settings, warnings)

    return ProgressReport(
        board=board,
        sprint=sprint,
        drift=results[DriftCalculator],
        calendar=results[SprintCalendarCalculator],
        remaining=results.get(RemainingWorkCalculator) or RemainingWork(),
        completed=results.get(CompletedWorkCalculator) or CompletedWork(),
        risk=results.get(RiskCalculator) or RiskResult(),
        scope_changes=results.get(ScopeChangeCalculator),
        warnings=tuple(warnings),
    )


def build_planning_report(query_manager, board, sprint_name):
    """Calculate the grooming metrics of a sprint, usually a future one."""
    settings = report_settings(query_manager, board, sprint_name)

    warnings = []
    results = run_calculators(PLANNING_CALCULATORS, query_manager, settings, warnings)

    return PlanningReport(
        board=board,
        sprint_name=sprint_name,
        grooming=results.get(GroomingCalculator) or GroomingMetrics(),
        risk=results.get(RiskCalculator) or RiskResult(),
        warnings=tuple(warnings),
    )
