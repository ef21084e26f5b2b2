"""Drift score for Jira Sprint Metrics.

The drift score compares the points a team was expected to have completed by
now with the points it actually completed. A positive drift means the team is
behind pace, a negative drift means it is ahead.
"""

import datetime
import logging
from typing import Optional

from ..business_days import business_days_between, shift_business_days
from ..calculator import Calculator
from ..config import ConfigError
from ..models import (
    LOAD_HEAVY,
    LOAD_LIGHT,
    LOAD_NORMAL,
    BusinessCalendar,
    CompletedWork,
    DriftResult,
    InitialScope,
    RemainingWork,
    SprintLoad,
)
from ..utils import round1, round_half_up
from .remaining import (
    CompletedWorkCalculator,
    InitialScopeCalculator,
    RemainingWorkCalculator,
)

logger = logging.getLogger(__name__)


def resolve_time_shift(time_shift=None, future_days=None) -> int:
    """Combine `time_shift` with its deprecated `future_days` alias.

    `time_shift` wins when both are given.
    """
    if future_days is not None:
        logger.warning("`future days` is deprecated, use `time shift` instead")
        if time_shift is not None:
            logger.warning(
                "Both `time shift` (%s) and `future days` (%s) given; using `time shift`",
                time_shift,
                future_days,
            )
            return int(time_shift)
        return int(future_days)
    return int(time_shift or 0)


def sprint_calendar(sprint, board, today=None, time_shift=0) -> BusinessCalendar:
    """Work out the total and elapsed business days of a sprint.

    A `Total business days` override on the board wins over the counted
    days. `time_shift` moves "today" by that many business days, forwards or
    backwards, to simulate another day of the sprint.
    """
    if sprint.start is None or sprint.end is None:
        raise ConfigError(f"Sprint `{sprint.name}` has no start or end date")

    today = today or datetime.date.today()
    as_of = shift_business_days(today, time_shift) if time_shift else today

    override = board.override_for(sprint.name)
    if override.total_business_days is not None:
        total = override.total_business_days
        logger.info(
            "Using %d total business days configured for sprint `%s`",
            total,
            sprint.name,
        )
    else:
        total = business_days_between(sprint.start_date, sprint.end_date)

    if time_shift:
        logger.info("Time shifted by %+d business days to %s", time_shift, as_of)

    return BusinessCalendar(
        start=sprint.start_date,
        end=sprint.end_date,
        today=today,
        as_of=as_of,
        total_business_days=total,
        elapsed_business_days=business_days_between(sprint.start_date, as_of),
        time_shift=time_shift,
    )


def classify_sprint_load(
    initial_total_points, team_velocity, daily_rate, total_days
) -> SprintLoad:
    """Compare the initial commitment of a sprint with the team velocity."""
    if initial_total_points < team_velocity:
        return SprintLoad(
            kind=LOAD_LIGHT,
            load_percentage=int(
                round_half_up(initial_total_points / team_velocity * 100, 0)
            ),
            expected_completion_day=round1(
                min(total_days, initial_total_points / daily_rate)
            ),
        )
    if initial_total_points > team_velocity:
        return SprintLoad(
            kind=LOAD_HEAVY,
            load_percentage=int(
                round_half_up(initial_total_points / team_velocity * 100, 0)
            ),
            overcommit_points=initial_total_points - team_velocity,
        )
    return SprintLoad(kind=LOAD_NORMAL, load_percentage=100)


def calculate_drift(
    initial_total_points,
    current_remaining_points,
    completed_points,
    total_sprint_business_days,
    elapsed_business_days,
    team_velocity: Optional[float] = None,
) -> DriftResult:
    """Compute the drift of a sprint.

    With a team velocity the expected progress follows the velocity pace,
    capped at the current scope (remaining plus completed). Without one the
    initial scope is burnt down linearly over the sprint.

    Raises:
        ConfigError: If the sprint has no business days
    """
    if total_sprint_business_days <= 0:
        raise ConfigError(
            "Sprint has no business days; configure `Total business days` "
            "for the sprint"
        )

    current_total_points = current_remaining_points + completed_points
    sprint_load = None

    if team_velocity:
        daily_rate = team_velocity / total_sprint_business_days
        expected = min(current_total_points, daily_rate * elapsed_business_days)
        sprint_load = classify_sprint_load(
            initial_total_points, team_velocity, daily_rate, total_sprint_business_days
        )
        planned = max(0.0, initial_total_points - expected)
    else:
        ratio = elapsed_business_days / total_sprint_business_days
        expected = initial_total_points * ratio
        planned = max(0.0, initial_total_points * (1 - ratio))
        daily_rate = initial_total_points / total_sprint_business_days

    raw_remaining = initial_total_points - expected

    planned = round1(planned)
    expected = round1(expected)
    daily_rate = round1(daily_rate)

    return DriftResult(
        initial_total_points=initial_total_points,
        current_remaining_points=current_remaining_points,
        completed_points=completed_points,
        planned_remaining_points=planned,
        raw_calculated_remaining=raw_remaining,
        drift_score=round1(expected - completed_points),
        expected_completed_points=expected,
        daily_rate=daily_rate,
        elapsed_business_days=elapsed_business_days,
        total_sprint_business_days=total_sprint_business_days,
        team_velocity=team_velocity or None,
        sprint_load=sprint_load,
    )


class SprintCalendarCalculator(Calculator):
    """Business days of the sprint as of today, or a shifted day."""

    def run(self):
        return sprint_calendar(
            self.settings["sprint"],
            self.settings["board"],
            today=self.settings.get("today"),
            time_shift=self.settings.get("time_shift", 0),
        )


class DriftCalculator(Calculator):
    """Drift of the sprint, from the scope, remaining and completed work."""

    def run(self):
        calendar = self.get_result(SprintCalendarCalculator)
        if calendar is None:
            raise ConfigError("The sprint calendar must be calculated before drift")

        board = self.settings["board"]
        sprint = self.settings["sprint"]

        initial = self.get_result(InitialScopeCalculator, InitialScope())
        remaining = self.get_result(RemainingWorkCalculator, RemainingWork())
        completed = self.get_result(CompletedWorkCalculator, CompletedWork())

        return calculate_drift(
            initial.total_points,
            remaining.total_points,
            completed.total_points,
            calendar.total_business_days,
            calendar.elapsed_business_days,
            team_velocity=board.team_velocity_for(sprint.name),
        )
