"""Tests for the data models of Jira Sprint Metrics."""

import datetime

import pytest

from .calculators.drift import calculate_drift
from .models import BoardConfig, SprintChange, SprintOverride


@pytest.mark.parametrize(
    "elapsed, total, percent",
    [(1, 8, 13), (3, 8, 38), (5, 9, 56), (0, 10, 0), (12, 10, 120)],
)
def test_percent_elapsed_rounds_halves_up(elapsed, total, percent):
    drift = calculate_drift(20, 10, 10, total, elapsed)
    assert drift.percent_elapsed == percent


def test_sprint_change_assigns():
    """Test a sprint kept across a change was not assigned by it."""
    created = datetime.datetime(2024, 1, 19, 18, tzinfo=datetime.timezone.utc)

    rollover = SprintChange(created, from_ids=(2,), to_ids=(2, 3))
    assert rollover.assigns(3)
    assert not rollover.assigns(2)

    removal = SprintChange(created, from_ids=(2,), to_ids=())
    assert not removal.assigns(2)


def test_board_override_lookup():
    board = BoardConfig(
        id=42,
        name="Platform",
        default_team_velocity=40,
        sprint_overrides={"Sprint 12": SprintOverride(team_velocity=32)},
    )

    assert board.team_velocity_for("sprint 12") == 32
    assert board.team_velocity_for("Sprint 13") == 40
    assert board.override_for("Sprint 13") == SprintOverride()
