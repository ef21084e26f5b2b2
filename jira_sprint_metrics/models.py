"""Data models for Jira Sprint Metrics.

Issues and sprints are immutable snapshots normalized from JIRA responses.
Every derived result (drift, risk, scope changes) is recomputed on each run
and handed to the formatters as plain structured data.
"""

import datetime
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple

from .utils import round_half_up

UNASSIGNED = "Unassigned"
DEFAULT_STORY_POINTS_FIELD = "customfield_10016"
DEFAULT_GROOMED_STATUSES = ("TO PLAN", "TO COMMIT")
DEFAULT_UNGROOMED_STATUSES = ("TO GROOM", "TO REFINE")

SPRINT_STATES = ("active", "future", "closed")

RISK_LOW = "Low"
RISK_MEDIUM = "Medium"
RISK_HIGH = "High"

LOAD_LIGHT = "light"
LOAD_NORMAL = "normal"
LOAD_HEAVY = "heavy"


@dataclass(frozen=True)
class SprintChange:
    """A changelog entry that set the `Sprint` field of an issue.

    `from_ids` and `to_ids` are the sprint ids before and after the change.
    """

    created: datetime.datetime
    from_ids: Tuple[int, ...] = ()
    to_ids: Tuple[int, ...] = ()

    def assigns(self, sprint_id) -> bool:
        """Whether this change put the issue in `sprint_id`.

        Rolling an unfinished issue over to the next sprint keeps the old
        sprint in `to_ids`, so that is not an assignment to it.
        """
        return sprint_id in self.to_ids and sprint_id not in self.from_ids


@dataclass(frozen=True)
class Issue:
    """An issue as returned by a single query.

    `points` is `None` when the issue has not been estimated yet, which the
    grooming calculations treat differently from an explicit zero.
    """

    key: str
    summary: str
    points: Optional[float]
    status: str
    assignee: str = UNASSIGNED
    created: Optional[datetime.datetime] = None
    sprint_history: Tuple[SprintChange, ...] = ()

    @property
    def points_or_zero(self) -> float:
        return 0.0 if self.points is None else self.points

    @property
    def is_pointed(self) -> bool:
        return self.points is not None


@dataclass(frozen=True)
class Sprint:
    """A sprint on an agile board."""

    id: int
    name: str
    state: str
    start: Optional[datetime.datetime] = None
    end: Optional[datetime.datetime] = None
    goal: Optional[str] = None

    @property
    def start_date(self) -> Optional[datetime.date]:
        return self.start.date() if self.start is not None else None

    @property
    def end_date(self) -> Optional[datetime.date]:
        return self.end.date() if self.end is not None else None

    @property
    def is_future(self) -> bool:
        return self.state == "future"


@dataclass(frozen=True)
class SprintOverride:
    """Per-sprint settings that take precedence over the board defaults."""

    total_business_days: Optional[int] = None
    team_velocity: Optional[float] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class BoardConfig:
    """Configuration for a single board, loaded once per run."""

    id: int
    name: str
    default_team_velocity: Optional[float] = None
    story_points_field: str = DEFAULT_STORY_POINTS_FIELD
    groomed_statuses: Tuple[str, ...] = DEFAULT_GROOMED_STATUSES
    ungroomed_statuses: Tuple[str, ...] = DEFAULT_UNGROOMED_STATUSES
    finish_line_statuses: FrozenSet[str] = frozenset()
    status_order: Tuple[str, ...] = ()
    sprint_overrides: Mapping[str, SprintOverride] = field(default_factory=dict)

    def override_for(self, sprint_name: str) -> SprintOverride:
        """Return the override for `sprint_name`, matched case-insensitively."""
        if sprint_name in self.sprint_overrides:
            return self.sprint_overrides[sprint_name]
        lowered = sprint_name.lower()
        for name, override in self.sprint_overrides.items():
            if name.lower() == lowered:
                return override
        return SprintOverride()

    def team_velocity_for(self, sprint_name: str) -> Optional[float]:
        """Sprint-specific velocity, then the board default, then `None`."""
        override = self.override_for(sprint_name)
        if override.team_velocity is not None:
            return override.team_velocity
        return self.default_team_velocity


@dataclass(frozen=True)
class StatusGroup:
    """Issues sharing a status, with their summed points."""

    points: float
    issues: Tuple[Issue, ...]


@dataclass(frozen=True)
class RemainingWork:
    """Work not yet done in a sprint.

    `total_points` and `workload` exclude finish-line statuses;
    `issues_by_status` lists every fetched issue. Unassigned work is kept in
    `workload` under the `UNASSIGNED` key.
    """

    total_points: float = 0.0
    workload: Dict[str, float] = field(default_factory=dict)
    issues_by_status: Dict[str, StatusGroup] = field(default_factory=dict)
    issues: Tuple[Issue, ...] = ()

    @property
    def unassigned_points(self) -> float:
        return self.workload.get(UNASSIGNED, 0.0)

    @property
    def assignee_workload(self) -> Dict[str, float]:
        """Workload of named assignees only."""
        return {k: v for k, v in self.workload.items() if k != UNASSIGNED}


@dataclass(frozen=True)
class CompletedWork:
    """Issues that crossed the finish line, deduplicated by key."""

    total_points: float = 0.0
    issues: Tuple[Issue, ...] = ()

    @property
    def unique_issue_count(self) -> int:
        return len(self.issues)


@dataclass(frozen=True)
class InitialScope:
    """Every issue that has been part of the sprint."""

    total_points: float = 0.0
    issues: Tuple[Issue, ...] = ()


@dataclass(frozen=True)
class SprintLoad:
    """How the initial commitment compares to the team velocity."""

    kind: str
    load_percentage: int
    expected_completion_day: Optional[float] = None
    overcommit_points: Optional[float] = None


@dataclass(frozen=True)
class DriftResult:
    """Planned vs. actual burn for a sprint."""

    initial_total_points: float
    current_remaining_points: float
    completed_points: float
    planned_remaining_points: float
    raw_calculated_remaining: float
    drift_score: float
    expected_completed_points: float
    daily_rate: float
    elapsed_business_days: int
    total_sprint_business_days: int
    team_velocity: Optional[float] = None
    sprint_load: Optional[SprintLoad] = None

    @property
    def current_total_points(self) -> float:
        return self.current_remaining_points + self.completed_points

    @property
    def percent_elapsed(self) -> int:
        if self.total_sprint_business_days <= 0:
            return 0
        return int(
            round_half_up(self.elapsed_business_days / self.total_sprint_business_days * 100, 0)
        )


@dataclass(frozen=True)
class GroomingMetrics:
    """Issues in groomed or ungroomed statuses for a sprint."""

    groomed_statuses: Tuple[str, ...] = ()
    ungroomed_statuses: Tuple[str, ...] = ()
    issues: Tuple[Issue, ...] = ()
    total: int = 0

    @property
    def groomed_issues(self) -> List[Issue]:
        return [i for i in self.issues if i.status in self.groomed_statuses]

    @property
    def issues_by_status(self) -> Dict[str, List[Issue]]:
        grouped: Dict[str, List[Issue]] = {}
        for issue in self.issues:
            grouped.setdefault(issue.status, []).append(issue)
        return grouped


@dataclass(frozen=True)
class RiskResult:
    """Grooming risk of a set of issues."""

    groomed_count: int = 0
    total_needing_grooming: int = 0
    risk_score: float = 0.0
    risk_level: str = RISK_LOW
    unpointed_needing_grooming: Tuple[Issue, ...] = ()
    finish_line_unpointed: Tuple[Issue, ...] = ()


@dataclass(frozen=True)
class AssigneeChanges:
    """Scope changes attributed to one assignee."""

    count: int
    points: float
    issues: Tuple[Issue, ...]


@dataclass(frozen=True)
class SprintScopeChanges:
    """Scope added to or removed from a sprint after it started.

    Removed issues cannot be enumerated without a full history traversal, so
    `estimated_removed_points` is derived from the point deltas and
    `is_estimated` flags it as such.
    """

    initial_points: float = 0.0
    current_points: float = 0.0
    net_point_change: float = 0.0
    current_issue_count: int = 0
    added_issue_count: int = 0
    added_issues: Tuple[Issue, ...] = ()
    added_points: float = 0.0
    added_by_assignee: Dict[str, AssigneeChanges] = field(default_factory=dict)
    removed_issue_count: int = 0
    removed_issues: Tuple[Issue, ...] = ()
    removed_points: float = 0.0
    removed_by_assignee: Dict[str, AssigneeChanges] = field(default_factory=dict)
    estimated_removed_points: float = 0.0
    is_estimated: bool = False


@dataclass(frozen=True)
class BusinessCalendar:
    """Business day figures for a sprint as of a (possibly shifted) date."""

    start: datetime.date
    end: datetime.date
    today: datetime.date
    as_of: datetime.date
    total_business_days: int
    elapsed_business_days: int
    time_shift: int = 0

    @property
    def is_time_shifted(self) -> bool:
        return self.time_shift != 0


@dataclass(frozen=True)
class ProgressReport:
    """Everything the progress and digest formatters need."""

    board: BoardConfig
    sprint: Sprint
    drift: DriftResult
    calendar: BusinessCalendar
    remaining: RemainingWork
    completed: CompletedWork
    risk: RiskResult
    scope_changes: Optional[SprintScopeChanges] = None
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PlanningReport:
    """Everything the planning and digest formatters need."""

    board: BoardConfig
    sprint_name: str
    grooming: GroomingMetrics
    risk: RiskResult
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FieldProbe:
    """The story points field as seen on a sample issue."""

    field_id: str
    issue_key: Optional[str] = None
    found: bool = False
    value: object = None
    candidates: Dict[str, object] = field(default_factory=dict)
