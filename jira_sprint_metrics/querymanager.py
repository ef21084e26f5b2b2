"""Query management module for Jira Sprint Metrics.

This module is the only place that talks to JIRA. It builds JQL from typed
filters, runs the searches and normalizes the results into `Issue` and
`Sprint` records.
"""

import datetime
import logging
import re
from dataclasses import dataclass
from typing import Optional, Tuple

import dateutil.parser
from jira.exceptions import JIRAError
from requests.exceptions import RequestException

from .config import ConfigError
from .models import UNASSIGNED, Issue, Sprint, SprintChange
from .utils import quote_jql

logger = logging.getLogger(__name__)

ISSUE_FIELDS = ("summary", "status", "assignee", "created")
SPRINT_FIELD = "sprint"
CUSTOM_FIELD_ID = re.compile(r"^customfield_\d+$")

STATUS_OPERATORS = ("=", "!=", "IN", "NOT IN")


class QueryError(Exception):
    """Raised when JIRA cannot be reached or rejects a query."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class IssueFilter:
    """A sprint plus an optional status predicate.

    Exactly one of `sprint_id` and `sprint_name` must be given. `status_op`
    is one of `=`, `!=`, `IN` and `NOT IN`.
    """

    sprint_id: Optional[int] = None
    sprint_name: Optional[str] = None
    status_op: Optional[str] = None
    statuses: Tuple[str, ...] = ()
    order_by: Optional[str] = None

    def __post_init__(self):
        if (self.sprint_id is None) == (self.sprint_name is None):
            raise ValueError("IssueFilter needs exactly one of sprint_id or sprint_name")
        if self.status_op is not None:
            if self.status_op not in STATUS_OPERATORS:
                raise ValueError(f"Unknown status operator `{self.status_op}`")
            if self.status_op in ("=", "!=") and len(self.statuses) != 1:
                raise ValueError(f"Status operator `{self.status_op}` takes one status")

    @property
    def matches_nothing(self) -> bool:
        """`status IN ()` can never match, so there is no need to ask JIRA."""
        return self.status_op == "IN" and not self.statuses

    def to_jql(self) -> str:
        if self.sprint_id is not None:
            clauses = [f"sprint = {int(self.sprint_id)}"]
        else:
            clauses = [f"sprint = {quote_jql(self.sprint_name)}"]

        if self.status_op in ("=", "!="):
            clauses.append(f"status {self.status_op} {quote_jql(self.statuses[0])}")
        elif self.status_op is not None and self.statuses:
            status_list = ", ".join(quote_jql(s) for s in self.statuses)
            clauses.append(f"status {self.status_op} ({status_list})")

        jql = " AND ".join(clauses)
        if self.order_by:
            jql += f" ORDER BY {self.order_by}"
        return jql


@dataclass(frozen=True)
class SearchResult:
    """The issues matching a query, plus the total reported by JIRA."""

    total: int = 0
    issues: Tuple[Issue, ...] = ()


def parse_datetime(value):
    """Parse a JIRA timestamp into an aware datetime.

    Returns `None` for missing or bad values.
    """
    if not value:
        return None
    if not isinstance(value, datetime.datetime):
        try:
            value = dateutil.parser.parse(value)
        except (ValueError, OverflowError):
            logger.debug("Could not parse date `%s`", value)
            return None
    # Timestamps without an offset are UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    return value


def points_of(raw_issue, field_id) -> Optional[float]:
    """Return the story points of a raw JIRA issue.

    `None` means the issue is not estimated. Numeric strings are converted,
    anything else that is not a number counts as not estimated.
    """
    value = getattr(raw_issue.fields, field_id, None)
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.debug(
            "Ignoring non-numeric story points `%s` on %s", value, raw_issue.key
        )
        return None


def sprint_ids(value):
    """Parse the sprint ids of a changelog item, e.g. `"12, 13"`."""
    if value is None:
        return ()
    return tuple(int(s) for s in str(value).split(",") if s.strip().isdigit())


def _sprint_history(raw_issue):
    changelog = getattr(raw_issue, "changelog", None)
    histories = getattr(changelog, "histories", None) or []

    history = []
    for change in histories:
        created = parse_datetime(getattr(change, "created", None))
        if created is None:
            continue
        for item in getattr(change, "items", []):
            if str(getattr(item, "field", "")).lower() != SPRINT_FIELD:
                continue
            history.append(
                SprintChange(
                    created=created,
                    from_ids=sprint_ids(getattr(item, "from", None)),
                    to_ids=sprint_ids(getattr(item, "to", None)),
                )
            )
    return tuple(sorted(history, key=lambda c: c.created))


def normalize_issue(raw_issue, points_field) -> Issue:
    """Convert a JIRA issue resource into an `Issue`."""
    fields = raw_issue.fields
    status = getattr(fields, "status", None)
    assignee = getattr(fields, "assignee", None)

    return Issue(
        key=raw_issue.key,
        summary=getattr(fields, "summary", None) or "",
        points=points_of(raw_issue, points_field),
        status=getattr(status, "name", None) or "Unknown",
        assignee=getattr(assignee, "displayName", None) or UNASSIGNED,
        created=parse_datetime(getattr(fields, "created", None)),
        sprint_history=_sprint_history(raw_issue),
    )


def normalize_sprint(raw_sprint) -> Sprint:
    """Convert a JIRA sprint resource into a `Sprint`."""
    return Sprint(
        id=int(raw_sprint.id),
        name=raw_sprint.name,
        state=str(getattr(raw_sprint, "state", "")).lower(),
        start=parse_datetime(getattr(raw_sprint, "startDate", None)),
        end=parse_datetime(getattr(raw_sprint, "endDate", None)),
        goal=getattr(raw_sprint, "goal", None),
    )


class QueryManager:
    """Manage and execute queries"""

    settings = {
        "max_results": False,
    }

    def __init__(self, jira, settings=None):
        self.jira = jira
        self.settings = self.settings.copy()
        self.settings.update(settings or {})
        self._jira_fields = None

    def _raise_query_error(self, context, error):
        status_code = getattr(error, "status_code", None)
        logger.error(
            "JIRA API error while %s: %s (Status: %s)",
            context,
            getattr(error, "text", None) or str(error),
            status_code or "Unknown",
        )
        raise QueryError(f"Failed {context}: {error}", status_code=status_code) from error

    # Fields

    def jira_fields(self):
        """Return the JIRA field definitions, fetched once."""
        if self._jira_fields is None:
            try:
                self._jira_fields = self.jira.fields()
            except (JIRAError, RequestException) as e:
                self._raise_query_error("fetching field definitions", e)
        return self._jira_fields

    def resolve_points_field(self, field):
        """Resolve a story points field given by id or by display name."""
        if CUSTOM_FIELD_ID.match(field):
            return field

        jira_fields = self.jira_fields()
        for f in jira_fields:
            if f["id"] == field:
                return field
        try:
            return next(f["id"] for f in jira_fields if f["name"].lower() == field.lower())
        except StopIteration:
            raise ConfigError(
                f"JIRA field with name `{field}` does not exist "
                f"(did you try to use the field id instead?)"
            ) from None

    # Issues

    def search(self, issue_filter, points_field, expand=None, max_results=None):
        """Return the issues matching `issue_filter` as a `SearchResult`.

        Args:
            issue_filter: The `IssueFilter` to run
            points_field: Id of the story points field to fetch
            expand: Optional JIRA expand parameter, e.g. "changelog"
            max_results: Optional limit on number of results. If None, uses
                settings["max_results"]. If False, no limit.

        Raises:
            QueryError: If JIRA cannot be reached or rejects the query
        """
        if issue_filter.matches_nothing:
            logger.debug("Skipping query that cannot match any issue")
            return SearchResult()

        if max_results is None:
            max_results = self.settings["max_results"]

        jql = issue_filter.to_jql()
        fields = list(ISSUE_FIELDS) + [points_field]

        logger.info("Fetching issues with query `%s`", jql)
        try:
            raw_issues = self.jira.search_issues(
                jql,
                fields=",".join(fields),
                expand=expand,
                maxResults=max_results,
            )
        except (JIRAError, RequestException) as e:
            self._raise_query_error(f"fetching issues with query `{jql}`", e)

        issues = tuple(normalize_issue(i, points_field) for i in raw_issues)
        total = getattr(raw_issues, "total", None)
        if total is None:
            total = len(issues)

        logger.info("Fetched %d issues", len(issues))
        return SearchResult(total=total, issues=issues)

    # Sprints

    def fetch_sprints(self, board_id, state="active,future,closed"):
        """Return the sprints of a board in the given state(s)."""
        logger.debug("Fetching %s sprints for board %s", state, board_id)
        try:
            raw_sprints = self.jira.sprints(board_id, state=state, maxResults=False)
        except (JIRAError, RequestException) as e:
            self._raise_query_error(f"fetching sprints for board {board_id}", e)
        return [normalize_sprint(s) for s in raw_sprints]

    def find_sprint(self, board_id, name):
        """Find a sprint by name, ignoring case. Returns `None` if not found."""
        sprints = self.fetch_sprints(board_id)
        for sprint in sprints:
            if sprint.name == name:
                return sprint
        for sprint in sprints:
            if sprint.name.lower() == name.lower():
                return sprint

        logger.warning("Sprint `%s` not found on board %s", name, board_id)
        return None

    def active_sprint(self, board_id):
        """Return the active sprint of a board, or `None`."""
        sprints = self.fetch_sprints(board_id, state="active")
        return sprints[0] if sprints else None

    def next_sprint(self, board_id):
        """Return the future sprint starting first, or `None`."""
        sprints = self.fetch_sprints(board_id, state="future")
        if not sprints:
            return None
        # Sprints without a start date go last, in board order
        dated = sorted((s for s in sprints if s.start is not None), key=lambda s: s.start)
        undated = [s for s in sprints if s.start is None]
        return (dated + undated)[0]

    # Workflow

    def statuses(self):
        """Return the names of all statuses known to JIRA."""
        try:
            return [s.name for s in self.jira.statuses()]
        except (JIRAError, RequestException) as e:
            self._raise_query_error("fetching statuses", e)

    def sample_issue(self, sprint_name):
        """Return `(key, fields)` for one issue of a sprint, or `None`.

        All fields are fetched so the story points field can be probed.
        """
        jql = IssueFilter(sprint_name=sprint_name).to_jql()
        try:
            raw_issues = self.jira.search_issues(jql, maxResults=1)
        except (JIRAError, RequestException) as e:
            self._raise_query_error(f"fetching a sample issue with query `{jql}`", e)

        if not raw_issues:
            return None
        raw_issue = raw_issues[0]
        return raw_issue.key, dict(vars(raw_issue.fields))
