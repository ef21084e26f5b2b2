"""Text rendering for Jira Sprint Metrics.

Every formatter takes the computed report records and a `Palette` and returns
a string. Passing `palette(False)` produces plain text.
"""

import datetime
from dataclasses import dataclass

from .business_days import is_business_day, iter_days
from .models import LOAD_HEAVY, LOAD_LIGHT, RISK_LOW, RISK_MEDIUM, SPRINT_STATES
from .utils import format_points, round1, round_half_up, sort_statuses, truncate

DETAIL_ISSUE_LIMIT = 10
DETAIL_POINTS_LIMIT = 20
SUMMARY_WIDTH = 40
PLANNING_SUMMARY_WIDTH = 50
MARKER = "➤➤"
RECENT_SPRINTS = 5


@dataclass(frozen=True)
class Palette:
    """ANSI escape codes, or empty strings when colour is disabled."""

    reset: str = ""
    bright: str = ""
    dim: str = ""
    red: str = ""
    green: str = ""
    yellow: str = ""
    blue: str = ""
    cyan: str = ""
    white: str = ""


COLORS = Palette(
    reset="\033[0m",
    bright="\033[1m",
    dim="\033[2m",
    red="\033[31m",
    green="\033[32m",
    yellow="\033[33m",
    blue="\033[34m",
    cyan="\033[36m",
    white="\033[37m",
)
PLAIN = Palette()


def palette(enabled=True) -> Palette:
    return COLORS if enabled else PLAIN


def drift_color(p, drift_score):
    if abs(drift_score) <= 5:
        return p.green
    if abs(drift_score) <= 15:
        return p.yellow
    return p.red


def risk_color(p, level):
    if level == RISK_LOW:
        return p.green
    if level == RISK_MEDIUM:
        return p.yellow
    return p.red


def _header(p, text):
    return f"\n{p.bright}{p.cyan}=== {text} ==={p.reset}"


def _section(p, title):
    return f"\n{p.bright}{p.white}{title}:{p.reset}"


def _by_points(issues):
    return sorted(issues, key=lambda i: (-i.points_or_zero, i.key))


def _issue_line(p, issue, points_color, indent="    ", width=SUMMARY_WIDTH, assignee=True):
    line = (
        f"{indent}{p.dim}- {issue.key}{p.reset} "
        f"[{points_color}{format_points(issue.points_or_zero)}{p.reset}]: "
        f"{truncate(issue.summary, width) or 'No summary'}"
    )
    if assignee:
        line += f" {p.blue}({issue.assignee}){p.reset}"
    return line


def _warning_lines(p, warnings):
    return [f"{p.yellow}Warning: {w} (metric shown as empty){p.reset}" for w in warnings]


def format_workload(p, remaining):
    """One-line workload summary, first names only."""
    entries = [
        f"{p.blue}{name.split(' ')[0]}{p.reset} {p.bright}{format_points(points)}{p.reset}"
        for name, points in remaining.assignee_workload.items()
    ]
    entries.append(
        f"{p.yellow}Uncarried {p.bright}{format_points(remaining.unassigned_points)}{p.reset}"
    )
    return ", ".join(entries)


def format_drift_line(p, drift):
    return (
        f"{p.bright}Drift Score{p.reset} (Ideal is zero): "
        f"{drift_color(p, drift.drift_score)}{format_points(drift.drift_score)}{p.reset} = "
        f"[{p.green}{format_points(drift.expected_completed_points)} expected completed{p.reset}]"
        f" - [{p.red}{format_points(drift.completed_points)} completed{p.reset}]"
    )


def format_risk_line(p, risk):
    return (
        f"{p.bright}Risk Score:{p.reset} "
        f"{risk_color(p, risk.risk_level)}{risk.risk_score:.2f} ({risk.risk_level} Risk){p.reset}"
        f" = 1 - ([{p.green}{risk.groomed_count} groomed issues{p.reset}] / "
        f"[{p.bright}{risk.total_needing_grooming} issues needing grooming{p.reset}])"
    )


def _remaining_lines(p, remaining, board):
    lines = [
        f"{p.bright}Remaining Actual ({p.red}{format_points(remaining.total_points)}"
        f"{p.reset}):{p.reset}"
    ]
    for status in sort_statuses(remaining.issues_by_status, board.status_order):
        group = remaining.issues_by_status[status]
        indicator = ""
        if status in board.finish_line_statuses:
            indicator = f" {p.yellow}[NOT COUNTED IN DRIFT]{p.reset}"
        lines.append(
            f"  {p.dim}{status}:{p.reset} {p.bright}{format_points(group.points)} points"
            f"{p.reset} ({len(group.issues)} issues){indicator}"
        )
        if len(group.issues) <= DETAIL_ISSUE_LIMIT or group.points > DETAIL_POINTS_LIMIT:
            lines.extend(_issue_line(p, i, p.red) for i in _by_points(group.issues))
    return lines


def _planned_lines(p, drift, calendar, override):
    duration = f"{drift.total_sprint_business_days}"
    if override.total_business_days is not None:
        duration += f" {p.yellow}[configured]{p.reset}"

    elapsed = (
        f"  {p.dim}Days Elapsed:{p.reset} {p.bright}{drift.elapsed_business_days}{p.reset}"
        f" business days ({drift.percent_elapsed}% complete)"
    )
    if calendar.is_time_shifted:
        elapsed += f" {p.yellow}[time-shifted]{p.reset}"

    lines = [
        "",
        f"{p.bright}Remaining Planned ({p.green}"
        f"{format_points(drift.planned_remaining_points)}{p.reset}):{p.reset}",
        f"  {p.dim}Initial Points:{p.reset} {p.bright}"
        f"{format_points(drift.initial_total_points)}{p.reset}",
        f"  {p.dim}Sprint Duration:{p.reset} {p.bright}{duration}{p.reset} business days",
        elapsed,
        f"  {p.dim}Expected Burn Rate:{p.reset} {p.bright}"
        f"{format_points(drift.daily_rate)}{p.reset} points per day",
        f"  {p.dim}Expected Completed:{p.reset} {p.bright}"
        f"{format_points(drift.expected_completed_points)}{p.reset} points by now",
    ]

    expected_remaining = (
        f"  {p.dim}Expected Remaining:{p.reset} {format_points(drift.initial_total_points)}"
        f" - {format_points(drift.expected_completed_points)} = "
        f"{p.green}{format_points(drift.planned_remaining_points)}{p.reset} points"
    )
    if drift.raw_calculated_remaining < 0:
        expected_remaining += (
            f" {p.dim}(uncapped {format_points(round1(drift.raw_calculated_remaining))})"
            f"{p.reset}"
        )
    lines.append(expected_remaining)
    return lines


def format_sprint_load(p, drift):
    """Team velocity and how the sprint commitment compares to it."""
    load = drift.sprint_load
    if drift.team_velocity is None or load is None:
        return []

    lines = [
        _section(p, "Sprint Load"),
        f"  {p.dim}Team Velocity:{p.reset} {p.bright}"
        f"{format_points(drift.team_velocity)}{p.reset} points per sprint",
    ]
    summary = f"  {p.dim}Load:{p.reset} {p.bright}{load.load_percentage}%{p.reset} of velocity"
    if load.kind == LOAD_LIGHT:
        lines.append(f"{summary} {p.green}(light){p.reset}")
        lines.append(
            f"  {p.dim}Expected Completion:{p.reset} day {p.bright}"
            f"{format_points(load.expected_completion_day)}{p.reset} of "
            f"{drift.total_sprint_business_days}"
        )
    elif load.kind == LOAD_HEAVY:
        lines.append(f"{summary} {p.red}(heavy){p.reset}")
        lines.append(
            f"  {p.dim}Overcommitted By:{p.reset} {p.red}"
            f"{format_points(load.overcommit_points)} points{p.reset}"
        )
    else:
        lines.append(f"{summary} {p.green}(normal){p.reset}")
    return lines


def _assignee_lines(p, by_assignee, sign, color):
    ranked = sorted(by_assignee.items(), key=lambda item: -item[1].points)
    return [
        f"    {p.blue}{assignee}:{p.reset} {p.bright}{changes.count} issues{p.reset} "
        f"({color}{sign}{format_points(changes.points)} points{p.reset})"
        for assignee, changes in ranked
    ]


def format_scope_changes(p, scope_changes, remaining):
    """Scope added to and removed from a sprint since it started."""
    net = scope_changes.net_point_change
    net_color = p.red if net > 0 else p.green
    net_sign = "+" if net > 0 else ""

    lines = [
        _section(p, "Sprint Scope Changes"),
        f"  {p.dim}Initial Points:{p.reset} {p.bright}"
        f"{format_points(scope_changes.initial_points)}{p.reset}",
        f"  {p.dim}Current Points:{p.reset} {p.bright}"
        f"{format_points(scope_changes.current_points)}{p.reset}",
        f"  {p.dim}Net Point Change:{p.reset} {net_color}{net_sign}{format_points(net)}{p.reset}",
    ]

    if scope_changes.added_issue_count > 0:
        lines.append(
            f"\n  {p.red}Issues Added to Sprint{p.reset} "
            f"(+{format_points(scope_changes.added_points)} points):"
        )
        lines.extend(_issue_line(p, i, p.red) for i in _by_points(scope_changes.added_issues))
        lines.append(f"\n  {p.dim}Added Work by Assignee:{p.reset}")
        lines.extend(_assignee_lines(p, scope_changes.added_by_assignee, "+", p.red))

    if scope_changes.removed_issue_count > 0:
        lines.append(
            f"\n  {p.green}Issues Removed from Sprint{p.reset} "
            f"(-{format_points(scope_changes.removed_points)} points):"
        )
        lines.extend(
            _issue_line(p, i, p.green) for i in _by_points(scope_changes.removed_issues)
        )
        lines.append(f"\n  {p.dim}Removed Work by Assignee:{p.reset}")
        lines.extend(_assignee_lines(p, scope_changes.removed_by_assignee, "-", p.green))
    elif scope_changes.is_estimated and scope_changes.estimated_removed_points > 0:
        lines.append(
            f"\n  {p.green}Estimated Removed:{p.reset} "
            f"-{format_points(scope_changes.estimated_removed_points)} points "
            f"{p.dim}(approximate, derived from point totals){p.reset}"
        )

    lines.append(f"\n  {p.dim}Current Workload Distribution:{p.reset}")
    for assignee, points in sorted(
        remaining.assignee_workload.items(), key=lambda item: -item[1]
    ):
        lines.append(
            f"    {p.blue}{assignee}:{p.reset} {p.bright}{format_points(points)} points{p.reset}"
        )
    if remaining.unassigned_points > 0:
        lines.append(
            f"    {p.blue}Unassigned:{p.reset} {p.bright}"
            f"{format_points(remaining.unassigned_points)} points{p.reset}"
        )
    return lines


def format_finish_line_breakdown(p, completed, finish_line_statuses=()):
    """Completed points per assignee, with each one's share of the total."""
    by_assignee = {}
    for issue in completed.issues:
        by_assignee.setdefault(issue.assignee, []).append(issue)

    total = completed.total_points
    lines = [
        f"\n{p.bright}Finish Line Breakdown{p.reset} ({format_points(total)} points):"
    ]
    if total == 0:
        lines.append(f"  {p.dim}No points have crossed the finish line yet.{p.reset}")
        return "\n".join(lines)

    ranked = sorted(
        by_assignee.items(), key=lambda item: -sum(i.points_or_zero for i in item[1])
    )
    for assignee, issues in ranked:
        points = sum(i.points_or_zero for i in issues)
        share = int(round_half_up(points / total * 100, 0))
        if share < 10:
            share_color = p.dim
        elif share < 25:
            share_color = p.blue
        else:
            share_color = p.green
        lines.append(
            f"  {p.blue}{assignee}:{p.reset} {p.bright}{format_points(points)} points{p.reset}"
            f" ({share_color}{share}%{p.reset} of completed work)"
        )
        for issue in _by_points(issues):
            color = p.green if issue.points_or_zero > 0 else p.dim
            lines.append(_issue_line(p, issue, color, assignee=False))

    zero_point = [i for i in completed.issues if i.points_or_zero == 0]
    if zero_point:
        lines.append(
            f"\n  {p.dim}Total zero-point issues: {len(zero_point)} issues completed "
            f"with no points assigned{p.reset}"
        )

    statuses = ", ".join(["Done"] + sorted(finish_line_statuses))
    lines.append(
        f"\n  {p.dim}Note: this shows who carried the issues that are now in "
        f"{statuses} status.{p.reset}"
    )
    return "\n".join(lines)


def format_business_days_breakdown(p, calendar):
    """Sprint dates and the business days credited so far."""

    def day_label(day):
        return f"{day.isoformat()} ({day.strftime('%a')})"

    # Days before `as_of` have fully elapsed
    last_full_day = calendar.as_of - datetime.timedelta(days=1)
    elapsed_days = list(iter_days(calendar.start, last_full_day))
    business_days = [day_label(d) for d in elapsed_days if is_business_day(d)]

    current = f"  {p.dim}Current Date:{p.reset} {p.bright}{calendar.as_of.isoformat()}{p.reset}"
    if calendar.is_time_shifted:
        current += (
            f" {p.yellow}[Time-shifted from {calendar.today.isoformat()}, "
            f"{calendar.time_shift:+d} business days]{p.reset}"
        )

    lines = [
        _section(p, "Business Days Breakdown"),
        f"  {p.dim}Sprint Start:{p.reset} {p.bright}{calendar.start.isoformat()}{p.reset}",
        current,
        f"  {p.dim}Sprint End:{p.reset} {p.bright}{calendar.end.isoformat()}{p.reset}",
        f"  {p.dim}Business Days Elapsed:{p.reset} {p.bright}"
        f"{calendar.elapsed_business_days}{p.reset}",
        f"  {p.dim}Total Sprint Business Days:{p.reset} {p.bright}"
        f"{calendar.total_business_days}{p.reset}",
        f"  {p.dim}Calendar Days Elapsed:{p.reset} {p.bright}{len(elapsed_days)}{p.reset}",
    ]
    if business_days:
        lines.append(f"  {p.dim}Business Days:{p.reset} {', '.join(business_days)}")
    return "\n".join(lines)


def format_progress_report(report, p=PLAIN):
    """Render the full progress report of a sprint."""
    board = report.board
    sprint = report.sprint
    drift = report.drift
    override = board.override_for(sprint.name)

    lines = [_header(p, f'Progress: Board {board.id} "{sprint.name}"')]
    lines.extend(_warning_lines(p, report.warnings))
    if override.notes:
        lines.append(f"{p.dim}Note: {override.notes}{p.reset}")

    lines.append(_section(p, "Calculation Breakdown"))
    lines.extend(_remaining_lines(p, report.remaining, board))
    lines.extend(_planned_lines(p, drift, report.calendar, override))
    lines.extend(format_sprint_load(p, drift))

    if report.scope_changes is not None:
        lines.extend(format_scope_changes(p, report.scope_changes, report.remaining))

    if report.completed.issues:
        lines.append(
            f"\n{p.bright}Completed Issues ({p.green}"
            f"{format_points(report.completed.total_points)}{p.reset} points):{p.reset}"
        )
        lines.extend(
            _issue_line(p, i, p.green, indent="  ")
            for i in _by_points(report.completed.issues)
        )

    lines.append(format_finish_line_breakdown(p, report.completed, board.finish_line_statuses))
    lines.append(f"\n{p.bright}{p.yellow}{MARKER} {p.reset}{format_drift_line(p, drift)}")
    lines.append(f"{p.bright}{p.yellow}{MARKER} {p.reset}{format_risk_line(p, report.risk)}")

    lines.extend(
        [
            _section(p, "Sprint Details"),
            f"  {p.dim}Initial Sprint Points:{p.reset} {p.bright}"
            f"{format_points(drift.initial_total_points)}{p.reset}",
            f"  {p.green}Completed Points:{p.reset} {p.bright}"
            f"{format_points(drift.completed_points)}{p.reset}",
            f"  {p.red}Remaining Points:{p.reset} {p.bright}"
            f"{format_points(drift.current_remaining_points)}{p.reset}",
            f"  {p.dim}Burden Balance:{p.reset} {format_workload(p, report.remaining)}",
        ]
    )
    lines.append(format_business_days_breakdown(p, report.calendar))
    return "\n".join(lines)


def format_planning_report(report, p=PLAIN):
    """Render the grooming state of a sprint."""
    board = report.board
    grooming = report.grooming
    risk = report.risk

    pointed = {}
    unpointed = {}
    finish_line_unpointed = {}
    for status, issues in grooming.issues_by_status.items():
        for issue in issues:
            if issue.is_pointed:
                target = pointed
            elif status in board.finish_line_statuses:
                target = finish_line_unpointed
            else:
                target = unpointed
            target.setdefault(status, []).append(issue)

    lines = [_header(p, f'Planning: Board {board.id} "{report.sprint_name}"')]
    lines.extend(_warning_lines(p, report.warnings))

    lines.append(f"\n{p.bright}{p.yellow}UNGROOMED ISSUES (Unpointed):{p.reset}")
    if not unpointed:
        lines.append(f"{p.green}No unpointed issues that need grooming!{p.reset}")
    for status in sort_statuses(unpointed, board.status_order):
        lines.append(f"{p.yellow}{status}{p.reset}: {len(unpointed[status])} issues")
        for issue in unpointed[status]:
            lines.append(
                f"  {p.dim}- {issue.key}:{p.reset} "
                f"{truncate(issue.summary, PLANNING_SUMMARY_WIDTH)} ({issue.assignee})"
            )

    lines.append(f"\n{p.bright}{p.green}GROOMED ISSUES (Pointed):{p.reset}")
    if not pointed:
        lines.append(f"{p.yellow}No pointed issues yet.{p.reset}")
    for status in sort_statuses(pointed, board.status_order):
        issues = pointed[status]
        points = sum(i.points_or_zero for i in issues)
        lines.append(
            f"{p.green}{status}{p.reset}: {len(issues)} issues ({format_points(points)} points)"
        )
        for issue in issues:
            lines.append(
                f"  {p.dim}- {issue.key}{p.reset} [{p.bright}{format_points(issue.points)}"
                f"{p.reset}]: {truncate(issue.summary, PLANNING_SUMMARY_WIDTH)} "
                f"({issue.assignee})"
            )

    if finish_line_unpointed:
        lines.append(f"\n{p.bright}{p.blue}ESSENTIALLY DONE ISSUES (Not requiring points):{p.reset}")
        for status in sort_statuses(finish_line_unpointed, board.status_order):
            lines.append(
                f"{p.blue}{status}{p.reset}: {len(finish_line_unpointed[status])} issues"
            )
            for issue in finish_line_unpointed[status]:
                lines.append(
                    f"  {p.dim}- {issue.key}:{p.reset} "
                    f"{truncate(issue.summary, PLANNING_SUMMARY_WIDTH)} ({issue.assignee})"
                )

    pointed_points = sum(i.points_or_zero for issues in pointed.values() for i in issues)
    lines.extend(
        [
            _section(p, "SUMMARY"),
            f"  {p.green}GROOMED issues (with points): {risk.groomed_count} "
            f"({format_points(pointed_points)} points){p.reset}",
            f"  {p.yellow}UNGROOMED issues (need points): "
            f"{len(risk.unpointed_needing_grooming)}{p.reset}",
        ]
    )
    if risk.finish_line_unpointed:
        lines.append(
            f"  {p.blue}ESSENTIALLY DONE issues (no points needed): "
            f"{len(risk.finish_line_unpointed)}{p.reset}"
        )
    lines.append(f"  {p.bright}Total active issues: {grooming.total}{p.reset}")
    lines.append(f"  {p.bright}{p.yellow}{MARKER} {p.reset}{format_risk_line(p, risk)}")
    return "\n".join(lines)


def format_digest_report(board, progress=None, planning=None, p=PLAIN):
    """Render the key numbers of the progress and planning reports."""
    lines = []

    if progress is not None:
        lines.append(_header(p, f'Progress: Board {board.id} "{progress.sprint.name}"'))
        lines.extend(_warning_lines(p, progress.warnings))
        lines.append(format_drift_line(p, progress.drift))
        lines.append(f"{p.bright}Burden Balance:{p.reset} {format_workload(p, progress.remaining)}")
        lines.append(format_risk_line(p, progress.risk))

    if planning is not None:
        lines.append(_header(p, f'Planning: Board {board.id} "{planning.sprint_name}"'))
        lines.extend(_warning_lines(p, planning.warnings))
        lines.append(format_risk_line(p, planning.risk))

    return "\n".join(lines)


def sort_sprints(sprints):
    """Group sprints by state (active, future, closed), newest first."""
    state_rank = {state: rank for rank, state in enumerate(SPRINT_STATES)}
    undated = datetime.datetime.min.replace(tzinfo=datetime.timezone.utc)

    def start_key(sprint):
        if sprint.start is None:
            return undated
        if sprint.start.tzinfo is None:
            return sprint.start.replace(tzinfo=datetime.timezone.utc)
        return sprint.start

    newest_first = sorted(sprints, key=start_key, reverse=True)
    return sorted(newest_first, key=lambda s: state_rank.get(s.state, len(SPRINT_STATES)))


def format_sprints_list(board, sprints, active_sprint=None, p=PLAIN):
    """List the sprints of a board, grouped by state."""
    lines = [f"\n{p.bright}{p.cyan}Sprints for board {board.name}:{p.reset}"]
    if not sprints:
        lines.append(f"{p.yellow}No sprints found.{p.reset}")
        return "\n".join(lines)

    state_colors = {"active": p.green, "future": p.blue}
    current_state = None
    for sprint in sort_sprints(sprints):
        if sprint.state != current_state:
            current_state = sprint.state
            lines.append(_section(p, f"{current_state.upper()} SPRINTS"))

        is_active = active_sprint is not None and sprint.id == active_sprint.id
        indicator = f"{p.bright}{p.yellow}→ {p.reset}" if is_active else "  "
        start = sprint.start_date.isoformat() if sprint.start else "Unknown"
        end = sprint.end_date.isoformat() if sprint.end else "Unknown"

        lines.append(
            f"{indicator}{state_colors.get(sprint.state, p.dim)}{sprint.name}{p.reset}"
        )
        lines.append(f"   ID: {p.dim}{sprint.id}{p.reset}")
        lines.append(f"   Dates: {p.dim}{start} to {end}{p.reset}")

    lines.append(f"\n{p.dim}Use sprint names with the following commands:{p.reset}")
    lines.append(f'  {p.blue}report -b {board.id} --progress -s "<sprint name>"{p.reset}')
    lines.append(f'  {p.blue}report -b {board.id} --planning -s "<sprint name>"{p.reset}')
    return "\n".join(lines)


def format_boards_list(boards, default_board=None, p=PLAIN):
    """List the configured boards."""
    if not boards:
        return f"{p.yellow}No boards configured. Add boards to your config file.{p.reset}"

    lines = [f"\n{p.bright}{p.cyan}Configured Boards:{p.reset}", f"{p.dim}{'-' * 17}{p.reset}"]
    for board in boards:
        marker = f" {p.yellow}(default){p.reset}" if board.id == default_board else ""
        lines.append(f"{p.bright}{p.white}ID: {board.id}{p.reset}{marker}")
        lines.append(f"{p.blue}Name: {board.name}{p.reset}")
        if board.default_team_velocity:
            lines.append(
                f"{p.green}Team Velocity: {format_points(board.default_team_velocity)} "
                f"points per sprint{p.reset}"
            )
        lines.append(f"  {p.dim}Story Points: {board.story_points_field}{p.reset}")
        lines.append(f"  {p.green}Groomed Statuses: {', '.join(board.groomed_statuses)}{p.reset}")
        lines.append(
            f"  {p.yellow}Ungroomed Statuses: {', '.join(board.ungroomed_statuses)}{p.reset}"
        )
        if board.finish_line_statuses:
            lines.append(
                f"  {p.dim}Finish Line Statuses: "
                f"{', '.join(sorted(board.finish_line_statuses))}{p.reset}"
            )
        lines.append("")
    return "\n".join(lines)


def format_debug_report(board, sprints, active_sprint, probe, statuses, p=PLAIN):
    """Render the recent sprints, the story points probe and the statuses of a board."""
    lines = [
        f"\n{p.bright}{p.cyan}Debugging board: {board.name}{p.reset}",
        f"\n{p.bright}{p.white}=== Available Sprints ==={p.reset}",
        f"{p.bright}Found {len(sprints)} sprints{p.reset}",
    ]
    state_colors = {"active": p.green, "future": p.blue}
    for sprint in sorted(sprints, key=lambda s: -s.id)[:RECENT_SPRINTS]:
        is_active = active_sprint is not None and sprint.id == active_sprint.id
        marker = f"{p.yellow}→ {p.reset}" if is_active else "  "
        lines.append(
            f"{marker}{sprint.name} ({p.dim}ID: {sprint.id}, State: "
            f"{state_colors.get(sprint.state, p.dim)}{sprint.state}{p.reset})"
        )

    lines.append(f"\n{p.bright}{p.white}=== Fields ==={p.reset}")
    lines.append(f'Using story points field: "{p.bright}{board.story_points_field}{p.reset}"')
    if probe is None or probe.issue_key is None:
        lines.append(f"{p.yellow}No issues found to test story points field{p.reset}")
    else:
        lines.append(f"Testing with issue: {p.blue}{probe.issue_key}{p.reset}")
        if probe.found:
            lines.append(
                f"{p.green}✓ Story points field found with value: "
                f"{p.bright}{probe.value}{p.reset}"
            )
        else:
            lines.append(f"{p.red}✗ Story points field NOT found. Possible fields:{p.reset}")
            for name, value in probe.candidates.items():
                lines.append(f"  - {name}: {value}")

    lines.append(f"\n{p.bright}{p.white}=== Statuses ==={p.reset}")
    lines.append(f"{p.green}Groomed statuses:{p.reset} {', '.join(board.groomed_statuses)}")
    lines.append(f"{p.yellow}Ungroomed statuses:{p.reset} {', '.join(board.ungroomed_statuses)}")
    if statuses is not None:
        lines.append(f"\n{p.dim}All available statuses:{p.reset}")
        lines.append(", ".join(statuses))
        for label, configured in (
            ("groomed", board.groomed_statuses),
            ("ungroomed", board.ungroomed_statuses),
            ("finish line", sorted(board.finish_line_statuses)),
        ):
            missing = [s for s in configured if s not in statuses]
            if missing:
                lines.append(f"{p.red}✗ Missing {label} statuses: {', '.join(missing)}{p.reset}")
            else:
                lines.append(f"{p.green}✓ All {label} statuses exist{p.reset}")
    return "\n".join(lines)
