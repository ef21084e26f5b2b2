import argparse
import datetime
import logging
import os
import sys

from dotenv import load_dotenv

from .calculators.drift import resolve_time_shift
from .config import ConfigError, config_to_options, find_config_file
from .formatting import (
    format_boards_list,
    format_debug_report,
    format_digest_report,
    format_planning_report,
    format_progress_report,
    format_sprints_list,
    palette,
)
from .jira_client import create_jira_client
from .models import FieldProbe
from .querymanager import QueryError, QueryManager
from .reports import build_planning_report, build_progress_report

load_dotenv()

logger = logging.getLogger(__name__)

COMMANDS = ("report", "boards", "sprints", "debug")
DEFAULT_COMMAND = "report"
GLOBAL_OPTIONS_WITH_VALUES = ("-c", "--config", "--domain", "--email", "--api-token")
POINTS_FIELD_HINTS = ("point", "story", "estimate")
DEBUG_SPRINT_LIMIT = 5


def configure_argument_parser():
    """Configure an ArgumentParser that manages command line options."""

    parser = argparse.ArgumentParser(
        prog="jira-sprint-metrics",
        description="Calculate sprint health metrics (drift, risk, scope changes) from JIRA.",
    )

    # Basic options
    parser.add_argument(
        "-c", "--config", metavar="jira-config.yml", help="Configuration file"
    )
    parser.add_argument("-v", dest="verbose", action="store_true", help="Verbose output")
    parser.add_argument(
        "-vv",
        dest="very_verbose",
        action="store_true",
        help="Even more verbose output",
    )

    # Connection options
    parser.add_argument("--domain", metavar="https://my.atlassian.net", help="JIRA site URL")
    parser.add_argument("--email", metavar="me@example.com", help="JIRA account email")
    parser.add_argument("--api-token", metavar="token", help="JIRA API token")

    subparsers = parser.add_subparsers(dest="command")

    report = subparsers.add_parser("report", help="Generate sprint metrics reports (default)")
    report.add_argument("-b", "--board", type=int, help="JIRA board id")
    report.add_argument("--progress", action="store_true", help="Generate a progress report")
    report.add_argument("--planning", action="store_true", help="Generate a planning report")
    report.add_argument(
        "--digest",
        action="store_true",
        help="Generate a condensed digest (implies progress and planning)",
    )
    report.add_argument("-s", "--sprint", metavar="NAME", help="Sprint name for both reports")
    report.add_argument(
        "-a", "--active", action="store_true", help="Use the active sprint for both reports"
    )
    report.add_argument(
        "-n", "--next", action="store_true", help="Use the next sprint for the planning report"
    )
    report.add_argument(
        "--progress-sprint", metavar="NAME", help="Sprint name for the progress report"
    )
    report.add_argument(
        "--planning-sprint", metavar="NAME", help="Sprint name for the planning report"
    )
    report.add_argument(
        "--progress-active",
        action="store_true",
        help="Use the active sprint for the progress report",
    )
    report.add_argument(
        "--planning-active",
        action="store_true",
        help="Use the active sprint for the planning report",
    )
    report.add_argument(
        "--planning-next",
        action="store_true",
        help="Use the next sprint for the planning report",
    )
    report.add_argument(
        "--time-shift",
        metavar="N",
        type=int,
        help="Shift the report date by N business days (negative moves backward)",
    )
    report.add_argument(
        "--future-days", metavar="N", type=int, help="Deprecated, use --time-shift"
    )

    subparsers.add_parser("boards", help="List the configured boards")

    sprints = subparsers.add_parser("sprints", help="List the sprints of a board")
    sprints.add_argument("-b", "--board", type=int, help="JIRA board id")
    sprints.add_argument(
        "-s",
        "--state",
        choices=("active", "future", "closed", "all"),
        default="all",
        help="Only list sprints in this state",
    )

    debug = subparsers.add_parser("debug", help="Check sprints, fields and statuses of a board")
    debug.add_argument("-b", "--board", type=int, help="JIRA board id")

    for subparser in (report, sprints, debug, subparsers.choices["boards"]):
        subparser.add_argument("--no-color", action="store_true", help="Disable colored output")

    return parser


def with_default_command(argv):
    """Insert the `report` command when no command is given."""
    argv = list(argv)
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg in GLOBAL_OPTIONS_WITH_VALUES:
            i += 2
        elif arg in ("-v", "-vv") or arg.split("=", 1)[0] in GLOBAL_OPTIONS_WITH_VALUES:
            i += 1
        else:
            break

    if i < len(argv) and argv[i] in COMMANDS + ("-h", "--help"):
        return argv
    return argv[:i] + [DEFAULT_COMMAND] + argv[i:]


def main(argv=None):
    parser = configure_argument_parser()
    args = parser.parse_args(with_default_command(sys.argv[1:] if argv is None else argv))

    logging.basicConfig(
        format="[%(asctime)s %(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        level=(
            logging.DEBUG
            if args.very_verbose
            else logging.INFO if args.verbose else logging.WARNING
        ),
    )

    p = palette(use_colors(args))

    try:
        options = load_options(args.config)
    except ConfigError as e:
        print_error(p, e)
        return 1

    # Allow command line arguments to override options
    override_options(options["connection"], args)

    if args.command == "boards":
        print(
            format_boards_list(
                list(options["boards"].values()), options["default_board"], p
            )
        )
        return 0

    try:
        board = resolve_board(options, args.board)
        jira = create_jira_client(options["connection"])
    except ConfigError as e:
        print_error(p, e)
        return 1

    query_manager = QueryManager(jira, options["settings"])

    if args.command == "sprints":
        return run_sprints(args, query_manager, board, p)
    if args.command == "debug":
        return run_debug(query_manager, board, p)
    return run_report(args, query_manager, board, p)


def use_colors(args):
    """Colors are used on terminals unless disabled with --no-color or NO_COLOR."""
    if getattr(args, "no_color", False) or "NO_COLOR" in os.environ:
        return False
    return sys.stdout.isatty()


def print_error(p, error):
    print(f"{p.red}Error: {error}{p.reset}", file=sys.stderr)


def load_options(config_path=None):
    """Read and parse the configuration file, searching the default locations."""
    path = config_path or find_config_file()
    if path is None:
        raise ConfigError(
            "No configuration file found. Create `jira-config.yml` in the current "
            "directory or `~/.jira-sprint-metrics/config.yml`, or pass --config."
        )

    logger.debug("Parsing options from %s", path)
    try:
        with open(path) as config:
            return config_to_options(config.read())
    except FileNotFoundError as e:
        raise ConfigError(f"Configuration file `{path}` not found") from e


def override_options(options, arguments):
    """Update `options` dict with settings from `arguments`
    with the same key.
    """
    for key in options.keys():
        if getattr(arguments, key, None) is not None:
            options[key] = getattr(arguments, key)


def resolve_board(options, board_id=None):
    """Return the configuration of `board_id`, or of the default board."""
    if board_id is None:
        board_id = options["default_board"]
    if board_id is None:
        raise ConfigError("No board given; use -b or set `Default board` in the configuration")
    if board_id not in options["boards"]:
        raise ConfigError(f"Board {board_id} not found in configuration")
    return options["boards"][board_id]


# Report


def select_progress_sprint(args, query_manager, board, p):
    """Find the sprint for the progress report, printing why if there is none."""
    if args.progress_sprint or (args.sprint and not args.progress_active):
        name = args.progress_sprint or args.sprint
        sprint = query_manager.find_sprint(board.id, name)
        if sprint is None:
            print_error(p, f'Sprint "{name}" not found for progress report')
        return sprint

    if args.progress_active or args.active:
        sprint = query_manager.active_sprint(board.id)
        if sprint is None:
            print_error(p, f"No active sprint found for board {board.id}")
        return sprint

    print_error(
        p,
        "No sprint specified for progress report. "
        "Use -s, -a, --progress-sprint or --progress-active.",
    )
    return None


def select_planning_sprint_name(args, query_manager, board, p):
    """Find the sprint name for the planning report, printing why if there is none."""
    if args.planning_sprint:
        return args.planning_sprint

    if args.planning_next or args.next:
        sprint = query_manager.next_sprint(board.id)
        if sprint is None:
            print_error(p, f"No future sprints found for board {board.id}")
            return None
        logger.info("Using next sprint for planning: %s", sprint.name)
        return sprint.name

    if args.planning_active:
        sprint = query_manager.active_sprint(board.id)
        if sprint is None:
            print_error(p, f"No active sprint found for board {board.id}")
            return None
        return sprint.name

    if args.sprint:
        return args.sprint

    if args.active:
        sprint = query_manager.active_sprint(board.id)
        if sprint is None:
            print_error(p, f"No active sprint found for board {board.id}")
            return None
        return sprint.name

    print_error(
        p,
        "No sprint specified for planning report. "
        "Use -s, -a, -n, --planning-sprint, --planning-active or --planning-next.",
    )
    return None


def run_report(args, query_manager, board, p, today=None):
    time_shift = resolve_time_shift(args.time_shift, args.future_days)

    if args.digest:
        args.progress = True
        if not (
            args.planning
            or args.planning_sprint
            or args.planning_active
            or args.planning_next
        ):
            args.next = True

    want_progress = args.progress or args.progress_active or bool(args.progress_sprint)
    want_planning = (
        args.planning
        or args.planning_active
        or args.planning_next
        or args.next
        or bool(args.planning_sprint)
    )

    if not want_progress and not want_planning:
        print(
            f"{p.yellow}No report type specified. Use --progress, --planning "
            f"or --digest.{p.reset}"
        )
        return 1

    progress = planning = None
    failed = False

    if want_progress:
        try:
            sprint = select_progress_sprint(args, query_manager, board, p)
            if sprint is not None:
                progress = build_progress_report(
                    query_manager,
                    board,
                    sprint,
                    today=today or datetime.date.today(),
                    time_shift=time_shift,
                )
        except (ConfigError, QueryError) as e:
            print_error(p, e)
        failed = progress is None

    if want_planning:
        try:
            sprint_name = select_planning_sprint_name(args, query_manager, board, p)
            if sprint_name is not None:
                planning = build_planning_report(query_manager, board, sprint_name)
        except (ConfigError, QueryError) as e:
            print_error(p, e)
        failed = failed or planning is None

    if args.digest:
        if progress is not None or planning is not None:
            print(format_digest_report(board, progress, planning, p))
    else:
        if progress is not None:
            print(format_progress_report(progress, p))
        if planning is not None:
            print(format_planning_report(planning, p))

    return 1 if failed else 0


# Sprints


def run_sprints(args, query_manager, board, p):
    state = "active,future,closed" if args.state == "all" else args.state
    try:
        sprints = query_manager.fetch_sprints(board.id, state=state)
        active = query_manager.active_sprint(board.id)
    except QueryError as e:
        print_error(p, e)
        return 1

    print(format_sprints_list(board, sprints, active, p))
    return 0


# Debug


def probe_points_field(query_manager, board, sprints):
    """Look for the story points field on an issue of the most recent sprint."""
    field_id = query_manager.resolve_points_field(board.story_points_field)
    for sprint in sorted(sprints, key=lambda s: -s.id)[:DEBUG_SPRINT_LIMIT]:
        sample = query_manager.sample_issue(sprint.name)
        if sample is None:
            continue

        key, fields = sample
        if fields.get(field_id) is not None:
            return FieldProbe(field_id, key, found=True, value=fields[field_id])
        return FieldProbe(
            field_id,
            key,
            candidates={
                name: value
                for name, value in fields.items()
                if any(hint in name.lower() for hint in POINTS_FIELD_HINTS)
            },
        )
    return FieldProbe(field_id)


def run_debug(query_manager, board, p):
    try:
        sprints = query_manager.fetch_sprints(board.id)
        active = query_manager.active_sprint(board.id)
        probe = probe_points_field(query_manager, board, sprints)
        statuses = query_manager.statuses()
    except (ConfigError, QueryError) as e:
        print_error(p, e)
        return 1

    print(format_debug_report(board, sprints, active, probe, statuses, p))
    return 0


if __name__ == "__main__":
    sys.exit(main())
