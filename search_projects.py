"""
Municipal Project Funding - Search Tool

Browse live projects on the funding API from the command line: filter the
listing, look a project up by reference, show slider calibration, list a
user's favorites, download an attached file, and export results.

Connection settings come from the environment (see utils.config.ClientConfig):
FUNDING_API_BASE_URL, FUNDING_API_TOKEN, FUNDING_API_TIMEOUT, APP_LOG_FORMAT.

Usage:
    python search_projects.py "water supply"
    python search_projects.py --category Water --state Maharashtra
    python search_projects.py --min-funding 10 --max-funding 500
    python search_projects.py PROJ-2025-00037
    python search_projects.py --advanced --min-requirement 10 --max-requirement 500
    python search_projects.py --ranges
    python search_projects.py --favorites lender42
    python search_projects.py --download 118 ./report.pdf
    python search_projects.py "metro" --export xlsx --output metro.xlsx
"""

import argparse
import logging
import sys
import textwrap
from pathlib import Path

from client.endpoints import documents, favorites, projects
from client.errors import FundingClientError
from client.models import AdvancedFilterState, FilterState
from client.session import ApiClient
from utils.config import ClientConfig, KnownValues
from utils.export import EXPORT_FORMATS, export_projects
from utils.formatting import TableFormatter, format_currency, format_date, format_percent
from utils.funding import days_left, fundraising_end, project_progress
from utils.log import configure_logging
from utils.query import count_active_filters, is_reference_id

logger = logging.getLogger("search_projects")


# ── Display ───────────────────────────────────────────────────────────────────

def display_projects(items: list, title: str) -> None:
    if not items:
        print(f"\n  No projects found for: {title}")
        return

    print(f"\n{'=' * 90}")
    print(f"  PROJECTS ({len(items)} results) - {title}")
    print(f"{'=' * 90}")
    table = TableFormatter(
        ["Reference", "Title", "State", "Gap", "Committed", "Progress", "Days Left"],
        max_width=36,
    )
    for p in items:
        table.add_row([
            p.project_reference_id,
            p.title,
            p.state,
            format_currency(p.commitment_gap),
            format_currency(p.total_committed_amount),
            format_percent(project_progress(p)),
            days_left(fundraising_end(p)),
        ])
    print(table.to_string())


def display_favorites(items: list, user_id: str) -> None:
    if not items:
        print(f"\n  No favorites for user {user_id}")
        return
    table = TableFormatter(["Reference", "Title", "Raised", "Required", "Ends"])
    for f in items:
        table.add_row([
            f.project_reference_id,
            f.display_title,
            format_currency(f.current_funding),
            format_currency(f.required_funding),
            format_date(fundraising_end(f)),
        ])
    print(table.to_string())


def display_ranges(ranges) -> None:
    print("=" * 50)
    print("  FILTER RANGES (crores)")
    print("=" * 50)
    for name in ("fund_requirement", "commitment_gap", "project_cost"):
        r = getattr(ranges, name)
        print(f"  {name:<20} {r.min:>10,.2f} {r.max:>12,.2f}")


# ── CLI ───────────────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Search municipal projects on the funding API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""
            Examples:
              python search_projects.py "water supply"
              python search_projects.py --category Water --status live
              python search_projects.py PROJ-2025-00037
              python search_projects.py --advanced --stage planning
              python search_projects.py --ranges
              python search_projects.py "metro" --export csv
        """),
    )
    parser.add_argument("query", nargs="?", default="",
                        help="Search text or a project reference (PROJ-YYYY-NNNNN)")
    parser.add_argument("--category", action="append", default=[],
                        help="Filter by category (repeatable)")
    parser.add_argument("--state", action="append", default=[],
                        help="Filter by state (repeatable)")
    parser.add_argument("--status", action="append", default=[],
                        help="Filter by status (repeatable; default: active)")
    parser.add_argument("--min-funding", type=float, default=None,
                        help="Minimum funding in crores")
    parser.add_argument("--max-funding", type=float, default=None,
                        help="Maximum funding in crores")
    parser.add_argument("--min-progress", type=float, default=None)
    parser.add_argument("--max-progress", type=float, default=None)
    parser.add_argument("--max-days-left", type=float, default=None,
                        help="Only projects closing within this many days")
    parser.add_argument("--user", default=None,
                        help="User id sent with listing requests")
    parser.add_argument("--top", type=int, default=None,
                        help="Number of results (default: FUNDING_PAGE_SIZE or 10)")

    advanced = parser.add_argument_group("advanced search")
    advanced.add_argument("--advanced", action="store_true",
                          help="Use the advanced search filters")
    advanced.add_argument("--stage", default="", help="Project stage")
    advanced.add_argument("--credit-rating", default="", help="Municipality credit rating")
    advanced.add_argument("--min-requirement", type=float, default=None,
                          help="Minimum funding requirement in crores")
    advanced.add_argument("--max-requirement", type=float, default=None,
                          help="Maximum funding requirement in crores")

    parser.add_argument("--ranges", action="store_true",
                        help="Show filter value ranges reported by the server")
    parser.add_argument("--project", default=None,
                        help="Show a single project by numeric id")
    parser.add_argument("--favorites", metavar="USER", default=None,
                        help="List a user's favorite projects")
    parser.add_argument("--download", nargs=2, metavar=("FILE_ID", "DEST"), default=None,
                        help="Download an attached file")
    parser.add_argument("--export", choices=EXPORT_FORMATS, default=None,
                        help="Export the listed projects")
    parser.add_argument("--output", type=Path, default=None,
                        help="Export path (default: projects.<format>)")
    return parser


def filters_from_args(args: argparse.Namespace) -> FilterState:
    lo_f, hi_f = KnownValues.DEFAULT_FUNDING_RANGE
    lo_p, hi_p = KnownValues.DEFAULT_PROGRESS_RANGE
    lo_d, hi_d = KnownValues.DEFAULT_DAYS_LEFT_RANGE
    return FilterState(
        search=args.query,
        categories=args.category,
        states=args.state,
        status=args.status,
        funding_range=(
            args.min_funding if args.min_funding is not None else lo_f,
            args.max_funding if args.max_funding is not None else hi_f,
        ),
        progress_range=(
            args.min_progress if args.min_progress is not None else lo_p,
            args.max_progress if args.max_progress is not None else hi_p,
        ),
        days_left_range=(lo_d, args.max_days_left if args.max_days_left is not None else hi_d),
    )


def advanced_filters_from_args(args: argparse.Namespace, ranges) -> AdvancedFilterState:
    state = AdvancedFilterState.from_value_ranges(
        ranges,
        project_reference_id=args.query,
        location=args.state[0] if args.state else "",
        project_category=args.category[0] if args.category else "",
        project_stage=args.stage,
        status=args.status[0] if args.status else "",
        credit_score=args.credit_rating,
    )
    lo, hi = state.fund_requirement
    return state.model_copy(update={"fund_requirement": (
        args.min_requirement if args.min_requirement is not None else lo,
        args.max_requirement if args.max_requirement is not None else hi,
    )})


def run(args: argparse.Namespace, api: ApiClient) -> int:
    if args.ranges:
        display_ranges(projects.get_value_ranges(api))
        return 0

    if args.project:
        project = projects.get_project(api, args.project, include_documents=True)
        display_projects([project] if project else [], f"id {args.project}")
        return 0

    if args.favorites:
        display_favorites(favorites.list_favorite_projects(api, args.favorites, args.query),
                          args.favorites)
        return 0

    if args.download:
        file_id, dest = args.download
        path = documents.download_file(api, file_id, Path(dest))
        print(f"\n  Saved file {file_id} to {path}")
        return 0

    if args.advanced:
        ranges = projects.get_value_ranges(api)
        filters = advanced_filters_from_args(args, ranges)
        items = projects.list_projects(api, filters, ranges, limit=args.top)
        active = count_active_filters(filters, ranges)
    elif is_reference_id(args.query):
        items = projects.search_projects(api, args.query, user_id=args.user, limit=args.top)
        active = 1
    else:
        filters = filters_from_args(args)
        items = projects.list_projects(api, filters, user_id=args.user, limit=args.top)
        active = count_active_filters(filters)

    label = args.query or f"{active} filter{'s' if active != 1 else ''} active"
    display_projects(items, label)

    if args.export:
        out = args.output or Path(f"projects.{args.export}")
        export_projects(items, out, args.export, filter_summary=label,
                        source_url=api.url_for("/projects"))
        print(f"\n  Exported {len(items)} project(s) to {out}")
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config = ClientConfig.from_env()
    configure_logging(config.log_format, config.log_level)

    if args.top is None:
        args.top = config.page_size

    with ApiClient.from_config(config) as api:
        try:
            return run(args, api)
        except FundingClientError as e:
            logger.error("%s", e)
            print(f"ERROR: {e}", file=sys.stderr)
            return 1


if __name__ == "__main__":
    sys.exit(main())
