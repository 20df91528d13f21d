"""
Region 1 Project Explorer

Command-line view of the dashboard: loads the projects from the data service
(or the built-in sample data), applies filters exactly as the map dashboard
would, and prints the visible projects, option counts and the popup of a
focused project.

Usage:
    python explore_projects.py                           # all visible projects
    python explore_projects.py --province "La Union" --province Pangasinan
    python explore_projects.py --status Completed --year 2023
    python explore_projects.py --search coffee
    python explore_projects.py --focus PJ001 --offline
    python explore_projects.py --counts status
"""

from __future__ import annotations

import argparse
import logging
import sys

from mapstate.dashboard import Dashboard
from mapstate.filters import ALL, Dimension
from mapstate.legend import marker_color, popup_fields, sector_icon
from mapstate.repository import ProjectRepository, fallback_result
from mapstate.scheduler import ManualScheduler
from mapstate.widget import InMemoryMapWidget
from utils.config import AppConfig
from utils.formatting import TableFormatter, format_count, text_or_placeholder, truncate_text

logger = logging.getLogger(__name__)


def build_dashboard(cfg: AppConfig, offline: bool = False) -> tuple[Dashboard, ManualScheduler]:
    """Create a headless dashboard and load it from the service or sample data."""
    scheduler = ManualScheduler()
    dashboard = Dashboard(InMemoryMapWidget(), scheduler)
    if offline:
        result = fallback_result(error=None)
    else:
        repo = ProjectRepository.from_config(cfg)
        try:
            result = repo.load()
        finally:
            repo.close()
    dashboard.load(result)
    return dashboard, scheduler


def apply_filters(dashboard: Dashboard, args: argparse.Namespace) -> None:
    if args.province:
        dashboard.select_provinces(args.province)
    if args.status:
        dashboard.select_statuses(args.status)
    if args.sector:
        dashboard.select_sector(args.sector)
    if args.year:
        dashboard.select_year(args.year)


def project_table(projects) -> str:
    table = TableFormatter(["No.", "Title", "Firm", "Status", "Year", "Province", "Sector"])
    for p in projects:
        table.add_row([
            p.id,
            truncate_text(p.title, 40),
            truncate_text(p.firm_name, 30),
            text_or_placeholder(p.status),
            text_or_placeholder(p.year),
            text_or_placeholder(p.province),
            f"{sector_icon(p.sector)} {text_or_placeholder(p.sector)}",
        ])
    return table.to_string()


def counts_table(dashboard: Dashboard, dimension: Dimension) -> str:
    table = TableFormatter([dimension.value.title(), "Projects"])
    for option, n in dashboard.option_counts(dimension).items():
        label = "All" if option is ALL else option
        table.add_row([label, format_count(n)])
    return table.to_string()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Explore Region 1 assistance projects")
    parser.add_argument("--api", default=None, metavar="URL",
                        help="Data service base URL (default: APP_API_BASE_URL)")
    parser.add_argument("--offline", action="store_true",
                        help="Use the built-in sample projects instead of the service")
    parser.add_argument("--province", action="append", metavar="NAME",
                        help="Province filter (repeatable)")
    parser.add_argument("--status", action="append", metavar="STATUS",
                        help="Status filter (repeatable)")
    parser.add_argument("--sector", help="Sector filter")
    parser.add_argument("--year", help="Year filter")
    parser.add_argument("--search", metavar="TEXT",
                        help="Show search suggestions for TEXT")
    parser.add_argument("--focus", metavar="PROJECT_NO",
                        help="Focus a project and print its popup")
    parser.add_argument("--counts", choices=[d.value for d in Dimension],
                        help="Print option counts for a filter dimension")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log at DEBUG level")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    cfg = AppConfig.from_env()
    if args.api:
        cfg.api_base_url = args.api

    dashboard, scheduler = build_dashboard(cfg, offline=args.offline)
    if dashboard.error:
        print(f"Warning: {dashboard.error}")

    apply_filters(dashboard, args)
    visible = dashboard.filtered_projects
    chips = ", ".join(f"{d.value}={v}" for d, v in dashboard.applied_chips()) or "none"
    print(f"Filters: {chips}")
    print(f"{format_count(len(visible))} of {format_count(len(dashboard.projects))} projects\n")
    print(project_table(visible))

    if args.counts:
        print()
        print(counts_table(dashboard, Dimension(args.counts)))

    if args.search:
        print(f"\nSuggestions for {args.search!r}:")
        suggestions = dashboard.search_query_changed(args.search)
        if not suggestions:
            print("  (no matches)")
        for p in suggestions:
            print(f"  {p.id}  {p.title} - {p.firm_name}")

    if args.focus:
        if not dashboard.marker_clicked(args.focus):
            print(f"\nProject {args.focus} is not visible with the current filters.")
            return 1
        scheduler.run_all()
        project = dashboard.focused_project
        snap = dashboard.controller.snapshot()
        print(f"\n{project.id} [{marker_color(project.status)}] "
              f"state={snap.state.name} zoom={snap.zoom:g}")
        for label, value in popup_fields(project):
            print(f"  {label + ':':<20}{value}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
