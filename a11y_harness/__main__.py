"""Command-line interface for scanning sites and merging their results."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .collectors.selenium_collector import SeleniumCollector
from .config import HarnessSettings
from .consolidate import Consolidator
from .dedupe import Strategy
from .errors import ConsolidationError
from .pipeline import CollectionPipeline, summarize
from .sites import DEFAULT_PROFILES, SITES, get_profiles, get_site


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    settings = HarnessSettings.from_env()
    parser = argparse.ArgumentParser(description="Accessibility scan harness")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    commands = parser.add_subparsers(dest="command", required=True)

    scan = commands.add_parser("scan", help="Scan every page of a site with axe-core")
    scan.add_argument("site", choices=sorted(SITES))
    scan.add_argument(
        "--browser",
        action="append",
        dest="browsers",
        choices=[profile.name for profile in DEFAULT_PROFILES],
        help="Browser profile to scan with (repeatable, default: all)",
    )
    scan.add_argument(
        "--output-dir",
        type=Path,
        default=settings.output_dir,
        help="Directory to store result spreadsheets",
    )
    scan.add_argument("--workers", type=int, default=1, help="Pages scanned in parallel")
    scan.add_argument(
        "--timeout", type=int, default=settings.page_timeout, help="Page load timeout in seconds"
    )

    merge = commands.add_parser("merge", help="Build master-list.xlsx and work-list.xlsx")
    merge.add_argument(
        "--directory",
        type=Path,
        default=settings.output_dir,
        help="Directory holding the result spreadsheets",
    )
    merge.add_argument(
        "--strategy", choices=[item.value for item in Strategy], default=Strategy.KEYED.value
    )
    merge.add_argument(
        "--no-sort",
        action="store_true",
        help="Merge files in directory listing order instead of by name",
    )

    commands.add_parser("sites", help="List the configured sites")
    return parser.parse_args(argv)


def run_scan(args: argparse.Namespace) -> int:
    site = get_site(args.site)
    pipeline = CollectionPipeline(
        site,
        get_profiles(args.browsers),
        collector=SeleniumCollector(timeout=args.timeout),
        output_dir=args.output_dir,
        workers=args.workers,
    )
    report = pipeline.run()
    for line in summarize(report):
        print(line)
    print(
        f"{len(report.with_violations)} pages with violations, "
        f"{len(report.failures)} failed visits out of {len(report.visits)}"
    )
    print(f"Spreadsheets written to {Path(args.output_dir).resolve()}")
    return 0 if report.passed else 1


def run_merge(args: argparse.Namespace) -> int:
    consolidator = Consolidator(
        args.directory, strategy=args.strategy, sort_files=not args.no_sort
    )
    try:
        result = consolidator.run()
    except (ConsolidationError, OSError) as exc:
        logging.getLogger(__name__).error("%s", exc)
        return 1
    print(f"Master list: {result.master_count} violations ({result.master_path})")
    print(f"Work list: {result.work_list_count} unique violations ({result.work_list_path})")
    print(f"Duplicates removed: {result.duplicates_removed}")
    for path, reason in result.skipped_files:
        print(f"Skipped {path.name}: {reason}")
    return 0


def run_sites() -> int:
    for name, site in sorted(SITES.items()):
        print(f"{name:<10} {site.base_url} ({len(site.slugs)} pages)")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.command == "scan":
        return run_scan(args)
    if args.command == "merge":
        return run_merge(args)
    return run_sites()


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
