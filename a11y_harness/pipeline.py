"""Collection pipeline: visit every page of a site, scan it, write its results."""
from __future__ import annotations

import concurrent.futures
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from .audits.accessibility import AxeScanner
from .collectors.selenium_collector import PageScan, SeleniumCollector
from .errors import HarnessError, ResultWriteError
from .records import ViolationRecord, flatten_violations
from .sites import DEFAULT_PROFILES, BrowserProfile, SiteConfig
from .spreadsheets import ResultWriter

logger = logging.getLogger(__name__)


class PageCollector(Protocol):
    def collect(self, url: str, profile: BrowserProfile, *, scanner: AxeScanner) -> PageScan:
        ...


@dataclass
class PageVisit:
    """Outcome of scanning one page in one browser profile."""

    slug: str
    url: str
    browser: str
    records: List[ViolationRecord] = field(default_factory=list)
    violation_count: int = 0
    output_path: Optional[Path] = None
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def passed(self) -> bool:
        return not self.failed and self.violation_count == 0


@dataclass
class CollectionReport:
    """Every visit of a run, in configured order."""

    site: str
    visits: List[PageVisit]

    @property
    def failures(self) -> List[PageVisit]:
        return [visit for visit in self.visits if visit.failed]

    @property
    def with_violations(self) -> List[PageVisit]:
        return [visit for visit in self.visits if visit.violation_count]

    @property
    def passed(self) -> bool:
        return all(visit.passed for visit in self.visits)

    @property
    def written(self) -> List[Path]:
        return [visit.output_path for visit in self.visits if visit.output_path is not None]


class CollectionPipeline:
    """Scans a site's pages across browser profiles and writes one file per page."""

    def __init__(
        self,
        site: SiteConfig,
        profiles: Optional[Sequence[BrowserProfile]] = None,
        *,
        collector: Optional[PageCollector] = None,
        writer: Optional[ResultWriter] = None,
        output_dir: Path = Path("spreadsheets"),
        workers: int = 1,
    ) -> None:
        self.site = site
        self.profiles = list(profiles or DEFAULT_PROFILES)
        self.collector = collector or SeleniumCollector()
        self.writer = writer or ResultWriter(output_dir)
        self.workers = max(workers, 1)
        self.scanner = AxeScanner(exclude=site.exclude, disabled_rules=site.disabled_rules)

    def visit(self, slug: str, profile: BrowserProfile) -> PageVisit:
        """Scan one page; errors are recorded on the returned visit, not raised."""
        url = self.site.url_for(slug)
        visit = PageVisit(slug=slug, url=url, browser=profile.name)
        try:
            scan = self.collector.collect(url, profile, scanner=self.scanner)
            records = flatten_violations(scan.results, page=slug, device=scan.user_agent)
        except HarnessError as exc:
            logger.error("Visit of %s using %s failed: %s", url, profile.name, exc)
            visit.error = str(exc)
            return visit

        visit.records = records
        visit.violation_count = len(records)
        if not records:
            logger.info("No accessibility violations found on %s using %s", url, profile.name)
            return visit

        logger.info("Found %d violations on %s using %s", len(records), url, profile.name)
        name = self.site.result_name(slug, profile)
        try:
            visit.output_path = self.writer.write(name, records)
        except ResultWriteError as exc:
            logger.error("Error writing spreadsheet for %s: %s", slug or "home", exc)
        return visit

    def run(self, slugs: Optional[Sequence[str]] = None) -> CollectionReport:
        slugs = list(self.site.slugs if slugs is None else slugs)
        jobs = [(slug, profile) for slug in slugs for profile in self.profiles]
        logger.info(
            "Testing %d pages across %d browsers (%d visits) on %s",
            len(slugs),
            len(self.profiles),
            len(jobs),
            self.site.base_url,
        )

        if self.workers == 1:
            visits = [self.visit(slug, profile) for slug, profile in jobs]
        else:
            with concurrent.futures.ThreadPoolExecutor(max_workers=self.workers) as pool:
                visits = list(pool.map(lambda job: self.visit(*job), jobs))

        report = CollectionReport(site=self.site.name, visits=visits)
        logger.info(
            "%d of %d visits passed, %d failed, %d files written",
            sum(1 for visit in visits if visit.passed),
            len(visits),
            len(report.failures),
            len(report.written),
        )
        return report


def summarize(report: CollectionReport) -> List[str]:
    lines: List[str] = []
    for visit in report.visits:
        if visit.failed:
            status = f"ERROR  {visit.error}"
        elif visit.violation_count:
            status = f"FAIL   {visit.violation_count} violations"
        else:
            status = "PASS"
        lines.append(f"{status:<40} {visit.url} [{visit.browser}]")
    return lines
