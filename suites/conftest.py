"""Per-site accessibility suites: ``pytest suites --site tfg``."""
from __future__ import annotations

import pytest

from a11y_harness.collectors.selenium_collector import SeleniumCollector
from a11y_harness.config import HarnessSettings
from a11y_harness.pipeline import CollectionPipeline
from a11y_harness.sites import SITES, get_profiles, get_site


def pytest_addoption(parser):
    group = parser.getgroup("a11y")
    group.addoption("--site", choices=sorted(SITES), default="tfg", help="Site to scan")
    group.addoption(
        "--browser",
        action="append",
        dest="browsers",
        default=None,
        help="Browser profile to scan with (repeatable, default: all)",
    )


def pytest_generate_tests(metafunc):
    if "slug" in metafunc.fixturenames and "profile" in metafunc.fixturenames:
        site = get_site(metafunc.config.getoption("--site"))
        profiles = get_profiles(metafunc.config.getoption("browsers"))
        metafunc.parametrize("slug", list(site.slugs), ids=lambda slug: slug or "home")
        metafunc.parametrize("profile", profiles, ids=lambda profile: profile.name)


@pytest.fixture(scope="session")
def pipeline(pytestconfig):
    settings = HarnessSettings.from_env()
    site = get_site(pytestconfig.getoption("--site"))
    return CollectionPipeline(
        site,
        collector=SeleniumCollector(timeout=settings.page_timeout),
        output_dir=settings.output_dir,
    )
