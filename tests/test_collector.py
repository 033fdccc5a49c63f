import json

import pytest
from selenium.common.exceptions import TimeoutException, WebDriverException

from a11y_harness.audits.accessibility import AxeScanner
from a11y_harness.collectors.selenium_collector import SeleniumCollector
from a11y_harness.errors import PageScanError
from a11y_harness.pipeline import CollectionPipeline
from a11y_harness.sites import ADA, GOOGLE_CHROME, MOBILE_CHROME, SiteConfig


class FakeDriver:
    def __init__(self, *, fail_on_get=None):
        self.fail_on_get = fail_on_get
        self.visited = []
        self.timeout = None
        self.quit_called = False

    def set_page_load_timeout(self, timeout):
        self.timeout = timeout

    def get(self, url):
        if self.fail_on_get:
            raise self.fail_on_get
        self.visited.append(url)

    def execute_script(self, script):
        return "Mozilla/5.0 (Linux; Android 11; Pixel 5)"

    def quit(self):
        self.quit_called = True


class FakeScanner:
    def __init__(self, results):
        self.results = results

    def analyze(self, driver):
        return self.results


def test_collect_returns_user_agent_and_results():
    driver = FakeDriver()
    collector = SeleniumCollector(lambda profile: driver, timeout=12)

    scan = collector.collect("https://example.test/", MOBILE_CHROME, scanner=FakeScanner({"violations": []}))

    assert scan.user_agent.startswith("Mozilla/5.0")
    assert scan.browser == "Mobile Chrome"
    assert scan.results == {"violations": []}
    assert driver.timeout == 12
    assert driver.visited == ["https://example.test/"]
    assert driver.quit_called


def test_navigation_timeout_becomes_page_scan_error():
    driver = FakeDriver(fail_on_get=TimeoutException("timed out receiving message"))
    collector = SeleniumCollector(lambda profile: driver)

    with pytest.raises(PageScanError, match="timed out"):
        collector.collect("https://example.test/slow", MOBILE_CHROME, scanner=FakeScanner({}))
    assert driver.quit_called


@pytest.mark.parametrize(
    "error",
    [
        WebDriverException("session not created: Chrome failed to start"),
        RuntimeError("Failed to initialize ChromeDriver."),
    ],
)
def test_browser_that_will_not_start_becomes_page_scan_error(error):
    def factory(profile):
        raise error

    collector = SeleniumCollector(factory)

    with pytest.raises(PageScanError):
        collector.collect("https://example.test/", GOOGLE_CHROME, scanner=FakeScanner({}))


def test_browser_start_failure_does_not_stop_other_pages(tmp_path):
    drivers = []

    def factory(profile):
        if not drivers:
            drivers.append(None)
            raise WebDriverException("session not created: Chrome failed to start")
        driver = FakeDriver()
        drivers.append(driver)
        return driver

    site = SiteConfig(name="example", base_url="https://example.test", slugs=("", "contact/"))
    pipeline = CollectionPipeline(
        site, [GOOGLE_CHROME], collector=SeleniumCollector(factory), output_dir=tmp_path
    )
    pipeline.scanner = FakeScanner({"violations": []})

    report = pipeline.run()

    assert len(report.visits) == 2
    assert [visit.slug for visit in report.failures] == [""]
    assert "session not created" in report.failures[0].error
    assert report.visits[1].passed
    assert drivers[1].quit_called


def test_scanner_builds_context_and_disabled_rules():
    scanner = AxeScanner(exclude=ADA.exclude, disabled_rules=ADA.disabled_rules)

    assert scanner.context() == {"exclude": [[selector] for selector in ADA.exclude]}
    assert scanner.options()["rules"]["color-contrast"] == {"enabled": False}
    assert len(scanner.options()["rules"]) == 11


def test_scanner_without_exclusions_scans_whole_document():
    scanner = AxeScanner(exclude=("",))

    assert scanner.context() is None
    assert "rules" not in scanner.options()


def test_parse_accepts_json_payload():
    payload = json.dumps({"violations": [{"id": "region"}, {"id": "label"}]})

    results = AxeScanner.parse(payload, url="https://example.test/")

    assert [item["id"] for item in results["violations"]] == ["region", "label"]


def test_parse_raises_on_axe_error():
    with pytest.raises(PageScanError, match="axe is not defined"):
        AxeScanner.parse(json.dumps({"error": "ReferenceError: axe is not defined"}), url="u")


def test_parse_raises_on_garbage():
    with pytest.raises(PageScanError):
        AxeScanner.parse("{not json", url="u")
