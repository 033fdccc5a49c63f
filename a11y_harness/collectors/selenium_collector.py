"""Loads pages in Chrome via Selenium and runs axe-core on them."""
from __future__ import annotations

import logging
import os
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Protocol

try:
    from selenium import webdriver
    from selenium.common.exceptions import WebDriverException
    from selenium.webdriver.chrome.service import Service as ChromeService  # type: ignore[import]
except ImportError:  # pragma: no cover - optional dependency
    webdriver = None
    WebDriverException = None
    ChromeService = None

try:  # pragma: no cover - optional dependency
    from webdriver_manager.chrome import ChromeDriverManager  # type: ignore[import]
except ImportError:  # pragma: no cover
    ChromeDriverManager = None

from ..audits.accessibility import AxeScanner
from ..errors import PageScanError
from ..sites import BrowserProfile

logger = logging.getLogger(__name__)

# TimeoutException subclasses WebDriverException
_DRIVER_ERRORS = (WebDriverException,) if WebDriverException is not None else ()


class DriverFactory(Protocol):
    def __call__(self, profile: BrowserProfile) -> Any:
        ...


@dataclass(frozen=True)
class PageScan:
    """What one page visit produced."""

    url: str
    browser: str
    user_agent: str
    results: dict


class SeleniumCollector:
    """Visits a URL in a fresh WebDriver per call and scans it with axe-core."""

    def __init__(
        self,
        driver_factory: Optional[DriverFactory] = None,
        *,
        timeout: int = 30,
        sleep_after_load: float = 0.0,
    ) -> None:
        self.driver_factory = driver_factory or self._default_driver_factory
        self.timeout = timeout
        self.sleep_after_load = sleep_after_load

    def collect(self, url: str, profile: BrowserProfile, *, scanner: AxeScanner) -> PageScan:
        driver = None
        try:
            driver = self.driver_factory(profile)
            driver.set_page_load_timeout(self.timeout)
            logger.debug("Loading %s in %s", url, profile.name)
            driver.get(url)
            if self.sleep_after_load:
                time.sleep(self.sleep_after_load)
            user_agent = driver.execute_script("return navigator.userAgent")
            results = scanner.analyze(driver)
        except _DRIVER_ERRORS as exc:
            reason = (getattr(exc, "msg", None) or str(exc)).strip() or type(exc).__name__
            raise PageScanError(url, reason) from exc
        except RuntimeError as exc:
            # the driver factory reports a browser that will not start this way
            raise PageScanError(url, str(exc)) from exc
        finally:
            if driver is not None:
                driver.quit()

        return PageScan(url=url, browser=profile.name, user_agent=str(user_agent), results=results)

    def _default_driver_factory(self, profile: BrowserProfile) -> Any:
        if webdriver is None:
            raise RuntimeError(
                "Selenium is not available. Install selenium and configure a WebDriver."
            )

        options = webdriver.ChromeOptions()
        options.add_argument("--headless=new")
        options.add_argument("--disable-gpu")
        options.add_argument("--no-sandbox")
        options.add_argument("--disable-dev-shm-usage")
        if profile.is_mobile:
            options.add_experimental_option("mobileEmulation", {"deviceName": profile.mobile_device})
        else:
            options.add_argument("--window-size=1920,1080")

        binary = self._resolve_chrome_binary()
        if binary:
            options.binary_location = binary

        service = None
        driver_path = self._resolve_chromedriver_path()
        if driver_path and ChromeService is not None:
            service = ChromeService(driver_path)

        try:
            if service is not None:
                return webdriver.Chrome(service=service, options=options)
            return webdriver.Chrome(options=options)
        except Exception as exc:  # pragma: no cover - propagate meaningful error
            guidance = (
                "Failed to initialize ChromeDriver. Verify Google Chrome is installed or "
                "set CHROME_BINARY and CHROMEDRIVER_PATH environment variables."
            )
            raise RuntimeError(guidance) from exc

    def _resolve_chrome_binary(self) -> Optional[str]:
        explicit = os.getenv("CHROME_BINARY")
        if explicit and Path(explicit).exists():
            return explicit

        candidates = [
            shutil.which("google-chrome"),
            shutil.which("google-chrome-stable"),
            shutil.which("chrome"),
            "/opt/google/chrome/chrome",
            "/usr/bin/google-chrome",
            "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
            r"C:\Program Files\Google\Chrome\Application\chrome.exe",
            r"C:\Program Files (x86)\Google\Chrome\Application\chrome.exe",
        ]
        for candidate in candidates:
            if candidate and Path(candidate).exists():
                return str(candidate)
        # let Selenium Manager locate a browser
        return None

    def _resolve_chromedriver_path(self) -> Optional[str]:
        explicit = os.getenv("CHROMEDRIVER_PATH")
        if explicit and Path(explicit).exists():
            return explicit

        system_driver = shutil.which("chromedriver")
        if system_driver:
            return system_driver

        if ChromeDriverManager is not None:
            try:
                return ChromeDriverManager().install()
            except Exception as exc:
                logger.warning("webdriver-manager could not install chromedriver: %s", exc)
                return None
        return None
