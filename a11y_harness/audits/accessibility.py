"""Accessibility scanning via axe-core."""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Sequence

try:
    from axe_selenium_python import Axe
except ImportError:  # pragma: no cover - optional dependency
    Axe = None

from ..errors import PageScanError

# Returns the results JSON-stringified; large result objects do not survive
# Runtime.callFunctionOn deserialization in Chrome.
_RUN_SCRIPT = """
const callback = arguments[arguments.length - 1];
const context = arguments[0];
const options = arguments[1];
try {
    window.axe.run(context || document, options).then(results => {
        callback(JSON.stringify({
            violations: results.violations || [],
            url: results.url,
            testEngine: results.testEngine
        }));
    }).catch(err => {
        callback(JSON.stringify({ error: String(err) }));
    });
} catch (e) {
    callback(JSON.stringify({ error: String(e) }));
}
"""


@dataclass(frozen=True)
class AxeScanner:
    """Runs axe-core in a loaded page with a site's exclusions and disabled rules."""

    exclude: Sequence[str] = ()
    disabled_rules: Sequence[str] = ()

    def context(self) -> Dict[str, Any] | None:
        selectors = [selector for selector in self.exclude if selector]
        if not selectors:
            return None
        return {"exclude": [[selector] for selector in selectors]}

    def options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {"resultTypes": ["violations"]}
        if self.disabled_rules:
            options["rules"] = {rule: {"enabled": False} for rule in self.disabled_rules}
        return options

    def analyze(self, driver: Any) -> dict:
        """Inject axe into ``driver``'s current page and return its results."""
        if Axe is None:
            raise RuntimeError(
                "axe-selenium-python is not installed. Install it to run accessibility audits."
            )
        Axe(driver).inject()
        raw = driver.execute_async_script(_RUN_SCRIPT, self.context(), self.options())
        return self.parse(raw, url=getattr(driver, "current_url", "<page>"))

    @staticmethod
    def parse(raw: Any, *, url: str) -> dict:
        try:
            results = json.loads(raw) if isinstance(raw, str) else raw
        except json.JSONDecodeError as exc:
            raise PageScanError(url, f"unparseable axe results: {exc}") from exc
        if not isinstance(results, dict):
            raise PageScanError(url, f"unexpected axe results of type {type(results).__name__}")
        if "error" in results:
            raise PageScanError(url, f"axe-core error: {results['error']}")
        return results
