"""Runtime settings read from the environment."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_OUTPUT_DIR = Path("spreadsheets")
DEFAULT_PAGE_TIMEOUT = 30


@dataclass(frozen=True)
class HarnessSettings:
    """Where result spreadsheets live and how long a page may take to load."""

    output_dir: Path = DEFAULT_OUTPUT_DIR
    page_timeout: int = DEFAULT_PAGE_TIMEOUT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "HarnessSettings":
        environ = os.environ if environ is None else environ
        output_dir = environ.get("A11Y_OUTPUT_DIR") or DEFAULT_OUTPUT_DIR
        raw_timeout = environ.get("A11Y_PAGE_TIMEOUT")
        try:
            timeout = int(raw_timeout) if raw_timeout else DEFAULT_PAGE_TIMEOUT
        except ValueError:
            raise ValueError(f"A11Y_PAGE_TIMEOUT must be an integer, got {raw_timeout!r}") from None
        return cls(output_dir=Path(output_dir), page_timeout=timeout)
