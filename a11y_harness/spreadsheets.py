"""Reading and writing violation spreadsheets (pandas + openpyxl)."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Sequence

import pandas as pd
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.utils.exceptions import IllegalCharacterError

from .errors import ResultWriteError
from .records import FIELDNAMES, ViolationRecord

logger = logging.getLogger(__name__)

RESULT_SUFFIX = ".xlsx"
DEFAULT_SHEET_NAME = "full_data"
_UNSAFE_CHARACTERS = re.compile(r"[^A-Za-z0-9]")


def sanitize_name(name: str) -> str:
    """Replace every character outside ``[A-Za-z0-9]`` with ``_``.

    The site root has an empty slug; it is written as ``home``.
    """
    return _UNSAFE_CHARACTERS.sub("_", name) if name else "home"


def _cell(value: Any) -> Any:
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return str(value)


def _writable(value: Any) -> Any:
    # worksheets reject control characters such as \x0b that axe html snippets can carry
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub("", value)
    return value


def write_records(path: Path, records: Sequence[ViolationRecord], *, sheet_name: str) -> Path:
    rows = [
        {column: _writable(value) for column, value in record.to_row().items()}
        for record in records
    ]
    frame = pd.DataFrame(rows, columns=list(FIELDNAMES))
    with pd.ExcelWriter(str(path), engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name=sheet_name, index=False)
    return path


def read_records(path: Path) -> List[ViolationRecord]:
    """Load the first sheet of ``path``; blank cells come back as ``None``."""
    frame = pd.read_excel(
        path,
        sheet_name=0,
        engine="openpyxl",
        dtype=object,
        keep_default_na=False,
        na_values=[""],
    )
    rows = frame.to_dict(orient="records")
    return [
        ViolationRecord.from_row({str(key): _cell(value) for key, value in row.items()})
        for row in rows
    ]


@dataclass
class ResultWriter:
    """Writes one result spreadsheet per destination name."""

    output_dir: Path

    def path_for(self, name: str) -> Path:
        return Path(self.output_dir) / f"{sanitize_name(name)}{RESULT_SUFFIX}"

    def write(
        self,
        name: str,
        records: Sequence[ViolationRecord],
        *,
        sheet_name: str = DEFAULT_SHEET_NAME,
    ) -> Path:
        path = self.path_for(name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            write_records(path, records, sheet_name=sheet_name)
        except (OSError, ValueError, IllegalCharacterError) as exc:
            raise ResultWriteError(name, path, str(exc)) from exc
        logger.info("Wrote %s (%d violations)", path.name, len(records))
        return path
