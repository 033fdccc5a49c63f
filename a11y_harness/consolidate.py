"""Merge per-page result spreadsheets into a master list and a de-duplicated work list.

Run this after collection has finished; the directory is read once and is
not locked, so a collection run writing into it at the same time gives
undefined results.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, Tuple

from .dedupe import Strategy, dedupe_records
from .errors import ConsolidationError, NoResultFilesError
from .records import ViolationRecord
from .spreadsheets import RESULT_SUFFIX, read_records, write_records

logger = logging.getLogger(__name__)

MASTER_LIST_NAME = "master-list.xlsx"
WORK_LIST_NAME = "work-list.xlsx"
_OUTPUT_NAMES = frozenset({MASTER_LIST_NAME, WORK_LIST_NAME})


def is_result_file(path: Path) -> bool:
    return (
        path.suffix == RESULT_SUFFIX
        and path.name not in _OUTPUT_NAMES
        # Excel keeps "~$name.xlsx" lock files next to open workbooks
        and not path.name.startswith("~$")
        and path.is_file()
    )


def discover_result_files(directory: Path, *, sort: bool = True) -> List[Path]:
    """List result spreadsheets in ``directory``.

    With ``sort`` the files are ordered by name, which fixes which row of a
    duplicate group survives. Without it the platform's listing order is used.
    """
    directory = Path(directory)
    try:
        entries = list(directory.iterdir())
    except OSError as exc:
        raise ConsolidationError(f"Error reading directory {directory}: {exc}") from exc
    files = [entry for entry in entries if is_result_file(entry)]
    if sort:
        files.sort(key=lambda path: path.name)
    return files


def load_result_files(
    paths: Sequence[Path],
) -> Tuple[List[ViolationRecord], List[Path], List[Tuple[Path, str]]]:
    """Concatenate the rows of every readable file, in the given order.

    Returns ``(records, loaded, skipped)``; a file that cannot be read is
    logged and skipped. Raises :class:`NoResultFilesError` if nothing was read.
    """
    records: List[ViolationRecord] = []
    loaded: List[Path] = []
    skipped: List[Tuple[Path, str]] = []
    for path in paths:
        try:
            rows = read_records(path)
        except Exception as exc:  # corrupt, locked or not a workbook at all
            logger.warning("Skipping %s: %s", path.name, exc)
            skipped.append((path, str(exc)))
            continue
        logger.debug("Loaded %d rows from %s", len(rows), path.name)
        records.extend(rows)
        loaded.append(path)

    if not loaded:
        raise NoResultFilesError(
            f"No result files could be read ({len(paths)} found, {len(skipped)} unreadable)"
        )
    return records, loaded, skipped


@dataclass
class ConsolidationResult:
    """Paths and row counts of one consolidation run."""

    master_path: Path
    work_list_path: Path
    master_count: int
    work_list_count: int
    source_files: List[Path] = field(default_factory=list)
    skipped_files: List[Tuple[Path, str]] = field(default_factory=list)

    @property
    def duplicates_removed(self) -> int:
        return self.master_count - self.work_list_count


class Consolidator:
    """Builds ``master-list.xlsx`` and ``work-list.xlsx`` in a results directory."""

    def __init__(
        self,
        directory: Path = Path("spreadsheets"),
        *,
        strategy: Strategy | str = Strategy.KEYED,
        sort_files: bool = True,
    ) -> None:
        self.directory = Path(directory)
        self.strategy = Strategy(strategy)
        self.sort_files = sort_files

    def run(self) -> ConsolidationResult:
        paths = discover_result_files(self.directory, sort=self.sort_files)
        records, loaded, skipped = load_result_files(paths)

        master_path = write_records(
            self.directory / MASTER_LIST_NAME, records, sheet_name="master_list"
        )
        work_list = dedupe_records(records, strategy=self.strategy)
        work_list_path = write_records(
            self.directory / WORK_LIST_NAME, work_list, sheet_name="work_list"
        )

        result = ConsolidationResult(
            master_path=master_path,
            work_list_path=work_list_path,
            master_count=len(records),
            work_list_count=len(work_list),
            source_files=loaded,
            skipped_files=skipped,
        )
        logger.info(
            "Merged %d files: %d violations in master list, %d unique in work list",
            len(loaded),
            result.master_count,
            result.work_list_count,
        )
        return result
