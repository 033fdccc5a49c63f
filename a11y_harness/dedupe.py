"""Duplicate detection and index-safe removal for violation rows.

Two rows are duplicates when their ``target`` and ``failureSummary`` are equal,
whatever page, browser or rule they were reported for. The earliest row of a
duplicate group is kept and every later one is removed.

Removal happens in two steps. :func:`find_duplicate_indices` takes a complete
snapshot of the positions to delete before anything is touched, and
:func:`remove_indices` deletes them from the highest position down, so a
deletion never shifts a position that is still pending.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Hashable, List, Mapping, MutableSequence, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

DuplicateKey = Tuple[Optional[str], Optional[str]]


class Strategy(str, Enum):
    """How duplicate positions are found. Both give identical results."""

    KEYED = "keyed"
    PAIRWISE = "pairwise"


def _field(record: Any, attribute: str, column: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(column)
    return getattr(record, attribute, None)


def duplicate_key(record: Any) -> DuplicateKey:
    """Return ``(target, failureSummary)``; a missing field counts as ``None``."""
    return (
        _field(record, "target", "target"),
        _field(record, "failure_summary", "failureSummary"),
    )


def _pairwise_indices(records: Sequence[Any]) -> List[int]:
    keys = [duplicate_key(record) for record in records]
    marked: List[int] = []
    for outer, outer_key in enumerate(keys):
        for inner in range(outer + 1, len(keys)):
            if keys[inner] == outer_key:
                marked.append(inner)
    return marked


def _keyed_indices(records: Sequence[Any]) -> List[int]:
    first_seen: Dict[Hashable, int] = {}
    marked: List[int] = []
    for index, record in enumerate(records):
        key = duplicate_key(record)
        if key in first_seen:
            logger.debug("Row %d duplicates row %d: %r", index, first_seen[key], key)
            marked.append(index)
        else:
            first_seen[key] = index
    return marked


def find_duplicate_indices(
    records: Sequence[Any],
    *,
    strategy: Strategy | str = Strategy.KEYED,
) -> List[int]:
    """Positions of every row that repeats an earlier row, highest first.

    A row matching several earlier rows (three or more copies) is marked more
    than once by the pairwise scan; the returned list holds each position once.
    """
    strategy = Strategy(strategy)
    if strategy is Strategy.PAIRWISE:
        marked = _pairwise_indices(records)
    else:
        marked = _keyed_indices(records)
    return sorted(set(marked), reverse=True)


def remove_indices(records: MutableSequence[Any], indices: Sequence[int]) -> List[Any]:
    """Delete ``indices`` from ``records`` in place and return the removed rows.

    Every position refers to the sequence as it was before the call.
    """
    positions = sorted(set(indices), reverse=True)
    size = len(records)
    for position in positions:
        if not 0 <= position < size:
            raise IndexError(f"position {position} out of range for {size} rows")

    removed = []
    for position in positions:
        removed.append(records[position])
        del records[position]
    removed.reverse()
    return removed


def dedupe_records(
    records: Sequence[Any],
    *,
    strategy: Strategy | str = Strategy.KEYED,
) -> List[Any]:
    """Return a copy of ``records`` keeping the first row of each duplicate group."""
    reduced = list(records)
    indices = find_duplicate_indices(reduced, strategy=strategy)
    remove_indices(reduced, indices)
    if indices:
        logger.info("Removed %d duplicate rows out of %d", len(indices), len(records))
    return reduced
