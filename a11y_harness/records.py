"""Violation rows and the flattening of axe-core results into them."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .errors import ScanResultShapeError

FIELDNAMES = (
    "page",
    "device",
    "id",
    "impact",
    "tags",
    "description",
    "help",
    "helpUrl",
    "html",
    "target",
    "failureSummary",
)

# spreadsheet column -> dataclass attribute
_ATTRIBUTES = {
    "helpUrl": "help_url",
    "failureSummary": "failure_summary",
}

_SHARED_FIELDS = ("id", "tags", "description", "help", "helpUrl", "nodes")
_NODE_FIELDS = ("html", "target")


@dataclass(frozen=True)
class ViolationRecord:
    """One offending node of one axe-core violation on one page."""

    page: Optional[str]
    device: Optional[str]
    id: Optional[str]
    impact: Optional[str]
    tags: Optional[str]
    description: Optional[str]
    help: Optional[str]
    help_url: Optional[str]
    html: Optional[str]
    target: Optional[str]
    failure_summary: Optional[str]

    def to_row(self) -> Dict[str, Optional[str]]:
        return {column: getattr(self, _ATTRIBUTES.get(column, column)) for column in FIELDNAMES}

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ViolationRecord":
        """Build a record from a spreadsheet row; absent columns become ``None``."""
        values = {_ATTRIBUTES.get(column, column): row.get(column) for column in FIELDNAMES}
        return cls(**values)


def _require(descriptor: Mapping[str, Any], field: str, rule_id: Optional[str]) -> Any:
    if field not in descriptor or descriptor[field] is None:
        raise ScanResultShapeError(rule_id, field)
    return descriptor[field]


def _join(values: Any, field: str, rule_id: Optional[str]) -> str:
    if isinstance(values, str) or not isinstance(values, Iterable):
        raise ScanResultShapeError(rule_id, field)
    # nested selectors (iframes, shadow roots) collapse the way axe prints them
    return ", ".join(
        ",".join(str(part) for part in value) if isinstance(value, list) else str(value)
        for value in values
    )


def _iter_violations(results: Mapping[str, Any]) -> Iterable[Mapping[str, Any]]:
    violations = results.get("violations") if isinstance(results, Mapping) else None
    if violations is None:
        raise ScanResultShapeError(None, "violations")
    # axe returns a list; keyed mappings (rule id -> descriptor) are accepted too
    if isinstance(violations, Mapping):
        return list(violations.values())
    return list(violations)


def flatten_violations(
    results: Mapping[str, Any],
    *,
    page: str,
    device: str,
) -> List[ViolationRecord]:
    """Expand every (violation, node) pair of an axe result into a record.

    Shared fields come from the violation, ``html``/``target``/``failureSummary``
    from the node. ``impact`` and ``failureSummary`` may be missing; any other
    missing field raises :class:`ScanResultShapeError` before a single record
    is returned, so a malformed result never yields partial rows.
    """
    records: List[ViolationRecord] = []
    for violation in _iter_violations(results):
        if not isinstance(violation, Mapping):
            raise ScanResultShapeError(None, "violation")
        rule_id = violation.get("id")
        shared = {field: _require(violation, field, rule_id) for field in _SHARED_FIELDS}
        nodes = shared["nodes"]
        if not isinstance(nodes, list):
            raise ScanResultShapeError(rule_id, "nodes")
        tags = _join(shared["tags"], "tags", rule_id)

        for node in nodes:
            if not isinstance(node, Mapping):
                raise ScanResultShapeError(rule_id, "nodes")
            html, target = (_require(node, field, rule_id) for field in _NODE_FIELDS)
            records.append(
                ViolationRecord(
                    page=page,
                    device=device,
                    id=shared["id"],
                    impact=violation.get("impact"),
                    tags=tags,
                    description=shared["description"],
                    help=shared["help"],
                    help_url=shared["helpUrl"],
                    html=html,
                    target=_join(target, "target", rule_id),
                    failure_summary=node.get("failureSummary"),
                )
            )
    return records
