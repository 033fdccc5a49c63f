import pytest

from a11y_harness.errors import ScanResultShapeError
from a11y_harness.records import FIELDNAMES, ViolationRecord, flatten_violations


def _violation(rule_id: str, node_count: int, *, impact="serious") -> dict:
    return {
        "id": rule_id,
        "impact": impact,
        "tags": ["wcag2a", "wcag412"],
        "description": f"{rule_id} description",
        "help": f"{rule_id} help",
        "helpUrl": f"https://dequeuniversity.com/rules/axe/4.8/{rule_id}",
        "nodes": [
            {
                "html": f"<a id='n{index}'></a>",
                "target": [f"#n{index}"],
                "failureSummary": f"Fix {rule_id} on n{index}",
            }
            for index in range(node_count)
        ],
    }


def test_one_record_per_violation_node():
    results = {"violations": [_violation("link-name", 3), _violation("image-alt", 1), _violation("label", 2)]}

    records = flatten_violations(results, page="contact/", device="Mozilla/5.0")

    assert len(records) == 6
    assert [record.id for record in records] == ["link-name"] * 3 + ["image-alt"] + ["label"] * 2


def test_record_combines_violation_and_node_fields():
    results = {"violations": [_violation("link-name", 2)]}

    second = flatten_violations(results, page="careers/", device="UA")[1]

    assert second.page == "careers/"
    assert second.device == "UA"
    assert second.impact == "serious"
    assert second.tags == "wcag2a, wcag412"
    assert second.help_url.endswith("/link-name")
    assert second.html == "<a id='n1'></a>"
    assert second.target == "#n1"
    assert second.failure_summary == "Fix link-name on n1"


def test_keyed_violations_mapping_is_accepted():
    results = {"violations": {"0": _violation("region", 1), "1": _violation("label", 1)}}

    records = flatten_violations(results, page="", device="UA")

    assert [record.id for record in records] == ["region", "label"]


def test_no_violations_gives_no_records():
    assert flatten_violations({"violations": []}, page="", device="UA") == []


def test_missing_impact_and_failure_summary_are_absent():
    violation = _violation("region", 1, impact=None)
    del violation["nodes"][0]["failureSummary"]

    record = flatten_violations({"violations": [violation]}, page="", device="UA")[0]

    assert record.impact is None
    assert record.failure_summary is None


def test_nested_targets_are_joined():
    violation = _violation("frame-title", 1)
    violation["nodes"][0]["target"] = [["iframe#embed", "button"], ".footer"]

    record = flatten_violations({"violations": [violation]}, page="", device="UA")[0]

    assert record.target == "iframe#embed,button, .footer"


@pytest.mark.parametrize("field", ["id", "tags", "description", "help", "helpUrl", "nodes"])
def test_missing_violation_field_raises(field):
    violation = _violation("label", 2)
    del violation[field]

    with pytest.raises(ScanResultShapeError) as excinfo:
        flatten_violations({"violations": [violation]}, page="", device="UA")
    assert excinfo.value.field == field


def test_missing_node_target_raises():
    violation = _violation("label", 2)
    del violation["nodes"][1]["target"]

    with pytest.raises(ScanResultShapeError, match="target"):
        flatten_violations({"violations": [violation]}, page="", device="UA")


def test_missing_violations_key_raises():
    with pytest.raises(ScanResultShapeError):
        flatten_violations({}, page="", device="UA")


def test_row_uses_spreadsheet_column_names():
    record = flatten_violations({"violations": [_violation("label", 1)]}, page="", device="UA")[0]

    row = record.to_row()

    assert tuple(row) == FIELDNAMES
    assert row["helpUrl"] == record.help_url
    assert row["failureSummary"] == record.failure_summary


def test_from_row_fills_missing_columns_with_none():
    record = ViolationRecord.from_row({"page": "video/", "target": "#main"})

    assert record.page == "video/"
    assert record.target == "#main"
    assert record.failure_summary is None
    assert record.help_url is None
