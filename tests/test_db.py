"""Tests for the audit store."""

import asyncio

import pytest

from conftest import DARBEPOETIN_PAYLOAD
from esa_rationale.errors import PersistenceError
from esa_rationale.pipeline.state import ExtraIdentity
from esa_rationale.pipeline.validation import validate_payload
from esa_rationale.utils.db import MAX_HISTORY_ROWS, AuditStore


def _run(coro):
    return asyncio.run(coro)


@pytest.fixture
def store(tmp_path):
    audit_store = AuditStore(str(tmp_path / "data" / "history.db"))
    _run(audit_store.init())
    return audit_store


def test_record_applies_identity_defaults(store) -> None:
    request = validate_payload(DARBEPOETIN_PAYLOAD)
    record_id = _run(store.record(request.inputs, request.rule_output, None, "Explained."))

    rows = _run(store.history())
    assert len(rows) == 1
    row = rows[0]
    assert row["id"] == record_id
    assert row["timestamp"]
    assert row["patient_name"] == "Anonymous"
    assert row["age"] is None
    assert row["sex"] == "N/A"
    assert row["hemoglobin"] == 9.2
    assert row["weight"] == 70
    assert row["esa_agent"] == "darbepoetin"
    assert row["current_dose"] == 0
    assert row["recommended_dose"] == "31.5 mcg/week"
    assert row["note"] == "Initial dose within guideline range"
    assert row["ai_explanation"] == "Explained."


def test_record_keeps_supplied_identity(store) -> None:
    payload = {
        **DARBEPOETIN_PAYLOAD,
        "inputs": {**DARBEPOETIN_PAYLOAD["inputs"], "currentDose": 20},
        "extra": {"patientName": "Jane Roe", "age": 64, "sex": "F"},
    }
    request = validate_payload(payload)
    _run(store.record(request.inputs, request.rule_output, request.extra, "Explained."))

    row = _run(store.history())[0]
    assert (row["patient_name"], row["age"], row["sex"]) == ("Jane Roe", 64, "F")
    assert row["current_dose"] == 20


def test_empty_identity_values_fall_back_to_defaults(store) -> None:
    request = validate_payload(DARBEPOETIN_PAYLOAD)
    extra = ExtraIdentity(patientName="", age=0, sex="")
    _run(store.record(request.inputs, request.rule_output, extra, "Explained."))

    row = _run(store.history())[0]
    assert (row["patient_name"], row["age"], row["sex"]) == ("Anonymous", None, "N/A")


def test_recommended_dose_falls_back_to_per_dose(store) -> None:
    payload = {
        **DARBEPOETIN_PAYLOAD,
        "ruleOutput": {"weeklyDose": 0, "perDose": 4000, "unit": "units", "note": "Hold"},
    }
    request = validate_payload(payload)
    _run(store.record(request.inputs, request.rule_output, None, "Explained."))
    assert _run(store.history())[0]["recommended_dose"] == "4000 units"


def test_history_is_newest_first_and_capped(store) -> None:
    request = validate_payload(DARBEPOETIN_PAYLOAD)

    async def _fill():
        for i in range(MAX_HISTORY_ROWS + 5):
            await store.record(request.inputs, request.rule_output, None, f"explanation {i}")

    _run(_fill())
    rows = _run(store.history(limit=500))

    assert len(rows) == MAX_HISTORY_ROWS
    assert rows[0]["ai_explanation"] == f"explanation {MAX_HISTORY_ROWS + 4}"
    for newer, older in zip(rows, rows[1:]):
        assert newer["timestamp"] >= older["timestamp"]
        assert newer["id"] > older["id"]


def test_history_respects_smaller_limit(store) -> None:
    request = validate_payload(DARBEPOETIN_PAYLOAD)
    for _ in range(3):
        _run(store.record(request.inputs, request.rule_output, None, "Explained."))
    assert len(_run(store.history(limit=2))) == 2


def test_unwritable_store_raises_persistence_error(tmp_path) -> None:
    # A directory cannot be opened as a database file.
    broken = AuditStore(str(tmp_path))
    request = validate_payload(DARBEPOETIN_PAYLOAD)

    with pytest.raises(PersistenceError):
        _run(broken.record(request.inputs, request.rule_output, None, "Explained."))
    with pytest.raises(PersistenceError):
        _run(broken.history())
