# ============================================================================
# tests/unit/test_aggregator.py
# ============================================================================
"""
Tests for flattening a reconciliation result
"""

from medication_reconciliation.core.context import MedicationRecord, ReconciliationResult
from medication_reconciliation.reconciliation.aggregator import flatten


def names(records):
    return [r.name for r in records]


def test_fixed_category_order():
    result = ReconciliationResult(
        unchanged=[MedicationRecord(name="U1")],
        stopped=[MedicationRecord(name="S1", is_active=False)],
        updated=[MedicationRecord(name="P1"), MedicationRecord(name="P2")],
        added=[MedicationRecord(name="A1"), MedicationRecord(name="A2")],
    )

    assert names(flatten(result)) == ["A1", "A2", "P1", "P2", "S1", "U1"]


def test_empty_result():
    assert flatten(ReconciliationResult()) == []


def test_errors_not_in_list():
    result = ReconciliationResult(added=[MedicationRecord(name="A1")], errors=["warning"])

    assert names(flatten(result)) == ["A1"]


def test_flatten_engine_output(existing_medications, metadata):
    from medication_reconciliation.core.context import ExtractedCommand
    from medication_reconciliation.reconciliation.engine import ReconciliationEngine

    result = ReconciliationEngine().reconcile(
        [ExtractedCommand(name="Dopamine", dose="5mcg/kg/min")],
        ["Caffeine"],
        existing_medications,
        metadata,
    )

    assert names(flatten(result)) == ["Dopamine", "Caffeine", "Vancomycin", "Cefotaxime"]
