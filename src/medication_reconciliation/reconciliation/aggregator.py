# ============================================================================
# src/medication_reconciliation/reconciliation/aggregator.py
# ============================================================================
"""
Result aggregation: categorized reconciliation result -> flat medication list.
"""

from typing import List

from ..core.context import MedicationRecord, ReconciliationResult


def flatten(result: ReconciliationResult) -> List[MedicationRecord]:
    """
    Flatten a reconciliation result for persistence.

    Order is fixed: added, updated, stopped, unchanged. Newly created
    records always come first.
    """
    return [*result.added, *result.updated, *result.stopped, *result.unchanged]
