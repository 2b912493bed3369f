# ============================================================================
# src/medication_reconciliation/__init__.py
# ============================================================================
"""
Medication extraction and reconciliation engine.

Turns free-text clinical notes into structured medication commands and
merges them into a patient's existing medication list.

Usage:
    from medication_reconciliation import process_note, ExtractionContext

    bundle = await process_note(note_text, ExtractionContext(), existing, "Dr. Rao")
    bundle.medications   # flattened list to persist
    bundle.reconciliation.errors   # warnings for a human reviewer
"""

__version__ = "0.1.0"

from .core import (
    MedicationAction,
    ExtractionMethod,
    ExtractedCommand,
    MedicationRecord,
    ReconciliationMetadata,
    ExtractionContext,
    MedicationExtractionResult,
    ReconciliationResult,
    MedicationPipeline,
    NoteReconciliation,
    extract_medications,
    reconcile_medications,
    process_note,
)
from .reconciliation import FuzzyMatcher, ReconciliationEngine, flatten
from .utils.drug_name_normalizer import normalize_drug_name

__all__ = [
    "MedicationAction",
    "ExtractionMethod",
    "ExtractedCommand",
    "MedicationRecord",
    "ReconciliationMetadata",
    "ExtractionContext",
    "MedicationExtractionResult",
    "ReconciliationResult",
    "MedicationPipeline",
    "NoteReconciliation",
    "extract_medications",
    "reconcile_medications",
    "process_note",
    "FuzzyMatcher",
    "ReconciliationEngine",
    "flatten",
    "normalize_drug_name",
]
