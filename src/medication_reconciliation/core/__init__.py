# ============================================================================
# src/medication_reconciliation/core/__init__.py
# ============================================================================
"""
Core components for the medication reconciliation engine.
"""

from .context import (
    MedicationAction,
    ExtractionMethod,
    ExtractedCommand,
    MedicationRecord,
    ReconciliationMetadata,
    ExtractionContext,
    OracleResult,
    MedicationExtractionResult,
    ReconciliationResult,
)
from .config import Config, get_config, get_config_instance, reload_config

# Extraction + reconciliation entry points
from .medication_pipeline import (
    MedicationPipeline,
    NoteReconciliation,
    extract_medications,
    reconcile_medications,
    process_note,
)

__all__ = [
    "MedicationAction",
    "ExtractionMethod",
    "ExtractedCommand",
    "MedicationRecord",
    "ReconciliationMetadata",
    "ExtractionContext",
    "OracleResult",
    "MedicationExtractionResult",
    "ReconciliationResult",
    "Config",
    "get_config",
    "get_config_instance",
    "reload_config",
    "MedicationPipeline",
    "NoteReconciliation",
    "extract_medications",
    "reconcile_medications",
    "process_note",
]
