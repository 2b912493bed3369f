# src/medication_reconciliation/core/context/__init__.py

from .enums import MedicationAction, ExtractionMethod
from .extracted_command import ExtractedCommand
from .medication_record import MedicationRecord, ReconciliationMetadata, parse_timestamp
from .extraction_context import ExtractionContext
from .results import OracleResult, MedicationExtractionResult, ReconciliationResult

__all__ = [
    "MedicationAction",
    "ExtractionMethod",
    "ExtractedCommand",
    "MedicationRecord",
    "ReconciliationMetadata",
    "parse_timestamp",
    "ExtractionContext",
    "OracleResult",
    "MedicationExtractionResult",
    "ReconciliationResult",
]
