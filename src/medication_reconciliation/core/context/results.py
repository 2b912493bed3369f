# ============================================================================
# src/medication_reconciliation/core/context/results.py
# ============================================================================
"""
Outputs of the two pipeline stages
- OracleResult: raw output of one extraction oracle
- MedicationExtractionResult: stage 1 result with method and timing
- ReconciliationResult: stage 2 classification of the medication list
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .enums import ExtractionMethod
from .extracted_command import ExtractedCommand
from .medication_record import MedicationRecord


@dataclass
class OracleResult:
    """Commands and stop names produced by a single extraction oracle."""
    commands: List[ExtractedCommand] = field(default_factory=list)
    stopped_names: List[str] = field(default_factory=list)


@dataclass
class MedicationExtractionResult:
    medications: List[ExtractedCommand] = field(default_factory=list)
    stopped_medications: List[str] = field(default_factory=list)
    total_found: int = 0
    confidence: float = 0.0
    method: ExtractionMethod = ExtractionMethod.FALLBACK
    processing_time_ms: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "medications": [m.to_dict() for m in self.medications],
            "stoppedMedications": list(self.stopped_medications),
            "totalFound": self.total_found,
            "confidence": self.confidence,
            "method": self.method.value,
            "processingTimeMs": self.processing_time_ms,
        }


@dataclass
class ReconciliationResult:
    """
    Every surviving record lands in exactly one of added, updated, stopped
    or unchanged. Errors are human-readable warnings, never exceptions.
    """
    added: List[MedicationRecord] = field(default_factory=list)
    updated: List[MedicationRecord] = field(default_factory=list)
    stopped: List[MedicationRecord] = field(default_factory=list)
    unchanged: List[MedicationRecord] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.updated or self.stopped)

    def summary(self) -> str:
        """Short change summary, e.g. "2 added, 1 updated"; empty when nothing changed."""
        parts = []
        if self.added:
            parts.append(f"{len(self.added)} added")
        if self.updated:
            parts.append(f"{len(self.updated)} updated")
        if self.stopped:
            parts.append(f"{len(self.stopped)} stopped")
        return ", ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "added": [m.to_dict() for m in self.added],
            "updated": [m.to_dict() for m in self.updated],
            "stopped": [m.to_dict() for m in self.stopped],
            "unchanged": [m.to_dict() for m in self.unchanged],
            "errors": list(self.errors),
        }
