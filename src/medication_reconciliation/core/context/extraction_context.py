# ============================================================================
# src/medication_reconciliation/core/context/extraction_context.py
# ============================================================================
"""
Patient context handed to an extraction oracle.

The current medication list is carried for context only; oracles are not
required to consult it.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .medication_record import MedicationRecord


@dataclass
class ExtractionContext:
    age: Optional[float] = None
    age_unit: str = ""
    care_unit: str = ""
    diagnosis: str = ""
    current_medications: List[MedicationRecord] = field(default_factory=list)

    def to_prompt_block(self) -> str:
        """Compact patient-context block sent with the note to the primary oracle."""
        age = "unknown" if self.age is None else f"{self.age:g} {self.age_unit}".strip()
        return (
            f"- Age: {age}\n"
            f"- Unit: {self.care_unit or 'unknown'}\n"
            f"- Primary Diagnosis: {self.diagnosis or 'unknown'}"
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExtractionContext":
        return cls(
            age=data.get("age"),
            age_unit=data.get("ageUnit", ""),
            care_unit=data.get("unit", ""),
            diagnosis=data.get("diagnosis", ""),
            current_medications=[
                MedicationRecord.from_dict(m) for m in data.get("currentMedications", [])
            ],
        )
