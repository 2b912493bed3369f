# ============================================================================
# src/medication_reconciliation/core/context/extracted_command.py
# ============================================================================
"""
Single medication statement parsed from a note
- Name as written, dose, route, frequency
- Action (add / continue / stop / update)
- Confidence and the verbatim source snippet for audit
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .enums import MedicationAction


@dataclass
class ExtractedCommand:
    name: str
    dose: str = "As prescribed"
    route: Optional[str] = None
    frequency: Optional[str] = None
    action: MedicationAction = MedicationAction.ADD
    confidence: float = 0.0
    source_snippet: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "dose": self.dose,
            "route": self.route,
            "frequency": self.frequency,
            "action": self.action.value,
            "confidence": self.confidence,
            "sourceSnippet": self.source_snippet,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExtractedCommand":
        """Build from wire format; accepts the legacy `extractedFrom` key."""
        return cls(
            name=data.get("name") or "",
            dose=data.get("dose") or "As prescribed",
            route=data.get("route") or None,
            frequency=data.get("frequency") or None,
            action=MedicationAction.parse(data.get("action")),
            confidence=float(data.get("confidence", 0.0) or 0.0),
            source_snippet=data.get("sourceSnippet") or data.get("extractedFrom") or "",
        )
