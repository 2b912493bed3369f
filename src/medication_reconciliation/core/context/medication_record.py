# ============================================================================
# src/medication_reconciliation/core/context/medication_record.py
# ============================================================================
"""
Medication list entries and the provenance stamped onto them.

A MedicationRecord is one order on a patient's list. The engine only ever
creates records or marks them inactive; creation provenance (start_date,
added_by, added_at) is never rewritten once set.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional


# Persisted (camelCase) key for each record attribute
_WIRE_KEYS = {
    "name": "name",
    "dose": "dose",
    "route": "route",
    "frequency": "frequency",
    "is_active": "isActive",
    "start_date": "startDate",
    "added_by": "addedBy",
    "added_at": "addedAt",
    "last_updated_by": "lastUpdatedBy",
    "last_updated_at": "lastUpdatedAt",
    "stop_date": "stopDate",
    "stopped_by": "stoppedBy",
    "stopped_at": "stoppedAt",
    "is_custom": "isCustom",
}


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO 8601 timestamp, accepting the JavaScript "Z" suffix.

    Naive values are taken as UTC so all results compare with each other.
    Returns None for missing, non-string or unparsable input.
    """
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class MedicationRecord:
    name: str
    dose: str = "As prescribed"
    route: Optional[str] = None
    frequency: Optional[str] = None
    is_active: bool = True

    # Creation provenance
    start_date: Optional[str] = None
    added_by: Optional[str] = None
    added_at: Optional[str] = None

    # Most recent dose / route / frequency change
    last_updated_by: Optional[str] = None
    last_updated_at: Optional[str] = None

    # Deactivation, set at most once
    stop_date: Optional[str] = None
    stopped_by: Optional[str] = None
    stopped_at: Optional[str] = None

    is_custom: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the persisted patient-record keys, omitting unset fields."""
        data = {}
        for attr, key in _WIRE_KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MedicationRecord":
        """Build from a persisted record. A missing `isActive` means active."""
        kwargs = {
            attr: data[key]
            for attr, key in _WIRE_KEYS.items()
            if key in data and data[key] is not None
        }
        kwargs.setdefault("dose", "As prescribed")
        return cls(**kwargs)


@dataclass(frozen=True)
class ReconciliationMetadata:
    """Who is reconciling, and when (ISO 8601)."""
    actor: str
    timestamp: str

    @classmethod
    def now(cls, actor: str) -> "ReconciliationMetadata":
        return cls(actor=actor, timestamp=datetime.now(timezone.utc).isoformat())
