# ============================================================================
# src/medication_reconciliation/core/context/enums.py
# ============================================================================
"""
Reconciliation Enums
- Medication command actions
- Extraction methods
"""

from enum import Enum
from typing import Any


class MedicationAction(str, Enum):
    ADD = "add"             # new order
    CONTINUE = "continue"   # ongoing, no change
    STOP = "stop"           # discontinue
    UPDATE = "update"       # dose / route / frequency change

    @classmethod
    def parse(cls, value: Any) -> "MedicationAction":
        """
        Map a free-form action value onto the closed set of actions.

        Unknown or missing values become ADD: a drug mentioned without a
        verb is treated as an order.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.ADD


class ExtractionMethod(str, Enum):
    PRIMARY = "primary"     # language-model oracle
    FALLBACK = "fallback"   # deterministic regex extractor
