# ============================================================================
# src/medication_reconciliation/reconciliation/__init__.py
# ============================================================================
"""
Reconciliation - match, merge and flatten medication lists
"""

from .fuzzy_matcher import FuzzyMatcher
from .engine import ReconciliationEngine
from .aggregator import flatten

__all__ = [
    "FuzzyMatcher",
    "ReconciliationEngine",
    "flatten",
]
