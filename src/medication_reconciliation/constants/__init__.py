# ============================================================================
# src/medication_reconciliation/constants/__init__.py
# ============================================================================
"""
Convenient imports for all constants
"""

from .medication_vocabulary import (
    DOSAGE_FORM_PREFIXES,
    DOSAGE_FORM_NOUNS,
    DOSE_UNITS,
    DRUG_ALIASES,
    ROUTES,
    FREQUENCIES,
    NAME_STOP_WORDS,
    STOP_FILLER_WORDS,
    SECTION_TERMINATORS,
    LOOK_ALIKE_NAMES,
    is_look_alike_pair,
    levenshtein_distance,
)
