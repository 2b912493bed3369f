# ============================================================================
# src/medication_reconciliation/utils/drug_name_normalizer.py
# ============================================================================
"""
Drug Name Normalization

Canonicalizes a raw drug-name token so that names written differently in
notes and on the medication list compare equal:
- Strips dosage-form prefixes ("Inj.", "Tab", "Syp.", "Cap")
- Strips embedded doses ("Ampicillin 100mg" -> "Ampicillin")
- Strips trailing dosage-form nouns ("... injection")
- Standardizes case ("ampicillin" -> "Ampicillin")
- Expands clinical shorthand ("Gent" -> "Gentamicin")

The function is pure; all matching in the engine is built on it.
"""

import re
from functools import lru_cache

from ..constants import DOSAGE_FORM_PREFIXES, DOSAGE_FORM_NOUNS, DOSE_UNITS, DRUG_ALIASES


_PREFIX_PATTERN = re.compile(
    r"^(?:" + "|".join(DOSAGE_FORM_PREFIXES) + r")\.?\s+",
    re.IGNORECASE,
)

_EMBEDDED_DOSE_PATTERN = re.compile(
    r"\s+\d+(?:\.\d+)?\s*(?:" + "|".join(DOSE_UNITS) + r")\b.*$",
    re.IGNORECASE,
)

_FORM_NOUN_PATTERN = re.compile(
    r"\s+(?:" + "|".join(DOSAGE_FORM_NOUNS) + r")s?$",
    re.IGNORECASE,
)


@lru_cache(maxsize=2048)
def normalize_drug_name(raw_name: str) -> str:
    """
    Normalize a drug name for consistent matching.

    Args:
        raw_name: Name as written in a note or stored on a record

    Returns:
        Canonical name, or "" for empty / whitespace-only input

    Example:
        >>> normalize_drug_name("Inj. Ampicillin 100mg")
        'Ampicillin'
        >>> normalize_drug_name("gent")
        'Gentamicin'
    """
    if not raw_name:
        return ""

    name = " ".join(raw_name.split())
    if not name:
        return ""

    name = _PREFIX_PATTERN.sub("", name).strip()
    name = _EMBEDDED_DOSE_PATTERN.sub("", name).strip()
    name = _FORM_NOUN_PATTERN.sub("", name).strip()

    if not name:
        return ""

    name = name[0].upper() + name[1:].lower()

    return DRUG_ALIASES.get(name, name)


def names_equivalent(first: str, second: str) -> bool:
    """Check whether two raw names normalize to the same canonical form."""
    return normalize_drug_name(first).lower() == normalize_drug_name(second).lower()
