# ============================================================================
# src/medication_reconciliation/reconciliation/fuzzy_matcher.py
# ============================================================================
"""
Fuzzy Medication Matcher

Finds active records that plausibly refer to the same drug as a name.
Tiers, in order:
1. Exact case-insensitive equality of raw names
2. Equality after normalization
3. Levenshtein distance <= max_distance between normalized forms, except
   for known look-alike drug pairs (e.g. Ampicillin / Amoxicillin)
"""

import logging
from typing import List, Optional, Sequence

from ..config import reconciliation_settings
from ..constants import is_look_alike_pair, levenshtein_distance
from ..core.context import MedicationRecord
from ..utils.drug_name_normalizer import normalize_drug_name


logger = logging.getLogger(__name__)


class FuzzyMatcher:
    """
    Match a drug name against a medication list (active records only).

    Example:
        matcher = FuzzyMatcher()
        record = matcher.find_best_match("Ampicilin", medications)
    """

    def __init__(self, max_distance: Optional[int] = None):
        self.max_distance = (
            max_distance
            if max_distance is not None
            else reconciliation_settings.FUZZY_MAX_DISTANCE
        )

    def find_best_match(
        self,
        name: str,
        medications: Sequence[MedicationRecord],
    ) -> Optional[MedicationRecord]:
        """Return the first active record hit by the earliest matching tier."""
        active = [m for m in medications if m.is_active]
        if not name or not active:
            return None

        # Tier 1: exact
        lowered = name.lower()
        for med in active:
            if med.name.lower() == lowered:
                logger.debug(f"Exact match: {name!r} == {med.name!r}")
                return med

        # Tier 2: normalized
        normalized = normalize_drug_name(name).lower()
        for med in active:
            if normalize_drug_name(med.name).lower() == normalized:
                logger.debug(f"Normalized match: {name!r} -> {med.name!r}")
                return med

        # Tier 3: edit distance
        for med in active:
            med_normalized = normalize_drug_name(med.name).lower()
            if self.within_distance(med_normalized, normalized):
                distance = levenshtein_distance(med_normalized, normalized)
                logger.warning(f"Fuzzy match (distance={distance}): {name!r} -> {med.name!r}")
                return med

        return None

    def find_all_matches(
        self,
        name: str,
        medications: Sequence[MedicationRecord],
    ) -> List[MedicationRecord]:
        """Return every active record satisfying any tier, in list order."""
        if not name:
            return []

        lowered = name.lower()
        normalized = normalize_drug_name(name).lower()

        matches = []
        for med in medications:
            if not med.is_active:
                continue
            if self.is_match(med, lowered, normalized):
                matches.append(med)
        return matches

    def is_match(self, med: MedicationRecord, lowered: str, normalized: str) -> bool:
        if med.name.lower() == lowered:
            return True
        med_normalized = normalize_drug_name(med.name).lower()
        if med_normalized == normalized:
            return True
        return self.within_distance(med_normalized, normalized)

    def within_distance(self, name1: str, name2: str) -> bool:
        """Typo tolerance on lowercase normalized names; look-alike drugs never match."""
        if is_look_alike_pair(name1, name2):
            return False
        return levenshtein_distance(name1, name2) <= self.max_distance
