# ============================================================================
# src/medication_reconciliation/extractors/stop_detector.py
# ============================================================================
"""
Stop Command Detector

Scans raw note text for discontinue / hold instructions, independently of
the medication-section parse. Recognised forms (case-insensitive):
- "stop / discontinue / DC / D/C / hold / cease <drug>"
- "<drug> stopped / discontinued / held / dc'd"
- "stop: / discontinue: <drug>"

Output names are normalized and de-duplicated in first-mention order.
"""

import re
import logging
from typing import List, Optional

from ..config import reconciliation_settings
from ..constants import STOP_FILLER_WORDS
from ..utils.drug_name_normalizer import normalize_drug_name


logger = logging.getLogger(__name__)


_DRUG = r"(?P<drug>[A-Za-z][A-Za-z\-]*)"

STOP_PATTERNS = (
    # "Stop ampicillin", "D/C the vancomycin"
    re.compile(
        r"\b(?:stop|discontinue|dc|d/c|hold|cease)\s+(?:the\s+)?" + _DRUG,
        re.IGNORECASE,
    ),
    # "Ampicillin stopped", "gentamicin has been discontinued"
    re.compile(
        r"\b" + _DRUG + r"\s+(?:(?:was|is|has\s+been|been)\s+)?(?:stopped|discontinued|held|dc'd)\b",
        re.IGNORECASE,
    ),
    # "Stop: ampicillin"
    re.compile(
        r"\b(?:stop|discontinue|dc|hold):\s*" + _DRUG,
        re.IGNORECASE,
    ),
)

# Auxiliaries that pattern 2 can capture in place of a drug: "was stopped"
_NON_DRUG_WORDS = frozenset({"was", "is", "been", "has", "were", "are", "the"})


class StopCommandDetector:
    """
    Finds drugs the note asks to stop.

    Example:
        >>> StopCommandDetector().detect("Stop amp today. Gentamicin discontinued.")
        ['Ampicillin', 'Gentamicin']
    """

    def __init__(self, min_name_length: Optional[int] = None):
        self.min_name_length = (
            min_name_length
            if min_name_length is not None
            else reconciliation_settings.MIN_NAME_LENGTH
        )

    def detect(self, text: str) -> List[str]:
        if not text or not text.strip():
            return []

        stopped: List[str] = []
        for pattern in STOP_PATTERNS:
            for match in pattern.finditer(text):
                name = self._clean(match.group("drug"))
                if not name:
                    continue
                normalized = normalize_drug_name(name)
                if len(normalized) < self.min_name_length:
                    continue
                if normalized not in stopped:
                    stopped.append(normalized)

        if stopped:
            logger.debug(f"Detected stop commands: {stopped}")
        return stopped

    def _clean(self, raw_name: str) -> str:
        """Trim trailing filler words; reject auxiliaries and short names."""
        words = raw_name.strip().split()
        while words and words[-1].lower() in STOP_FILLER_WORDS:
            words.pop()
        name = " ".join(words)

        if name.lower() in _NON_DRUG_WORDS:
            return ""
        if len(name) < self.min_name_length:
            return ""
        return name
