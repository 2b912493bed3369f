# ============================================================================
# src/medication_reconciliation/extractors/regex_extractor.py
# ============================================================================
"""
Regex Medication Extractor (fallback oracle)

Deterministic and network-independent. Parses the "Medications:" section of
a note line by line:

    Medications:
    - Inj. Ampicillin 100mg/kg IV q12h (Day 3)
    - Caffeine citrate 5mg/kg PO daily
    - Vitamin D3 400 IU

Each line is tried against a structured pattern (name, dose, route,
frequency). When that fails only the name is recovered. A leading verb
("Continue", "Increase", "Start") sets the action; lines without one are
"add". Stop lines are skipped here: stops come from StopCommandDetector
over the whole note.
"""

import re
from typing import Dict, Any, List, Optional

from .base import ExtractionOracle
from .stop_detector import STOP_PATTERNS, StopCommandDetector
from ..config import reconciliation_settings
from ..constants import (
    DOSAGE_FORM_PREFIXES,
    ROUTES,
    FREQUENCIES,
    NAME_STOP_WORDS,
    SECTION_TERMINATORS,
)
from ..core.context import (
    ExtractedCommand,
    ExtractionContext,
    MedicationAction,
    OracleResult,
)
from ..utils.drug_name_normalizer import normalize_drug_name


_ROUTE_ALT = "|".join(ROUTES)
_FREQ_ALT = "|".join(FREQUENCIES)

SECTION_PATTERN = re.compile(
    r"Medications?:\s*([\s\S]*?)(?=" + "|".join(SECTION_TERMINATORS) + r"|$)",
    re.IGNORECASE,
)

BULLET_PATTERN = re.compile(r"^(?:[\-\*•]|\d+[.)])\s*")

PREFIX_PATTERN = re.compile(
    r"^(?:" + "|".join(DOSAGE_FORM_PREFIXES) + r")\.?\s+",
    re.IGNORECASE,
)

ACTION_VERBS = {
    "start": MedicationAction.ADD,
    "begin": MedicationAction.ADD,
    "restart": MedicationAction.ADD,
    "resume": MedicationAction.ADD,
    "continue": MedicationAction.CONTINUE,
    "increase": MedicationAction.UPDATE,
    "decrease": MedicationAction.UPDATE,
    "reduce": MedicationAction.UPDATE,
    "change": MedicationAction.UPDATE,
    "adjust": MedicationAction.UPDATE,
    "titrate": MedicationAction.UPDATE,
}

VERB_PATTERN = re.compile(
    r"^(?P<verb>" + "|".join(ACTION_VERBS) + r")\b(?:\s+(?:the|on|to))?\s+",
    re.IGNORECASE,
)

# The name stops where a dose, route, frequency, "(Day n)" or the line end begins
MEDICATION_LINE_PATTERN = re.compile(
    r"^(?P<name>[A-Za-z][A-Za-z\s\-/]*?)"
    r"(?=\s+\d|\s+(?:" + _ROUTE_ALT + r")\b|\s+(?:" + _FREQ_ALT + r")\b|\s*\(|\s*$)"
    r"(?:\s+(?P<dose>\d+(?:\.\d+)?\s*(?:mg|mcg|g|ml|units?|%)?"
    r"(?:\s*/\s*kg)?(?:\s*/\s*dose)?(?:\s*/\s*day)?))?"
    r"\s*(?:(?P<route>" + _ROUTE_ALT + r")\b)?"
    r"\s*(?:(?P<frequency>" + _FREQ_ALT + r")\b)?",
    re.IGNORECASE,
)

TRAILING_DOSE_PATTERN = re.compile(r"\s+\d+.*$")


class RegexMedicationExtractor(ExtractionOracle):
    """
    Fallback extraction oracle.

    Config options (each defaults to reconciliation_settings):
        min_name_length, max_name_length, default_dose,
        structured_confidence, name_only_confidence
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        stop_detector: Optional[StopCommandDetector] = None,
    ):
        super().__init__()
        config = config or {}
        settings = reconciliation_settings

        self.min_name_length = config.get('min_name_length', settings.MIN_NAME_LENGTH)
        self.max_name_length = config.get('max_name_length', settings.MAX_FALLBACK_NAME_LENGTH)
        self.default_dose = config.get('default_dose', settings.DEFAULT_DOSE)
        self.structured_confidence = config.get(
            'structured_confidence', settings.STRUCTURED_MATCH_CONFIDENCE
        )
        self.name_only_confidence = config.get(
            'name_only_confidence', settings.NAME_ONLY_CONFIDENCE
        )
        self.stop_detector = stop_detector or StopCommandDetector(self.min_name_length)

    def get_name(self) -> str:
        return "RegexMedicationExtractor"

    async def extract(self, note_text: str, context: ExtractionContext) -> OracleResult:
        return self.parse(note_text)

    def parse(self, note_text: str) -> OracleResult:
        """Synchronous extraction; never touches the network."""
        stopped_names = self.stop_detector.detect(note_text)

        section = self.find_medication_section(note_text)
        if section is None:
            self.logger.warning("No Medications section found in note")
            return OracleResult(commands=[], stopped_names=stopped_names)

        commands = []
        for line in section.split("\n"):
            command = self.parse_line(line)
            if command is not None:
                commands.append(command)

        self.logger.debug(
            f"Regex extraction: {len(commands)} medications, {len(stopped_names)} stopped"
        )
        return OracleResult(commands=commands, stopped_names=stopped_names)

    @staticmethod
    def find_medication_section(note_text: str) -> Optional[str]:
        if not note_text:
            return None
        match = SECTION_PATTERN.search(note_text)
        return match.group(1) if match else None

    def parse_line(self, line: str) -> Optional[ExtractedCommand]:
        """
        Parse one section line.

        Returns None for blank, noise, "continue current" and stop lines.
        """
        trimmed = line.strip()
        if len(trimmed) < self.min_name_length:
            return None
        if "continue current" in trimmed.lower():
            return None
        if any(pattern.search(trimmed) for pattern in STOP_PATTERNS):
            return None

        body = BULLET_PATTERN.sub("", trimmed)
        action = MedicationAction.ADD
        verb = VERB_PATTERN.match(body)
        if verb:
            action = ACTION_VERBS[verb.group("verb").lower()]
            body = body[verb.end():]
        body = PREFIX_PATTERN.sub("", body).strip()

        command = self._parse_structured(body, trimmed, action)
        if command is None:
            command = self._parse_name_only(body, trimmed, action)
        return command

    def _parse_structured(
        self, body: str, source: str, action: MedicationAction
    ) -> Optional[ExtractedCommand]:
        match = MEDICATION_LINE_PATTERN.match(body)
        if not match:
            return None

        name = self._trim_stop_words(match.group("name"))
        normalized = normalize_drug_name(name)
        if len(name) < self.min_name_length or len(normalized) < self.min_name_length:
            return None

        dose = match.group("dose")
        route = match.group("route")
        frequency = match.group("frequency")

        return ExtractedCommand(
            name=normalized,
            dose=dose.strip() if dose else self.default_dose,
            route=route.upper() if route else None,
            frequency=frequency.lower() if frequency else None,
            action=action,
            confidence=self.structured_confidence,
            source_snippet=source,
        )

    def _parse_name_only(
        self, body: str, source: str, action: MedicationAction
    ) -> Optional[ExtractedCommand]:
        name = TRAILING_DOSE_PATTERN.sub("", body).strip()
        if not (self.min_name_length <= len(name) < self.max_name_length):
            return None

        normalized = normalize_drug_name(name)
        if len(normalized) < self.min_name_length:
            return None

        return ExtractedCommand(
            name=normalized,
            dose=self.default_dose,
            action=action,
            confidence=self.name_only_confidence,
            source_snippet=source,
        )

    @staticmethod
    def _trim_stop_words(name: str) -> str:
        words = name.split()
        while words and words[-1].lower() in NAME_STOP_WORDS:
            words.pop()
        return " ".join(words)
