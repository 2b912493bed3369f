# ============================================================================
# src/medication_reconciliation/constants/medication_vocabulary.py
# ============================================================================
"""
Medication Vocabulary

Fixed word lists shared by the normalizer, the fallback extractor and the
stop-command detector:
- Dosage-form prefixes and nouns ("Inj.", "tablet", ...)
- Dose unit tokens
- Clinical shorthand aliases (ICU / NICU drug abbreviations)
- Route and frequency tokens recognised in medication lines
- Filler and stop words trimmed from captured names

Also provides the edit-distance function used for typo-tolerant matching.
"""

from typing import Dict, FrozenSet, Tuple


# Abbreviated dosage-form prefixes written before a drug name: "Inj. Ampicillin"
DOSAGE_FORM_PREFIXES: Tuple[str, ...] = ("Inj", "Tab", "Syp", "Cap")

# Dosage-form nouns written after a drug name: "Ampicillin injection"
DOSAGE_FORM_NOUNS: Tuple[str, ...] = ("injection", "tablet", "syrup", "capsule")

# Unit tokens that mark the start of an embedded dose: "Ampicillin 100mg"
DOSE_UNITS: Tuple[str, ...] = ("mcg", "mg", "ml", "g", "units", "unit")

# Clinical shorthand -> canonical generic name.
# Keys are in normalized case (first letter upper, rest lower).
DRUG_ALIASES: Dict[str, str] = {
    "Amp": "Ampicillin",
    "Gent": "Gentamicin",
    "Vanco": "Vancomycin",
    "Cef": "Cefotaxime",
    "Mero": "Meropenem",
    "Metro": "Metronidazole",
    "Dopa": "Dopamine",
    "Dob": "Dobutamine",
    "Epi": "Epinephrine",
    "Norepi": "Norepinephrine",
    "Phenobarb": "Phenobarbital",
    "Pheny": "Phenytoin",
    "Furo": "Furosemide",
    "Caff": "Caffeine",
}

# Routes recognised by the fallback line parser
ROUTES: Tuple[str, ...] = (
    "IV", "PO", "IM", "SC", "PR", "NG", "SL",
    "Inhalation", "Topical", "Rectal",
)

# Frequencies recognised by the fallback line parser (regex fragments)
FREQUENCIES: Tuple[str, ...] = (
    r"q\d+h", "BD", "TDS", "TID", "QID", "OD", "PRN",
    "Continuous", "STAT", "Once", "Daily",
)

# Words trimmed from the end of a name captured by the fallback parser
NAME_STOP_WORDS: FrozenSet[str] = frozenset({
    "at", "with", "for", "in", "on", "to", "and", "or", "the",
})

# Words trimmed from the end of a name captured by a stop command
STOP_FILLER_WORDS: FrozenSet[str] = frozenset({
    "today", "now", "immediately", "asap",
})

# Headings that close the "Medications:" section of a note
SECTION_TERMINATORS: Tuple[str, ...] = (
    r"\n\n",
    r"IV Fluids?:",
    r"Feeds?:",
    r"Nutrition:",
    r"Monitoring:",
    r"IMPRESSION",
    r"PLAN",
    r"Investigations?:",
    r"Labs?:",
)

# Distinct drugs whose names sit within fuzzy-match distance of each other.
# The edit-distance tier never pairs these; exact or alias matches still apply.
LOOK_ALIKE_NAMES: FrozenSet[FrozenSet[str]] = frozenset({
    frozenset({"ampicillin", "amoxicillin"}),
    frozenset({"novolin", "novolog"}),
})


def is_look_alike_pair(name1: str, name2: str) -> bool:
    """True when two names are a known look-alike pair (case-insensitive)."""
    pair = frozenset({name1.lower(), name2.lower()})
    return len(pair) == 2 and pair in LOOK_ALIKE_NAMES


def levenshtein_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein edit distance between two strings."""
    if len(s1) < len(s2):
        return levenshtein_distance(s2, s1)

    if len(s2) == 0:
        return len(s1)

    previous_row = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        current_row = [i + 1]
        for j, c2 in enumerate(s2):
            insertions = previous_row[j + 1] + 1
            deletions = current_row[j] + 1
            substitutions = previous_row[j] + (c1 != c2)
            current_row.append(min(insertions, deletions, substitutions))
        previous_row = current_row

    return previous_row[-1]
