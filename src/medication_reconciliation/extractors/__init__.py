# ============================================================================
# src/medication_reconciliation/extractors/__init__.py
# ============================================================================
"""
Extraction oracles - turn clinical note text into medication commands
"""

from .base import ExtractionOracle
from .stop_detector import StopCommandDetector
from .regex_extractor import RegexMedicationExtractor
from .llm_extractor import LLMMedicationExtractor

__all__ = [
    "ExtractionOracle",
    "StopCommandDetector",
    "RegexMedicationExtractor",
    "LLMMedicationExtractor",
]
