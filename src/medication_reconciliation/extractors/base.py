# ============================================================================
# src/medication_reconciliation/extractors/base.py
# ============================================================================
"""
Abstract Extraction Oracle

Every way of turning a clinical note into medication commands implements
this interface:
- extract(note_text, context): commands + stop names
- get_name(): oracle identifier for logs

Implementations:
- LLMMedicationExtractor: network-backed, natural-language capable
- RegexMedicationExtractor: deterministic, network-independent
"""

from abc import ABC, abstractmethod
import logging

from ..core.context import ExtractionContext, OracleResult


class ExtractionOracle(ABC):
    """Converts unstructured note text into structured medication commands."""

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.get_name()}")

    @abstractmethod
    async def extract(self, note_text: str, context: ExtractionContext) -> OracleResult:
        """
        Extract medication commands and stop names from a note.

        Args:
            note_text: Raw clinical note
            context: Patient context (age, unit, diagnosis, current medications)

        Returns:
            OracleResult with commands and normalized stop names

        Raises:
            OracleFailure: The oracle could not produce a usable result
        """
        pass

    @abstractmethod
    def get_name(self) -> str:
        """Return oracle name for logging, e.g. "RegexMedicationExtractor"."""
        pass
