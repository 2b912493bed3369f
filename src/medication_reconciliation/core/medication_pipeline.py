# ============================================================================
# src/medication_reconciliation/core/medication_pipeline.py
# ============================================================================
"""
Medication Pipeline

Entry points callers use:
1. extract_medications: primary oracle, else regex fallback
2. reconcile_medications: merge commands into the existing list
3. process_note: extract + reconcile + flatten in one call

Pipeline Flow:
    Note → Oracle (primary | fallback) → {commands, stop names}
         → ReconciliationEngine → ReconciliationResult → flat list
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .config import get_config
from .context import (
    ExtractedCommand,
    ExtractionContext,
    ExtractionMethod,
    MedicationExtractionResult,
    MedicationRecord,
    OracleResult,
    ReconciliationMetadata,
    ReconciliationResult,
)
from ..extractors.base import ExtractionOracle
from ..extractors.llm_extractor import LLMMedicationExtractor
from ..extractors.regex_extractor import RegexMedicationExtractor
from ..llm.cache import ResponseCache
from ..llm.client import create_client
from ..reconciliation.aggregator import flatten
from ..reconciliation.engine import ReconciliationEngine
from ..utils.exceptions import InferenceError, OracleFailure
from ..utils.logging import log_performance


logger = logging.getLogger(__name__)

# Failures of the primary oracle that are recovered by falling back
RECOVERABLE_ORACLE_ERRORS = (
    OracleFailure,
    InferenceError,
    asyncio.TimeoutError,
    ConnectionError,
    TimeoutError,
)


@dataclass
class NoteReconciliation:
    """Everything a note editor needs after saving a note."""
    extraction: MedicationExtractionResult
    reconciliation: ReconciliationResult
    medications: List[MedicationRecord] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return self.reconciliation.has_changes

    @property
    def summary(self) -> str:
        return self.reconciliation.summary()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "extraction": self.extraction.to_dict(),
            "reconciliation": self.reconciliation.to_dict(),
            "medications": [m.to_dict() for m in self.medications],
            "hasChanges": self.has_changes,
            "summary": self.summary,
        }


def _elapsed_ms(start: float) -> int:
    return int(round((time.perf_counter() - start) * 1000))


def _mean_confidence(commands: Sequence[ExtractedCommand]) -> float:
    if not commands:
        return 0.0
    return sum(c.confidence for c in commands) / len(commands)


async def extract_medications(
    note_text: str,
    context: Optional[ExtractionContext] = None,
    oracle: Optional[ExtractionOracle] = None,
    fallback: Optional[ExtractionOracle] = None,
) -> MedicationExtractionResult:
    """
    Extract medication commands from a note.

    The primary oracle is tried first. Its failure (exception, invalid
    response, timeout) or an empty medication list selects the fallback.
    Errors raised by the fallback itself propagate.

    Args:
        note_text: Raw clinical note
        context: Patient context for the primary oracle
        oracle: Primary oracle; None behaves as an unconfigured primary
        fallback: Fallback oracle (default: RegexMedicationExtractor)

    Returns:
        MedicationExtractionResult with the method used and elapsed time
    """
    start = time.perf_counter()
    context = context or ExtractionContext()

    if not note_text or not note_text.strip():
        return MedicationExtractionResult(
            method=ExtractionMethod.FALLBACK,
            processing_time_ms=_elapsed_ms(start),
        )

    result: Optional[OracleResult] = None
    method = ExtractionMethod.PRIMARY

    if oracle is None:
        logger.warning("No primary oracle configured; using regex fallback")
    else:
        try:
            result = await oracle.extract(note_text, context)
        except RECOVERABLE_ORACLE_ERRORS as e:
            reason = getattr(e, "reason", type(e).__name__)
            logger.warning(f"Primary extraction failed ({reason}): {e}; using regex fallback")
            result = None
        except Exception as e:
            logger.error(
                f"Primary oracle {oracle.get_name()} raised {type(e).__name__}: {e}; "
                "using regex fallback",
                exc_info=True,
            )
            result = None

        if result is not None and not result.commands:
            logger.warning("Primary extraction found no medications; using regex fallback")
            result = None

    if result is None:
        method = ExtractionMethod.FALLBACK
        fallback = fallback or RegexMedicationExtractor()
        result = await fallback.extract(note_text, context)

    extraction = MedicationExtractionResult(
        medications=list(result.commands),
        stopped_medications=list(result.stopped_names),
        total_found=len(result.commands) + len(result.stopped_names),
        confidence=_mean_confidence(result.commands),
        method=method,
        processing_time_ms=_elapsed_ms(start),
    )

    logger.info(
        f"Extraction complete: method={extraction.method.value} "
        f"medications={len(extraction.medications)} "
        f"stopped={len(extraction.stopped_medications)} "
        f"confidence={extraction.confidence:.2f} "
        f"time={extraction.processing_time_ms}ms",
        extra={"extra": {
            "method": extraction.method.value,
            "total_found": extraction.total_found,
            "processing_time_ms": extraction.processing_time_ms,
        }},
    )
    return extraction


@log_performance(logger, "Medication reconciliation")
def reconcile_medications(
    extracted: Sequence[ExtractedCommand],
    existing: Sequence[MedicationRecord],
    stopped_names: Sequence[str],
    metadata: ReconciliationMetadata,
    engine: Optional[ReconciliationEngine] = None,
) -> ReconciliationResult:
    """Merge extracted commands into an existing list. Warnings land in `errors`."""
    engine = engine or ReconciliationEngine()
    return engine.reconcile(extracted, stopped_names, existing, metadata)


async def process_note(
    note_text: str,
    context: Optional[ExtractionContext],
    existing: Sequence[MedicationRecord],
    actor: str,
    timestamp: Optional[str] = None,
    oracle: Optional[ExtractionOracle] = None,
    fallback: Optional[ExtractionOracle] = None,
    engine: Optional[ReconciliationEngine] = None,
) -> NoteReconciliation:
    """
    Extract, reconcile and flatten in one call.

    Args:
        note_text: Raw clinical note
        context: Patient context
        existing: Current medication list (not mutated)
        actor: Who is saving the note
        timestamp: ISO 8601 time of the change (default: now, UTC)

    Returns:
        NoteReconciliation bundle with the flattened list to persist
    """
    metadata = (
        ReconciliationMetadata(actor=actor, timestamp=timestamp)
        if timestamp
        else ReconciliationMetadata.now(actor)
    )

    extraction = await extract_medications(note_text, context, oracle=oracle, fallback=fallback)
    reconciliation = reconcile_medications(
        extraction.medications,
        existing,
        extraction.stopped_medications,
        metadata,
        engine=engine,
    )

    bundle = NoteReconciliation(
        extraction=extraction,
        reconciliation=reconciliation,
        medications=flatten(reconciliation),
    )
    if bundle.has_changes:
        logger.info(f"Medications updated: {bundle.summary}")
    return bundle


class MedicationPipeline:
    """
    Configured pipeline that owns its oracles, cache and engine.

    Configuration is loaded from .env and merged with the passed config
    (passed values take precedence). Components may be injected instead.

    Example:
        pipeline = MedicationPipeline({'backend': 'ollama'})
        bundle = await pipeline.process_note(note, context, existing, "Dr. Rao")
        await pipeline.close()
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        oracle: Optional[ExtractionOracle] = None,
        fallback: Optional[ExtractionOracle] = None,
        engine: Optional[ReconciliationEngine] = None,
        cache: Optional[ResponseCache] = None,
    ):
        self.config = {**get_config(), **(config or {})}
        self.client = None

        if cache is None and self.config.get('use_cache', True):
            cache = ResponseCache(
                max_size=self.config.get('cache_max_size', 256),
                default_ttl=self.config.get('cache_ttl', 300),
            )
        self.cache = cache

        if oracle is None:
            self.client = create_client(self.config)
            oracle = LLMMedicationExtractor(
                self.client,
                cache=self.cache,
                timeout=self.config.get('request_timeout'),
                config=self.config,
            )

        self.oracle = oracle
        self.fallback = fallback or RegexMedicationExtractor()
        self.engine = engine or ReconciliationEngine()

    async def extract(
        self,
        note_text: str,
        context: Optional[ExtractionContext] = None,
    ) -> MedicationExtractionResult:
        return await extract_medications(note_text, context, self.oracle, self.fallback)

    def reconcile(
        self,
        extracted: Sequence[ExtractedCommand],
        existing: Sequence[MedicationRecord],
        stopped_names: Sequence[str],
        metadata: ReconciliationMetadata,
    ) -> ReconciliationResult:
        return reconcile_medications(extracted, existing, stopped_names, metadata, self.engine)

    async def process_note(
        self,
        note_text: str,
        context: Optional[ExtractionContext],
        existing: Sequence[MedicationRecord],
        actor: str,
        timestamp: Optional[str] = None,
    ) -> NoteReconciliation:
        return await process_note(
            note_text,
            context,
            existing,
            actor,
            timestamp=timestamp,
            oracle=self.oracle,
            fallback=self.fallback,
            engine=self.engine,
        )

    def clear_cache(self):
        if self.cache is not None:
            self.cache.clear()

    async def close(self):
        if self.client is not None:
            await self.client.close()
