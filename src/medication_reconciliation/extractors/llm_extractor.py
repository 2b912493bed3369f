# ============================================================================
# src/medication_reconciliation/extractors/llm_extractor.py
# ============================================================================
"""
LLM Medication Extractor (primary oracle)

Delegates the whole extraction, including action classification, to a
language model through the fixed prompt contract in llm/prompts.py.

Response handling:
- Markdown fences stripped, malformed JSON recovered with json_repair
- Missing or non-list `medications` is an OracleFailure
- Names normalized; names normalizing below the minimum length dropped
- Confidences clamped to [0, 1]; missing confidence gets the default
- Commands with action "stop" are added to the stopped list
"""

import asyncio
from typing import Dict, Any, List, Optional

from .base import ExtractionOracle
from ..config import llm_settings, reconciliation_settings
from ..core.context import (
    ExtractedCommand,
    ExtractionContext,
    MedicationAction,
    OracleResult,
)
from ..llm.base import BaseLLMClient
from ..llm.cache import ResponseCache
from ..llm.prompts import MEDICATION_EXTRACTION_TEMPLATE
from ..utils.drug_name_normalizer import normalize_drug_name
from ..utils.exceptions import InferenceError, OracleFailure


class LLMMedicationExtractor(ExtractionOracle):
    """
    Primary extraction oracle.

    Args:
        client: LLM client, or None when no backend is configured
        cache: Optional ResponseCache keyed on note text + patient context + model
        timeout: Seconds before the call is abandoned (default: LLM_TIMEOUT_SECONDS)

    Example:
        extractor = LLMMedicationExtractor(create_client(), cache=ResponseCache())
        result = await extractor.extract(note_text, context)
    """

    def __init__(
        self,
        client: Optional[BaseLLMClient],
        cache: Optional[ResponseCache] = None,
        timeout: Optional[float] = None,
        config: Optional[Dict[str, Any]] = None,
    ):
        super().__init__()
        config = config or {}

        self.client = client
        self.cache = cache
        self.timeout = timeout if timeout is not None else llm_settings.LLM_TIMEOUT_SECONDS
        self.max_tokens = config.get('max_tokens', llm_settings.LLM_MAX_TOKENS)
        self.temperature = config.get('temperature', llm_settings.LLM_TEMPERATURE)
        self.min_name_length = config.get('min_name_length', reconciliation_settings.MIN_NAME_LENGTH)
        self.default_dose = config.get('default_dose', reconciliation_settings.DEFAULT_DOSE)
        self.default_confidence = config.get(
            'default_confidence', reconciliation_settings.DEFAULT_ORACLE_CONFIDENCE
        )

    def get_name(self) -> str:
        return "LLMMedicationExtractor"

    async def extract(self, note_text: str, context: ExtractionContext) -> OracleResult:
        if self.client is None:
            raise OracleFailure("LLM client not configured", reason="not_configured")

        context_block = context.to_prompt_block()
        cache_key = "\n".join([self.client.model_name, context_block, note_text])

        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                self.logger.debug("Cache hit; reusing extraction")
                return cached

        prompt = MEDICATION_EXTRACTION_TEMPLATE.format(
            patient_context=context_block,
            note_text=note_text,
        )

        try:
            response = await asyncio.wait_for(
                self.client.generate(
                    prompt,
                    max_tokens=self.max_tokens,
                    temperature=self.temperature,
                    json_mode=True,
                ),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, TimeoutError) as e:
            raise OracleFailure(
                f"LLM call timed out after {self.timeout}s", reason="timeout"
            ) from e
        except (InferenceError, ConnectionError) as e:
            raise OracleFailure(f"LLM call failed: {e}", reason="transport") from e

        payload = self.client.extract_json(response.get("text", ""))
        result = self.parse_response(payload)

        if self.cache is not None:
            self.cache.set(cache_key, result)

        return result

    def parse_response(self, payload: Optional[Dict[str, Any]]) -> OracleResult:
        """
        Validate and normalize a decoded response object.

        Raises:
            OracleFailure: payload is not an object or lacks a `medications` list
        """
        if not isinstance(payload, dict):
            raise OracleFailure("LLM response is not a JSON object", reason="invalid_json")

        raw_medications = payload.get("medications")
        if not isinstance(raw_medications, list):
            raise OracleFailure(
                "LLM response missing 'medications' array", reason="invalid_schema"
            )

        commands: List[ExtractedCommand] = []
        for item in raw_medications:
            command = self._to_command(item)
            if command is not None:
                commands.append(command)

        stopped_names: List[str] = []
        raw_stopped = payload.get("stoppedMedications") or []
        if isinstance(raw_stopped, list):
            for raw_name in raw_stopped:
                self._add_stop_name(stopped_names, raw_name)

        for command in commands:
            if command.action == MedicationAction.STOP:
                self._add_stop_name(stopped_names, command.name)

        return OracleResult(commands=commands, stopped_names=stopped_names)

    def _to_command(self, item: Any) -> Optional[ExtractedCommand]:
        if not isinstance(item, dict):
            return None

        name = normalize_drug_name(str(item.get("name") or ""))
        if len(name) < self.min_name_length:
            self.logger.debug(f"Dropping malformed command: {item.get('name')!r}")
            return None

        return ExtractedCommand(
            name=name,
            dose=str(item.get("dose") or self.default_dose).strip(),
            route=self._optional_text(item.get("route")),
            frequency=self._optional_text(item.get("frequency")),
            action=MedicationAction.parse(item.get("action")),
            confidence=self._clamp_confidence(item.get("confidence")),
            source_snippet=str(item.get("sourceSnippet") or item.get("extractedFrom") or ""),
        )

    @staticmethod
    def _optional_text(value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    def _clamp_confidence(self, value: Any) -> float:
        try:
            confidence = float(value)
        except (TypeError, ValueError):
            return self.default_confidence
        return min(1.0, max(0.0, confidence))

    def _add_stop_name(self, stopped_names: List[str], raw_name: Any) -> None:
        if not isinstance(raw_name, str):
            return
        name = normalize_drug_name(raw_name)
        if len(name) >= self.min_name_length and name not in stopped_names:
            stopped_names.append(name)
