# ============================================================================
# FILE: tests/conftest.py
# ============================================================================
"""
Pytest configuration and shared fixtures for testing.
"""

import asyncio
import logging
import json
from typing import Any, Dict, Optional

import pytest

from medication_reconciliation.core.context import (
    ExtractionContext,
    MedicationRecord,
    ReconciliationMetadata,
)
from medication_reconciliation.llm.base import BaseLLMClient, BackendType


class FakeLLMClient(BaseLLMClient):
    """
    In-process stand-in for an LLM backend.

    Returns `response_text` from generate(), or raises `error` when set.
    `delay` makes generate() sleep first, for timeout tests.
    """

    def __init__(
        self,
        response_text: str = "",
        error: Optional[BaseException] = None,
        delay: float = 0.0,
    ):
        super().__init__({})
        self.response_text = response_text
        self.error = error
        self.delay = delay
        self.calls = []

    @property
    def backend_type(self) -> BackendType:
        return BackendType.OLLAMA

    @property
    def model_name(self) -> str:
        return "fake-model"

    async def generate(self, prompt, max_tokens=None, temperature=None, json_mode=False) -> Dict[str, Any]:
        self.calls.append({"prompt": prompt, "json_mode": json_mode})
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        self._record_inference(0.01)
        return {
            "text": self.response_text,
            "prompt_tokens": 0,
            "generated_tokens": 0,
            "model": self.model_name,
            "backend": "fake",
            "inference_time": 0.01,
        }

    async def health_check(self) -> Dict[str, Any]:
        return {"healthy": True, "backend": "fake", "model": self.model_name, "details": "fake"}


@pytest.fixture
def sample_note():
    """NICU progress note with a Medications section and a stop command"""
    return (
        "Day 3 of life. Stable on room air.\n"
        "\n"
        "Medications:\n"
        "- Inj. Ampicillin 100mg/kg IV q12h\n"
        "- Gentamicin 4mg/kg IV q24h\n"
        "- Caffeine citrate 20mg/kg PO daily\n"
        "- Continue current feeds\n"
        "\n"
        "Stop vancomycin today.\n"
    )


@pytest.fixture
def extraction_context():
    return ExtractionContext(age=3, age_unit="days", care_unit="NICU", diagnosis="Sepsis")


@pytest.fixture
def metadata():
    return ReconciliationMetadata(actor="Dr. Rao", timestamp="2024-03-05T10:00:00Z")


@pytest.fixture
def existing_medications():
    """Current list: two active orders and one already stopped"""
    return [
        MedicationRecord(
            name="Vancomycin",
            dose="15mg/kg",
            route="IV",
            frequency="q8h",
            start_date="2024-03-01T09:00:00Z",
            added_by="Dr. Lee",
            added_at="2024-03-01T09:00:00Z",
        ),
        MedicationRecord(
            name="Caffeine",
            dose="5mg",
            route="IV",
            frequency="daily",
            start_date="2024-03-02T09:00:00Z",
            added_by="Dr. Lee",
            added_at="2024-03-02T09:00:00Z",
        ),
        MedicationRecord(
            name="Cefotaxime",
            dose="50mg/kg",
            is_active=False,
            added_at="2024-02-20T09:00:00Z",
            stop_date="2024-02-25T09:00:00Z",
        ),
    ]


@pytest.fixture
def llm_response():
    """Well-formed primary oracle response"""
    return json.dumps({
        "medications": [
            {
                "name": "Amp",
                "dose": "100mg/kg",
                "route": "IV",
                "frequency": "q12h",
                "action": "add",
                "confidence": 0.95,
                "sourceSnippet": "Inj Amp 100mg/kg IV q12h",
            },
            {
                "name": "caffeine",
                "dose": "10mg",
                "action": "update",
                "confidence": 0.85,
                "sourceSnippet": "Increase caffeine to 10mg",
            },
        ],
        "stoppedMedications": ["Vanco"],
    })


@pytest.fixture
def fake_client_factory():
    return FakeLLMClient


@pytest.fixture(autouse=True)
def reset_root_logging():
    """Drop handlers installed by setup_logging() so later tests never write to a closed capture stream"""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)
    root.setLevel(level)
