# ============================================================================
# tests/unit/test_medication_pipeline.py
# ============================================================================
"""
Tests for the extraction / reconciliation entry points
"""

import pytest

from medication_reconciliation.core.context import (
    ExtractedCommand,
    ExtractionContext,
    ExtractionMethod,
    MedicationAction,
    MedicationRecord,
    OracleResult,
)
from medication_reconciliation.core.medication_pipeline import (
    MedicationPipeline,
    extract_medications,
    process_note,
    reconcile_medications,
)
from medication_reconciliation.extractors.base import ExtractionOracle
from medication_reconciliation.extractors.llm_extractor import LLMMedicationExtractor
from medication_reconciliation.utils.exceptions import OracleFailure


class StaticOracle(ExtractionOracle):
    """Returns a fixed result and counts calls"""

    def __init__(self, result: OracleResult):
        super().__init__()
        self.result = result
        self.calls = 0

    def get_name(self) -> str:
        return "StaticOracle"

    async def extract(self, note_text, context):
        self.calls += 1
        return self.result


class FailingOracle(ExtractionOracle):
    """Always raises the given error"""

    def __init__(self, error: Exception):
        super().__init__()
        self.error = error

    def get_name(self) -> str:
        return "FailingOracle"

    async def extract(self, note_text, context):
        raise self.error


class TestExtractMedications:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        OracleFailure("bad response", reason="invalid_json"),
        ConnectionError("refused"),
        TimeoutError("slow"),
        RuntimeError("bug in oracle"),
    ])
    async def test_fallback_when_primary_throws(self, sample_note, error):
        result = await extract_medications(sample_note, ExtractionContext(), oracle=FailingOracle(error))

        assert result.method == ExtractionMethod.FALLBACK
        assert [m.name for m in result.medications] == ["Ampicillin", "Gentamicin", "Caffeine citrate"]
        assert result.stopped_medications == ["Vancomycin"]
        assert result.total_found == 4
        assert result.confidence == pytest.approx(0.8)

    @pytest.mark.asyncio
    async def test_primary_result_used(self, sample_note):
        oracle = StaticOracle(OracleResult(
            commands=[
                ExtractedCommand(name="Ampicillin", dose="100mg/kg", confidence=0.9),
                ExtractedCommand(name="Caffeine", dose="10mg", confidence=0.7,
                                 action=MedicationAction.UPDATE),
            ],
            stopped_names=["Vancomycin"],
        ))

        result = await extract_medications(sample_note, ExtractionContext(), oracle=oracle)

        assert result.method == ExtractionMethod.PRIMARY
        assert [m.name for m in result.medications] == ["Ampicillin", "Caffeine"]
        assert result.total_found == 3
        assert result.confidence == pytest.approx(0.8)
        assert result.processing_time_ms >= 0

    @pytest.mark.asyncio
    async def test_empty_primary_result_falls_back(self, sample_note):
        oracle = StaticOracle(OracleResult(commands=[], stopped_names=["Vancomycin"]))

        result = await extract_medications(sample_note, ExtractionContext(), oracle=oracle)

        assert result.method == ExtractionMethod.FALLBACK
        assert len(result.medications) == 3

    @pytest.mark.asyncio
    async def test_no_primary_configured(self, sample_note):
        result = await extract_medications(sample_note)

        assert result.method == ExtractionMethod.FALLBACK
        assert len(result.medications) == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize("note", ["", "   \n  "])
    async def test_empty_note_short_circuits(self, note):
        oracle = StaticOracle(OracleResult())

        result = await extract_medications(note, ExtractionContext(), oracle=oracle)

        assert oracle.calls == 0
        assert result.method == ExtractionMethod.FALLBACK
        assert result.medications == []
        assert result.stopped_medications == []
        assert result.total_found == 0
        assert result.confidence == 0.0

    @pytest.mark.asyncio
    async def test_fallback_without_medications_section(self):
        result = await extract_medications("Stable overnight. Hold caffeine.", oracle=None)

        assert result.medications == []
        assert result.stopped_medications == ["Caffeine"]
        assert result.confidence == 0.0

    @pytest.mark.asyncio
    async def test_llm_primary_end_to_end(self, fake_client_factory, llm_response, sample_note, extraction_context):
        oracle = LLMMedicationExtractor(fake_client_factory(response_text=llm_response))

        result = await extract_medications(sample_note, extraction_context, oracle=oracle)

        assert result.method == ExtractionMethod.PRIMARY
        assert [m.name for m in result.medications] == ["Ampicillin", "Caffeine"]
        assert result.stopped_medications == ["Vancomycin"]
        assert result.confidence == pytest.approx(0.9)

    @pytest.mark.asyncio
    async def test_llm_garbage_falls_back(self, fake_client_factory, sample_note):
        oracle = LLMMedicationExtractor(fake_client_factory(response_text="Sorry, I can't help."))

        result = await extract_medications(sample_note, ExtractionContext(), oracle=oracle)

        assert result.method == ExtractionMethod.FALLBACK

    @pytest.mark.asyncio
    async def test_to_dict_uses_wire_keys(self, sample_note):
        data = (await extract_medications(sample_note)).to_dict()

        assert data["method"] == "fallback"
        assert data["totalFound"] == 4
        assert data["stoppedMedications"] == ["Vancomycin"]
        assert "processingTimeMs" in data
        assert data["medications"][0]["action"] == "add"


class TestReconcileMedications:

    def test_delegates_to_engine(self, existing_medications, metadata):
        commands = [ExtractedCommand(name="Ampicillin", dose="100mg/kg")]

        result = reconcile_medications(commands, existing_medications, ["Vancomycin"], metadata)

        assert [m.name for m in result.added] == ["Ampicillin"]
        assert [m.name for m in result.stopped] == ["Vancomycin"]


class TestProcessNote:

    @pytest.mark.asyncio
    async def test_full_flow(self, fake_client_factory, llm_response, sample_note,
                             extraction_context, existing_medications):
        oracle = LLMMedicationExtractor(fake_client_factory(response_text=llm_response))

        bundle = await process_note(
            sample_note,
            extraction_context,
            existing_medications,
            "Dr. Rao",
            timestamp="2024-03-05T10:00:00Z",
            oracle=oracle,
        )

        assert bundle.extraction.method == ExtractionMethod.PRIMARY
        assert [m.name for m in bundle.medications] == [
            "Ampicillin", "Caffeine", "Vancomycin", "Cefotaxime",
        ]
        assert bundle.reconciliation.updated[0].dose == "10mg"
        assert bundle.reconciliation.added[0].added_at == "2024-03-05T10:00:00Z"
        assert bundle.has_changes
        assert bundle.summary == "1 added, 1 updated, 1 stopped"

        data = bundle.to_dict()
        assert data["hasChanges"] is True
        assert data["medications"][2]["isActive"] is False
        assert data["medications"][2]["stoppedBy"] == "Dr. Rao"

    @pytest.mark.asyncio
    async def test_timestamp_defaults_to_now(self, sample_note):
        bundle = await process_note(sample_note, None, [], "Dr. Rao")

        added = bundle.reconciliation.added[0]
        assert added.added_by == "Dr. Rao"
        assert added.added_at is not None
        assert added.added_at == added.start_date

    @pytest.mark.asyncio
    async def test_stop_and_continue_inside_section(self, metadata):
        existing = [
            MedicationRecord(name="Gentamicin", dose="4mg/kg", added_at="2024-03-01T09:00:00Z"),
            MedicationRecord(name="Caffeine", dose="5mg", added_at="2024-03-02T09:00:00Z"),
        ]
        note = (
            "Medications:\n"
            "- Inj. Ampicillin 100mg/kg IV q12h\n"
            "- Stop Gentamicin\n"
            "- Continue caffeine 5mg PO daily\n"
        )

        bundle = await process_note(note, None, existing, metadata.actor, timestamp=metadata.timestamp)

        result = bundle.reconciliation
        assert [m.name for m in result.added] == ["Ampicillin"]
        assert [m.name for m in result.stopped] == ["Gentamicin"]
        assert [m.name for m in result.unchanged] == ["Caffeine"]
        assert result.updated == []
        assert [m.name for m in bundle.medications if m.is_active] == ["Ampicillin", "Caffeine"]
        assert not any(m.name.lower().startswith(("stop", "continue")) for m in bundle.medications)

    @pytest.mark.asyncio
    async def test_note_without_medications(self, existing_medications):
        bundle = await process_note("Baby stable.", None, existing_medications, "Dr. Rao")

        assert not bundle.has_changes
        assert bundle.summary == ""
        assert bundle.medications == existing_medications


class TestMedicationPipeline:

    @pytest.mark.asyncio
    async def test_offline_pipeline_uses_fallback(self, sample_note, existing_medications):
        pipeline = MedicationPipeline({"backend": "none", "use_cache": False})

        bundle = await pipeline.process_note(
            sample_note, ExtractionContext(), existing_medications, "Dr. Rao",
            timestamp="2024-03-05T10:00:00Z",
        )
        await pipeline.close()

        assert pipeline.client is None
        assert pipeline.cache is None
        assert bundle.extraction.method == ExtractionMethod.FALLBACK
        assert [m.name for m in bundle.reconciliation.stopped] == ["Vancomycin"]

    @pytest.mark.asyncio
    async def test_injected_oracle(self, sample_note):
        oracle = StaticOracle(OracleResult(commands=[ExtractedCommand(name="Dopamine", confidence=0.9)]))
        pipeline = MedicationPipeline({"use_cache": False}, oracle=oracle)

        result = await pipeline.extract(sample_note)

        assert pipeline.client is None
        assert oracle.calls == 1
        assert result.method == ExtractionMethod.PRIMARY

    def test_cache_built_from_config(self):
        pipeline = MedicationPipeline({"backend": "none", "use_cache": True, "cache_max_size": 8, "cache_ttl": 30})

        assert pipeline.cache.max_size == 8
        assert pipeline.cache.default_ttl == 30
        assert pipeline.oracle.cache is pipeline.cache

        pipeline.cache.set("note", "cached")
        pipeline.clear_cache()
        assert len(pipeline.cache) == 0

    def test_reconcile(self, existing_medications, metadata):
        pipeline = MedicationPipeline({"backend": "none", "use_cache": False})

        result = pipeline.reconcile([], existing_medications, ["Caffeine"], metadata)

        assert [m.name for m in result.stopped] == ["Caffeine"]
