# ============================================================================
# src/medication_reconciliation/config/reconciliation_config.py
# ============================================================================
"""
Extraction & Reconciliation Settings
- Fuzzy matching tolerance
- Name length bounds
- Fallback extractor confidences
- Default dose placeholder
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class ReconciliationSettings(BaseSettings):
    FUZZY_MAX_DISTANCE: int = Field(
        default=2,
        ge=0,
        description="Maximum Levenshtein distance for a typo-tolerant name match"
    )
    MIN_NAME_LENGTH: int = Field(
        default=3,
        ge=1,
        description="Names shorter than this are treated as extraction noise"
    )
    MAX_FALLBACK_NAME_LENGTH: int = Field(
        default=50,
        description="Name-only fallback rejects names at or above this length"
    )
    DEFAULT_DOSE: str = Field(
        default="As prescribed",
        description="Dose placeholder when a statement carries no dose"
    )
    STRUCTURED_MATCH_CONFIDENCE: float = Field(
        default=0.8,
        ge=0.0, le=1.0,
        description="Confidence of a fully parsed fallback medication line"
    )
    NAME_ONLY_CONFIDENCE: float = Field(
        default=0.6,
        ge=0.0, le=1.0,
        description="Confidence of a fallback line where only the name was recovered"
    )
    DEFAULT_ORACLE_CONFIDENCE: float = Field(
        default=0.9,
        ge=0.0, le=1.0,
        description="Confidence assumed when the primary oracle omits one"
    )


reconciliation_settings = ReconciliationSettings()
