# ============================================================================
# src/medication_reconciliation/config/llm_config.py
# ============================================================================
"""
Primary Oracle (LLM) Settings
- Request timeout
- Generation parameters
- Response cache
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class LLMSettings(BaseSettings):
    LLM_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        gt=0,
        description="Upper bound on a single primary-oracle call before falling back"
    )
    LLM_MAX_TOKENS: int = Field(
        default=2000,
        description="Maximum tokens generated for one extraction"
    )
    LLM_TEMPERATURE: float = Field(
        default=0.1,
        ge=0.0, le=2.0,
        description="Sampling temperature (0.1 = near deterministic)"
    )


llm_settings = LLMSettings()
