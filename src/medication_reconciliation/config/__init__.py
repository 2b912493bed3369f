# ============================================================================
# src/medication_reconciliation/config/__init__.py
# ============================================================================
"""
Convenient imports for all settings
"""

from .reconciliation_config import reconciliation_settings, ReconciliationSettings
from .llm_config import llm_settings, LLMSettings
from .logging_config import logging_settings, LoggingSettings
