# ============================================================================
# src/medication_reconciliation/llm/__init__.py
# ============================================================================
"""
LLM module - clients, response cache and prompts for the primary oracle
"""

from .base import BaseLLMClient, BackendType
from .cache import CacheEntry, CacheStatistics, ResponseCache
from .client import create_client, DEFAULT_BACKEND
from .ollama_client import OllamaLLMClient, DEFAULT_OLLAMA_MODEL
from .azure_client import AzureOpenAILLMClient
from .prompts import PromptTemplate, MEDICATION_EXTRACTION_TEMPLATE

__all__ = [
    "BaseLLMClient",
    "BackendType",
    "CacheEntry",
    "CacheStatistics",
    "ResponseCache",
    "create_client",
    "DEFAULT_BACKEND",
    "OllamaLLMClient",
    "DEFAULT_OLLAMA_MODEL",
    "AzureOpenAILLMClient",
    "PromptTemplate",
    "MEDICATION_EXTRACTION_TEMPLATE",
]
