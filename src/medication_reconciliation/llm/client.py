# ============================================================================
# src/medication_reconciliation/llm/client.py
# ============================================================================
"""
LLM Client Factory

Provides a unified way to create the client behind the primary oracle.
Supported backends:
- ollama: Ollama server (default)
- azure: Azure OpenAI deployment
- none: no client; extraction always uses the regex fallback

Usage:
    from medication_reconciliation.llm.client import create_client

    client = create_client({'backend': 'ollama'})
    result = await client.generate(prompt, json_mode=True)
"""

from typing import Dict, Any, Optional
import logging

from .base import BaseLLMClient, BackendType
from .ollama_client import OllamaLLMClient, DEFAULT_OLLAMA_MODEL
from .azure_client import AzureOpenAILLMClient
from ..core.config import get_config
from ..utils.exceptions import ConfigurationError


DEFAULT_BACKEND = "ollama"

_logger = logging.getLogger(__name__)


def create_client(config: Optional[Dict[str, Any]] = None) -> Optional[BaseLLMClient]:
    """
    Factory function to create an LLM client.

    Configuration is loaded from the environment (.env) and merged with any
    passed config. Passed config values take precedence.

    Args:
        config: Configuration dict with at minimum:
            - backend: "ollama" | "azure" | "none" (default: "ollama")

            Ollama-specific:
            - ollama_host, ollama_model

            Azure-specific:
            - azure_endpoint, azure_api_key, azure_deployment, azure_api_version

            Common:
            - max_tokens, temperature, request_timeout

    Returns:
        Configured client, or None for backend "none"

    Raises:
        ConfigurationError: Unknown backend or missing credentials
    """
    config = {**get_config(), **(config or {})}
    backend = (config.get('backend') or DEFAULT_BACKEND).lower()

    if backend == "none":
        _logger.info("LLM backend disabled; regex fallback only")
        return None

    if backend == BackendType.OLLAMA.value:
        client = OllamaLLMClient(config)
    elif backend == BackendType.AZURE.value:
        client = AzureOpenAILLMClient(config)
    else:
        raise ConfigurationError(
            f"Unknown backend: {backend}. "
            f"Supported backends: ollama, azure, none"
        )

    _logger.info(f"Created {backend} client: {client.model_name}")
    return client


__all__ = [
    "create_client",
    "BaseLLMClient",
    "BackendType",
    "OllamaLLMClient",
    "AzureOpenAILLMClient",
    "DEFAULT_BACKEND",
    "DEFAULT_OLLAMA_MODEL",
]
