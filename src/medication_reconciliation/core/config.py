# ============================================================================
# src/medication_reconciliation/core/config.py
# ============================================================================
"""
Centralized Configuration Management

Loads configuration from environment variables (.env file) with sensible defaults.
All LLM backend and cache values flow from this single source of truth.

Usage:
    from medication_reconciliation.core.config import get_config, Config

    # Get full config dict
    config = get_config()

    # Or use Config class for attribute access
    cfg = get_config_instance()
    print(cfg.ollama_host)
"""

import os
from pathlib import Path
from typing import Dict, Any
from dataclasses import dataclass, field, asdict
from functools import lru_cache

from dotenv import load_dotenv


def _load_dotenv() -> bool:
    """Load .env file from the current working directory if it exists."""
    cwd_env = Path.cwd() / '.env'
    if cwd_env.exists():
        load_dotenv(cwd_env)
        return True
    return False


def _get_bool(key: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in ('true', '1', 'yes', 'on')


def _get_int(key: str, default: int = 0) -> int:
    """Get integer from environment variable."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(key: str, default: float = 0.0) -> float:
    """Get float from environment variable."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass
class Config:
    """
    Configuration container with attribute access.

    All values are loaded from environment variables with defaults.
    """

    # General
    log_level: str = field(default_factory=lambda: os.getenv('LOG_LEVEL', 'INFO'))

    # LLM Backend: "ollama", "azure" or "none" (regex fallback only)
    backend: str = field(default_factory=lambda: os.getenv('BACKEND', 'ollama'))

    # Ollama
    ollama_host: str = field(default_factory=lambda: os.getenv('OLLAMA_HOST', 'http://localhost:11434'))
    ollama_model: str = field(default_factory=lambda: os.getenv('OLLAMA_MODEL', 'MedAIBase/MedGemma1.5:4b-it-q8_0'))

    # Azure OpenAI
    azure_deployment: str = field(default_factory=lambda: os.getenv('AZURE_OPENAI_CHAT_MODEL_DEPLOYMENT', 'gpt-4o'))
    azure_endpoint: str = field(default_factory=lambda: os.getenv('AZURE_OPENAI_ENDPOINT', ''))
    azure_api_key: str = field(default_factory=lambda: os.getenv('AZURE_OPENAI_API_KEY', ''))
    azure_api_version: str = field(default_factory=lambda: os.getenv('AZURE_OPENAI_API_VERSION', '2024-02-01'))

    # Generation
    max_tokens: int = field(default_factory=lambda: _get_int('MAX_TOKENS', 2000))
    temperature: float = field(default_factory=lambda: _get_float('TEMPERATURE', 0.1))
    request_timeout: float = field(default_factory=lambda: _get_float('REQUEST_TIMEOUT', 30.0))

    # Caching
    use_cache: bool = field(default_factory=lambda: _get_bool('USE_CACHE', True))
    cache_max_size: int = field(default_factory=lambda: _get_int('CACHE_MAX_SIZE', 256))
    cache_ttl: int = field(default_factory=lambda: _get_int('CACHE_TTL', 300))

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary for passing to components."""
        return asdict(self)


@lru_cache(maxsize=1)
def get_config() -> Dict[str, Any]:
    """
    Get configuration dictionary.

    Cached for performance - call once and pass to components.

    Returns:
        Configuration dictionary with all settings
    """
    _load_dotenv()
    return Config().to_dict()


def get_config_instance() -> Config:
    """
    Get Config instance for attribute access.

    Returns:
        Config instance with all settings
    """
    _load_dotenv()
    return Config()


def reload_config() -> Dict[str, Any]:
    """Reload configuration from environment."""
    get_config.cache_clear()
    return get_config()
