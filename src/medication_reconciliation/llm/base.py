# ============================================================================
# src/medication_reconciliation/llm/base.py
# ============================================================================
"""
Base LLM Client Interface

Defines the abstract interface that every language-model backend behind the
primary extraction oracle must implement.
Supported backends:
- ollama: Ollama server (local, lightweight)
- azure: Azure OpenAI deployment (cloud)
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
from enum import Enum
import logging
import json
import re

from json_repair import repair_json


# ```json ... ``` fences some models wrap around their answer
_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


class BackendType(Enum):
    """Supported inference backends."""
    OLLAMA = "ollama"    # Ollama server
    AZURE = "azure"      # Azure OpenAI


class BaseLLMClient(ABC):
    """
    Abstract base class for LLM inference clients.

    All backends must implement:
    - generate(): Async text generation
    - health_check(): Verify backend is available
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.logger = logging.getLogger(self.__class__.__name__)

        # Common statistics
        self._inference_count = 0
        self._failure_count = 0
        self._total_inference_time = 0.0

    @property
    @abstractmethod
    def backend_type(self) -> BackendType:
        """Return the backend type."""
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the model identifier."""
        pass

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        json_mode: bool = False
    ) -> Dict[str, Any]:
        """
        Generate response from prompt.

        Args:
            prompt: Input text prompt
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature (0.0 = deterministic)
            json_mode: If True, ask the backend to constrain output to JSON

        Returns:
            {
                "text": str,              # Generated text
                "prompt_tokens": int,     # Input token count
                "generated_tokens": int,  # Output token count
                "model": str,             # Model identifier
                "backend": str,           # Backend type
                "inference_time": float,  # Seconds
            }

        Raises:
            InferenceError: Backend returned an error status
            ConnectionError: Backend unreachable
            TimeoutError: Request exceeded the configured timeout
        """
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """
        Check if the backend is available and ready.

        Returns:
            {
                "healthy": bool,
                "backend": str,
                "model": str,
                "details": str
            }
        """
        pass

    async def close(self):
        """Release transport resources. Backends without any keep the default."""
        return None

    @staticmethod
    def strip_code_fences(response_text: str) -> str:
        """Remove a surrounding markdown code fence, if any."""
        return _FENCE_PATTERN.sub("", response_text.strip()).strip()

    def extract_json(self, response_text: str) -> Optional[Dict]:
        """
        Extract JSON object from generated text.

        Models often wrap JSON in markdown fences or prose:
        "Here are the medications: {"medications": [...]}"

        This extracts the JSON portion. Uses json_repair as fallback for
        malformed JSON (single quotes, trailing commas, etc).
        """
        if not response_text or not response_text.strip():
            self.logger.warning("Empty response text, no JSON to extract")
            return None

        response_text = self.strip_code_fences(response_text)

        # Try 1: Direct parse of entire response
        try:
            parsed = json.loads(response_text)
            if isinstance(parsed, dict):
                return parsed
        except json.JSONDecodeError:
            pass

        # Try 2: Extract JSON block by brace matching
        start_idx = response_text.find('{')
        if start_idx == -1:
            self.logger.warning("No JSON object found in response")
            return None

        depth = 0
        end_idx = len(response_text) - 1
        for i, char in enumerate(response_text[start_idx:], start=start_idx):
            if char == '{':
                depth += 1
            elif char == '}':
                depth -= 1
                if depth == 0:
                    end_idx = i
                    break

        json_str = response_text[start_idx:end_idx + 1]

        try:
            parsed = json.loads(json_str)
            if isinstance(parsed, dict):
                return parsed
        except json.JSONDecodeError:
            pass

        # Try 3: json_repair on the extracted block
        repaired = repair_json(json_str, return_objects=True)
        if isinstance(repaired, dict) and repaired:
            self.logger.debug("json_repair fixed extracted JSON block")
            return repaired

        self.logger.warning(f"Could not parse JSON from response: {response_text[:200]}...")
        return None

    def _record_inference(self, inference_time: float):
        self._inference_count += 1
        self._total_inference_time += inference_time

    def _record_failure(self):
        self._failure_count += 1

    def get_statistics(self) -> Dict[str, Any]:
        """Get inference statistics."""
        avg_time = (
            self._total_inference_time / self._inference_count
            if self._inference_count > 0
            else 0.0
        )

        return {
            "backend": self.backend_type.value,
            "model": self.model_name,
            "inference_count": self._inference_count,
            "failure_count": self._failure_count,
            "total_inference_time": self._total_inference_time,
            "average_inference_time": avg_time,
        }
