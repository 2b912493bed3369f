# ============================================================================
# src/medication_reconciliation/llm/azure_client.py
# ============================================================================
"""
Azure OpenAI LLM Client

Text-only chat completions against an Azure OpenAI deployment.
Configuration comes from config or the AZURE_OPENAI_* environment variables.
"""

import asyncio
from typing import Dict, Any, Optional
from datetime import datetime

from openai import AzureOpenAI, OpenAIError

from .base import BaseLLMClient, BackendType
from ..utils.exceptions import ConfigurationError, InferenceError


class AzureOpenAILLMClient(BaseLLMClient):
    """
    Azure OpenAI inference client.

    The openai SDK call is synchronous; it runs in the default executor so
    the event loop stays free while waiting on the network.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self._client: Optional[AzureOpenAI] = None

        self.azure_endpoint = self.config.get('azure_endpoint', '')
        self.azure_api_key = self.config.get('azure_api_key', '')
        self.azure_deployment = self.config.get('azure_deployment', 'gpt-4o')
        self.azure_api_version = self.config.get('azure_api_version', '2024-02-01')

        self.default_max_tokens = self.config.get('max_tokens', 2000)
        self.default_temperature = self.config.get('temperature', 0.1)
        self.request_timeout = self.config.get('request_timeout', 30.0)

        if not self.is_configured():
            raise ConfigurationError(
                "Azure OpenAI credentials not configured. "
                "Set AZURE_OPENAI_ENDPOINT and AZURE_OPENAI_API_KEY."
            )

        self.logger.info(f"Initialized Azure OpenAI client: deployment={self.azure_deployment}")

    @property
    def backend_type(self) -> BackendType:
        return BackendType.AZURE

    @property
    def model_name(self) -> str:
        return self.azure_deployment

    @property
    def client(self) -> AzureOpenAI:
        """Lazy load Azure OpenAI client."""
        if self._client is None:
            self._client = AzureOpenAI(
                azure_endpoint=self.azure_endpoint,
                api_key=self.azure_api_key,
                api_version=self.azure_api_version,
                timeout=self.request_timeout,
            )
            self.logger.debug(f"Azure OpenAI SDK client created: endpoint={self.azure_endpoint}")
        return self._client

    def is_configured(self) -> bool:
        return bool(self.azure_endpoint and self.azure_api_key and self.azure_deployment)

    async def health_check(self) -> Dict[str, Any]:
        try:
            await self.generate("Reply with the word OK.", max_tokens=5, temperature=0.0)
        except (InferenceError, TimeoutError) as e:
            return {
                "healthy": False,
                "backend": "azure",
                "model": self.azure_deployment,
                "details": f"Health check failed: {e}"
            }
        return {
            "healthy": True,
            "backend": "azure",
            "model": self.azure_deployment,
            "details": "Azure OpenAI deployment reachable"
        }

    async def generate(
        self,
        prompt: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        json_mode: bool = False
    ) -> Dict[str, Any]:
        start_time = datetime.now()

        max_tokens = max_tokens or self.default_max_tokens
        temperature = temperature if temperature is not None else self.default_temperature

        request = {
            "model": self.azure_deployment,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if json_mode:
            request["response_format"] = {"type": "json_object"}

        def call_api():
            return self.client.chat.completions.create(**request)

        loop = asyncio.get_running_loop()
        try:
            response = await asyncio.wait_for(
                loop.run_in_executor(None, call_api),
                timeout=self.request_timeout,
            )
        except asyncio.TimeoutError:
            self._record_failure()
            raise TimeoutError(f"LLM request timed out after {self.request_timeout}s")
        except OpenAIError as e:
            self._record_failure()
            self.logger.error(f"Azure OpenAI inference failed: {type(e).__name__}: {e}")
            raise InferenceError(f"Azure OpenAI error: {e}") from e

        inference_time = (datetime.now() - start_time).total_seconds()
        self._record_inference(inference_time)

        usage = getattr(response, "usage", None)
        return {
            "text": (response.choices[0].message.content or "").strip(),
            "prompt_tokens": getattr(usage, "prompt_tokens", 0) if usage else 0,
            "generated_tokens": getattr(usage, "completion_tokens", 0) if usage else 0,
            "model": self.azure_deployment,
            "backend": "azure",
            "inference_time": inference_time,
        }
