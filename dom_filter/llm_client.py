"""
LLM Client with Ollama/OpenAI/Anthropic provider switch.

LLMClient.create picks a provider from an explicit argument or the
LLM_PROVIDER env var. Ollama is reached through its OpenAI-compatible
endpoint, so it shares OpenAIClient. Each provider implements BaseLLMClient,
so the locator advisor never needs to know which model answers.
"""

import os
from abc import ABC, abstractmethod
from typing import Optional
from enum import Enum

from .logger import get_module_logger
from .exceptions import LLMClientError

logger = get_module_logger("llm_client")

DEFAULT_OLLAMA_BASE_URL = "http://localhost:11434/v1"


class LLMProvider(Enum):
    """Supported LLM providers."""
    OLLAMA = "ollama"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


class BaseLLMClient(ABC):
    """Abstract base class for LLM clients."""

    @abstractmethod
    def complete(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        """
        Send a prompt to the LLM and return the response.

        Args:
            prompt: The user prompt
            system_prompt: Optional system prompt

        Returns:
            The LLM's response text
        """
        pass

    @property
    def provider_name(self) -> str:
        return "unknown"


class OpenAIClient(BaseLLMClient):
    """OpenAI API client, also used for Ollama's OpenAI-compatible API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-4o",
        base_url: Optional[str] = None,
        provider: str = "openai"
    ):
        self.provider = provider
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise LLMClientError(
                "OpenAI API key not provided",
                provider=provider
            )
        self.model = model

        # Lazy import: the SDK is only needed once this provider is chosen.
        try:
            from openai import OpenAI
            self.client = OpenAI(api_key=self.api_key, base_url=base_url)
        except ImportError:
            raise LLMClientError(
                "openai package not installed. Run: pip install openai",
                provider=provider
            )

    @property
    def provider_name(self) -> str:
        return self.provider

    def complete(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        """Send prompt and return response."""
        messages = []

        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})

        messages.append({"role": "user", "content": prompt})

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                # locators should be reproducible, not creative
                temperature=0.1,
                max_tokens=200
            )
            return response.choices[0].message.content or ""
        except Exception as e:
            logger.error(f"{self.provider} API error: {e}")
            raise LLMClientError(
                f"{self.provider} API call failed: {str(e)}",
                provider=self.provider,
                details={"error": str(e)}
            )


class AnthropicClient(BaseLLMClient):
    """Anthropic API client."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "claude-sonnet-4-20250514"
    ):
        self.api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise LLMClientError(
                "Anthropic API key not provided",
                provider="anthropic"
            )
        self.model = model

        try:
            import anthropic
            self.client = anthropic.Anthropic(api_key=self.api_key)
        except ImportError:
            raise LLMClientError(
                "anthropic package not installed. Run: pip install anthropic",
                provider="anthropic"
            )

    @property
    def provider_name(self) -> str:
        return "anthropic"

    def complete(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        """Send prompt to Anthropic and return response."""
        try:
            kwargs = {
                "model": self.model,
                "max_tokens": 1024,
                "temperature": 0.1,
                "messages": [{"role": "user", "content": prompt}]
            }

            if system_prompt:
                kwargs["system"] = system_prompt

            response = self.client.messages.create(**kwargs)
            return response.content[0].text
        except Exception as e:
            logger.error(f"Anthropic API error: {e}")
            raise LLMClientError(
                f"Anthropic API call failed: {str(e)}",
                provider="anthropic",
                details={"error": str(e)}
            )


class LLMClient:
    """
    Factory class for creating LLM clients with provider switch.

    Usage:
        # Using environment variable LLM_PROVIDER (default: ollama)
        client = LLMClient.create()

        # Explicit provider
        client = LLMClient.create(provider=LLMProvider.OPENAI)
    """

    @staticmethod
    def create(
        provider: Optional[LLMProvider] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None
    ) -> BaseLLMClient:
        """
        Create an LLM client for the specified provider.

        Args:
            provider: LLM provider (defaults to env var LLM_PROVIDER or 'ollama')
            api_key: API key (defaults to provider-specific env var)
            model: Model name (defaults to env var LLM_MODEL, then provider default)

        Returns:
            Configured LLM client
        """
        if provider is None:
            provider_str = os.getenv("LLM_PROVIDER", "ollama").lower()
            try:
                provider = LLMProvider(provider_str)
            except ValueError:
                logger.warning(
                    f"Unknown LLM_PROVIDER '{provider_str}', defaulting to ollama"
                )
                provider = LLMProvider.OLLAMA

        model = model or os.getenv("LLM_MODEL")
        logger.info(f"Creating LLM client for provider: {provider.value}")

        if provider == LLMProvider.OLLAMA:
            # Ollama ignores the key, but the OpenAI SDK insists on one
            return OpenAIClient(
                api_key=api_key or "ollama",
                model=model or "mistral:7b",
                base_url=os.getenv("OLLAMA_BASE_URL", DEFAULT_OLLAMA_BASE_URL),
                provider="ollama"
            )

        elif provider == LLMProvider.OPENAI:
            kwargs = {"api_key": api_key}
            if model:
                kwargs["model"] = model
            return OpenAIClient(**kwargs)

        elif provider == LLMProvider.ANTHROPIC:
            kwargs = {"api_key": api_key}
            if model:
                kwargs["model"] = model
            return AnthropicClient(**kwargs)

        else:
            raise LLMClientError(
                f"Unsupported provider: {provider}",
                provider=str(provider)
            )
