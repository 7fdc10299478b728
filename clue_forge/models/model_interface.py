"""
Unified model interface for the LLM providers that generate trivia boards.

This module provides a uniform `generate_response(prompt, **options) -> str`
capability over several hosted providers:
- OpenAI, Mistral, DeepSeek and Meta/Together (OpenAI-compatible Chat Completions)
- Google Gemini (generateContent API)

Key Features:
- Provider failures surface as ProviderError, categorized as auth, rate
  limit, server, network or request errors
- Retry decorator with exponential backoff, applied by the calling layer
  (the board generator), never inside a backend
- Configuration-driven defaults from clue_forge_config.txt
- API key fallback: explicit argument > config > environment
"""

import logging
import os
import time
from abc import ABC, abstractmethod
from enum import Enum
from functools import wraps
from typing import Optional, Dict, Any, Callable

import requests

from ..utils.config_loader import get_config


class ProviderErrorKind(str, Enum):
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    SERVER = "server"
    NETWORK = "network"
    REQUEST = "request"


RETRYABLE_KINDS = (
    ProviderErrorKind.RATE_LIMIT,
    ProviderErrorKind.SERVER,
    ProviderErrorKind.NETWORK,
)


class ProviderError(Exception):
    """
    Failure reported by an LLM provider.

    Attributes:
        kind: Failure category
        status_code: HTTP status, when the provider answered
    """

    def __init__(
        self,
        message: str,
        kind: ProviderErrorKind,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        return self.kind in RETRYABLE_KINDS

    @classmethod
    def from_status(cls, provider: str, status_code: int, body: str = "") -> "ProviderError":
        """Categorize a non-success HTTP response."""
        if status_code in (401, 403):
            kind = ProviderErrorKind.AUTH
            message = (
                f"Authentication failed: {status_code}. Check that your {provider} "
                "API key is valid, has not expired, and has the correct format."
            )
        elif status_code == 429:
            kind = ProviderErrorKind.RATE_LIMIT
            message = f"Rate limit exceeded for {provider}"
        elif status_code >= 500:
            kind = ProviderErrorKind.SERVER
            message = f"The {provider} service is currently experiencing issues ({status_code})"
        else:
            kind = ProviderErrorKind.REQUEST
            message = f"{provider} API request failed: {status_code}"
        if body:
            message = f"{message}. Details: {body[:500]}"
        return cls(message, kind, status_code)


def is_retryable_error(error: Exception) -> bool:
    return isinstance(error, ProviderError) and error.retryable


def retry_with_exponential_backoff(
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 60.0,
    backoff_factor: float = 2.0,
    exceptions: tuple = (ProviderError,),
    should_retry: Callable[[Exception], bool] = is_retryable_error,
) -> Callable:
    """
    Decorator for retrying functions with exponential backoff.

    Args:
        max_attempts: Maximum number of attempts
        initial_delay: Initial delay between retries in seconds
        max_delay: Maximum delay between retries
        backoff_factor: Factor to multiply delay by after each attempt
        exceptions: Tuple of exceptions to catch
        should_retry: Predicate deciding whether a caught exception is retried

    Returns:
        Decorated function with retry logic
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            delay = initial_delay

            for attempt in range(max_attempts):
                try:
                    result = func(*args, **kwargs)
                    if result is not None and result.strip():
                        return result
                    # Truly empty response (None or only whitespace) - retry
                    if attempt < max_attempts - 1:
                        logging.warning(
                            f"Empty response from {getattr(func, '__name__', func)}, retrying... (attempt {attempt + 1}/{max_attempts})"
                        )
                    else:
                        logging.error(
                            f"Empty response from {getattr(func, '__name__', func)} after {max_attempts} attempts"
                        )
                        return ""

                except exceptions as e:
                    if not should_retry(e):
                        raise
                    if attempt < max_attempts - 1:
                        logging.warning(
                            f"Attempt {attempt + 1} failed: {e}. Retrying in {delay:.1f} seconds..."
                        )
                        time.sleep(delay)
                        delay = min(delay * backoff_factor, max_delay)
                    else:
                        logging.error(
                            f"All {max_attempts} attempts failed. Last error: {e}"
                        )
                        raise

            return ""

        return wrapper

    return decorator


class BaseModelInterface(ABC):
    """
    Base interface that all provider backends implement.

    Backends make exactly one request per call; retrying is the caller's job.
    """

    provider = "base"

    def __init__(
        self,
        model_name: str,
        api_key: Optional[str] = None,
        temperature: Optional[float] = None,
        timeout: Optional[int] = None,
    ):
        self.model_name = model_name
        self.logger = logging.getLogger(f"{self.__class__.__name__}")
        self.config = get_config()

        self.api_key = (
            api_key
            or self.config.get(f"DEFAULT_{self.provider.upper()}_API_KEY")
            or os.environ.get(f"{self.provider.upper()}_API_KEY")
        )
        if not self.api_key:
            raise ValueError(
                f"{self.provider} API key is required. Set DEFAULT_{self.provider.upper()}_API_KEY "
                f"in config, {self.provider.upper()}_API_KEY environment variable, or pass api_key parameter"
            )

        self.temperature = (
            temperature
            if temperature is not None
            else self.config.get_float("DEFAULT_TEMPERATURE", 0.7)
        )
        self.timeout = timeout or self.config.get_int("REQUEST_TIMEOUT_SECONDS", 60)

        self.last_token_usage = {}

    @abstractmethod
    def generate_response(
        self,
        prompt: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """
        Generate raw text for a prompt.

        Args:
            prompt: Full generation prompt
            max_tokens: Output token limit override
            temperature: Sampling temperature override

        Returns:
            Raw model text

        Raises:
            ProviderError: On any provider or transport failure
        """
        pass

    def get_last_token_usage(self) -> Dict[str, Any]:
        """Return token usage from last API call."""
        return self.last_token_usage.copy()

    def _post(self, url: str, payload: Dict[str, Any], headers: Dict[str, str]) -> Dict[str, Any]:
        """POST a JSON payload and return the decoded body, mapping failures to ProviderError."""
        self.logger.debug(f"Sending request to {self.provider} for model: {self.model_name}")
        try:
            response = requests.post(url, json=payload, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            self.logger.error(f"{self.provider} API request failed: {e}")
            raise ProviderError(
                f"Network error connecting to the {self.provider} API: {e}",
                ProviderErrorKind.NETWORK,
            ) from e

        if response.status_code != 200:
            self.logger.error(f"{self.provider} API Error: {response.status_code} - {response.text[:500]}")
            raise ProviderError.from_status(self.provider, response.status_code, response.text)

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(
                f"{self.provider} returned a non-JSON body", ProviderErrorKind.REQUEST, 200
            ) from e


class ChatCompletionsBackend(BaseModelInterface):
    """Backend for providers exposing the OpenAI-compatible Chat Completions API."""

    ENDPOINTS = {
        "openai": "https://api.openai.com/v1/chat/completions",
        "mistral": "https://api.mistral.ai/v1/chat/completions",
        "deepseek": "https://api.deepseek.com/v1/chat/completions",
        "meta": "https://api.together.xyz/v1/chat/completions",
    }
    DEFAULT_MODELS = {
        "openai": "gpt-4",
        "mistral": "mistral-large-latest",
        "deepseek": "deepseek-chat",
        "meta": "meta-llama-3-70b-instruct",
    }

    def __init__(self, provider: str, model_name: Optional[str] = None, **kwargs):
        if provider not in self.ENDPOINTS:
            raise ValueError(f"Unsupported chat completions provider: {provider}")
        self.provider = provider
        self.api_url = self.ENDPOINTS[provider]
        super().__init__(model_name or self.DEFAULT_MODELS[provider], **kwargs)

    def generate_response(
        self,
        prompt: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        payload = {
            "model": self.model_name,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens or self.config.get_int("MAX_OUTPUT_TOKENS", 4000),
            "temperature": temperature if temperature is not None else self.temperature,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        response_data = self._post(self.api_url, payload, headers)

        if "usage" in response_data:
            usage = response_data["usage"]
            self.last_token_usage = {
                "input_tokens": usage.get("prompt_tokens", 0),
                "output_tokens": usage.get("completion_tokens", 0),
                "total_tokens": usage.get("total_tokens", 0),
            }

        choices = response_data.get("choices") or []
        if not choices:
            raise ProviderError(
                f"No choices in {self.provider} response", ProviderErrorKind.REQUEST, 200
            )

        generated_text = (choices[0].get("message") or {}).get("content") or ""
        self.logger.info(f"Received {len(generated_text)} chars from {self.provider}/{self.model_name}")
        return generated_text.strip()


class GeminiBackend(BaseModelInterface):
    """Google Gemini generateContent backend."""

    provider = "gemini"
    API_URL = "https://generativelanguage.googleapis.com/v1/models/{model}:generateContent"

    def __init__(self, model_name: Optional[str] = None, **kwargs):
        super().__init__(model_name or "gemini-1.5-pro", **kwargs)
        self.api_url = self.API_URL.format(model=self.model_name)

    def generate_response(
        self,
        prompt: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature if temperature is not None else self.temperature,
                "maxOutputTokens": max_tokens or self.config.get_int("MAX_OUTPUT_TOKENS", 4000),
            },
        }
        headers = {"Content-Type": "application/json", "x-goog-api-key": self.api_key}

        response_data = self._post(self.api_url, payload, headers)

        usage = response_data.get("usageMetadata")
        if usage:
            self.last_token_usage = {
                "input_tokens": usage.get("promptTokenCount", 0),
                "output_tokens": usage.get("candidatesTokenCount", 0),
                "total_tokens": usage.get("totalTokenCount", 0),
            }

        try:
            generated_text = response_data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(
                "Unexpected Gemini response structure", ProviderErrorKind.REQUEST, 200
            ) from e

        self.logger.info(f"Received {len(generated_text)} chars from gemini/{self.model_name}")
        return generated_text.strip()


class UnifiedModelInterface:
    """
    Single entry point over every supported provider.

    Usage examples:
    # OpenAI with the default model
    model = UnifiedModelInterface("openai", api_key="sk-...")

    # Mistral with an explicit model
    model = UnifiedModelInterface("mistral", model_name="mistral-small-latest")

    # Gemini
    model = UnifiedModelInterface("gemini")
    """

    PROVIDERS = tuple(ChatCompletionsBackend.ENDPOINTS) + ("gemini",)

    def __init__(self, provider: Optional[str] = None, model_name: Optional[str] = None, **kwargs):
        """
        Initialize unified model interface.

        Args:
            provider: One of openai, mistral, deepseek, meta, gemini
            model_name: Provider model, defaults to the provider's default
            **kwargs: api_key, temperature, timeout
        """
        self.logger = logging.getLogger("UnifiedModelInterface")
        self.config = get_config()

        self.provider = (provider or self.config.get_string("DEFAULT_PROVIDER", "openai")).lower()
        model_name = model_name or self.config.get_string("DEFAULT_MODEL", "") or None

        if self.provider == "gemini":
            self.backend = GeminiBackend(model_name, **kwargs)
        elif self.provider in ChatCompletionsBackend.ENDPOINTS:
            self.backend = ChatCompletionsBackend(self.provider, model_name, **kwargs)
        else:
            raise ValueError(
                f"Unsupported provider: {provider}. Use one of {', '.join(self.PROVIDERS)}"
            )

        self.model_name = self.backend.model_name
        self.logger.info(f"Initialized {self.provider} model: {self.model_name}")

    def generate_response(self, prompt: str, **options) -> str:
        """Generate response using the configured backend."""
        return self.backend.generate_response(prompt, **options)

    def get_last_token_usage(self) -> Dict[str, Any]:
        return self.backend.get_last_token_usage()
