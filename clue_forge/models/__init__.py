"""
Unified model interface for LLM providers.

Classes:
    BaseModelInterface: Abstract provider contract
    UnifiedModelInterface: Provider dispatcher
    ChatCompletionsBackend: OpenAI, Mistral, DeepSeek and Meta/Together
    GeminiBackend: Google Gemini
    ProviderError: Categorized provider failure
"""

from .model_interface import (
    BaseModelInterface,
    UnifiedModelInterface,
    ChatCompletionsBackend,
    GeminiBackend,
    ProviderError,
    ProviderErrorKind,
    retry_with_exponential_backoff,
)

__all__ = [
    "BaseModelInterface",
    "UnifiedModelInterface",
    "ChatCompletionsBackend",
    "GeminiBackend",
    "ProviderError",
    "ProviderErrorKind",
    "retry_with_exponential_backoff",
]
