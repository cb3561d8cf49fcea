"""
Generative AI provider abstraction layer
"""
from .base import GenerativeProvider
from .factory import AIProviderFactory
from .retry import RetryPolicy, is_rate_limited
from .exceptions import (
    AIProviderError,
    AuthenticationError,
    ExternalServiceError,
    QuotaExceededError,
    RateLimitError,
)

from .gemini_provider import GeminiProvider

# Register providers
AIProviderFactory.register_provider("gemini", GeminiProvider)

__all__ = [
    "GenerativeProvider",
    "AIProviderFactory",
    "RetryPolicy",
    "is_rate_limited",
    "AIProviderError",
    "AuthenticationError",
    "ExternalServiceError",
    "QuotaExceededError",
    "RateLimitError",
    "GeminiProvider",
]
