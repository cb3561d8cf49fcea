"""
Generative provider exceptions.

``RateLimitError`` is the only retryable type; everything else is final as
far as the retry policy is concerned.
"""
from typing import Optional


class AIProviderError(Exception):
    """Base exception for generative provider failures"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(AIProviderError):
    """Upstream throttling (HTTP 429 / RESOURCE_EXHAUSTED)"""

    def __init__(self, message: str, retry_after: Optional[int] = None):
        super().__init__(message, status_code=429)
        self.retry_after = retry_after


class ExternalServiceError(AIProviderError):
    """Non-retryable generation failure: no content returned, or rate-limit retries exhausted"""


class AuthenticationError(AIProviderError):
    """Rejected API key"""


class QuotaExceededError(AIProviderError):
    """Billing quota exhausted; waiting will not help"""
