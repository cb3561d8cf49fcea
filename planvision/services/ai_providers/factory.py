"""
Provider registry and construction from settings
"""
from typing import Any, Dict, List, Optional, Type

import structlog

from planvision.core.config import settings
from .base import GenerativeProvider
from .exceptions import AIProviderError

logger = structlog.get_logger()


class AIProviderFactory:
    """Maps provider names to GenerativeProvider classes"""

    _providers: Dict[str, Type[GenerativeProvider]] = {}

    @classmethod
    def register_provider(cls, name: str, provider_class: Type[GenerativeProvider]):
        cls._providers[name] = provider_class

    @classmethod
    def create_provider(cls, provider_type: str, config: Optional[Dict[str, Any]] = None) -> GenerativeProvider:
        """
        Create a provider instance

        Args:
            provider_type: Registered provider name, e.g. gemini
            config: Keyword arguments for the provider constructor

        Raises:
            AIProviderError: If provider type is not registered
        """
        provider_class = cls._providers.get(provider_type)
        if provider_class is None:
            raise AIProviderError(
                f"Unsupported provider type: {provider_type}. "
                f"Available providers: {', '.join(cls.list_providers())}"
            )
        return provider_class(**(config or {}))

    @classmethod
    def from_settings(cls) -> GenerativeProvider:
        """Build the configured process-wide provider"""
        if not settings.GEMINI_API_KEY:
            logger.warning("GEMINI_API_KEY is not set; generation calls will be rejected upstream")

        provider = cls.create_provider(
            settings.AI_PROVIDER,
            {
                "api_key": settings.GEMINI_API_KEY or "",
                "image_model": settings.GEMINI_IMAGE_MODEL,
                "text_model": settings.GEMINI_TEXT_MODEL,
                "base_url": settings.GEMINI_BASE_URL,
                "timeout": settings.GEMINI_TIMEOUT,
            },
        )
        logger.info("Generative provider ready", provider=provider.provider_name)
        return provider

    @classmethod
    def list_providers(cls) -> List[str]:
        return list(cls._providers)
