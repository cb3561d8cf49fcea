"""
Base generative provider interface
"""
from abc import ABC, abstractmethod
from typing import Optional


class GenerativeProvider(ABC):
    """Abstract base class for generative AI providers"""

    def __init__(self, api_key: str, **kwargs):
        self.api_key = api_key
        self.config = kwargs

    @abstractmethod
    async def generate_image(
        self,
        prompt: str,
        reference_image: Optional[bytes] = None,
        mime_type: str = "image/jpeg",
    ) -> bytes:
        """
        Generate an image from a prompt and an optional reference image

        Args:
            prompt: Full text prompt
            reference_image: Raw bytes of the source image
            mime_type: Content type of the reference image

        Returns:
            Raw bytes of the generated image

        Raises:
            RateLimitError: If the upstream service is throttling
            ExternalServiceError: If no image was produced
            AIProviderError: For any other provider failure
        """
        pass

    @abstractmethod
    async def generate_text(self, prompt: str) -> str:
        """
        Generate descriptive text for a prompt

        Raises:
            RateLimitError: If the upstream service is throttling
            ExternalServiceError: If no text was produced
        """
        pass

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of this provider"""
        pass
