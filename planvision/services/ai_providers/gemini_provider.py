"""
Google Gemini provider implementation for image and text generation
"""
import asyncio
import base64
from typing import Any, Dict, List, Optional

import aiohttp
import structlog

from .base import GenerativeProvider
from .exceptions import (
    AIProviderError,
    AuthenticationError,
    ExternalServiceError,
    QuotaExceededError,
    RateLimitError,
)

logger = structlog.get_logger()


class GeminiProvider(GenerativeProvider):
    """Google Gemini provider using the generateContent REST endpoint"""

    def __init__(
        self,
        api_key: str,
        image_model: str = "gemini-2.5-flash-image",
        text_model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        **kwargs,
    ):
        super().__init__(api_key, **kwargs)
        self.image_model = image_model
        self.text_model = text_model
        self.base_url = base_url.rstrip("/")
        self.timeout = kwargs.get("timeout", 120)

    @property
    def provider_name(self) -> str:
        return "gemini"

    async def generate_image(
        self,
        prompt: str,
        reference_image: Optional[bytes] = None,
        mime_type: str = "image/jpeg",
    ) -> bytes:
        """Generate an image, optionally conditioned on a reference image"""
        logger.info(
            "Generating image with Gemini",
            provider="gemini",
            model=self.image_model,
            prompt_preview=prompt[:50],
            has_reference=reference_image is not None,
        )

        parts: List[Dict[str, Any]] = [{"text": prompt}]
        if reference_image is not None:
            parts.append({
                "inline_data": {
                    "mime_type": mime_type,
                    "data": base64.b64encode(reference_image).decode("utf-8"),
                }
            })

        payload = {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {"responseModalities": ["TEXT", "IMAGE"]},
        }

        result = await self._generate_content(self.image_model, payload)
        image_bytes = self._extract_image(result)
        logger.info("Gemini image data received", provider="gemini", size_bytes=len(image_bytes))
        return image_bytes

    async def generate_text(self, prompt: str) -> str:
        """Generate text from a prompt"""
        logger.info(
            "Generating text with Gemini",
            provider="gemini",
            model=self.text_model,
            prompt_preview=prompt[:100],
        )

        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"maxOutputTokens": 8192, "temperature": 0.9},
        }

        result = await self._generate_content(self.text_model, payload)
        return self._extract_text(result)

    async def _generate_content(self, model: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/models/{model}:generateContent"
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key,
        }

        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
                async with session.post(url, headers=headers, json=payload) as response:
                    logger.info(
                        "Gemini API response received",
                        provider="gemini",
                        model=model,
                        status_code=response.status,
                    )
                    await self._handle_response_errors(response)
                    return await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(
                "Gemini API request failed",
                provider="gemini",
                error=str(e),
                error_type=type(e).__name__
            )
            raise AIProviderError(f"Gemini API request failed: {e}") from e

    async def _handle_response_errors(self, response: aiohttp.ClientResponse):
        """Map Gemini HTTP errors onto provider exceptions"""
        if response.status == 200:
            return

        error_status = ""
        try:
            error_data = await response.json()
            error = error_data.get("error", {})
            error_message = error.get("message", "Unknown error")
            error_status = error.get("status", "")
        except (aiohttp.ContentTypeError, ValueError):
            error_message = f"HTTP {response.status}"

        if response.status in (401, 403):
            logger.error(
                "Gemini authentication failed",
                provider="gemini",
                status_code=response.status,
                error_message=error_message
            )
            raise AuthenticationError(f"Gemini authentication failed: {error_message}", response.status)
        elif response.status == 429 or error_status == "RESOURCE_EXHAUSTED":
            retry_after = response.headers.get("retry-after")
            retry_after = int(retry_after) if retry_after and retry_after.isdigit() else None
            logger.warning(
                "Gemini rate limit exceeded",
                provider="gemini",
                retry_after_seconds=retry_after,
                error_message=error_message
            )
            raise RateLimitError(f"Gemini rate limit exceeded: {error_message}", retry_after)
        elif response.status == 402:
            logger.error("Gemini quota exceeded", provider="gemini", error_message=error_message)
            raise QuotaExceededError(f"Gemini quota exceeded: {error_message}", response.status)
        else:
            logger.error(
                "Gemini API error",
                provider="gemini",
                status_code=response.status,
                error_message=error_message
            )
            raise AIProviderError(f"Gemini API error {response.status}: {error_message}", response.status)

    def _candidate_parts(self, response: Dict[str, Any]) -> List[Dict[str, Any]]:
        candidates = response.get("candidates") or []
        if not candidates:
            raise ExternalServiceError("No content received from model.")

        parts = (candidates[0].get("content") or {}).get("parts") or []
        if not parts:
            raise ExternalServiceError("No content received from model.")
        return parts

    def _extract_image(self, response: Dict[str, Any]) -> bytes:
        """Return the first inline image in a generateContent response"""
        for part in self._candidate_parts(response):
            if part.get("text"):
                logger.warning("Model returned text", provider="gemini", text=part["text"][:200])
            inline = part.get("inlineData") or part.get("inline_data")
            if inline and inline.get("data"):
                return base64.b64decode(inline["data"])

        raise ExternalServiceError("Model finished but returned no image data.")

    def _extract_text(self, response: Dict[str, Any]) -> str:
        for part in self._candidate_parts(response):
            if part.get("text"):
                return part["text"]

        raise ExternalServiceError("No text response from model.")
