"""
HTTP client for the generation API
"""
import asyncio
from typing import Any, Dict, List, Optional

import aiohttp
import structlog

from planvision.core.config import settings
from planvision.schemas.generation import GenerationJobResponse
from planvision.schemas.render_config import RenderConfigCreate, RenderConfigResponse

logger = structlog.get_logger()

CLIENT_TIMEOUT_SECONDS = 60


class PlanVisionAPIError(Exception):
    """Raised when the API cannot be reached or answers with an error"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class PlanVisionClient:
    def __init__(self, base_url: str = None, timeout: float = CLIENT_TIMEOUT_SECONDS):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "PlanVisionClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout))
        return self._session

    async def _request(self, method: str, path: str, payload: Dict[str, Any] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            async with self._get_session().request(method, url, json=payload) as response:
                if response.status >= 400:
                    try:
                        body = await response.json()
                        message = body.get("message") or body.get("detail") or response.reason
                    except (aiohttp.ContentTypeError, ValueError):
                        message = response.reason
                    logger.error("API request failed", method=method, url=url, status_code=response.status)
                    raise PlanVisionAPIError(f"{method} {path} failed: {message}", response.status)
                return await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("API request error", method=method, url=url, error=str(e))
            raise PlanVisionAPIError(f"{method} {path} failed: {e}") from e

    async def create_render_config(self, data: RenderConfigCreate) -> RenderConfigResponse:
        body = await self._request("POST", "/render-configs", data.model_dump(exclude_none=True))
        return RenderConfigResponse.model_validate(body)

    async def get_render_config(self, config_id: str) -> RenderConfigResponse:
        body = await self._request("GET", f"/render-configs/{config_id}")
        return RenderConfigResponse.model_validate(body)

    async def create_generation(self, config_id: str) -> GenerationJobResponse:
        body = await self._request("POST", f"/render-configs/{config_id}/generations")
        return GenerationJobResponse.model_validate(body)

    async def get_generation_status(self, config_id: str) -> GenerationJobResponse:
        body = await self._request("GET", f"/render-configs/{config_id}/generation")
        return GenerationJobResponse.model_validate(body)

    async def get_generations(self, config_id: str) -> List[GenerationJobResponse]:
        body = await self._request("GET", f"/render-configs/{config_id}/generations")
        return [GenerationJobResponse.model_validate(item) for item in body]

    async def refine(self, config_id: str, custom_instructions: str) -> RenderConfigResponse:
        body = await self._request(
            "POST",
            f"/render-configs/{config_id}/refinements",
            {"customInstructions": custom_instructions},
        )
        return RenderConfigResponse.model_validate(body)
