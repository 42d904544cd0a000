"""
remove.bg Provider - Background removal.

Sends an image and receives a PNG cutout whose background pixels are
fully transparent.

API Reference:
- https://www.remove.bg/api
"""

from __future__ import annotations

import json
import logging

import aiohttp

from image_edit_studio.core.data_types import ImagePayload
from image_edit_studio.providers.base import (
    ImageProvider,
    GenerationRequest,
    GenerationResult,
    ProviderConfig,
    GenerationError,
    AuthenticationError,
    RateLimitError,
)

logger = logging.getLogger(__name__)


class RemoveBgProvider(ImageProvider):
    """Background removal through the remove.bg HTTP API."""

    id = "removebg"
    name = "remove.bg"
    base_url = "https://api.remove.bg/v1.0"
    default_model_id = "removebg"

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        if config.base_url:
            self.base_url = config.base_url

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Cut out the first reference image; the prompt is ignored."""
        if not request.reference_images:
            raise GenerationError("No image provided for background removal.")

        image = request.reference_images[0]
        form = {
            "image_file_b64": image.to_base64(),
            "size": request.extra_params.get("size", "auto"),
        }

        png_bytes = await self._post(f"{self.base_url}/removebg", form)
        return GenerationResult(
            images=[ImagePayload(data=png_bytes, mime_type="image/png")],
            model_id=request.model.id,
            prompt=request.prompt,
        )

    async def remove_background(self, image: ImagePayload) -> ImagePayload:
        """Return a transparent-background PNG cutout of ``image``."""
        request = GenerationRequest(model=self.model, reference_images=[image])
        return await self._first_image(request)

    async def validate_credentials(self) -> bool:
        """Validate API key via the account endpoint."""
        try:
            status = await self._get_status(f"{self.base_url}/account")
        except aiohttp.ClientError as e:
            logger.warning("Could not reach remove.bg: %s", e)
            return False
        return status == 200

    async def _get_status(self, url: str) -> int:
        async with aiohttp.ClientSession() as session:
            async with session.get(url, headers={"X-Api-Key": self.api_key}) as resp:
                return resp.status

    async def _post(self, url: str, form: dict) -> bytes:
        """POST form data and return the raw response body."""
        async with aiohttp.ClientSession() as session:
            async with session.post(
                url,
                data=form,
                headers={"X-Api-Key": self.api_key, "Accept": "image/png"},
            ) as resp:
                body = await resp.read()
                self._check_error(resp.status, body)
                return body

    def _check_error(self, status: int, body: bytes) -> None:
        """Check for API errors."""
        if status == 401 or status == 403:
            raise AuthenticationError("Invalid remove.bg API key")
        elif status == 429:
            error = RateLimitError("remove.bg rate limit exceeded")
            error.retry_after = 60
            raise error
        elif status >= 400:
            raise GenerationError(f"remove.bg error: {self._error_title(body)}")

    @staticmethod
    def _error_title(body: bytes) -> str:
        try:
            errors = json.loads(body).get("errors") or []
        except (ValueError, AttributeError):
            return "Unknown error"
        if errors and isinstance(errors[0], dict):
            return errors[0].get("title", "Unknown error")
        return "Unknown error"
