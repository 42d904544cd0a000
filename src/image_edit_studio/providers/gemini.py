"""
Google Gemini Provider - Gemini Image models.

Supports:
- Gemini 2.5 Flash Image: Fast generation and editing via :generateContent
- Gemini 3 Pro Image: High-quality generation and editing

Images are sent as inline base64 parts followed by the text prompt, and
returned as inline parts of the first candidate.

API References:
- https://ai.google.dev/gemini-api/docs/image-generation
"""

from __future__ import annotations

import logging
from typing import Any

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


INPAINT_PROMPT_TEMPLATE = """I'm providing two images:
1. First image: A subject on a gray background that needs background replacement
2. Second image: A mask image where WHITE areas indicate what should be REPLACED and BLACK areas indicate what should be KEPT

Please replace ONLY the background (white areas in the mask) with: {instruction}.
Keep the subject completely identical - do NOT redraw, modify, or change it in any way. Only replace the background areas."""


class GeminiProvider(ImageProvider):
    """
    Google Gemini image generation provider.

    Handles text-to-image generation, single-image editing and
    mask-guided background inpainting through the same endpoint.
    """

    id = "gemini"
    name = "Google Gemini"
    base_url = "https://generativelanguage.googleapis.com/v1beta"
    default_model_id = "gemini-2.5-flash-image"

    edit_prompt_template = (
        "Please edit this image according to the following instructions: {instruction}. "
        "Return the edited image with the requested changes applied."
    )

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        if config.base_url:
            self.base_url = config.base_url

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Generate/edit images using Gemini models via :generateContent endpoint."""
        limit = request.model.max_reference_images
        if limit and len(request.reference_images) > limit:
            raise GenerationError(
                f"{request.model.name} accepts at most {limit} input images, "
                f"got {len(request.reference_images)}"
            )

        url = f"{self.base_url}/models/{request.model.id}:generateContent"

        params = {**request.model.param_defaults, **request.extra_params}

        # Build contents - input images first, then the text prompt
        parts: list[dict[str, Any]] = []

        for img in request.reference_images:
            parts.append({
                "inlineData": {
                    "mimeType": img.mime_type,
                    "data": img.to_base64(),
                }
            })

        parts.append({"text": request.prompt})

        # Response modalities - text is allowed so the model can explain refusals
        modalities = params.get("response_modalities", "Text,Image")
        generation_config: dict[str, Any] = {
            "responseModalities": [m.strip().upper() for m in modalities.split(",")],
        }

        if "aspectRatio" in params:
            generation_config["imageConfig"] = {"aspectRatio": params["aspectRatio"]}

        body = {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": generation_config,
        }

        response = await self._post(url, body)
        return self._parse_gemini_response(response, request)

    async def inpaint(
        self,
        scene: ImagePayload,
        mask: ImagePayload,
        instruction: str,
    ) -> ImagePayload:
        """
        Replace the masked-out region of ``scene``.

        Gemini has no mask field, so the mask travels as a second image
        and the prompt explains how to read it.
        """
        request = GenerationRequest(
            model=self.model,
            prompt=INPAINT_PROMPT_TEMPLATE.format(instruction=instruction),
            reference_images=[scene, mask],
        )
        payload = await self._first_image(request)
        return payload.with_metadata(prompt=instruction)

    async def validate_credentials(self) -> bool:
        """Validate API key by listing models."""
        try:
            status = await self._get_status(f"{self.base_url}/models")
        except aiohttp.ClientError as e:
            logger.warning("Could not reach Gemini: %s", e)
            return False
        return status == 200

    def _parse_gemini_response(self, data: dict, request: GenerationRequest) -> GenerationResult:
        """Parse Gemini :generateContent response into GenerationResult."""
        images = []
        text_response = None

        candidates = data.get("candidates") or []
        if not candidates:
            raise GenerationError("No output returned from Gemini.")

        for candidate in candidates:
            content = candidate.get("content") or {}
            for part in content.get("parts") or []:
                # Handle image parts
                inline_data = part.get("inlineData")
                if inline_data and inline_data.get("mimeType", "").startswith("image/"):
                    images.append(ImagePayload.from_base64(
                        inline_data["data"],
                        mime_type=inline_data["mimeType"],
                    ))

                # Handle text parts
                if "text" in part and not text_response:
                    text_response = part["text"]

        return GenerationResult(
            images=images,
            model_id=request.model.id,
            prompt=request.prompt,
            revised_prompt=text_response,
        )

    async def _get_status(self, url: str) -> int:
        async with aiohttp.ClientSession() as session:
            async with session.get(f"{url}?key={self.api_key}") as resp:
                return resp.status

    async def _post(self, url: str, body: dict) -> dict:
        """Make POST request with JSON body and API key in query string."""
        # Google API uses key in query string
        url_with_key = f"{url}?key={self.api_key}"

        async with aiohttp.ClientSession() as session:
            async with session.post(
                url_with_key,
                json=body,
                headers={"Content-Type": "application/json"},
            ) as resp:
                data = await resp.json(content_type=None)
                self._check_error(resp.status, data or {})
                return data

    def _check_error(self, status: int, data: dict) -> None:
        """Check for API errors."""
        if status == 401 or status == 403:
            raise AuthenticationError("Invalid Google API key")
        elif status == 429:
            error = RateLimitError("Google API rate limit exceeded")
            error.retry_after = 60
            raise error
        elif status >= 400:
            error_msg = data.get("error", {}).get("message", "Unknown error")
            raise GenerationError(f"Google API error: {error_msg}")
