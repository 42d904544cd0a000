"""
Provider Base - Abstract base classes and model card definitions.

This module provides the foundation for all image service providers:
- ModelCard: What a model can do
- ImageProvider: Abstract base class for provider implementations
- GenerationRequest/Result: Request/response data structures
- ProviderError and subclasses: Failures surfaced to the controller
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from image_edit_studio.core.data_types import ImagePayload

logger = logging.getLogger(__name__)


class GenerationMode(Enum):
    """Supported image operations."""
    TEXT_TO_IMAGE = "text_to_image"
    IMAGE_TO_IMAGE = "image_to_image"
    INPAINTING = "inpainting"
    BACKGROUND_REMOVAL = "background_removal"


@dataclass
class ModelCard:
    """
    Specification of a model's capabilities.

    Attributes:
        id: Model identifier sent to the API (e.g., "gemini-2.5-flash-image")
        provider: Provider ID this model belongs to (e.g., "gemini")
        name: Human-readable display name
        description: Brief description of the model
        modes: Supported operations
        max_reference_images: Max input images per request (0 = not checked)
        param_defaults: Default values for provider-specific parameters
    """
    id: str
    provider: str
    name: str
    description: str = ""
    modes: set[GenerationMode] = field(default_factory=lambda: {GenerationMode.TEXT_TO_IMAGE})
    max_reference_images: int = 0
    param_defaults: dict[str, Any] = field(default_factory=dict)

    @property
    def supports_editing(self) -> bool:
        return GenerationMode.IMAGE_TO_IMAGE in self.modes


@dataclass
class GenerationRequest:
    """Request for one provider call."""
    model: ModelCard
    prompt: str = ""

    # Input images, in the order the provider should see them
    reference_images: list[ImagePayload] = field(default_factory=list)

    # Provider-specific extra parameters
    extra_params: dict[str, Any] = field(default_factory=dict)


@dataclass
class GenerationResult:
    """Result from one provider call."""
    images: list[ImagePayload]
    model_id: str
    prompt: str

    generation_time: float = 0.0  # Seconds

    # Text returned alongside the image by multimodal models
    revised_prompt: str | None = None


@dataclass
class ProviderConfig:
    """Configuration for a provider."""
    api_key: str = ""
    enabled: bool = True
    base_url: str | None = None  # Override default URL
    default_model: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


class ProviderError(Exception):
    """Base exception for provider errors."""
    pass


class AuthenticationError(ProviderError):
    """API key invalid or missing."""
    pass


class RateLimitError(ProviderError):
    """Rate limit exceeded."""
    retry_after: float | None = None


class GenerationError(ProviderError):
    """Error during generation."""
    pass


NO_IMAGE_MESSAGE = "No image was generated. Please try again."


class ImageProvider(ABC):
    """
    Abstract base class for image service providers.

    Each provider handles communication with a specific API.
    Model capabilities are defined separately in ModelCard.
    """

    # Provider identification
    id: str = ""
    name: str = ""
    base_url: str = ""
    default_model_id: str = ""

    # How an edit instruction is phrased to the model
    edit_prompt_template: str = "{instruction}"

    def __init__(self, config: ProviderConfig):
        self.config = config

    @property
    def api_key(self) -> str:
        return self.config.api_key

    @property
    def is_configured(self) -> bool:
        """Check if provider has necessary configuration."""
        return bool(self.config.api_key)

    @property
    def model(self) -> ModelCard:
        """Model card used by the convenience methods."""
        from image_edit_studio.providers.registry import get_model

        model_id = self.config.default_model or self.default_model_id
        card = get_model(model_id)
        if card is None:
            card = ModelCard(id=model_id, provider=self.id, name=model_id)
        return card

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """
        Run one request against the provider.

        Args:
            request: Prompt, input images and parameters

        Returns:
            GenerationResult with images and metadata

        Raises:
            AuthenticationError: Invalid API key
            RateLimitError: Rate limit exceeded
            GenerationError: Generation failed
        """
        ...

    @abstractmethod
    async def validate_credentials(self) -> bool:
        """
        Check if API credentials are valid.

        Returns:
            True if credentials are valid
        """
        ...

    async def generate_image(self, prompt: str) -> ImagePayload:
        """Generate a single image from a text prompt."""
        request = GenerationRequest(model=self.model, prompt=prompt)
        return await self._first_image(request)

    async def edit_image(self, image: ImagePayload, instruction: str) -> ImagePayload:
        """Produce a new image from ``image`` and a text instruction."""
        request = GenerationRequest(
            model=self.model,
            prompt=self.edit_prompt_template.format(instruction=instruction),
            reference_images=[image],
        )
        payload = await self._first_image(request)
        return payload.with_metadata(prompt=instruction)

    async def _first_image(self, request: GenerationRequest) -> ImagePayload:
        start = time.perf_counter()
        result = await self.generate(request)
        result.generation_time = time.perf_counter() - start
        if not result.images:
            if result.revised_prompt:
                logger.warning(
                    "%s answered with text instead of an image: %s",
                    result.model_id, result.revised_prompt,
                )
            raise GenerationError(NO_IMAGE_MESSAGE)
        logger.info(
            "%s returned %d image(s) in %.1fs",
            result.model_id, len(result.images), result.generation_time,
        )
        return result.images[0].with_metadata(
            prompt=request.prompt,
            model=result.model_id,
        )

