"""
Background Replacement - Cutout plus generative inpainting.

Two external calls run in sequence:
1. Background removal returns a transparent-background cutout.
2. Gemini repaints everything outside the cutout from a style prompt.

The cutout is worth keeping even when step 2 fails, so the result always
carries it when it was obtained. Failures are reported in the result,
never raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
from PIL import Image

from image_edit_studio.core.data_types import ImagePayload

if TYPE_CHECKING:
    from image_edit_studio.providers.gemini import GeminiProvider
    from image_edit_studio.providers.removebg import RemoveBgProvider

logger = logging.getLogger(__name__)


SCENE_FILL = "#999999"

BACKGROUND_STYLES: dict[str, str] = {
    "showroom": "Luxury indoor car showroom, glossy floor, soft lighting, photorealistic, 8k",
    "street": "Dubai clean highway street, golden hour, photorealistic, 8k",
    "desert": "UAE desert dunes background, warm lighting, photorealistic, 8k",
    "studio": "Professional photo studio background, grey tone, softbox lighting, 8k",
}

DEFAULT_STYLE = "showroom"


@dataclass(frozen=True)
class BackgroundEditResult:
    """Outcome of a background replacement, including partial work."""
    success: bool
    data: ImagePayload | None = None
    error: str | None = None
    background_removed: ImagePayload | None = None


def style_prompt(style: str) -> str:
    """Prompt text for a background style; unknown styles use the default."""
    return BACKGROUND_STYLES.get(style, BACKGROUND_STYLES[DEFAULT_STYLE])


def build_scene_and_mask(cutout: ImagePayload) -> tuple[ImagePayload, ImagePayload]:
    """
    Prepare the two inpainting inputs from a cutout.

    Returns:
        (scene, mask): the cutout flattened onto an opaque gray canvas,
        and a mask that is black where the cutout has any opacity and
        white everywhere else
    """
    rgba = cutout.to_pil().convert("RGBA")

    scene = Image.new("RGB", rgba.size, SCENE_FILL)
    scene.paste(rgba, (0, 0), rgba)

    alpha = np.asarray(rgba.getchannel("A"))
    mask = Image.fromarray(np.where(alpha > 0, 0, 255).astype(np.uint8))

    return ImagePayload.from_pil(scene), ImagePayload.from_pil(mask)


async def replace_background(
    image: ImagePayload,
    style: str,
    *,
    gemini: GeminiProvider,
    remover: RemoveBgProvider,
) -> BackgroundEditResult:
    """
    Replace the background of ``image`` with a generated scene.

    Args:
        image: Photo whose subject should be kept
        style: One of BACKGROUND_STYLES (unknown values use the default)
        gemini: Provider used for inpainting
        remover: Provider used for background removal

    Returns:
        BackgroundEditResult; on failure ``background_removed`` still holds
        the cutout if it was obtained
    """
    cutout: ImagePayload | None = None
    try:
        cutout = await remover.remove_background(image)
        logger.info("Background removed (%d bytes)", len(cutout.data))

        scene, mask = build_scene_and_mask(cutout)
        edited = await gemini.inpaint(scene, mask, style_prompt(style))
    except Exception as e:
        logger.exception("Background replacement failed")
        return BackgroundEditResult(
            success=False,
            error=str(e) or "Failed to edit background",
            background_removed=cutout,
        )

    return BackgroundEditResult(
        success=True,
        data=edited,
        background_removed=cutout,
    )
