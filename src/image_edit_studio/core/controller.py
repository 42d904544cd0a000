"""
Controller - Async actions that drive a Session.

Each action runs in three steps:
1. start_*: validate input, mark the session busy and take a request token
2. run the external call (possibly on a worker thread)
3. complete / fail: apply the result to the session, unless a newer
   request has replaced it in the meantime

The async ``generate`` / ``edit`` / ``replace_background`` helpers do all
three on the current event loop; the desktop UI calls the steps
separately so that only step 2 leaves the UI thread.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable

from image_edit_studio.core import background
from image_edit_studio.core.background import BackgroundEditResult
from image_edit_studio.core.data_types import ImagePayload, InvalidImageError
from image_edit_studio.core.session import Session
from image_edit_studio.providers.base import ImageProvider, ProviderError

logger = logging.getLogger(__name__)


EMPTY_PROMPT_ERROR = "Please enter a prompt"
NO_IMAGE_ERROR = "No image available to edit"
UPLOAD_BLOCKED_ERROR = (
    "File upload is only available when no image exists. "
    "Please generate an image first or reset to upload a new one."
)
UPLOAD_TYPE_ERROR = "Please upload only PNG or JPG image files."
NO_PROVIDER_ERROR = "Image generation is not configured"
NO_REMOVER_ERROR = "Background removal is not configured"
UPLOAD_EDIT_PROMPT = "Enhance the image with better lighting, colors, and creative effects"


class ActionKind(Enum):
    """Which controller action a request belongs to."""
    GENERATE = "generate"
    EDIT = "edit"
    BACKGROUND = "background"

    @property
    def failure_message(self) -> str:
        if self is ActionKind.GENERATE:
            return "Failed to generate image"
        return "Failed to edit image"


@dataclass(frozen=True)
class PendingAction:
    """A started action waiting for its external call to finish."""
    kind: ActionKind
    token: int
    run: Callable[[], Awaitable[Any]]


class ImageEditController:
    """
    Generate, edit, upload and background-replace against one Session.

    Only one action may be in flight per session; a start while the
    session is loading is refused.
    """

    def __init__(
        self,
        session: Session,
        provider: ImageProvider | None,
        remover: ImageProvider | None = None,
    ):
        self.session = session
        self.provider = provider
        self.remover = remover
        self.last_background_removed: ImagePayload | None = None

    @property
    def is_busy(self) -> bool:
        return self.session.ui.is_loading

    # -------------------------------------------------------------------------
    # Step 1: start
    # -------------------------------------------------------------------------

    def start_generate(self, prompt: str) -> PendingAction | None:
        """Validate a generate request and mark the session busy."""
        text = (prompt or "").strip()
        if not text:
            self.session.set_error(EMPTY_PROMPT_ERROR)
            return None

        if self.provider is None:
            self.session.set_error(NO_PROVIDER_ERROR)
            return None

        return self._begin(ActionKind.GENERATE, lambda: self.provider.generate_image(text))

    def start_edit(self, instruction: str) -> PendingAction | None:
        """Validate an edit request against the current image."""
        text = (instruction or "").strip()
        if not text:
            self.session.set_error(EMPTY_PROMPT_ERROR)
            return None

        current = self.session.images.current
        if current is None:
            self.session.set_error(NO_IMAGE_ERROR)
            return None

        if self.provider is None:
            self.session.set_error(NO_PROVIDER_ERROR)
            return None

        return self._begin(ActionKind.EDIT, lambda: self.provider.edit_image(current, text))

    def start_replace_background(self, style: str) -> PendingAction | None:
        """Start a background replacement of the current image."""
        current = self.session.images.current
        if current is None:
            self.session.set_error(NO_IMAGE_ERROR)
            return None
        if self.provider is None:
            self.session.set_error(NO_PROVIDER_ERROR)
            return None
        if self.remover is None:
            self.session.set_error(NO_REMOVER_ERROR)
            return None

        self.last_background_removed = None
        return self._begin(
            ActionKind.BACKGROUND,
            lambda: background.replace_background(
                current,
                style,
                gemini=self.provider,
                remover=self.remover,
            ),
        )

    def _begin(self, kind: ActionKind, run: Callable[[], Awaitable[Any]]) -> PendingAction | None:
        if self.is_busy:
            logger.warning("Ignoring %s request: another action is in flight", kind.value)
            return None

        token = self.session.begin_request()
        self.session.set_loading(True)
        self.session.set_error(None)
        logger.debug("Started %s request %d", kind.value, token)
        return PendingAction(kind=kind, token=token, run=run)

    # -------------------------------------------------------------------------
    # Step 3: complete / fail
    # -------------------------------------------------------------------------

    def complete(self, pending: PendingAction, result: Any) -> bool:
        """
        Apply a finished action's result.

        Returns:
            True if the result was applied, False if it was stale
        """
        if not self._is_live(pending):
            return False

        session = self.session
        if pending.kind is ActionKind.GENERATE:
            # A new image starts a new history
            session.clear_images()
            self.last_background_removed = None
            session.set_current(result)
            session.set_original(result)
            session.enter_edit_mode()
            session.set_generate_prompt("")
        elif pending.kind is ActionKind.EDIT:
            session.add_edit(result)
            session.set_edit_prompt("")
        else:
            self._apply_background_result(result)

        session.set_loading(False)
        return True

    def fail(self, pending: PendingAction, error: BaseException) -> bool:
        """
        Record a failed action's error.

        Returns:
            True if the error was recorded, False if it was stale
        """
        if not self._is_live(pending):
            return False

        if isinstance(error, ProviderError):
            logger.warning("%s failed: %s", pending.kind.value, error)
            message = str(error) or pending.kind.failure_message
        else:
            logger.error("Error during %s", pending.kind.value, exc_info=error)
            message = f"{pending.kind.failure_message}. Please try again."

        self.session.set_error(message)
        self.session.set_loading(False)
        return True

    def _apply_background_result(self, result: BackgroundEditResult) -> None:
        self.last_background_removed = result.background_removed
        if result.success and result.data is not None:
            self.session.add_edit(result.data)
        else:
            self.session.set_error(result.error or "Failed to edit background")

    def _is_live(self, pending: PendingAction) -> bool:
        if self.session.is_closed:
            logger.debug("Dropping %s result: session closed", pending.kind.value)
            return False
        if not self.session.is_current_request(pending.token):
            logger.debug("Dropping stale %s result (request %d)", pending.kind.value, pending.token)
            return False
        return True

    # -------------------------------------------------------------------------
    # One-shot async actions
    # -------------------------------------------------------------------------

    async def execute(self, pending: PendingAction | None) -> bool:
        """Run a started action to completion on the current event loop."""
        if pending is None:
            return False
        try:
            result = await pending.run()
        except Exception as e:
            self.fail(pending, e)
            return False
        applied = self.complete(pending, result)
        return applied and self.session.ui.error is None

    async def generate(self, prompt: str) -> bool:
        """Generate a new original image from a prompt."""
        return await self.execute(self.start_generate(prompt))

    async def edit(self, instruction: str) -> bool:
        """Apply an edit instruction to the current image."""
        return await self.execute(self.start_edit(instruction))

    async def replace_background(self, style: str) -> bool:
        """Replace the current image's background with a styled scene."""
        return await self.execute(self.start_replace_background(style))

    # -------------------------------------------------------------------------
    # Synchronous actions
    # -------------------------------------------------------------------------

    def upload(self, path: str | Path) -> bool:
        """
        Use a local PNG/JPEG file as the original image.

        Only allowed while the session has no image.
        """
        if self.session.images.current is not None:
            self.session.set_error(UPLOAD_BLOCKED_ERROR)
            return False

        try:
            payload = ImagePayload.from_file(path)
        except InvalidImageError as e:
            self.session.set_error(str(e) or UPLOAD_TYPE_ERROR)
            return False
        except OSError as e:
            logger.error("Error reading upload %s: %s", path, e)
            self.session.set_error("Failed to process uploaded image. Please try again.")
            return False

        self.session.set_error(None)
        self.session.set_original(payload)
        self.session.set_current(payload)
        self.session.enter_edit_mode()
        self.session.set_edit_prompt(UPLOAD_EDIT_PROMPT)
        logger.info("Uploaded %s", path)
        return True

    def reset_to_original(self) -> None:
        """Return to the original image, discarding the edit chain."""
        if self.session.images.original is not None:
            self.session.reset_to_original()

    def start_over(self) -> None:
        """
        Drop every image and UI flag so a new image can be created.

        Any in-flight request becomes stale.
        """
        self.session.invalidate_requests()
        self.last_background_removed = None
        self.session.clear_images()
        self.session.reset_ui()
        self.session.set_edit_prompt("")

    def save_current(self, directory: str | Path) -> Path | None:
        """Write the current image into ``directory``; returns the file path."""
        current = self.session.images.current
        if current is None:
            return None
        path = current.save(directory)
        logger.info("Saved image to %s", path)
        return path
