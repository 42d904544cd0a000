"""
Session - Per-user owner of the studio state.

A Session holds one StudioState and is the only place it changes. It is
created explicitly and handed to whoever needs it (controller, window);
there is no global instance. Once closed, any dispatch raises
SessionClosedError.
"""

from __future__ import annotations

import itertools
import logging
from typing import Callable
from uuid import UUID, uuid4

from image_edit_studio.core.data_types import ImagePayload
from image_edit_studio.core.versioning import (
    Action,
    AddEdit,
    ClearImages,
    ClearPrompts,
    ComparisonView,
    ImageHistory,
    Prompts,
    ResetToOriginal,
    ResetUI,
    SetCurrent,
    SetEditMode,
    SetEditPrompt,
    SetError,
    SetGeneratePrompt,
    SetLoading,
    SetOriginal,
    SetPrevious,
    SetShowComparison,
    StudioState,
    UIState,
    get_comparison_images,
    reduce,
)

logger = logging.getLogger(__name__)

StateListener = Callable[[StudioState], None]


class SessionClosedError(RuntimeError):
    """An action was dispatched on a session that is no longer open."""
    pass


class Session:
    """
    One studio session: state, dispatch and change notification.

    Transitions are applied one at a time on the caller's thread. Long
    running work belongs to the caller; it tags each request with a token
    from ``begin_request`` and checks ``is_current_request`` before
    applying the result.
    """

    def __init__(self, state: StudioState | None = None):
        self.id: UUID = uuid4()
        self._state = state or StudioState()
        self._listeners: list[StateListener] = []
        self._tokens = itertools.count(1)
        self._active_token = 0
        self._closed = False

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @property
    def is_closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """End the session. Further dispatches raise SessionClosedError."""
        if self._closed:
            return
        self._closed = True
        self._active_token = 0
        self._listeners.clear()
        logger.debug("Session %s closed", self.id)

    def __enter__(self) -> Session:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # State access
    # -------------------------------------------------------------------------

    @property
    def state(self) -> StudioState:
        return self._state

    @property
    def images(self) -> ImageHistory:
        return self._state.images

    @property
    def ui(self) -> UIState:
        return self._state.ui

    @property
    def prompts(self) -> Prompts:
        return self._state.prompts

    def get_comparison_images(self) -> ComparisonView:
        """Derive the comparison pair for the current state."""
        return get_comparison_images(self._state.images, self._state.ui)

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def dispatch(self, action: Action) -> StudioState:
        """Apply an action and notify listeners if the state changed."""
        if self._closed:
            raise SessionClosedError(
                f"Cannot dispatch {type(action).__name__}: session {self.id} is closed"
            )

        new_state = reduce(self._state, action)
        if new_state is self._state:
            return new_state

        self._state = new_state
        for listener in list(self._listeners):
            listener(new_state)
        return new_state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a state change listener.

        Returns:
            A function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -------------------------------------------------------------------------
    # Request tokens
    # -------------------------------------------------------------------------

    def begin_request(self) -> int:
        """Start a new request; any earlier token becomes stale."""
        if self._closed:
            raise SessionClosedError(f"Session {self.id} is closed")
        self._active_token = next(self._tokens)
        return self._active_token

    def is_current_request(self, token: int) -> bool:
        """True if ``token`` belongs to the most recent request."""
        return not self._closed and token == self._active_token

    def invalidate_requests(self) -> None:
        """Make every in-flight request stale."""
        self._active_token = 0

    # -------------------------------------------------------------------------
    # Image actions
    # -------------------------------------------------------------------------

    def set_original(self, payload: ImagePayload) -> None:
        self.dispatch(SetOriginal(payload))

    def set_current(self, payload: ImagePayload) -> None:
        self.dispatch(SetCurrent(payload))

    def set_previous(self, payload: ImagePayload) -> None:
        self.dispatch(SetPrevious(payload))

    def add_edit(self, payload: ImagePayload) -> None:
        self.dispatch(AddEdit(payload))

    def reset_to_original(self) -> None:
        self.dispatch(ResetToOriginal())

    def clear_images(self) -> None:
        self.dispatch(ClearImages())

    # -------------------------------------------------------------------------
    # UI actions
    # -------------------------------------------------------------------------

    def set_loading(self, loading: bool) -> None:
        self.dispatch(SetLoading(loading))

    def set_error(self, error: str | None) -> None:
        self.dispatch(SetError(error))

    def enter_edit_mode(self) -> None:
        self.dispatch(SetEditMode(True))

    def exit_edit_mode(self) -> None:
        self.dispatch(SetEditMode(False))

    def toggle_comparison(self) -> None:
        self.dispatch(SetShowComparison(not self._state.ui.show_comparison))

    def reset_ui(self) -> None:
        self.dispatch(ResetUI())

    # -------------------------------------------------------------------------
    # Prompt actions
    # -------------------------------------------------------------------------

    def set_generate_prompt(self, prompt: str) -> None:
        self.dispatch(SetGeneratePrompt(prompt))

    def set_edit_prompt(self, prompt: str) -> None:
        self.dispatch(SetEditPrompt(prompt))

    def clear_prompts(self) -> None:
        self.dispatch(ClearPrompts())
