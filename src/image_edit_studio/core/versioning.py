"""
Image Versioning - State machine for image history and comparison views.

The studio state is three independent sub-states:
- ImageHistory: current / previous / original image versions
- UIState: loading, error and edit/comparison mode flags
- Prompts: generate and edit prompt text

Each sub-state has its own action family and a pure reducer. ``reduce``
routes an action to the right reducer and returns a new StudioState;
no reducer mutates its input.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TypeAlias

from image_edit_studio.core.data_types import ImagePayload


DEFAULT_GENERATE_PROMPT = (
    "A cyberpunk street scene with neon lights, holograms, rain-slicked pavement, "
    "dramatic shadows, Blade Runner aesthetic, cinematic composition, moody atmosphere, "
    "steam rising from manholes, flying cars overhead, neon signs in Japanese and English, "
    "high contrast lighting, sci-fi movie still quality"
)


# ============================================================================
# State
# ============================================================================

@dataclass(frozen=True, slots=True)
class ImageHistory:
    """The three image slots plus the edited flag."""
    current: ImagePayload | None = None
    previous: ImagePayload | None = None
    original: ImagePayload | None = None
    has_been_edited: bool = False


@dataclass(frozen=True, slots=True)
class UIState:
    """Presentation flags, independent of image data."""
    is_loading: bool = False
    error: str | None = None
    is_edit_mode: bool = False
    show_comparison: bool = False


@dataclass(frozen=True, slots=True)
class Prompts:
    """Prompt text for the generate and edit inputs."""
    generate: str = DEFAULT_GENERATE_PROMPT
    edit: str = ""


@dataclass(frozen=True, slots=True)
class StudioState:
    """Complete state of one studio session."""
    images: ImageHistory = field(default_factory=ImageHistory)
    ui: UIState = field(default_factory=UIState)
    prompts: Prompts = field(default_factory=Prompts)


@dataclass(frozen=True, slots=True)
class ComparisonView:
    """Left/right pair and labels for side-by-side display."""
    left: ImagePayload | None = None
    right: ImagePayload | None = None
    left_label: str = ""
    right_label: str = ""
    is_loading: bool = False


# ============================================================================
# Actions
# ============================================================================

# -- Image history -----------------------------------------------------------

@dataclass(frozen=True, slots=True)
class SetCurrent:
    payload: ImagePayload


@dataclass(frozen=True, slots=True)
class SetPrevious:
    payload: ImagePayload


@dataclass(frozen=True, slots=True)
class SetOriginal:
    payload: ImagePayload


@dataclass(frozen=True, slots=True)
class AddEdit:
    payload: ImagePayload


@dataclass(frozen=True, slots=True)
class ResetToOriginal:
    pass


@dataclass(frozen=True, slots=True)
class ClearImages:
    pass


# -- UI ----------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class SetLoading:
    loading: bool


@dataclass(frozen=True, slots=True)
class SetError:
    error: str | None


@dataclass(frozen=True, slots=True)
class SetEditMode:
    enabled: bool


@dataclass(frozen=True, slots=True)
class SetShowComparison:
    show: bool


@dataclass(frozen=True, slots=True)
class ResetUI:
    pass


# -- Prompts -----------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class SetGeneratePrompt:
    prompt: str


@dataclass(frozen=True, slots=True)
class SetEditPrompt:
    prompt: str


@dataclass(frozen=True, slots=True)
class ClearPrompts:
    pass


ImageAction: TypeAlias = SetCurrent | SetPrevious | SetOriginal | AddEdit | ResetToOriginal | ClearImages
UIAction: TypeAlias = SetLoading | SetError | SetEditMode | SetShowComparison | ResetUI
PromptAction: TypeAlias = SetGeneratePrompt | SetEditPrompt | ClearPrompts
Action: TypeAlias = ImageAction | UIAction | PromptAction


# ============================================================================
# Reducers
# ============================================================================

def reduce_images(state: ImageHistory, action: ImageAction) -> ImageHistory:
    """Apply an image history action."""
    match action:
        case SetCurrent(payload):
            return replace(state, current=payload)
        case SetPrevious(payload):
            return replace(state, previous=payload)
        case SetOriginal(payload):
            return replace(state, original=payload)
        case AddEdit(payload):
            return replace(
                state,
                previous=state.current,
                current=payload,
                has_been_edited=True,
            )
        case ResetToOriginal():
            if state.original is None:
                return state
            return replace(
                state,
                current=state.original,
                previous=None,
                has_been_edited=False,
            )
        case ClearImages():
            return ImageHistory()
    return state


def reduce_ui(state: UIState, action: UIAction) -> UIState:
    """Apply a UI action."""
    match action:
        case SetLoading(loading):
            return replace(state, is_loading=bool(loading))
        case SetError(error):
            return replace(state, error=error)
        case SetEditMode(enabled):
            # Edit mode turns comparison on; leaving it keeps whatever was shown
            return replace(
                state,
                is_edit_mode=bool(enabled),
                show_comparison=True if enabled else state.show_comparison,
            )
        case SetShowComparison(show):
            return replace(state, show_comparison=bool(show))
        case ResetUI():
            return UIState()
    return state


def reduce_prompts(state: Prompts, action: PromptAction) -> Prompts:
    """Apply a prompt action."""
    match action:
        case SetGeneratePrompt(prompt):
            return replace(state, generate=prompt)
        case SetEditPrompt(prompt):
            return replace(state, edit=prompt)
        case ClearPrompts():
            return Prompts(generate="", edit="")
    return state


def reduce(state: StudioState, action: Action) -> StudioState:
    """Route an action to its sub-state reducer."""
    match action:
        case SetCurrent() | SetPrevious() | SetOriginal() | AddEdit() | ResetToOriginal() | ClearImages():
            images = reduce_images(state.images, action)
            return state if images is state.images else replace(state, images=images)
        case SetLoading() | SetError() | SetEditMode() | SetShowComparison() | ResetUI():
            ui = reduce_ui(state.ui, action)
            return state if ui is state.ui else replace(state, ui=ui)
        case SetGeneratePrompt() | SetEditPrompt() | ClearPrompts():
            prompts = reduce_prompts(state.prompts, action)
            return state if prompts is state.prompts else replace(state, prompts=prompts)
    return state


# ============================================================================
# Derived views
# ============================================================================

def get_comparison_images(images: ImageHistory, ui: UIState) -> ComparisonView:
    """
    Pick the image pair to show side by side.

    Rules, first match wins:
    1. An edit is in flight: current on the left, loading on the right.
    2. Previous and current exist: the latest edit transition.
    3. Original and current exist: original against current.
    4. Nothing to compare.
    """
    if ui.is_edit_mode and ui.is_loading:
        return ComparisonView(
            left=images.current,
            right=None,
            left_label="Current",
            right_label="Editing...",
            is_loading=True,
        )

    if images.previous is not None and images.current is not None:
        return ComparisonView(
            left=images.previous,
            right=images.current,
            left_label="Previous",
            right_label="Current",
        )

    if images.original is not None and images.current is not None:
        return ComparisonView(
            left=images.original,
            right=images.current,
            left_label="Original",
            right_label="Current",
        )

    return ComparisonView()
