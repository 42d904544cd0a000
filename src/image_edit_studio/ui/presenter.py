"""
Presenter - What the window shows for a given state.

The decisions live here, free of Qt, and the widgets only draw them:
- build_panes: which images go in the image area, with captions
- status_message: what the status bar says after a state change
"""

from __future__ import annotations

from dataclasses import dataclass

from image_edit_studio.core.data_types import ImagePayload
from image_edit_studio.core.versioning import StudioState, get_comparison_images


PLACEHOLDER_CAPTION = "Edited Result"
PLACEHOLDER_TEXT = "Your changes will appear here"
CUTOUT_CAPTION = "Background Removed"


@dataclass(frozen=True)
class Pane:
    """One captioned slot in the image area."""
    image: ImagePayload | None = None
    caption: str = ""
    placeholder: str = ""
    loading: bool = False


def build_panes(state: StudioState, background_removed: ImagePayload | None = None) -> list[Pane]:
    """
    Lay out the image area.

    With comparison on, the left/right pair comes from the comparison
    view; a right side that is missing or identical to the left shows a
    placeholder instead. Otherwise the current image is shown alone. A
    background-removal cutout, when there is one, gets its own pane.
    """
    images, ui = state.images, state.ui

    if ui.show_comparison and images.current is not None:
        view = get_comparison_images(images, ui)
        left = Pane(view.left, view.left_label)
        if view.is_loading:
            right = Pane(caption=view.right_label, loading=True)
        elif view.right is None or view.right == view.left:
            right = Pane(caption=PLACEHOLDER_CAPTION, placeholder=PLACEHOLDER_TEXT)
        else:
            right = Pane(view.right, view.right_label)
        panes = [left, right]
    elif ui.is_loading and images.current is None:
        panes = [Pane(caption="Generating...", loading=True)]
    else:
        panes = [Pane(images.current)]

    if background_removed is not None:
        panes.append(Pane(background_removed, CUTOUT_CAPTION))
    return panes


def status_message(before: StudioState | None, after: StudioState) -> tuple[str, int] | None:
    """
    Status bar text and timeout (ms, 0 = sticky) for a state change.

    Only the start and the end of an action produce a message; every
    other change (prompt typing included) returns None.
    """
    was_loading = before is not None and before.ui.is_loading

    if after.ui.is_loading and not was_loading:
        return ("Editing…" if after.ui.is_edit_mode else "Generating…", 0)

    if was_loading and not after.ui.is_loading:
        if after.ui.error:
            return ("Failed", 3000)
        if after.images.has_been_edited:
            return ("Edited", 2000)
        return ("Ready", 2000)

    return None
