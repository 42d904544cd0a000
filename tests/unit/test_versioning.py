"""
Tests for the versioning reducers and comparison derivation.
"""

import pytest

from image_edit_studio.core.data_types import ImagePayload
from image_edit_studio.core.versioning import (
    AddEdit,
    ClearImages,
    ClearPrompts,
    ComparisonView,
    DEFAULT_GENERATE_PROMPT,
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
    reduce_images,
    reduce_prompts,
    reduce_ui,
)


A = ImagePayload(data=b"image-a", mime_type="image/png")
B = ImagePayload(data=b"image-b", mime_type="image/png")
C = ImagePayload(data=b"image-c", mime_type="image/jpeg")


class TestImageReducer:
    """Tests for image history transitions."""

    def test_initial_state_empty(self):
        state = ImageHistory()
        assert state.current is None
        assert state.previous is None
        assert state.original is None
        assert state.has_been_edited is False

    def test_set_original(self):
        state = reduce_images(ImageHistory(), SetOriginal(A))
        assert state.original == A
        assert state.current is None

    def test_set_current(self):
        state = reduce_images(ImageHistory(), SetCurrent(A))
        assert state.current == A
        assert state.has_been_edited is False

    def test_set_previous(self):
        state = reduce_images(ImageHistory(), SetPrevious(B))
        assert state.previous == B

    def test_add_edit_shifts_current_to_previous(self):
        state = ImageHistory(current=A, original=A)
        state = reduce_images(state, AddEdit(B))
        assert state.current == B
        assert state.previous == A
        assert state.original == A
        assert state.has_been_edited is True

    def test_add_edit_chain(self):
        state = ImageHistory(current=A, original=A)
        state = reduce_images(state, AddEdit(B))
        state = reduce_images(state, AddEdit(C))
        assert state.current == C
        assert state.previous == B
        assert state.original == A

    def test_add_edit_without_current(self):
        state = reduce_images(ImageHistory(), AddEdit(A))
        assert state.current == A
        assert state.previous is None
        assert state.has_been_edited is True

    def test_reset_to_original(self):
        state = ImageHistory(current=B, previous=A, original=A, has_been_edited=True)
        state = reduce_images(state, ResetToOriginal())
        assert state.current == A
        assert state.previous is None
        assert state.has_been_edited is False

    def test_reset_to_original_is_idempotent(self):
        state = ImageHistory(current=C, previous=B, original=A, has_been_edited=True)
        once = reduce_images(state, ResetToOriginal())
        twice = reduce_images(once, ResetToOriginal())
        assert once == twice

    def test_reset_without_original_is_noop(self):
        state = ImageHistory(current=B, previous=A, has_been_edited=True)
        assert reduce_images(state, ResetToOriginal()) is state

    def test_clear_images(self):
        state = ImageHistory(current=B, previous=A, original=A, has_been_edited=True)
        state = reduce_images(state, ClearImages())
        assert state.current is None
        assert state.previous is None
        assert state.original is None
        assert state.has_been_edited is False

    def test_reducer_does_not_mutate_input(self):
        state = ImageHistory(current=A, original=A)
        reduce_images(state, AddEdit(B))
        assert state.current == A
        assert state.previous is None


class TestUIReducer:
    """Tests for UI flag transitions."""

    def test_defaults(self):
        state = UIState()
        assert state.is_loading is False
        assert state.error is None
        assert state.is_edit_mode is False
        assert state.show_comparison is False

    def test_set_loading(self):
        assert reduce_ui(UIState(), SetLoading(True)).is_loading is True

    def test_set_and_clear_error(self):
        state = reduce_ui(UIState(), SetError("boom"))
        assert state.error == "boom"
        assert reduce_ui(state, SetError(None)).error is None

    @pytest.mark.parametrize("show", [True, False])
    def test_enter_edit_mode_forces_comparison(self, show):
        state = reduce_ui(UIState(show_comparison=show), SetEditMode(True))
        assert state.is_edit_mode is True
        assert state.show_comparison is True

    @pytest.mark.parametrize("show", [True, False])
    def test_exit_edit_mode_keeps_comparison(self, show):
        state = UIState(is_edit_mode=True, show_comparison=show)
        state = reduce_ui(state, SetEditMode(False))
        assert state.is_edit_mode is False
        assert state.show_comparison is show

    def test_set_show_comparison(self):
        state = reduce_ui(UIState(), SetShowComparison(True))
        assert state.show_comparison is True

    def test_reset_ui(self):
        state = UIState(is_loading=True, error="x", is_edit_mode=True, show_comparison=True)
        assert reduce_ui(state, ResetUI()) == UIState()


class TestPromptReducer:
    """Tests for prompt transitions."""

    def test_default_generate_prompt(self):
        assert Prompts().generate == DEFAULT_GENERATE_PROMPT
        assert Prompts().edit == ""

    def test_set_prompts_independently(self):
        state = reduce_prompts(Prompts(), SetEditPrompt("add a hat"))
        state = reduce_prompts(state, SetGeneratePrompt("a cat"))
        assert state.generate == "a cat"
        assert state.edit == "add a hat"

    def test_clear_prompts(self):
        state = Prompts(generate="a", edit="b")
        assert reduce_prompts(state, ClearPrompts()) == Prompts(generate="", edit="")


class TestReduce:
    """Tests for routing actions to sub-state reducers."""

    def test_routes_image_action(self):
        state = reduce(StudioState(), SetCurrent(A))
        assert state.images.current == A
        assert state.ui == UIState()

    def test_routes_ui_action(self):
        state = reduce(StudioState(), SetLoading(True))
        assert state.ui.is_loading is True
        assert state.images == ImageHistory()

    def test_routes_prompt_action(self):
        state = reduce(StudioState(), SetEditPrompt("x"))
        assert state.prompts.edit == "x"

    def test_unknown_action_returns_same_state(self):
        state = StudioState()
        assert reduce(state, object()) is state

    def test_noop_image_action_returns_same_state(self):
        state = StudioState()
        assert reduce(state, ResetToOriginal()) is state


class TestComparisonImages:
    """Tests for the comparison view precedence rules."""

    def test_empty_state(self):
        view = get_comparison_images(ImageHistory(), UIState())
        assert view == ComparisonView(None, None, "", "", False)

    def test_original_vs_current(self):
        view = get_comparison_images(ImageHistory(current=A, original=A), UIState())
        assert view.left == A
        assert view.right == A
        assert view.left_label == "Original"
        assert view.right_label == "Current"
        assert view.is_loading is False

    def test_previous_vs_current_wins_over_original(self):
        images = ImageHistory(current=C, previous=B, original=A, has_been_edited=True)
        view = get_comparison_images(images, UIState())
        assert (view.left, view.right) == (B, C)
        assert (view.left_label, view.right_label) == ("Previous", "Current")

    def test_loading_in_edit_mode_wins(self):
        images = ImageHistory(current=C, previous=B, original=A, has_been_edited=True)
        ui = UIState(is_loading=True, is_edit_mode=True, show_comparison=True)
        view = get_comparison_images(images, ui)
        assert view.left == C
        assert view.right is None
        assert view.left_label == "Current"
        assert view.right_label == "Editing..."
        assert view.is_loading is True

    @pytest.mark.parametrize(
        "images",
        [
            ImageHistory(),
            ImageHistory(current=A),
            ImageHistory(current=A, original=A),
            ImageHistory(current=B, previous=A, original=A, has_been_edited=True),
        ],
    )
    def test_loading_flag_always_set_while_editing(self, images):
        ui = UIState(is_loading=True, is_edit_mode=True)
        assert get_comparison_images(images, ui).is_loading is True

    def test_loading_outside_edit_mode_uses_normal_rules(self):
        ui = UIState(is_loading=True, is_edit_mode=False)
        view = get_comparison_images(ImageHistory(current=A, original=A), ui)
        assert view.left_label == "Original"
        assert view.is_loading is False

    def test_current_only_falls_back(self):
        view = get_comparison_images(ImageHistory(current=A), UIState())
        assert view.left is None
        assert view.right is None
        assert view.left_label == ""
