"""
Tests for the window presenter (pane layout and status messages).
"""

from dataclasses import replace

from image_edit_studio.core.data_types import ImagePayload
from image_edit_studio.core.session import Session
from image_edit_studio.ui.presenter import (
    CUTOUT_CAPTION,
    PLACEHOLDER_CAPTION,
    PLACEHOLDER_TEXT,
    Pane,
    build_panes,
    status_message,
)


A = ImagePayload(data=b"image-a")
B = ImagePayload(data=b"image-b")
CUTOUT = ImagePayload(data=b"cutout")


def _generated() -> Session:
    session = Session()
    session.set_current(A)
    session.set_original(A)
    session.enter_edit_mode()
    return session


class TestBuildPanes:
    """Tests for what the image area shows."""

    def test_empty_session_shows_one_empty_pane(self):
        assert build_panes(Session().state) == [Pane()]

    def test_generating_without_image(self):
        session = Session()
        session.set_loading(True)
        [pane] = build_panes(session.state)
        assert pane.loading is True

    def test_identical_sides_show_placeholder(self):
        session = _generated()

        left, right = build_panes(session.state)

        assert left == Pane(A, "Original")
        assert right.image is None
        assert right.caption == PLACEHOLDER_CAPTION
        assert right.placeholder == PLACEHOLDER_TEXT

    def test_after_edit_shows_both_images(self):
        session = _generated()
        session.add_edit(B)

        left, right = build_panes(session.state)

        assert left == Pane(A, "Previous")
        assert right == Pane(B, "Current")

    def test_edit_in_flight(self):
        session = _generated()
        session.set_loading(True)

        left, right = build_panes(session.state)

        assert left == Pane(A, "Current")
        assert right.loading is True
        assert right.caption == "Editing..."

    def test_comparison_off_shows_current_only(self):
        session = _generated()
        session.add_edit(B)
        session.toggle_comparison()

        assert build_panes(session.state) == [Pane(B)]

    def test_cutout_gets_its_own_pane(self):
        session = _generated()

        panes = build_panes(session.state, background_removed=CUTOUT)

        assert len(panes) == 3
        assert panes[-1] == Pane(CUTOUT, CUTOUT_CAPTION)

    def test_cutout_shown_next_to_single_image(self):
        session = _generated()
        session.toggle_comparison()

        assert build_panes(session.state, CUTOUT) == [Pane(A), Pane(CUTOUT, CUTOUT_CAPTION)]


class TestStatusMessage:
    """Tests for status bar messages."""

    def test_action_start(self):
        session = Session()
        before = session.state
        session.set_loading(True)
        assert status_message(before, session.state) == ("Generating…", 0)

    def test_edit_start(self):
        session = _generated()
        before = session.state
        session.set_loading(True)
        assert status_message(before, session.state) == ("Editing…", 0)

    def test_edit_finished(self):
        session = _generated()
        session.set_loading(True)
        session.add_edit(B)
        before = session.state
        session.set_loading(False)
        assert status_message(before, session.state) == ("Edited", 2000)

    def test_generate_finished(self):
        session = Session()
        session.set_loading(True)
        before = session.state
        session.set_loading(False)
        assert status_message(before, session.state) == ("Ready", 2000)

    def test_failure(self):
        session = _generated()
        session.add_edit(B)
        session.set_loading(True)
        session.set_error("quota exhausted")
        before = session.state
        session.set_loading(False)
        assert status_message(before, session.state) == ("Failed", 3000)

    def test_typing_after_edit_posts_nothing(self):
        session = _generated()
        session.add_edit(B)
        before = session.state
        session.set_edit_prompt("m")
        assert status_message(before, session.state) is None

    def test_still_loading_posts_nothing(self):
        session = Session()
        session.set_loading(True)
        before = session.state
        session.set_generate_prompt("x")
        assert status_message(before, session.state) is None

    def test_first_render(self):
        assert status_message(None, Session().state) is None

    def test_first_render_while_loading(self):
        state = Session().state
        state = replace(state, ui=replace(state.ui, is_loading=True))
        assert status_message(None, state) == ("Generating…", 0)
