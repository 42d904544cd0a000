"""
Main Window - The primary application window.

One window owns one Session and its controller. User input is turned
into session/controller calls; every state change re-renders the window
from the session state. Provider calls run on the global thread pool.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from PySide6.QtWidgets import (
    QMainWindow,
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QComboBox,
    QFileDialog,
)
from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal

from image_edit_studio.core.background import BACKGROUND_STYLES
from image_edit_studio.core.controller import ImageEditController, PendingAction
from image_edit_studio.core.session import Session
from image_edit_studio.core.versioning import StudioState
from image_edit_studio.providers.registry import ProviderRegistry
from image_edit_studio.ui.image_view import ImagePanel
from image_edit_studio.ui.presenter import build_panes, status_message

logger = logging.getLogger(__name__)


class WorkerSignals(QObject):
    finished = Signal(object, object)  # PendingAction, result
    failed = Signal(object, object)  # PendingAction, exception


class ActionWorker(QRunnable):
    """Runs a started action's external call off the UI thread."""

    def __init__(self, pending: PendingAction):
        super().__init__()
        self.pending = pending
        self.signals = WorkerSignals()

    def run(self) -> None:
        try:
            result = asyncio.run(self.pending.run())
        except Exception as e:
            self.signals.failed.emit(self.pending, e)
            return
        self.signals.finished.emit(self.pending, result)


class MainWindow(QMainWindow):
    """
    The main application window for Image Edit Studio.

    Contains:
    - Comparison / single image display, plus the background cutout
    - Prompt input that targets generate or edit depending on mode
    - Action buttons (upload, save, reset, start over, comparison toggle)
    - Background style picker
    - Status bar
    """

    def __init__(self, registry: ProviderRegistry, parent: QWidget | None = None):
        super().__init__(parent)

        self.setWindowTitle("Image Edit Studio")
        self.setMinimumSize(900, 700)

        self._session = Session()
        self._controller = ImageEditController(
            self._session,
            provider=registry.get_provider("gemini"),
            remover=registry.get_provider("removebg"),
        )
        self._workers: set[ActionWorker] = set()
        self._last_state: StudioState | None = None

        self._setup_central_widget()
        self._setup_status_bar(registry)

        self._unsubscribe = self._session.subscribe(self._render)
        self._render(self._session.state)

    # -------------------------------------------------------------------------
    # Layout
    # -------------------------------------------------------------------------

    def _setup_central_widget(self) -> None:
        central = QWidget()
        layout = QVBoxLayout(central)

        self._images = ImagePanel()
        layout.addWidget(self._images, 1)

        self._error_label = QLabel()
        self._error_label.setWordWrap(True)
        self._error_label.setStyleSheet("color: #f38ba8;")
        layout.addWidget(self._error_label)

        # Image actions
        actions = QHBoxLayout()
        self._edit_mode_btn = QPushButton("Edit Image")
        self._edit_mode_btn.clicked.connect(self._on_toggle_edit_mode)
        self._compare_btn = QPushButton("Show Comparison")
        self._compare_btn.clicked.connect(self._session.toggle_comparison)
        self._reset_btn = QPushButton("Reset to Original")
        self._reset_btn.clicked.connect(self._controller.reset_to_original)
        self._upload_btn = QPushButton("Upload…")
        self._upload_btn.clicked.connect(self._on_upload)
        self._save_btn = QPushButton("Save…")
        self._save_btn.clicked.connect(self._on_save)
        self._start_over_btn = QPushButton("Start Over")
        self._start_over_btn.clicked.connect(self._controller.start_over)
        for btn in (
            self._edit_mode_btn,
            self._compare_btn,
            self._reset_btn,
            self._upload_btn,
            self._save_btn,
            self._start_over_btn,
        ):
            actions.addWidget(btn)
        actions.addStretch()
        layout.addLayout(actions)

        # Background replacement
        background = QHBoxLayout()
        background.addWidget(QLabel("Background:"))
        self._style_combo = QComboBox()
        self._style_combo.addItems([s.title() for s in BACKGROUND_STYLES])
        background.addWidget(self._style_combo)
        self._background_btn = QPushButton("Apply AI Background")
        self._background_btn.clicked.connect(self._on_replace_background)
        background.addWidget(self._background_btn)
        background.addStretch()
        layout.addLayout(background)

        # Prompt
        prompt_row = QHBoxLayout()
        self._prompt_edit = QLineEdit()
        self._prompt_edit.textEdited.connect(self._on_prompt_edited)
        self._prompt_edit.returnPressed.connect(self._on_submit)
        prompt_row.addWidget(self._prompt_edit, 1)
        self._submit_btn = QPushButton("Generate")
        self._submit_btn.clicked.connect(self._on_submit)
        prompt_row.addWidget(self._submit_btn)
        layout.addLayout(prompt_row)

        self.setCentralWidget(central)

    def _setup_status_bar(self, registry: ProviderRegistry) -> None:
        configured = registry.list_configured_providers()
        if "gemini" not in configured:
            self.statusBar().showMessage(
                "Gemini API key not configured (set GOOGLE_GENERATIVE_AI_API_KEY)"
            )
        else:
            self.statusBar().showMessage("Ready", 3000)

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def _render(self, state: StudioState) -> None:
        images, ui, prompts = state.images, state.ui, state.prompts
        busy = ui.is_loading

        self._images.show_panes(build_panes(state, self._controller.last_background_removed))

        self._error_label.setText(ui.error or "")
        self._error_label.setVisible(bool(ui.error))

        prompt = prompts.edit if ui.is_edit_mode else prompts.generate
        if self._prompt_edit.text() != prompt:
            self._prompt_edit.setText(prompt)
        self._prompt_edit.setPlaceholderText(
            "Describe how to change the image…" if ui.is_edit_mode else "Describe the image to create…"
        )
        self._submit_btn.setText("Edit" if ui.is_edit_mode else "Generate")

        has_image = images.current is not None
        self._submit_btn.setEnabled(not busy)
        self._prompt_edit.setEnabled(not busy)
        self._edit_mode_btn.setText("New Image" if ui.is_edit_mode else "Edit Image")
        self._edit_mode_btn.setEnabled(has_image and not busy)
        self._compare_btn.setText("Hide Comparison" if ui.show_comparison else "Show Comparison")
        self._compare_btn.setEnabled(has_image)
        self._reset_btn.setEnabled(images.previous is not None and not busy)
        self._upload_btn.setEnabled(not has_image and not busy)
        self._save_btn.setEnabled(has_image)
        self._background_btn.setEnabled(has_image and not busy and self._controller.remover is not None)

        message = status_message(self._last_state, state)
        if message is not None:
            self.statusBar().showMessage(*message)
        self._last_state = state

    # -------------------------------------------------------------------------
    # User actions
    # -------------------------------------------------------------------------

    def _on_prompt_edited(self, text: str) -> None:
        if self._session.ui.is_edit_mode:
            self._session.set_edit_prompt(text)
        else:
            self._session.set_generate_prompt(text)

    def _on_submit(self) -> None:
        text = self._prompt_edit.text()
        if self._session.ui.is_edit_mode:
            pending = self._controller.start_edit(text)
        else:
            pending = self._controller.start_generate(text)
        self._run(pending)

    def _on_toggle_edit_mode(self) -> None:
        if self._session.ui.is_edit_mode:
            self._session.exit_edit_mode()
        else:
            self._session.enter_edit_mode()

    def _on_replace_background(self) -> None:
        style = self._style_combo.currentText().lower()
        self._run(self._controller.start_replace_background(style))

    def _on_upload(self) -> None:
        path, _ = QFileDialog.getOpenFileName(
            self, "Upload Image", str(Path.home()), "Images (*.png *.jpg *.jpeg)"
        )
        if path:
            self._controller.upload(path)

    def _on_save(self) -> None:
        directory = QFileDialog.getExistingDirectory(self, "Save Image To", str(Path.home()))
        if directory:
            path = self._controller.save_current(directory)
            if path:
                self.statusBar().showMessage(f"Saved {path.name}", 3000)

    # -------------------------------------------------------------------------
    # Background work
    # -------------------------------------------------------------------------

    def _run(self, pending: PendingAction | None) -> None:
        if pending is None:
            return
        worker = ActionWorker(pending)
        worker.setAutoDelete(False)
        worker.signals.finished.connect(self._on_action_finished)
        worker.signals.failed.connect(self._on_action_failed)
        self._workers.add(worker)
        QThreadPool.globalInstance().start(worker)

    def _release(self, pending: PendingAction) -> None:
        self._workers = {w for w in self._workers if w.pending is not pending}

    def _on_action_finished(self, pending: PendingAction, result) -> None:
        self._release(pending)
        if self._session.is_closed:
            return
        self._controller.complete(pending, result)
        if self._controller.last_background_removed is not None and self._session.ui.error:
            self.statusBar().showMessage("Background removed, but the new background failed", 5000)

    def _on_action_failed(self, pending: PendingAction, error) -> None:
        self._release(pending)
        if self._session.is_closed:
            return
        self._controller.fail(pending, error)

    def closeEvent(self, event) -> None:
        self._unsubscribe()
        self._session.close()
        logger.info("Session closed")
        super().closeEvent(event)
