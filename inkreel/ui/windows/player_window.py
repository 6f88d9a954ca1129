"""
Player window: a document page with annotations replayed along a timeline.
"""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from PyQt5.QtCore import QElapsedTimer, Qt, pyqtSignal
from PyQt5.QtWidgets import (
    QComboBox,
    QFrame,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QScrollArea,
    QSlider,
    QSpinBox,
    QToolButton,
    QVBoxLayout,
    QWidget,
)

from inkreel.core.annotations.models import Annotation
from inkreel.core.config import RendererConfig
from inkreel.core.surfaces import OverlayContainer, PageSurface
from inkreel.core.timeline import ContinuousSync
from inkreel.ui.binding import RendererBinding
from inkreel.ui.widgets import AnnotatedPageView

logger = logging.getLogger(__name__)

ZOOM_LEVELS = (0.5, 0.75, 1.0, 1.25, 1.5, 2.0, 3.0)

# Timeline length used when no annotation has an end time
DEFAULT_DURATION = 60.0


class PlaybackClock:
    """Wall-clock playback position that can be paused and sought."""

    def __init__(self):
        self._timer = QElapsedTimer()
        self._offset = 0.0
        self.is_playing = False

    def position(self) -> float:
        """Current position in seconds."""
        if not self.is_playing:
            return self._offset
        return self._offset + self._timer.elapsed() / 1000.0

    def play(self) -> None:
        if not self.is_playing:
            self._timer.start()
            self.is_playing = True

    def pause(self) -> None:
        if self.is_playing:
            self._offset = self.position()
            self.is_playing = False

    def seek(self, seconds: float) -> None:
        self._offset = max(0.0, seconds)
        if self.is_playing:
            self._timer.restart()


class PlayerWindow(QMainWindow):
    """Main window of the annotation player."""

    # Signals
    document_loaded = pyqtSignal(int)

    def __init__(
        self,
        document: Optional[str] = None,
        annotations: Optional[List[Annotation]] = None,
        config: Optional[RendererConfig] = None,
    ):
        super().__init__()
        self.config = config or RendererConfig()

        self._init_core_components()
        self._setup_window()
        self._setup_ui()
        self._setup_connections()

        self.binding.mount()
        if annotations:
            self.set_annotations(annotations)
        if document:
            self.load_document(document)

    def _init_core_components(self):
        """Initialize rendering targets, binding and playback."""
        # Coroutines run to completion on a private loop
        self._loop = asyncio.new_event_loop()

        self.page_surface = PageSurface()
        self.overlay = OverlayContainer()
        self.binding = RendererBinding(
            self.page_surface, self.overlay, config=self.config, parent=self
        )

        self.clock = PlaybackClock()
        self.sync = ContinuousSync(
            self._on_clock_tick, interval_ms=self.config.sync_interval_ms, parent=self
        )

        self.duration = DEFAULT_DURATION
        self.current_file_path: Optional[str] = None

    def _setup_window(self):
        self.setWindowTitle("Inkreel")
        self.setMinimumSize(800, 600)

    def _setup_ui(self):
        """Setup toolbar, page view and status bar."""
        self.top_frame = QFrame()
        self.top_frame.setObjectName("TopFrame")
        top_layout = QHBoxLayout(self.top_frame)
        top_layout.setContentsMargins(10, 8, 10, 8)
        top_layout.setSpacing(8)

        self.play_button = QToolButton(self.top_frame)
        self.play_button.setText("Play")
        self.play_button.setToolTip("Play / Pause (Space)")
        self.play_button.setShortcut(Qt.Key_Space)
        top_layout.addWidget(self.play_button)

        self.time_slider = QSlider(Qt.Horizontal, self.top_frame)
        self.time_slider.setRange(0, int(self.duration * 1000))
        top_layout.addWidget(self.time_slider, 1)

        self.time_label = QLabel(self._format_time(0.0), self.top_frame)
        self.time_label.setMinimumWidth(110)
        top_layout.addWidget(self.time_label)

        self.page_spin = QSpinBox(self.top_frame)
        self.page_spin.setRange(1, 1)
        self.page_spin.setEnabled(False)
        top_layout.addWidget(self.page_spin)

        self.total_page_label = QLabel("/ 0", self.top_frame)
        top_layout.addWidget(self.total_page_label)

        self.zoom_combo = QComboBox(self.top_frame)
        for zoom in ZOOM_LEVELS:
            self.zoom_combo.addItem(f"{int(zoom * 100)}%", zoom)
        self.zoom_combo.setCurrentIndex(self._zoom_index(self.config.initial_scale))
        top_layout.addWidget(self.zoom_combo)

        self.page_view = AnnotatedPageView(self.page_surface, self.overlay)
        self.scroll_area = QScrollArea()
        self.scroll_area.setAlignment(Qt.AlignCenter)
        self.scroll_area.setWidget(self.page_view)

        central = QWidget()
        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)
        layout.addWidget(self.top_frame)
        layout.addWidget(self.scroll_area, 1)
        self.setCentralWidget(central)

    def _setup_connections(self):
        self.play_button.clicked.connect(self.toggle_playback)
        self.time_slider.sliderMoved.connect(self._on_slider_moved)
        self.page_spin.valueChanged.connect(self.go_to_page)
        self.zoom_combo.currentIndexChanged.connect(self._on_zoom_selected)

        self.binding.document_loaded.connect(self._on_document_loaded)
        self.binding.page_changed.connect(self._on_page_changed)
        self.binding.error_occurred.connect(self._on_error)
        self.sync.error.connect(self._on_error)

    # ==============================================================================
    # Document and view
    # ==============================================================================

    def load_document(self, source: str) -> bool:
        """Load a document and show its first page."""
        self.current_file_path = source
        results = self._run(
            self.binding.update(source=source, page=1, scale=self._selected_zoom())
        )
        if results and results[0].success:
            self.setWindowTitle(f"Inkreel - {Path(source).name}")
            return True
        return False

    def go_to_page(self, page_number: int):
        if self.binding.is_mounted:
            self._run(self.binding.update(page=page_number))

    def set_annotations(self, annotations: List[Annotation]):
        """Replace the annotations and fit the timeline to them."""
        ends = [a.end for a in annotations if not a.is_untimed]
        self.duration = max(ends) if ends else DEFAULT_DURATION
        self.time_slider.setRange(0, max(1, int(self.duration * 1000)))
        self._run(self.binding.update(annotations=list(annotations)))

    def _on_zoom_selected(self, index: int):
        zoom = self.zoom_combo.itemData(index)
        if zoom is not None and self.binding.is_mounted:
            self._run(self.binding.update(scale=zoom))

    def _on_document_loaded(self, page_count: int):
        self.page_spin.blockSignals(True)
        self.page_spin.setRange(1, page_count)
        self.page_spin.setValue(1)
        self.page_spin.blockSignals(False)
        self.page_spin.setEnabled(True)
        self.total_page_label.setText(f"/ {page_count}")
        self.statusBar().showMessage(f"Loaded {page_count} pages", 3000)
        self.document_loaded.emit(page_count)

    def _on_page_changed(self, page_number: int):
        self.page_spin.blockSignals(True)
        self.page_spin.setValue(page_number)
        self.page_spin.blockSignals(False)

    def _on_error(self, error):
        logger.warning("Player error: %s", error)
        self.statusBar().showMessage(str(error), 5000)

    # ==============================================================================
    # Playback
    # ==============================================================================

    def toggle_playback(self):
        if self.clock.is_playing:
            self.pause()
        else:
            self.play()

    def play(self):
        if self.clock.position() >= self.duration:
            self.clock.seek(0.0)
        self.clock.play()
        self.sync.start(self.clock.position)
        self.play_button.setText("Pause")

    def pause(self):
        self.clock.pause()
        self.sync.stop()
        self.play_button.setText("Play")

    def seek(self, seconds: float):
        self.clock.seek(seconds)
        self._on_clock_tick(self.clock.position())

    def _on_slider_moved(self, value: int):
        self.seek(value / 1000.0)

    def _on_clock_tick(self, seconds: float):
        if seconds >= self.duration:
            seconds = self.duration
            self.pause()
            self.clock.seek(seconds)

        self.binding.set_current_time(seconds)
        self.time_slider.blockSignals(True)
        self.time_slider.setValue(int(seconds * 1000))
        self.time_slider.blockSignals(False)
        self.time_label.setText(
            f"{self._format_time(seconds)} / {self._format_time(self.duration)}"
        )

    # ==============================================================================
    # Helpers
    # ==============================================================================

    def _run(self, coro):
        return self._loop.run_until_complete(coro)

    def _selected_zoom(self) -> float:
        zoom = self.zoom_combo.currentData()
        return zoom if zoom is not None else self.config.initial_scale

    @staticmethod
    def _zoom_index(scale: float) -> int:
        nearest = min(ZOOM_LEVELS, key=lambda z: abs(z - scale))
        return ZOOM_LEVELS.index(nearest)

    @staticmethod
    def _format_time(seconds: float) -> str:
        minutes, secs = divmod(max(0.0, seconds), 60)
        return f"{int(minutes):02d}:{secs:05.2f}"

    def closeEvent(self, event):
        self.sync.stop()
        self.binding.unmount()
        self.page_view.detach()
        self._loop.close()
        super().closeEvent(event)
