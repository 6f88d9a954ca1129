from typing import Optional

from PyQt5.QtCore import Qt
from PyQt5.QtGui import QPainter, QPixmap
from PyQt5.QtWidgets import QLabel

from inkreel.core.surfaces import OverlayContainer, PageSurface


class AnnotatedPageView(QLabel):
    """Displays the page surface with the annotation layers painted on top."""

    def __init__(self, page_surface: PageSurface, overlay: OverlayContainer, parent=None):
        super().__init__(parent)
        self.page_surface = page_surface
        self.overlay = overlay

        self.setAlignment(Qt.AlignLeft | Qt.AlignTop)
        self.setText("No document loaded")

        self.page_surface.add_listener(self._on_page_changed)
        self.overlay.add_listener(self.update)

    def _on_page_changed(self):
        image = self.page_surface.image
        if image is None:
            self.clear()
            self.setText("No document loaded")
            self.adjustSize()
            return

        self.setPixmap(QPixmap.fromImage(image))
        self.setFixedSize(image.size())

    def paintEvent(self, event):
        # Page pixmap first
        super().paintEvent(event)

        if self.page_surface.is_empty:
            return

        painter = QPainter(self)
        try:
            self.overlay.paint(painter)
        finally:
            painter.end()

    def detach(self) -> None:
        """Stop listening to the surfaces."""
        self.page_surface.remove_listener(self._on_page_changed)
        self.overlay.remove_listener(self.update)

    def grab_frame(self) -> Optional[QPixmap]:
        """Current page with its annotations, or None without a page."""
        if self.page_surface.is_empty:
            return None
        return QPixmap.fromImage(self.overlay.composite(self.page_surface.image))
