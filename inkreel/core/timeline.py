"""
Timeline synchronization: which annotations are visible at a given time
and how far along their animation they are.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

from PyQt5.QtCore import QObject, QTimer, pyqtSignal

from .annotations.models import Annotation, AnnotationKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActiveEntry:
    """An annotation visible at the current time and its progress (0-1)."""

    annotation: Annotation
    progress: float

    @property
    def kind(self) -> AnnotationKind:
        return self.annotation.kind

    @property
    def elapsed(self) -> float:
        """Seconds since the annotation started, capped at its duration."""
        return self.progress * self.annotation.duration


def compute_progress(annotation: Annotation, time: float) -> Optional[float]:
    """
    Progress of ``annotation`` at ``time``, or None when it is not visible.

    Untimed annotations (``start == end == 0``) are always visible at
    progress 1. Instantaneous annotations (``start == end``, non-zero) stay
    visible from their instant onward at progress 1.
    """
    start, end = annotation.start, annotation.end

    if annotation.is_untimed:
        return 1.0

    if end > start:
        if not (start <= time <= end):
            return None
        return max(0.0, min(1.0, (time - start) / (end - start)))

    return 1.0 if time >= start else None


def filter_active(annotations: Iterable[Annotation], time: float) -> List[ActiveEntry]:
    """
    Select the annotations visible at ``time``.

    Args:
        annotations: Candidate annotations, in paint order
        time: Timeline position in seconds

    Returns:
        Active entries in the same order as the input
    """
    active = []
    for annotation in annotations:
        progress = compute_progress(annotation, time)
        if progress is not None:
            active.append(ActiveEntry(annotation, progress))
    return active


def group_by_kind(entries: Iterable[ActiveEntry]) -> Dict[AnnotationKind, List[ActiveEntry]]:
    """Split entries per annotation kind, preserving order within a kind."""
    grouped: Dict[AnnotationKind, List[ActiveEntry]] = {}
    for entry in entries:
        grouped.setdefault(entry.kind, []).append(entry)
    return grouped


class TimelineSync:
    """Stateless filter over the annotation set; see ``filter_active``."""

    def filter(self, annotations: Iterable[Annotation], time: float) -> List[ActiveEntry]:
        return filter_active(annotations, time)

    @staticmethod
    def group_by_kind(entries: Iterable[ActiveEntry]) -> Dict[AnnotationKind, List[ActiveEntry]]:
        return group_by_kind(entries)


class ContinuousSync(QObject):
    """
    Polls a time source on a timer and forwards the value to a sink.

    Used to follow a media player: ``start(lambda: player.position() / 1000)``
    keeps the sink (usually ``AnnotationRenderer.set_time``) updated.
    """

    # Signals
    time_changed = pyqtSignal(float)
    error = pyqtSignal(str)

    def __init__(self, sink: Callable[[float], object], interval_ms: int = 16, parent=None):
        super().__init__(parent)
        self._sink = sink
        self._get_time: Optional[Callable[[], float]] = None
        self._last_time: Optional[float] = None

        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self.tick)

    @property
    def is_running(self) -> bool:
        return self._get_time is not None

    def start(self, get_time: Callable[[], float]) -> None:
        """Start polling ``get_time``."""
        if not callable(get_time):
            raise TypeError("get_time must be callable")
        if self.is_running:
            logger.warning("Continuous sync already running")
            return
        self._get_time = get_time
        self._last_time = None
        self.tick()
        self._timer.start()

    def stop(self) -> None:
        self._timer.stop()
        self._get_time = None

    def tick(self) -> None:
        """Read the time source once and forward changes to the sink."""
        if self._get_time is None:
            return
        try:
            now = float(self._get_time())
        except Exception as e:
            logger.exception("Time source failed")
            self.error.emit(str(e))
            return

        if now == self._last_time:
            return
        self._last_time = now
        self._sink(now)
        self.time_changed.emit(now)
