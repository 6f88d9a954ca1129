"""
Rendering engine: documents, timeline and annotation layers.
"""

from .annotations import (
    Annotation,
    AnnotationKind,
    HighlightAnnotation,
    InkAnnotation,
    TextAnnotation,
    normalize_annotations,
)
from .config import RendererConfig
from .document import (
    DocumentService,
    FitzDocumentService,
    RuntimeOptions,
    initialize_runtime,
    is_runtime_initialized,
)
from .engine import AnnotationRenderer, EngineState
from .geometry import Viewport, point_norm_to_abs, rect_norm_to_abs
from .results import ErrorKind, InkreelError, OperationResult
from .surfaces import OverlayContainer, PageSurface
from .timeline import ActiveEntry, ContinuousSync, TimelineSync

__all__ = [
    "AnnotationRenderer",
    "EngineState",
    "Annotation",
    "AnnotationKind",
    "HighlightAnnotation",
    "TextAnnotation",
    "InkAnnotation",
    "normalize_annotations",
    "RendererConfig",
    "DocumentService",
    "FitzDocumentService",
    "RuntimeOptions",
    "initialize_runtime",
    "is_runtime_initialized",
    "Viewport",
    "rect_norm_to_abs",
    "point_norm_to_abs",
    "ErrorKind",
    "InkreelError",
    "OperationResult",
    "PageSurface",
    "OverlayContainer",
    "ActiveEntry",
    "TimelineSync",
    "ContinuousSync",
]
