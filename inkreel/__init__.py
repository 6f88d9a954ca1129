"""
Inkreel: timeline-synchronized annotation overlays for PDF pages.
"""

from .core import (
    AnnotationRenderer,
    OperationResult,
    RendererConfig,
    RuntimeOptions,
    initialize_runtime,
)

__version__ = "0.3.0"

__all__ = [
    "AnnotationRenderer",
    "OperationResult",
    "RendererConfig",
    "RuntimeOptions",
    "initialize_runtime",
]
