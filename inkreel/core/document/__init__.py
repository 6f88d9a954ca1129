"""
Document loading and page rendering.
"""

from .renderer import DocumentRenderer, DocumentState
from .runtime import (
    RuntimeOptions,
    initialize_runtime,
    is_runtime_initialized,
    require_runtime,
    reset_runtime,
)
from .service import (
    DocumentHandle,
    DocumentService,
    FitzDocumentService,
    PageHandle,
)

__all__ = [
    "DocumentRenderer",
    "DocumentState",
    "DocumentService",
    "DocumentHandle",
    "PageHandle",
    "FitzDocumentService",
    "RuntimeOptions",
    "initialize_runtime",
    "is_runtime_initialized",
    "require_runtime",
    "reset_runtime",
]
