"""
Operation results and the error taxonomy of the rendering engine.

Internal components raise the exceptions below; the public boundary
(``AnnotationRenderer`` and ``DocumentRenderer``) converts them into
``OperationResult`` objects so nothing escapes to the caller.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Tuple

if TYPE_CHECKING:
    from .geometry import Viewport
    from .timeline import ActiveEntry


class ErrorKind(Enum):
    """Category of a failed operation."""

    LOAD = "load_error"
    PAGE_RANGE = "page_range_error"
    RENDER = "render_error"
    DESTROYED = "destroyed_error"
    INVALID_ARGUMENT = "invalid_argument"


# ==============================================================================
# Exceptions
# ==============================================================================


class InkreelError(Exception):
    """Base class for engine errors."""

    kind: ErrorKind = ErrorKind.RENDER


class LoadError(InkreelError):
    """Document could not be fetched or parsed."""

    kind = ErrorKind.LOAD


class PageRangeError(InkreelError):
    """Requested page is outside ``[1, page_count]``."""

    kind = ErrorKind.PAGE_RANGE

    def __init__(self, page_number, page_count: int):
        super().__init__(
            f"Invalid page number: {page_number}. Document has {page_count} pages."
        )
        self.page_number = page_number
        self.page_count = page_count


class RenderError(InkreelError):
    """A drawing operation failed."""

    kind = ErrorKind.RENDER


class DestroyedError(InkreelError):
    """Operation invoked after the engine was torn down."""

    kind = ErrorKind.DESTROYED

    def __init__(self, operation: str = "operation"):
        super().__init__(f"Cannot call {operation}() on a destroyed renderer")
        self.operation = operation


class InvalidArgumentError(InkreelError):
    """Argument has the wrong type or an impossible value."""

    kind = ErrorKind.INVALID_ARGUMENT


class RuntimeNotInitializedError(RuntimeError):
    """Raised when the engine is built before ``initialize_runtime()``."""


# ==============================================================================
# Results
# ==============================================================================


@dataclass(frozen=True)
class OperationResult:
    """
    Outcome of a public engine operation.

    ``stale`` marks an asynchronous operation that was superseded by a
    newer request before it completed. Stale results are not failures and
    carry no error.
    """

    success: bool
    error: Optional[InkreelError] = None
    page_count: Optional[int] = None
    viewport: Optional["Viewport"] = None
    active: Tuple["ActiveEntry", ...] = ()
    stale: bool = False

    @classmethod
    def ok(cls, **fields) -> "OperationResult":
        return cls(success=True, **fields)

    @classmethod
    def failure(cls, error: InkreelError) -> "OperationResult":
        return cls(success=False, error=error)

    @classmethod
    def superseded(cls) -> "OperationResult":
        return cls(success=False, stale=True)

    @property
    def error_kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error is not None else None

    @property
    def message(self) -> str:
        """Human readable description suitable for a status bar."""
        if self.success:
            return "OK"
        if self.stale:
            return "Superseded by a newer request"
        return str(self.error) if self.error else "Unknown error"
