"""
Process-wide MuPDF setup.

The host calls ``initialize_runtime()`` once before building an
``AnnotationRenderer``. The engine refuses to start without it so the
MuPDF message settings are never left to chance.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import fitz

from ..results import RuntimeNotInitializedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuntimeOptions:
    """MuPDF settings applied by ``initialize_runtime``."""

    # MuPDF prints parse errors to stderr unless told otherwise
    display_errors: bool = False
    display_warnings: bool = False


_active_options: Optional[RuntimeOptions] = None


def initialize_runtime(options: Optional[RuntimeOptions] = None) -> RuntimeOptions:
    """
    Configure MuPDF for this process.

    Calling it again replaces the previous options.

    Args:
        options: Settings to apply; defaults are used when omitted

    Returns:
        The options now in effect
    """
    global _active_options

    options = options or RuntimeOptions()
    fitz.TOOLS.mupdf_display_errors(options.display_errors)
    fitz.TOOLS.mupdf_display_warnings(options.display_warnings)

    _active_options = options
    logger.debug("MuPDF runtime initialized: %s", options)
    return options


def is_runtime_initialized() -> bool:
    return _active_options is not None


def runtime_options() -> Optional[RuntimeOptions]:
    return _active_options


def reset_runtime() -> None:
    """Forget the initialization; mainly for tests."""
    global _active_options
    _active_options = None


def require_runtime() -> RuntimeOptions:
    """
    Get the active options.

    Raises:
        RuntimeNotInitializedError: If ``initialize_runtime`` was never called
    """
    if _active_options is None:
        raise RuntimeNotInitializedError(
            "Call inkreel.initialize_runtime() before creating a renderer"
        )
    return _active_options
