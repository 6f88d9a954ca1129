"""
Qt front end: the declarative binding, viewer widget and player window.
"""

from .binding import RendererBinding
from .widgets import AnnotatedPageView

__all__ = ["RendererBinding", "AnnotatedPageView"]
