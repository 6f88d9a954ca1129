from .page_view import AnnotatedPageView

__all__ = ["AnnotatedPageView"]
