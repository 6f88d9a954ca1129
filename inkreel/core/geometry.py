"""
Coordinate transforms between normalized page space and viewport pixels.
"""

from dataclasses import dataclass
from typing import Any, Mapping

from PyQt5.QtCore import QPointF, QRectF


@dataclass(frozen=True)
class Viewport:
    """Pixel dimensions of a page rendered at a given scale."""

    width: float
    height: float
    scale: float = 1.0

    @property
    def pixel_size(self):
        """Integer surface size (width, height) covering the viewport."""
        return max(1, int(round(self.width))), max(1, int(round(self.height)))


@dataclass(frozen=True)
class AbsRect:
    """Rectangle in viewport pixels."""

    left: float
    top: float
    width: float
    height: float

    def to_qrectf(self) -> QRectF:
        return QRectF(self.left, self.top, self.width, self.height)


@dataclass(frozen=True)
class AbsPoint:
    """Point in viewport pixels."""

    x: float
    y: float

    def to_qpointf(self) -> QPointF:
        return QPointF(self.x, self.y)


def _field(obj: Any, name: str, default: float = 0.0) -> float:
    """Read ``name`` from a mapping or an attribute holder."""
    if isinstance(obj, Mapping):
        value = obj.get(name, default)
    else:
        value = getattr(obj, name, default)
    return default if value is None else value


def _clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def rect_norm_to_abs(rect: Any, viewport: Viewport) -> AbsRect:
    """
    Map a normalized rectangle onto a viewport.

    Args:
        rect: Object or mapping with ``x``, ``y`` and optional ``w``, ``h``
            in the 0-1 range. Missing sizes count as 0.
        viewport: Target viewport

    Returns:
        AbsRect in pixels
    """
    return AbsRect(
        left=_clamp_unit(_field(rect, "x")) * viewport.width,
        top=_clamp_unit(_field(rect, "y")) * viewport.height,
        width=_clamp_unit(_field(rect, "w")) * viewport.width,
        height=_clamp_unit(_field(rect, "h")) * viewport.height,
    )


def point_norm_to_abs(point: Any, viewport: Viewport) -> AbsPoint:
    """
    Map a normalized point onto a viewport.

    Args:
        point: Object or mapping with ``x`` and ``y`` in the 0-1 range
        viewport: Target viewport

    Returns:
        AbsPoint in pixels
    """
    return AbsPoint(
        x=_clamp_unit(_field(point, "x")) * viewport.width,
        y=_clamp_unit(_field(point, "y")) * viewport.height,
    )


def viewport_for_page(page_width: float, page_height: float, scale: float) -> Viewport:
    """Viewport of a page measured in points, rendered at ``scale``."""
    return Viewport(width=page_width * scale, height=page_height * scale, scale=scale)
