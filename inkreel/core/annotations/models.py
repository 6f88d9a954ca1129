import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Type


class AnnotationKind(Enum):
    """Annotation kinds; each one is drawn by its own layer."""

    HIGHLIGHT = "highlight"
    TEXT = "text"
    INK = "ink"


# ==============================================================================
# Geometry primitives (normalized 0-1 page space)
# ==============================================================================


@dataclass
class NormRect:
    """Rectangle in normalized page coordinates."""

    x: float
    y: float
    w: float = 0.0
    h: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "NormRect":
        return NormRect(
            x=data["x"], y=data["y"], w=data.get("w", 0.0), h=data.get("h", 0.0)
        )


@dataclass
class InkPoint:
    """A recorded pen position; ``t`` is seconds since the stroke began."""

    x: float
    y: float
    t: float = 0.0


@dataclass
class InkStroke:
    """One continuous pen stroke."""

    points: List[InkPoint] = field(default_factory=list)
    color: str = "#1f2937"
    size: float = 3.0

    @property
    def duration(self) -> float:
        return self.points[-1].t if self.points else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "color": self.color,
            "size": self.size,
            "points": [{"x": p.x, "y": p.y, "t": p.t} for p in self.points],
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "InkStroke":
        return InkStroke(
            points=[
                InkPoint(x=p["x"], y=p["y"], t=p.get("t", 0.0))
                for p in data.get("points", [])
            ],
            color=data.get("color", "#1f2937"),
            size=data.get("size", 3.0),
        )


# ==============================================================================
# Annotations
# ==============================================================================


@dataclass
class Annotation:
    """
    Common fields of every annotation.

    ``start``/``end`` are timeline seconds. ``start == end == 0`` marks an
    untimed annotation that is always visible.
    """

    id: str
    page: int = 1  # 1-based page number
    start: float = 0.0
    end: float = 0.0
    style: Dict[str, Any] = field(default_factory=dict)

    kind = None  # Set by subclasses

    @property
    def is_untimed(self) -> bool:
        return self.start == 0 and self.end == 0

    @property
    def duration(self) -> float:
        return max(0.0, self.end - self.start)

    def _base_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.kind.value,
            "page": self.page,
            "start": self.start,
            "end": self.end,
            "style": dict(self.style),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert annotation to its JSON wire format."""
        return self._base_dict()


@dataclass
class HighlightAnnotation(Annotation):
    """Filled regions over text, one rectangle per quad."""

    mode: str = "quads"
    quads: List[NormRect] = field(default_factory=list)

    kind = AnnotationKind.HIGHLIGHT

    def to_dict(self) -> Dict[str, Any]:
        data = self._base_dict()
        data["mode"] = self.mode
        data["quads"] = [q.to_dict() for q in self.quads]
        return data


@dataclass
class TextAnnotation(Annotation):
    """A text callout box."""

    x: float = 0.0
    y: float = 0.0
    w: float = 0.0
    h: float = 0.0
    content: str = ""

    kind = AnnotationKind.TEXT

    @property
    def rect(self) -> NormRect:
        return NormRect(self.x, self.y, self.w, self.h)

    def to_dict(self) -> Dict[str, Any]:
        data = self._base_dict()
        data.update({"x": self.x, "y": self.y, "w": self.w, "h": self.h})
        data["content"] = self.content
        return data


@dataclass
class InkAnnotation(Annotation):
    """Freehand drawing made of timed strokes."""

    strokes: List[InkStroke] = field(default_factory=list)

    kind = AnnotationKind.INK

    def to_dict(self) -> Dict[str, Any]:
        data = self._base_dict()
        data["strokes"] = [s.to_dict() for s in self.strokes]
        return data


ANNOTATION_TYPES: Dict[AnnotationKind, Type[Annotation]] = {
    AnnotationKind.HIGHLIGHT: HighlightAnnotation,
    AnnotationKind.TEXT: TextAnnotation,
    AnnotationKind.INK: InkAnnotation,
}


def annotation_from_dict(data: Dict[str, Any]) -> Annotation:
    """
    Create an annotation from its wire format.

    The data must already be well formed; raw input goes through
    ``normalize_annotations`` first.

    Args:
        data: Dictionary in the JSON wire format

    Returns:
        The matching Annotation subclass instance
    """
    kind = AnnotationKind(data["type"])
    common = dict(
        id=data["id"],
        page=data.get("page", 1),
        start=data.get("start", 0.0),
        end=data.get("end", 0.0),
        style=dict(data.get("style") or {}),
    )

    if kind == AnnotationKind.HIGHLIGHT:
        return HighlightAnnotation(
            mode=data.get("mode", "quads"),
            quads=[NormRect.from_dict(q) for q in data.get("quads", [])],
            **common,
        )
    if kind == AnnotationKind.TEXT:
        return TextAnnotation(
            x=data.get("x", 0.0),
            y=data.get("y", 0.0),
            w=data.get("w", 0.0),
            h=data.get("h", 0.0),
            content=data.get("content", ""),
            **common,
        )
    return InkAnnotation(
        strokes=[InkStroke.from_dict(s) for s in data.get("strokes", [])],
        **common,
    )


def annotations_from_json(text: str) -> List[Annotation]:
    """Parse a JSON array of well-formed annotations."""
    return [annotation_from_dict(item) for item in json.loads(text)]


def annotations_to_json(annotations: List[Annotation], indent: Optional[int] = 2) -> str:
    return json.dumps([a.to_dict() for a in annotations], indent=indent)
