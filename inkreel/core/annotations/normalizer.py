"""
Normalization of raw annotation records.

Raw records (hand written JSON, generated data, partial objects) are turned
into well-formed annotations. Invalid values are replaced with safe defaults
and reported as warnings; records that cannot be routed to a layer are
skipped.
"""

import logging
import math
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from ..colors import is_css_color
from .models import (
    Annotation,
    AnnotationKind,
    HighlightAnnotation,
    InkAnnotation,
    InkPoint,
    InkStroke,
    NormRect,
    TextAnnotation,
)

logger = logging.getLogger(__name__)

BASE_DEFAULTS = {"page": 1, "start": 0.0, "end": 0.0}
HIGHLIGHT_DEFAULTS = {
    "mode": "quads",
    "quad": {"x": 0.1, "y": 0.1, "w": 0.8, "h": 0.05},
    "color": "rgba(255, 255, 0, 0.3)",
}
TEXT_DEFAULTS = {
    "content": "[No content]",
    "x": 0.1,
    "y": 0.1,
    "w": 0.3,
    "h": 0.1,
    "bg": "rgba(255, 255, 255, 0.9)",
    "color": "#000000",
}
INK_DEFAULTS = {
    "color": "#1f2937",
    "size": 3.0,
    "points": [{"t": 0.0, "x": 0.1, "y": 0.1}, {"t": 1.0, "x": 0.2, "y": 0.2}],
}


class IssueSeverity(Enum):
    """How serious a normalization issue is."""

    DATA_WARNING = "data_warning"  # Value replaced, annotation kept
    DATA_SKIPPED = "data_skipped"  # Annotation dropped
    INFO = "info"


@dataclass
class Issue:
    """A single problem found while normalizing."""

    index: int
    message: str
    severity: IssueSeverity = IssueSeverity.DATA_WARNING
    annotation_id: Optional[str] = None

    def __str__(self) -> str:
        prefix = f"[{self.annotation_id}]" if self.annotation_id else f"Index {self.index}"
        return f"{prefix}: {self.message}"


@dataclass
class NormalizationResult:
    """Normalized annotations plus everything that was fixed or dropped."""

    normalized: List[Annotation] = field(default_factory=list)
    warnings: List[Issue] = field(default_factory=list)
    skipped: List[Issue] = field(default_factory=list)
    info: List[Issue] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.warnings and not self.skipped


class _RecordNormalizer:
    """Normalizes one raw record, collecting issues as it goes."""

    def __init__(self, raw: Mapping[str, Any], index: int):
        self.raw = raw
        self.index = index
        self.id: Optional[str] = None
        self.warnings: List[Issue] = []
        self.info: List[Issue] = []

    def warn(self, message: str) -> None:
        self.warnings.append(Issue(self.index, message, IssueSeverity.DATA_WARNING, self.id))

    # Field-level helpers

    def number(self, value: Any) -> Optional[float]:
        if isinstance(value, bool):
            return None
        if isinstance(value, str):
            try:
                value = float(value)
            except ValueError:
                return None
        if not isinstance(value, (int, float)):
            return None
        try:
            number = float(value)
        except OverflowError:
            # Integers beyond float range
            return None
        if math.isnan(number):
            return None
        return number

    def coordinate(self, value: Any, default: float, name: str) -> float:
        number = self.number(value)
        if number is None:
            self.warn(f'Field "{name}" invalid value "{value}", using default {default}')
            return default
        if number < 0:
            self.warn(f'Field "{name}" value {number} below range [0,1], clamping to 0')
            return 0.0
        if number > 1:
            self.warn(f'Field "{name}" value {number} exceeds range [0,1], clamping to 1')
            return 1.0
        return number

    def positive(self, value: Any, default: float, name: str) -> float:
        number = self.number(value)
        if number is None or number <= 0 or math.isinf(number):
            self.warn(f'Field "{name}" invalid value "{value}", using default {default}')
            return default
        return number

    def color(self, value: Any, default: str) -> str:
        if is_css_color(value):
            return value.strip()
        self.warn(f'Invalid color format "{value}", using default {default}')
        return default

    def style(self) -> Optional[Mapping[str, Any]]:
        style = self.raw.get("style")
        if not isinstance(style, Mapping):
            self.warn('Field "style" missing or invalid, using defaults')
            return None
        return style

    # Base fields

    def base_fields(self) -> Dict[str, Any]:
        raw_id = self.raw.get("id")
        if isinstance(raw_id, str) and raw_id.strip():
            self.id = raw_id.strip()
        else:
            self.id = f"anno-{uuid.uuid4().hex[:12]}"
            self.info.append(
                Issue(self.index, "Auto-generated ID (original was missing or invalid)",
                      IssueSeverity.INFO, self.id)
            )

        page = self.number(self.raw.get("page"))
        if page is None or page < 1 or math.isinf(page):
            self.warn(
                f'Field "page" invalid value "{self.raw.get("page")}", '
                f'using default {BASE_DEFAULTS["page"]}'
            )
            page = BASE_DEFAULTS["page"]

        start = self.number(self.raw.get("start"))
        if start is None or start < 0 or math.isinf(start):
            self.warn(
                f'Field "start" invalid value "{self.raw.get("start")}", '
                f'using default {BASE_DEFAULTS["start"]}'
            )
            start = BASE_DEFAULTS["start"]

        end = self.number(self.raw.get("end"))
        if end is None or end < 0 or math.isinf(end):
            self.warn(f'Field "end" invalid value "{self.raw.get("end")}", using start value {start}')
            end = start
        elif end < start:
            self.warn(f'Field "end" ({end}) less than start ({start}), clamping to start')
            end = start

        return {"id": self.id, "page": int(page), "start": start, "end": end}

    # Kind-specific fields

    def quad(self, quad: Any) -> NormRect:
        defaults = HIGHLIGHT_DEFAULTS["quad"]
        if not isinstance(quad, Mapping):
            self.warn("Invalid quad object, using default")
            return NormRect(**defaults)
        return NormRect(
            x=self.coordinate(quad.get("x"), defaults["x"], "quad.x"),
            y=self.coordinate(quad.get("y"), defaults["y"], "quad.y"),
            w=self.coordinate(quad.get("w"), defaults["w"], "quad.w"),
            h=self.coordinate(quad.get("h"), defaults["h"], "quad.h"),
        )

    def highlight(self, base: Dict[str, Any]) -> HighlightAnnotation:
        if self.raw.get("mode") != HIGHLIGHT_DEFAULTS["mode"]:
            self.warn(
                f'Field "mode" invalid value "{self.raw.get("mode")}", '
                f'using default "{HIGHLIGHT_DEFAULTS["mode"]}"'
            )

        raw_quads = self.raw.get("quads")
        if not isinstance(raw_quads, list) or not raw_quads:
            self.warn('Field "quads" missing or empty, using default')
            quads = [NormRect(**HIGHLIGHT_DEFAULTS["quad"])]
        else:
            quads = [self.quad(q) for q in raw_quads]

        style = self.style()
        color = HIGHLIGHT_DEFAULTS["color"]
        if style is not None:
            color = self.color(style.get("color"), color)

        return HighlightAnnotation(
            mode=HIGHLIGHT_DEFAULTS["mode"], quads=quads, style={"color": color}, **base
        )

    def text(self, base: Dict[str, Any]) -> TextAnnotation:
        content = self.raw.get("content")
        if not isinstance(content, str) or not content.strip():
            self.warn(f'Field "content" missing or empty, using default "{TEXT_DEFAULTS["content"]}"')
            content = TEXT_DEFAULTS["content"]

        box = {
            name: self.coordinate(self.raw.get(name), TEXT_DEFAULTS[name], name)
            for name in ("x", "y", "w", "h")
        }

        style = self.style()
        bg, color = TEXT_DEFAULTS["bg"], TEXT_DEFAULTS["color"]
        if style is not None:
            bg = self.color(style.get("bg"), bg)
            color = self.color(style.get("color"), color)

        return TextAnnotation(content=content, style={"bg": bg, "color": color}, **box, **base)

    def stroke(self, stroke: Any) -> InkStroke:
        if not isinstance(stroke, Mapping):
            self.warn("Invalid stroke object, using default")
            return self._default_stroke()

        color = self.color(stroke.get("color"), INK_DEFAULTS["color"])
        size = self.positive(stroke.get("size"), INK_DEFAULTS["size"], "stroke.size")

        raw_points = stroke.get("points")
        if not isinstance(raw_points, list) or not raw_points:
            self.warn("Stroke missing points array, using default")
            return InkStroke(points=self._default_stroke().points, color=color, size=size)

        points: List[InkPoint] = []
        last_t = 0.0
        for raw_point in raw_points:
            if not isinstance(raw_point, Mapping):
                self.warn("Invalid point object, using default")
                raw_point = {"t": last_t, "x": 0.1, "y": 0.1}

            t = self.number(raw_point.get("t"))
            if t is None or t < 0 or math.isinf(t):
                self.warn(f'Field "point.t" invalid value "{raw_point.get("t")}", using {last_t}')
                t = last_t
            elif t < last_t:
                self.warn(f'Field "point.t" ({t}) goes backwards, raising to {last_t}')
                t = last_t
            last_t = t

            points.append(
                InkPoint(
                    x=self.coordinate(raw_point.get("x"), 0.1, "point.x"),
                    y=self.coordinate(raw_point.get("y"), 0.1, "point.y"),
                    t=t,
                )
            )
        return InkStroke(points=points, color=color, size=size)

    def _default_stroke(self) -> InkStroke:
        return InkStroke(
            points=[InkPoint(**p) for p in INK_DEFAULTS["points"]],
            color=INK_DEFAULTS["color"],
            size=INK_DEFAULTS["size"],
        )

    def ink(self, base: Dict[str, Any]) -> InkAnnotation:
        raw_strokes = self.raw.get("strokes")
        if not isinstance(raw_strokes, list) or not raw_strokes:
            self.warn('Field "strokes" missing or empty, using default')
            strokes = [self._default_stroke()]
        else:
            strokes = [self.stroke(s) for s in raw_strokes]
        style = self.raw.get("style")
        return InkAnnotation(
            strokes=strokes, style=dict(style) if isinstance(style, Mapping) else {}, **base
        )


def normalize_annotation(raw: Any, index: int = 0):
    """
    Normalize a single raw record.

    Args:
        raw: Raw record (expected to be a mapping)
        index: Position of the record in its source list

    Returns:
        Tuple of (annotation or None, warnings, info, skip reason or None)
    """
    if not isinstance(raw, Mapping):
        return None, [], [], f"Annotation at index {index}: Not a valid object"

    raw_type = raw.get("type")
    if not isinstance(raw_type, str) or not raw_type.strip():
        return None, [], [], f"Annotation at index {index}: Missing or invalid type field"

    try:
        kind = AnnotationKind(raw_type.strip())
    except ValueError:
        return None, [], [], f'Annotation at index {index}: Unsupported type "{raw_type.strip()}"'

    record = _RecordNormalizer(raw, index)
    base = record.base_fields()

    if kind == AnnotationKind.HIGHLIGHT:
        annotation = record.highlight(base)
    elif kind == AnnotationKind.TEXT:
        annotation = record.text(base)
    else:
        annotation = record.ink(base)

    return annotation, record.warnings, record.info, None


def normalize_annotations(raw_annotations: Any, skip_invalid: bool = True) -> NormalizationResult:
    """
    Normalize a list of raw annotation records.

    Args:
        raw_annotations: List of raw records
        skip_invalid: Skip records that cannot be normalized. When False
            the first such record raises ValueError.

    Returns:
        NormalizationResult whose ``normalized`` list is safe to hand to
        ``AnnotationRenderer.set_annotations``
    """
    result = NormalizationResult()

    if not isinstance(raw_annotations, (list, tuple)):
        result.warnings.append(
            Issue(-1, "Input is not a list, returning empty result")
        )
        logger.warning("Annotation input is not a list: %r", type(raw_annotations))
        return result

    for index, raw in enumerate(raw_annotations):
        if raw is None:
            reason = "Annotation is null"
        else:
            annotation, warnings, info, reason = normalize_annotation(raw, index)

        if reason is not None:
            if not skip_invalid:
                raise ValueError(reason)
            result.skipped.append(Issue(index, reason, IssueSeverity.DATA_SKIPPED))
            continue

        result.normalized.append(annotation)
        result.warnings.extend(warnings)
        result.info.extend(info)

    if result.skipped:
        logger.warning("Skipped %d annotation(s)", len(result.skipped))
        for issue in result.skipped:
            logger.warning("  %s", issue)
    if result.warnings:
        logger.warning("%d annotation warning(s)", len(result.warnings))
        for issue in result.warnings:
            logger.debug("  %s", issue)
    logger.debug("Normalized %d annotation(s)", len(result.normalized))

    return result
