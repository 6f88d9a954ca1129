"""
Annotation data model and the normalization boundary.
"""
from .models import (
    ANNOTATION_TYPES,
    Annotation,
    AnnotationKind,
    HighlightAnnotation,
    InkAnnotation,
    InkPoint,
    InkStroke,
    NormRect,
    TextAnnotation,
    annotation_from_dict,
    annotations_from_json,
    annotations_to_json,
)
from .normalizer import (
    Issue,
    IssueSeverity,
    NormalizationResult,
    normalize_annotation,
    normalize_annotations,
)

__all__ = [
    'ANNOTATION_TYPES',
    'Annotation',
    'AnnotationKind',
    'HighlightAnnotation',
    'InkAnnotation',
    'InkPoint',
    'InkStroke',
    'NormRect',
    'TextAnnotation',
    'annotation_from_dict',
    'annotations_from_json',
    'annotations_to_json',
    'Issue',
    'IssueSeverity',
    'NormalizationResult',
    'normalize_annotation',
    'normalize_annotations',
]
