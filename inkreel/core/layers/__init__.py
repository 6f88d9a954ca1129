"""
Annotation layers, one per annotation kind.
"""

from .base import BaseLayer
from .highlight_layer import HighlightLayer
from .ink_layer import InkLayer, revealed_points
from .manager import LAYER_TYPES, LayerManager
from .text_layer import TextLayer, visible_text

__all__ = [
    "BaseLayer",
    "HighlightLayer",
    "TextLayer",
    "InkLayer",
    "LayerManager",
    "LAYER_TYPES",
    "revealed_points",
    "visible_text",
]
