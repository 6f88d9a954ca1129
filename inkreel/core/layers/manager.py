"""
Creates per-kind layers on demand and fans out viewport and annotation
updates to them.
"""

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Type

from ..annotations.models import AnnotationKind
from ..config import RendererConfig
from ..geometry import Viewport
from ..surfaces import OverlayContainer
from ..timeline import ActiveEntry
from .base import BaseLayer
from .highlight_layer import HighlightLayer
from .ink_layer import InkLayer
from .text_layer import TextLayer

logger = logging.getLogger(__name__)

LAYER_TYPES: Dict[AnnotationKind, Type[BaseLayer]] = {
    AnnotationKind.HIGHLIGHT: HighlightLayer,
    AnnotationKind.TEXT: TextLayer,
    AnnotationKind.INK: InkLayer,
}


class LayerManager:
    """
    Owns the overlay container and one lazily created layer per kind.

    Layers are looked up by the annotation kind tag; kinds that never
    receive entries are never instantiated.
    """

    def __init__(
        self,
        container: OverlayContainer,
        viewport: Viewport,
        config: Optional[RendererConfig] = None,
        layer_types: Optional[Mapping[AnnotationKind, Type[BaseLayer]]] = None,
    ):
        self.container = container
        self.viewport = viewport
        self.config = config or RendererConfig()
        self._layer_types = dict(layer_types or LAYER_TYPES)
        self._layers: Dict[AnnotationKind, BaseLayer] = {}
        self.is_destroyed = False

    @property
    def live_kinds(self) -> List[AnnotationKind]:
        return list(self._layers)

    def get_layer(self, kind: AnnotationKind) -> Optional[BaseLayer]:
        return self._layers.get(kind)

    def ensure_layer(self, kind: AnnotationKind) -> Optional[BaseLayer]:
        """
        Get the layer for ``kind``, creating and attaching it if needed.

        Args:
            kind: Annotation kind

        Returns:
            The cached layer, or None once the manager is destroyed
        """
        if self.is_destroyed:
            return None

        layer = self._layers.get(kind)
        if layer is None:
            layer_type = self._layer_types.get(kind)
            if layer_type is None:
                raise KeyError(f"No layer registered for {kind}")
            layer = layer_type(self.container, self.viewport, self.config)
            self._layers[kind] = layer
            self.container.attach(layer)
            logger.debug("Created %s layer", kind.value)
        return layer

    def update_viewport(self, viewport: Viewport) -> None:
        """Resize every live layer to ``viewport``."""
        if self.is_destroyed:
            return
        self.viewport = viewport
        for layer in self._layers.values():
            layer.set_viewport(viewport)

    def update_annotations(
        self,
        active_by_kind: Mapping[AnnotationKind, Sequence[ActiveEntry]],
        viewport: Viewport,
    ) -> None:
        """
        Push the active entries of each kind to its layer.

        Args:
            active_by_kind: Active entries grouped by kind
            viewport: Committed viewport to position entries in
        """
        if self.is_destroyed:
            return
        self.viewport = viewport

        for kind, entries in active_by_kind.items():
            if entries:
                self.ensure_layer(kind).render(entries, viewport)

        # Live layers with nothing active are cleared
        for kind, layer in self._layers.items():
            if not active_by_kind.get(kind):
                layer.render([], viewport)

    def clear_all(self) -> None:
        if self.is_destroyed:
            return
        for layer in self._layers.values():
            layer.clear()

    def destroy_all(self) -> None:
        """Destroy every layer and detach it from the container."""
        if self.is_destroyed:
            return
        for kind, layer in self._layers.items():
            self.container.detach(layer)
            layer.destroy()
            logger.debug("Destroyed %s layer", kind.value)
        self._layers.clear()
        self.is_destroyed = True
