"""
Renderer configuration.
"""
from dataclasses import dataclass, fields
from typing import Any, Mapping


@dataclass
class RendererConfig:
    """Tunable defaults for the rendering engine."""
    # Initial view
    initial_page: int = 1
    initial_scale: float = 1.0

    # Highlight layer
    highlight_color: str = "rgba(255, 255, 0, 0.3)"

    # Text layer
    text_background: str = "rgba(255, 255, 255, 0.9)"
    text_color: str = "#000000"
    text_font_family: str = "Sans Serif"
    text_font_px: int = 14
    text_padding_px: int = 8

    # Ink layer
    ink_color: str = "#1f2937"
    ink_size: float = 3.0

    # Animate highlights left to right and type text in word by word
    progressive_reveal: bool = False

    # Continuous sync polling interval (~60 fps)
    sync_interval_ms: int = 16

    # Remote document fetches
    fetch_timeout: float = 30.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RendererConfig":
        """Build a config from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})
