from inkreel.core.config import RendererConfig
from inkreel.core.document import (
    RuntimeOptions,
    initialize_runtime,
    is_runtime_initialized,
    reset_runtime,
)
from inkreel.core.document.runtime import runtime_options


def test_initialize_and_reset():
    reset_runtime()
    assert not is_runtime_initialized()

    options = initialize_runtime(RuntimeOptions(display_warnings=True))

    assert is_runtime_initialized()
    assert runtime_options() is options
    assert options.display_errors is False


def test_config_from_dict_ignores_unknown_keys():
    config = RendererConfig.from_dict({"text_font_px": 18, "progressive_reveal": True, "bogus": 1})

    assert config.text_font_px == 18
    assert config.progressive_reveal is True
    assert config.text_padding_px == 8
    assert config.highlight_color == "rgba(255, 255, 0, 0.3)"
