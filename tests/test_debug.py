"""
ssestream - Debug Gate Tests
"""

import pytest

from ssestream.core.debug import DebugCategory, DebugOptions, is_debug_enabled


class TestIsDebugEnabled:
    """Category resolution for every accepted configuration shape."""

    @pytest.mark.parametrize("config", [None, False, {}])
    def test_off(self, config):
        assert is_debug_enabled(config, "plugin") is False
        assert is_debug_enabled(config, DebugCategory.SSE) is False

    def test_true_enables_everything(self):
        assert is_debug_enabled(True, "plugin") is True
        assert is_debug_enabled(True, "sse") is True
        assert is_debug_enabled(True, "anything") is True

    def test_all_overrides_categories(self):
        assert is_debug_enabled({"all": True, "sse": False}, "sse") is True

    def test_single_category(self):
        config = {"plugin": True}
        assert is_debug_enabled(config, "plugin") is True
        assert is_debug_enabled(config, DebugCategory.PLUGIN) is True
        assert is_debug_enabled(config, "sse") is False

    def test_unknown_category_is_off(self):
        assert is_debug_enabled({"plugin": True, "sse": True}, "network") is False

    def test_debug_options_instance(self):
        options = DebugOptions(sse=True)
        assert is_debug_enabled(options, "sse") is True
        assert is_debug_enabled(options, "plugin") is False


class TestDebugOptions:
    """Normalization of raw configuration."""

    def test_normalize_bool(self):
        assert DebugOptions.normalize(True) == DebugOptions(all=True)
        assert DebugOptions.normalize(False) == DebugOptions()
        assert DebugOptions.normalize(None) == DebugOptions()

    def test_normalize_mapping(self):
        options = DebugOptions.normalize({"plugin": 1, "sse": 0})
        assert options == DebugOptions(plugin=True, sse=False)

    def test_normalize_passthrough(self):
        options = DebugOptions(plugin=True)
        assert DebugOptions.normalize(options) is options

    def test_normalize_rejects_other_types(self):
        with pytest.raises(TypeError):
            DebugOptions.normalize("sse")
