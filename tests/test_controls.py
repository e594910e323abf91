"""Tests for the keyboard toggles."""

from __future__ import annotations

import pytest

from heatoverlay.controls import KeyboardHandler, display_keys, toggle_message
from heatoverlay.pipeline import DisplayConfig


class TestDisplayKeys:
    """Tests for the auto-scale and mirror keys."""

    def test_auto_scale_toggles(self) -> None:
        cfg = DisplayConfig()
        keys = display_keys(cfg)
        assert keys("a")
        assert cfg.auto_scale is False
        assert keys("a")
        assert cfg.auto_scale is True

    def test_mirror_toggles_independently(self) -> None:
        cfg = DisplayConfig()
        keys = display_keys(cfg)
        keys("m")
        assert cfg.mirror is True
        assert cfg.auto_scale is True

    def test_status_messages(self) -> None:
        cfg = DisplayConfig()
        messages = []
        keys = display_keys(cfg, notify=messages.append)
        keys("m")
        keys("a")
        assert messages == ["Mirror: on", "Auto scale: off"]

    def test_trigger_gets_new_value(self) -> None:
        seen = []
        keys = display_keys(DisplayConfig(), on_change=seen.append)
        keys("m")
        keys("m")
        assert seen == [True, False]

    def test_unbound_key_ignored(self) -> None:
        cfg = DisplayConfig()
        keys = display_keys(cfg)
        assert not keys("z")
        assert cfg == DisplayConfig()


class TestKeyboardHandler:
    def test_register_unknown_field(self) -> None:
        with pytest.raises(AttributeError):
            KeyboardHandler(DisplayConfig()).register("x", "palette")

    def test_toggle_message(self) -> None:
        assert toggle_message("auto_scale", True) == "Auto scale: on"
        assert toggle_message("other", False) == "other: off"
