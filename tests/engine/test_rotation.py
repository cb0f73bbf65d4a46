"""Tests for rotation controllers."""

import pytest

from quotebar_app.config.settings import DisplayMode
from quotebar_app.engine.rotation import FixedRotation, RotatingRotation, build_rotation

from tests.helpers import make_config


class TestFixedRotation:
    """Fixed mode selection."""

    def test_unset_shows_first_instrument(self):
        config = make_config("XAU", "BTC", "SPX", display_mode=DisplayMode.FIXED)
        assert FixedRotation(config).displayed_code == "XAU"

    def test_configured_instrument(self):
        config = make_config("XAU", "BTC", "SPX", display_mode=DisplayMode.FIXED,
                             fixed_instrument="BTC")
        assert FixedRotation(config).displayed_code == "BTC"

    def test_unknown_instrument_falls_back(self):
        config = make_config("XAU", "BTC", display_mode=DisplayMode.FIXED,
                             fixed_instrument="ETH")
        assert FixedRotation(config).displayed_code == "XAU"

    def test_no_instruments(self):
        config = make_config(display_mode=DisplayMode.FIXED)
        assert FixedRotation(config).displayed_code is None

    def test_retarget_after_removal(self):
        config = make_config("XAU", "BTC", display_mode=DisplayMode.FIXED, fixed_instrument="BTC")
        rotation = FixedRotation(config)
        rotation.retarget(make_config("XAU", display_mode=DisplayMode.FIXED, fixed_instrument="BTC"))
        assert rotation.displayed_code == "XAU"


class TestRotatingRotation:
    """Rotate mode cycling."""

    @pytest.mark.parametrize("steps", range(0, 8))
    def test_index_after_k_advances(self, steps):
        codes = ["XAU", "BTC", "SPX"]
        rotation = RotatingRotation(codes, interval=5.0)
        for _ in range(steps):
            rotation.advance()
        assert rotation.displayed_code == codes[steps % len(codes)]

    def test_advance_returns_new_code(self):
        rotation = RotatingRotation(["XAU", "BTC"], interval=5.0)
        assert rotation.advance() == "BTC"
        assert rotation.advance() == "XAU"

    def test_empty(self):
        rotation = RotatingRotation([], interval=5.0)
        assert rotation.displayed_code is None
        assert rotation.advance() is None

    def test_start_index_is_clamped(self):
        assert RotatingRotation(["XAU", "BTC"], 5.0, start_index=9).index == 1
        assert RotatingRotation(["XAU", "BTC"], 5.0, start_index=-3).index == 0

    def test_retarget_follows_current_code(self):
        rotation = RotatingRotation(["XAU", "BTC", "SPX"], interval=5.0)
        rotation.advance()
        rotation.retarget(make_config("ETH", "XAU", "BTC"))
        assert rotation.displayed_code == "BTC"
        assert rotation.index == 2

    def test_retarget_clamps_when_current_removed(self):
        rotation = RotatingRotation(["XAU", "BTC", "SPX"], interval=5.0)
        rotation.advance()
        rotation.advance()
        rotation.retarget(make_config("XAU", "BTC"))
        assert rotation.index == 1
        assert rotation.displayed_code == "BTC"

    def test_removed_code_never_selected(self):
        rotation = RotatingRotation(["XAU", "BTC", "SPX"], interval=5.0)
        rotation.retarget(make_config("XAU", "SPX"))
        seen = {rotation.advance() for _ in range(10)}
        assert seen == {"XAU", "SPX"}

    def test_start_and_stop(self):
        rotation = RotatingRotation(["XAU", "BTC"], interval=3600.0)
        rotation.start()
        rotation.stop()
        rotation.stop()
        assert rotation.displayed_code == "XAU"


class TestBuildRotation:
    """Factory selection by display mode."""

    def test_rotate_mode(self):
        rotation = build_rotation(make_config("XAU", "BTC", display_mode=DisplayMode.ROTATE))
        assert isinstance(rotation, RotatingRotation)
        assert rotation.codes == ["XAU", "BTC"]

    def test_fixed_mode(self):
        rotation = build_rotation(make_config("XAU", "BTC", display_mode=DisplayMode.FIXED))
        assert isinstance(rotation, FixedRotation)
