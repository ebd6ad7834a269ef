"""Tests for the lighting/colour preset table."""

import dataclasses

import pytest


class TestPresetTable:
    def test_all_presets_present(self):
        from metaball.scene.presets import PRESET_NAMES, create_presets

        presets = create_presets()
        assert tuple(presets) == PRESET_NAMES
        assert set(PRESET_NAMES) == {"moody", "cosmic", "neon", "sunset", "holographic", "minimal"}

    def test_default_is_holographic(self):
        from metaball.scene.presets import DEFAULT_PRESET

        assert DEFAULT_PRESET == "holographic"

    def test_holographic_values(self):
        from metaball.scene.presets import get_preset

        p = get_preset("holographic")
        assert p.name == "holographic"
        assert p.ambient_intensity == pytest.approx(0.12)
        assert p.specular_power == pytest.approx(3.0)
        assert p.smoothness == pytest.approx(0.8)
        assert p.contrast == pytest.approx(1.6)
        assert p.cursor_glow_radius == pytest.approx(2.2)
        assert p.light_position == (0.9, 0.9, 1.2)

    def test_colours_converted_from_hex(self):
        from metaball.scene.presets import get_preset

        p = get_preset("cosmic")
        assert p.light_color == pytest.approx((0x88 / 255, 0xAA / 255, 1.0))
        assert p.background_color == pytest.approx((0.0, 0.0, 0x11 / 255))

    def test_colours_in_unit_range(self):
        from metaball.scene.presets import create_presets

        for preset in create_presets().values():
            for colour in (
                preset.background_color,
                preset.sphere_color,
                preset.light_color,
                preset.cursor_glow_color,
            ):
                assert len(colour) == 3
                assert all(0.0 <= c <= 1.0 for c in colour)

    def test_presets_are_immutable(self):
        from metaball.scene.presets import get_preset

        p = get_preset("neon")
        with pytest.raises(dataclasses.FrozenInstanceError):
            p.smoothness = 0.1

    def test_unknown_preset_raises(self):
        from metaball.scene.presets import get_preset

        with pytest.raises(KeyError):
            get_preset("vaporwave")


class TestLowPowerProfile:
    def test_glow_radius_reduced(self):
        from metaball.scene.presets import LOW_POWER_GLOW_SCALE, create_presets

        desktop = create_presets(low_power=False)
        mobile = create_presets(low_power=True)
        for name in desktop:
            assert mobile[name].cursor_glow_radius == pytest.approx(
                desktop[name].cursor_glow_radius * LOW_POWER_GLOW_SCALE
            )
            assert mobile[name].cursor_glow_radius < desktop[name].cursor_glow_radius

    def test_other_fields_unchanged(self):
        from metaball.scene.presets import create_presets

        desktop = create_presets(low_power=False)["sunset"]
        mobile = create_presets(low_power=True)["sunset"]
        assert dataclasses.replace(mobile, cursor_glow_radius=desktop.cursor_glow_radius) == desktop


class TestHostHelpers:
    def test_background_hex(self):
        from metaball.scene.presets import get_preset_background_hex

        assert get_preset_background_hex("holographic") == 0x0A0A15
        assert get_preset_background_hex("sunset") == 0x150505

    def test_light_color_string(self):
        from metaball.scene.presets import get_preset_light_color

        assert get_preset_light_color("neon") == "#00ffcc"
        assert get_preset_light_color("moody") == "#ffffff"

    def test_hex_round_trip_rejects_out_of_range(self):
        from metaball.scene.presets import hex_to_rgb

        with pytest.raises(ValueError):
            hex_to_rgb(0x1000000)
