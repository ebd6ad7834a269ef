"""Tests for the preview module.

This module tests the preview/display and preview/export functionality including:
- Compositing straight RGBA over a background
- Gamma encoding
- PNG export (RGBA and composited RGB)
- RMSE computation
- The interactive window host, without opening a window

Note: Tests avoid displaying actual windows by never calling run() or
show_frame(). The processing functions are tested directly.
"""

import os
import tempfile

import numpy as np
import pytest
from PIL import Image as PILImage


def _make_composer(width=32, height=24, **kwargs):
    from metaball.interaction.device import DeviceProfile
    from metaball.scene.composer import SceneComposer
    from metaball.scene.primitives import ScenePrimitive

    return SceneComposer(
        primitives=[ScenePrimitive.static(position=(0.5, 0.5), radius=0.6)],
        width=width,
        height=height,
        profile=DeviceProfile.desktop(),
        **kwargs,
    )


class TestCompositeOver:
    """Test straight-alpha compositing."""

    def test_opaque_pixels_keep_colour(self):
        """Test that alpha 1 ignores the background."""
        from metaball.preview.display import composite_over

        image = np.zeros((4, 4, 4), dtype=np.float32)
        image[..., 0] = 0.7
        image[..., 3] = 1.0
        result = composite_over(image, (0.0, 1.0, 0.0))

        assert result.shape == (4, 4, 3)
        assert np.allclose(result, [0.7, 0.0, 0.0])

    def test_transparent_pixels_show_background(self):
        """Test that alpha 0 yields the background colour."""
        from metaball.preview.display import composite_over

        image = np.full((3, 5, 4), 0.9, dtype=np.float32)
        image[..., 3] = 0.0
        result = composite_over(image, (0.1, 0.2, 0.3))

        assert np.allclose(result, [0.1, 0.2, 0.3])

    def test_partial_alpha_blends(self):
        """Test the over formula rgb * a + bg * (1 - a)."""
        from metaball.preview.display import composite_over

        image = np.array([[[1.0, 0.5, 0.0, 0.25]]], dtype=np.float32)
        result = composite_over(image, (0.0, 0.0, 1.0))

        assert np.allclose(result[0, 0], [0.25, 0.125, 0.75])

    def test_rejects_rgb_input(self):
        """Test that a three-channel image is rejected."""
        from metaball.preview.display import composite_over

        with pytest.raises(ValueError):
            composite_over(np.zeros((4, 4, 3), dtype=np.float32))


class TestApplyGamma:
    def test_gamma_1_no_change(self):
        from metaball.preview.display import apply_gamma

        image = np.random.default_rng(0).random((8, 8, 4)).astype(np.float32)
        assert apply_gamma(image, 1.0) is image

    def test_gamma_brightens_midtones_but_not_alpha(self):
        """Test that gamma 2.2 brightens colour and leaves alpha alone."""
        from metaball.preview.display import apply_gamma

        image = np.full((2, 2, 4), 0.5, dtype=np.float32)
        result = apply_gamma(image, 2.2)

        assert np.allclose(result[..., :3], 0.5 ** (1.0 / 2.2), atol=1e-6)
        assert np.allclose(result[..., 3], 0.5)


class TestProcessImageForDisplay:
    def test_keeps_alpha_without_background(self):
        from metaball.preview.display import process_image_for_display

        image = np.zeros((6, 4, 4), dtype=np.float32)
        assert process_image_for_display(image).shape == (6, 4, 4)

    def test_background_drops_alpha(self):
        from metaball.preview.display import process_image_for_display

        image = np.zeros((6, 4, 4), dtype=np.float32)
        result = process_image_for_display(image, background=(0.2, 0.2, 0.2))
        assert result.shape == (6, 4, 3)
        assert np.allclose(result, 0.2)

    def test_output_always_valid(self):
        """Test that out-of-range input is clamped to [0, 1]."""
        from metaball.preview.display import process_image_for_display

        image = np.full((4, 4, 4), 3.0, dtype=np.float32)
        image[0, 0] = -1.0
        result = process_image_for_display(image, gamma=2.2)

        assert result.dtype == np.float32
        assert np.all(result >= 0.0)
        assert np.all(result <= 1.0)


class TestSavePng:
    """Test PNG export from a live scene."""

    def test_save_png_composites_over_background(self):
        """Test that the default export is an opaque RGB PNG."""
        from metaball.preview.export import save_png

        composer = _make_composer()

        with tempfile.NamedTemporaryFile(suffix=".png", delete=False) as f:
            filepath = f.name

        try:
            save_png(composer, filepath)

            assert os.path.exists(filepath)
            img = PILImage.open(filepath)
            assert img.size == (32, 24)
            assert img.mode == "RGB"
        finally:
            if os.path.exists(filepath):
                os.remove(filepath)
            composer.dispose()

    def test_save_png_transparent(self):
        """Test that transparent export keeps the alpha channel."""
        from metaball.preview.export import save_png
        from metaball.scene.primitives import CursorConfig

        composer = _make_composer(cursor=CursorConfig(glow_intensity=0.0))

        with tempfile.NamedTemporaryFile(suffix=".png", delete=False) as f:
            filepath = f.name

        try:
            save_png(composer, filepath, transparent=True)

            img = PILImage.open(filepath)
            assert img.mode == "RGBA"
            alpha = np.asarray(img)[..., 3]
            # Opaque surface in the middle, nothing in the corner
            assert alpha[12, 16] == 255
            assert alpha[0, 0] == 0
        finally:
            if os.path.exists(filepath):
                os.remove(filepath)
            composer.dispose()


class TestSavePngFromArray:
    def test_save_png_from_array(self, tmp_path):
        from metaball.preview.export import save_png_from_array

        image = np.zeros((32, 64, 4), dtype=np.float32)
        image[:, :, 0] = np.linspace(0, 1, 64)
        image[:, :, 3] = 1.0
        filepath = tmp_path / "gradient.png"

        save_png_from_array(image, filepath, background=(0.0, 0.0, 0.0))

        img = PILImage.open(filepath)
        assert img.size == (64, 32)  # PIL size is (width, height)
        assert img.mode == "RGB"
        pixels = np.asarray(img)
        assert pixels[0, 0, 0] == 0
        assert pixels[0, -1, 0] == 255


class TestImageToUint8:
    def test_output_type_and_channels(self):
        from metaball.preview.export import image_to_uint8

        image = np.full((4, 4, 4), 0.5, dtype=np.float32)
        rgba = image_to_uint8(image)
        rgb = image_to_uint8(image, background=(1.0, 1.0, 1.0))

        assert rgba.dtype == np.uint8
        assert rgba.shape == (4, 4, 4)
        assert rgb.shape == (4, 4, 3)

    def test_black_and_white(self):
        """Test that 0 and 1 map to 0 and 255 exactly."""
        from metaball.preview.export import image_to_uint8

        image = np.zeros((2, 2, 4), dtype=np.float32)
        image[1] = 1.0
        result = image_to_uint8(image)

        assert np.all(result[0] == 0)
        assert np.all(result[1] == 255)

    def test_rounds_to_nearest(self):
        from metaball.preview.export import image_to_uint8

        image = np.full((1, 1, 4), 0.5, dtype=np.float32)
        assert image_to_uint8(image)[0, 0, 0] == 128


class TestComputeRmse:
    def test_rmse_identical_images(self):
        from metaball.preview.export import compute_rmse

        image = np.random.default_rng(3).random((8, 8, 4))
        assert compute_rmse(image, image) == 0.0

    def test_rmse_known_value(self):
        from metaball.preview.export import compute_rmse

        a = np.zeros((4, 4, 3))
        b = np.full((4, 4, 3), 0.5)
        assert compute_rmse(a, b) == pytest.approx(0.5)

    def test_rmse_shape_mismatch_raises(self):
        from metaball.preview.export import compute_rmse

        with pytest.raises(ValueError):
            compute_rmse(np.zeros((4, 4, 3)), np.zeros((4, 4, 4)))


class TestModuleExports:
    def test_preview_exports(self):
        """Test that the package re-exports the public preview API."""
        import metaball.preview as preview

        for name in (
            "MetaballPreview",
            "show_frame",
            "show_comparison",
            "composite_over",
            "apply_gamma",
            "process_image_for_display",
            "save_png",
            "save_png_from_array",
            "image_to_uint8",
            "compute_rmse",
        ):
            assert hasattr(preview, name)


class TestMetaballPreview:
    """Tests for the MetaballPreview window host.

    Note: These tests avoid creating actual GUI windows by testing
    the initialization and data handling logic only.
    """

    def test_init_creates_display_field(self):
        """Test that initialization creates the display image field."""
        from metaball.preview.interactive import MetaballPreview

        preview = MetaballPreview(_make_composer(64, 48))

        assert preview.width == 64
        assert preview.height == 48
        # Shape should be (width, height) for Taichi field
        assert preview.display_image.shape == (64, 48)

    def test_init_defers_window_creation(self):
        from metaball.preview.interactive import MetaballPreview

        preview = MetaballPreview(_make_composer())

        assert preview._window is None
        assert preview._canvas is None
        assert preview._is_initialized is False

    def test_update_image_validates_shape(self):
        from metaball.preview.interactive import MetaballPreview

        preview = MetaballPreview(_make_composer(32, 24))

        with pytest.raises(ValueError, match="doesn't match expected"):
            preview.update_image(np.zeros((24, 32, 3), dtype=np.float32))

    def test_update_image_composites_background(self):
        """Test that a transparent frame shows the preset background."""
        from metaball.preview.interactive import MetaballPreview

        composer = _make_composer(4, 4)
        preview = MetaballPreview(composer)

        preview.update_image(np.zeros((4, 4, 4), dtype=np.float32))
        result = preview.display_image.to_numpy()

        assert result.shape == (4, 4, 3)
        assert np.allclose(result, composer.active_preset.background_color, atol=1e-6)

    def test_update_image_orientation(self):
        """Test that the top image row lands at the highest Taichi y."""
        from metaball.preview.interactive import MetaballPreview

        preview = MetaballPreview(_make_composer(4, 4))
        image = np.zeros((4, 4, 4), dtype=np.float32)
        image[0, :, :] = 1.0
        preview.update_image(image)
        result = preview.display_image.to_numpy()

        assert np.allclose(result[:, 3], 1.0)
        assert not np.allclose(result[:, 0], 1.0)

    def test_step_advances_scene(self):
        """Test that step ticks the loop and clamps large deltas."""
        from metaball.preview.interactive import MAX_FRAME_DELTA, MetaballPreview

        composer = _make_composer()
        preview = MetaballPreview(composer)
        preview.step(1.0 / 60.0)
        preview.step(5.0)

        assert composer.time == pytest.approx(1.0 / 60.0 + MAX_FRAME_DELTA)

    def test_feed_cursor(self):
        from metaball.preview.interactive import MetaballPreview

        composer = _make_composer()
        preview = MetaballPreview(composer)
        preview.feed_cursor(0.25, 0.75)

        assert composer.tracker.target_position == pytest.approx([0.25, 0.75])

    def test_apply_controls_only_on_change(self):
        from metaball.preview.interactive import MetaballPreview

        composer = _make_composer()
        preview = MetaballPreview(composer)

        assert not preview.apply_controls(composer.params.smoothness, composer.params.animation_speed)
        assert preview.apply_controls(0.7, 1.5)
        assert composer.params.smoothness == pytest.approx(0.7)
        assert composer.uniform_snapshot()["animation_speed"] == pytest.approx(1.5)

    def test_select_preset(self):
        from metaball.preview.interactive import MetaballPreview

        composer = _make_composer()
        MetaballPreview(composer).select_preset("neon")

        assert composer.active_preset.name == "neon"
        assert composer.params.preset == "neon"

    def test_close_detaches_scene(self):
        from metaball.preview.interactive import MetaballPreview

        preview = MetaballPreview(_make_composer())
        assert len(preview.loop) == 1
        preview.close()
        assert len(preview.loop) == 0

    def test_export_png(self, tmp_path):
        from metaball.preview.interactive import MetaballPreview

        preview = MetaballPreview(_make_composer())
        target = str(tmp_path / "frame.png")

        assert preview.export_png(target) == target
        assert PILImage.open(target).size == (32, 24)

    def test_is_display_available_returns_bool(self):
        from metaball.preview.interactive import MetaballPreview

        assert isinstance(MetaballPreview.is_display_available(), bool)
