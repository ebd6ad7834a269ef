"""Tests for the host camera and fullscreen quad sizing."""

import math

import pytest


class TestVisiblePlane:
    def test_ninety_degree_fov(self):
        from metaball.camera.perspective import visible_plane_size

        width, height = visible_plane_size(90.0, 1.0, 2.0)
        assert height == pytest.approx(2.0)
        assert width == pytest.approx(4.0)

    def test_scales_linearly_with_distance(self):
        from metaball.camera.perspective import visible_plane_size

        near = visible_plane_size(75.0, 1.0, 1.5)
        far = visible_plane_size(75.0, 4.0, 1.5)
        assert far[0] == pytest.approx(near[0] * 4.0)
        assert far[1] == pytest.approx(near[1] * 4.0)


class TestFullscreenQuad:
    def test_overscan_and_depth(self):
        from metaball.camera.perspective import (
            FULLSCREEN_OVERSCAN,
            QUAD_DEPTH_OFFSET,
            PerspectiveCamera,
            fullscreen_quad,
        )

        camera = PerspectiveCamera(lookfrom=(0.0, 0.0, 5.0), vfov=60.0, aspect_ratio=16.0 / 9.0)
        quad = fullscreen_quad(camera)

        height = 2.0 * math.tan(math.radians(30.0)) * 5.0
        assert quad.height == pytest.approx(height * FULLSCREEN_OVERSCAN)
        assert quad.width == pytest.approx(height * 16.0 / 9.0 * FULLSCREEN_OVERSCAN)
        assert quad.z == pytest.approx(-5.0 + QUAD_DEPTH_OFFSET)

    def test_aspect_preserved(self):
        from metaball.camera.perspective import PerspectiveCamera, fullscreen_quad

        for aspect in (4.0 / 3.0, 16.0 / 9.0, 0.5):
            quad = fullscreen_quad(PerspectiveCamera(aspect_ratio=aspect))
            assert quad.width / quad.height == pytest.approx(aspect)

    def test_distance_override(self):
        from metaball.camera.perspective import PerspectiveCamera, fullscreen_quad

        camera = PerspectiveCamera(lookfrom=(0.0, 3.0, 4.0))
        assert camera.distance() == pytest.approx(5.0)
        assert fullscreen_quad(camera, distance=2.0).z == pytest.approx(-2.0 + 0.01)
