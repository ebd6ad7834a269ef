"""Pytest configuration for metaball tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def reset_scene_state():
    """Reset the uniform set and render target around each test.

    Uniforms and the frame buffer are module-level fields shared by every
    test in the session.
    """
    # Import here so fields are declared after ti.init()
    from metaball.core.raymarch import clear_render_target, release_render_target
    from metaball.scene.uniforms import reset_uniforms

    def _reset():
        reset_uniforms()
        clear_render_target()
        release_render_target()

    _reset()
    yield
    _reset()


@pytest.fixture
def static_scene():
    """Write a minimal scene: one centred static sphere, no cursor influence.

    Lighting comes from the default preset so shading is well defined.
    """
    from metaball.scene import uniforms
    from metaball.scene.presets import get_preset

    uniforms.write_resolution(64, 64)
    uniforms.write_preset(get_preset("holographic"))
    uniforms.write_static_slots([((0.5, 0.5), 0.5)])
    uniforms.smoothness[None] = 0.3
    # Park the cursor sphere far behind the marched range
    uniforms.cursor_position[None] = [0.0, 0.0, 50.0]
    uniforms.cursor_radius[None] = 0.0
    return uniforms
