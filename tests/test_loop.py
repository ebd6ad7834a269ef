"""Tests for the frame clock."""

import pytest


class TestRenderLoop:
    def test_tick_passes_delta_and_elapsed(self):
        from metaball.core.loop import RenderLoop

        loop = RenderLoop()
        calls = []
        loop.register(lambda delta, elapsed: calls.append((delta, elapsed)))
        loop.tick(0.25)
        loop.tick(0.5)
        assert calls == [(0.25, 0.25), (0.5, 0.75)]
        assert loop.frame == 2

    def test_callbacks_in_registration_order(self):
        from metaball.core.loop import RenderLoop

        loop = RenderLoop()
        order = []
        loop.register(lambda d, e: order.append("a"))
        loop.register(lambda d, e: order.append("b"))
        loop.tick()
        assert order == ["a", "b"]

    def test_unregister(self):
        from metaball.core.loop import RenderLoop

        loop = RenderLoop()
        calls = []
        unregister = loop.register(lambda d, e: calls.append(e))
        assert len(loop) == 1
        unregister()
        unregister()
        assert len(loop) == 0
        loop.tick()
        assert calls == []

    def test_unregister_during_tick(self):
        from metaball.core.loop import RenderLoop

        loop = RenderLoop()
        calls = []
        handles = {}

        def once(delta, elapsed):
            calls.append(elapsed)
            handles["once"]()

        handles["once"] = loop.register(once)
        loop.register(lambda d, e: calls.append("other"))
        loop.run(3, delta=1.0)
        assert calls == [1.0, "other", "other", "other"]

    def test_negative_delta_rejected(self):
        from metaball.core.loop import RenderLoop

        with pytest.raises(ValueError):
            RenderLoop().tick(-0.1)

    def test_run(self):
        from metaball.core.loop import DEFAULT_DELTA, RenderLoop

        loop = RenderLoop()
        loop.run(60)
        assert loop.frame == 60
        assert loop.elapsed == pytest.approx(60 * DEFAULT_DELTA)
