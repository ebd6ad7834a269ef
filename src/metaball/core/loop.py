"""Frame clock that drives per-frame scene updates.

Callbacks receive (delta, elapsed) in seconds, in registration order.
register() returns a function that removes the callback again; it is safe
to call from inside a callback while a tick is running.

Example:
    >>> loop = RenderLoop()
    >>> unregister = loop.register(lambda delta, elapsed: print(elapsed))
    >>> loop.tick(0.5)
    0.5
    >>> unregister()
"""

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

FrameCallback = Callable[[float, float], None]

# 60 fps
DEFAULT_DELTA = 1.0 / 60.0


class RenderLoop:
    """Minimal host frame clock."""

    def __init__(self) -> None:
        self._callbacks: list[FrameCallback] = []
        self.elapsed = 0.0
        self.frame = 0

    def __len__(self) -> int:
        return len(self._callbacks)

    def register(self, callback: FrameCallback) -> Callable[[], None]:
        """Add a per-frame callback and return its unregister function."""
        self._callbacks.append(callback)

        def unregister() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unregister

    def tick(self, delta: float = DEFAULT_DELTA) -> None:
        """Advance the clock by delta and call every registered callback."""
        if delta < 0.0:
            raise ValueError(f"Frame delta must be non-negative, got {delta}")
        self.elapsed += delta
        self.frame += 1
        # Iterate a copy so callbacks may unregister themselves
        for callback in list(self._callbacks):
            callback(delta, self.elapsed)

    def run(self, frames: int, delta: float = DEFAULT_DELTA) -> None:
        """Tick a fixed number of frames without a display."""
        logger.debug("Running %d frames at delta=%.4f", frames, delta)
        for _ in range(frames):
            self.tick(delta)
