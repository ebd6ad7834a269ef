"""Pointer tracking and device classification."""

from .device import DeviceProfile
from .mouse_tracker import MouseTracker

__all__ = ["DeviceProfile", "MouseTracker"]
