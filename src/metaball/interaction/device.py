"""Coarse device classification for quality adaptation.

The classification runs once, when a scene is built. A mobile or low-core
device gets a reduced cursor glow radius in the preset table and a lower
pixel-ratio ceiling for the render resolution.
"""

import logging
import os
import platform
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

MOBILE_USER_AGENT = re.compile(r"Android|webOS|iPhone|iPad|iPod|BlackBerry|IEMobile|Opera Mini", re.IGNORECASE)

MOBILE_SYSTEMS = frozenset({"Android", "iOS", "iPadOS"})

# Logical core count at or below which a device counts as low power
LOW_POWER_CORES = 4

MOBILE_MAX_PIXEL_RATIO = 1.5
DESKTOP_MAX_PIXEL_RATIO = 2.0


@dataclass(frozen=True)
class DeviceProfile:
    """Result of the one-shot device classification."""

    is_mobile: bool = False
    is_low_power: bool = False

    @property
    def max_pixel_ratio(self) -> float:
        return MOBILE_MAX_PIXEL_RATIO if self.is_mobile else DESKTOP_MAX_PIXEL_RATIO

    @classmethod
    def desktop(cls) -> "DeviceProfile":
        return cls(is_mobile=False, is_low_power=False)

    @classmethod
    def detect(cls, user_agent: str | None = None, cpu_count: int | None = None) -> "DeviceProfile":
        """Classify the current device.

        Args:
            user_agent: Browser user agent string, when rendering for a web
                host. None falls back to the local platform name.
            cpu_count: Logical core count. None queries the OS.

        Returns:
            The detected profile.
        """
        if user_agent is not None:
            is_mobile = MOBILE_USER_AGENT.search(user_agent) is not None
        else:
            is_mobile = platform.system() in MOBILE_SYSTEMS

        cores = cpu_count if cpu_count is not None else os.cpu_count()
        # Unknown core count is treated as capable hardware
        few_cores = cores is not None and cores <= LOW_POWER_CORES

        profile = cls(is_mobile=is_mobile, is_low_power=is_mobile or few_cores)
        logger.debug("Device profile: %s (cores=%s)", profile, cores)
        return profile

    def scaled_resolution(self, width: int, height: int, pixel_ratio: float = 1.0) -> tuple[int, int]:
        """Render resolution for a viewport, capped by max_pixel_ratio."""
        ratio = min(pixel_ratio, self.max_pixel_ratio)
        return max(1, round(width * ratio)), max(1, round(height * ratio))
