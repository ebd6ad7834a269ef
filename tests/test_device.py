"""Tests for device classification."""

import pytest


class TestDetect:
    @pytest.mark.parametrize(
        "user_agent",
        [
            "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X)",
            "Mozilla/5.0 (Linux; Android 14; Pixel 8)",
            "Mozilla/5.0 (iPad; CPU OS 16_6 like Mac OS X)",
            "Opera/9.80 (J2ME/MIDP; Opera Mini/9.80)",
        ],
    )
    def test_mobile_user_agents(self, user_agent):
        from metaball.interaction.device import DeviceProfile

        profile = DeviceProfile.detect(user_agent=user_agent, cpu_count=8)
        assert profile.is_mobile
        assert profile.is_low_power

    def test_desktop_user_agent(self):
        from metaball.interaction.device import DeviceProfile

        ua = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
        profile = DeviceProfile.detect(user_agent=ua, cpu_count=16)
        assert profile == DeviceProfile.desktop()

    def test_few_cores_is_low_power(self):
        from metaball.interaction.device import LOW_POWER_CORES, DeviceProfile

        ua = "Mozilla/5.0 (X11; Linux x86_64)"
        assert DeviceProfile.detect(user_agent=ua, cpu_count=LOW_POWER_CORES).is_low_power
        assert not DeviceProfile.detect(user_agent=ua, cpu_count=LOW_POWER_CORES + 1).is_low_power

    def test_unknown_core_count(self, monkeypatch):
        from metaball.interaction import device

        monkeypatch.setattr(device.os, "cpu_count", lambda: None)
        profile = device.DeviceProfile.detect(user_agent="Mozilla/5.0 (X11; Linux x86_64)")
        assert not profile.is_low_power

    def test_platform_fallback(self, monkeypatch):
        from metaball.interaction import device

        monkeypatch.setattr(device.platform, "system", lambda: "Android")
        assert device.DeviceProfile.detect(cpu_count=8).is_mobile

        monkeypatch.setattr(device.platform, "system", lambda: "Linux")
        assert not device.DeviceProfile.detect(cpu_count=8).is_mobile


class TestResolution:
    def test_pixel_ratio_caps(self):
        from metaball.interaction.device import DeviceProfile

        assert DeviceProfile(is_mobile=True).max_pixel_ratio == 1.5
        assert DeviceProfile.desktop().max_pixel_ratio == 2.0

    def test_scaled_resolution(self):
        from metaball.interaction.device import DeviceProfile

        mobile = DeviceProfile(is_mobile=True, is_low_power=True)
        assert mobile.scaled_resolution(400, 800, pixel_ratio=3.0) == (600, 1200)
        assert DeviceProfile.desktop().scaled_resolution(400, 800, pixel_ratio=3.0) == (800, 1600)
        assert DeviceProfile.desktop().scaled_resolution(400, 800) == (400, 800)

    def test_scaled_resolution_never_zero(self):
        from metaball.interaction.device import DeviceProfile

        assert DeviceProfile.desktop().scaled_resolution(0, 1, pixel_ratio=0.1) == (1, 1)
