"""Fact providers for report sources."""

from providers.sensors import PsutilTemperatureProvider, SensorsCommandProvider
from providers.systemctl import SystemctlProvider

__all__ = ["PsutilTemperatureProvider", "SensorsCommandProvider", "SystemctlProvider"]
