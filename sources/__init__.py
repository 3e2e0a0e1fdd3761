"""Report sources: classification and aggregation per monitored subsystem."""

from sources import cpu_temp, systemd

__all__ = ["cpu_temp", "systemd"]
