"""Temperature fact providers backed by psutil or the ``sensors`` command."""

from __future__ import annotations

import math
import os
import re
import shutil
import subprocess

import psutil

from core.errors import ProviderUnavailable


# raw mode ("sensors -u") prints bare numbers, so no unit or degree sign to match
_INPUT_LINE = re.compile(r"^temp\d+_input:\s*(?P<value>[-+]?\d+(?:[.,]\d+)?)\s*$")
_SUBFEATURE_LINE = re.compile(r"^temp\d+_\w+:")


def sensor_key(chip: str, label: str, index: int) -> str:
    """Build a flat key such as ``coretemp_core0`` for one sensor channel."""

    label = re.sub(r"\s+", "", label).lower()
    if not label:
        label = f"temp{index + 1}"
    return f"{chip.lower()}_{label}"


class PsutilTemperatureProvider:
    """Read temperatures through ``psutil.sensors_temperatures``."""

    def read_temperatures(self) -> tuple[dict[str, int], list[tuple[str, str]]]:
        reader = getattr(psutil, "sensors_temperatures", None)
        if reader is None:
            raise ProviderUnavailable("psutil has no sensor support on this platform")
        try:
            chips = reader()
        except (OSError, RuntimeError) as exc:
            raise ProviderUnavailable(f"Sensor read failed: {exc}") from exc

        readings: dict[str, int] = {}
        errors: list[tuple[str, str]] = []
        for chip, entries in chips.items():
            for index, entry in enumerate(entries):
                key = sensor_key(chip, entry.label or "", index)
                current = entry.current
                if current is None or math.isnan(current):
                    errors.append((key, "no reading"))
                    continue
                readings[key] = int(current)
        return readings, errors


class SensorsCommandProvider:
    """Parse the raw output of lm-sensors' ``sensors -u`` command."""

    def __init__(self, *, sensors_bin: str = "sensors", timeout_s: float = 5.0) -> None:
        self._sensors_bin = sensors_bin
        self._timeout_s = max(0.1, float(timeout_s))

    def read_temperatures(self) -> tuple[dict[str, int], list[tuple[str, str]]]:
        if shutil.which(self._sensors_bin) is None:
            raise ProviderUnavailable(f"{self._sensors_bin} not found")
        try:
            result = subprocess.run(
                [self._sensors_bin, "-u"],
                check=True,
                capture_output=True,
                text=True,
                timeout=self._timeout_s,
                env={**os.environ, "LC_ALL": "C"},
            )
        except (OSError, subprocess.SubprocessError) as exc:
            raise ProviderUnavailable(f"{self._sensors_bin} failed: {exc}") from exc
        return parse_sensors_output(result.stdout)


def parse_sensors_output(output: str) -> tuple[dict[str, int], list[tuple[str, str]]]:
    """Parse ``sensors -u`` output into readings and per-channel read errors.

    A chip block starts with its header (``coretemp-isa-0000``) and ends at a
    blank line. Channel labels are unindented lines ending in ``:``; their
    ``tempN_input`` subfeature holds the reading. A temperature channel that
    lists subfeatures but no input is reported as an error.
    """

    readings: dict[str, int] = {}
    errors: list[tuple[str, str]] = []
    chip: str | None = None
    key: str | None = None
    pending = False
    index = 0

    def _close_channel() -> None:
        if key is not None and pending:
            errors.append((key, "no reading"))

    for raw_line in output.splitlines():
        line = raw_line.strip()
        if not line:
            _close_channel()
            chip, key, pending = None, None, False
            continue
        if chip is None:
            # drop the bus and address parts, "cpu_thermal-virtual-0" -> "cpu_thermal"
            chip = line.rsplit("-", 2)[0]
            index = 0
            continue
        if raw_line[:1].isspace():
            if key is None:
                continue
            match = _INPUT_LINE.match(line)
            if match is not None:
                readings[key] = int(float(match.group("value").replace(",", ".")))
                pending = False
            elif _SUBFEATURE_LINE.match(line) and key not in readings:
                pending = True
            continue
        if line.endswith(":"):
            _close_channel()
            key = sensor_key(chip, line[:-1], index)
            pending = False
            index += 1
            continue
        # "Adapter: ISA adapter" and similar
        _close_channel()
        key, pending = None, False
    _close_channel()
    return readings, errors
