"""CPU temperature discovery, threshold classification and aggregation."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
import re
from typing import Any, Protocol

from core.aggregate import (
    count_tiers,
    format_errors,
    sort_items,
    unavailable_report,
    visible_items,
)
from core.errors import ProviderUnavailable
from core.logging import logger as LOGGER
from core.models import ClassifiedItem, SourceReport, Tier


TITLE = "CPU temp"

_CORE_PATTERN = re.compile(r"^coretemp_core(\d+)$")
_ALTERNATE_PATTERN = re.compile(r"^(?:k10temp|zenpower|cpu_thermal|soc_thermal)_")


class TemperatureProvider(Protocol):
    def read_temperatures(self) -> tuple[dict[str, int], list[tuple[str, str]]]: ...


@dataclass(frozen=True)
class CPUTempConfig:
    """Thresholds and display options for the CPU temperature source."""

    warn: int = 70
    crit: int = 90
    failed_only: bool = False
    use_exec: bool = False
    timeout_s: float = 5.0

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "CPUTempConfig":
        section = config.get("cpu_temp") or {}
        return cls(
            warn=int(section.get("warn", 70)),
            crit=int(section.get("crit", 90)),
            failed_only=bool(section.get("failed_only", False)),
            use_exec=bool(section.get("use_exec", False)),
            timeout_s=float(section.get("timeout_s", 5.0)),
        )


def discover_readings(raw: Mapping[str, int]) -> tuple[dict[str, int], bool]:
    """Pick per-core readings out of raw sensor keys.

    Intel ``coretemp`` cores are preferred and keyed by core number. When no
    core matches, readings from known vendor/SoC chips are kept under their
    raw key and the second element of the result is ``True``.
    """

    readings: dict[str, int] = {}
    for key, value in raw.items():
        match = _CORE_PATTERN.match(key)
        if match:
            readings[match.group(1)] = value
    if readings:
        return readings, False

    alternate = {key: value for key, value in raw.items() if _ALTERNATE_PATTERN.match(key)}
    return alternate, True


def classify_reading(key: str, value: int, warn: int, crit: int, alternate: bool = False) -> ClassifiedItem:
    if value >= crit:
        tier = Tier.CRITICAL
    elif value >= warn:
        tier = Tier.WARNING
    else:
        tier = Tier.GOOD
    display_name = key if alternate else f"Core {key}"
    return ClassifiedItem(name=key, display_name=display_name, tier=tier, label=str(value))


def build_report(
    raw: Mapping[str, int],
    config: CPUTempConfig,
    errors: Iterable[tuple[str, str]] = (),
) -> SourceReport:
    """Aggregate raw sensor readings into the CPU temperature section."""

    readings, alternate = discover_readings(raw)
    if not readings:
        patterns = (_CORE_PATTERN, _ALTERNATE_PATTERN)
    elif alternate:
        patterns = (_ALTERNATE_PATTERN,)
    else:
        patterns = (_CORE_PATTERN,)
    # only failures from the naming scheme in use are worth a note
    notes = format_errors(
        (
            (key, reason)
            for key, reason in errors
            if any(pattern.match(key) for pattern in patterns)
        ),
        template="Failed to read {name}: {reason}",
    )
    if not readings:
        return SourceReport(
            title=TITLE,
            header_tier=Tier.WARNING,
            header_label="Unavailable",
            notes=notes,
        )
    return summarize(readings, config, alternate=alternate, notes=notes)


def summarize(
    readings: Mapping[str, int],
    config: CPUTempConfig,
    *,
    alternate: bool = False,
    notes: tuple[str, ...] = (),
) -> SourceReport:
    """Classify discovered readings and derive the header.

    The header uses every reading; ``failed_only`` only hides Good lines.
    """

    classified = sort_items(
        classify_reading(key, value, config.warn, config.crit, alternate)
        for key, value in readings.items()
    )
    counts = count_tiers(classified)
    if counts[Tier.CRITICAL]:
        header_tier, header_label = Tier.CRITICAL, "Critical"
    elif counts[Tier.WARNING]:
        header_tier, header_label = Tier.WARNING, "Warning"
    else:
        header_tier, header_label = Tier.GOOD, "OK"

    return SourceReport(
        title=TITLE,
        header_tier=header_tier,
        header_label=header_label,
        items=visible_items(classified, config.failed_only),
        notes=notes,
    )


def collect(provider: TemperatureProvider, config: CPUTempConfig) -> SourceReport:
    try:
        raw, errors = provider.read_temperatures()
    except ProviderUnavailable as exc:
        LOGGER.warning("[cpu_temp] Provider unavailable: %s", exc)
        return unavailable_report(TITLE, str(exc))

    LOGGER.debug("[cpu_temp] %d raw reading(s)", len(raw))
    return build_report(raw, config, errors)
