"""Systemd unit classification and aggregation."""

from __future__ import annotations

from collections.abc import Collection, Iterable, Mapping
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
from core.models import ClassifiedItem, FactBatch, SourceReport, Tier, UnitFact


TITLE = "Systemd"

UNIT_SUFFIXES = (
    "service",
    "socket",
    "device",
    "mount",
    "automount",
    "swap",
    "target",
    "path",
    "timer",
    "slice",
    "scope",
)


class UnitFactProvider(Protocol):
    def list_facts(self, names: Iterable[str], include_all_failed: bool) -> FactBatch: ...


@dataclass(frozen=True)
class SystemdConfig:
    """Configuration for the systemd source."""

    units: tuple[str, ...] = ()
    show_failed: bool = False
    inactive_ok: bool = False
    failed_only: bool = False
    hide_ext: bool = False
    notes_when_collapsed: bool = False
    timeout_s: float = 5.0

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "SystemdConfig":
        section = config.get("systemd") or {}
        return cls(
            units=tuple(section.get("units", ())),
            show_failed=bool(section.get("show_failed", False)),
            inactive_ok=bool(section.get("inactive_ok", False)),
            failed_only=bool(section.get("failed_only", False)),
            hide_ext=bool(section.get("hide_ext", False)),
            notes_when_collapsed=bool(section.get("notes_when_collapsed", False)),
            timeout_s=float(section.get("timeout_s", 5.0)),
        )


def strip_unit_suffix(name: str, suffixes: Collection[str] = UNIT_SUFFIXES) -> str:
    """Remove a trailing unit-type suffix such as ``.service``."""

    if not suffixes:
        return name
    pattern = r"\.(?:" + "|".join(re.escape(suffix) for suffix in suffixes) + r")$"
    return re.sub(pattern, "", name)


def classify_unit(fact: UnitFact, inactive_ok: bool, hide_ext: bool = False) -> ClassifiedItem | None:
    """Classify one unit, or return ``None`` when nothing is known about it."""

    if fact.is_empty():
        return None

    display_name = strip_unit_suffix(fact.name) if hide_ext else fact.name

    if fact.load_state != "loaded":
        tier = Tier.CRITICAL
        label = fact.load_state or "unknown"
    elif fact.active_state == "active":
        tier = Tier.GOOD
        label = fact.active_state
    elif fact.exec_main_status == "0":
        if inactive_ok:
            tier = Tier.GOOD
            label = fact.result or fact.active_state or "unknown"
        else:
            tier = Tier.WARNING
            label = fact.active_state or "unknown"
    else:
        tier = Tier.CRITICAL
        label = fact.active_state or "unknown"

    return ClassifiedItem(name=fact.name, display_name=display_name, tier=tier, label=label)


def build_report(batch: FactBatch, config: SystemdConfig) -> SourceReport:
    """Aggregate a provider batch into the systemd section."""

    classified = sort_items(
        item
        for item in (
            classify_unit(fact, config.inactive_ok, config.hide_ext)
            for fact in batch.facts.values()
        )
        if item is not None
    )
    notes = format_errors(batch.errors)

    counts = count_tiers(classified)
    good = counts[Tier.GOOD]
    not_good = len(classified) - good

    if good == 0:
        header_tier, header_label = Tier.CRITICAL, "critical"
    elif not_good == 0:
        header_tier, header_label = Tier.GOOD, "OK"
        if config.failed_only:
            return SourceReport(
                title=TITLE,
                header_tier=header_tier,
                header_label=header_label,
                notes=notes if config.notes_when_collapsed else (),
            )
    else:
        header_tier, header_label = Tier.WARNING, "warning"

    return SourceReport(
        title=TITLE,
        header_tier=header_tier,
        header_label=header_label,
        items=visible_items(classified, config.failed_only),
        notes=notes,
    )


def collect(provider: UnitFactProvider, config: SystemdConfig) -> SourceReport:
    """Produce the systemd section, converting provider failures into a header."""

    if not config.units and not config.show_failed:
        return SourceReport(title=TITLE, header_tier=Tier.WARNING, header_label="unconfigured")

    try:
        batch = provider.list_facts(config.units, config.show_failed)
    except ProviderUnavailable as exc:
        LOGGER.warning("[systemd] Provider unavailable: %s", exc)
        return unavailable_report(TITLE, str(exc))

    LOGGER.debug(
        "[systemd] %d unit(s) read, %d error(s)",
        len(batch.facts),
        len(batch.errors),
    )
    return build_report(batch, config)
