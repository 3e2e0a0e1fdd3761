"""Models for source facts, classified items and source reports."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Mapping


class Tier(str, Enum):
    """Health classification for an item or a source header."""

    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class UnitFact:
    """Raw systemd unit properties; ``None`` marks a property that was never read."""

    name: str
    active_state: str | None = None
    load_state: str | None = None
    result: str | None = None
    exec_main_status: str | None = None

    def is_empty(self) -> bool:
        return all(
            getattr(self, item.name) is None
            for item in fields(self)
            if item.name != "name"
        )

    def is_complete(self) -> bool:
        return all(getattr(self, item.name) is not None for item in fields(self))


@dataclass(frozen=True)
class FactBatch:
    """Facts returned by a provider plus per-item read errors."""

    facts: Mapping[str, UnitFact] = field(default_factory=dict)
    errors: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class ClassifiedItem:
    """One classified entity within a source."""

    name: str
    display_name: str
    tier: Tier
    label: str


@dataclass(frozen=True)
class SourceReport:
    """Header plus ordered items and notes for one source."""

    title: str
    header_tier: Tier
    header_label: str
    items: tuple[ClassifiedItem, ...] = ()
    notes: tuple[str, ...] = ()
