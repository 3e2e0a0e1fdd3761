"""Shared helpers for ordering classified items and deriving headers."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from core.models import ClassifiedItem, SourceReport, Tier


def sort_items(items: Iterable[ClassifiedItem]) -> list[ClassifiedItem]:
    """Return items ordered by canonical name."""

    return sorted(items, key=lambda item: item.name)


def count_tiers(items: Iterable[ClassifiedItem]) -> Counter[Tier]:
    return Counter(item.tier for item in items)


def visible_items(items: Iterable[ClassifiedItem], failed_only: bool) -> tuple[ClassifiedItem, ...]:
    """Drop Good items when only problems should be listed."""

    if not failed_only:
        return tuple(items)
    return tuple(item for item in items if item.tier is not Tier.GOOD)


def format_errors(
    errors: Iterable[tuple[str, str]],
    template: str = "Failed to get properties for {name}: {reason}",
) -> tuple[str, ...]:
    return tuple(template.format(name=name, reason=reason) for name, reason in sorted(errors))


def unavailable_report(title: str, reason: str, label: str = "unavailable") -> SourceReport:
    """Report for a source whose provider could not be reached."""

    return SourceReport(
        title=title,
        header_tier=Tier.CRITICAL,
        header_label=label,
        notes=(reason,) if reason else (),
    )
