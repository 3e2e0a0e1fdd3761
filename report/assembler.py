"""Assemble source reports into an aligned, tier-coloured document."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from rich.console import Console
from rich.text import Text

from core.models import SourceReport, Tier


DEFAULT_STYLES: Mapping[Tier, str] = {
    Tier.GOOD: "green",
    Tier.WARNING: "yellow",
    Tier.CRITICAL: "red",
}


def _pad_pair(value: Any, default: tuple[int, int]) -> tuple[int, int]:
    if isinstance(value, Sequence) and not isinstance(value, str) and len(value) == 2:
        return max(int(value[0]), 0), max(int(value[1]), 0)
    return default


@dataclass(frozen=True)
class PresentationConfig:
    """Column padding and colouring for the final document.

    ``header_pad`` and ``content_pad`` are ``(left, right)`` pairs: spaces
    before the name and minimum spaces between the aligned colon and label.
    """

    header_pad: tuple[int, int] = (0, 2)
    content_pad: tuple[int, int] = (1, 1)
    color: bool = True
    styles: Mapping[Tier, str] = field(default_factory=lambda: dict(DEFAULT_STYLES))
    note_style: str = "dim"

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "PresentationConfig":
        section = config.get("presentation") or {}
        return cls(
            header_pad=_pad_pair(section.get("header_pad"), (0, 2)),
            content_pad=_pad_pair(section.get("content_pad"), (1, 1)),
            color=bool(section.get("color", True)),
        )


def _line(name: str, width: int, pad: tuple[int, int], label: str, style: str) -> Text:
    left, right = pad
    text = Text(" " * left + f"{name}:" + " " * (width - len(name) + right))
    text.append(label, style=style)
    return text


def render_source(report: SourceReport, presentation: PresentationConfig, header_width: int) -> Text:
    """Render one source: header, then items, then notes."""

    styles = presentation.styles
    lines = [
        _line(
            report.title,
            header_width,
            presentation.header_pad,
            report.header_label,
            styles[report.header_tier],
        )
    ]
    if report.items:
        width = max(len(item.display_name) for item in report.items)
        for item in report.items:
            lines.append(
                _line(item.display_name, width, presentation.content_pad, item.label, styles[item.tier])
            )
    indent = " " * presentation.content_pad[0]
    for note in report.notes:
        lines.append(Text(indent + note, style=presentation.note_style))
    return Text("\n").join(lines)


def assemble(reports: Sequence[SourceReport], presentation: PresentationConfig) -> Text:
    """Join source sections in the given order, aligning every header."""

    if not reports:
        return Text()
    header_width = max(len(report.title) for report in reports)
    return Text("\n").join(
        render_source(report, presentation, header_width) for report in reports
    )


def render(document: Text, color: bool = True) -> str:
    """Return the document as a string, with ANSI styling when ``color`` is set."""

    console = Console(
        force_terminal=color,
        no_color=not color,
        color_system="standard" if color else None,
        highlight=False,
        soft_wrap=True,
    )
    with console.capture() as capture:
        console.print(document)
    return capture.get()
