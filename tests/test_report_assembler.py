"""Tests for report assembly and rendering."""

from __future__ import annotations

from core.models import ClassifiedItem, SourceReport, Tier
from report.assembler import PresentationConfig, assemble, render


def _plain(**overrides) -> PresentationConfig:
    settings = {"header_pad": (0, 1), "content_pad": (0, 1), "color": False}
    settings.update(overrides)
    return PresentationConfig(**settings)


def test_single_item_line_format() -> None:
    report = SourceReport(
        title="Systemd",
        header_tier=Tier.GOOD,
        header_label="OK",
        items=(ClassifiedItem("ssh.service", "ssh.service", Tier.GOOD, "active"),),
    )

    document = assemble([report], _plain())

    assert document.plain.splitlines() == ["Systemd: OK", "ssh.service: active"]


def test_headers_align_across_sources_and_items_within_source() -> None:
    reports = [
        SourceReport(
            title="Systemd",
            header_tier=Tier.WARNING,
            header_label="warning",
            items=(
                ClassifiedItem("a.service", "a", Tier.GOOD, "active"),
                ClassifiedItem("backup.service", "backup", Tier.CRITICAL, "failed"),
            ),
            notes=("Failed to get properties for c.service: boom",),
        ),
        SourceReport(title="CPU temp", header_tier=Tier.GOOD, header_label="OK"),
    ]

    document = assemble(reports, PresentationConfig(header_pad=(0, 2), content_pad=(1, 1), color=False))

    assert document.plain.splitlines() == [
        "Systemd:   warning",
        " a:      active",
        " backup: failed",
        " Failed to get properties for c.service: boom",
        "CPU temp:  OK",
    ]


def test_labels_are_styled_by_tier() -> None:
    report = SourceReport(
        title="CPU temp",
        header_tier=Tier.CRITICAL,
        header_label="Critical",
        items=(ClassifiedItem("0", "Core 0", Tier.CRITICAL, "95"),),
    )

    document = assemble([report], _plain(color=True))
    styles = {document.plain[span.start:span.end]: str(span.style) for span in document.spans}

    assert styles["Critical"] == "red"
    assert styles["95"] == "red"


def test_render_without_color_has_no_escape_codes() -> None:
    report = SourceReport(title="Systemd", header_tier=Tier.CRITICAL, header_label="critical")

    output = render(assemble([report], _plain()), color=False)

    assert output == "Systemd: critical\n"


def test_render_with_color_emits_ansi() -> None:
    report = SourceReport(title="Systemd", header_tier=Tier.GOOD, header_label="OK")

    output = render(assemble([report], _plain(color=True)), color=True)

    assert "\x1b[" in output
    assert "OK" in output


def test_presentation_from_config() -> None:
    presentation = PresentationConfig.from_config(
        {"presentation": {"header_pad": [2, 3], "content_pad": [4, 1], "color": False}}
    )

    assert presentation.header_pad == (2, 3)
    assert presentation.content_pad == (4, 1)
    assert presentation.color is False


def test_empty_report_list() -> None:
    assert assemble([], _plain()).plain == ""
