"""Command-line entry point for the login health report."""

from __future__ import annotations

import argparse
from dataclasses import replace
from functools import partial
from pathlib import Path
import sys
from typing import Any

import yaml

from collector.runner import SourceTask, run_sources
from config import ConfigController
from core.logging import enable_file_logging, log_error, logger, set_level
from core.models import Tier
from providers.sensors import PsutilTemperatureProvider, SensorsCommandProvider
from providers.systemctl import SystemctlProvider
from report.assembler import PresentationConfig, assemble, render
from sources import cpu_temp, systemd


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Raw command-line arguments.

    Returns:
        Parsed arguments namespace.
    """

    parser = argparse.ArgumentParser(
        description="Print a health report for systemd units and CPU temperatures."
    )
    parser.add_argument(
        "--config-dir",
        type=Path,
        default=None,
        help="Directory holding default.yaml and override.yaml.",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable colored output.")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level name.")
    parser.add_argument("--log-file", type=Path, default=None, help="Also log to this file.")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 when any source is critical.",
    )
    return parser.parse_args(argv)


def build_tasks(config: dict[str, Any]) -> list[SourceTask]:
    """Create one collection task per source in ``show_order``."""

    tasks: list[SourceTask] = []
    for name in config["show_order"]:
        if name == "systemd":
            systemd_config = systemd.SystemdConfig.from_config(config)
            unit_provider = SystemctlProvider(timeout_s=systemd_config.timeout_s)
            tasks.append(
                SourceTask(
                    title=systemd.TITLE,
                    collect=partial(systemd.collect, unit_provider, systemd_config),
                    timeout_s=systemd_config.timeout_s,
                )
            )
        elif name == "cpu_temp":
            cpu_config = cpu_temp.CPUTempConfig.from_config(config)
            if cpu_config.use_exec:
                temperature_provider = SensorsCommandProvider(timeout_s=cpu_config.timeout_s)
            else:
                temperature_provider = PsutilTemperatureProvider()
            tasks.append(
                SourceTask(
                    title=cpu_temp.TITLE,
                    collect=partial(cpu_temp.collect, temperature_provider, cpu_config),
                    timeout_s=cpu_config.timeout_s,
                )
            )
    return tasks


def main(argv: list[str] | None = None) -> int:
    """Application entry point.

    Args:
        argv: Optional list of command-line arguments.

    Returns:
        Process exit code.
    """

    if argv is None:
        argv = sys.argv[1:]

    args = parse_args(argv)
    if args.log_level:
        set_level(args.log_level)
    if args.log_file is not None:
        enable_file_logging(args.log_file)

    try:
        config = ConfigController.get_instance(config_dir=args.config_dir).get_config()
    except (OSError, ValueError, yaml.YAMLError) as exc:
        log_error(f"Invalid configuration: {exc}")
        return 2

    if not args.log_level:
        set_level(config["logging_level"])

    presentation = PresentationConfig.from_config(config)
    if args.no_color:
        presentation = replace(presentation, color=False)

    tasks = build_tasks(config)
    logger.debug("Collecting %d source(s): %s", len(tasks), ", ".join(task.title for task in tasks))
    reports = run_sources(tasks, timeout_s=config["timeout_s"])
    sys.stdout.write(render(assemble(reports, presentation), color=presentation.color))

    if args.strict and any(report.header_tier is Tier.CRITICAL for report in reports):
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
