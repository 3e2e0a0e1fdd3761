"""Configuration controller for YAML-based settings."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import os
from pathlib import Path
from typing import Any

import yaml

from core.logging import log_warning


KNOWN_SOURCES = ("systemd", "cpu_temp")

_LEGACY_TOP_LEVEL_KEYS = {
    "showOrder": "show_order",
    "failedOnly": "failed_only",
    "logLevel": "logging_level",
    "cpu": "cpu_temp",
}

_LEGACY_SECTION_KEYS = {
    "hideExt": "hide_ext",
    "inactiveOK": "inactive_ok",
    "showFailed": "show_failed",
    "failedOnly": "failed_only",
    "useExec": "use_exec",
}

_LEGACY_SOURCE_NAMES = {"cpu": "cpu_temp"}


@dataclass(frozen=True)
class ConfigPaths:
    """Filesystem paths for configuration files."""

    config_dir: Path
    config_file: Path
    override_file: Path


def default_config_dir() -> Path:
    return Path(os.getenv("PIMOTD_CONFIG_DIR", "config")).expanduser()


class ConfigController:
    """Singleton controller for loading configuration."""

    _instance: "ConfigController | None" = None

    def __init__(self, config_dir: Path | None = None, config_file: str = "default.yaml") -> None:
        if ConfigController._instance is not None:
            raise RuntimeError("You cannot create another ConfigController class")

        config_dir = config_dir if config_dir is not None else default_config_dir()
        self.paths = ConfigPaths(
            config_dir=config_dir,
            config_file=config_dir / config_file,
            override_file=config_dir / "override.yaml",
        )
        self.config: dict[str, Any] = {}
        self.load_config()
        ConfigController._instance = self

    @classmethod
    def get_instance(cls, config_dir: Path | None = None) -> "ConfigController":
        """Return the singleton instance of the controller."""

        if cls._instance is None:
            cls._instance = cls(config_dir=config_dir)
        return cls._instance

    def load_config(self) -> None:
        """Load configuration from default and override YAML files.

        Raises:
            ValueError: a value is out of range or of the wrong type.
        """

        config: dict[str, Any] = {}
        if self.paths.config_file.exists():
            with self.paths.config_file.open("r", encoding="utf-8") as file:
                config = yaml.safe_load(file) or {}
        else:
            log_warning(f"Config file {self.paths.config_file} missing; using defaults")

        if self.paths.override_file.exists():
            with self.paths.override_file.open("r", encoding="utf-8") as file:
                override_config = yaml.safe_load(file) or {}
            if override_config:
                config = self._deep_merge(config, override_config)

        self.config = self._normalize_config(config)

    def get_config(self) -> dict[str, Any]:
        """Return the currently loaded configuration."""

        return dict(self.config)

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge dictionaries, overriding base values with override values."""

        merged = dict(base)
        for key, value in override.items():
            if (
                key in merged
                and isinstance(merged[key], dict)
                and isinstance(value, dict)
            ):
                merged[key] = self._deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged

    def _rename_legacy_keys(self, config: dict[str, Any]) -> dict[str, Any]:
        """Map camelCase keys from older config files onto current names."""

        renamed: dict[str, Any] = {}
        for key, value in config.items():
            new_key = _LEGACY_TOP_LEVEL_KEYS.get(key, key)
            if isinstance(value, dict) and new_key in KNOWN_SOURCES:
                value = {
                    _LEGACY_SECTION_KEYS.get(section_key, section_key): section_value
                    for section_key, section_value in value.items()
                }
            if new_key in renamed:
                # current key names win over legacy ones
                existing = renamed[new_key]
                if isinstance(existing, dict) and isinstance(value, dict):
                    if key == new_key:
                        value = self._deep_merge(existing, value)
                    else:
                        value = self._deep_merge(value, existing)
                elif key != new_key:
                    continue
            renamed[new_key] = value
        return renamed

    def _normalize_config(self, config: dict[str, Any]) -> dict[str, Any]:
        """Fill defaults and validate values consumed by the sources."""

        normalized = self._rename_legacy_keys(dict(config))

        normalized["logging_level"] = str(
            os.getenv("PIMOTD_LOG_LEVEL", normalized.get("logging_level", "WARNING"))
        ).upper()
        timeout_s = self._timeout(normalized, 5.0, "timeout_s")
        normalized["timeout_s"] = timeout_s
        failed_only = bool(normalized.get("failed_only", False))
        normalized["failed_only"] = failed_only

        show_order = normalized.get("show_order", list(KNOWN_SOURCES))
        if not isinstance(show_order, list):
            raise ValueError("show_order must be a list of source names")
        order: list[str] = []
        for name in show_order:
            name = _LEGACY_SOURCE_NAMES.get(str(name), str(name))
            if name not in KNOWN_SOURCES:
                raise ValueError(f"Unknown source in show_order: {name}")
            if name not in order:
                order.append(name)
        normalized["show_order"] = order

        presentation_cfg = dict(normalized.get("presentation") or {})
        self._adopt_section_padding(normalized, presentation_cfg, order)
        presentation_cfg["header_pad"] = self._pad_pair(presentation_cfg.get("header_pad"), [0, 2])
        presentation_cfg["content_pad"] = self._pad_pair(presentation_cfg.get("content_pad"), [1, 1])
        presentation_cfg["color"] = bool(presentation_cfg.get("color", True))
        normalized["presentation"] = presentation_cfg

        systemd_cfg = dict(normalized.get("systemd") or {})
        units = systemd_cfg.get("units") or []
        if not isinstance(units, list) or not all(isinstance(unit, str) for unit in units):
            raise ValueError("systemd.units must be a list of unit names")
        systemd_cfg["units"] = list(units)
        for key in ("show_failed", "inactive_ok", "hide_ext", "notes_when_collapsed"):
            systemd_cfg[key] = bool(systemd_cfg.get(key, False))
        systemd_cfg["failed_only"] = bool(systemd_cfg.get("failed_only", failed_only))
        systemd_cfg["timeout_s"] = self._timeout(systemd_cfg, timeout_s, "systemd.timeout_s")
        normalized["systemd"] = systemd_cfg

        cpu_cfg = dict(normalized.get("cpu_temp") or {})
        cpu_cfg["warn"] = self._number(cpu_cfg, "warn", 70, int, "cpu_temp.warn")
        cpu_cfg["crit"] = self._number(cpu_cfg, "crit", 90, int, "cpu_temp.crit")
        if cpu_cfg["warn"] > cpu_cfg["crit"]:
            raise ValueError(
                f"cpu_temp.warn ({cpu_cfg['warn']}) must not exceed cpu_temp.crit ({cpu_cfg['crit']})"
            )
        cpu_cfg["use_exec"] = bool(cpu_cfg.get("use_exec", False))
        cpu_cfg["failed_only"] = bool(cpu_cfg.get("failed_only", failed_only))
        cpu_cfg["timeout_s"] = self._timeout(cpu_cfg, timeout_s, "cpu_temp.timeout_s")
        normalized["cpu_temp"] = cpu_cfg

        return normalized

    def _adopt_section_padding(
        self,
        normalized: dict[str, Any],
        presentation_cfg: dict[str, Any],
        order: list[str],
    ) -> None:
        """Move per-source ``header``/``content`` pads onto the shared presentation.

        Older configs padded each source on its own. An explicit
        ``presentation`` value wins; otherwise the first source in
        ``show_order`` that sets a pad decides it for the whole document.
        """

        names = order + [name for name in KNOWN_SOURCES if name not in order]
        for name in names:
            section = normalized.get(name)
            if not isinstance(section, dict):
                continue
            section = dict(section)
            for legacy_key, pad_key in (("header", "header_pad"), ("content", "content_pad")):
                value = section.pop(legacy_key, None)
                if value is not None and presentation_cfg.get(pad_key) is None:
                    presentation_cfg[pad_key] = value
            normalized[name] = section

    def _number(
        self,
        section: dict[str, Any],
        key: str,
        default: Any,
        cast: Callable[[Any], Any],
        label: str,
    ) -> Any:
        if key not in section:
            return default
        return self._cast_number(section[key], cast, label)

    def _cast_number(self, value: Any, cast: Callable[[Any], Any], label: str) -> Any:
        # YAML turns a bare "warn:" into None and "yes" into True
        if value is None or isinstance(value, bool):
            raise ValueError(f"{label} must be a number, got {value!r}")
        try:
            return cast(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"{label} must be a number, got {value!r}") from exc

    def _timeout(self, section: dict[str, Any], default: float, label: str) -> float:
        timeout_s = self._number(section, "timeout_s", default, float, label)
        if timeout_s <= 0:
            raise ValueError(f"{label} must be positive, got {timeout_s}")
        return timeout_s

    def _pad_pair(self, value: Any, default: list[int]) -> list[int]:
        if value is None:
            return list(default)
        if not isinstance(value, list) or len(value) != 2:
            raise ValueError(f"Padding must be a [left, right] pair, got {value!r}")
        return [self._cast_number(item, int, "padding") for item in value]
