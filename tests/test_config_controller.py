"""Tests for configuration defaults and normalization."""

from __future__ import annotations

from pathlib import Path

import pytest

from config.controller import ConfigController
from report.assembler import PresentationConfig
from sources.cpu_temp import CPUTempConfig
from sources.systemd import SystemdConfig


def _reset_singletons() -> None:
    ConfigController._instance = None


def _write_config(tmp_path: Path, text: str, override: str | None = None) -> Path:
    config_dir = tmp_path / "config"
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "default.yaml").write_text(text, encoding="utf-8")
    if override is not None:
        (config_dir / "override.yaml").write_text(override, encoding="utf-8")
    return config_dir


def test_defaults_when_config_is_empty(tmp_path: Path, monkeypatch) -> None:
    _write_config(tmp_path, "{}\n")
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("PIMOTD_CONFIG_DIR", raising=False)
    monkeypatch.delenv("PIMOTD_LOG_LEVEL", raising=False)
    _reset_singletons()

    config = ConfigController.get_instance().get_config()

    assert config["show_order"] == ["systemd", "cpu_temp"]
    assert config["timeout_s"] == 5.0
    assert config["logging_level"] == "WARNING"
    assert SystemdConfig.from_config(config) == SystemdConfig()
    assert CPUTempConfig.from_config(config) == CPUTempConfig()
    assert PresentationConfig.from_config(config).header_pad == (0, 2)


def test_missing_config_file_uses_defaults(tmp_path: Path) -> None:
    _reset_singletons()

    config = ConfigController.get_instance(config_dir=tmp_path / "absent").get_config()

    assert config["cpu_temp"]["warn"] == 70
    assert config["systemd"]["units"] == []


def test_legacy_keys_are_mapped(tmp_path: Path) -> None:
    config_dir = _write_config(
        tmp_path,
        "\n".join(
            [
                "showOrder: [cpu, systemd]",
                "failedOnly: true",
                "systemd:",
                "  units: [ssh.service]",
                "  hideExt: true",
                "  inactiveOK: true",
                "  showFailed: true",
                "  header: [0, 9]",
                "cpu:",
                "  warn: 60",
                "  crit: 80",
                "  useExec: true",
                "  header: [1, 3]",
                "  content: [2, 2]",
            ]
        ),
    )
    _reset_singletons()

    config = ConfigController.get_instance(config_dir=config_dir).get_config()

    assert config["show_order"] == ["cpu_temp", "systemd"]
    assert SystemdConfig.from_config(config) == SystemdConfig(
        units=("ssh.service",),
        show_failed=True,
        inactive_ok=True,
        failed_only=True,
        hide_ext=True,
    )
    assert CPUTempConfig.from_config(config) == CPUTempConfig(
        warn=60,
        crit=80,
        failed_only=True,
        use_exec=True,
    )
    assert config["presentation"]["header_pad"] == [1, 3]
    assert config["presentation"]["content_pad"] == [2, 2]
    assert "header" not in config["systemd"]
    assert "header" not in config["cpu_temp"]
    assert "content" not in config["cpu_temp"]


def test_current_keys_win_over_legacy_keys(tmp_path: Path) -> None:
    config_dir = _write_config(
        tmp_path,
        "\n".join(
            [
                "cpu_temp:",
                "  warn: 65",
                "cpu:",
                "  warn: 50",
                "  crit: 75",
            ]
        ),
    )
    _reset_singletons()

    cpu_cfg = ConfigController.get_instance(config_dir=config_dir).get_config()["cpu_temp"]

    assert cpu_cfg["warn"] == 65
    assert cpu_cfg["crit"] == 75


def test_override_file_is_deep_merged(tmp_path: Path) -> None:
    config_dir = _write_config(
        tmp_path,
        "systemd:\n  units: [ssh.service]\n  show_failed: true\ncpu_temp:\n  warn: 60\n",
        override="systemd:\n  units: [nginx.service]\ntimeout_s: 2\n",
    )
    _reset_singletons()

    config = ConfigController.get_instance(config_dir=config_dir).get_config()

    assert config["systemd"]["units"] == ["nginx.service"]
    assert config["systemd"]["show_failed"] is True
    assert config["systemd"]["timeout_s"] == 2.0
    assert config["cpu_temp"]["warn"] == 60


def test_source_failed_only_overrides_global(tmp_path: Path) -> None:
    config_dir = _write_config(
        tmp_path,
        "failed_only: true\nsystemd:\n  failed_only: false\n",
    )
    _reset_singletons()

    config = ConfigController.get_instance(config_dir=config_dir).get_config()

    assert config["systemd"]["failed_only"] is False
    assert config["cpu_temp"]["failed_only"] is True


def test_log_level_env_override(tmp_path: Path, monkeypatch) -> None:
    config_dir = _write_config(tmp_path, "logging_level: info\n")
    monkeypatch.setenv("PIMOTD_LOG_LEVEL", "debug")
    _reset_singletons()

    config = ConfigController.get_instance(config_dir=config_dir).get_config()

    assert config["logging_level"] == "DEBUG"


def test_config_dir_env(tmp_path: Path, monkeypatch) -> None:
    config_dir = _write_config(tmp_path, "cpu_temp:\n  warn: 55\n")
    monkeypatch.setenv("PIMOTD_CONFIG_DIR", str(config_dir))
    _reset_singletons()

    assert ConfigController.get_instance().get_config()["cpu_temp"]["warn"] == 55


@pytest.mark.parametrize(
    "text",
    [
        "cpu_temp:\n  warn: 90\n  crit: 80\n",
        "show_order: [systemd, disks]\n",
        "systemd:\n  units: ssh.service\n",
        "presentation:\n  header_pad: [1]\n",
        "timeout_s: 0\n",
        "cpu_temp:\n  warn:\n  crit: 90\n",
        "cpu_temp:\n  crit: hot\n",
        "cpu_temp:\n  warn: true\n",
        "systemd:\n  timeout_s:\n",
        "systemd:\n  timeout_s: -1\n",
        "cpu_temp:\n  timeout_s: 0\n",
        "presentation:\n  content_pad: [1, null]\n",
    ],
)
def test_invalid_values_are_rejected(tmp_path: Path, text: str) -> None:
    config_dir = _write_config(tmp_path, text)
    _reset_singletons()

    with pytest.raises(ValueError):
        ConfigController.get_instance(config_dir=config_dir)

    assert ConfigController._instance is None


def test_second_controller_is_rejected(tmp_path: Path) -> None:
    config_dir = _write_config(tmp_path, "{}\n")
    _reset_singletons()
    ConfigController.get_instance(config_dir=config_dir)

    with pytest.raises(RuntimeError):
        ConfigController(config_dir=config_dir)


def test_presentation_pads_win_over_legacy_section_pads(tmp_path: Path) -> None:
    config_dir = _write_config(
        tmp_path,
        "presentation:\n  header_pad: [0, 4]\nsystemd:\n  header: [2, 2]\n  content: [3, 0]\n",
    )
    _reset_singletons()

    presentation = ConfigController.get_instance(config_dir=config_dir).get_config()["presentation"]

    assert presentation["header_pad"] == [0, 4]
    assert presentation["content_pad"] == [3, 0]
