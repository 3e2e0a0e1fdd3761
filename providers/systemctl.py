"""systemctl-backed unit fact provider."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
import shutil
import subprocess
import time

from core.errors import ItemReadFailure, ProviderUnavailable
from core.logging import logger as LOGGER
from core.models import FactBatch, UnitFact


_PROPERTY_FIELDS = {
    "ActiveState": "active_state",
    "LoadState": "load_state",
    "Result": "result",
    "ExecMainStatus": "exec_main_status",
}


class SystemctlProvider:
    """Read unit properties by shelling out to ``systemctl``."""

    def __init__(
        self,
        *,
        systemctl_bin: str = "systemctl",
        timeout_s: float = 5.0,
        user: bool = False,
    ) -> None:
        self._systemctl_bin = systemctl_bin
        self._timeout_s = max(0.1, float(timeout_s))
        self._user = user

    def list_facts(self, names: Iterable[str], include_all_failed: bool) -> FactBatch:
        """Return facts for the named units and, optionally, every failed unit.

        Units whose properties cannot be read are reported in ``errors`` and
        left out of ``facts``.

        Raises:
            ProviderUnavailable: systemctl is missing or the failed-unit listing
                could not be obtained.
        """

        if shutil.which(self._systemctl_bin) is None:
            raise ProviderUnavailable(f"{self._systemctl_bin} not found")

        # one budget for the whole batch, not per unit
        deadline = time.monotonic() + self._timeout_s
        units: dict[str, UnitFact] = {}
        if include_all_failed:
            for fact in self.list_failed(deadline):
                units[fact.name] = fact
        for name in names:
            units.setdefault(name, UnitFact(name=name))

        facts: dict[str, UnitFact] = {}
        errors: list[tuple[str, str]] = []
        for name, fact in units.items():
            if fact.is_complete():
                facts[name] = fact
                continue
            try:
                facts[name] = self._fill_properties(fact, deadline)
            except ItemReadFailure as exc:
                LOGGER.warning("[systemd] %s", exc)
                errors.append((exc.name, exc.reason))
        return FactBatch(facts=facts, errors=tuple(errors))

    def list_failed(self, deadline: float | None = None) -> list[UnitFact]:
        try:
            output = self._run(
                ["list-units", "--state=failed", "--all", "--plain", "--no-legend", "--no-pager"],
                deadline,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            raise ProviderUnavailable(f"Failed to list failed units: {exc}") from exc
        return parse_failed_units(output)

    def _fill_properties(self, fact: UnitFact, deadline: float) -> UnitFact:
        try:
            output = self._run(
                [
                    "show",
                    f"--property={','.join(_PROPERTY_FIELDS)}",
                    "--",
                    fact.name,
                ],
                deadline,
            )
        except subprocess.TimeoutExpired:
            raise ItemReadFailure(fact.name, f"timed out after {self._timeout_s:.1f}s") from None
        except subprocess.CalledProcessError as exc:
            reason = (exc.stderr or "").strip() or f"exit status {exc.returncode}"
            raise ItemReadFailure(fact.name, reason) from exc
        except OSError as exc:
            raise ItemReadFailure(fact.name, str(exc)) from exc

        properties = parse_show_output(output)
        # values already known from the failed listing win
        updates = {
            field_name: properties[field_name]
            for field_name in _PROPERTY_FIELDS.values()
            if getattr(fact, field_name) is None and field_name in properties
        }
        return replace(fact, **updates)

    def _run(self, args: list[str], deadline: float | None = None) -> str:
        timeout_s = self._timeout_s
        if deadline is not None:
            timeout_s = deadline - time.monotonic()
            if timeout_s <= 0:
                raise subprocess.TimeoutExpired(args, self._timeout_s)
        cmd = [self._systemctl_bin]
        if self._user:
            cmd.append("--user")
        cmd.extend(args)
        result = subprocess.run(
            cmd,
            check=True,
            capture_output=True,
            text=True,
            timeout=timeout_s,
        )
        return result.stdout


def parse_show_output(output: str) -> dict[str, str]:
    """Map ``Key=value`` lines from ``systemctl show`` onto UnitFact fields.

    Empty values are treated as unset.
    """

    properties: dict[str, str] = {}
    for line in output.splitlines():
        key, sep, value = line.partition("=")
        if not sep:
            continue
        field_name = _PROPERTY_FIELDS.get(key.strip())
        value = value.strip()
        if field_name is not None and value:
            properties[field_name] = value
    return properties


def parse_failed_units(output: str) -> list[UnitFact]:
    units: list[UnitFact] = []
    for line in output.splitlines():
        parts = line.replace("●", " ").split()
        if len(parts) < 3:
            continue
        name, load_state, active_state = parts[0], parts[1], parts[2]
        units.append(UnitFact(name=name, active_state=active_state, load_state=load_state))
    return units
