"""Configuration resolution.

Every setting can come from four places, highest precedence first:
1. An AV_* environment variable
2. A command-line option
3. The [tool.auto-versioner] table of pyproject.toml
4. The built-in default

When the environment and the command line disagree the environment wins
and a warning is logged.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import tomlkit
from loguru import logger
from tomlkit.exceptions import TOMLKitError

from .errors import ConfigError

TOOL_TABLE = "auto-versioner"

_TRUE = frozenset({"1", "t", "true", "y", "yes", "on"})
_FALSE = frozenset({"0", "f", "false", "n", "no", "off"})


def load_project_settings(path: Path) -> dict[str, Any]:
    """Read [tool.auto-versioner] from a pyproject.toml.

    Returns an empty dict when the file or the table is missing.

    Raises:
        ConfigError: If the file is not valid TOML.
    """
    if not path.is_file():
        return {}
    try:
        doc = tomlkit.parse(path.read_text())
    except TOMLKitError as exc:
        raise ConfigError(f"{path}: {exc}") from exc
    table = doc.get("tool", {}).get(TOOL_TABLE, {})
    return table.unwrap() if hasattr(table, "unwrap") else dict(table)


def parse_bool(setting: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(f"config {setting}: invalid boolean {value!r}")


def parse_int(setting: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"config {setting}: invalid integer {value!r}")
    try:
        return int(str(value).strip())
    except ValueError:
        raise ConfigError(f"config {setting}: invalid integer {value!r}") from None


def split_list(value: Any) -> list[str]:
    """Turn a comma-separated string or a list into clean, non-blank strings."""
    if value is None:
        return []
    items = value.split(",") if isinstance(value, str) else list(value)
    return [str(item).strip() for item in items if str(item).strip()]


class Resolver:
    """Apply env > CLI > pyproject > default precedence to settings.

    Args:
        project: Settings from [tool.auto-versioner], keyed by setting name.
        environ: Environment mapping; defaults to os.environ.
    """

    def __init__(
        self,
        project: Mapping[str, Any] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.project = dict(project or {})
        self.environ = os.environ if environ is None else environ

    def _conflict(self, setting: str, env_val: Any, cli_val: Any) -> None:
        logger.bind(setting=setting, env=env_val, cli=cli_val).warning(
            f"config: conflict for {setting}, using env value"
        )

    def _lookup(self, setting: str, env_key: str, cli_val: Any, default: Any):
        """Return (env value or None, fallback) where fallback is CLI > project > default."""
        env_val = self.environ.get(env_key)
        if cli_val is not None:
            fallback = cli_val
        elif setting in self.project:
            fallback = self.project[setting]
        else:
            fallback = default
        return env_val, fallback

    def string(self, setting: str, env_key: str, cli_val: str | None = None, default: str = "") -> str:
        env_val, fallback = self._lookup(setting, env_key, cli_val, default)
        if env_val is None:
            return "" if fallback is None else str(fallback).strip()
        env_val = env_val.strip()
        if cli_val is not None and str(cli_val).strip() != env_val:
            self._conflict(setting, env_val, cli_val)
        return env_val

    def boolean(self, setting: str, env_key: str, cli_val: bool | None = None, default: bool = False) -> bool:
        env_val, fallback = self._lookup(setting, env_key, cli_val, default)
        if env_val is None:
            return parse_bool(setting, fallback)
        parsed = parse_bool(setting, env_val)
        if cli_val is not None and parsed != cli_val:
            self._conflict(setting, env_val, cli_val)
        return parsed

    def integer(self, setting: str, env_key: str, cli_val: int | None = None, default: int = 0) -> int:
        env_val, fallback = self._lookup(setting, env_key, cli_val, default)
        if env_val is None:
            return parse_int(setting, fallback)
        parsed = parse_int(setting, env_val)
        if cli_val is not None and parsed != cli_val:
            self._conflict(setting, env_val, cli_val)
        return parsed

    def string_list(
        self,
        setting: str,
        env_key: str,
        cli_val: Sequence[str] | None = None,
        default: Sequence[str] = (),
    ) -> list[str]:
        env_val, fallback = self._lookup(setting, env_key, cli_val or None, list(default))
        if env_val is None:
            return split_list(fallback)
        parsed = split_list(env_val)
        if cli_val and parsed != split_list(cli_val):
            self._conflict(setting, env_val, ",".join(cli_val))
        return parsed
