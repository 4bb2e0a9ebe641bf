"""Helpers for managing persisted faasbuild defaults."""

import os
import textwrap
import tomllib
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

from faasbuild.versioncontrol import TagFormat


class ConfigError(RuntimeError):
    """Raised when the persisted configuration is invalid."""


@dataclass(slots=True)
class BuildDefaults:
    """Defaults applied to ``faasbuild build`` when a flag is not given."""

    tag: TagFormat = TagFormat.DEFAULT
    no_cache: bool = False
    squash: bool = False
    quiet: bool = False


_CONFIG_DIR = Path(user_config_dir("faasbuild", "faasbuild"))
_CONFIG_FILE = _CONFIG_DIR / "config.toml"


def config_path() -> Path:
    """Return the location of the stored build defaults."""

    return _CONFIG_FILE


def _read_flag(section: dict, name: str) -> bool:
    value = section.get(name, False)
    if not isinstance(value, bool):
        raise ConfigError(f"The 'build.{name}' setting must be true or false.")
    return value


def load_config() -> BuildDefaults | None:
    """Load the saved build defaults, if present."""

    if not _CONFIG_FILE.exists():
        return None

    try:
        payload = tomllib.loads(_CONFIG_FILE.read_text())
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse configuration file: {exc}") from exc

    build_section = payload.get("build")
    if not isinstance(build_section, dict):
        raise ConfigError("Configuration file is missing the [build] section.")

    raw_tag = build_section.get("tag", TagFormat.DEFAULT.value)
    try:
        tag = TagFormat(raw_tag)
    except ValueError as exc:
        choices = ", ".join(item.value for item in TagFormat)
        raise ConfigError(
            f"Unknown tag format '{raw_tag}' in configuration. Expected one of: {choices}."
        ) from exc

    return BuildDefaults(
        tag=tag,
        no_cache=_read_flag(build_section, "no_cache"),
        squash=_read_flag(build_section, "squash"),
        quiet=_read_flag(build_section, "quiet"),
    )


def save_config(defaults: BuildDefaults) -> Path:
    """Persist the given build defaults to disk."""

    def toml_bool(value: bool) -> str:
        return "true" if value else "false"

    _CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    content = textwrap.dedent(
        f"""
        [build]
        tag = \"{defaults.tag.value}\"
        no_cache = {toml_bool(defaults.no_cache)}
        squash = {toml_bool(defaults.squash)}
        quiet = {toml_bool(defaults.quiet)}
        """
    ).strip()

    _CONFIG_FILE.write_text(content + "\n")

    if os.name != "nt":  # tighten permissions on POSIX systems
        os.chmod(_CONFIG_FILE, 0o600)

    return _CONFIG_FILE


def delete_config() -> bool:
    """Remove the stored build defaults; ``False`` when none were saved."""

    try:
        _CONFIG_FILE.unlink(missing_ok=False)
    except FileNotFoundError:
        return False
    except OSError as exc:  # pragma: no cover - unremovable file
        raise ConfigError(
            f"Could not remove the build defaults at {_CONFIG_FILE}: {exc}"
        ) from exc

    return True
