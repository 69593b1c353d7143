"""Harness configuration: base URLs, credentials and the ~/.bawharness/ directory."""

from __future__ import annotations

import json
import os
import re
import subprocess
from collections.abc import Iterator, Mapping
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from dotenv import dotenv_values
from pydantic import BaseModel, ValidationError, field_validator

from .errors import ConfigError


CONFIG_DIR = Path.home() / ".bawharness"
ENV_PREFIX = "BAWHARNESS_"

# Keys shared by the profile .env file, the BAWHARNESS_* environment
# variables and the YAML/JSON config file (lower-cased there).
CONFIG_KEYS = ("TASK_BASE", "SERVICE_BASE", "USER", "PASSWORD", "CSRF_TOKEN", "TIMEOUT")


class BaseUrlSelector(str, Enum):
    TASK = "task"
    SERVICE = "service"


class BaseUrlTable(Mapping):
    """Read-only selector -> URL prefix table, one non-empty entry per selector."""

    def __init__(self, task: str, service: str):
        entries = {BaseUrlSelector.TASK: task, BaseUrlSelector.SERVICE: service}
        for selector, url in entries.items():
            if not url:
                raise ConfigError(f"Base URL for '{selector.value}' calls is empty")
        self._entries = entries

    def __getitem__(self, selector: BaseUrlSelector) -> str:
        try:
            return self._entries[BaseUrlSelector(selector)]
        except ValueError:
            raise KeyError(selector) from None

    def __iter__(self) -> Iterator[BaseUrlSelector]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"BaseUrlTable(task={self._entries[BaseUrlSelector.TASK]!r}, service={self._entries[BaseUrlSelector.SERVICE]!r})"


class HarnessConfig(BaseModel):
    task_base: str
    service_base: str
    user: str = ""
    password: str = ""
    csrf_token: str = ""
    timeout: float = 30.0

    @field_validator("task_base", "service_base")
    @classmethod
    def _not_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("timeout")
    @classmethod
    def _positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    def base_urls(self) -> BaseUrlTable:
        return BaseUrlTable(task=self.task_base, service=self.service_base)


# ---------------------------------------------------------------------------
# Config directory and profile .env files
# ---------------------------------------------------------------------------

def ensure_config_dir() -> Path:
    """Create the config directory if it doesn't exist."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    return CONFIG_DIR


def env_path_for(profile: str) -> Path:
    """Return the .env file path for a profile name."""
    safe = re.sub(r"[^\w.-]", "_", profile) or "default"
    return ensure_config_dir() / f"{safe}.env"


def save_profile(profile: str, values: dict[str, str]) -> Path:
    """Write profile values to its .env file."""
    env_file = env_path_for(profile)
    lines: list[str] = []
    for key, value in values.items():
        escaped = value.replace('"', '\\"')
        lines.append(f'{key}="{escaped}"')
    env_file.write_text("\n".join(lines) + "\n")
    return env_file


def load_profile(profile: str) -> dict[str, str]:
    """Load a profile's .env file, or {} when it doesn't exist."""
    env_file = env_path_for(profile)
    if not env_file.exists():
        return {}
    return {k: v for k, v in dotenv_values(env_file).items() if v is not None}


def load_config_file(path: str) -> dict[str, str]:
    """Read a YAML or JSON config file into upper-case config keys."""
    file_path = Path(path)
    if not file_path.exists():
        raise ConfigError(f"Config file not found: {path}")

    text = file_path.read_text()
    try:
        if file_path.suffix == ".json":
            raw = json.loads(text)
        else:
            raw = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to parse config file {path}: {e}") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return {str(k).upper(): str(v) for k, v in raw.items() if v is not None}


def _from_environ() -> dict[str, str]:
    out: dict[str, str] = {}
    for key in CONFIG_KEYS:
        value = os.environ.get(f"{ENV_PREFIX}{key}")
        if value:
            out[key] = value
    return out


def resolve_config(
    profile: str = "default",
    config_file: str | None = None,
    overrides: dict[str, Any] | None = None,
) -> HarnessConfig:
    """Resolve the harness config using the precedence chain.

    Priority: CLI overrides > BAWHARNESS_* env vars > config file > profile .env
    """
    merged: dict[str, str] = {}
    merged.update({k: v for k, v in load_profile(profile).items() if k in CONFIG_KEYS})
    if config_file:
        merged.update({k: v for k, v in load_config_file(config_file).items() if k in CONFIG_KEYS})
    merged.update(_from_environ())
    for key, value in (overrides or {}).items():
        if value is not None:
            merged[key.upper()] = str(value)

    missing = [k for k in ("TASK_BASE", "SERVICE_BASE") if not merged.get(k)]
    if missing:
        raise ConfigError(
            "Missing base URL(s): "
            + ", ".join(missing)
            + f". Run `bawharness configure` or set {ENV_PREFIX}<KEY>."
        )

    try:
        return HarnessConfig(**{k.lower(): v for k, v in merged.items()})
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first["loc"])
        raise ConfigError(f"Invalid config value for {field}: {first['msg']}") from e


# ---------------------------------------------------------------------------
# Credential protection
# ---------------------------------------------------------------------------

def _is_git_repo(path: Path) -> bool:
    """Check if the given path is inside a git work tree."""
    try:
        result = subprocess.run(
            ["git", "-C", str(path), "rev-parse", "--is-inside-work-tree"],
            capture_output=True,
            text=True,
        )
        return result.returncode == 0
    except FileNotFoundError:
        return False


def protect_credentials(env_path: Path) -> str | None:
    """Keep profile files out of git.

    Returns a warning when the config dir is not inside a git work tree, or
    None once ``*.env`` is listed in its .gitignore.
    """
    config_dir = env_path.parent

    if _is_git_repo(config_dir):
        gitignore = config_dir / ".gitignore"
        pattern = "*.env"
        existing = gitignore.read_text() if gitignore.exists() else ""
        if pattern not in existing.splitlines():
            with gitignore.open("a") as f:
                if existing and not existing.endswith("\n"):
                    f.write("\n")
                f.write(f"{pattern}\n")
        return None

    return (
        f"Warning: {config_dir} is not inside a git repository. "
        f"Credentials are stored in plain text at {env_path}. "
        f"Do not copy this file into a git repo."
    )
