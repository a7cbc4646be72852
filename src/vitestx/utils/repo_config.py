"""Runner configuration loader.

Supports .vitestx/config.toml, .vitestx/config.yaml or .vitestx/config.json
at the project root for overriding the npx/runner options and the command
template. Option values are passed through untouched.
"""

import json
import os
import shlex

# Use tomllib for 3.11+
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from vitestx.errors import ConfigError

DEFAULT_TEMPLATE = "npx {npx_options} {runner} {runner_options} {target}"
DEFAULT_RUNNER = "vite"
DEBUG_OPTIONS = ("--inspect-brk", "--no-file-parallelism")
TEST_NAME_OPTION = "--testNamePattern"

ENV_NPX_OPTIONS = "VITESTX_NPX_OPTIONS"
ENV_RUNNER_OPTIONS = "VITESTX_RUNNER_OPTIONS"


@dataclass(frozen=True)
class RunnerConfig:
    """Options and template used to build the test command."""

    npx_options: tuple[str, ...] = ()
    runner_options: tuple[str, ...] = ("--color",)
    runner: str = DEFAULT_RUNNER
    command_template: str = DEFAULT_TEMPLATE
    debug_options: tuple[str, ...] = DEBUG_OPTIONS
    test_name_option: str = TEST_NAME_OPTION
    source: Path | None = field(default=None, compare=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any], source: Path | None = None) -> "RunnerConfig":
        """Parse a config mapping; unknown keys are ignored."""
        if not isinstance(data, dict):
            raise TypeError(f"expected a table at top level, got {type(data).__name__}")

        section = data.get("vitestx", data)
        if not isinstance(section, dict):
            raise TypeError("[vitestx] must be a table")
        defaults = cls()
        return cls(
            npx_options=_string_list(section, "npx_options", defaults.npx_options),
            runner_options=_string_list(section, "runner_options", defaults.runner_options),
            runner=_string(section, "runner", defaults.runner),
            command_template=_string(section, "command_template", defaults.command_template),
            debug_options=_string_list(section, "debug_options", defaults.debug_options),
            test_name_option=_string(section, "test_name_option", defaults.test_name_option),
            source=source,
        )

    def with_overrides(
        self,
        *,
        npx_options: list[str] | tuple[str, ...] | None = None,
        runner_options: list[str] | tuple[str, ...] | None = None,
    ) -> "RunnerConfig":
        """Return a copy with the given option lists replaced."""
        updated = self
        if npx_options is not None:
            updated = replace(updated, npx_options=tuple(npx_options))
        if runner_options is not None:
            updated = replace(updated, runner_options=tuple(runner_options))
        return updated


def _string_list(section: dict[str, Any], key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = section.get(key)
    if value is None:
        return default
    if isinstance(value, str):
        return tuple(shlex.split(value))
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"'{key}' must be a list of strings")
    return tuple(value)


def _string(section: dict[str, Any], key: str, default: str) -> str:
    value = section.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValueError(f"'{key}' must be a string")
    return value


def load_runner_config(project_root: Path | None) -> RunnerConfig:
    """Load runner configuration from the project's .vitestx directory.

    Priority order:
    1. .vitestx/config.toml (preferred)
    2. .vitestx/config.yaml
    3. .vitestx/config.json

    Environment variables VITESTX_NPX_OPTIONS and VITESTX_RUNNER_OPTIONS
    override the option lists from the file.

    Args:
        project_root: Project root directory, or None for defaults only

    Returns:
        RunnerConfig (defaults when no config file exists)

    Raises:
        ConfigError: If a config file is malformed or invalid
    """
    config = RunnerConfig()
    if project_root is not None:
        config = _load_file_config(project_root / ".vitestx") or config

    return _apply_env(config)


def _load_file_config(config_dir: Path) -> RunnerConfig | None:
    # Try TOML first
    toml_path = config_dir / "config.toml"
    if toml_path.exists():
        try:
            with open(toml_path, "rb") as f:
                data = tomllib.load(f)
            return RunnerConfig.from_dict(data, source=toml_path)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Malformed TOML config at {toml_path}: {e}") from e
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigError(f"Invalid config structure in {toml_path}: {e}") from e

    yaml_path = config_dir / "config.yaml"
    if yaml_path.exists():
        try:
            with open(yaml_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            return RunnerConfig.from_dict(data, source=yaml_path)
        except yaml.YAMLError as e:
            raise ConfigError(f"Malformed YAML config at {yaml_path}: {e}") from e
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigError(f"Invalid config structure in {yaml_path}: {e}") from e

    # JSON fallback
    json_path = config_dir / "config.json"
    if json_path.exists():
        try:
            with open(json_path, encoding="utf-8") as f:
                data = json.load(f)
            return RunnerConfig.from_dict(data, source=json_path)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Malformed JSON config at {json_path}: {e}") from e
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigError(f"Invalid config structure in {json_path}: {e}") from e

    return None


def _apply_env(config: RunnerConfig) -> RunnerConfig:
    npx_env = os.getenv(ENV_NPX_OPTIONS)
    runner_env = os.getenv(ENV_RUNNER_OPTIONS)
    return config.with_overrides(
        npx_options=shlex.split(npx_env) if npx_env is not None else None,
        runner_options=shlex.split(runner_env) if runner_env is not None else None,
    )
