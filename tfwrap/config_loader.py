"""Configuration loading and validation logic."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Callable, Dict, Mapping
import json
import tomllib

import yaml

from .errors import ConfigurationError

ConfigLoader = Callable[[Any], Mapping[str, Any]]

DEFAULT_PROGRAM = "terraform"
CONFIG_SECTION = "terraform"

_FILE_LOADERS: Dict[str, ConfigLoader] = {
    ".toml": lambda stream: tomllib.load(stream),
    ".json": lambda stream: json.load(stream),
    ".yaml": lambda stream: yaml.safe_load(stream),
    ".yml": lambda stream: yaml.safe_load(stream),
}


@dataclass(frozen=True, slots=True)
class TerraformConfig:
    """Immutable settings shared by every invocation of a :class:`Terraform`."""

    work_dir: Path = field(default_factory=Path.cwd)
    silent: bool = False
    no_color: bool = False
    program: str = DEFAULT_PROGRAM
    environment: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "work_dir", Path(self.work_dir))
        object.__setattr__(self, "environment", dict(self.environment))

    def with_overrides(self, **changes: Any) -> "TerraformConfig":
        """Return a copy with every non-``None`` entry of ``changes`` applied."""
        return replace(self, **{key: value for key, value in changes.items() if value is not None})

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, base_dir: Path | None = None) -> "TerraformConfig":
        section = data.get(CONFIG_SECTION, {})
        if not isinstance(section, Mapping):
            raise ConfigurationError(f"[{CONFIG_SECTION}] must be a table")

        kwargs: Dict[str, Any] = {}
        work_dir = section.get("work_dir")
        if work_dir is not None:
            if not isinstance(work_dir, str) or not work_dir.strip():
                raise ConfigurationError(f"{CONFIG_SECTION}.work_dir must be a non-empty string")
            path = Path(work_dir).expanduser()
            if not path.is_absolute() and base_dir is not None:
                path = base_dir / path
            kwargs["work_dir"] = path

        for key in ("silent", "no_color"):
            value = section.get(key)
            if value is None:
                continue
            if not isinstance(value, bool):
                raise ConfigurationError(f"{CONFIG_SECTION}.{key} must be a boolean")
            kwargs[key] = value

        program = section.get("program")
        if program is not None:
            if not isinstance(program, str) or not program.strip():
                raise ConfigurationError(f"{CONFIG_SECTION}.program must be a non-empty string")
            kwargs["program"] = program.strip()

        environment = section.get("environment")
        if environment is not None:
            if not isinstance(environment, Mapping):
                raise ConfigurationError(f"{CONFIG_SECTION}.environment must be a table")
            kwargs["environment"] = {str(key): str(value) for key, value in environment.items()}

        return cls(**kwargs)


def _load_config_file(path: Path) -> Mapping[str, Any]:
    suffix = path.suffix.lower()
    loader = _FILE_LOADERS.get(suffix)
    if loader is None:
        raise ConfigurationError(f"Unsupported configuration file extension: {suffix}")
    mode = "rb" if suffix == ".toml" else "r"
    kwargs: Dict[str, Any] = {}
    if mode == "r":
        kwargs["encoding"] = "utf-8"
    try:
        with path.open(mode, **kwargs) as handle:
            data = loader(handle)
    except OSError as exc:
        raise ConfigurationError(f"Unable to read configuration file '{path}': {exc}") from exc
    except (tomllib.TOMLDecodeError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Failed to parse configuration file '{path}': {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Configuration file '{path}' must contain a mapping at the root")
    return data


def load_config(path: Path | str) -> TerraformConfig:
    """Load a :class:`TerraformConfig` from a TOML, JSON or YAML file."""
    config_path = Path(path)
    data = _load_config_file(config_path)
    return TerraformConfig.from_mapping(data, base_dir=config_path.resolve().parent)
