"""Python wrapper around the terraform command line."""
from __future__ import annotations

from .command_runner import CommandResult, CommandRunner, RecordingCommandRunner, SubprocessCommandRunner
from .config_loader import TerraformConfig, load_config
from .console import Console
from .errors import (
    CommandLineError,
    ConfigurationError,
    DirectoryError,
    ExecutableNotFoundError,
    InvalidOptionError,
    TerraformError,
    VersionParseError,
)
from .options import Flag, Repeated, Scalar, VarMap, coerce_option, format_options, normalize_option_name
from .terraform import SUBCOMMANDS, Terraform, parse_version

__all__ = [
    "CommandResult",
    "CommandRunner",
    "CommandLineError",
    "ConfigurationError",
    "Console",
    "DirectoryError",
    "ExecutableNotFoundError",
    "Flag",
    "InvalidOptionError",
    "RecordingCommandRunner",
    "Repeated",
    "SUBCOMMANDS",
    "Scalar",
    "SubprocessCommandRunner",
    "Terraform",
    "TerraformConfig",
    "TerraformError",
    "VarMap",
    "VersionParseError",
    "coerce_option",
    "format_options",
    "load_config",
    "normalize_option_name",
    "parse_version",
]
