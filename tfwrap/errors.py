"""Exception hierarchy shared by the terraform wrapper."""
from __future__ import annotations


class TerraformError(RuntimeError):
    """Base class for errors raised by the wrapper itself."""


class ExecutableNotFoundError(TerraformError):
    """Raised when the terraform executable cannot be located."""

    def __init__(self, program: str):
        super().__init__(f"The `{program}` executable could not be found in the path")
        self.program = program


class InvalidOptionError(TerraformError, TypeError):
    """Raised when an option value cannot be rendered on the command line."""

    def __init__(self, name: str, value: object, reason: str | None = None):
        message = f"Unsupported value for option '{name}': {type(value).__name__}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.name = name
        self.value = value


class DirectoryError(TerraformError):
    """Raised when the configured working directory is unusable."""

    def __init__(self, path: object, reason: str):
        super().__init__(f"Working directory '{path}' {reason}")
        self.path = path


class VersionParseError(TerraformError):
    """Raised when `terraform --version` output has an unexpected shape."""


class ConfigurationError(TerraformError):
    """Raised for invalid configuration files or values."""


class CommandLineError(TerraformError):
    """Raised when a composed command line cannot be split into arguments."""
