"""Execution of terraform subcommands.

Commands run in :attr:`TerraformConfig.work_dir`, which is handed to the
runner as an explicit ``cwd``. The process-wide current directory is never
changed, so a single :class:`Terraform` instance may be shared between threads.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Sequence
import os
import shutil

from .command_runner import CommandResult, CommandRunner, SubprocessCommandRunner
from .config_loader import TerraformConfig
from .console import Console
from .errors import DirectoryError, ExecutableNotFoundError, VersionParseError
from .options import format_options

VERSION_ARGUMENT = "--version"

SUBCOMMANDS = (
    "apply",
    "destroy",
    "console",
    "fmt",
    "get",
    "graph",
    "import",
    "init",
    "output",
    "plan",
    "push",
    "refresh",
    "show",
    "taint",
    "untaint",
    "validate",
)


def parse_version(output: str) -> str:
    """Extract the bare version from ``terraform --version`` output.

    ``Terraform v0.8.5`` yields ``0.8.5``. Only the first line is considered;
    upgrade notices that follow it are ignored.
    """
    lines = output.strip().splitlines()
    tokens = lines[0].split() if lines else []
    if len(tokens) < 2:
        raise VersionParseError(f"Unable to parse terraform version from output: {output!r}")
    version = tokens[1]
    if version.startswith("v"):
        version = version[1:]
    return version


class Terraform:
    """Run terraform subcommands built from structured option mappings."""

    def __init__(
        self,
        config: TerraformConfig | None = None,
        *,
        runner: CommandRunner | None = None,
        console: Console | None = None,
    ) -> None:
        self.config = config or TerraformConfig()
        self.runner = runner or SubprocessCommandRunner()
        self._console = console or Console()
        self._executable: str | None = None

    def compose(
        self,
        subcommand: str = "",
        options: Mapping[str, Any] | None = None,
        args: Sequence[str] = (),
    ) -> str:
        command = self.config.program
        if subcommand:
            command += f" {subcommand}"
        command += format_options(options, self.config.no_color)
        positional = [str(arg) for arg in args if arg is not None and str(arg) != ""]
        if positional:
            command += " " + " ".join(positional)
        return command

    def ensure_executable(self) -> str | None:
        """Resolve the terraform program the way the child process will.

        The configured ``PATH`` override is searched instead of the parent's,
        and a relative program path is taken relative to ``work_dir``.
        """
        if not self.runner.executes:
            return None
        if self._executable is None:
            program = self.config.program
            if os.sep in program or (os.altsep and os.altsep in program):
                candidate = self.config.work_dir / program
                resolved = shutil.which(str(candidate))
            else:
                resolved = shutil.which(program, path=self.config.environment.get("PATH"))
            if resolved is None:
                raise ExecutableNotFoundError(self.config.program)
            self._executable = resolved
            self._console.debug(f"Using {self.config.program} at {resolved}")
        return self._executable

    def _working_directory(self) -> Path:
        work_dir = self.config.work_dir
        if not work_dir.exists():
            raise DirectoryError(work_dir, "does not exist")
        if not work_dir.is_dir():
            raise DirectoryError(work_dir, "is not a directory")
        return work_dir

    def _execute(self, command: str, *, silent: bool) -> CommandResult:
        work_dir = self._working_directory()
        self.ensure_executable()
        self._console.debug(f"Running: {command} (cwd={work_dir})")
        result = self.runner.run(
            command,
            cwd=work_dir,
            env=self.config.environment,
            silent=silent,
        )
        result.command = command
        if result.returncode != 0:
            self._console.info(f"'{command}' exited with code {result.returncode}")
            if result.stderr:
                self._console.debug_block("stderr", result.stderr)
        return result

    def invoke(
        self,
        subcommand: str = "",
        options: Mapping[str, Any] | None = None,
        args: Sequence[str] = (),
    ) -> CommandResult:
        """Run ``terraform <subcommand>`` and return its captured result.

        A non-zero exit status is returned in the result rather than raised.
        """
        return self._execute(self.compose(subcommand, options, args), silent=self.config.silent)

    def version(self) -> str:
        result = self._execute(f"{self.config.program} {VERSION_ARGUMENT}", silent=True)
        return parse_version(result.stdout)

    def apply(self, options: Mapping[str, Any] | None = None, *args: str) -> CommandResult:
        return self.invoke("apply", options, args)

    def destroy(self, options: Mapping[str, Any] | None = None, *args: str) -> CommandResult:
        return self.invoke("destroy", options, args)

    def console(self, options: Mapping[str, Any] | None = None, *args: str) -> CommandResult:
        return self.invoke("console", options, args)

    def fmt(self, options: Mapping[str, Any] | None = None, *args: str) -> CommandResult:
        return self.invoke("fmt", options, args)

    def get(self, options: Mapping[str, Any] | None = None, *args: str) -> CommandResult:
        return self.invoke("get", options, args)

    def graph(self, options: Mapping[str, Any] | None = None, *args: str) -> CommandResult:
        return self.invoke("graph", options, args)

    def import_(self, options: Mapping[str, Any] | None = None, *args: str) -> CommandResult:
        return self.invoke("import", options, args)

    def init(self, options: Mapping[str, Any] | None = None, *args: str) -> CommandResult:
        return self.invoke("init", options, args)

    def output(self, options: Mapping[str, Any] | None = None, *args: str) -> CommandResult:
        return self.invoke("output", options, args)

    def plan(self, options: Mapping[str, Any] | None = None, *args: str) -> CommandResult:
        return self.invoke("plan", options, args)

    def push(self, options: Mapping[str, Any] | None = None, *args: str) -> CommandResult:
        return self.invoke("push", options, args)

    def refresh(self, options: Mapping[str, Any] | None = None, *args: str) -> CommandResult:
        return self.invoke("refresh", options, args)

    def show(self, options: Mapping[str, Any] | None = None, *args: str) -> CommandResult:
        return self.invoke("show", options, args)

    def taint(self, options: Mapping[str, Any] | None = None, *args: str) -> CommandResult:
        return self.invoke("taint", options, args)

    def untaint(self, options: Mapping[str, Any] | None = None, *args: str) -> CommandResult:
        return self.invoke("untaint", options, args)

    def validate(self, options: Mapping[str, Any] | None = None, *args: str) -> CommandResult:
        return self.invoke("validate", options, args)

    def run_subcommand(self, name: str, options: Mapping[str, Any] | None = None, *args: str) -> CommandResult:
        """Dispatch one of :data:`SUBCOMMANDS` by name."""
        if name not in SUBCOMMANDS:
            raise ValueError(f"Unsupported terraform subcommand '{name}'")
        return self.invoke(name, options, args)
