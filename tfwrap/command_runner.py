"""Utilities for executing terraform command lines with optional dry-run support."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping
import os
import shlex
import subprocess
import sys

from .errors import CommandLineError, DirectoryError, ExecutableNotFoundError


@dataclass
class CommandResult:
    """Represents the outcome of an executed command."""

    command: str
    returncode: int
    stdout: str
    stderr: str
    cwd: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Abstract command runner interface.

    Runners receive a complete command line as text. A non-zero exit status
    is reported through :attr:`CommandResult.returncode`, never raised.
    """

    executes = True

    def run(
        self,
        command: str,
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        silent: bool = False,
    ) -> CommandResult:
        raise NotImplementedError

    @staticmethod
    def split_command(command: str) -> List[str]:
        try:
            return shlex.split(command)
        except ValueError as exc:
            raise CommandLineError(f"Unable to split command line {command!r}: {exc}") from exc


class SubprocessCommandRunner(CommandRunner):
    """Command runner that executes commands via :mod:`subprocess`."""

    @staticmethod
    def _merge_environment(env: Mapping[str, str] | None) -> Dict[str, str] | None:
        if not env:
            return None
        merged = os.environ.copy()
        merged.update(env)
        return merged

    @staticmethod
    def _echo(result: CommandResult) -> None:
        if result.stdout:
            sys.stdout.write(result.stdout)
            sys.stdout.flush()
        if result.stderr:
            sys.stderr.write(result.stderr)
            sys.stderr.flush()

    def run(
        self,
        command: str,
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        silent: bool = False,
    ) -> CommandResult:
        argv = self.split_command(command)
        try:
            process = subprocess.run(
                argv,
                cwd=str(cwd) if cwd else None,
                env=self._merge_environment(env),
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as exc:
            if cwd is not None and not Path(cwd).is_dir():
                raise DirectoryError(cwd, "does not exist") from exc
            raise ExecutableNotFoundError(argv[0] if argv else command) from exc

        result = CommandResult(
            command=command,
            returncode=process.returncode,
            stdout=process.stdout,
            stderr=process.stderr,
            cwd=str(cwd) if cwd else None,
        )
        if not silent:
            self._echo(result)
        return result


@dataclass(slots=True)
class RecordedCommand:
    command: str
    cwd: str | None
    env: Dict[str, str]
    silent: bool


class RecordingCommandRunner(CommandRunner):
    """Command runner that records commands instead of executing them.

    ``stdout`` is returned as the captured output of every recorded command,
    which lets callers exercise output parsing without a terraform binary.
    """

    executes = False

    def __init__(self, stdout: str = "", stderr: str = "", returncode: int = 0) -> None:
        self.commands: List[RecordedCommand] = []
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode

    def run(
        self,
        command: str,
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        silent: bool = False,
    ) -> CommandResult:
        self.commands.append(
            RecordedCommand(
                command=command,
                cwd=str(cwd) if cwd else None,
                env=dict(env) if env else {},
                silent=silent,
            )
        )
        return CommandResult(
            command=command,
            returncode=self.returncode,
            stdout=self.stdout,
            stderr=self.stderr,
            cwd=str(cwd) if cwd else None,
        )

    def iter_commands(self) -> Iterable[RecordedCommand]:
        return iter(self.commands)

    def iter_formatted(self) -> Iterable[str]:
        for record in self.commands:
            parts: List[str] = ["[dry-run]"]
            if record.cwd:
                parts.append(f"(cwd={record.cwd})")
            parts.append(record.command)
            yield " ".join(parts)
