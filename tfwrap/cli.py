"""Command line interface for the terraform wrapper."""
from __future__ import annotations

from argparse import ArgumentParser, ArgumentTypeError, Namespace
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Tuple
import sys

from .command_runner import CommandRunner, RecordingCommandRunner, SubprocessCommandRunner
from .config_loader import TerraformConfig, load_config
from .console import Console
from .errors import TerraformError
from .terraform import SUBCOMMANDS, Terraform

OptionItem = Tuple[str, str]


def _tagged(kind: str, *, needs_value: bool) -> Callable[[str], OptionItem]:
    def convert(text: str) -> OptionItem:
        if needs_value and "=" not in text:
            raise ArgumentTypeError(f"expected NAME=VALUE, got '{text}'")
        if not text or text.startswith("="):
            raise ArgumentTypeError("option name cannot be empty")
        return kind, text

    return convert


def build_options(items: Iterable[OptionItem]) -> Dict[str, Any]:
    """Fold ``--flag``/``--opt``/``--var`` arguments into an option mapping.

    Order of first appearance is kept. Repeating an ``--opt`` name turns its
    value into a list. Using one name with two different kinds raises
    :class:`ValueError`.
    """
    options: Dict[str, Any] = {}
    kinds: Dict[str, str] = {}
    for kind, text in items:
        if kind == "flag":
            name, value = text, ""
        else:
            name, _, value = text.partition("=")
        key = "var" if kind == "var" else name
        seen = kinds.setdefault(key, kind)
        if seen != kind:
            raise ValueError(f"'{key}' is given both as --{seen} and --{kind}")
        if kind == "flag":
            options[name] = True
        elif kind == "var":
            options.setdefault("var", {})[name] = value
        elif name not in options:
            options[name] = value
        elif isinstance(options[name], list):
            options[name].append(value)
        else:
            options[name] = [options[name], value]
    return options


def _add_option_arguments(parser: ArgumentParser) -> None:
    parser.add_argument(
        "--flag",
        dest="option_items",
        action="append",
        type=_tagged("flag", needs_value=False),
        metavar="NAME",
        help="Boolean switch rendered as -NAME",
    )
    parser.add_argument(
        "--opt",
        dest="option_items",
        action="append",
        type=_tagged("opt", needs_value=True),
        metavar="NAME=VALUE",
        help="Option rendered as -NAME=VALUE (repeat a name to pass it several times)",
    )
    parser.add_argument(
        "--var",
        dest="option_items",
        action="append",
        type=_tagged("var", needs_value=True),
        metavar="KEY=VALUE",
        help="Input variable rendered as -var 'KEY=VALUE'",
    )
    parser.add_argument("args", nargs="*", help="Positional arguments passed to terraform")


def _build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog="tfwrap", description="Run terraform subcommands from structured options")
    parser.add_argument("--config", help="Configuration file (.toml, .json, .yaml)")
    parser.add_argument("-C", "--directory", dest="work_dir", help="Working directory for terraform")
    parser.add_argument("--program", help="Name or path of the terraform executable")
    parser.add_argument("--silent", action="store_true", default=None, help="Do not echo terraform output")
    parser.add_argument("--no-color", dest="no_color", action="store_true", default=None, help="Append -no-color")
    parser.add_argument("--dry-run", action="store_true", help="Print commands without executing them")
    parser.add_argument("--log-level", choices=list(Console.LEVELS), default="none", help="Console log level")

    subparsers = parser.add_subparsers(dest="command", required=True)
    for name in SUBCOMMANDS:
        _add_option_arguments(subparsers.add_parser(name, help=f"Run terraform {name}"))
    subparsers.add_parser("version", help="Print the terraform version")
    return parser


def _parse_arguments(argv: Iterable[str]) -> Namespace:
    parser = _build_parser()
    args = parser.parse_args(list(argv))
    if args.command == "version":
        if args.dry_run:
            parser.error("--dry-run cannot be combined with 'version'")
        return args
    try:
        args.options = build_options(args.option_items or [])
    except ValueError as exc:
        parser.error(str(exc))
    return args


def _resolve_config(args: Namespace) -> TerraformConfig:
    base = load_config(args.config) if args.config else TerraformConfig()
    return base.with_overrides(
        work_dir=Path(args.work_dir) if args.work_dir else None,
        program=args.program,
        silent=args.silent,
        no_color=args.no_color,
    )


def main(argv: Iterable[str] | None = None) -> int:
    args = _parse_arguments(sys.argv[1:] if argv is None else argv)
    console = Console(args.log_level)

    runner: CommandRunner
    if args.dry_run:
        runner = RecordingCommandRunner()
    else:
        runner = SubprocessCommandRunner()

    try:
        terraform = Terraform(_resolve_config(args), runner=runner, console=console)
        if args.command == "version":
            print(terraform.version())
            return 0
        result = terraform.run_subcommand(args.command, args.options, *args.args)
    except TerraformError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if isinstance(runner, RecordingCommandRunner):
        for line in runner.iter_formatted():
            print(line)
    return result.returncode


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
