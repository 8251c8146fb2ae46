"""Conversion of structured option mappings into terraform argument strings.

An option mapping such as::

    {
        "state": "state.tfstate",
        "var": {"foo": "bar", "bah": "boo"},
        "vars_file": ["x.tfvars", "y.tfvars"],
    }

is rendered as::

    " -state=state.tfstate -var 'foo=bar' -var 'bah=boo' -vars-file=x.tfvars -vars-file=y.tfvars"

Every plain value is coerced once into one of the :class:`OptionValue`
variants; rendering is then delegated to the variant itself.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, List, Mapping, Sequence, Tuple, Union
import os

from .errors import InvalidOptionError

VAR_OPTION = "var"
NO_COLOR_FLAG = "-no-color"


def normalize_option_name(name: str) -> str:
    """Convert ``vars_file`` to ``-vars-file``.

    Only the first underscore is replaced: ``a_b_c`` becomes ``-a-b_c``.
    """
    return f"-{name.replace('_', '-', 1)}"


@dataclass(frozen=True, slots=True)
class Flag:
    """Boolean switch rendered as ``-name`` when enabled."""

    enabled: bool

    def tokens(self, name: str) -> Iterator[str]:
        if self.enabled:
            yield f"-{name}"


@dataclass(frozen=True, slots=True)
class Scalar:
    """Single ``-name=value`` pair."""

    value: str

    def tokens(self, name: str) -> Iterator[str]:
        yield f"{normalize_option_name(name)}={self.value}"


@dataclass(frozen=True, slots=True)
class Repeated:
    """Option repeated once per item, e.g. ``-vars-file=a -vars-file=b``."""

    items: Tuple[str, ...]

    def tokens(self, name: str) -> Iterator[str]:
        option = normalize_option_name(name)
        for item in self.items:
            yield f"{option}={item}"


@dataclass(frozen=True, slots=True)
class VarMap:
    """Terraform input variables, each rendered as ``-var 'key=value'``."""

    pairs: Tuple[Tuple[str, str], ...]

    def tokens(self, name: str) -> Iterator[str]:
        for key, value in self.pairs:
            yield f"-var '{key}={value}'"


OptionValue = Union[Flag, Scalar, Repeated, VarMap]
_VARIANTS = (Flag, Scalar, Repeated, VarMap)


def _scalar_text(name: str, value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, os.PathLike):
        return str(os.fspath(value))
    raise InvalidOptionError(name, value)


def _check_var_pairs(name: str, variables: VarMap) -> VarMap:
    for key, value in variables.pairs:
        if "'" in key or "'" in value:
            raise InvalidOptionError(f"{name}.{key}", value, "single quotes cannot appear inside -var 'key=value'")
    return variables


def coerce_option(name: str, value: Any) -> OptionValue:
    """Map a plain Python value onto its :class:`OptionValue` variant."""
    if isinstance(value, _VARIANTS):
        if isinstance(value, VarMap):
            if name != VAR_OPTION:
                raise InvalidOptionError(name, value, f"variable maps are only accepted for '{VAR_OPTION}'")
            return _check_var_pairs(name, value)
        return value
    if isinstance(value, bool):
        return Flag(value)
    if isinstance(value, Mapping):
        if name != VAR_OPTION:
            raise InvalidOptionError(name, value, f"nested mappings are only accepted for '{VAR_OPTION}'")
        variables = VarMap(tuple((str(key), _scalar_text(f"{name}.{key}", item)) for key, item in value.items()))
        return _check_var_pairs(name, variables)
    if isinstance(value, (str, int, float, os.PathLike)):
        return Scalar(_scalar_text(name, value))
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return Repeated(tuple(_scalar_text(name, item) for item in value))
    raise InvalidOptionError(name, value)


def coerce_options(options: Mapping[str, Any] | None) -> List[Tuple[str, OptionValue]]:
    if not options:
        return []
    return [(str(name), coerce_option(str(name), value)) for name, value in options.items()]


def iter_option_tokens(options: Mapping[str, Any] | None) -> Iterator[str]:
    for name, value in coerce_options(options):
        yield from value.tokens(name)


def format_options(options: Mapping[str, Any] | None, no_color: bool = False) -> str:
    """Render ``options`` as a string where each token is preceded by a space."""
    tokens: Sequence[str] = list(iter_option_tokens(options))
    if no_color:
        tokens = [*tokens, NO_COLOR_FLAG]
    return "".join(f" {token}" for token in tokens)
