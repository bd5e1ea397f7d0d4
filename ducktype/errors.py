"""Exceptions raised by ducktype.

Conformance violations are not exceptions; they are returned as data. These
classes cover caller errors and the optional raising surface.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .descriptors import Violation


class UnknownContractType(ValueError):
    """The contract does not name an existing class."""

    def __init__(self, name: str, reason: str = "") -> None:
        self.name: str = name
        msg = "type '" + name + "' does not exist"
        if reason != "":
            msg += ": " + reason
        super().__init__(msg)


class DescriptorError(ValueError):
    """A descriptor breaks an invariant of the model."""


class DuckTypeError(Exception):
    """A candidate failed a duck typing assertion."""

    def __init__(self, violations: list[Violation]) -> None:
        self.violations: list[Violation] = list(violations)
        super().__init__("duck typing assertion failed")

    def __str__(self) -> str:
        lines: list[str] = ["duck typing assertion failed:"]
        for v in self.violations:
            lines.append("  " + v.kind + " " + v.member + ": " + v.detail)
        return "\n".join(lines)
