"""Member conformance - one contract member against the candidate's.

Each check appends zero or more violations. A fatal finding stops the checks
for that member only; the traversal over the contract always continues.
"""

from __future__ import annotations

from .descriptors import (
    METHOD_MISSING,
    PARAMETER_MISSING,
    PARAMETER_TYPE_MISMATCH,
    PARAMETER_TYPE_MISSING,
    PROPERTY_MISSING,
    PROPERTY_TYPE_MISMATCH,
    PROPERTY_TYPE_MISSING,
    PROPERTY_VISIBILITY_MISMATCH,
    RETURN_TYPE_MISMATCH,
    RETURN_TYPE_MISSING,
    TOO_MANY_PARAMETERS,
    VISIBILITY_MISMATCH,
    MethodDescriptor,
    PropertyDescriptor,
    TypeDescriptor,
    Violation,
    ViolationKind,
    type_name,
)
from .variance import SubtypeOracle, accepts_as_parameter, accepts_as_return, same_type


class MemberChecker:
    """Compares contract members against one candidate descriptor."""

    def __init__(
        self,
        candidate: TypeDescriptor,
        is_subtype: SubtypeOracle,
        strict_any: bool = False,
        strict_returns: bool = False,
    ) -> None:
        self.candidate: TypeDescriptor = candidate
        self.is_subtype: SubtypeOracle = is_subtype
        self.strict_any: bool = strict_any
        self.strict_returns: bool = strict_returns
        self.violations: list[Violation] = []

    def violation(self, kind: ViolationKind, member: str, detail: str) -> None:
        self.violations.append(Violation(kind=kind, member=member, detail=detail))

    # ── Methods ───────────────────────────────────────────────

    def check_method(self, expected: MethodDescriptor) -> None:
        name = expected.name
        actual = self.candidate.find_method(name)
        if actual is None:
            self.violation(METHOD_MISSING, name, "method '" + name + "' not found on candidate")
            return
        if actual.visibility != expected.visibility:
            self.violation(
                VISIBILITY_MISMATCH,
                name,
                "method '" + name + "' should be " + expected.visibility
                + ", is " + actual.visibility,
            )
        if len(actual.parameters) > len(expected.parameters):
            self.violation(
                TOO_MANY_PARAMETERS,
                name,
                "method '" + name + "' has more parameters than expected ("
                + str(len(actual.parameters)) + " > " + str(len(expected.parameters)) + ")",
            )
            return
        for param in expected.parameters:
            where = "parameter '" + param.name + "' of method '" + name + "'"
            if param.position >= len(actual.parameters):
                self.violation(PARAMETER_MISSING, name, where + " is missing")
                continue
            if param.declared_type is None:
                continue
            other = actual.parameters[param.position]
            if other.declared_type is None:
                self.violation(PARAMETER_TYPE_MISSING, name, where + " is missing a type annotation")
                continue
            if not accepts_as_parameter(
                param.declared_type, other.declared_type, self.is_subtype, self.strict_any
            ):
                self.violation(
                    PARAMETER_TYPE_MISMATCH,
                    name,
                    where + " has type mismatch: expected "
                    + type_name(param.declared_type)
                    + ", got " + type_name(other.declared_type),
                )
        if expected.return_type is None:
            return
        if actual.return_type is None:
            self.violation(RETURN_TYPE_MISSING, name, "method '" + name + "' is missing a return type")
            return
        if not accepts_as_return(
            expected.return_type, actual.return_type, self.is_subtype, self.strict_returns
        ):
            self.violation(
                RETURN_TYPE_MISMATCH,
                name,
                "return type of method '" + name + "' does not match: expected "
                + type_name(expected.return_type)
                + ", got " + type_name(actual.return_type),
            )

    # ── Properties ────────────────────────────────────────────

    def check_property(self, expected: PropertyDescriptor) -> None:
        name = expected.name
        actual = self.candidate.find_property(name)
        if actual is None:
            self.violation(PROPERTY_MISSING, name, "property '" + name + "' not found on candidate")
            return
        if actual.visibility != expected.visibility:
            self.violation(
                PROPERTY_VISIBILITY_MISMATCH,
                name,
                "property '" + name + "' should be " + expected.visibility
                + ", is " + actual.visibility,
            )
        if expected.declared_type is None:
            return
        if actual.declared_type is None:
            self.violation(
                PROPERTY_TYPE_MISSING, name, "property '" + name + "' is missing a type annotation"
            )
            return
        if not same_type(expected.declared_type, actual.declared_type):
            self.violation(
                PROPERTY_TYPE_MISMATCH,
                name,
                "property '" + name + "' has type mismatch: expected "
                + type_name(expected.declared_type)
                + ", got " + type_name(actual.declared_type),
            )
