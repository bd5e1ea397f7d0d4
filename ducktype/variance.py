"""Variance rules for comparing a contract's type against a candidate's.

Parameters are contravariant: the candidate must accept at least everything
the contract accepts. Return types are covariant: the candidate may promise
something narrower. Properties are invariant.

The nominal relation between class names is injected as `is_subtype`, so
these functions stay pure and can be driven by hand-built descriptors.
"""

from __future__ import annotations

from typing import Callable

from .descriptors import Named, TypeRef, Union

SubtypeOracle = Callable[[str, str], bool]
"""is_subtype(sub_name, super_name) -> bool, for non-scalar names only."""

ANY: str = "any"
NONE: str = "None"

# Compared by exact name; never handed to the subtype oracle.
SCALAR_TYPES: frozenset[str] = frozenset(
    {"int", "float", "complex", "bool", "str", "bytes", NONE, ANY}
)


def is_nominal_subtype(sub: str, sup: str, is_subtype: SubtypeOracle) -> bool:
    """Name-level subtype test with scalars held to exact equality."""
    if sub == sup:
        return True
    if sub in SCALAR_TYPES or sup in SCALAR_TYPES:
        return False
    return is_subtype(sub, sup)


# ============================================================
# PARAMETERS (CONTRAVARIANT)
# ============================================================


def accepts_as_parameter(
    expected: TypeRef,
    actual: TypeRef,
    is_subtype: SubtypeOracle,
    strict_any: bool = False,
) -> bool:
    """Can a parameter declared `actual` stand in for one declared `expected`?

    With strict_any, a candidate parameter typed `any` does not satisfy a
    specific contract type.
    """
    if isinstance(expected, Union):
        if isinstance(actual, Union):
            for e in expected.members:
                found = False
                for a in actual.members:
                    if accepts_as_parameter(e, a, is_subtype, strict_any):
                        found = True
                        break
                if not found:
                    return False
            return True
        for e in expected.members:
            if not accepts_as_parameter(e, actual, is_subtype, strict_any):
                return False
        return True
    if isinstance(actual, Union):
        for a in actual.members:
            if accepts_as_parameter(expected, a, is_subtype, strict_any):
                return True
        return False
    if isinstance(expected, Named) and isinstance(actual, Named):
        if actual.nullable and not expected.nullable:
            return False
        if expected.name == actual.name:
            return True
        if expected.name == ANY:
            return True
        if actual.name == ANY:
            return not strict_any
        return is_nominal_subtype(expected.name, actual.name, is_subtype)
    return False


# ============================================================
# RETURN TYPES (COVARIANT)
# ============================================================


def accepts_as_return(
    expected: TypeRef,
    actual: TypeRef,
    is_subtype: SubtypeOracle,
    strict_returns: bool = False,
) -> bool:
    """Can a method returning `actual` stand in for one returning `expected`?

    A union returned against a single contract type passes when any member
    matches. With strict_returns, every member must.
    """
    if isinstance(expected, Union) and isinstance(actual, Union):
        for e in expected.members:
            found = False
            for a in actual.members:
                if accepts_as_return(e, a, is_subtype, strict_returns):
                    found = True
                    break
            if not found:
                return False
        return True
    if isinstance(expected, Union):
        for e in expected.members:
            if accepts_as_return(e, actual, is_subtype, strict_returns):
                return True
        return False
    if isinstance(actual, Union):
        for a in actual.members:
            ok = accepts_as_return(expected, a, is_subtype, strict_returns)
            if ok and not strict_returns:
                return True
            if not ok and strict_returns:
                return False
        return strict_returns
    if isinstance(expected, Named) and isinstance(actual, Named):
        if expected.nullable != actual.nullable:
            return False
        if expected.name == actual.name:
            return True
        return is_nominal_subtype(actual.name, expected.name, is_subtype)
    return False


# ============================================================
# PROPERTIES (INVARIANT)
# ============================================================


def same_type(expected: TypeRef, actual: TypeRef) -> bool:
    """Exact match on name, nullability and union members."""
    if isinstance(expected, Union) and isinstance(actual, Union):
        return expected.members == actual.members and expected.nullable == actual.nullable
    if isinstance(expected, Named) and isinstance(actual, Named):
        return expected.name == actual.name and expected.nullable == actual.nullable
    return False
