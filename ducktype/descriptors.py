"""Type descriptor model - the normalized shape of a reflected class.

Descriptors are what the checker compares. They are built once per class by
the reflector (reflect.py), owned by the descriptor cache (cache.py), and
read by everything else. Nothing mutates a descriptor after construction.

    class  --reflect-->  TypeDescriptor  --compare-->  [Violation, ...]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from .errors import DescriptorError


# ============================================================
# VISIBILITY
# ============================================================

PUBLIC: str = "public"
PROTECTED: str = "protected"
PRIVATE: str = "private"

Visibility = Literal["public", "protected", "private"]
"""Member visibility, derived from Python naming conventions.

| Name form | Visibility |
|-----------|------------|
| `name`    | public     |
| `_name`   | protected  |
| `__name`  | private    |
"""


# ============================================================
# TYPE REFERENCES
# ============================================================


class TypeRef:
    """A declared type as it appears in a signature.

    Concrete references are Named and Union; both carry `nullable`.
    """

    nullable: bool


@dataclass(frozen=True)
class Named(TypeRef):
    """A single named type.

    Scalars use their builtin name (`int`, `str`, `None`), the universal
    type is `any`, and classes use their qualified name (`pkg.mod.Cls`).
    """

    name: str
    nullable: bool = False


@dataclass(frozen=True)
class Union(TypeRef):
    """One of several named types.

    Nullability is carried both by the flag and, when the annotation spelled
    it out, by an explicit `None` member.

    Invariants:
    - len(members) >= 2 (a single type collapses to Named)
    - members are Named (nested unions are flattened)
    """

    members: frozenset[Named]
    nullable: bool = False

    def __post_init__(self) -> None:
        if len(self.members) < 2:
            raise DescriptorError("union needs at least two distinct members")
        for m in self.members:
            if not isinstance(m, Named):
                raise DescriptorError("union member must be a named type, got " + repr(m))


def make_union(members: list[TypeRef], nullable: bool = False) -> TypeRef:
    """Build a union, flattening nested unions and collapsing singletons."""
    flat: list[Named] = []
    for m in members:
        if isinstance(m, Union):
            nullable = nullable or m.nullable
            for inner in m.members:
                flat.append(inner)
        elif isinstance(m, Named):
            flat.append(m)
    deduped: list[Named] = []
    for m in flat:
        if m not in deduped:
            deduped.append(m)
    if len(deduped) == 0:
        raise DescriptorError("union needs at least one member")
    if len(deduped) == 1:
        only = deduped[0]
        return Named(name=only.name, nullable=only.nullable or nullable)
    return Union(members=frozenset(deduped), nullable=nullable)


def type_name(t: TypeRef) -> str:
    """Human-readable name for a type reference, for violation details."""
    if isinstance(t, Union):
        names: list[str] = []
        for m in t.members:
            names.append(type_name(m))
        names.sort()
        if t.nullable and "None" not in names:
            names.append("None")
        return " | ".join(names)
    if isinstance(t, Named):
        if t.nullable and t.name != "None":
            return t.name + " | None"
        return t.name
    return repr(t)


# ============================================================
# MEMBERS
# ============================================================


@dataclass(frozen=True)
class ParameterDescriptor:
    """A parameter, compared by position rather than by name."""

    name: str
    position: int
    declared_type: TypeRef | None = None


@dataclass(frozen=True)
class MethodDescriptor:
    """A callable member.

    Invariants:
    - parameters[i].position == i
    - the bound receiver (self/cls) is not listed
    """

    name: str
    visibility: Visibility = "public"
    parameters: tuple[ParameterDescriptor, ...] = ()
    return_type: TypeRef | None = None

    def __post_init__(self) -> None:
        i = 0
        for p in self.parameters:
            if p.position != i:
                raise DescriptorError(
                    "parameter '"
                    + p.name
                    + "' of method '"
                    + self.name
                    + "' is at position "
                    + str(p.position)
                    + ", expected "
                    + str(i)
                )
            i += 1


@dataclass(frozen=True)
class PropertyDescriptor:
    """An accessible field."""

    name: str
    visibility: Visibility = "public"
    declared_type: TypeRef | None = None


# ============================================================
# TYPE DESCRIPTOR
# ============================================================


@dataclass(frozen=True)
class TypeDescriptor:
    """All members of one class, in declaration order.

    Invariants:
    - method names are unique
    - property names are unique
    """

    type_name: str
    methods: tuple[MethodDescriptor, ...] = ()
    properties: tuple[PropertyDescriptor, ...] = ()
    _method_index: dict[str, MethodDescriptor] = field(
        default_factory=dict, init=False, repr=False, compare=False, hash=False
    )
    _property_index: dict[str, PropertyDescriptor] = field(
        default_factory=dict, init=False, repr=False, compare=False, hash=False
    )

    def __post_init__(self) -> None:
        for m in self.methods:
            if m.name in self._method_index:
                raise DescriptorError(
                    "duplicate method '" + m.name + "' in " + self.type_name
                )
            self._method_index[m.name] = m
        for p in self.properties:
            if p.name in self._property_index:
                raise DescriptorError(
                    "duplicate property '" + p.name + "' in " + self.type_name
                )
            self._property_index[p.name] = p

    def find_method(self, name: str) -> MethodDescriptor | None:
        return self._method_index.get(name)

    def find_property(self, name: str) -> PropertyDescriptor | None:
        return self._property_index.get(name)

    def to_dict(self) -> dict[str, object]:
        """Serialize to nested dicts for test assertions."""
        methods: list[object] = []
        for m in self.methods:
            params: list[object] = []
            for p in m.parameters:
                params.append(
                    {
                        "name": p.name,
                        "type": None if p.declared_type is None else type_name(p.declared_type),
                    }
                )
            methods.append(
                {
                    "name": m.name,
                    "visibility": m.visibility,
                    "params": params,
                    "returns": None if m.return_type is None else type_name(m.return_type),
                }
            )
        properties: list[object] = []
        for p in self.properties:
            properties.append(
                {
                    "name": p.name,
                    "visibility": p.visibility,
                    "type": None if p.declared_type is None else type_name(p.declared_type),
                }
            )
        return {"type": self.type_name, "methods": methods, "properties": properties}


# ============================================================
# VIOLATIONS
# ============================================================

METHOD_MISSING: str = "MethodMissing"
VISIBILITY_MISMATCH: str = "VisibilityMismatch"
TOO_MANY_PARAMETERS: str = "TooManyParameters"
PARAMETER_MISSING: str = "ParameterMissing"
PARAMETER_TYPE_MISSING: str = "ParameterTypeMissing"
PARAMETER_TYPE_MISMATCH: str = "ParameterTypeMismatch"
RETURN_TYPE_MISSING: str = "ReturnTypeMissing"
RETURN_TYPE_MISMATCH: str = "ReturnTypeMismatch"
PROPERTY_MISSING: str = "PropertyMissing"
PROPERTY_VISIBILITY_MISMATCH: str = "PropertyVisibilityMismatch"
PROPERTY_TYPE_MISSING: str = "PropertyTypeMissing"
PROPERTY_TYPE_MISMATCH: str = "PropertyTypeMismatch"

ViolationKind = Literal[
    "MethodMissing",
    "VisibilityMismatch",
    "TooManyParameters",
    "ParameterMissing",
    "ParameterTypeMissing",
    "ParameterTypeMismatch",
    "ReturnTypeMissing",
    "ReturnTypeMismatch",
    "PropertyMissing",
    "PropertyVisibilityMismatch",
    "PropertyTypeMissing",
    "PropertyTypeMismatch",
]


@dataclass(frozen=True)
class Violation:
    """One structural mismatch between a contract and a candidate.

    `member` names the contract method or property the mismatch was found on.
    """

    kind: ViolationKind
    member: str
    detail: str

    def __str__(self) -> str:
        return self.detail

    def to_dict(self) -> dict[str, object]:
        return {"kind": self.kind, "member": self.member, "detail": self.detail}
