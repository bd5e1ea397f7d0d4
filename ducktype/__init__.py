"""ducktype - run-time structural conformance checks - public API."""

from __future__ import annotations

from .cache import DescriptorCache
from .check import (
    Checker,
    assert_duck_type,
    check,
    check_type,
    compare,
    conforms,
    default_checker,
)
from .descriptors import (
    MethodDescriptor,
    Named,
    ParameterDescriptor,
    PropertyDescriptor,
    TypeDescriptor,
    TypeRef,
    Union,
    Violation,
    make_union,
    type_name,
)
from .errors import DescriptorError, DuckTypeError, UnknownContractType
from .reflect import Reflector, TypeRegistry, reflect
from .variance import accepts_as_parameter, accepts_as_return, same_type

__all__ = [
    "Checker",
    "DescriptorCache",
    "DescriptorError",
    "DuckTypeError",
    "MethodDescriptor",
    "Named",
    "ParameterDescriptor",
    "PropertyDescriptor",
    "Reflector",
    "TypeDescriptor",
    "TypeRef",
    "TypeRegistry",
    "Union",
    "UnknownContractType",
    "Violation",
    "accepts_as_parameter",
    "accepts_as_return",
    "assert_duck_type",
    "check",
    "check_type",
    "compare",
    "conforms",
    "default_checker",
    "make_union",
    "reflect",
    "same_type",
    "type_name",
]
