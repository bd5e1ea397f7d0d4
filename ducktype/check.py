"""Structural compatibility checker - does a candidate duck-type as a contract?"""

from __future__ import annotations

import importlib
import types

from .cache import DescriptorCache
from .descriptors import TypeDescriptor, Violation
from .errors import DuckTypeError, UnknownContractType
from .members import MemberChecker
from .reflect import Reflector, default_reflector
from .variance import SubtypeOracle

_NOT_CONTRACTS: tuple[type, ...] = (
    types.ModuleType,
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
)


# ============================================================
# CORE COMPARISON
# ============================================================


def compare(
    contract: TypeDescriptor,
    candidate: TypeDescriptor,
    is_subtype: SubtypeOracle,
    strict_any: bool = False,
    strict_returns: bool = False,
) -> list[Violation]:
    """Compare two descriptors. Returns every violation found (empty = ok).

    Methods are checked before properties, each in contract order.
    """
    checker = MemberChecker(candidate, is_subtype, strict_any, strict_returns)
    for method in contract.methods:
        checker.check_method(method)
    for prop in contract.properties:
        checker.check_property(prop)
    return checker.violations


# ============================================================
# CONTRACT RESOLUTION
# ============================================================


def import_type(ref: str) -> type:
    """Import a class from `pkg.mod.Cls` or `pkg.mod:Outer.Inner`."""
    if ":" in ref:
        module_name, _, attr_path = ref.partition(":")
    else:
        module_name, _, attr_path = ref.rpartition(".")
    if module_name == "" or attr_path == "":
        raise UnknownContractType(ref, "expected a module-qualified class name")
    try:
        obj: object = importlib.import_module(module_name)
    except ImportError as e:
        raise UnknownContractType(ref, str(e)) from e
    for part in attr_path.split("."):
        if not hasattr(obj, part):
            raise UnknownContractType(ref, "'" + module_name + "' has no attribute '" + attr_path + "'")
        obj = getattr(obj, part)
    if not isinstance(obj, type):
        raise UnknownContractType(ref, "not a class")
    return obj


# ============================================================
# CHECKER
# ============================================================


class Checker:
    """Checks candidates against contracts, caching descriptors per class."""

    def __init__(
        self,
        reflector: Reflector | None = None,
        cache: DescriptorCache | None = None,
        strict_any: bool = False,
        strict_returns: bool = False,
    ) -> None:
        self.reflector: Reflector = reflector if reflector is not None else default_reflector()
        self.cache: DescriptorCache = cache if cache is not None else DescriptorCache()
        self.strict_any: bool = strict_any
        self.strict_returns: bool = strict_returns

    def resolve_contract(self, contract: object) -> type:
        """Resolve a class, an instance or a class name to the contract class."""
        if isinstance(contract, type):
            return contract
        if isinstance(contract, str):
            return import_type(contract)
        if contract is None or isinstance(contract, _NOT_CONTRACTS):
            raise UnknownContractType(repr(contract), "not a class or instance")
        return type(contract)

    def descriptor(self, cls: type) -> TypeDescriptor:
        return self.cache.get_or_build(cls, self.reflector.reflect)

    def check_type(self, candidate: type, contract: object) -> list[Violation]:
        """Check a candidate class against a contract."""
        contract_cls = self.resolve_contract(contract)
        expected = self.descriptor(contract_cls)
        actual = self.descriptor(candidate)
        return compare(
            expected, actual, self.reflector.is_subtype, self.strict_any, self.strict_returns
        )

    def check(self, candidate: object, contract: object) -> list[Violation]:
        """Check a candidate value against a contract."""
        return self.check_type(type(candidate), contract)


# ============================================================
# PUBLIC API
# ============================================================

_DEFAULT: Checker = Checker()


def default_checker() -> Checker:
    return _DEFAULT


def check(candidate: object, contract: object) -> list[Violation]:
    """Check a value against a contract. Returns a list of violations (empty = ok)."""
    return _DEFAULT.check(candidate, contract)


def check_type(candidate: type, contract: object) -> list[Violation]:
    """Check a class against a contract. Returns a list of violations (empty = ok)."""
    return _DEFAULT.check_type(candidate, contract)


def conforms(candidate: object, contract: object) -> bool:
    return len(_DEFAULT.check(candidate, contract)) == 0


def assert_duck_type(candidate: object, contract: object) -> bool:
    """Raise DuckTypeError listing every violation unless the value conforms."""
    violations = _DEFAULT.check(candidate, contract)
    if len(violations) > 0:
        raise DuckTypeError(violations)
    return True
