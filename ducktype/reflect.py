"""Reflection: build a TypeDescriptor from a live Python class.

Walks the MRO, collecting methods (functions, staticmethods, classmethods),
properties (property objects, class-level annotations, plain attributes) and
their declared types. The bound receiver (self/cls) is never listed as a
parameter. Visibility comes from the member name.

Also owns the name -> class registry behind the nominal subtype relation.
"""

from __future__ import annotations

import abc
import inspect
import sys
import threading
import types
import typing
from typing import Any, ClassVar, TypeVar

from .descriptors import (
    PRIVATE,
    PROTECTED,
    PUBLIC,
    MethodDescriptor,
    Named,
    ParameterDescriptor,
    PropertyDescriptor,
    TypeDescriptor,
    TypeRef,
    Visibility,
    make_union,
)
from .variance import ANY, NONE

# Construction hooks are not part of an instance's shape.
SKIPPED_METHODS: frozenset[str] = frozenset(
    {
        "__init__",
        "__new__",
        "__init_subclass__",
        "__class_getitem__",
        "__post_init__",
        "__subclasshook__",
        "__annotate__",
    }
)

# Bookkeeping that typing and abc store on the classes they build.
_INTERNAL_ATTRIBUTES: frozenset[str] = frozenset(
    {"_is_protocol", "_is_runtime_protocol", "_abc_impl"}
)

_OPAQUE_BASES: tuple[type, ...] = (object, typing.Protocol, typing.Generic, abc.ABC)


def _is_dunder(name: str) -> bool:
    return len(name) > 4 and name.startswith("__") and name.endswith("__")


def member_name(klass: type, raw: str) -> tuple[str, Visibility]:
    """Demangle a class attribute name and classify its visibility."""
    prefix = "_" + klass.__name__.lstrip("_") + "__"
    if raw.startswith(prefix) and not raw.endswith("__"):
        return "__" + raw[len(prefix) :], PRIVATE
    if _is_dunder(raw):
        return raw, PUBLIC
    if raw.startswith("__"):
        return raw, PRIVATE
    if raw.startswith("_"):
        return raw, PROTECTED
    return raw, PUBLIC


def _annotations(obj: Any) -> dict[str, Any]:
    """Annotations as written. Unresolvable ones come back as strings."""
    try:
        return dict(inspect.get_annotations(obj))
    except NameError:
        # Lazily evaluated annotations (3.14+) naming a type-checking-only import.
        import annotationlib

        return dict(annotationlib.get_annotations(obj, format=annotationlib.Format.STRING))


def _split_union(text: str) -> list[str]:
    """Split `A | B[C | D]` on its top-level bars."""
    parts: list[str] = []
    depth = 0
    start = 0
    for i, ch in enumerate(text):
        if ch in "[(":
            depth += 1
        elif ch in "])":
            depth -= 1
        elif ch == "|" and depth == 0:
            parts.append(text[start:i].strip())
            start = i + 1
    parts.append(text[start:].strip())
    return parts


def _evaluate(text: str, globalns: dict[str, Any], localns: dict[str, Any] | None) -> object:
    """Evaluate a string annotation, keeping the text of names that do not resolve.

    Names imported only for type checking stay strings; the rest of a union
    still resolves around them.
    """
    try:
        return eval(text, globalns, localns)
    except (NameError, AttributeError):
        pass
    parts = _split_union(text)
    if len(parts) == 1:
        return text
    members: list[object] = []
    for part in parts:
        members.append(_evaluate(part, globalns, localns))
    return typing.Union[tuple(members)]


# ============================================================
# NOMINAL TYPES
# ============================================================


class TypeRegistry:
    """Maps the type names used in descriptors back to classes.

    Names are unique per class: a second class with an already registered
    qualified name (a redefinition, a class built in a function) is named
    `mod.Cls#2`, so subtype queries always answer about the class the
    descriptor was built from.
    """

    def __init__(self) -> None:
        self._classes: dict[str, type] = {}
        self._names: dict[type, str] = {}
        self._lock: threading.Lock = threading.Lock()

    def name_of(self, cls: type) -> str:
        """Name for a class, remembering it for subtype queries."""
        if cls is type(None):
            return NONE
        name = self._names.get(cls)
        if name is not None:
            return name
        with self._lock:
            name = self._names.get(cls)
            if name is None:
                if cls.__module__ == "builtins":
                    base = cls.__name__
                else:
                    base = cls.__module__ + "." + cls.__qualname__
                name = base
                n = 1
                while name in self._classes:
                    n += 1
                    name = base + "#" + str(n)
                self._classes[name] = cls
                self._names[cls] = name
        return name

    def lookup(self, name: str) -> type | None:
        return self._classes.get(name)

    def is_subtype(self, sub: str, sup: str) -> bool:
        if sub == sup:
            return True
        sub_cls = self._classes.get(sub)
        sup_cls = self._classes.get(sup)
        if sub_cls is None or sup_cls is None:
            return False
        try:
            return issubclass(sub_cls, sup_cls)
        except TypeError:
            # Protocols without @runtime_checkable refuse issubclass().
            return sup_cls in sub_cls.__mro__


# ============================================================
# REFLECTOR
# ============================================================


class Reflector:
    """Turns classes into descriptors."""

    def __init__(self, registry: TypeRegistry | None = None) -> None:
        self.registry: TypeRegistry = registry if registry is not None else TypeRegistry()

    def is_subtype(self, sub: str, sup: str) -> bool:
        return self.registry.is_subtype(sub, sup)

    # ── Type references ───────────────────────────────────────

    def type_ref(self, annotation: object) -> TypeRef | None:
        """Normalize an annotation. Returns None when nothing was declared."""
        if annotation is inspect.Parameter.empty or annotation is ClassVar:
            return None
        origin = typing.get_origin(annotation)
        args = typing.get_args(annotation)
        if origin is typing.Union or origin is types.UnionType:
            return self._union_ref(args)
        if origin is ClassVar or origin is typing.Annotated:
            if len(args) == 0:
                return None
            return self.type_ref(args[0])
        if origin is typing.Literal:
            members: list[TypeRef] = []
            for value in args:
                members.append(Named(name=self._name(type(value))))
            return make_union(members)
        if origin is not None:
            return Named(name=self._name(origin))
        return Named(name=self._name(annotation))

    def _union_ref(self, args: tuple[object, ...]) -> TypeRef:
        has_none = False
        members: list[TypeRef] = []
        for a in args:
            if a is None or a is type(None):
                has_none = True
                continue
            ref = self.type_ref(a)
            if ref is not None:
                members.append(ref)
        if len(members) == 0:
            return Named(name=NONE)
        merged = make_union(members)
        if not has_none:
            return merged
        if isinstance(merged, Named):
            return Named(name=merged.name, nullable=True)
        return make_union([merged, Named(name=NONE, nullable=True)], nullable=True)

    def _name(self, obj: object) -> str:
        if obj is None:
            return NONE
        if obj is Any or isinstance(obj, TypeVar):
            return ANY
        if isinstance(obj, typing.ForwardRef):
            return obj.__forward_arg__
        if isinstance(obj, str):
            return obj
        if isinstance(obj, type):
            return self.registry.name_of(obj)
        return str(obj)

    def _hints(self, obj: Any, localns: dict[str, Any] | None = None) -> dict[str, object]:
        """Resolved annotations. One that cannot be resolved keeps its text."""
        try:
            return typing.get_type_hints(obj)
        except NameError:
            pass
        if isinstance(obj, type):
            module = sys.modules.get(obj.__module__)
            globalns = dict(vars(module)) if module is not None else {}
            localns = dict(vars(obj))
        else:
            globalns = getattr(obj, "__globals__", {})
        hints: dict[str, object] = {}
        for key, value in _annotations(obj).items():
            if isinstance(value, str):
                value = _evaluate(value, globalns, localns)
            hints[key] = value
        return hints

    # ── Members ───────────────────────────────────────────────

    def method(
        self,
        name: str,
        visibility: Visibility,
        func: Any,
        bound: bool,
        localns: dict[str, Any] | None = None,
    ) -> MethodDescriptor:
        """Describe a function; `bound` drops the leading self/cls.

        `localns` is the defining class namespace, used for annotations that
        do not resolve from the module.
        """
        sig = inspect.signature(func)
        hints = self._hints(func, localns)
        params: list[ParameterDescriptor] = []
        skip = bound
        for p in sig.parameters.values():
            if skip:
                skip = False
                continue
            ann = hints.get(p.name, p.annotation)
            params.append(
                ParameterDescriptor(name=p.name, position=len(params), declared_type=self.type_ref(ann))
            )
        ret = hints.get("return", sig.return_annotation)
        return MethodDescriptor(
            name=name,
            visibility=visibility,
            parameters=tuple(params),
            return_type=self.type_ref(ret),
        )

    def _property_type(self, prop: property, localns: dict[str, Any] | None = None) -> TypeRef | None:
        if prop.fget is None:
            return None
        hints = self._hints(prop.fget, localns)
        return self.type_ref(hints.get("return", inspect.Parameter.empty))

    def reflect(self, cls: type) -> TypeDescriptor:
        if not isinstance(cls, type):
            raise TypeError("can only reflect classes, got " + repr(cls))
        methods: list[MethodDescriptor] = []
        properties: list[PropertyDescriptor] = []
        seen: set[str] = set()
        for klass in cls.__mro__:
            if klass in _OPAQUE_BASES:
                continue
            own = _annotations(klass)
            hints = self._hints(klass) if len(own) > 0 else {}
            namespace = dict(vars(klass))
            for raw in own:
                name, vis = member_name(klass, raw)
                if name in seen or _is_dunder(raw) or raw in _INTERNAL_ATTRIBUTES:
                    continue
                ann = hints.get(raw, own[raw])
                properties.append(PropertyDescriptor(name=name, visibility=vis, declared_type=self.type_ref(ann)))
                seen.add(name)
            for raw, value in klass.__dict__.items():
                name, vis = member_name(klass, raw)
                if name in seen or raw in _INTERNAL_ATTRIBUTES:
                    continue
                if isinstance(value, property):
                    properties.append(
                        PropertyDescriptor(name=name, visibility=vis, declared_type=self._property_type(value, namespace))
                    )
                elif isinstance(value, (staticmethod, classmethod)) or inspect.isfunction(value):
                    bound = not isinstance(value, staticmethod)
                    func = value.__func__ if isinstance(value, (staticmethod, classmethod)) else value
                    if raw in SKIPPED_METHODS:
                        continue
                    if _is_dunder(raw) and func.__qualname__ != klass.__qualname__ + "." + raw:
                        continue
                    methods.append(self.method(name, vis, func, bound, namespace))
                elif _is_dunder(raw) or callable(value):
                    continue
                else:
                    properties.append(PropertyDescriptor(name=name, visibility=vis))
                seen.add(name)
        return TypeDescriptor(
            type_name=self.registry.name_of(cls),
            methods=tuple(methods),
            properties=tuple(properties),
        )


_DEFAULT: Reflector = Reflector()


def default_reflector() -> Reflector:
    """The process-wide reflector used by the module-level helpers."""
    return _DEFAULT


def reflect(cls: type) -> TypeDescriptor:
    """Describe a class with the process-wide reflector."""
    return _DEFAULT.reflect(cls)
