"""
Reflector.

Enumerates the overridable methods and constructors of a type into
immutable descriptors. Descriptors are computed once per type and cached.
"""

import inspect
import logging
from collections import Counter
from dataclasses import replace
from types import MappingProxyType
from typing import Any, Callable, get_origin

from mockkit.errors import ConfigurationError, SourceLocation
from mockkit.reflection.descriptors import (
    ClassDescriptor,
    ConstructorDescriptor,
    MethodDescriptor,
)
from mockkit.reflection.overloads import Overloads
from mockkit.reflection.parameters import (
    describe_parameters,
    return_type_name,
    signature_of,
)
from mockkit.signature.codec import encode

logger = logging.getLogger(__name__)


def is_final(member: Any) -> bool:
    """True for members marked with ``typing.final``."""
    return bool(getattr(member, "__final__", False))


def _is_special(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


def _is_private(owner: type, name: str) -> bool:
    """Name-mangled ``__name`` attributes are private to their class."""
    return name.startswith(f"_{owner.__name__.lstrip('_')}__")


def _qualifiers(func: Callable, extra: tuple[str, ...] = ()) -> frozenset[str]:
    qualifiers = set(extra)
    if getattr(func, "__isabstractmethod__", False):
        qualifiers.add("abstract")
    if inspect.iscoroutinefunction(func):
        qualifiers.add("coroutine")
    if inspect.isgeneratorfunction(func) or inspect.isasyncgenfunction(func):
        qualifiers.add("generator")
    return frozenset(qualifiers)


def describe_function(
    name: str,
    func: Callable,
    owner: type | None = None,
    visibility: str = "public",
    extra_qualifiers: tuple[str, ...] = (),
) -> MethodDescriptor:
    """Describe a method defined on a class (first parameter is ``self``)."""
    signature, parameters = describe_parameters(signature_of(func), skip_first=True)
    descriptor = MethodDescriptor(
        name=name,
        parameters=parameters,
        return_type=return_type_name(signature),
        qualified_return_type=return_type_name(signature, qualified=True),
        visibility=visibility,
        qualifiers=_qualifiers(func, extra_qualifiers),
        final=is_final(func),
        owner=owner,
        implementation=func,
        signature=signature,
    )
    return replace(descriptor, key=encode(descriptor))


def describe_callable(name: str, func: Callable) -> MethodDescriptor:
    """
    Infer the shape of a replacement callable.

    Unannotated parameters and an unannotated return type are unknown, so
    the result may be partial.
    """
    try:
        raw = signature_of(func)
    except (TypeError, ValueError) as e:
        raise TypeError(f"Cannot inspect replacement for '{name}': {e}") from e

    signature, parameters = describe_parameters(raw, inferred=True)
    descriptor = MethodDescriptor(
        name=name,
        parameters=parameters,
        return_type=return_type_name(signature, inferred=True),
        qualified_return_type=return_type_name(signature, inferred=True, qualified=True),
        implementation=func,
        signature=signature,
    )
    return replace(descriptor, key=encode(descriptor))


def _describe_member(
    name: str,
    member: Any,
    owner: type,
    visibility: str,
) -> list[MethodDescriptor]:
    """Descriptors for one class attribute; empty when it is not mockable."""
    if isinstance(member, (staticmethod, classmethod)) or is_final(member):
        return []

    if isinstance(member, Overloads):
        return [
            describe_function(name, func, owner, visibility)
            for func in member.variants
            if not is_final(func)
        ]

    if isinstance(member, property):
        if member.fget is None or is_final(member.fget):
            return []
        return [describe_function(name, member.fget, owner, visibility, ("property",))]

    if inspect.isfunction(member):
        return [describe_function(name, member, owner, visibility)]

    return []


def _lookup(target: type, name: str) -> tuple[type, Any]:
    """Find the most-derived definition of ``name`` along the MRO."""
    for klass in target.__mro__:
        if name in vars(klass):
            return klass, vars(klass)[name]
    return object, getattr(object, name)


def _describe_constructor(func: Callable, skip_first: bool = True) -> ConstructorDescriptor:
    signature, parameters = describe_parameters(signature_of(func), skip_first=skip_first)
    return ConstructorDescriptor(parameters=parameters, implementation=func, signature=signature)


def describe_constructors(target: type) -> tuple[ConstructorDescriptor, ...]:
    """Constructor overloads of ``target``, most-derived ``__init__`` first."""
    _, init = _lookup(target, "__init__")

    if isinstance(init, Overloads):
        return tuple(_describe_constructor(func) for func in init.variants)
    if inspect.isfunction(init):
        return (_describe_constructor(init),)

    _, new = _lookup(target, "__new__")
    if isinstance(new, staticmethod):
        new = new.__func__
    if inspect.isfunction(new):
        return (_describe_constructor(new),)

    if init is object.__init__ and new is object.__new__:
        return (ConstructorDescriptor(parameters=(), signature=inspect.Signature()),)

    # Extension types: accept whatever the type's own signature reports
    try:
        signature, parameters = describe_parameters(inspect.signature(target))
    except (TypeError, ValueError):
        signature, parameters = describe_parameters(
            inspect.Signature(
                [
                    inspect.Parameter("args", inspect.Parameter.VAR_POSITIONAL),
                    inspect.Parameter("kwargs", inspect.Parameter.VAR_KEYWORD),
                ]
            )
        )
    return (ConstructorDescriptor(parameters=parameters, signature=signature),)


class Reflector:
    """
    Builds and caches ClassDescriptors.

    Usage:
        reflector = Reflector()
        descriptor = reflector.describe(Account)
        for method in descriptor.methods:
            print(method.key)
    """

    def __init__(self, include_protected: bool = True):
        self.include_protected = include_protected
        self._cache: dict[type, ClassDescriptor] = {}

    def describe(self, target: Any, location: SourceLocation | None = None) -> ClassDescriptor:
        """
        Describe a class or interface.

        Args:
            target: The class to describe (parameterised generics are
                described through their origin class)
            location: Call site reported in configuration errors

        Returns:
            The cached ClassDescriptor for the type

        Raises:
            ConfigurationError: If target is not a class, is sealed, or
                declares two overloads with the same signature key
        """
        location = location or SourceLocation.from_caller()
        target = resolve_target(target, location)

        cached = self._cache.get(target)
        if cached is not None:
            return cached

        descriptor = self._build(target, location)
        self._cache[target] = descriptor
        logger.debug(
            f"Described {descriptor.name}: {len(descriptor.methods)} methods, "
            f"{len(descriptor.constructors)} constructors"
        )
        return descriptor

    def _build(self, target: type, location: SourceLocation) -> ClassDescriptor:
        seen: set[str] = set()
        methods: list[MethodDescriptor] = []
        members: dict[str, Any] = {}

        for klass in target.__mro__:
            if klass is object:
                continue

            for name, member in vars(klass).items():
                # The most-derived definition wins, even when it is not mockable
                if name in seen:
                    continue
                seen.add(name)

                if _is_special(name) or _is_private(klass, name):
                    continue

                visibility = "protected" if name.startswith("_") else "public"
                if visibility == "protected" and not self.include_protected:
                    continue

                described = _describe_member(name, member, klass, visibility)
                if described:
                    methods.extend(described)
                    members[name] = member

        methods = _qualify_colliding(methods)

        keys: dict[str, MethodDescriptor] = {}
        for method in methods:
            if method.key in keys:
                error = ConfigurationError("Duplicate overload signature", location)
                error.add_info("Class", target.__qualname__)
                error.add_error("Signature", method.key)
                raise error
            keys[method.key] = method

        return ClassDescriptor(
            target=target,
            methods=tuple(methods),
            constructors=describe_constructors(target),
            members=MappingProxyType(members),
        )


def _qualify_colliding(methods: list[MethodDescriptor]) -> list[MethodDescriptor]:
    """
    Re-key methods whose short keys collide with module-qualified class names.

    ``put(shop.books.Item)`` and ``put(shop.music.Item)`` both encode to
    ``None:put(Item)``; only those methods get the longer keys.
    """
    counts = Counter(m.key for m in methods)
    return [
        replace(m, key=encode(m, qualified=True)) if counts[m.key] > 1 else m
        for m in methods
    ]


def resolve_target(target: Any, location: SourceLocation) -> type:
    """Reduce ``target`` to a mockable class or raise ConfigurationError."""
    origin = get_origin(target)
    if origin is not None and inspect.isclass(origin):
        target = origin

    if not inspect.isclass(target):
        error = ConfigurationError("Mock target is not a class or interface", location)
        error.add_typed_error("Target", target)
        raise error

    if is_final(target):
        error = ConfigurationError("Mock target is sealed and cannot be subclassed", location)
        error.add_info("Class", target.__qualname__)
        raise error

    return target


_default_reflectors: dict[bool, Reflector] = {}


def get_reflector(include_protected: bool = True) -> Reflector:
    """Shared reflector for the given member selection."""
    if include_protected not in _default_reflectors:
        _default_reflectors[include_protected] = Reflector(include_protected=include_protected)
    return _default_reflectors[include_protected]


def describe(target: Any, include_protected: bool = True) -> ClassDescriptor:
    """Describe ``target`` with the shared reflector."""
    return get_reflector(include_protected).describe(target, SourceLocation.from_caller())
