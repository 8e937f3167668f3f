"""
Immutable descriptors produced by the reflector.

A ClassDescriptor is computed once per target type and shared read-only by
every mock of that type.
"""

import inspect
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping

from mockkit.reflection.modes import PassingMode


@dataclass(frozen=True)
class ParameterDescriptor:
    """
    One parameter of a method or constructor.

    ``mode`` and ``type_name`` are None only for descriptors inferred from an
    unannotated replacement callable, where they are unknown.
    """

    name: str
    mode: PassingMode | None
    type_name: str | None
    kind: inspect._ParameterKind = inspect.Parameter.POSITIONAL_OR_KEYWORD
    has_default: bool = False
    annotation: Any = field(default=Any, compare=False, repr=False)
    qualified_type_name: str | None = field(default=None, compare=False, repr=False)

    @property
    def is_known(self) -> bool:
        return self.mode is not None and self.type_name is not None

    @property
    def text(self) -> str:
        """Mode and type as they appear in a signature key."""
        return self.render()

    def render(self, qualified: bool = False) -> str:
        """Key text, with module-qualified class names when ``qualified``."""
        if not self.is_known:
            return "?"
        name = self.type_name
        if qualified and self.qualified_type_name is not None:
            name = self.qualified_type_name
        if self.kind == inspect.Parameter.VAR_POSITIONAL:
            star = "*"
        elif self.kind == inspect.Parameter.VAR_KEYWORD:
            star = "**"
        else:
            star = ""
        return f"{self.mode.prefix}{star}{name}"


@dataclass(frozen=True)
class MethodDescriptor:
    """A single overridable method, or one variant of an overload set."""

    name: str
    parameters: tuple[ParameterDescriptor, ...]
    return_type: str | None
    visibility: str = "public"
    qualifiers: frozenset[str] = frozenset()
    final: bool = False
    key: str = ""
    owner: type | None = field(default=None, compare=False, repr=False)
    implementation: Callable | None = field(default=None, compare=False, repr=False)
    qualified_return_type: str | None = field(default=None, compare=False, repr=False)
    signature: inspect.Signature | None = field(default=None, compare=False, repr=False)

    @property
    def is_property(self) -> bool:
        return "property" in self.qualifiers

    @property
    def is_abstract(self) -> bool:
        return "abstract" in self.qualifiers


@dataclass(frozen=True)
class ConstructorDescriptor:
    """One constructor overload of a target type."""

    parameters: tuple[ParameterDescriptor, ...]
    implementation: Callable | None = field(default=None, compare=False, repr=False)
    signature: inspect.Signature | None = field(default=None, compare=False, repr=False)

    @property
    def text(self) -> str:
        return f"__init__({', '.join(p.text for p in self.parameters)})"


@dataclass(frozen=True)
class ClassDescriptor:
    """Everything the mock machinery needs to know about a target type."""

    target: type
    methods: tuple[MethodDescriptor, ...]
    constructors: tuple[ConstructorDescriptor, ...]
    members: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}), compare=False, repr=False)

    @property
    def name(self) -> str:
        return self.target.__name__

    @property
    def keys(self) -> list[str]:
        return [m.key for m in self.methods]

    def methods_named(self, name: str) -> list[MethodDescriptor]:
        return [m for m in self.methods if m.name == name]

    def method(self, key: str) -> MethodDescriptor | None:
        for m in self.methods:
            if m.key == key:
                return m
        return None
