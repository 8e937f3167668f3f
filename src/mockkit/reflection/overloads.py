"""
Overloaded methods.

Python has one attribute per name, so overloads are declared explicitly::

    class Box:
        @overloaded
        def set(self, value: int) -> str:
            ...

        @set.variant
        def set(self, value: str) -> str:
            ...

A call picks the first variant, in declaration order, whose parameters
declare exactly the runtime types of the arguments; failing that, the first
variant that accepts them by arity, passing mode and runtime type.
"""

import inspect
import types
from typing import Any, Callable

from mockkit.reflection.descriptors import ParameterDescriptor
from mockkit.reflection.parameters import (
    arguments_match,
    describe_arguments,
    describe_parameters,
    signature_of,
)


class Overloads:
    """A descriptor holding every variant of an overloaded method."""

    def __init__(self, func: Callable):
        self._variants: list[Callable] = [func]
        self._shapes: list[tuple[inspect.Signature, tuple[ParameterDescriptor, ...]]] | None = None
        self.__name__ = func.__name__
        self.__qualname__ = func.__qualname__
        self.__doc__ = func.__doc__
        self.__module__ = func.__module__
        self.owner: type | None = None

    def variant(self, func: Callable) -> "Overloads":
        """Add another variant; returns the same overload set."""
        if func.__name__ != self.__name__:
            raise TypeError(
                f"Variant '{func.__name__}' does not share the name '{self.__name__}'"
            )
        self._variants.append(func)
        self._shapes = None
        return self

    @property
    def variants(self) -> tuple[Callable, ...]:
        return tuple(self._variants)

    def shapes(self) -> list[tuple[inspect.Signature, tuple[ParameterDescriptor, ...]]]:
        """Signature (without ``self``) and parameters of every variant."""
        if self._shapes is None:
            self._shapes = [
                describe_parameters(signature_of(func), skip_first=True)
                for func in self._variants
            ]
        return self._shapes

    def resolve(self, args: tuple, kwargs: dict) -> Callable:
        """
        Pick the variant a call targets.

        A variant whose declared classes are exactly the argument types wins
        over one that merely accepts them, so ``f(True)`` reaches
        ``f(bool)`` even when ``f(int)`` is declared first.

        Raises:
            TypeError: If no variant accepts the arguments
        """
        candidates = list(zip(self._variants, self.shapes()))
        for exact in (True, False):
            for func, (signature, parameters) in candidates:
                if arguments_match(signature, parameters, args, kwargs, exact):
                    return func

        raise TypeError(
            f"No overload of {self.__qualname__} accepts arguments "
            f"{describe_arguments(args, kwargs)}"
        )

    def __set_name__(self, owner: type, name: str) -> None:
        self.owner = owner

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return types.MethodType(self, instance)

    def __call__(self, instance: Any, *args: Any, **kwargs: Any) -> Any:
        return self.resolve(args, kwargs)(instance, *args, **kwargs)

    def __repr__(self) -> str:
        return f"<overloaded {self.__qualname__} ({len(self._variants)} variants)>"


def overloaded(func: Callable) -> Overloads:
    """Start an overload set with ``func`` as its first variant."""
    return Overloads(func)
