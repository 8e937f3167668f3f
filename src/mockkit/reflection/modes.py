"""
Parameter passing modes.

A parameter's passing mode is declared through ``typing.Annotated``::

    def update(self, total: Annotated[int, REF]) -> None: ...

and is part of the identity of an overload. At call time the mode is
selected by the argument's wrapper: ``Ref`` for by-reference, ``Out`` for
output-only, ``Lazy`` for deferred evaluation, and a plain value otherwise.
"""

from enum import Enum
from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")


class PassingMode(str, Enum):
    """How an argument is handed to a method."""

    VALUE = "value"
    REFERENCE = "ref"
    OUTPUT = "out"
    LAZY = "lazy"

    @property
    def prefix(self) -> str:
        """Text placed before the type name in a signature key."""
        if self is PassingMode.VALUE:
            return ""
        return f"{self.value} "


REF = PassingMode.REFERENCE
OUT = PassingMode.OUTPUT
LAZY = PassingMode.LAZY


class Ref(Generic[T]):
    """A mutable cell passed to a by-reference parameter."""

    __slots__ = ("value",)

    def __init__(self, value: T):
        self.value = value

    def __repr__(self) -> str:
        return f"Ref({self.value!r})"


class Out(Generic[T]):
    """A cell the callee fills in for an output-only parameter."""

    __slots__ = ("value",)

    def __init__(self) -> None:
        self.value: T | None = None

    def __repr__(self) -> str:
        return f"Out({self.value!r})"


class Lazy(Generic[T]):
    """A deferred argument; the expression is evaluated on every call."""

    __slots__ = ("_thunk",)

    def __init__(self, thunk: Callable[[], T]):
        if not callable(thunk):
            raise TypeError("Lazy expects a zero-argument callable")
        self._thunk = thunk

    def __call__(self) -> T:
        return self._thunk()

    def __repr__(self) -> str:
        return f"Lazy({self._thunk!r})"


def mode_of_argument(value: Any) -> PassingMode:
    """Return the passing mode an argument was supplied with."""
    if isinstance(value, Ref):
        return PassingMode.REFERENCE
    if isinstance(value, Out):
        return PassingMode.OUTPUT
    if isinstance(value, Lazy):
        return PassingMode.LAZY
    return PassingMode.VALUE
