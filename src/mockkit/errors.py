"""
Failure types raised by mockkit.

Every failure is a single structured kind (``MockFailure``) carrying a
message, the source location supplied by the caller, and an ordered list of
labelled fields. Rendering the failure is left to whatever test runner
catches it.
"""

import sys
from dataclasses import dataclass
from typing import Any, NamedTuple


INFO_PREFIX = "ℹ"
EXPECTATION_PREFIX = "✓"
ERROR_PREFIX = "✗"


@dataclass(frozen=True)
class SourceLocation:
    """A file/line pair identifying a call site."""

    file: str
    line: int

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"

    @classmethod
    def from_caller(cls, depth: int = 1) -> "SourceLocation":
        """
        Capture the location of a caller.

        Args:
            depth: How many frames above the function calling this method
                to look (1 = the caller of that function)

        Returns:
            SourceLocation of the selected frame
        """
        frame = sys._getframe(depth + 1)
        return cls(file=frame.f_code.co_filename, line=frame.f_lineno)


class FailureField(NamedTuple):
    """One labelled line of failure detail."""

    prefix: str
    caption: str
    value: Any

    def __str__(self) -> str:
        return f"{self.prefix} {self.caption}: {self.value}"


class MockFailure(AssertionError):
    """
    Base class for every failure raised by the mocking core.

    Derives from AssertionError so test runners report it like any other
    failed assertion.
    """

    def __init__(self, message: str, location: SourceLocation):
        super().__init__(message)
        self.message = message
        self.location = location
        self.fields: list[FailureField] = []

    @property
    def file(self) -> str:
        return self.location.file

    @property
    def line(self) -> int:
        return self.location.line

    @property
    def log(self) -> list[str]:
        """Formatted field lines, in the order they were added."""
        return [str(f) for f in self.fields]

    def field(self, caption: str) -> Any:
        """Return the value of the first field with the given caption."""
        for f in self.fields:
            if f.caption == caption:
                return f.value
        raise KeyError(caption)

    def add_info(self, caption: str, value: Any, prefix: str = INFO_PREFIX) -> "MockFailure":
        self.fields.append(FailureField(prefix, caption, value))
        return self

    def add_typed_info(self, caption: str, value: Any, prefix: str = INFO_PREFIX) -> "MockFailure":
        typed = f"({type(value).__name__}) {value}"
        self.fields.append(FailureField(prefix, caption, typed))
        return self

    def add_expectation(self, caption: str, value: Any) -> "MockFailure":
        return self.add_info(caption, value, EXPECTATION_PREFIX)

    def add_typed_expectation(self, caption: str, value: Any) -> "MockFailure":
        return self.add_typed_info(caption, value, EXPECTATION_PREFIX)

    def add_error(self, caption: str, value: Any) -> "MockFailure":
        return self.add_info(caption, value, ERROR_PREFIX)

    def add_typed_error(self, caption: str, value: Any) -> "MockFailure":
        return self.add_typed_info(caption, value, ERROR_PREFIX)

    def __str__(self) -> str:
        lines = [self.message, f"Location: {self.location}"]
        lines.extend(self.log)
        return "\n".join(lines)


class ConfigurationError(MockFailure):
    """Raised for setup-time misuse of the mocking API."""

    pass


class UnimplementedReplacementError(MockFailure):
    """Raised when a mock method is called with no replacement and no fallback."""

    def __init__(
        self,
        message: str,
        location: SourceLocation,
        type_name: str,
        signature: str,
        fallback_disabled_at: SourceLocation | None = None,
    ):
        super().__init__(message, location)
        self.type_name = type_name
        self.signature = signature
        self.fallback_disabled_at = fallback_disabled_at


class BoundViolationError(MockFailure):
    """Raised by verification when a call count falls outside its bounds."""

    def __init__(
        self,
        message: str,
        location: SourceLocation,
        type_name: str,
        signature: str,
        bound: str,
        expected: int,
        actual: int,
    ):
        super().__init__(message, location)
        self.type_name = type_name
        self.signature = signature
        self.bound = bound
        self.expected = expected
        self.actual = actual
