"""
Call tracking for mock instances.

Each mock owns one CallTracker. Counters exist only for signatures that had
a replacement bound; calls to any other method are never counted.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from mockkit.errors import BoundViolationError, ConfigurationError, SourceLocation

logger = logging.getLogger(__name__)

DEFAULT_VERIFY_MESSAGE = "Failed asserting call count"


class Unbounded:
    """Marker type of ``UNBOUNDED``, an explicit "no maximum" for a replacement."""

    def __repr__(self) -> str:
        return "UNBOUNDED"


UNBOUNDED = Unbounded()


@dataclass
class CallCounter:
    """Expected bounds and observed count for one signature."""

    minimum: int = 0
    maximum: int | None = None  # None means unbounded
    actual: int = 0

    def violation(self) -> str | None:
        """Name of the violated bound, if any."""
        if self.actual < self.minimum:
            return "minimum"
        if self.maximum is not None and self.actual > self.maximum:
            return "maximum"
        return None


class CallTracker:
    """Per-instance call counters keyed by signature."""

    def __init__(self, type_name: str):
        self.type_name = type_name
        self._counters: dict[str, CallCounter] = {}

    @property
    def counters(self) -> Mapping[str, CallCounter]:
        return MappingProxyType(self._counters)

    def bind(
        self,
        key: str,
        minimum: int = 0,
        maximum: int | None = None,
        location: SourceLocation | None = None,
    ) -> CallCounter:
        """
        Install bounds for a signature, resetting its count.

        Raises:
            ConfigurationError: If the bounds are negative or inverted
        """
        if minimum < 0 or (maximum is not None and maximum < minimum):
            error = ConfigurationError(
                "Invalid call count bounds", location or SourceLocation.from_caller()
            )
            error.add_info("Method", f"{self.type_name}.{key}")
            error.add_error("Minimum allowed calls", minimum)
            error.add_error("Maximum allowed calls", "unbounded" if maximum is None else maximum)
            raise error

        counter = CallCounter(minimum=minimum, maximum=maximum)
        self._counters[key] = counter
        return counter

    def record(self, key: str) -> None:
        """Count one call; untracked signatures are ignored."""
        counter = self._counters.get(key)
        if counter is not None:
            counter.actual += 1

    def count(self, key: str) -> int:
        """Observed calls for a signature (0 when untracked)."""
        counter = self._counters.get(key)
        return counter.actual if counter is not None else 0

    def verify(
        self,
        message: str = DEFAULT_VERIFY_MESSAGE,
        location: SourceLocation | None = None,
    ) -> None:
        """
        Check every tracked signature against its bounds.

        Raises:
            BoundViolationError: For the first violation found
        """
        for key, counter in self._counters.items():
            bound = counter.violation()
            if bound is None:
                continue

            expected = counter.minimum if bound == "minimum" else counter.maximum
            error = BoundViolationError(
                message,
                location or SourceLocation.from_caller(),
                type_name=self.type_name,
                signature=key,
                bound=bound,
                expected=expected,
                actual=counter.actual,
            )
            error.add_info("Method", f"{self.type_name}.{key}")
            error.add_expectation(f"{bound.capitalize()} allowed calls", expected)
            error.add_error("Actual calls", counter.actual)
            logger.debug(f"Call count violation for {self.type_name}.{key}: {counter}")
            raise error
