"""
Per-instance mock state.

Holds the replacement table, the call tracker and the fallback flag of a
single mock. The state lives in the instance ``__dict__`` and is private to
the test that created the mock.
"""

import logging
from typing import Any, Callable

from mockkit.config.models import MockSettings
from mockkit.errors import ConfigurationError, SourceLocation
from mockkit.reflection.descriptors import ClassDescriptor
from mockkit.tracking.tracker import CallTracker

logger = logging.getLogger(__name__)

STATE_ATTR = "_mockkit_state"


class MockState:
    """Mutable state of one mock instance."""

    def __init__(
        self,
        descriptor: ClassDescriptor,
        settings: MockSettings,
        created_at: SourceLocation,
    ):
        self.descriptor = descriptor
        self.settings = settings
        self.created_at = created_at
        self.tracker = CallTracker(descriptor.name)
        self.replacements: dict[str, Callable] = {}
        self.fallback_enabled = True
        self.fallback_disabled_at: SourceLocation | None = None

        if not settings.fallback_enabled:
            self.disable_fallback(created_at)

    @property
    def type_name(self) -> str:
        return self.descriptor.name

    def bind(
        self,
        key: str,
        replacement: Callable,
        minimum: int,
        maximum: int | None,
        location: SourceLocation,
    ) -> None:
        """Store a replacement and (re)start tracking its signature."""
        self.tracker.bind(key, minimum, maximum, location)
        self.replacements[key] = replacement
        logger.info(
            f"Installed replacement for {self.type_name}.{key} "
            f"(calls: {minimum}..{'unbounded' if maximum is None else maximum})"
        )

    def disable_fallback(self, location: SourceLocation) -> bool:
        """
        Stop forwarding unreplaced calls to the original methods.

        The flag changes at most once; later calls keep the first call site.

        Returns:
            True if this call disabled fallback
        """
        if not self.fallback_enabled:
            logger.debug(
                f"Fallback for {self.type_name} mock already disabled at {self.fallback_disabled_at}"
            )
            return False

        self.fallback_enabled = False
        self.fallback_disabled_at = location
        logger.info(f"Disabled fallback for {self.type_name} mock at {location}")
        return True


def attach_state(instance: Any, state: MockState) -> None:
    object.__getattribute__(instance, "__dict__")[STATE_ATTR] = state


def find_state(instance: Any) -> MockState | None:
    """The MockState of ``instance``, or None if it is not a mock."""
    try:
        namespace = object.__getattribute__(instance, "__dict__")
    except AttributeError:
        return None
    return namespace.get(STATE_ATTR)


def require_state(instance: Any, location: SourceLocation) -> MockState:
    """
    The MockState of ``instance``.

    Raises:
        ConfigurationError: If ``instance`` is not a mock
    """
    state = find_state(instance)
    if state is None:
        error = ConfigurationError("Object is not a mock instance", location)
        error.add_info("Type", type(instance).__qualname__)
        raise error
    return state
