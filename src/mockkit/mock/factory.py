"""
Mock factory.

The public entry point for creating mocks and configuring them::

    mock = create_mock(Account)
    install_replacement(mock, "balance", lambda: 40, 1, 1)
    assert mock.balance() == 40
    verify(mock)

Mocks are instances of a generated subclass of the target, so they can be
passed anywhere the target type is expected.
"""

import logging
import types
from typing import Any, Callable

from mockkit.config.loader import load_settings
from mockkit.config.models import MockSettings
from mockkit.errors import ConfigurationError, SourceLocation
from mockkit.mock.dispatch import synthesize
from mockkit.mock.state import MockState, attach_state, find_state, require_state
from mockkit.reflection.descriptors import ClassDescriptor, ConstructorDescriptor
from mockkit.reflection.parameters import arguments_match, describe_arguments
from mockkit.reflection.reflector import describe_callable, get_reflector, resolve_target
from mockkit.signature.codec import encode, find_overloads, is_partial
from mockkit.tracking.tracker import UNBOUNDED, Unbounded

logger = logging.getLogger(__name__)

_mock_classes: dict[tuple[type, bool], type] = {}
_default_settings: MockSettings | None = None


def get_default_settings() -> MockSettings:
    """Settings used when a factory is created without explicit settings."""
    global _default_settings
    if _default_settings is None:
        _default_settings = load_settings()
    return _default_settings


def set_default_settings(settings: MockSettings | None) -> None:
    """Replace the default settings; None reloads them on next use."""
    global _default_settings
    _default_settings = settings


def _mock_init(self, *args, **kwargs):
    mock_class = type(self).__mock_class__
    if find_state(self) is None:
        # Constructed directly rather than through MockFactory.create
        factory = MockFactory(mock_class.__mock_target__)
        attach_state(self, MockState(factory.descriptor, factory.settings, SourceLocation.from_caller()))

    if mock_class.__mock_target__.__init__ is object.__init__:
        # Arguments were consumed by the target's __new__
        super(mock_class, self).__init__()
    else:
        super(mock_class, self).__init__(*args, **kwargs)


def _helper_mock_method(self, name, method, minimum=None, maximum=None, *, signature=None, location=None):
    """Replace ``name`` on this mock (see install_replacement)."""
    return install_replacement(
        self, name, method, minimum, maximum,
        signature=signature, location=location or SourceLocation.from_caller(),
    )


def _helper_disable_parent_methods(self, *, location=None):
    """Stop falling back to the original methods (see disable_fallback)."""
    return disable_fallback(self, location=location or SourceLocation.from_caller())


def _helper_assert_method_calls(self, message=None, *, location=None):
    """Assert call counts are within their bounds (see verify)."""
    verify(self, message, location=location or SourceLocation.from_caller())


_HELPERS = {
    "mock_method": _helper_mock_method,
    "disable_parent_methods": _helper_disable_parent_methods,
    "assert_method_calls": _helper_assert_method_calls,
}


def build_mock_class(descriptor: ClassDescriptor, location: SourceLocation) -> type:
    """
    Create the mock subclass for a described type.

    Raises:
        ConfigurationError: If the target refuses to be subclassed or keeps
            abstract members the mock cannot override
    """
    target = descriptor.target
    namespace = synthesize(descriptor)

    for name, helper in _HELPERS.items():
        if not hasattr(target, name):
            namespace[name] = helper

    namespace["__init__"] = _mock_init
    namespace["__mock_target__"] = target
    namespace["__module__"] = target.__module__
    namespace["__qualname__"] = f"Mock{target.__qualname__}"
    namespace["__doc__"] = f"Mock of {target.__qualname__}."

    try:
        mock_class = types.new_class(
            f"Mock{target.__name__}", (target,), exec_body=lambda ns: ns.update(namespace)
        )
    except TypeError as e:
        error = ConfigurationError("Mock target cannot be subclassed", location)
        error.add_info("Class", target.__qualname__)
        error.add_error("Reason", str(e))
        raise error from e

    # Abstract static and class methods are never overridden
    remaining = sorted(getattr(mock_class, "__abstractmethods__", ()))
    if remaining:
        error = ConfigurationError(
            "Mock target has abstract members that cannot be overridden", location
        )
        error.add_info("Class", target.__qualname__)
        error.add_error("Abstract members", ", ".join(remaining))
        raise error

    mock_class.__mock_class__ = mock_class
    return mock_class


class MockFactory:
    """
    Creates mocks of a single target type.

    Usage:
        factory = MockFactory(Account)
        mock = factory.create()
    """

    def __init__(self, target: Any, settings: MockSettings | None = None):
        """
        Initialize the factory.

        Args:
            target: Class or interface to mock
            settings: Mock defaults (uses the default settings if omitted)

        Raises:
            ConfigurationError: If target cannot be mocked
        """
        location = SourceLocation.from_caller()
        self.settings = settings or get_default_settings()
        self.target = resolve_target(target, location)
        self.descriptor = get_reflector(self.settings.include_protected).describe(self.target, location)

    @property
    def mock_class(self) -> type:
        """The generated subclass, built once per target type."""
        return self._mock_class(SourceLocation.from_caller())

    def _mock_class(self, location: SourceLocation) -> type:
        cache_key = (self.target, self.settings.include_protected)
        if cache_key not in _mock_classes:
            _mock_classes[cache_key] = build_mock_class(self.descriptor, location)
            logger.debug(f"Built mock class for {self.descriptor.name}")
        return _mock_classes[cache_key]

    def match_constructor(
        self, args: tuple, kwargs: dict, location: SourceLocation
    ) -> ConstructorDescriptor:
        """
        Find the constructor overload the arguments target.

        Raises:
            ConfigurationError: If no overload accepts the arguments
        """
        for exact in (True, False):
            for constructor in self.descriptor.constructors:
                if arguments_match(
                    constructor.signature, constructor.parameters, args, kwargs, exact
                ):
                    return constructor

        error = ConfigurationError("Constructor arguments match no overload", location)
        error.add_info("Class", self.descriptor.name)
        error.add_error("Arguments", describe_arguments(args, kwargs))
        error.add_info(
            "Available constructors",
            ", ".join(c.text for c in self.descriptor.constructors),
        )
        raise error

    def create(self, *args: Any, **kwargs: Any) -> Any:
        """
        Create a mock, forwarding the arguments to the matching constructor.

        Raises:
            ConfigurationError: If the arguments match no constructor overload
        """
        return self._create(args, kwargs, SourceLocation.from_caller())

    def _create(self, args: tuple, kwargs: dict, location: SourceLocation) -> Any:
        self.match_constructor(args, kwargs, location)
        mock_class = self._mock_class(location)

        instance = mock_class.__new__(mock_class, *args, **kwargs)
        attach_state(instance, MockState(self.descriptor, self.settings, location))
        if isinstance(instance, mock_class):
            instance.__init__(*args, **kwargs)

        logger.debug(f"Created mock of {self.descriptor.name} at {location}")
        return instance


class Mockable:
    """
    Mixin giving a class a ``get_mock`` constructor for mocks of itself.

    Example:
        class Person(Mockable):
            def get_age(self) -> int:
                return self._age

        gary = Person.get_mock()
        gary.mock_method("get_age", lambda: 40, 1, 1)
    """

    @classmethod
    def get_mock(cls, *args: Any, **kwargs: Any) -> Any:
        """Create a mock of this class (see MockFactory.create)."""
        return MockFactory(cls)._create(args, kwargs, SourceLocation.from_caller())


def create_mock(target: Any, *args: Any, **kwargs: Any) -> Any:
    """Create a mock of ``target`` with the default settings."""
    return MockFactory(target)._create(args, kwargs, SourceLocation.from_caller())


def install_replacement(
    mock: Any,
    name: str,
    replacement: Callable,
    minimum: int | None = None,
    maximum: int | Unbounded | None = None,
    *,
    signature: str | None = None,
    location: SourceLocation | None = None,
) -> str:
    """
    Replace one overload of a method on a mock.

    The overload is chosen by the replacement's own signature: its
    parameter annotations (including passing modes) and return annotation.
    Unannotated parts are filled in from the candidate overloads; the result
    must match exactly one. Pass ``signature`` to name the overload's key
    explicitly instead.

    Args:
        mock: A mock instance
        name: Method name only, no parameters
        replacement: Callable invoked with the call's arguments (not ``self``)
        minimum: Minimum expected calls (settings default if omitted)
        maximum: Maximum expected calls; UNBOUNDED for no limit (settings
            default if omitted)
        signature: Explicit signature key of the overload to replace
        location: Call site for diagnostics (defaults to the caller)

    Returns:
        The signature key the replacement was bound to

    Raises:
        ConfigurationError: If no single overload matches
    """
    location = location or SourceLocation.from_caller()
    state = require_state(mock, location)
    descriptor = state.descriptor

    if not callable(replacement):
        error = ConfigurationError("Replacement is not callable", location)
        error.add_info("Method name", f"{descriptor.name}.{name}")
        error.add_typed_error("Replacement", replacement)
        raise error

    candidates = descriptor.methods_named(name)

    if signature is not None:
        matched = [m for m in candidates if m.key == signature]
        attempted = signature
    else:
        try:
            shape = describe_callable(name, replacement)
        except TypeError as e:
            error = ConfigurationError("Replacement signature cannot be inspected", location)
            error.add_info("Method name", f"{descriptor.name}.{name}")
            error.add_error("Reason", str(e))
            raise error from e
        matched = find_overloads(candidates, shape)
        attempted = encode(shape)

    if len(matched) != 1:
        reason = (
            "Replacement does not match method signature"
            if not matched
            else "Replacement matches more than one overload"
        )
        error = ConfigurationError(reason, location)
        error.add_info("Method name", f"{descriptor.name}.{name}")
        error.add_error("Replacement signature", attempted)
        error.add_info(
            "Available signatures",
            ", ".join(m.key for m in (matched or candidates)) or "none",
        )
        if matched and is_partial(shape):
            error.add_info("Hint", "annotate the replacement or pass signature=")
        raise error

    key = matched[0].key
    settings = state.settings
    if maximum is UNBOUNDED:
        maximum = None
    elif maximum is None:
        maximum = settings.default_maximum_calls
    state.bind(
        key,
        replacement,
        settings.default_minimum_calls if minimum is None else minimum,
        maximum,
        location,
    )
    return key


def disable_fallback(mock: Any, *, location: SourceLocation | None = None) -> bool:
    """
    Make every unreplaced method of the mock fail when called.

    A second call changes nothing and keeps the first call site.

    Returns:
        True if this call disabled fallback
    """
    location = location or SourceLocation.from_caller()
    return require_state(mock, location).disable_fallback(location)


def verify(mock: Any, message: str | None = None, *, location: SourceLocation | None = None) -> None:
    """
    Assert every replaced method was called within its bounds.

    Raises:
        BoundViolationError: For the first out-of-bounds signature found
    """
    location = location or SourceLocation.from_caller()
    state = require_state(mock, location)
    state.tracker.verify(message or state.settings.verify_message, location)


def call_count(mock: Any, signature: str) -> int:
    """Calls recorded for a tracked signature key (0 when untracked)."""
    return require_state(mock, SourceLocation.from_caller()).tracker.count(signature)


def is_mock(obj: Any) -> bool:
    """True for instances created by a MockFactory."""
    return find_state(obj) is not None
