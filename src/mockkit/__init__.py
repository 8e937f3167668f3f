"""
mockkit - substitute objects for unit tests.

Creates mocks of arbitrary classes whose methods can be replaced per
overload, counted, verified against call bounds, and optionally made to fail
when no replacement is installed.
"""

from mockkit.errors import (
    BoundViolationError,
    ConfigurationError,
    FailureField,
    MockFailure,
    SourceLocation,
    UnimplementedReplacementError,
)
from mockkit.reflection.modes import LAZY, OUT, REF, Lazy, Out, PassingMode, Ref
from mockkit.reflection.overloads import Overloads, overloaded
from mockkit.reflection.reflector import Reflector, describe
from mockkit.signature.codec import encode
from mockkit.tracking.tracker import UNBOUNDED, CallCounter, CallTracker
from mockkit.config.models import MockSettings
from mockkit.config.loader import SettingsError, load_settings
from mockkit.mock.factory import (
    MockFactory,
    Mockable,
    call_count,
    create_mock,
    disable_fallback,
    install_replacement,
    is_mock,
    set_default_settings,
    verify,
)

__version__ = "1.0.0"

__all__ = [
    "BoundViolationError",
    "CallCounter",
    "CallTracker",
    "ConfigurationError",
    "FailureField",
    "LAZY",
    "Lazy",
    "MockFactory",
    "MockFailure",
    "MockSettings",
    "Mockable",
    "OUT",
    "Out",
    "Overloads",
    "PassingMode",
    "REF",
    "Ref",
    "Reflector",
    "SettingsError",
    "SourceLocation",
    "UNBOUNDED",
    "UnimplementedReplacementError",
    "call_count",
    "create_mock",
    "describe",
    "disable_fallback",
    "encode",
    "install_replacement",
    "is_mock",
    "load_settings",
    "overloaded",
    "set_default_settings",
    "verify",
]
