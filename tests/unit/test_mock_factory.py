"""
Unit tests for the mock factory.

Tests for:
- Creating mocks and matching constructors
- Installing replacements and verifying call counts
- Fallback control and settings defaults
"""

from abc import ABC, abstractmethod
from typing import final

import pytest

from mockkit import (
    BoundViolationError,
    ConfigurationError,
    MockFactory,
    Mockable,
    MockSettings,
    SourceLocation,
    UNBOUNDED,
    UnimplementedReplacementError,
    call_count,
    create_mock,
    disable_fallback,
    install_replacement,
    is_mock,
    overloaded,
    set_default_settings,
    verify,
)


class Account:
    def __init__(self, owner: str):
        self.owner = owner

    def balance(self) -> int:
        return 100

    def deposit(self, amount: int) -> None:
        pass

    def _audit(self) -> str:
        return "audit"


class Person(Mockable):
    @overloaded
    def __init__(self) -> None:
        self.name = ""
        self.age = 0

    @__init__.variant
    def __init__(self, name: str, age: int) -> None:
        self.name = name
        self.age = age

    def get_age(self) -> int:
        return self.age


class Shape:
    @overloaded
    def scale(self, factor: int) -> int:
        return factor

    @scale.variant
    def scale(self, factor: float) -> int:
        return int(factor)


BookItem = type("Item", (), {"__module__": "shop.books"})
MusicItem = type("Item", (), {"__module__": "shop.music"})


class Store:
    @overloaded
    def put(self, item: BookItem) -> str:
        return "book"

    @put.variant
    def put(self, item: MusicItem) -> str:
        return "music"


class Factory(ABC):
    @staticmethod
    @abstractmethod
    def build() -> "Factory":
        ...

    @abstractmethod
    def name(self) -> str:
        ...


class HasHelper:
    def mock_method(self) -> str:
        return "own"


# =============================================================================
# Creation
# =============================================================================


class TestCreateMock:
    """Test mock construction."""

    def test_mock_is_instance_of_target(self):
        mock = create_mock(Account, "ann")

        assert isinstance(mock, Account)
        assert is_mock(mock)
        assert mock.owner == "ann"
        assert type(mock).__name__ == "MockAccount"

    def test_real_object_is_not_mock(self):
        assert not is_mock(Account("ann"))

    def test_mock_class_is_reused(self):
        factory = MockFactory(Account)

        assert factory.mock_class is MockFactory(Account).mock_class
        assert type(factory.create("a")) is type(factory.create("b"))

    def test_constructor_mismatch(self):
        with pytest.raises(ConfigurationError) as exc_info:
            create_mock(Account, 1, 2)

        error = exc_info.value
        assert error.message == "Constructor arguments match no overload"
        assert error.field("Arguments") == "(int, int)"
        assert error.field("Available constructors") == "__init__(str)"
        assert error.file == __file__

    def test_overloaded_constructor(self):
        default = Person.get_mock()
        named = Person.get_mock("gary", 40)

        assert default.age == 0
        assert named.name == "gary"
        assert named.age == 40

    def test_non_class_target(self):
        with pytest.raises(ConfigurationError, match="not a class"):
            create_mock("Account")

    def test_sealed_target(self):
        @final
        class Closed:
            pass

        with pytest.raises(ConfigurationError, match="sealed"):
            create_mock(Closed)

    def test_builtin_that_refuses_subclassing(self):
        with pytest.raises(ConfigurationError) as exc_info:
            create_mock(bool)

        assert exc_info.value.message == "Mock target cannot be subclassed"

    def test_abstract_static_method_is_reported(self):
        with pytest.raises(ConfigurationError) as exc_info:
            create_mock(Factory)

        error = exc_info.value
        assert error.message == "Mock target has abstract members that cannot be overridden"
        assert error.field("Class") == "Factory"
        assert error.field("Abstract members") == "build"


# =============================================================================
# Replacements
# =============================================================================


class TestInstallReplacement:
    """Test binding replacements to overloads."""

    def test_returns_bound_key(self):
        mock = create_mock(Account, "ann")

        assert install_replacement(mock, "balance", lambda: 40, 1, 1) == "int:balance()"

    def test_unknown_method(self):
        mock = create_mock(Account, "ann")

        with pytest.raises(ConfigurationError) as exc_info:
            install_replacement(mock, "withdraw", lambda amount: None)

        error = exc_info.value
        assert error.message == "Replacement does not match method signature"
        assert error.field("Method name") == "Account.withdraw"
        assert error.field("Available signatures") == "none"

    def test_signature_mismatch(self):
        mock = create_mock(Account, "ann")

        def replacement(amount: str) -> None:
            pass

        with pytest.raises(ConfigurationError) as exc_info:
            install_replacement(mock, "deposit", replacement)

        error = exc_info.value
        assert error.field("Replacement signature") == "None:deposit(str)"
        assert error.field("Available signatures") == "None:deposit(int)"

    def test_ambiguous_replacement(self):
        mock = create_mock(Shape)

        with pytest.raises(ConfigurationError) as exc_info:
            install_replacement(mock, "scale", lambda factor: 1)

        error = exc_info.value
        assert error.message == "Replacement matches more than one overload"
        assert error.field("Available signatures") == "int:scale(int), int:scale(float)"
        assert "signature=" in error.field("Hint")

    def test_annotation_disambiguates(self):
        mock = create_mock(Shape)

        def replacement(factor: float) -> int:
            return 99

        assert install_replacement(mock, "scale", replacement) == "int:scale(float)"
        assert mock.scale(2.5) == 99
        assert mock.scale(2) == 2

    def test_equally_named_parameter_classes(self):
        mock = create_mock(Store)

        def replacement(item: MusicItem) -> str:
            return "replaced"

        assert install_replacement(mock, "put", replacement) == "str:put(shop.music.Item)"
        assert mock.put(MusicItem()) == "replaced"
        assert mock.put(BookItem()) == "book"

    def test_equally_named_parameter_classes_need_annotation(self):
        mock = create_mock(Store)

        with pytest.raises(ConfigurationError) as exc_info:
            install_replacement(mock, "put", lambda item: "x")

        assert exc_info.value.field("Available signatures") == (
            "str:put(shop.books.Item), str:put(shop.music.Item)"
        )

    def test_explicit_signature(self):
        mock = create_mock(Shape)

        key = install_replacement(mock, "scale", lambda factor: 7, signature="int:scale(int)")

        assert key == "int:scale(int)"
        assert mock.scale(3) == 7

    def test_not_callable(self):
        mock = create_mock(Account, "ann")

        with pytest.raises(ConfigurationError, match="not callable"):
            install_replacement(mock, "balance", 40)

    def test_not_a_mock(self):
        with pytest.raises(ConfigurationError) as exc_info:
            install_replacement(Account("ann"), "balance", lambda: 1)

        assert exc_info.value.field("Type") == "Account"

    def test_explicit_location(self):
        mock = create_mock(Account, "ann")
        location = SourceLocation("suite.py", 3)

        with pytest.raises(ConfigurationError) as exc_info:
            install_replacement(mock, "withdraw", lambda: None, location=location)

        assert exc_info.value.location == location

    def test_protected_methods_follow_settings(self):
        factory = MockFactory(Account, MockSettings(include_protected=False))
        mock = factory.create("ann")

        with pytest.raises(ConfigurationError):
            install_replacement(mock, "_audit", lambda: "fake")
        assert install_replacement(create_mock(Account, "ann"), "_audit", lambda: "fake") == "str:_audit()"


# =============================================================================
# Verification
# =============================================================================


class TestVerify:
    """Test call count verification."""

    def test_within_bounds(self):
        mock = create_mock(Account, "ann")
        install_replacement(mock, "balance", lambda: 40, 1, 1)
        mock.balance()

        verify(mock)

    def test_maximum_violation(self):
        mock = create_mock(Account, "ann")
        install_replacement(mock, "balance", lambda: 40, 1, 1)
        mock.balance()
        mock.balance()

        with pytest.raises(BoundViolationError) as exc_info:
            verify(mock)

        error = exc_info.value
        assert error.message == "Failed asserting call count"
        assert error.signature == "int:balance()"
        assert error.bound == "maximum"
        assert error.expected == 1
        assert error.actual == 2
        assert error.file == __file__

    def test_minimum_violation(self):
        mock = create_mock(Account, "ann")
        install_replacement(mock, "deposit", lambda amount: None, 1)

        with pytest.raises(BoundViolationError) as exc_info:
            verify(mock, "deposit never happened")

        assert exc_info.value.bound == "minimum"
        assert exc_info.value.message == "deposit never happened"

    def test_rebinding_resets_count(self):
        mock = create_mock(Account, "ann")
        key = install_replacement(mock, "balance", lambda: 40)
        mock.balance()
        install_replacement(mock, "balance", lambda: 50, 0, 0)

        assert call_count(mock, key) == 0
        verify(mock)

    def test_invalid_bounds(self):
        mock = create_mock(Account, "ann")

        with pytest.raises(ConfigurationError, match="Invalid call count bounds"):
            install_replacement(mock, "balance", lambda: 40, 2, 1)


# =============================================================================
# Fallback and Settings
# =============================================================================


class TestFallback:
    """Test fallback control."""

    def test_disable_twice_keeps_first_site(self):
        mock = create_mock(Account, "ann")
        first = SourceLocation("first.py", 1)

        assert disable_fallback(mock, location=first) is True
        assert disable_fallback(mock, location=SourceLocation("second.py", 2)) is False

        with pytest.raises(UnimplementedReplacementError) as exc_info:
            mock.balance()
        assert exc_info.value.location == first


class TestHelpers:
    """Test helper methods added to mock classes."""

    def test_helpers_mirror_functions(self):
        mock = Person.get_mock("gary", 40)

        assert mock.mock_method("get_age", lambda: 41, 1, 1) == "int:get_age()"
        assert mock.get_age() == 41
        mock.assert_method_calls()
        assert mock.disable_parent_methods() is True

    def test_target_names_are_not_shadowed(self):
        mock = create_mock(HasHelper)

        assert mock.mock_method() == "own"
        assert hasattr(mock, "assert_method_calls")


class TestSettings:
    """Test settings defaults applied by the factory."""

    def test_default_bounds_from_settings(self):
        set_default_settings(MockSettings(default_minimum_calls=1, default_maximum_calls=1))
        mock = create_mock(Account, "ann")
        install_replacement(mock, "balance", lambda: 40)

        with pytest.raises(BoundViolationError) as exc_info:
            verify(mock)
        assert exc_info.value.bound == "minimum"

    def test_custom_verify_message(self):
        factory = MockFactory(Account, MockSettings(verify_message="Bad counts"))
        mock = factory.create("ann")
        install_replacement(mock, "balance", lambda: 40, 1)

        with pytest.raises(BoundViolationError, match="Bad counts"):
            verify(mock)

    def test_unbounded_overrides_default_maximum(self):
        set_default_settings(MockSettings(default_maximum_calls=1))
        mock = create_mock(Account, "ann")
        install_replacement(mock, "balance", lambda: 40, maximum=UNBOUNDED)

        for _ in range(3):
            assert mock.balance() == 40

        verify(mock)
        assert call_count(mock, "int:balance()") == 3

    def test_omitted_maximum_uses_default(self):
        set_default_settings(MockSettings(default_maximum_calls=1))
        mock = create_mock(Account, "ann")
        install_replacement(mock, "balance", lambda: 40)
        mock.balance()
        mock.balance()

        with pytest.raises(BoundViolationError):
            verify(mock)
