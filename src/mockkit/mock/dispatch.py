"""
Override synthesizer.

Builds the class attributes of a mock type: every mockable member of the
target is overridden by a function that routes the call through the same
four steps:

1. count the call if its signature is tracked
2. call the bound replacement, if any
3. otherwise call the inherited implementation when fallback is enabled
4. otherwise raise UnimplementedReplacementError
"""

import functools
import logging
from typing import Any, Callable

from mockkit.errors import UnimplementedReplacementError
from mockkit.mock.state import MockState, find_state
from mockkit.reflection.descriptors import ClassDescriptor, MethodDescriptor
from mockkit.reflection.overloads import Overloads

logger = logging.getLogger(__name__)

NOT_IMPLEMENTED_MESSAGE = "Mock method not implemented"


def _unimplemented(state: MockState, key: str, abstract: bool) -> UnimplementedReplacementError:
    method = f"{state.type_name}.{key}"

    if state.fallback_enabled and abstract:
        error = UnimplementedReplacementError(
            NOT_IMPLEMENTED_MESSAGE,
            state.created_at,
            type_name=state.type_name,
            signature=key,
        )
        error.add_info("Method", method)
        error.add_info("Reason", "abstract method has no implementation to fall back to")
        return error

    error = UnimplementedReplacementError(
        NOT_IMPLEMENTED_MESSAGE,
        state.fallback_disabled_at,
        type_name=state.type_name,
        signature=key,
        fallback_disabled_at=state.fallback_disabled_at,
    )
    error.add_info("Method", method)
    error.add_info("Fallback disabled at", str(state.fallback_disabled_at))
    return error


def route(
    instance: Any,
    key: str,
    original: Callable,
    abstract: bool,
    args: tuple,
    kwargs: dict,
) -> Any:
    """Dispatch one call made on a mock."""
    state = find_state(instance)
    if state is None:
        # Calls made before the factory attached state (e.g. from __new__)
        return original(instance, *args, **kwargs)

    # Counted before the replacement runs, so a failing replacement still counts
    state.tracker.record(key)

    replacement = state.replacements.get(key)
    if replacement is not None:
        logger.debug(f"{state.type_name}.{key} -> replacement")
        return replacement(*args, **kwargs)

    if state.fallback_enabled and not abstract:
        logger.debug(f"{state.type_name}.{key} -> original")
        return original(instance, *args, **kwargs)

    raise _unimplemented(state, key, abstract)


def _method_override(method: MethodDescriptor) -> Callable:
    key = method.key
    original = method.implementation
    abstract = method.is_abstract

    def dispatch(self, *args, **kwargs):
        return route(self, key, original, abstract, args, kwargs)

    # Do not copy __dict__: it would carry __isabstractmethod__ and __final__
    functools.update_wrapper(dispatch, original, updated=())
    return dispatch


def _overload_override(member: Overloads, methods: list[MethodDescriptor]) -> Callable:
    by_implementation = {id(m.implementation): m for m in methods}

    def dispatch(self, *args, **kwargs):
        func = member.resolve(args, kwargs)
        method = by_implementation.get(id(func))
        if method is None:
            # Final variants are never intercepted
            return func(self, *args, **kwargs)
        return route(self, method.key, func, method.is_abstract, args, kwargs)

    functools.update_wrapper(dispatch, member.variants[0], updated=())
    return dispatch


def _property_override(member: property, method: MethodDescriptor) -> property:
    key = method.key
    abstract = method.is_abstract

    def fget(self):
        return route(self, key, member.fget, abstract, (), {})

    functools.update_wrapper(fget, member.fget, updated=())
    return property(fget, member.fset, member.fdel, member.__doc__)


def synthesize(descriptor: ClassDescriptor) -> dict[str, Any]:
    """
    Override every mockable member of a described type.

    Returns:
        Class attributes for the mock type, keyed by member name
    """
    namespace: dict[str, Any] = {}

    for name, member in descriptor.members.items():
        methods = descriptor.methods_named(name)
        if not methods:
            continue

        if isinstance(member, Overloads):
            namespace[name] = _overload_override(member, methods)
        elif isinstance(member, property):
            namespace[name] = _property_override(member, methods[0])
        else:
            namespace[name] = _method_override(methods[0])

    logger.debug(f"Synthesized {len(namespace)} overrides for {descriptor.name}")
    return namespace
