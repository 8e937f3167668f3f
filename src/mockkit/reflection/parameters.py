"""
Parameter inspection and runtime argument matching.

Shared by the reflector (to build descriptors), by overload sets (to pick a
variant for a call) and by the mock factory (to pick a constructor).
"""

import inspect
import types
from typing import Annotated, Any, ForwardRef, Literal, TypeVar, Union, get_args, get_origin

from mockkit.reflection.descriptors import ParameterDescriptor
from mockkit.reflection.modes import PassingMode, mode_of_argument


def signature_of(func: Any) -> inspect.Signature:
    """Signature of a callable with string annotations evaluated where possible."""
    try:
        return inspect.signature(func, eval_str=True)
    except NameError:
        # Unresolvable forward references stay as strings
        return inspect.signature(func)


def split_annotation(annotation: Any) -> tuple[PassingMode, Any]:
    """Separate the passing mode marker from an annotation."""
    if get_origin(annotation) is Annotated:
        inner, *extras = get_args(annotation)
        for extra in extras:
            if isinstance(extra, PassingMode):
                return extra, inner
        return PassingMode.VALUE, inner
    return PassingMode.VALUE, annotation


def type_name(annotation: Any, qualified: bool = False) -> str:
    """
    Canonical text for an annotation.

    Args:
        annotation: The annotation to render
        qualified: Prefix classes outside ``builtins`` with their module, so
            equally named classes from different modules stay distinct
    """
    if annotation is inspect.Parameter.empty or annotation is Any:
        return "Any"
    if annotation is None or annotation is type(None):
        return "None"
    if isinstance(annotation, str):
        return annotation
    if isinstance(annotation, ForwardRef):
        return annotation.__forward_arg__
    if isinstance(annotation, TypeVar):
        return annotation.__name__

    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        return " | ".join(type_name(a, qualified) for a in get_args(annotation))
    if origin is None and isinstance(annotation, type):
        if qualified and annotation.__module__ != "builtins":
            return f"{annotation.__module__}.{annotation.__qualname__}"
        return annotation.__name__
    return repr(annotation).replace("typing.", "")


def describe_parameter(param: inspect.Parameter, inferred: bool = False) -> ParameterDescriptor:
    """
    Build a ParameterDescriptor.

    Args:
        param: The inspected parameter
        inferred: True when describing a replacement callable; an unannotated
            parameter is then unknown rather than ``Any``
    """
    has_default = param.default is not inspect.Parameter.empty

    if param.annotation is inspect.Parameter.empty:
        if inferred:
            return ParameterDescriptor(
                name=param.name,
                mode=None,
                type_name=None,
                kind=param.kind,
                has_default=has_default,
            )
        mode, annotation = PassingMode.VALUE, Any
    else:
        mode, annotation = split_annotation(param.annotation)

    return ParameterDescriptor(
        name=param.name,
        mode=mode,
        type_name=type_name(annotation),
        kind=param.kind,
        has_default=has_default,
        annotation=annotation,
        qualified_type_name=type_name(annotation, qualified=True),
    )


def describe_parameters(
    signature: inspect.Signature,
    skip_first: bool = False,
    inferred: bool = False,
) -> tuple[inspect.Signature, tuple[ParameterDescriptor, ...]]:
    """
    Describe every parameter of a signature.

    Args:
        signature: Signature to describe
        skip_first: Drop the leading ``self``/``cls`` parameter
        inferred: Treat unannotated parameters as unknown

    Returns:
        The (possibly trimmed) signature and its parameter descriptors
    """
    params = list(signature.parameters.values())
    positional = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    if skip_first and params and params[0].kind in positional:
        params = params[1:]

    trimmed = signature.replace(parameters=params)
    return trimmed, tuple(describe_parameter(p, inferred) for p in params)


def return_type_name(
    signature: inspect.Signature, inferred: bool = False, qualified: bool = False
) -> str | None:
    """Canonical return type text, or None when unknown for an inferred shape."""
    if signature.return_annotation is inspect.Signature.empty:
        return None if inferred else "Any"
    _, annotation = split_annotation(signature.return_annotation)
    return type_name(annotation, qualified)


def accepts(annotation: Any, value: Any) -> bool:
    """Best-effort runtime check that ``value`` fits ``annotation``."""
    if annotation is Any or annotation is inspect.Parameter.empty:
        return True
    if annotation is None or annotation is type(None):
        return value is None
    if isinstance(annotation, (str, ForwardRef, TypeVar)):
        return True

    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        return any(accepts(a, value) for a in get_args(annotation))
    if origin is Literal:
        return value in get_args(annotation)
    if origin is Annotated:
        return accepts(get_args(annotation)[0], value)
    if origin is not None:
        annotation = origin

    if not isinstance(annotation, type):
        return True

    # Numeric tower: int is acceptable where float or complex is declared
    if annotation in (float, complex) and isinstance(value, int) and not isinstance(value, bool):
        return True

    try:
        return isinstance(value, annotation)
    except TypeError:
        # Non runtime-checkable protocols and similar
        return True


def accepts_exactly(annotation: Any, value: Any) -> bool:
    """True when the runtime type of ``value`` is the declared class itself."""
    if annotation is None or annotation is type(None):
        return value is None

    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        return any(accepts_exactly(a, value) for a in get_args(annotation))
    if origin is Literal:
        return value in get_args(annotation)
    if origin is Annotated:
        return accepts_exactly(get_args(annotation)[0], value)
    if origin is not None:
        annotation = origin

    return isinstance(annotation, type) and type(value) is annotation


def argument_accepted(param: ParameterDescriptor, value: Any, exact: bool = False) -> bool:
    """Check an argument against a parameter's passing mode and type."""
    check = accepts_exactly if exact else accepts
    mode = mode_of_argument(value)
    if mode is not param.mode:
        return False
    if mode is PassingMode.REFERENCE:
        return check(param.annotation, value.value)
    if mode is PassingMode.VALUE:
        return check(param.annotation, value)
    return True


def arguments_match(
    signature: inspect.Signature,
    parameters: tuple[ParameterDescriptor, ...],
    args: tuple,
    kwargs: dict,
    exact: bool = False,
) -> bool:
    """
    True when the arguments bind to the signature with compatible types.

    With ``exact`` every argument must be an instance of the declared class
    itself (no subclasses, no int for float).
    """
    try:
        bound = signature.bind(*args, **kwargs)
    except TypeError:
        return False

    by_name = {p.name: p for p in parameters}
    for name, value in bound.arguments.items():
        param = by_name[name]
        if param.kind == inspect.Parameter.VAR_POSITIONAL:
            values = value
        elif param.kind == inspect.Parameter.VAR_KEYWORD:
            values = value.values()
        else:
            values = (value,)

        if not all(argument_accepted(param, v, exact) for v in values):
            return False

    return True


def describe_arguments(args: tuple, kwargs: dict) -> str:
    """Render the modes and types of call arguments for diagnostics."""

    def _text(value: Any) -> str:
        mode = mode_of_argument(value)
        if mode is PassingMode.REFERENCE:
            return f"{mode.prefix}{type(value.value).__name__}"
        if mode is PassingMode.VALUE:
            return type(value).__name__
        return mode.prefix.strip()

    parts = [_text(a) for a in args]
    parts.extend(f"{k}={_text(v)}" for k, v in kwargs.items())
    return f"({', '.join(parts)})"
