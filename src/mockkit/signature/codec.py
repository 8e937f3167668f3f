"""
Signature keys.

A signature key identifies one overload inside a class::

    int:balance()
    str:set(int)
    None:update(ref int, out str, lazy bool)

The same encoding is applied to descriptors inferred from replacement
callables, so a replacement is matched to an overload by key equality.
Unknown parts of an inferred shape render as ``?`` and are completed from a
candidate overload before comparison.
"""

from dataclasses import replace

from mockkit.reflection.descriptors import MethodDescriptor


def encode(descriptor: MethodDescriptor, qualified: bool = False) -> str:
    """
    Encode a method descriptor as ``Return:name(mode type, ...)``.

    With ``qualified`` classes outside ``builtins`` are written with their
    module, e.g. ``None:put(shop.books.Item)``.
    """
    params = ", ".join(p.render(qualified) for p in descriptor.parameters)
    return_type = descriptor.return_type
    if qualified and descriptor.qualified_return_type is not None:
        return_type = descriptor.qualified_return_type
    if return_type is None:
        return_type = "?"
    return f"{return_type}:{descriptor.name}({params})"


def is_partial(descriptor: MethodDescriptor) -> bool:
    """True when some part of the shape is unknown."""
    return descriptor.return_type is None or not all(p.is_known for p in descriptor.parameters)


def complete(shape: MethodDescriptor, candidate: MethodDescriptor) -> MethodDescriptor:
    """
    Fill the unknown parts of ``shape`` from ``candidate``.

    Shapes with a different arity are returned unchanged; they can never
    encode to the candidate's key.
    """
    if len(shape.parameters) != len(candidate.parameters):
        return shape

    parameters = tuple(
        theirs if not ours.is_known else ours
        for ours, theirs in zip(shape.parameters, candidate.parameters)
    )
    if shape.return_type is not None:
        return replace(shape, parameters=parameters)
    return replace(
        shape,
        parameters=parameters,
        return_type=candidate.return_type,
        qualified_return_type=candidate.qualified_return_type,
    )


def is_qualified(descriptor: MethodDescriptor) -> bool:
    """True when the descriptor's key was encoded with module-qualified names."""
    return descriptor.key != encode(descriptor)


def matches(shape: MethodDescriptor, candidate: MethodDescriptor) -> bool:
    """True when the completed shape encodes to the candidate's key."""
    qualified = is_qualified(candidate)
    return encode(complete(shape, candidate), qualified) == encode(candidate, qualified)


def find_overloads(
    methods: list[MethodDescriptor] | tuple[MethodDescriptor, ...],
    shape: MethodDescriptor,
) -> list[MethodDescriptor]:
    """All overloads of ``shape.name`` the shape matches."""
    return [m for m in methods if m.name == shape.name and matches(shape, m)]
