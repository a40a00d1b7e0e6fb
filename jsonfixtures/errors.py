"""Exceptions raised by the JSON fixture codec.

Every error derives from :class:`CodecError` so tests can catch the whole
family at once. The concrete classes also derive from the closest builtin
exception, which keeps ``pytest.raises(ValueError)`` style checks working.
"""


class CodecError(Exception):
    """Base class for all codec failures."""


class ParseError(CodecError, ValueError):
    """JSON text is invalid or the requested type cannot be resolved."""


class ShapeMismatchError(CodecError, TypeError):
    """A JSON value does not have the shape its decoder expects."""


class EncodeError(CodecError, TypeError):
    """No encoder is registered for a value."""
