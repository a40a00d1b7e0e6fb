"""Typed JSON fixtures for tests.

This package turns JSON literals written in tests into typed values and
back. It is a thin layer over the standard :mod:`json` module:

* ``parse_test_json(text, tp)`` - parse JSON text into a value of type ``tp``.
* ``dump_test_json(value)`` - encode a value as JSON text.

Both go through one shared :class:`~jsonfixtures.codec.Codec`, built on first
use from the ``EXTENSIONS`` registry. Mappings are written as arrays of
``{"key": ..., "value": ...}`` entries so that non-text keys survive a round
trip; plain JSON objects are still accepted when decoding.

Additional extensions can be registered in ``EXTENSIONS`` before the shared
codec is first used, or passed to :func:`build_codec` explicitly.
"""

import functools
from typing import Any, Callable, Dict, Iterable, Optional, Union

from .codec import Codec, Decoder, Encoder, Extension
from .config import CodecSettings
from .errors import CodecError, EncodeError, ParseError, ShapeMismatchError
from .extensions import DataclassExtension, EnumExtension, OptionalExtension, ProtobufExtension
from .maps import MapEntriesExtension, decode_map, encode_map

ExtensionFactory = Callable[[CodecSettings], Extension]

# Registration order is precedence order: later extensions win.
EXTENSIONS: Dict[str, ExtensionFactory] = {
    "dataclasses": lambda settings: DataclassExtension(),
    "enums": lambda settings: EnumExtension(),
    "optional": lambda settings: OptionalExtension(),
    "protobuf": lambda settings: ProtobufExtension(),
    "map_entries": lambda settings: MapEntriesExtension(lenient=settings.lenient_maps),
}


def build_codec(
    names: Optional[Iterable[str]] = None,
    settings: Optional[CodecSettings] = None,
) -> Codec:
    """Build a codec from registered extensions.

    ``names`` selects and orders extensions from ``EXTENSIONS``; all of them
    are used when omitted. Raises ValueError for an unknown name.
    """
    settings = settings or CodecSettings()
    selected = list(EXTENSIONS) if names is None else list(names)

    extensions = []
    for name in selected:
        factory = EXTENSIONS.get(name)
        if factory is None:
            raise ValueError(f"Unknown codec extension: {name!r}")
        extensions.append(factory(settings))
    return Codec(extensions)


@functools.lru_cache(maxsize=None)
def default_codec() -> Codec:
    """Return the shared codec, building it from the environment on first use."""
    return build_codec(settings=CodecSettings.from_env())


def parse_test_json(text: Union[str, bytes], tp: Any = Any) -> Any:
    """Parse a JSON literal into a value of type ``tp``.

    Example:
        >>> parse_test_json('[{"key": 1, "value": "one"}]', Dict[int, str])
        {1: 'one'}

    Raises ParseError for invalid JSON or an unsupported ``tp`` and
    ShapeMismatchError when the JSON does not fit ``tp``.
    """
    return default_codec().loads(text, tp)


def dump_test_json(value: Any, indent: Optional[int] = None) -> str:
    """Encode ``value`` as JSON text with the shared codec."""
    return default_codec().dumps(value, indent=indent)


__all__ = [
    "Codec",
    "CodecError",
    "CodecSettings",
    "DataclassExtension",
    "Decoder",
    "EXTENSIONS",
    "EncodeError",
    "Encoder",
    "EnumExtension",
    "Extension",
    "MapEntriesExtension",
    "OptionalExtension",
    "ParseError",
    "ProtobufExtension",
    "ShapeMismatchError",
    "build_codec",
    "decode_map",
    "default_codec",
    "dump_test_json",
    "encode_map",
    "parse_test_json",
]
