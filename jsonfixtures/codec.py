"""Typed JSON codec built on the standard :mod:`json` module.

A :class:`Codec` converts Python values to JSON trees and JSON trees back to
values of a requested type descriptor. Descriptors are plain classes,
``typing.Any`` or parametrised generics such as ``List[int]`` or
``dict[str, float]``.

Behaviour for specific value shapes is supplied by :class:`Extension`
objects. The extensions a codec consults are fixed when it is constructed;
the last extension that claims a value or type wins, and the built-in
handling below is only used when no extension claims it.

Mappings decode into ``dict`` or, for ``OrderedDict`` descriptors, into an
``OrderedDict``. Other dict subclasses such as ``defaultdict`` are not
supported, since a type descriptor carries no default factory.
"""

import json
import typing
from collections import OrderedDict, abc
from typing import Any, Callable, Iterable, List, Optional, Tuple, Union

from .errors import EncodeError, ParseError, ShapeMismatchError
from .logger import get_logger

Encoder = Callable[[Any, "Codec"], Any]
Decoder = Callable[[Any], Any]

logger = get_logger(__name__)

_LIST_TYPES = (list, abc.Sequence, abc.MutableSequence, abc.Collection, abc.Iterable)
_SET_TYPES = (set, abc.Set, abc.MutableSet)
_PLAIN_MAP_TYPES = (dict, OrderedDict, abc.Mapping, abc.MutableMapping)


class Extension:
    """Plug-in that teaches a codec how to handle one family of values.

    Subclasses override one or both hooks and return ``None`` for anything
    they do not handle.
    """

    name = "extension"

    def encoder_for(self, value: Any) -> Optional[Encoder]:
        return None

    def decoder_for(self, tp: Any, codec: "Codec") -> Optional[Decoder]:
        return None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"


def json_kind(tree: Any) -> str:
    """Return the JSON name of a parsed value's kind, for error messages."""
    if tree is None:
        return "null"
    if isinstance(tree, bool):
        return "boolean"
    if isinstance(tree, (int, float)):
        return "number"
    if isinstance(tree, str):
        return "string"
    if isinstance(tree, list):
        return "array"
    if isinstance(tree, dict):
        return "object"
    return type(tree).__name__


def _nullable(decoder: Decoder) -> Decoder:
    # JSON null is an absent value for every target type.
    def decode(tree: Any) -> Any:
        if tree is None:
            return None
        return decoder(tree)

    return decode


def _decode_any(tree: Any) -> Any:
    return tree


def _decode_null(tree: Any) -> None:
    raise ShapeMismatchError(f"Expected JSON null, got {json_kind(tree)}")


def _decode_str(tree: Any) -> str:
    if not isinstance(tree, str):
        raise ShapeMismatchError(f"Expected JSON string, got {json_kind(tree)}")
    return tree


def _decode_int(tree: Any) -> int:
    if isinstance(tree, bool) or not isinstance(tree, int):
        raise ShapeMismatchError(f"Expected JSON integer, got {json_kind(tree)}")
    return tree


def _decode_float(tree: Any) -> float:
    if isinstance(tree, bool) or not isinstance(tree, (int, float)):
        raise ShapeMismatchError(f"Expected JSON number, got {json_kind(tree)}")
    try:
        return float(tree)
    except OverflowError as exc:
        raise ShapeMismatchError(f"JSON number {tree} is out of range for float") from exc


def _decode_bool(tree: Any) -> bool:
    if not isinstance(tree, bool):
        raise ShapeMismatchError(f"Expected JSON boolean, got {json_kind(tree)}")
    return tree


_SCALAR_DECODERS: Tuple[Tuple[Any, Decoder], ...] = (
    (str, _decode_str),
    (bool, _decode_bool),
    (int, _decode_int),
    (float, _decode_float),
    (type(None), _decode_null),
)


def _require_array(tree: Any) -> List[Any]:
    if not isinstance(tree, list):
        raise ShapeMismatchError(f"Expected JSON array, got {json_kind(tree)}")
    return tree


class Codec:
    """Converts between Python values and JSON using a fixed set of extensions."""

    def __init__(self, extensions: Iterable[Extension] = ()):
        self._extensions: Tuple[Extension, ...] = tuple(extensions)
        logger.debug(f"Codec built with extensions: {[ext.name for ext in self._extensions]}")

    @property
    def extensions(self) -> Tuple[Extension, ...]:
        return self._extensions

    # Encoding

    def encode_value(self, value: Any) -> Any:
        """Convert ``value`` to a JSON tree of dicts, lists and scalars."""
        if value is None:
            return None
        for extension in reversed(self._extensions):
            encoder = extension.encoder_for(value)
            if encoder is not None:
                return encoder(value, self)
        return self._encode_builtin(value)

    def _encode_builtin(self, value: Any) -> Any:
        if isinstance(value, (str, bool, int, float)):
            return value
        if isinstance(value, abc.Mapping):
            out = {}
            for key, item in value.items():
                if not isinstance(key, str):
                    raise EncodeError(
                        f"Plain JSON objects need text keys, got {type(key).__name__}"
                    )
                out[key] = self.encode_value(item)
            return out
        if isinstance(value, (list, tuple, set, frozenset)):
            return [self.encode_value(item) for item in value]
        raise EncodeError(f"No JSON encoder for value of type {type(value).__name__}")

    def dumps(self, value: Any, indent: Optional[int] = None) -> str:
        """Encode ``value`` and serialize it as JSON text."""
        return json.dumps(self.encode_value(value), indent=indent)

    # Decoding

    def find_decoder(self, tp: Any) -> Decoder:
        """Resolve a decoder for the type descriptor ``tp``.

        Raises ParseError when neither an extension nor the built-in
        handling understands ``tp``.
        """
        for extension in reversed(self._extensions):
            decoder = extension.decoder_for(tp, self)
            if decoder is not None:
                return _nullable(decoder)
        return _nullable(self._builtin_decoder(tp))

    def _builtin_decoder(self, tp: Any) -> Decoder:
        if tp is Any or tp is object:
            return _decode_any
        for scalar, decoder in _SCALAR_DECODERS:
            if tp is scalar:
                return decoder

        origin = typing.get_origin(tp) or tp
        args = typing.get_args(tp)

        if origin in _LIST_TYPES:
            item = self.find_decoder(args[0] if args else Any)
            return lambda tree: [item(x) for x in _require_array(tree)]
        if origin in _SET_TYPES or origin is frozenset:
            item = self.find_decoder(args[0] if args else Any)
            factory = frozenset if origin is frozenset else set
            return lambda tree: self._decode_set(tree, item, factory)
        if origin is tuple:
            return self._tuple_decoder(args)
        if origin in _PLAIN_MAP_TYPES:
            key_type = args[0] if args else Any
            if key_type is not Any and key_type is not str:
                raise ParseError(f"Plain JSON objects only support text keys, not {key_type!r}")
            value = self.find_decoder(args[1] if len(args) > 1 else Any)
            if origin is OrderedDict:
                return lambda tree: OrderedDict(self._decode_plain_map(tree, value))
            return lambda tree: self._decode_plain_map(tree, value)

        raise ParseError(f"No JSON decoder for type {tp!r}")

    def _tuple_decoder(self, args: Tuple[Any, ...]) -> Decoder:
        if not args or (len(args) == 2 and args[1] is Ellipsis):
            item = self.find_decoder(args[0] if args else Any)
            return lambda tree: tuple(item(x) for x in _require_array(tree))

        items = [self.find_decoder(arg) for arg in args]

        def decode(tree: Any) -> tuple:
            values = _require_array(tree)
            if len(values) != len(items):
                raise ShapeMismatchError(
                    f"Expected JSON array of length {len(items)}, got length {len(values)}"
                )
            return tuple(item(x) for item, x in zip(items, values))

        return decode

    @staticmethod
    def _decode_set(tree: Any, item: Decoder, factory: Callable[[Iterable[Any]], Any]) -> Any:
        try:
            return factory(item(x) for x in _require_array(tree))
        except TypeError as exc:
            if isinstance(exc, ShapeMismatchError):
                raise
            raise ShapeMismatchError(f"Set members must be hashable: {exc}") from exc

    @staticmethod
    def _decode_plain_map(tree: Any, value: Decoder) -> dict:
        if not isinstance(tree, dict):
            raise ShapeMismatchError(f"Expected JSON object, got {json_kind(tree)}")
        return {key: value(item) for key, item in tree.items()}

    def decode_value(self, tree: Any, tp: Any = Any) -> Any:
        """Convert a parsed JSON tree into a value of type ``tp``."""
        return self.find_decoder(tp)(tree)

    def loads(self, text: Union[str, bytes, bytearray], tp: Any = Any) -> Any:
        """Parse JSON text (or UTF-8 bytes) into a value of type ``tp``."""
        if isinstance(text, (bytes, bytearray)):
            try:
                text = bytes(text).decode("utf-8")
            except UnicodeDecodeError as exc:
                raise ParseError(f"JSON input is not valid UTF-8: {exc}") from exc
        decoder = self.find_decoder(tp)
        try:
            tree = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ParseError(f"Invalid JSON: {exc}") from exc
        except RecursionError as exc:
            raise ParseError("JSON input is nested too deeply") from exc
        return decoder(tree)
