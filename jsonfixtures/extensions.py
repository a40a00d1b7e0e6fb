"""Standard extensions registered on the shared codec.

* ``DataclassExtension`` - dataclasses as JSON objects of their fields.
* ``EnumExtension`` - enum members as their values.
* ``OptionalExtension`` - ``Optional[X]`` decoded as ``X``.
* ``ProtobufExtension`` - protobuf messages through ``json_format``.
"""

import dataclasses
import enum
import functools
import types
import typing
from typing import Any, Dict, Optional

from google.protobuf import json_format
from google.protobuf.message import Message

from .codec import Codec, Decoder, Encoder, Extension, json_kind
from .errors import ParseError, ShapeMismatchError

_UNION_TYPES = (typing.Union, types.UnionType)
_NONE_TYPE = type(None)


def _encode_dataclass(value: Any, codec: Codec) -> Dict[str, Any]:
    return {field.name: codec.encode_value(getattr(value, field.name)) for field in dataclasses.fields(value)}


def _decode_dataclass(cls: type, codec: Codec, tree: Any) -> Any:
    if not isinstance(tree, dict):
        raise ShapeMismatchError(f"Expected JSON object for {cls.__name__}, got {json_kind(tree)}")
    try:
        hints = typing.get_type_hints(cls)
    except NameError as exc:
        raise ParseError(f"Cannot resolve field types of {cls.__name__}: {exc}") from exc

    fields = dataclasses.fields(cls)
    unknown = sorted(set(tree) - {field.name for field in fields})
    if unknown:
        raise ShapeMismatchError(f"Unknown field(s) for {cls.__name__}: {', '.join(unknown)}")

    kwargs = {}
    for field in fields:
        if not field.init:
            continue
        if field.name in tree:
            kwargs[field.name] = codec.decode_value(tree[field.name], hints.get(field.name, Any))
        elif field.default is dataclasses.MISSING and field.default_factory is dataclasses.MISSING:
            raise ShapeMismatchError(f"Missing required field '{field.name}' for {cls.__name__}")
    return cls(**kwargs)


class DataclassExtension(Extension):
    name = "dataclasses"

    def encoder_for(self, value: Any) -> Optional[Encoder]:
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return _encode_dataclass
        return None

    def decoder_for(self, tp: Any, codec: Codec) -> Optional[Decoder]:
        # Field decoders are resolved per call so self-referencing dataclasses work.
        if isinstance(tp, type) and dataclasses.is_dataclass(tp):
            return functools.partial(_decode_dataclass, tp, codec)
        return None


def _encode_enum(value: enum.Enum, codec: Codec) -> Any:
    return codec.encode_value(value.value)


def _decode_enum(cls: type, tree: Any) -> Any:
    try:
        return cls(tree)
    except ValueError as exc:
        raise ShapeMismatchError(f"{tree!r} is not a valid {cls.__name__}") from exc


class EnumExtension(Extension):
    name = "enums"

    def encoder_for(self, value: Any) -> Optional[Encoder]:
        if isinstance(value, enum.Enum):
            return _encode_enum
        return None

    def decoder_for(self, tp: Any, codec: Codec) -> Optional[Decoder]:
        if isinstance(tp, type) and issubclass(tp, enum.Enum):
            return functools.partial(_decode_enum, tp)
        return None


class OptionalExtension(Extension):
    """Resolve ``Optional[X]`` to the decoder of ``X``.

    Null is already turned into ``None`` by the codec, so only the non-null
    member matters. Unions with more than one non-null member are left
    unresolved.
    """

    name = "optional"

    def decoder_for(self, tp: Any, codec: Codec) -> Optional[Decoder]:
        if typing.get_origin(tp) not in _UNION_TYPES:
            return None
        members = [arg for arg in typing.get_args(tp) if arg is not _NONE_TYPE]
        if len(members) != 1:
            return None
        return codec.find_decoder(members[0])


def _encode_message(value: Message, codec: Codec) -> Dict[str, Any]:
    return json_format.MessageToDict(value, preserving_proto_field_name=True)


def _decode_message(cls: type, tree: Any) -> Message:
    if not isinstance(tree, dict):
        raise ShapeMismatchError(f"Expected JSON object for {cls.__name__}, got {json_kind(tree)}")
    try:
        return json_format.ParseDict(tree, cls())
    except json_format.ParseError as exc:
        raise ShapeMismatchError(f"Invalid {cls.DESCRIPTOR.full_name} payload: {exc}") from exc


class ProtobufExtension(Extension):
    name = "protobuf"

    def encoder_for(self, value: Any) -> Optional[Encoder]:
        if isinstance(value, Message):
            return _encode_message
        return None

    def decoder_for(self, tp: Any, codec: Codec) -> Optional[Decoder]:
        if isinstance(tp, type) and issubclass(tp, Message):
            return functools.partial(_decode_message, tp)
        return None
