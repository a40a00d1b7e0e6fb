"""Map entries representation for mapping values.

JSON object keys are always text, so a mapping with integer, enum or
dataclass keys cannot be written as a plain object. This extension writes
every mapping as an array of entry objects instead::

    [{"key": 1, "value": "one"}, {"key": 2, "value": "two"}]

On decode both that array form and the plain object form are accepted. In
the object form the field names become the keys as they are, as text.

Mapping descriptors decode into a ``dict``, or an ``OrderedDict`` for
``OrderedDict`` descriptors. ``defaultdict`` and other dict subclasses are
not resolved here: their descriptors carry no way to rebuild them.
"""

import functools
import typing
from collections import OrderedDict, abc
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .codec import Codec, Decoder, Encoder, Extension, json_kind
from .errors import ShapeMismatchError
from .logger import get_logger

KEY_FIELD = "key"
VALUE_FIELD = "value"

MAPPING_TYPES = (dict, OrderedDict, abc.Mapping, abc.MutableMapping)

logger = get_logger(__name__)


def encode_map(value: Optional[Mapping[Any, Any]], codec: Codec) -> Optional[List[Dict[str, Any]]]:
    """Encode a mapping as a list of ``{"key": ..., "value": ...}`` objects."""
    if value is None:
        return None
    return [
        {KEY_FIELD: codec.encode_value(key), VALUE_FIELD: codec.encode_value(item)}
        for key, item in value.items()
    ]


def decode_map(
    tree: Any,
    key_decoder: Decoder,
    value_decoder: Decoder,
    *,
    lenient: bool = False,
) -> Dict[Any, Any]:
    """Decode either mapping representation into a dict.

    ``key_decoder`` and ``value_decoder`` are applied to every entry. They
    are not used for keys in the object form, which stay text.

    Any JSON value other than an array or an object raises
    ShapeMismatchError, unless ``lenient`` is set, in which case an empty
    dict is returned.
    """
    result: Dict[Any, Any] = {}

    if isinstance(tree, list):
        for index, entry in enumerate(tree):
            if not isinstance(entry, dict):
                raise ShapeMismatchError(
                    f"Map entry {index} must be a JSON object, got {json_kind(entry)}"
                )
            missing = [field for field in (KEY_FIELD, VALUE_FIELD) if field not in entry]
            if missing:
                raise ShapeMismatchError(f"Map entry {index} is missing {', '.join(missing)}")
            key = key_decoder(entry[KEY_FIELD])
            value = value_decoder(entry[VALUE_FIELD])
            try:
                result[key] = value
            except TypeError as exc:
                raise ShapeMismatchError(
                    f"Map entry {index} has an unhashable key of type {type(key).__name__}"
                ) from exc
    elif isinstance(tree, dict):
        for name, raw in tree.items():
            result[name] = value_decoder(raw)
    elif lenient:
        logger.warning(f"Expected JSON array or object for a map, got {json_kind(tree)}; using an empty map")
    else:
        raise ShapeMismatchError(f"Expected JSON array or object for a map, got {json_kind(tree)}")

    return result


def entry_types(tp: Any) -> Tuple[Any, Any]:
    """Return the (key type, value type) of a mapping descriptor, ``Any`` when unknown."""
    args = typing.get_args(tp)
    key_type = args[0] if len(args) > 0 else Any
    value_type = args[1] if len(args) > 1 else Any
    return key_type, value_type


class MapEntriesExtension(Extension):
    """Encode every mapping as entries and decode both mapping forms."""

    name = "map_entries"

    def __init__(self, lenient: bool = False):
        self.lenient = lenient

    def encoder_for(self, value: Any) -> Optional[Encoder]:
        if isinstance(value, abc.Mapping):
            return encode_map
        return None

    def decoder_for(self, tp: Any, codec: Codec) -> Optional[Decoder]:
        origin = typing.get_origin(tp) or tp
        if origin not in MAPPING_TYPES:
            return None
        key_type, value_type = entry_types(tp)
        decode = functools.partial(
            decode_map,
            key_decoder=codec.find_decoder(key_type),
            value_decoder=codec.find_decoder(value_type),
            lenient=self.lenient,
        )
        if origin is OrderedDict:
            return lambda tree: OrderedDict(decode(tree))
        return decode
