import typing
from collections import OrderedDict
from decimal import Decimal
from typing import Any, Dict, FrozenSet, List, Sequence, Set, Tuple

import pytest

from jsonfixtures import Codec, EncodeError, Extension, MapEntriesExtension, ParseError, ShapeMismatchError
from jsonfixtures.codec import json_kind


def test_plain_codec_writes_mappings_as_objects():
    codec = Codec()

    assert codec.encode_value({"a": 1, "b": [1, (2, 3)]}) == {"a": 1, "b": [1, [2, 3]]}
    assert codec.dumps({"a": None}) == '{"a": null}'


def test_plain_codec_rejects_non_text_keys():
    codec = Codec()

    with pytest.raises(EncodeError):
        codec.encode_value({1: "one"})
    with pytest.raises(ParseError):
        codec.find_decoder(Dict[int, str])


def test_plain_codec_decodes_objects_only():
    codec = Codec()

    assert codec.loads('{"a": 1}', Dict[str, int]) == {"a": 1}
    with pytest.raises(ShapeMismatchError):
        codec.loads('[{"key": "a", "value": 1}]', Dict[str, int])


def test_map_extension_overrides_plain_mappings():
    codec = Codec([MapEntriesExtension()])

    assert codec.encode_value({1: "one"}) == [{"key": 1, "value": "one"}]
    assert codec.loads('[{"key": 1, "value": "one"}]', Dict[int, str]) == {1: "one"}


def test_scalar_decoders_check_shapes():
    codec = Codec()

    assert codec.decode_value(1, int) == 1
    assert codec.decode_value(1, float) == 1.0
    assert isinstance(codec.decode_value(1, float), float)
    assert codec.decode_value(True, bool) is True
    assert codec.decode_value("s", str) == "s"

    with pytest.raises(ShapeMismatchError, match="integer"):
        codec.decode_value(True, int)
    with pytest.raises(ShapeMismatchError, match="integer"):
        codec.decode_value(1.5, int)
    with pytest.raises(ShapeMismatchError, match="string"):
        codec.decode_value(1, str)
    with pytest.raises(ShapeMismatchError, match="number"):
        codec.decode_value(False, float)
    with pytest.raises(ShapeMismatchError, match="boolean"):
        codec.decode_value(0, bool)
    with pytest.raises(ShapeMismatchError, match="null"):
        codec.decode_value(0, type(None))


def test_float_decoder_rejects_out_of_range_integers():
    codec = Codec()
    huge = int("1" + "0" * 400)

    with pytest.raises(ShapeMismatchError, match="out of range"):
        codec.decode_value(huge, float)
    with pytest.raises(ShapeMismatchError, match="out of range"):
        codec.loads("[1" + "0" * 400 + "]", List[float])

    # Integers stay exact when the target is int.
    assert codec.decode_value(huge, int) == huge


def test_deeply_nested_input_raises_parse_error():
    with pytest.raises(ParseError, match="nested too deeply") as excinfo:
        Codec().loads("[" * 100000 + "]" * 100000)

    assert isinstance(excinfo.value.__cause__, RecursionError)


def test_plain_codec_ordered_dict_target():
    out = Codec().loads('{"b": 1, "a": 2}', typing.OrderedDict[str, int])

    assert isinstance(out, OrderedDict)
    assert list(out.items()) == [("b", 1), ("a", 2)]


def test_null_is_none_for_any_target():
    codec = Codec()

    assert codec.decode_value(None, int) is None
    assert codec.decode_value([1, None], List[int]) == [1, None]


def test_sequences_and_sets():
    codec = Codec()

    assert codec.loads("[1, 2, 2]", List[int]) == [1, 2, 2]
    assert codec.loads("[1, 2, 2]", Sequence[int]) == [1, 2, 2]
    assert codec.loads("[1, 2, 2]", Set[int]) == {1, 2}
    assert codec.loads("[1, 2]", FrozenSet[int]) == frozenset({1, 2})
    assert codec.loads('["a", 1]', list) == ["a", 1]

    with pytest.raises(ShapeMismatchError, match="array"):
        codec.loads('{"a": 1}', List[int])
    with pytest.raises(ShapeMismatchError, match="hashable"):
        codec.loads("[[1]]", Set[Any])
    with pytest.raises(ShapeMismatchError, match="integer"):
        codec.loads('["x"]', Set[int])


def test_tuples():
    codec = Codec()

    assert codec.loads('[1, "a"]', Tuple[int, str]) == (1, "a")
    assert codec.loads("[1, 2, 3]", Tuple[int, ...]) == (1, 2, 3)
    assert codec.loads("[1, 2]", tuple) == (1, 2)

    with pytest.raises(ShapeMismatchError, match="length 2"):
        codec.loads("[1]", Tuple[int, str])


def test_any_returns_tree_unchanged():
    codec = Codec()
    tree = {"a": [1, {"b": None}]}

    assert codec.decode_value(tree) == tree
    assert codec.decode_value(tree, object) == tree


def test_unknown_type_raises_parse_error_before_parsing():
    codec = Codec()

    # The type is resolved first, so even invalid text reports the type.
    with pytest.raises(ParseError, match="bytes"):
        codec.loads("{not json", bytes)


def test_unknown_value_raises_encode_error():
    with pytest.raises(EncodeError, match="Decimal"):
        Codec().encode_value(Decimal("1.5"))


def test_bytes_input():
    codec = Codec()

    assert codec.loads(b'{"a": 1}') == {"a": 1}
    with pytest.raises(ParseError, match="UTF-8"):
        codec.loads(b"\xff\xfe")


def test_invalid_json_chains_decoder_error():
    import json

    with pytest.raises(ParseError) as excinfo:
        Codec().loads("{not valid json")

    assert isinstance(excinfo.value.__cause__, json.JSONDecodeError)
    assert isinstance(excinfo.value, ValueError)


class DecimalExtension(Extension):
    name = "decimal"

    def __init__(self, tag=""):
        self.tag = tag

    def encoder_for(self, value):
        if isinstance(value, Decimal):
            return lambda v, codec: self.tag + str(v)
        return None

    def decoder_for(self, tp, codec):
        if tp is Decimal:
            return lambda tree: Decimal(tree[len(self.tag):])
        return None


def test_custom_extension_is_used_recursively():
    codec = Codec([DecimalExtension(), MapEntriesExtension()])

    assert codec.encode_value({"price": Decimal("1.50")}) == [{"key": "price", "value": "1.50"}]
    assert codec.loads('{"price": "2.25"}', Dict[str, Decimal]) == {"price": Decimal("2.25")}


def test_later_extensions_take_precedence():
    codec = Codec([DecimalExtension("a:"), DecimalExtension("b:")])

    assert codec.encode_value(Decimal("1")) == "b:1"
    assert codec.decode_value("b:3", Decimal) == Decimal("3")
    assert [ext.tag for ext in codec.extensions] == ["a:", "b:"]


def test_extensions_are_frozen_at_construction():
    extensions = [MapEntriesExtension()]
    codec = Codec(extensions)
    extensions.append(DecimalExtension())

    assert len(codec.extensions) == 1
    assert isinstance(codec.extensions, tuple)


def test_json_kind_names():
    assert json_kind(None) == "null"
    assert json_kind(True) == "boolean"
    assert json_kind(1.5) == "number"
    assert json_kind("x") == "string"
    assert json_kind([]) == "array"
    assert json_kind({}) == "object"
