import pytest
from pydantic import TypeAdapter, ValidationError
from animcore.engine.primitives import (
    Angle, AnimationId, Asset, FilePath, HexColour, Integer, NON_EMPTY_MESSAGE, NON_ZERO_MESSAGE, NonZeroNumber,
    Number, OffsetRange, PositiveInteger, RollOption, SequencerDBEntry, Slug, canonical_json, either,
    has_duplicates, json_kind, unique_list,
)
from animcore.engine.schema_models import Vector2


def _ok(tp, value):
    return TypeAdapter(tp).validate_python(value)

def _err(tp, value) -> dict:
    with pytest.raises(ValidationError) as exc:
        TypeAdapter(tp).validate_python(value)
    return exc.value.errors()[0]


@pytest.mark.parametrize("value", ["fire", "fire-bolt", "a1-b2-c3"])
def test_slug_ok(value):
    assert _ok(Slug, value) == value

@pytest.mark.parametrize("value", ["Fire", "fire--bolt", "-fire", "fire_bolt", ""])
def test_slug_rejected(value):
    assert _err(Slug, value)["type"] == "invalid_string"

@pytest.mark.parametrize("value", ["strike", "attack-roll:trip", "item:tag:magical", "check:statistic:-2", "spell:rank:3"])
def test_roll_option_ok(value):
    _ok(RollOption, value)

@pytest.mark.parametrize("value", ["not-a-valid-roll-option!", "Item:Tag", "a::b", "a:-b"])
def test_roll_option_rejected(value):
    err = _err(RollOption, value)
    assert err["type"] == "invalid_string"
    assert err["msg"] == "String must be a valid roll option."

def test_file_path():
    _ok(FilePath, "modules/jb2a/fire/bolt.webm")
    _ok(FilePath, "icons/svg/skull.svg")
    # needs a directory and a 3-4 character extension
    _err(FilePath, "bolt.webm")
    _err(FilePath, "modules/bolt.webmmm")
    err = _err(FilePath, 'modules/bad:name.png')
    assert "unsafe" in err["msg"]

def test_sequencer_db_entry():
    _ok(SequencerDBEntry, "jb2a.fire_bolt.orange")
    _ok(SequencerDBEntry, "jb2a.{fire,ice}.bolt")
    _ok(SequencerDBEntry, "jb2a.melee_generic.{slash,piercing}.01.{orange,blue}")
    _err(SequencerDBEntry, "jb2a")
    _err(SequencerDBEntry, "jb2a.{fire}.bolt")

def test_asset_accepts_entry_or_path():
    _ok(Asset, "jb2a.impact.001")
    _ok(Asset, "modules/impact/001.webm")
    assert _err(Asset, "nope")["type"] == "invalid_string"

@pytest.mark.parametrize("value", ["#fff", "#A0b1C2"])
def test_hex_colour_ok(value):
    _ok(HexColour, value)

@pytest.mark.parametrize("value", ["fff", "#ffff", "#ggg"])
def test_hex_colour_rejected(value):
    _err(HexColour, value)

def test_angle_bounds():
    assert _ok(Angle, 180) == 180
    _ok(Angle, -179.5)
    _err(Angle, -180)
    _err(Angle, 181)
    assert _err(Angle, 0)["msg"].endswith(NON_ZERO_MESSAGE)

def test_non_zero_number():
    assert _ok(NonZeroNumber, -2) == -2
    err = _err(NonZeroNumber, 0)
    assert err["type"] == "value_error"
    assert str(err["ctx"]["error"]) == NON_ZERO_MESSAGE

def test_numbers_are_strict():
    _ok(Number, 3)
    _ok(Number, 0.5)
    _err(Number, True)
    _err(Number, "3")

def test_animation_id_length():
    _ok(AnimationId, "fire-bolt")
    err = _err(AnimationId, "fire")
    assert "reasonably unique" in str(err["ctx"]["error"])

def test_json_kind():
    assert json_kind(None) == "null"
    assert json_kind(True) == "boolean"
    assert json_kind(1.5) == "number"
    assert json_kind([]) == "array"
    assert json_kind({}) == "object"
    assert json_kind(object()) is None

def test_either_dispatches_on_kind():
    tp = either(number=NonZeroNumber, object=Vector2)
    assert _ok(tp, 2) == 2
    assert _ok(tp, {"x": 1}) == Vector2(x=1)
    err = _err(tp, "two")
    assert err["type"] == "invalid_type"
    assert err["msg"] == "Expected number or object."

def test_either_reports_only_matching_branch():
    tp = either(number=NonZeroNumber, object=Vector2)
    with pytest.raises(ValidationError) as exc:
        TypeAdapter(tp).validate_python({"x": 1, "z": 2})
    assert [e["type"] for e in exc.value.errors()] == ["extra_forbidden"]

def test_canonical_json_ignores_key_order_and_int_float():
    assert canonical_json({"a": 1, "b": [1, 2]}) == canonical_json({"b": [1.0, 2], "a": 1.0})
    assert canonical_json([1, 2]) != canonical_json([2, 1])

def test_has_duplicates():
    assert has_duplicates([{"a": 1, "b": 2}, {"b": 2, "a": 1}])
    assert not has_duplicates([{"a": 1}, {"a": 2}])

def test_unique_list():
    tp = unique_list(Number)
    assert _ok(tp, [2, 1]) == [2, 1]
    assert str(_err(tp, [1, 1.0])["ctx"]["error"]) == "Items must be unique."
    assert _err(tp, [])["type"] == "too_short"

def test_non_empty_model():
    Vector2.model_validate({"y": -1})
    with pytest.raises(ValidationError) as exc:
        Vector2.model_validate({})
    assert NON_EMPTY_MESSAGE in str(exc.value)
    with pytest.raises(ValidationError):
        Vector2.model_validate({"z": 1})

def test_null_is_not_absent():
    with pytest.raises(ValidationError):
        Vector2.model_validate({"x": None})

def test_integers_accept_whole_floats():
    assert _ok(Integer, 3) == 3
    value = _ok(Integer, -2.0)
    assert value == -2 and isinstance(value, int)
    err = _err(Integer, 2.5)
    assert err["type"] == "invalid_type"
    assert err["msg"] == "Expected integer, received float."
    _err(Integer, True)
    assert _ok(PositiveInteger, 4.0) == 4
    _err(PositiveInteger, 0)

def test_integer_schema():
    schema = TypeAdapter(PositiveInteger).json_schema()
    assert schema["type"] == "integer"
    assert schema["exclusiveMinimum"] == 0

def test_offset_range():
    assert _ok(OffsetRange, [-1, 1]) == (-1, 1)
    assert str(_err(OffsetRange, [2, 2])["ctx"]["error"]) == "Offset range cannot be zero."
    assert TypeAdapter(OffsetRange).json_schema()["uniqueItems"] is True
