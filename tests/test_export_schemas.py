import json
import pytest
from jsonschema import Draft202012Validator
from animcore.engine.primitives import ROLL_OPTION_RE
from animcore.engine.validation import validate_animation_data
from animcore.tools.export_schemas import SCHEMA_DIALECT, export_schemas, get_json_schema

TOKEN_IMAGE_ENTRY = {
    "name": "Wild Shape",
    "requires": "Compendium.pf2e.spells-srd.Item.wild-shape",
    "uuid": "Compendium.pf2e.spells-srd.Item.abc123",
    "rules": [
        ["wolf", "tokens/forms/wolf.webp", 1.2],
        {"key": "TokenImage", "value": "tokens/forms/raging.webp", "animation": {"duration": 500}},
    ],
}

FIREBALL = {
    "trigger": "place-template",
    "preset": "template",
    "options": {
        "preset": {"stretchTo": {"offset": {"x": [-0.5, 0.5]}}, "attachTo": True},
        "sound": {"file": "sounds/spells/fireball.ogg", "volume": 0.6},
        "filter": {"type": "Glow", "options": {"color": "#ff8800", "distance": 10}},
        "fadeOut": {"value": 400, "ease": "easeOutQuad"},
        "shape": [{"type": "circle", "radius": 2, "fillColor": "#ff0000"}],
        "id": "fireball-blast",
    },
    "contents": [
        {"file": "jb2a.fireball.explosion.{orange,purple}", "predicate": [{"not": "self:effect:dark"}]},
        {"file": "modules/fx/fireball/dark.webm", "predicate": ["self:effect:dark"]},
    ],
}

ANIMATIONS_VALID = [
    {},
    {"strike": [{"trigger": "attack-roll", "preset": "melee", "file": "mod.weapon.hit"}]},
    {"strike:agile": "strike"},
    {"fireball": [FIREBALL]},
    {"haste": [{"preset": "onToken", "options": {"persist": True, "repeats": {"count": 2}}}], "slow": "haste"},
    {"x": [{"predicate": [{"and": ["a", {"or": ["b", "c"]}]}, {"if": "d", "then": "e"}, {"gte": ["f", 2]}]}]},
    {"x": [{"options": {"repeats": 2.0, "preset": {"attachTo": {"offset": {"y": 1, "flipX": True}}}}}]},
    {"x": [{"options": {"repeats": {"count": 2, "delayMin": 5, "delayMax": 10}}}]},
    {"x": [{"options": {"filter": {"type": "Blur", "options": {"blurX": 2, "blurY": 1, "quality": 4.0}}}}]},
]

ANIMATIONS_INVALID = [
    {"foo": "not-a-valid-roll-option!"},
    {"Bad Key": "strike"},
    {"x": 5},
    {"x": []},
    {"x": [{}]},
    {"x": [{"colour": "#fff"}]},
    {"x": [{"trigger": "on-hit"}]},
    {"x": [{"preset": "melee"}, {"preset": "melee"}]},
    {"x": [{"options": {}}]},
    {"x": [{"options": {"opacity": 1}}]},
    {"x": [{"options": {"fadeIn": 0}}]},
    {"x": [{"options": {"fadeIn": "slow"}}]},
    {"x": [{"options": {"persist": False}}]},
    {"x": [{"options": {"id": "short"}}]},
    {"x": [{"options": {"preset": {"bounce": {}}}}]},
    {"x": [{"options": {"filter": {"type": "Sepia"}}}]},
    {"x": [{"options": {"filter": {"type": "Clip", "options": {"a": 1}}}}]},
    {"x": [{"predicate": [{"and": []}]}]},
    {"x": [{"predicate": [{"or": ["a", "a"]}]}]},
    {"x": [{"predicate": [{"eq": ["a", "a", "a"]}]}]},
    {"x": [{"predicate": [{"if": "a"}]}]},
    {"x": [{"predicate": [{"maybe": "a"}]}]},
    {"x": [{"file": "nope"}]},
    {"x": [{"contents": [{"preset": "melee"}, {"preset": "melee"}]}]},
    {"x": [{"options": {"repeats": 2.5}}]},
    {"x": [{"options": {"repeats": {"count": 2, "delayMax": 5}}}]},
    {"x": [{"options": {"preset": {"attachTo": {"offset": {"flipX": True}}}}}]},
    {"x": [{"options": {"preset": {"attachTo": {"offset": {"x": [1, 1]}}}}}]},
    {"x": [{"options": {"filter": {"type": "Blur", "options": {"blur": 1, "blurX": 1}}}}]},
    {"x": [{"options": {"filter": {"type": "Blur", "options": {"blur": 1, "blurY": 1}}}}]},
]

TOKEN_IMAGES_VALID = [
    {"_tokenImages": [TOKEN_IMAGE_ENTRY]},
]

TOKEN_IMAGES_INVALID = [
    {"_tokenImages": []},
    {"_tokenImages": {"_tokenImages": [TOKEN_IMAGE_ENTRY]}},
    {"_tokenImages": [{**TOKEN_IMAGE_ENTRY, "rules": []}]},
    {"_tokenImages": [{**TOKEN_IMAGE_ENTRY, "uuid": "nodots"}]},
    {"_tokenImages": [{**TOKEN_IMAGE_ENTRY, "rules": [["wolf", "tokens/forms/wolf.webp"]]}]},
    {"_tokenImages": [{**TOKEN_IMAGE_ENTRY, "rules": [{"value": "tokens/forms/wolf.webp", "ring": {}}]}]},
    {"_tokenImages": [TOKEN_IMAGE_ENTRY, TOKEN_IMAGE_ENTRY]},
    {"_tokenImages": [{**TOKEN_IMAGE_ENTRY, "rules": [{"value": "tokens/forms/wolf.webp"}]}]},
]


@pytest.fixture(scope="module")
def animations_schema():
    return get_json_schema("animations")

@pytest.fixture(scope="module")
def token_images_schema():
    return get_json_schema("tokenImages")


def test_schemas_are_deterministic():
    for name in ("animations", "tokenImages"):
        assert json.dumps(get_json_schema(name)) == json.dumps(get_json_schema(name))

def test_unknown_schema_name():
    with pytest.raises(ValueError):
        get_json_schema("effects")

def test_schemas_are_valid_draft_2020_12(animations_schema, token_images_schema):
    for schema in (animations_schema, token_images_schema):
        assert schema["$schema"] == SCHEMA_DIALECT
        Draft202012Validator.check_schema(schema)

def test_record_keys_use_property_names(animations_schema):
    assert animations_schema["type"] == "object"
    assert animations_schema["propertyNames"] == {"pattern": ROLL_OPTION_RE}
    assert "patternProperties" not in animations_schema

def test_refinements_are_exported(animations_schema):
    defs = animations_schema["$defs"]
    assert defs["EffectOptions"]["minProperties"] == 1
    assert defs["EffectOptions"]["additionalProperties"] is False
    assert defs["AnimationObject"]["properties"]["contents"]["uniqueItems"] is True
    duration = defs["EffectOptions"]["properties"]["duration"]
    assert duration["markdownDescription"] == duration["description"]

@pytest.mark.parametrize("doc", ANIMATIONS_VALID)
def test_animations_schema_accepts_what_engine_accepts(animations_schema, doc):
    assert validate_animation_data(doc).success
    assert Draft202012Validator(animations_schema).is_valid(doc)

@pytest.mark.parametrize("doc", ANIMATIONS_INVALID)
def test_animations_schema_rejects_what_engine_rejects(animations_schema, doc):
    assert not validate_animation_data(doc).success
    assert not Draft202012Validator(animations_schema).is_valid(doc)

@pytest.mark.parametrize("doc", TOKEN_IMAGES_VALID)
def test_token_images_schema_accepts_what_engine_accepts(token_images_schema, doc):
    assert validate_animation_data(doc).success
    assert Draft202012Validator(token_images_schema).is_valid(doc)

@pytest.mark.parametrize("doc", TOKEN_IMAGES_INVALID)
def test_token_images_schema_rejects_what_engine_rejects(token_images_schema, doc):
    assert not validate_animation_data(doc).success
    assert not Draft202012Validator(token_images_schema).is_valid(doc)

def test_export_schemas(tmp_path):
    written = export_schemas(tmp_path / "schemas", indent=4)
    assert sorted(p.name for p in written) == ["animations.schema.json", "tokenImages.schema.json"]
    first = [p.read_text(encoding="utf-8") for p in written]
    export_schemas(tmp_path / "schemas", indent=4)
    assert [p.read_text(encoding="utf-8") for p in written] == first
    assert json.loads(first[0]) == get_json_schema("animations")

def test_cross_field_rules_are_exported(animations_schema):
    defs = animations_schema["$defs"]
    assert defs["Offset"]["anyOf"] == [{"required": ["x"]}, {"required": ["y"]}]
    assert defs["RepeatOptions"]["dependentRequired"] == {"delayMax": ["delayMin"]}
    assert defs["BlurOptions"]["not"]["required"] == ["blur"]

def test_delay_ordering_is_checked_by_engine_only(animations_schema):
    # comparing two values is beyond JSON Schema
    doc = {"x": [{"options": {"repeats": {"count": 2, "delayMin": 5, "delayMax": 1}}}]}
    assert not validate_animation_data(doc).success
    assert Draft202012Validator(animations_schema).is_valid(doc)
