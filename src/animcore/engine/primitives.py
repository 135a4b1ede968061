from __future__ import annotations
import json
import re
from typing import Any, Dict, List, Literal, Tuple, Union
from typing_extensions import Annotated
from pydantic import (
    AfterValidator, BaseModel, ConfigDict, Discriminator, Field, GetCoreSchemaHandler,
    GetJsonSchemaHandler, Strict, Tag, model_validator,
)
from pydantic_core import PydanticCustomError, core_schema, to_jsonable_python

# Patterns (kept literal; exported verbatim into JSON-schema)
SLUG_RE = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"
ROLL_OPTION_RE = r"^[a-z0-9]+(?:-[a-z0-9]+)*(?::[a-z0-9]+(?:-[a-z0-9]+)*)*(?::-?\d+)?$"
HEX_COLOUR_RE = r"^#[0-9a-fA-F]{3}(?:[0-9a-fA-F]{3})?$"
FILE_PATH_RE = r'^\w[^":<>?\\|/]+(?:/[^":<>?\\|/]+)+\.\w\w\w\w?$'
SEQUENCER_DB_ENTRY_RE = r"^\w[\w-]+(?:\.(?:[\w-]+|\{\w+(?:,[^{},]+)+\}))+$"
DOCUMENT_UUID_RE = r"^[a-zA-Z0-9]+(?:\.[a-zA-Z0-9-]+)+$"

NON_ZERO_MESSAGE = "Number cannot be 0. If you want the value to be 0, simply leave the property undefined."
NON_EMPTY_MESSAGE = "Object must not be empty."
UNIQUE_MESSAGE = "Items must be unique."


class Pattern:
    """String refinement: full match against `regex`, failing with a readable message."""

    def __init__(self, regex: str, message: str):
        self.regex = regex
        self.message = message
        self._compiled = re.compile(regex)

    def _check(self, value: str) -> str:
        if not self._compiled.fullmatch(value):
            raise PydanticCustomError("invalid_string", self.message)
        return value

    def __get_pydantic_core_schema__(self, source: Any, handler: GetCoreSchemaHandler) -> core_schema.CoreSchema:
        return core_schema.no_info_after_validator_function(self._check, handler(source))

    def __get_pydantic_json_schema__(self, schema: core_schema.CoreSchema, handler: GetJsonSchemaHandler) -> Dict[str, Any]:
        json_schema = handler(schema)
        json_schema["pattern"] = self.regex
        return json_schema


class SchemaHint:
    """Adds keywords to the generated JSON-schema for refinements pydantic cannot express itself."""

    def __init__(self, extra: Dict[str, Any]):
        self.extra = extra

    def __get_pydantic_json_schema__(self, schema: core_schema.CoreSchema, handler: GetJsonSchemaHandler) -> Dict[str, Any]:
        json_schema = handler(schema)
        json_schema.update(self.extra)
        return json_schema


def _normalize(value: Any) -> Any:
    # JSON has a single number type: 1 and 1.0 are the same value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, dict):
        return {k: _normalize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_normalize(v) for v in value]
    return value


def canonical_json(value: Any) -> str:
    """Key-order independent encoding used for structural equality."""
    return json.dumps(_normalize(to_jsonable_python(value)), sort_keys=True, separators=(",", ":"))


def has_duplicates(items: List[Any]) -> bool:
    seen: set[str] = set()
    for item in items:
        key = canonical_json(item)
        if key in seen:
            return True
        seen.add(key)
    return False


class UniqueItems:
    """List refinement: items are validated first, then compared structurally."""

    def _validate(self, value: Any, handler: core_schema.ValidatorFunctionWrapHandler) -> Any:
        result = handler(value)
        if has_duplicates(value):
            raise ValueError(UNIQUE_MESSAGE)
        return result

    def __get_pydantic_core_schema__(self, source: Any, handler: GetCoreSchemaHandler) -> core_schema.CoreSchema:
        return core_schema.no_info_wrap_validator_function(self._validate, handler(source))

    def __get_pydantic_json_schema__(self, schema: core_schema.CoreSchema, handler: GetJsonSchemaHandler) -> Dict[str, Any]:
        json_schema = handler(schema)
        json_schema["uniqueItems"] = True
        return json_schema


def json_kind(value: Any) -> str | None:
    """Name of the JSON type of `value` (validated models count as objects)."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, (dict, BaseModel)):
        return "object"
    return None


def either(**choices: Any) -> Any:
    """
    Union dispatched on the JSON kind of the input, e.g. either(number=..., object=...).
    Only the branch matching the input kind is validated, so its errors are the only ones reported.
    """
    members = tuple(Annotated[tp, Tag(kind)] for kind, tp in choices.items())
    return Annotated[
        Union[members],
        Discriminator(
            json_kind,
            custom_error_type="invalid_type",
            custom_error_message=f"Expected {' or '.join(choices)}.",
        ),
    ]


def _non_zero(num: float) -> float:
    if num == 0:
        raise ValueError(NON_ZERO_MESSAGE)
    return num


def _offset_range(pair: Tuple[float, float]) -> Tuple[float, float]:
    if pair[0] == pair[1]:
        raise ValueError("Offset range cannot be zero.")
    return pair


def _whole_number(num: float) -> int:
    if isinstance(num, float) and not num.is_integer():
        raise PydanticCustomError("invalid_type", "Expected integer, received float.")
    return int(num)


def integer(**constraints: Any) -> Any:
    """Whole number; `2.0` counts as an integer since JSON has a single number type."""
    return Annotated[Number, Field(**constraints), AfterValidator(_whole_number), SchemaHint({"type": "integer"})]


def _min_id_length(value: str) -> str:
    if len(value) < 6:
        raise ValueError("Animation IDs should be reasonably unique.")
    return value


# Numbers: ints and floats only (no bools, no numeric strings)
Number = Annotated[float, Strict()]
Integer = integer()
NonZeroNumber = Annotated[Number, AfterValidator(_non_zero), SchemaHint({"not": {"const": 0}})]
PositiveNumber = Annotated[Number, Field(gt=0)]
PositiveInteger = integer(gt=0)
Angle = Annotated[Number, Field(gt=-180, le=180), AfterValidator(_non_zero), SchemaHint({"not": {"const": 0}})]
OffsetRange = Annotated[Tuple[Number, Number], AfterValidator(_offset_range), SchemaHint({"uniqueItems": True})]

# Strings
NonEmptyStr = Annotated[str, Field(min_length=1)]
Slug = Annotated[str, Pattern(SLUG_RE, "String must be a valid slug.")]
RollOption = Annotated[str, Pattern(ROLL_OPTION_RE, "String must be a valid roll option.")]
HexColour = Annotated[str, Pattern(HEX_COLOUR_RE, "String must be a valid hexadecimal colour-code.")]
FilePath = Annotated[str, Pattern(
    FILE_PATH_RE,
    'String must be a valid filepath. The following characters are unsafe for cross-platform filesystems: ":<>?\\|',
)]
SequencerDBEntry = Annotated[str, Pattern(SEQUENCER_DB_ENTRY_RE, "String must be a valid Sequencer database entry.")]
# A database entry or a file path; both are strings so they share one pattern
Asset = Annotated[str, Pattern(
    f"{SEQUENCER_DB_ENTRY_RE}|{FILE_PATH_RE}",
    "String must be a valid Sequencer database entry or filepath.",
)]
DocumentUUID = Annotated[str, Pattern(DOCUMENT_UUID_RE, "Must be a valid UUID.")]
AnimationId = Annotated[Slug, AfterValidator(_min_id_length), SchemaHint({"minLength": 6})]

# Flags are either present and true, or absent
Flag = Literal[True]


def unique_list(item: Any, *, min_length: int = 1) -> Any:
    """Non-empty (by default) list whose items are structurally distinct."""
    return Annotated[List[item], Field(min_length=min_length), UniqueItems()]


class StrictModel(BaseModel):
    """Closed object: unknown keys are rejected. Optional keys default to None and do not accept null."""
    model_config = ConfigDict(extra="forbid")


class NonEmptyModel(StrictModel):
    """Closed object that must carry at least one key."""
    model_config = ConfigDict(extra="forbid", json_schema_extra={"minProperties": 1})

    @model_validator(mode="after")
    def _require_some_key(self):
        if not self.model_fields_set:
            raise ValueError(NON_EMPTY_MESSAGE)
        return self

