from __future__ import annotations
from pathlib import Path
from typing import Any, Dict
import json
from pydantic import TypeAdapter
from pydantic.json_schema import GenerateJsonSchema, JsonSchemaMode, JsonSchemaValue
from pydantic_core import core_schema
from animcore.engine.schema_models import Animations, TokenImages

SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"

SCHEMA_FILES = {
    "animations": "animations.schema.json",
    "tokenImages": "tokenImages.schema.json",
}


class AnimCoreJsonSchema(GenerateJsonSchema):
    """
    JSON-schema flavour for editor tooling: descriptions are mirrored into `markdownDescription`,
    and string-keyed records constrain their keys with `propertyNames` so unknown keys are rejected.
    """

    def dict_schema(self, schema: core_schema.DictSchema) -> JsonSchemaValue:
        json_schema = super().dict_schema(schema)
        pattern_properties = json_schema.pop("patternProperties", None)
        if pattern_properties:
            (pattern, values), = pattern_properties.items()
            json_schema["propertyNames"] = {"pattern": pattern}
            json_schema["additionalProperties"] = values
        return json_schema

    def generate(self, schema: core_schema.CoreSchema, mode: JsonSchemaMode = "validation") -> JsonSchemaValue:
        json_schema = super().generate(schema, mode=mode)
        _mirror_descriptions(json_schema)
        return {"$schema": SCHEMA_DIALECT, **json_schema}


def _mirror_descriptions(node: Any) -> None:
    if isinstance(node, dict):
        if isinstance(node.get("description"), str):
            node.setdefault("markdownDescription", node["description"])
        for key, value in node.items():
            # `properties` maps user keys; a key named "description" there is not documentation
            if key in ("properties", "$defs", "patternProperties"):
                for sub in value.values():
                    _mirror_descriptions(sub)
            else:
                _mirror_descriptions(value)
    elif isinstance(node, list):
        for item in node:
            _mirror_descriptions(item)


_ADAPTERS = {
    "animations": TypeAdapter(Animations),
    "tokenImages": TypeAdapter(TokenImages),
}


def get_json_schema(name: str) -> Dict[str, Any]:
    """
    JSON-schema for one of the top-level grammars, "animations" or "tokenImages".
    Raises ValueError for any other name.
    """
    adapter = _ADAPTERS.get(name)
    if adapter is None:
        raise ValueError(f"Unknown schema name: {name!r} (expected one of {sorted(_ADAPTERS)})")
    return adapter.json_schema(schema_generator=AnimCoreJsonSchema)


def export_schemas(out_dir: Path, indent: int = 2) -> list[Path]:
    out_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for name, filename in SCHEMA_FILES.items():
        path = out_dir / filename
        path.write_text(json.dumps(get_json_schema(name), indent=indent), encoding="utf-8")
        written.append(path)
    return written


if __name__ == "__main__":
    root = Path(__file__).resolve().parents[3] / "docs" / "schemas"
    export_schemas(root)
    print(f"Exported schemas to {root}")
