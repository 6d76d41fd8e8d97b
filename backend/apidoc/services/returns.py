"""
apidoc — Return Shape Extraction
=================================

What:  Describes what a handler returns: a flat list of fields and an
       example JSON body.
How:   The route's `response_model` (declared, or inferred by FastAPI from
       the return annotation) is turned into a JSON schema with pydantic's
       TypeAdapter. The schema is walked once for fields and once for the
       example.

Example values, in priority order:
    1. the first entry of `examples` (Field(examples=[...]) or model-level)
    2. `default`
    3. the first `enum` member
    4. a placeholder for the JSON type ("", 0, 0.0, false, [], {})

Record level:
    return_record_level=True   fields are named by full dotted path
                               ("data", "data.items", "data.items.name")
    return_record_level=False  fields carry their leaf name and `parent`

Self-referencing models (a Category with `children: List[Category]`) are
expanded once; the repeat is rendered as an empty object.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from fastapi.routing import APIRoute
from pydantic import TypeAdapter

from apidoc.registry import HandlerDescriptor
from apidoc.schemas.document import ReturnField

logger = logging.getLogger(__name__)

Schema = Dict[str, Any]

PLACEHOLDERS: Dict[str, Any] = {
    "string": "",
    "integer": 0,
    "number": 0.0,
    "boolean": False,
    "array": [],
    "object": {},
    "null": None,
}


@dataclass(frozen=True)
class ReturnShape:
    """Fields of the response body plus a rendered example ("" when there is no body model)."""
    fields: Tuple[ReturnField, ...] = field(default_factory=tuple)
    example_json: str = ""


class ReturnExtractor(ABC):
    """Handler + record-level flag → ReturnShape."""

    @abstractmethod
    def extract(self, handler: HandlerDescriptor, record_level: bool) -> ReturnShape:
        ...


# ══════════════════════════════════════════════════════════════════════════
# JSON Schema Helpers
# ══════════════════════════════════════════════════════════════════════════


def resolve(schema: Schema, defs: Schema) -> Tuple[Schema, Optional[str]]:
    """
    Unwraps `$ref`, single-element `allOf` and `Optional` (`anyOf` with null).

    Returns:
        (schema, ref_name): the concrete schema, and the name of the last
        definition it came from (None for inline schemas).
    """
    ref_name = None
    schema = dict(schema)
    while True:
        if "$ref" in schema:
            ref_name = schema.pop("$ref").rsplit("/", 1)[-1]
            # Sibling keys (description, default) override the definition's
            schema = {**defs.get(ref_name, {}), **schema}
        elif "allOf" in schema and len(schema["allOf"]) == 1:
            inner = schema.pop("allOf")[0]
            schema = {**inner, **schema}
        elif "anyOf" in schema:
            branches = [b for b in schema["anyOf"] if b.get("type") != "null"]
            if len(branches) != 1:
                break
            schema.pop("anyOf")
            schema = {**branches[0], **schema}
        else:
            break
    return schema, ref_name


def type_label(schema: Schema) -> str:
    kind = schema.get("type")
    if isinstance(kind, list):
        kind = next((k for k in kind if k != "null"), "null")
    if kind:
        return kind
    if "properties" in schema:
        return "object"
    if "anyOf" in schema or "oneOf" in schema:
        return "union"
    return "any"


def collect_fields(
    schema: Schema,
    defs: Schema,
    record_level: bool,
    parent: str = "",
    seen: FrozenSet[str] = frozenset(),
) -> List[ReturnField]:
    """Depth-first field list; array items contribute their fields under the array's path."""
    schema, ref = resolve(schema, defs)
    if ref is not None and ref in seen:
        return []
    if ref is not None:
        seen = seen | {ref}

    if type_label(schema) == "array" and isinstance(schema.get("items"), dict):
        return collect_fields(schema["items"], defs, record_level, parent, seen)

    fields: List[ReturnField] = []
    required = set(schema.get("required", ()))
    for name, prop in (schema.get("properties") or {}).items():
        prop_schema, _ = resolve(prop, defs)
        path = f"{parent}.{name}" if parent else name
        fields.append(
            ReturnField(
                name=path if record_level else name,
                type=type_label(prop_schema),
                desc=prop_schema.get("description", ""),
                parent=parent,
                required=name in required,
            )
        )
        fields.extend(collect_fields(prop, defs, record_level, path, seen))
    return fields


def build_example(schema: Schema, defs: Schema, seen: FrozenSet[str] = frozenset()) -> Any:
    """Example value for a schema (see module docstring for the priority order)."""
    schema, ref = resolve(schema, defs)
    if schema.get("examples"):
        return schema["examples"][0]
    if "default" in schema:
        return schema["default"]
    if "const" in schema:
        return schema["const"]
    if schema.get("enum"):
        return schema["enum"][0]

    kind = type_label(schema)
    if kind == "object":
        if ref is not None and ref in seen:
            return {}
        if ref is not None:
            seen = seen | {ref}
        return {
            name: build_example(prop, defs, seen)
            for name, prop in (schema.get("properties") or {}).items()
        }
    if kind == "array":
        items = schema.get("items")
        if isinstance(items, dict):
            return [build_example(items, defs, seen)]
        return []
    if kind == "union":
        branches = schema.get("anyOf") or schema.get("oneOf") or []
        return build_example(branches[0], defs, seen) if branches else None
    return PLACEHOLDERS.get(kind)


class SchemaReturnExtractor(ReturnExtractor):
    """Return shape from the APIRoute's response model via pydantic JSON schema."""

    def __init__(self, indent: Optional[int] = 2):
        self.indent = indent

    def extract(self, handler: HandlerDescriptor, record_level: bool) -> ReturnShape:
        route = handler.route if isinstance(handler.route, APIRoute) else None
        model = route.response_model if route is not None else None
        if model is None:
            return ReturnShape()

        schema = TypeAdapter(model).json_schema(mode="serialization")
        defs = schema.get("$defs", {})
        fields = collect_fields(schema, defs, record_level)
        example = build_example(schema, defs)
        logger.debug("Extracted %d return fields for %s", len(fields), handler.qualified_name)
        return ReturnShape(
            fields=tuple(fields),
            example_json=json.dumps(example, indent=self.indent, ensure_ascii=False, default=str),
        )
