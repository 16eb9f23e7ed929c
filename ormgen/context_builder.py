"""Build Jinja2 template context from a model descriptor.

Derives the query descriptor (table, ordered fields, positional row
decoders) and the where descriptor (one expression builder per field), and
assembles the context dict for orm.py.j2.
"""

from __future__ import annotations

import logging
from typing import Any

from .config import GeneratorOptions
from .errors import ModelDefinitionError, UnsupportedFieldType
from .model import FieldDescriptor, FieldType, ModelDescriptor
from .naming import (
    column_name_for,
    is_identifier,
    is_module_path,
    pascal_case,
    snake_case,
    table_name_for,
)

logger = logging.getLogger(__name__)

# Expression builder class per field type
_BUILDERS: dict[FieldType, str] = {
    FieldType.STRING: "StringSqlExpressionBuilder",
    FieldType.BOOL: "BooleanSqlExpressionBuilder",
    FieldType.DATETIME: "DateTimeSqlExpressionBuilder",
    FieldType.INT: "NumericSqlExpressionBuilder",
    FieldType.DOUBLE: "NumericSqlExpressionBuilder",
}

# Type argument of numeric builders
_NUMERIC_TYPES: dict[FieldType, str] = {
    FieldType.INT: "int",
    FieldType.DOUBLE: "float",
}

# Row value cast helper per field type
_CASTS: dict[FieldType, str] = {
    FieldType.STRING: "as_string",
    FieldType.BOOL: "as_bool",
    FieldType.DATETIME: "as_datetime",
    FieldType.INT: "as_int",
    FieldType.DOUBLE: "as_float",
}

# Added by auto_id_and_date_fields unless already declared
_AUTO_LEADING_FIELDS = (FieldDescriptor("id", FieldType.STRING),)
_AUTO_TRAILING_FIELDS = (
    FieldDescriptor("createdAt", FieldType.DATETIME),
    FieldDescriptor("updatedAt", FieldType.DATETIME),
)

# Attributes of QueryWhere that a field builder would shadow
_RESERVED_FIELD_NAMES = {"compile", "expression_builders", "substitution_values"}


def with_auto_fields(fields: tuple[FieldDescriptor, ...]) -> tuple[FieldDescriptor, ...]:
    """Add id first and createdAt/updatedAt last, skipping declared ones.

    A declared field counts as present when its snake_case name matches, so
    a declared ``created_at`` suppresses ``createdAt``.
    """
    declared = {snake_case(f.name) for f in fields}
    leading = tuple(f for f in _AUTO_LEADING_FIELDS if snake_case(f.name) not in declared)
    trailing = tuple(f for f in _AUTO_TRAILING_FIELDS if snake_case(f.name) not in declared)
    return leading + tuple(fields) + trailing


def validate_model(model: ModelDescriptor) -> None:
    """Reject class and module names that cannot be pasted into source."""
    if not is_identifier(model.class_name):
        raise ModelDefinitionError(f"{model.class_name!r} is not a valid class name")
    if model.module is not None and not is_module_path(model.module):
        raise ModelDefinitionError(
            f"{model.class_name}: {model.module!r} is not a valid module path"
        )


def resolve_fields(model: ModelDescriptor, options: GeneratorOptions) -> tuple[FieldDescriptor, ...]:
    """Final field list in declaration order, validated."""
    fields = model.fields
    if options.auto_id_and_date_fields:
        fields = with_auto_fields(fields)
    validate_fields(model.class_name, fields, options)
    return fields


def validate_fields(
    class_name: str, fields: tuple[FieldDescriptor, ...], options: GeneratorOptions,
) -> None:
    """Reject field lists the generated classes could not represent."""
    seen_names: set[str] = set()
    seen_columns: dict[str, str] = {}
    for f in fields:
        if not is_identifier(f.name):
            raise ModelDefinitionError(f"{class_name}: {f.name!r} is not a valid field name")
        if f.name in _RESERVED_FIELD_NAMES:
            raise ModelDefinitionError(f"{class_name}: field name {f.name!r} is reserved")
        if f.name in seen_names:
            raise ModelDefinitionError(f"{class_name}: duplicate field {f.name!r}")
        seen_names.add(f.name)

        column = column_name_for(f.name, options.auto_snake_case_names)
        if column in seen_columns:
            raise ModelDefinitionError(
                f"{class_name}: fields {seen_columns[column]!r} and {f.name!r}"
                f" both map to column {column!r}"
            )
        seen_columns[column] = f.name

        if not isinstance(f.type, FieldType):
            raise UnsupportedFieldType(class_name, f.name, str(f.type))


def resolve_table_name(model: ModelDescriptor) -> str:
    """Explicit table name, or the pluralized snake_case class name."""
    return model.table_name or table_name_for(model.class_name)


def build_query_descriptor(
    model: ModelDescriptor, fields: tuple[FieldDescriptor, ...],
) -> dict[str, Any]:
    """Table identity, ordered field names and positional row decoders."""
    base = pascal_case(model.class_name)
    decoders = [
        {
            "name": f.name,
            "index": i,
            "cast": _CASTS[f.type],
        }
        for i, f in enumerate(fields)
    ]
    return {
        "class_name": f"{base}Query",
        "where_class_name": f"{base}QueryWhere",
        "model_class": model.class_name,
        "table_name": resolve_table_name(model),
        "field_names": [f.name for f in fields],
        "decoders": decoders,
    }


def build_where_descriptor(
    model: ModelDescriptor, fields: tuple[FieldDescriptor, ...], options: GeneratorOptions,
) -> dict[str, Any]:
    """One expression builder per field, chosen by field type."""
    builders = [
        {
            "name": f.name,
            "builder": _BUILDERS[f.type],
            "column": column_name_for(f.name, options.auto_snake_case_names),
            "numeric_type": _NUMERIC_TYPES.get(f.type),
        }
        for f in fields
    ]
    return {
        "class_name": f"{pascal_case(model.class_name)}QueryWhere",
        "builders": builders,
    }


def _runtime_imports(query: dict[str, Any], where: dict[str, Any]) -> list[str]:
    names = {"Query", "QueryWhere", "SqlExpressionBuilder"}
    names.update(d["cast"] for d in query["decoders"])
    names.update(b["builder"] for b in where["builders"])
    return sorted(names)


def build_context(
    model: ModelDescriptor, options: GeneratorOptions | None = None,
) -> dict[str, Any]:
    """Build the full template context for one model.

    Raises UnsupportedFieldType or ModelDefinitionError before anything is
    rendered.
    """
    validate_model(model)
    options = (options or GeneratorOptions()).merged(model.options)
    fields = resolve_fields(model, options)

    query = build_query_descriptor(model, fields)
    where = build_where_descriptor(model, fields, options)
    logger.debug(
        "%s -> table %s, fields %s", model.class_name, query["table_name"], query["field_names"],
    )

    return {
        "model_class": model.class_name,
        "model_module": model.module,
        "query": query,
        "where": where,
        "runtime_imports": _runtime_imports(query, where),
    }
