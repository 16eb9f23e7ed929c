"""Model descriptors: the declarative input of the generator.

A ModelDescriptor names a model class, its table and its persisted fields in
declaration order. Descriptors are frozen; the generator only derives new
values from them.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Union


class FieldType(enum.Enum):
    """Field types that have an expression builder."""

    STRING = "String"
    BOOL = "Bool"
    DATETIME = "DateTime"
    INT = "Int"
    DOUBLE = "Double"

    @classmethod
    def parse(cls, value: Any) -> FieldType | None:
        """Resolve a type name or Python type, or None when unsupported."""
        if isinstance(value, FieldType):
            return value
        if isinstance(value, type):
            return _PYTHON_TYPES.get(value)
        if isinstance(value, str):
            return _TYPE_NAMES.get(value.strip().lower())
        return None


# Exact type matches only: bool is a subclass of int.
_PYTHON_TYPES: dict[type, FieldType] = {
    str: FieldType.STRING,
    bool: FieldType.BOOL,
    datetime: FieldType.DATETIME,
    int: FieldType.INT,
    float: FieldType.DOUBLE,
}

_TYPE_NAMES: dict[str, FieldType] = {
    "string": FieldType.STRING,
    "str": FieldType.STRING,
    "bool": FieldType.BOOL,
    "boolean": FieldType.BOOL,
    "datetime": FieldType.DATETIME,
    "int": FieldType.INT,
    "integer": FieldType.INT,
    "double": FieldType.DOUBLE,
    "float": FieldType.DOUBLE,
}


def type_name(value: Any) -> str:
    """Readable name for a declared type, used in error messages."""
    if isinstance(value, FieldType):
        return value.value
    if isinstance(value, type):
        return value.__name__
    return str(value)


@dataclass(frozen=True)
class FieldDescriptor:
    """One persisted field.

    ``type`` is a FieldType when the declaration was recognised, otherwise the
    declared type name kept verbatim so the translator can report it.
    """

    name: str
    type: Union[FieldType, str]

    @classmethod
    def of(cls, name: str, declared: Any) -> FieldDescriptor:
        resolved = FieldType.parse(declared)
        return cls(name=name, type=resolved if resolved is not None else type_name(declared))

    @property
    def is_supported(self) -> bool:
        return isinstance(self.type, FieldType)


@dataclass(frozen=True)
class ModelDescriptor:
    """A model class and its fields in declaration order."""

    class_name: str
    fields: tuple[FieldDescriptor, ...]
    table_name: str | None = None
    module: str | None = None
    options: dict[str, bool] = field(default_factory=dict, compare=False, hash=False)

    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def has_field(self, name: str) -> bool:
        return any(f.name == name for f in self.fields)
