"""Errors raised while turning model definitions into query classes.

Every error aborts the whole generation run; no partial output is written.
"""

from __future__ import annotations


class OrmGenerationError(Exception):
    """Base class for all generator failures."""


class InvalidAnnotationTarget(OrmGenerationError):
    """The orm() decorator was applied to something that is not a class."""

    def __init__(self, target: object) -> None:
        self.target = target
        super().__init__(
            f"The orm() decorator can only be applied to classes, got {target!r}."
        )


class UnsupportedFieldType(OrmGenerationError):
    """A field's declared type has no matching expression builder."""

    def __init__(self, model: str, field: str, type_name: str) -> None:
        self.model = model
        self.field = field
        self.type_name = type_name
        super().__init__(
            f"Cannot generate ORM code for field {model}.{field} of type {type_name}."
        )


class ModelDefinitionError(OrmGenerationError):
    """A model definition document is malformed."""
