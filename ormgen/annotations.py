"""The orm() class decorator.

Marks a class as a persisted model and attaches its ModelDescriptor::

    @orm(table_name="people", auto_id_and_date_fields=False)
    @dataclass
    class Person:
        name: str
        age: int
        born: Optional[datetime] = None

Fields are the class's type hints in definition order, base classes first.
``ClassVar`` hints are skipped and ``Optional[X]`` is treated as ``X``.
Generated queries build models with keyword arguments, so the class needs an
``__init__`` accepting every field (a dataclass does).

``auto_id_and_date_fields`` is on by default, so unless the class declares
``id``, ``createdAt`` and ``updatedAt`` itself (or passes
``auto_id_and_date_fields=False``) the generated ``deserialize`` also
passes those keywords, and the class's ``__init__`` must accept them.
"""

from __future__ import annotations

import inspect
import types
import typing
from typing import Any, Optional, Union

from .config import check_overrides
from .errors import InvalidAnnotationTarget, ModelDefinitionError
from .model import FieldDescriptor, ModelDescriptor

ORM_MODEL_ATTR = "__orm_model__"


def _unwrap_optional(hint: Any) -> Any:
    if typing.get_origin(hint) in (Union, types.UnionType):
        args = [a for a in typing.get_args(hint) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return hint


def describe_model(
    cls: type, table_name: Optional[str] = None, options: Optional[dict[str, bool]] = None,
) -> ModelDescriptor:
    """Build a ModelDescriptor from a class's type hints."""
    if not inspect.isclass(cls):
        raise InvalidAnnotationTarget(cls)
    try:
        hints = typing.get_type_hints(cls)
    except NameError as exc:
        raise ModelDefinitionError(f"{cls.__name__}: cannot resolve type hints ({exc})") from exc

    fields = tuple(
        FieldDescriptor.of(name, _unwrap_optional(hint))
        for name, hint in hints.items()
        if typing.get_origin(hint) is not typing.ClassVar and hint is not typing.ClassVar
    )
    return ModelDescriptor(
        class_name=cls.__name__,
        fields=fields,
        table_name=table_name,
        module=cls.__module__,
        options=dict(options or {}),
    )


def orm(
    target: Any = None, *, table_name: Optional[str] = None, **options: bool,
) -> Any:
    """Class decorator recording a model's descriptor as ``__orm_model__``.

    Works bare (``@orm``) or called (``@orm(table_name=...)``). Keyword
    options override GeneratorOptions flags for this model only.
    """
    check_overrides(options)

    def decorate(cls: Any) -> Any:
        setattr(cls, ORM_MODEL_ATTR, describe_model(cls, table_name, options))
        return cls

    if target is None:
        return decorate
    return decorate(target)


def model_of(cls: type) -> ModelDescriptor:
    """The descriptor recorded by orm() on a class."""
    try:
        return cls.__dict__[ORM_MODEL_ATTR]
    except (AttributeError, KeyError):
        raise ModelDefinitionError(f"{cls!r} is not decorated with orm()") from None


def collect_models(module: Any) -> list[ModelDescriptor]:
    """Descriptors of orm() classes defined in a module, in definition order."""
    return [
        obj.__dict__[ORM_MODEL_ATTR]
        for obj in vars(module).values()
        if inspect.isclass(obj)
        and obj.__module__ == module.__name__
        and ORM_MODEL_ATTR in obj.__dict__
    ]
