"""Shared fixtures for ormgen tests.

Generated modules are executed in a fresh namespace that already holds the
model class, so they need no importable model module.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

import pytest

from ormgen.codegen import render_model
from ormgen.config import GeneratorOptions
from ormgen.model import FieldDescriptor, FieldType, ModelDescriptor


# ---------------------------------------------------------------------------
# Environment: keep ORMGEN_* variables from leaking into option defaults
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("ORMGEN_AUTO_SNAKE_CASE_NAMES", raising=False)
    monkeypatch.delenv("ORMGEN_AUTO_ID_AND_DATE_FIELDS", raising=False)


# ---------------------------------------------------------------------------
# Sample model
# ---------------------------------------------------------------------------

@dataclass
class User:
    id: Optional[int] = None
    name: Optional[str] = None
    active: Optional[bool] = None
    createdAt: Optional[datetime] = None


USER_MODEL = ModelDescriptor(
    class_name="User",
    fields=(
        FieldDescriptor("id", FieldType.INT),
        FieldDescriptor("name", FieldType.STRING),
        FieldDescriptor("active", FieldType.BOOL),
        FieldDescriptor("createdAt", FieldType.DATETIME),
    ),
)

PLAIN = GeneratorOptions(auto_id_and_date_fields=False)


@pytest.fixture
def user_model() -> ModelDescriptor:
    return USER_MODEL


@pytest.fixture
def plain_options() -> GeneratorOptions:
    """Snake-case columns, no automatic id/date fields."""
    return PLAIN


# ---------------------------------------------------------------------------
# Generated code loader
# ---------------------------------------------------------------------------

@pytest.fixture
def load_generated() -> Callable[..., dict[str, Any]]:
    """Return a callable that executes generated source.

    Usage in tests::

        ns = load_generated(source, User=User)
        query = ns["UserQuery"]()
    """
    def _load(source: str, **names: Any) -> dict[str, Any]:
        namespace: dict[str, Any] = dict(names)
        exec(compile(source, "<generated>", "exec"), namespace)
        return namespace
    return _load


@pytest.fixture
def user_classes(load_generated, plain_options):
    """(UserQuery, UserQueryWhere) generated from the sample model."""
    ns = load_generated(render_model(USER_MODEL, plain_options), User=User)
    return ns["UserQuery"], ns["UserQueryWhere"]


@pytest.fixture
def user_type() -> type:
    return User
