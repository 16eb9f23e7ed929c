"""Load model definitions from a JSON document.

Document shape::

    {
      "options": {"auto_snake_case_names": true},
      "models": [
        {
          "class_name": "User",
          "table_name": "users",
          "module": "app.models",
          "fields": [{"name": "name", "type": "String"}],
          "options": {"auto_id_and_date_fields": false}
        }
      ]
    }

``table_name``, ``module`` and both ``options`` blocks are optional.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from .config import GeneratorOptions
from .errors import ModelDefinitionError
from .model import FieldDescriptor, ModelDescriptor
from .naming import is_identifier, is_module_path


class FieldDefinition(BaseModel):
    name: str
    type: str


class ModelDefinition(BaseModel):
    class_name: str
    table_name: Optional[str] = None
    module: Optional[str] = None
    fields: list[FieldDefinition] = Field(default_factory=list)
    options: dict[str, bool] = Field(default_factory=dict)

    def to_descriptor(self) -> ModelDescriptor:
        if not is_identifier(self.class_name):
            raise ModelDefinitionError(f"{self.class_name!r} is not a valid class name")
        if self.module is not None and not is_module_path(self.module):
            raise ModelDefinitionError(f"{self.class_name}: {self.module!r} is not a valid module path")
        return ModelDescriptor(
            class_name=self.class_name,
            fields=tuple(FieldDescriptor.of(f.name, f.type) for f in self.fields),
            table_name=self.table_name,
            module=self.module,
            options=dict(self.options),
        )


class DefinitionDocument(BaseModel):
    options: dict[str, bool] = Field(default_factory=dict)
    models: list[ModelDefinition]


def parse_models(
    data: Any, options: GeneratorOptions | None = None,
) -> tuple[GeneratorOptions, list[ModelDescriptor]]:
    """Validate a decoded definition document.

    Returns the run options (``options`` merged over the given defaults) and
    the model descriptors in document order.
    """
    try:
        document = DefinitionDocument.model_validate(data)
    except ValidationError as exc:
        raise ModelDefinitionError(f"Invalid model definitions: {exc}") from exc

    run_options = (options or GeneratorOptions()).merged(document.options)
    return run_options, [m.to_descriptor() for m in document.models]


def load_models(
    path: Path, options: GeneratorOptions | None = None,
) -> tuple[GeneratorOptions, list[ModelDescriptor]]:
    """Load and validate model definitions from disk."""
    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise ModelDefinitionError(f"{path}: not valid JSON ({exc})") from exc
    return parse_models(data, options)
