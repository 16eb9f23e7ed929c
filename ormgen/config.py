"""Generator options.

Options are read from ``ORMGEN_*`` environment variables and may be
overridden per run (definition file ``options``) or per model (``orm()``
keywords). Example::

    ORMGEN_AUTO_SNAKE_CASE_NAMES=false python -m ormgen models.json
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ModelDefinitionError


class GeneratorOptions(BaseSettings):
    """Flags controlling how model fields are translated."""

    model_config = SettingsConfigDict(
        env_prefix="ORMGEN_",
        frozen=True,
        extra="forbid",
    )

    # Column names are the snake_case form of field names.
    auto_snake_case_names: bool = True
    # Missing id/createdAt/updatedAt fields are added to every model.
    auto_id_and_date_fields: bool = True

    def __init__(self, **values: Any) -> None:
        try:
            super().__init__(**values)
        except ValidationError as exc:
            raise ModelDefinitionError(f"Invalid generator options: {exc}") from exc

    def merged(self, overrides: dict[str, Any] | None) -> GeneratorOptions:
        """Return a copy with the given flags replaced."""
        if not overrides:
            return self
        check_overrides(overrides)
        return self.model_copy(update=dict(overrides))


def check_overrides(overrides: dict[str, Any]) -> None:
    """Reject unknown option names and values that are not booleans."""
    unknown = set(overrides) - set(GeneratorOptions.model_fields)
    if unknown:
        raise ModelDefinitionError(f"Unknown generator options: {', '.join(sorted(unknown))}")
    for name, value in overrides.items():
        if not isinstance(value, bool):
            raise ModelDefinitionError(f"Option {name} must be true or false, got {value!r}")
