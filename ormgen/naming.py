"""Name conversions for generated classes, columns and tables.

Examples:
  class   UserProfile -> table user_profiles, module user_profile_orm
  field   createdAt   -> column created_at
  class   user_profile -> UserProfileQuery / UserProfileQueryWhere
"""

from __future__ import annotations

import keyword
import re

# Irregular plurals that suffix rules get wrong
_PLURALS: dict[str, str] = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "mouse": "mice",
    "goose": "geese",
    "datum": "data",
    "index": "indices",
    "status": "statuses",
    "news": "news",
    "series": "series",
    "species": "species",
}


def snake_case(name: str) -> str:
    """Convert camelCase or PascalCase to snake_case."""
    s1 = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    s2 = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", s1).lower()
    s2 = re.sub(r"[.\-\s]", "_", s2)
    return re.sub(r"_+", "_", s2).strip("_")


def pascal_case(name: str) -> str:
    """Convert snake_case, camelCase or PascalCase to PascalCase."""
    return "".join(part[:1].upper() + part[1:] for part in snake_case(name).split("_") if part)


def pluralize(word: str) -> str:
    """Return the plural form of a lower-case noun."""
    if word in _PLURALS:
        return _PLURALS[word]
    if re.search(r"[^aeiou]y$", word):
        return word[:-1] + "ies"
    if re.search(r"(s|x|z|ch|sh)$", word):
        return word + "es"
    return word + "s"


def table_name_for(class_name: str) -> str:
    """Derive a table name: the snake_case class name, last word pluralized.

    Returns e.g. 'users' for User and 'user_profiles' for UserProfile.
    """
    parts = snake_case(class_name).split("_")
    parts[-1] = pluralize(parts[-1])
    return "_".join(parts)


def column_name_for(field_name: str, auto_snake_case: bool) -> str:
    """Column a field is stored in."""
    return snake_case(field_name) if auto_snake_case else field_name


def module_name_for(class_name: str) -> str:
    """File stem of the generated module for a model class."""
    return f"{snake_case(class_name)}_orm"


def is_identifier(name: str) -> bool:
    """True for a Python name usable in generated source."""
    return name.isidentifier() and not keyword.iskeyword(name)


def is_module_path(path: str) -> bool:
    """True for a dotted import path such as 'app.models'."""
    return all(is_identifier(part) for part in path.split("."))
