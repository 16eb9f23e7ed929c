"""Generate query and where classes for ORM models."""

from .annotations import collect_models, describe_model, model_of, orm
from .codegen import generate, render, render_model
from .config import GeneratorOptions
from .context_builder import build_context
from .errors import (
    InvalidAnnotationTarget,
    ModelDefinitionError,
    OrmGenerationError,
    UnsupportedFieldType,
)
from .loader import load_models, parse_models
from .model import FieldDescriptor, FieldType, ModelDescriptor

__all__ = [
    "FieldDescriptor",
    "FieldType",
    "GeneratorOptions",
    "InvalidAnnotationTarget",
    "ModelDefinitionError",
    "ModelDescriptor",
    "OrmGenerationError",
    "UnsupportedFieldType",
    "build_context",
    "collect_models",
    "describe_model",
    "generate",
    "load_models",
    "model_of",
    "orm",
    "parse_models",
    "render",
    "render_model",
]
