"""Render templates and write generated output.

Takes the context from context_builder and produces one
``<model>_orm.py`` module per model.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

import jinja2

from .config import GeneratorOptions
from .context_builder import build_context
from .errors import ModelDefinitionError
from .model import ModelDescriptor
from .naming import module_name_for

TEMPLATE_DIR = Path(__file__).parent / "templates"


def _environment() -> jinja2.Environment:
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=jinja2.StrictUndefined,
    )
    env.filters["pyrepr"] = repr
    return env


def render(context: dict[str, Any]) -> str:
    """Render the ORM template for one model context."""
    template = _environment().get_template("orm.py.j2")
    return template.render(**context)


def render_model(model: ModelDescriptor, options: GeneratorOptions | None = None) -> str:
    """Generated module source for a model."""
    return render(build_context(model, options))


def _render_for_file(model: ModelDescriptor, options: GeneratorOptions | None) -> str:
    # A written module has no caller-supplied namespace; it must import the model.
    if model.module is None:
        raise ModelDefinitionError(
            f"{model.class_name}: a module path is required to write generated code"
        )
    return render_model(model, options)


def generate(
    models: Iterable[ModelDescriptor],
    output_dir: Path,
    options: GeneratorOptions | None = None,
) -> list[Path]:
    """Render every model, then write ``<model>_orm.py`` files to output_dir.

    Every model needs a ``module`` the generated file can import it from.
    All models are rendered before the first file is written, so a failing
    model leaves output_dir untouched.
    """
    rendered = [(module_name_for(m.class_name), _render_for_file(m, options)) for m in models]

    output_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for stem, source in rendered:
        output_path = output_dir / f"{stem}.py"
        output_path.write_text(source)
        written.append(output_path)

    print(f"Generated {len(written)} ORM module(s) in {output_dir}")
    return written
