"""Entry point: python -m ormgen

Reads model definitions (a JSON file, or a Python module of orm() classes)
and writes one <model>_orm.py module per model.

    python -m ormgen models.json -o app/orm
    python -m ormgen --module app.models -o app/orm
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

from .annotations import collect_models
from .codegen import generate
from .config import GeneratorOptions
from .errors import OrmGenerationError
from .loader import load_models


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="ormgen", description="Generate ORM query classes.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("definitions", nargs="?", type=Path, help="JSON model definition file")
    source.add_argument("--module", help="import path of a module with orm() classes")
    parser.add_argument("-o", "--output-dir", type=Path, default=Path("generated"))
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        options = GeneratorOptions()
        if args.module:
            models = collect_models(importlib.import_module(args.module))
        else:
            options, models = load_models(args.definitions, options)
        generate(models, args.output_dir, options)
    except (OrmGenerationError, OSError) as exc:
        print(f"ormgen: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
