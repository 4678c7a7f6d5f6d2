"""Entry point: python -m apigen <input.py> <output.py>

Reads the annotated input module, generates the handler module.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import click

from .codegen import generate
from .context_builder import build_context
from .errors import GeneratorError
from .loader import load_source
from .scanner import scan


def generate_file(input_path: Path, output_path: Path) -> dict[str, Any]:
    """Run the whole pipeline for one input module and return the context."""
    document = load_source(input_path)
    context = build_context(scan(document))
    generate(context, output_path)
    return context


@click.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("output_path", type=click.Path(dir_okay=False, path_type=Path))
def main(input_path: Path, output_path: Path) -> None:
    """Generate HTTP handlers for the annotated methods in INPUT_PATH."""
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    try:
        context = generate_file(input_path, output_path)
    except GeneratorError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Generated {output_path} ({context['handler_count']} handlers)")


if __name__ == "__main__":
    main()
