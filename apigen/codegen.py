"""Render templates and write generated output.

Takes the context from context_builder and produces the handler module.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import jinja2

logger = logging.getLogger(__name__)

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
    """Render the module template to source text."""
    template = _environment().get_template("module.py.j2")
    return template.render(**context)


def generate(context: dict[str, Any], output_path: Path) -> None:
    """Render the handler module and write it to output_path.

    Rendering happens before the file is opened, so a failing template
    never leaves a truncated output behind.
    """
    output = render(context)
    with open(output_path, "w", encoding="utf-8") as out:
        out.write(output)
    logger.info("wrote %s (%d handlers)", output_path, context["handler_count"])
