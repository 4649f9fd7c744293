"""HTML rendering for the registry pages, backed by Jinja2."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

from jinja2 import Environment, FileSystemLoader, select_autoescape

from schema_registry.errors import RenderError

logger = logging.getLogger(__name__)


class TemplateRenderer:
    """
    Renders ``{template_dir}/{name}.html`` with a context mapping.

    Missing templates and errors raised while rendering both surface as
    RenderError, so a broken page fails the request and nothing else.
    """

    def __init__(self, template_dir: str | Path):
        self.template_dir = Path(template_dir)
        self._env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape(["html"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, name: str, context: Mapping[str, Any]) -> str:
        file_name = f"{name}.html"
        logger.debug(f"Rendering {self.template_dir / file_name}")
        try:
            template = self._env.get_template(file_name)
            return template.render(**context)
        except Exception as exc:
            logger.exception(f"Error rendering html {file_name}")
            raise RenderError(name) from exc
