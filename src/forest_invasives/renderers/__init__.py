"""Pure rendering functions: feature collections -> HTML strings.

Renderers take decoded data and return HTML. No I/O, no network, no Prefect
decorators; writing the result to disk is the flow's job.

Public API:
  - forest_map: build_forest_map_html, feature_popup_rows

Templates live in ``templates/`` next to this package and are rendered with
a shared Jinja2 environment.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import jinja2

# Shared Jinja2 environment for all renderers
_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
_jinja_env = jinja2.Environment(
    loader=jinja2.FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=True,
)


def render_template(template_name: str, **kwargs: Any) -> str:
    """Render a Jinja2 template by name."""
    return _jinja_env.get_template(template_name).render(**kwargs)
