"""Renders catalog sections into a static HTML page with Jinja2."""

import logging
from pathlib import Path
from typing import Any, Optional, Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape

from gamereviews.domain.models.catalog import Section

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"
DEFAULT_TEMPLATE = "reviews.html"


def repeat(value: Any, count: Optional[int]) -> str:
    """Jinja filter repeating `value` `count` times (heart counts)."""
    if not count or count < 0:
        return ""
    # str * int keeps Markup safe strings safe
    if isinstance(value, str):
        return value * count
    return str(value) * count


class HtmlRenderer:
    """Turns `Section`s into a complete HTML document."""

    def __init__(self, template_dir: Path = TEMPLATE_DIR, template_name: str = DEFAULT_TEMPLATE):
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(["html"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["repeat"] = repeat
        self.template_name = template_name

    def render(self, sections: Sequence[Section]) -> str:
        template = self.env.get_template(self.template_name)
        total_count = sum(len(section.reviews) for section in sections)
        logger.debug(f"Rendering {len(sections)} section(s), {total_count} review(s)")
        return template.render(sections=sections, total_count=total_count)
