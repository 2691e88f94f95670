"""Simple HTML template loader using Jinja2.

Templates are stored in pulseboard/resources/templates/ directory.
"""

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

# Template directory relative to this file
_TEMPLATES_DIR = Path(__file__).parent.parent.parent / "resources" / "templates"

_env: Environment | None = None


def _get_env() -> Environment:
    """Get or create Jinja2 environment (lazy initialization)."""
    global _env
    if _env is None:
        if not _TEMPLATES_DIR.exists():
            raise FileNotFoundError(f"Templates directory not found: {_TEMPLATES_DIR}")
        _env = Environment(
            loader=FileSystemLoader(_TEMPLATES_DIR),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        _env.filters["money"] = _format_money
        _env.filters["signed"] = _format_signed
    return _env


def _format_money(value: float | None) -> str:
    return "N/A" if value is None else f"{value:,.2f}"


def _format_signed(value: float | None) -> str:
    return "N/A" if value is None else f"{value:+.2f}"


def render_template(name: str, **variables: object) -> str:
    """Render a template file.

    Args:
        name: Template file name (e.g. "panels/news.html")
        **variables: Template variables

    Returns:
        Rendered template string

    Raises:
        jinja2.TemplateNotFound: If template file not found
        jinja2.TemplateError: If template rendering fails
    """
    env = _get_env()
    template = env.get_template(name)
    return template.render(**variables)
