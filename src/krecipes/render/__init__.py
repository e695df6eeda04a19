"""Markdown body rendering and HTML page templates."""

from krecipes.render.markdown import (
    CodeBlock,
    Heading,
    RenderedBody,
    extract_code_blocks,
    render_markdown,
)
from krecipes.render.templates import PageRenderer, create_environment

__all__ = [
    "CodeBlock",
    "Heading",
    "PageRenderer",
    "RenderedBody",
    "create_environment",
    "extract_code_blocks",
    "render_markdown",
]
