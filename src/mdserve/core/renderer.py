"""Markdown rendering.

Wraps mistune behind a pure render(text) call. A fresh parser is built per
call; mistune parsers carry state between conversions.
"""

from dataclasses import dataclass

import mistune

from mdserve.core.errors import RenderingError

DEFAULT_PLUGINS = ("table", "strikethrough", "url", "task_lists", "footnotes")


@dataclass(frozen=True)
class RenderResult:
    """Result of rendering a markdown document."""

    html: str


class MarkdownRenderer:
    """Renders Markdown bodies to HTML fragments."""

    def __init__(self, plugins: tuple[str, ...] = DEFAULT_PLUGINS) -> None:
        """Initialize renderer.

        Args:
            plugins: mistune plugin names
        """
        self._plugins = list(plugins)

    def render(self, text: str) -> RenderResult:
        """Render a Markdown body.

        Args:
            text: Markdown without front matter

        Returns:
            RenderResult with the HTML fragment

        Raises:
            RenderingError: If the parser fails
        """
        markdown = mistune.create_markdown(escape=False, plugins=self._plugins)
        try:
            html, _ = markdown.parse(text)
        except Exception as e:
            raise RenderingError(f"Markdown conversion failed: {e}") from e
        return RenderResult(html=html)
