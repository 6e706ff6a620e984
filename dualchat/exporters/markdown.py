"""markdown to HTML conversion for the document exporter."""

import html as html_lib
from typing import Any, cast

from markdown_it import MarkdownIt


def markdown_to_html(text: str) -> str:
    """
    converts markdown to HTML safe for embedding.

    raw HTML in the source is not passed through; it is rendered as escaped
    text. code blocks become <pre> and images are dropped in favour of their
    alt text.

    Args:
        text: markdown text

    Returns:
        HTML fragment
    """
    md = MarkdownIt()
    md.enable(["table", "strikethrough"])
    md.disable("html_inline")
    md.disable("html_block")

    renderer: Any = md.renderer

    def render_code_block(tokens: Any, idx: int, _options: Any, _env: Any) -> str:
        token = tokens[idx]
        escaped = html_lib.escape(token.content)
        return f"<pre>{escaped}</pre>\n"

    renderer.rules["code_block"] = render_code_block
    renderer.rules["fence"] = render_code_block

    def render_image(tokens: Any, idx: int, _options: Any, _env: Any) -> str:
        token = tokens[idx]
        return html_lib.escape(token.content)

    renderer.rules["image"] = render_image

    return cast(str, md.render(text)).rstrip("\n")
