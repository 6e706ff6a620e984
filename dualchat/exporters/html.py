"""HTML exporter producing self-contained styled documents."""

import html as html_lib
from typing import Optional, Sequence

from dualchat.core.models import ChatConversation, Notepad, StoredChatMessage
from dualchat.core.timestamps import display
from dualchat.exporters import exporter
from dualchat.exporters.base import Exporter, RenderContext
from dualchat.exporters.labels import purpose_label, sender_label
from dualchat.exporters.markdown import markdown_to_html

COLLECTION_TITLE = "Dual AI Chat export"

STYLE = """
    body { font-family: system-ui, -apple-system, Segoe UI, Roboto, Helvetica, Arial, sans-serif; background: #fff; color: #111; margin: 16px; }
    h1 { color: #0ea5e9; font-size: 20px; margin: 0 0 4px 0; }
    h2 { color: #0369a1; font-size: 18px; margin: 16px 0 6px; }
    h3 { color: #0f172a; }
    .meta { color: #555; font-size: 12px; margin-bottom: 8px; }
    .conversation { border: 1px solid #e5e7eb; border-radius: 6px; padding: 12px; margin: 12px 0; background: #fafafa; }
    .message { border: 1px solid #e5e7eb; border-radius: 6px; padding: 8px; margin: 8px 0; background: #fff; }
    .message .header { font-size: 12px; color: #374151; margin-bottom: 6px; }
    .message img { max-width: 100%; }
    pre { white-space: pre-wrap; word-break: break-word; background: #fff; padding: 8px; border: 1px solid #e5e7eb; border-radius: 4px; }
    .notepad pre { background: #f8fafc; }
    hr.separator { border: 0; border-top: 2px solid #cbd5e1; margin: 24px 0; }
"""


def _esc(value: object) -> str:
    return html_lib.escape(str(value), quote=True)


def _body(text: str, ctx: RenderContext) -> str:
    if ctx.render_markdown:
        return f'<div class="markdown">{markdown_to_html(text)}</div>'
    return f"<pre>{_esc(text)}</pre>"


def render_message(message: StoredChatMessage, ctx: RenderContext) -> str:
    """renders one message as a self-contained <div class="message">."""
    header = (
        f"[{display(message.timestamp)}] "
        f"{sender_label(message.sender)} ({purpose_label(message.purpose)})"
    )
    parts = [
        '<div class="message">',
        f'<div class="header">{_esc(header)}</div>',
        _body(message.text, ctx),
    ]
    if message.text_attachment is not None:
        parts.append(f'<div class="meta">Attachment: {_esc(message.text_attachment.name)}</div>')
    if message.image is not None:
        parts.append(f'<div class="meta">Image: {_esc(message.image.name)}</div>')
        # only inline image data is embedded
        if message.image.data_url.startswith("data:image/"):
            parts.append(
                f'<img src="{_esc(message.image.data_url)}" alt="{_esc(message.image.name)}">'
            )
    parts.append("</div>")
    return "".join(parts)


def render_notepad(notepad: Notepad, heading: str, ctx: RenderContext) -> str:
    """renders a notepad with its history summary as a <section class="notepad">."""
    history = notepad.history
    return (
        '<section class="notepad">'
        f"<h3>{_esc(heading)}</h3>"
        f"{_body(notepad.content, ctx)}"
        f'<div class="meta">Notepad history: {len(history)} snapshot(s), '
        f"current index {history.cursor}</div>"
        "</section>"
    )


def render_conversation_section(conversation: ChatConversation, ctx: RenderContext) -> str:
    """renders a conversation as a <section class="conversation"> fragment."""
    parts = [
        '<section class="conversation">',
        f"<h2>{_esc(conversation.title)}</h2>",
        f'<div class="meta">ID: {_esc(conversation.id)}</div>',
        f'<div class="meta">Created: {_esc(display(conversation.created_at))}</div>',
        f'<div class="meta">Updated: {_esc(display(conversation.updated_at))}</div>',
        f'<div class="meta">{len(conversation.messages)} message(s)</div>',
        '<section class="messages"><h3>Messages</h3>',
    ]
    parts.extend(render_message(m, ctx) for m in conversation.messages)
    parts.append("</section>")

    active = conversation.active_notepad
    if active is not None:
        parts.append(render_notepad(active, "Notepad (current)", ctx))
    for notepad in conversation.notepads:
        if notepad is not active:
            parts.append(render_notepad(notepad, f"Notepad: {notepad.title}", ctx))
    parts.append("</section>")
    return "\n".join(parts)


def _document(title: str, body: str, heading: bool = True) -> str:
    h1 = f"<h1>{_esc(title)}</h1>" if heading else ""
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width,initial-scale=1">
    <title>{_esc(title)}</title>
    <style>{STYLE}</style>
</head>
<body>
    {h1}
    {body}
</body>
</html>"""


def format_conversation_as_html(
    conversation: ChatConversation, ctx: Optional[RenderContext] = None
) -> str:
    """self-contained HTML document for one conversation."""
    ctx = ctx or RenderContext()
    # the section already carries the title as <h2>
    return _document(
        conversation.title, render_conversation_section(conversation, ctx), heading=False
    )


def format_all_conversations_as_html(
    conversations: Sequence[ChatConversation], ctx: Optional[RenderContext] = None
) -> str:
    """one HTML document with a section per conversation, in caller-supplied order."""
    ctx = ctx or RenderContext()
    body = '\n<hr class="separator">\n'.join(
        render_conversation_section(c, ctx) for c in conversations
    )
    return _document(COLLECTION_TITLE, body)


@exporter("html", "html")
class HTMLExporter(Exporter):
    """exports conversations as styled HTML documents."""

    def render(self, conversation: ChatConversation, ctx: RenderContext) -> str:
        return format_conversation_as_html(conversation, ctx)

    def render_all(self, conversations: Sequence[ChatConversation], ctx: RenderContext) -> str:
        return format_all_conversations_as_html(conversations, ctx)
