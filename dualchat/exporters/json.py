"""structured (JSON) exporter, a lossless serialization of the data model."""

import json as json_lib
from typing import Sequence

from dualchat.core.models import ChatConversation
from dualchat.exporters import exporter
from dualchat.exporters.base import Exporter, RenderContext


def format_conversation_as_json(conversation: ChatConversation) -> str:
    """pretty-printed JSON object for one conversation."""
    return json_lib.dumps(conversation.to_dict(), indent=2, ensure_ascii=False)


def format_all_conversations_as_json(conversations: Sequence[ChatConversation]) -> str:
    """pretty-printed JSON array, in caller-supplied order."""
    return json_lib.dumps([c.to_dict() for c in conversations], indent=2, ensure_ascii=False)


@exporter("json", "json")
class JSONExporter(Exporter):
    """exports conversations as importable JSON."""

    def render(self, conversation: ChatConversation, ctx: RenderContext) -> str:
        return format_conversation_as_json(conversation)

    def render_all(self, conversations: Sequence[ChatConversation], ctx: RenderContext) -> str:
        return format_all_conversations_as_json(conversations)
