"""Normalizer for untrusted conversation JSON (imports and stored state)."""

import json
import logging
import math
from typing import Any, Optional

from dualchat.config import DEFAULT_NOTEPAD_TITLE, IMPORTED_CONVERSATION_TITLE
from dualchat.core.history import NotepadHistory
from dualchat.core.models import (
    ChatConversation,
    ImageAttachment,
    Notepad,
    Purpose,
    Sender,
    StoredChatMessage,
    TextAttachment,
    new_id,
)
from dualchat.core.timestamps import epoch, now_iso

logger = logging.getLogger(__name__)

# a record must carry at least one of these to count as a conversation
CONVERSATION_FIELDS = frozenset(
    {
        "id",
        "title",
        "createdAt",
        "updatedAt",
        "messages",
        "notepad",
        "notepadHistory",
        "notepads",
    }
)


def normalize_conversations(value: Any) -> list[ChatConversation]:
    """
    coerces an arbitrary parsed JSON value into well-formed conversations.

    a single object is treated as a one-element list. records that cannot be
    salvaged are dropped and the rest are still returned.

    Args:
        value: parsed JSON (dict, list, or anything else)

    Returns:
        fresh list of normalized conversations, possibly empty
    """
    if isinstance(value, dict):
        records: list[Any] = [value]
    elif isinstance(value, list):
        records = value
    else:
        logger.debug("Ignoring import value of type %s", type(value).__name__)
        return []

    conversations = []
    for position, record in enumerate(records):
        try:
            conversations.append(normalize_conversation(record))
        except Exception as e:  # pylint: disable=broad-except
            logger.debug("Dropped conversation record %d: %s", position, e)
    return conversations


def safe_parse_conversations(raw: Optional[str]) -> list[ChatConversation]:
    """
    parses a stored JSON array of conversations.

    missing, invalid or non-array data yields an empty list, never an error.
    """
    if not raw:
        return []
    try:
        parsed = json.loads(raw)
    except ValueError:
        logger.warning("Stored conversations are not valid JSON, starting empty")
        return []
    if not isinstance(parsed, list):
        logger.warning("Stored conversations are not a JSON array, starting empty")
        return []
    return normalize_conversations(parsed)


def normalize_conversation(data: Any) -> ChatConversation:
    """
    coerces one conversation record field by field.

    Args:
        data: candidate record

    Returns:
        normalized ChatConversation

    Raises:
        TypeError: record is not an object
        ValueError: record has no conversation fields, or a non-list messages field
    """
    if not isinstance(data, dict):
        raise TypeError(f"expected object, got {type(data).__name__}")
    if not CONVERSATION_FIELDS.intersection(data):
        raise ValueError("record has no conversation fields")

    raw_messages = data.get("messages")
    if raw_messages is not None and not isinstance(raw_messages, list):
        raise ValueError("messages is not a list")

    created_at = _string(data.get("createdAt")) or now_iso()
    updated_at = _string(data.get("updatedAt")) or created_at
    created_epoch, updated_epoch = epoch(created_at), epoch(updated_at)
    # keeps updatedAt >= createdAt without moving updatedAt
    if created_epoch is not None and updated_epoch is not None and updated_epoch < created_epoch:
        created_at = updated_at

    messages = []
    for position, raw in enumerate(raw_messages or []):
        try:
            messages.append(normalize_message(raw))
        except Exception as e:  # pylint: disable=broad-except
            logger.debug("Dropped message %d: %s", position, e)

    conversation = ChatConversation(
        id=_identifier(data.get("id")) or new_id(),
        title=_string(data.get("title")) or IMPORTED_CONVERSATION_TITLE,
        created_at=created_at,
        updated_at=updated_at,
        messages=messages,
    )
    _attach_notepads(conversation, data)
    return conversation


def normalize_message(data: Any) -> StoredChatMessage:
    """
    coerces one message record.

    Raises:
        TypeError: record is not an object
        ValueError: sender missing or unknown, or purpose unknown
    """
    if not isinstance(data, dict):
        raise TypeError(f"expected object, got {type(data).__name__}")

    sender = Sender.parse(data.get("sender"))
    raw_purpose = data.get("purpose")
    purpose = Purpose.default_for(sender) if raw_purpose is None else Purpose.parse(raw_purpose)

    text = data.get("text")
    return StoredChatMessage(
        id=_identifier(data.get("id")) or new_id(),
        text=text if isinstance(text, str) else "",
        sender=sender,
        purpose=purpose,
        timestamp=_string(data.get("timestamp")) or now_iso(),
        duration_ms=_duration(data.get("durationMs")),
        image=_image(data.get("image")),
        text_attachment=_text_attachment(data.get("textAttachment")),
    )


def _attach_notepads(conversation: ChatConversation, data: dict[str, Any]) -> None:
    raw_notepads = data.get("notepads")
    if isinstance(raw_notepads, list):
        for raw in raw_notepads:
            if not isinstance(raw, dict):
                continue
            notepad_id = _identifier(raw.get("id"))
            if notepad_id is None or notepad_id in {p.id for p in conversation.notepads}:
                notepad_id = new_id()
            content = raw.get("content")
            conversation.notepads.append(
                Notepad(
                    id=notepad_id,
                    title=_string(raw.get("title")) or DEFAULT_NOTEPAD_TITLE,
                    history=build_history(
                        content if isinstance(content, str) else "",
                        raw.get("history"),
                        raw.get("historyIndex"),
                    ),
                )
            )

    if not conversation.notepads:
        notepad = data.get("notepad")
        conversation.notepads.append(
            Notepad(
                id=new_id(),
                title=DEFAULT_NOTEPAD_TITLE,
                history=build_history(
                    notepad if isinstance(notepad, str) else "",
                    data.get("notepadHistory"),
                    data.get("notepadHistoryIndex"),
                ),
            )
        )

    active_id = data.get("activeNotepadId")
    known = {p.id for p in conversation.notepads}
    conversation.active_notepad_id = (
        active_id if isinstance(active_id, str) and active_id in known else conversation.notepads[0].id
    )


def build_history(content: str, raw_history: Any, raw_index: Any) -> NotepadHistory:
    """
    rebuilds a NotepadHistory whose current snapshot equals content.

    a non-list history is discarded, elements are coerced to strings, a
    non-numeric index defaults to the last entry and a numeric one is clamped.
    content that differs from the indexed snapshot is recorded on top.
    """
    if not isinstance(raw_history, list) or not raw_history:
        return NotepadHistory([content])

    snapshots = ["" if item is None else str(item) for item in raw_history]
    index = len(snapshots) - 1
    if _is_number(raw_index):
        index = min(max(int(raw_index), 0), len(snapshots) - 1)

    history = NotepadHistory(snapshots, index)
    history.record(content)
    return history


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _string(value: Any) -> Optional[str]:
    """returns value if it is a non-blank string."""
    if isinstance(value, str) and value.strip():
        return value
    return None


def _identifier(value: Any) -> Optional[str]:
    if _is_number(value):
        return str(value)
    return _string(value)


def _duration(value: Any) -> Optional[float]:
    if _is_number(value) and value >= 0:
        return value
    return None


def _image(value: Any) -> Optional[ImageAttachment]:
    if not isinstance(value, dict):
        return None
    data_url, name, mime = value.get("dataUrl"), value.get("name"), value.get("type")
    if not all(isinstance(v, str) for v in (data_url, name, mime)):
        return None
    return ImageAttachment(data_url=data_url, name=name, type=mime)


def _text_attachment(value: Any) -> Optional[TextAttachment]:
    if not isinstance(value, dict):
        return None
    name, content = value.get("name"), value.get("content")
    if not isinstance(name, str) or not isinstance(content, str):
        return None
    return TextAttachment(name=name, content=content)
