"""Data models for dual-assistant conversations."""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from dualchat.core.history import NotepadHistory


def new_id() -> str:
    """returns a fresh unique identifier."""
    return uuid.uuid4().hex


class Sender(Enum):
    """message author: the user or one of the two assistants."""

    USER = "User"
    COGNITO = "Cognito"
    MUSE = "Muse"

    @property
    def is_assistant(self) -> bool:
        """True for either assistant identity."""
        return self is not Sender.USER

    @classmethod
    def parse(cls, value: Any) -> "Sender":
        """matches value or member name case-insensitively, raises ValueError otherwise."""
        return _parse_enum(cls, value)


class Purpose(Enum):
    """role of a message in the dual-assistant protocol."""

    USER_INPUT = "user-input"
    SYSTEM_NOTIFICATION = "system-notification"
    COGNITO_TO_MUSE = "cognito-to-muse"
    MUSE_TO_COGNITO = "muse-to-cognito"
    FINAL_RESPONSE = "final-response"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value: Any) -> "Purpose":
        """matches value or member name case-insensitively, raises ValueError otherwise."""
        return _parse_enum(cls, value)

    @classmethod
    def default_for(cls, sender: Sender) -> "Purpose":
        """purpose assumed when a stored message lacks one."""
        return cls.FINAL_RESPONSE if sender.is_assistant else cls.USER_INPUT


def _parse_enum(enum_cls: Any, value: Any) -> Any:
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        raise ValueError(f"{enum_cls.__name__} must be a string, got {type(value).__name__}")
    wanted = value.strip().lower().replace("_", "-")
    for member in enum_cls:
        if wanted in (member.value.lower(), member.name.lower().replace("_", "-")):
            return member
    raise ValueError(f"unknown {enum_cls.__name__}: {value!r}")


@dataclass
class ImageAttachment:
    """image attached to a message, stored as a data URL."""

    data_url: str
    name: str
    type: str

    def to_dict(self) -> dict[str, Any]:
        return {"dataUrl": self.data_url, "name": self.name, "type": self.type}


@dataclass
class TextAttachment:
    """text file attached to a message."""

    name: str
    content: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "content": self.content}


@dataclass
class StoredChatMessage:
    """Individual message in a conversation."""

    id: str
    text: str
    sender: Sender
    purpose: Purpose
    timestamp: str
    duration_ms: Optional[float] = None
    image: Optional[ImageAttachment] = None
    text_attachment: Optional[TextAttachment] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "text": self.text,
            "sender": self.sender.value,
            "purpose": self.purpose.value,
            "timestamp": self.timestamp,
        }
        if self.duration_ms is not None:
            data["durationMs"] = self.duration_ms
        if self.image is not None:
            data["image"] = self.image.to_dict()
        if self.text_attachment is not None:
            data["textAttachment"] = self.text_attachment.to_dict()
        return data


@dataclass
class Notepad:
    """shared scratch buffer with its own undo/redo history."""

    id: str
    title: str
    history: NotepadHistory = field(default_factory=NotepadHistory)

    @property
    def content(self) -> str:
        return self.history.current

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "history": self.history.snapshots,
            "historyIndex": self.history.cursor,
        }


@dataclass
class ChatConversation:
    """
    Complete conversation structure.

    notepads is never empty once a conversation has been built by the
    normalizer or the store; active_notepad_id addresses one of them.
    """

    id: str
    title: str
    created_at: str
    updated_at: str
    messages: list[StoredChatMessage] = field(default_factory=list)
    notepads: list[Notepad] = field(default_factory=list)
    active_notepad_id: Optional[str] = None

    @property
    def active_notepad(self) -> Optional[Notepad]:
        """active notepad, first notepad if the id is stale, None if there are none."""
        for notepad in self.notepads:
            if notepad.id == self.active_notepad_id:
                return notepad
        return self.notepads[0] if self.notepads else None

    @property
    def notepad(self) -> str:
        """current content of the active notepad."""
        active = self.active_notepad
        return active.content if active is not None else ""

    @property
    def notepad_history(self) -> Optional[list[str]]:
        active = self.active_notepad
        return active.history.snapshots if active is not None else None

    @property
    def notepad_history_index(self) -> Optional[int]:
        active = self.active_notepad
        return active.history.cursor if active is not None else None

    def to_dict(self) -> dict[str, Any]:
        """serializes to the camelCase wire format used for storage and export."""
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "messages": [m.to_dict() for m in self.messages],
            "notepad": self.notepad,
        }
        history = self.notepad_history
        if history:
            data["notepadHistory"] = history
            data["notepadHistoryIndex"] = self.notepad_history_index
        if self.notepads:
            data["notepads"] = [p.to_dict() for p in self.notepads]
            active = self.active_notepad
            data["activeNotepadId"] = active.id if active is not None else None
        return data
