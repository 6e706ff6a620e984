"""ConversationStore: authoritative in-memory conversation collection."""

import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Optional

from dualchat.config import (
    ACTIVE_CONVERSATION_KEY,
    CHAT_PANEL_WIDTH_KEY,
    CONVERSATIONS_KEY,
    DEFAULT_CONVERSATION_TITLE,
    DEFAULT_PANEL_PERCENT,
    MAX_PANEL_PERCENT,
    MIN_PANEL_PERCENT,
    NOTEPAD_FULLSCREEN_KEY,
)
from dualchat.core import notepads
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
from dualchat.core.parser import normalize_conversations, safe_parse_conversations
from dualchat.core.reconcile import merge_conversations, merge_with_report, recency_key
from dualchat.core.timestamps import bump, now_iso
from dualchat.errors import ImportFailedError
from dualchat.storage import StoragePort

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """outcome of a successful import."""

    imported: int
    added: int
    replaced: int
    kept: int
    total: int


@dataclass
class Preferences:
    """UI layout preferences read at startup and written on change."""

    chat_panel_width_percent: float = DEFAULT_PANEL_PERCENT
    notepad_fullscreen: bool = False


def clamp_panel_percent(value: float) -> float:
    return max(MIN_PANEL_PERCENT, min(MAX_PANEL_PERCENT, value))


def create_message(
    text: str,
    sender: Sender,
    purpose: Optional[Purpose] = None,
    duration_ms: Optional[float] = None,
    image: Optional[ImageAttachment] = None,
    text_attachment: Optional[TextAttachment] = None,
) -> StoredChatMessage:
    """builds a message stamped with a fresh id and the current time."""
    return StoredChatMessage(
        id=new_id(),
        text=text,
        sender=sender,
        purpose=purpose or Purpose.default_for(sender),
        timestamp=now_iso(),
        duration_ms=duration_ms,
        image=image,
        text_attachment=text_attachment,
    )


class ConversationStore:
    """
    owns the conversation collection and the current selection.

    every mutating operation writes the full collection and the active id
    to the storage port. write failures are logged, remembered in
    last_write_error and passed to on_write_error; in-memory state stays
    authoritative and the mutation is not rolled back.
    """

    def __init__(
        self,
        storage: StoragePort,
        on_write_error: Optional[Callable[[Exception], None]] = None,
    ) -> None:
        self.storage = storage
        self.on_write_error = on_write_error
        self.last_write_error: Optional[Exception] = None
        self._conversations: list[ChatConversation] = []
        self._current_id: Optional[str] = None
        self.preferences = Preferences()

    # lifecycle

    def open(self) -> "ConversationStore":
        """loads the collection and active id; bad stored data yields an empty store."""
        loaded = safe_parse_conversations(self._read(CONVERSATIONS_KEY))
        self._conversations = merge_conversations([], loaded)
        stored_id = self._read(ACTIVE_CONVERSATION_KEY)
        if stored_id is not None and self.get(stored_id) is not None:
            self._current_id = stored_id
        else:
            self._current_id = self._most_recent_id()
        self.preferences = self.load_preferences()
        logger.debug("Loaded %d conversation(s)", len(self._conversations))
        return self

    # queries

    @property
    def conversations(self) -> list[ChatConversation]:
        """conversations, most recently updated first."""
        return sorted(self._conversations, key=recency_key, reverse=True)

    @property
    def current_id(self) -> Optional[str]:
        return self._current_id

    @property
    def current(self) -> Optional[ChatConversation]:
        return self.get(self._current_id) if self._current_id is not None else None

    def get(self, conversation_id: str) -> Optional[ChatConversation]:
        for conversation in self._conversations:
            if conversation.id == conversation_id:
                return conversation
        return None

    @property
    def can_undo(self) -> bool:
        notepad = self._current_notepad()
        return notepad is not None and notepad.history.can_undo

    @property
    def can_redo(self) -> bool:
        notepad = self._current_notepad()
        return notepad is not None and notepad.history.can_redo

    # conversation operations

    def create(self, title: Optional[str] = None) -> ChatConversation:
        """creates an empty conversation and makes it current."""
        created = now_iso()
        conversation = ChatConversation(
            id=new_id(),
            title=(title or "").strip() or DEFAULT_CONVERSATION_TITLE,
            created_at=created,
            updated_at=created,
        )
        notepads.ensure_notepad(conversation)
        self._conversations.append(conversation)
        self._current_id = conversation.id
        self._persist()
        return conversation

    def select(self, conversation_id: str) -> bool:
        """switches the current conversation, no-op for unknown ids."""
        if self.get(conversation_id) is None:
            return False
        self._current_id = conversation_id
        self._persist()
        return True

    def rename(self, conversation_id: str, title: str) -> bool:
        """renames a conversation, no-op for unknown ids and blank or unchanged titles."""
        conversation = self.get(conversation_id)
        title = title.strip()
        if conversation is None or not title or title == conversation.title:
            return False
        conversation.title = title
        self._touch(conversation)
        self._persist()
        return True

    def delete(self, conversation_id: str) -> bool:
        """
        removes a conversation.

        if it was current, the most recently updated remaining conversation
        becomes current, or none when the collection is empty.
        """
        conversation = self.get(conversation_id)
        if conversation is None:
            return False
        self._conversations.remove(conversation)
        if self._current_id == conversation_id:
            self._current_id = self._most_recent_id()
        self._persist()
        return True

    def delete_all(self) -> None:
        self._conversations = []
        self._current_id = None
        self._persist()

    def append_message(self, message: StoredChatMessage) -> ChatConversation:
        """appends to the current conversation, creating one if none is current."""
        conversation = self._require_current()
        conversation.messages.append(message)
        self._touch(conversation)
        self._persist()
        return conversation

    # notepad operations

    def apply_notepad_edit(self, text: str, notepad_id: Optional[str] = None) -> bool:
        """
        sets notepad content and records it in the notepad's history.

        Args:
            text: new content
            notepad_id: target notepad (defaults to the active one)

        Returns:
            False if text equals the current content or notepad_id is unknown
        """
        conversation = self._require_current()
        if notepad_id is None:
            notepad = notepads.ensure_notepad(conversation)
        else:
            notepad = notepads.find_notepad(conversation, notepad_id)
            if notepad is None:
                return False
        if not notepad.history.record(text):
            return False
        self._touch(conversation)
        self._persist()
        return True

    def undo_notepad(self) -> Optional[str]:
        """steps the active notepad back, returns its content or None if unavailable."""
        return self._step_notepad(undo=True)

    def redo_notepad(self) -> Optional[str]:
        """steps the active notepad forward, returns its content or None if unavailable."""
        return self._step_notepad(undo=False)

    def clear_notepad_history(self) -> bool:
        """keeps the active notepad's content and discards its history."""
        conversation = self.current
        if conversation is None:
            return False
        notepads.ensure_notepad(conversation).history.clear()
        self._touch(conversation)
        self._persist()
        return True

    def add_notepad(self, title: Optional[str] = None) -> Optional[str]:
        """adds an empty notepad to the current conversation, returns its id."""
        conversation = self.current
        if conversation is None:
            return None
        notepad = notepads.add_notepad(conversation, title)
        self._touch(conversation)
        self._persist()
        return notepad.id

    def select_notepad(self, notepad_id: str) -> bool:
        conversation = self.current
        if conversation is None or not notepads.select_notepad(conversation, notepad_id):
            return False
        self._persist()
        return True

    def rename_notepad(self, notepad_id: str, title: str) -> bool:
        conversation = self.current
        if conversation is None or not notepads.rename_notepad(conversation, notepad_id, title):
            return False
        self._touch(conversation)
        self._persist()
        return True

    def delete_notepad(self, notepad_id: str) -> bool:
        conversation = self.current
        if conversation is None or not notepads.delete_notepad(conversation, notepad_id):
            return False
        self._touch(conversation)
        self._persist()
        return True

    # import

    def import_data(self, raw: Any) -> ImportResult:
        """
        normalizes raw parsed JSON and merges it into the collection.

        the collection is replaced only after normalization and merge both
        complete.

        Args:
            raw: parsed JSON value (object or array)

        Returns:
            ImportResult counts

        Raises:
            ImportFailedError: raw contains no usable conversation
        """
        incoming = normalize_conversations(raw)
        if not incoming:
            raise ImportFailedError("No usable conversations found in import data")

        report = merge_with_report(self._conversations, incoming)
        self._conversations = report.conversations
        if self.current is None:
            self._current_id = self._most_recent_id()
        self._persist()

        result = ImportResult(
            imported=len(incoming),
            added=len(report.added),
            replaced=len(report.replaced),
            kept=len(report.kept),
            total=len(self._conversations),
        )
        logger.info(
            "Imported %d conversation(s): %d new, %d replaced, %d kept",
            result.imported,
            result.added,
            result.replaced,
            result.kept,
        )
        return result

    # preferences

    def load_preferences(self) -> Preferences:
        """reads layout preferences, falling back to defaults for missing or bad values."""
        prefs = Preferences()
        raw_width = self._read(CHAT_PANEL_WIDTH_KEY)
        if raw_width is not None:
            try:
                width = float(raw_width)
            except ValueError:
                width = math.nan
            if not math.isnan(width):
                prefs.chat_panel_width_percent = clamp_panel_percent(width)
        prefs.notepad_fullscreen = self._read(NOTEPAD_FULLSCREEN_KEY) == "true"
        return prefs

    def save_preferences(self, prefs: Preferences) -> None:
        """clamps and stores layout preferences."""
        width = clamp_panel_percent(prefs.chat_panel_width_percent)
        self.preferences = Preferences(width, prefs.notepad_fullscreen)
        self._write(
            {
                CHAT_PANEL_WIDTH_KEY: str(width),
                NOTEPAD_FULLSCREEN_KEY: "true" if prefs.notepad_fullscreen else "false",
            }
        )

    # internals

    def _current_notepad(self) -> Optional[Notepad]:
        conversation = self.current
        return conversation.active_notepad if conversation is not None else None

    def _step_notepad(self, undo: bool) -> Optional[str]:
        conversation = self.current
        if conversation is None:
            return None
        history = notepads.ensure_notepad(conversation).history
        content = history.undo() if undo else history.redo()
        if content is None:
            return None
        self._touch(conversation)
        self._persist()
        return content

    def _require_current(self) -> ChatConversation:
        conversation = self.current
        if conversation is None:
            conversation = self.create()
        return conversation

    def _most_recent_id(self) -> Optional[str]:
        ordered = self.conversations
        return ordered[0].id if ordered else None

    @staticmethod
    def _touch(conversation: ChatConversation) -> None:
        conversation.updated_at = bump(conversation.updated_at)

    def _read(self, key: str) -> Optional[str]:
        try:
            return self.storage.get(key)
        except Exception as e:  # pylint: disable=broad-except
            logger.warning("Cannot read %s from storage: %s", key, e)
            return None

    def _write(self, values: dict[str, Optional[str]]) -> None:
        """writes (or removes, for None) each key; reports the first failure."""
        try:
            for key, value in values.items():
                if value is None:
                    self.storage.remove(key)
                else:
                    self.storage.set(key, value)
        except Exception as e:  # pylint: disable=broad-except
            logger.warning("Storage write failed: %s", e)
            self.last_write_error = e
            if self.on_write_error is not None:
                self.on_write_error(e)
            return
        self.last_write_error = None

    def _persist(self) -> None:
        payload = json.dumps([c.to_dict() for c in self._conversations], ensure_ascii=False)
        self._write({CONVERSATIONS_KEY: payload, ACTIVE_CONVERSATION_KEY: self._current_id})
