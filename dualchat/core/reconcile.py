"""Reconciler: one-shot last-writer-wins merge of two conversation collections."""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from dualchat.core.models import ChatConversation
from dualchat.core.timestamps import epoch

logger = logging.getLogger(__name__)


@dataclass
class MergeReport:
    """merged collection plus per-id outcome of the incoming side."""

    conversations: list[ChatConversation]
    added: list[str] = field(default_factory=list)
    replaced: list[str] = field(default_factory=list)
    kept: list[str] = field(default_factory=list)


def merge_conversations(
    existing: Iterable[ChatConversation], incoming: Iterable[ChatConversation]
) -> list[ChatConversation]:
    """
    merges two collections into one with unique ids, newest first.

    Args:
        existing: current collection, processed first
        incoming: collection to fold in, processed second

    Returns:
        deduplicated list sorted by updated_at descending (ties keep input order)
    """
    return merge_with_report(existing, incoming).conversations


def merge_with_report(
    existing: Iterable[ChatConversation], incoming: Iterable[ChatConversation]
) -> MergeReport:
    """merges like merge_conversations and reports what happened to incoming ids."""
    by_id: dict[str, ChatConversation] = {}

    for conversation in existing:
        _put(by_id, conversation)

    report = MergeReport(conversations=[])
    for conversation in incoming:
        is_new = conversation.id not in by_id
        stored = _put(by_id, conversation)
        if is_new:
            report.added.append(conversation.id)
        elif stored:
            report.replaced.append(conversation.id)
        else:
            report.kept.append(conversation.id)

    report.conversations = sorted(by_id.values(), key=recency_key, reverse=True)
    return report


def _put(by_id: dict[str, ChatConversation], candidate: ChatConversation) -> bool:
    """stores candidate unless a present record wins, returns True if stored."""
    current = by_id.get(candidate.id)
    if current is None or wins(candidate, current):
        by_id[candidate.id] = candidate
        return True
    return False


def wins(candidate: ChatConversation, current: ChatConversation) -> bool:
    """
    decides an id collision: True if candidate replaces current.

    the later-or-equal updated_at wins; when either timestamp is unparseable
    the longer-or-equal message list wins. replacement is total.
    """
    candidate_time, current_time = epoch(candidate.updated_at), epoch(current.updated_at)
    if candidate_time is not None and current_time is not None:
        return candidate_time >= current_time
    logger.debug(
        "Unparseable updatedAt on conversation %s, comparing message counts", candidate.id
    )
    return len(candidate.messages) >= len(current.messages)


def recency_key(conversation: ChatConversation) -> float:
    """sort key on updated_at; unparseable timestamps sort as oldest."""
    value = epoch(conversation.updated_at)
    return value if value is not None else float("-inf")
