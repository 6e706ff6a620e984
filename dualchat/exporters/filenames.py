"""export filename derivation."""

import re
from datetime import datetime, timezone
from typing import Optional

UNSAFE_FILENAME_PATTERN = re.compile(r'[\\/:*?"<>|\x00-\x1f]+')

ALL_CONVERSATIONS_STEM = "dual-ai-chat-all"


def sanitize_filename(name: str) -> str:
    """replaces filesystem-unsafe character runs with '_', falls back to 'export'."""
    return UNSAFE_FILENAME_PATTERN.sub("_", name).strip() or "export"


def export_filename(
    title: str,
    extension: str,
    conversation_id: Optional[str] = None,
    moment: Optional[datetime] = None,
) -> str:
    """
    builds an export filename from a conversation title.

    Args:
        title: conversation title (or collection stem)
        extension: file extension without the dot
        conversation_id: optional id, its first 8 characters are appended
        moment: timestamp suffix (defaults to now, UTC)

    Returns:
        e.g. "My_chat-3f2a9c1b-20240601-120000.json"
    """
    moment = moment or datetime.now(timezone.utc)
    parts = [sanitize_filename(title)]
    if conversation_id:
        parts.append(sanitize_filename(conversation_id[:8]))
    parts.append(moment.strftime("%Y%m%d-%H%M%S"))
    return f"{'-'.join(parts)}.{extension}"
