"""file-level import and export workflows."""

import json
from pathlib import Path
from typing import Any, Optional, Union

import ijson

from dualchat.errors import ImportFailedError
from dualchat.exporters import RenderContext, get_exporter
from dualchat.progress import ProgressHandler
from dualchat.store import ConversationStore, ImportResult


def read_import_source(source: Path) -> Any:
    """
    reads a JSON import file completely before anything is merged.

    arrays are stream-parsed item by item, single objects are loaded whole.

    Args:
        source: path to a JSON file

    Returns:
        parsed value (list of items for arrays)

    Raises:
        ImportFailedError: source missing, unreadable, or not valid JSON
    """
    if not source.is_file():
        raise ImportFailedError(f"Source not found: {source}")

    try:
        with open(source, "rb") as f:
            first_char = _peek_first_char(f)
            f.seek(0)
            if first_char == ord("["):
                return list(ijson.items(f, "item", use_float=True))
            return json.load(f)
    except (ValueError, ijson.JSONError, OSError) as e:
        raise ImportFailedError(f"{source.name} is not a valid JSON document: {e}") from e


def _peek_first_char(f: Any) -> int:
    """returns first non-whitespace byte from file."""
    while True:
        char = f.read(1)
        if not char:
            return 0
        if not char.isspace():
            return int(char[0])


def import_file(
    store: ConversationStore, source: Path, handler: ProgressHandler
) -> ImportResult:
    """
    imports a JSON file into the store.

    Raises:
        ImportFailedError: unreadable source or no usable conversations; the
            store is left unchanged
    """
    handler.start_reading(source.name)
    try:
        raw = read_import_source(source)
    finally:
        handler.stop()
    return store.import_data(raw)


def export_conversations(
    store: ConversationStore,
    destination: Union[str, Path],
    fmt: str = "json",
    conversation_id: Optional[str] = None,
    dry_run: bool = False,
    overwrite: bool = False,
    render_markdown: bool = False,
) -> Optional[Path]:
    """
    exports one conversation, or all of them newest first, to destination.

    Args:
        store: opened conversation store
        destination: output directory
        fmt: format name or extension (json, txt/text, html)
        conversation_id: single conversation to export (defaults to all)
        dry_run: if True, don't write anything
        overwrite: if True, replace an existing file
        render_markdown: if True, HTML output renders text as Markdown

    Returns:
        path written, or None when nothing was written

    Raises:
        KeyError: unknown format or conversation id
    """
    exporter = get_exporter(fmt)

    if conversation_id is not None:
        conversation = store.get(conversation_id)
        if conversation is None:
            raise KeyError(f"Unknown conversation: {conversation_id}")
        conversations = [conversation]
    else:
        conversations = store.conversations

    if not conversations:
        return None

    return exporter.export(
        conversations,
        destination,
        dry_run=dry_run,
        overwrite=overwrite,
        ctx=RenderContext(render_markdown=render_markdown),
    )
