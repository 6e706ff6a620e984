"""Dual-assistant chat conversation store and exporter."""

import argparse
import logging
from pathlib import Path
from typing import Optional

from rich.markup import escape

from dualchat import config
from dualchat.core.timestamps import display
from dualchat.errors import ImportFailedError
from dualchat.progress import ProgressHandler
from dualchat.storage import JsonFileStorage
from dualchat.store import ConversationStore, Preferences
from dualchat.sync import export_conversations, import_file

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dualchat",
        description="Manage, import and export dual-assistant chat conversations",
    )
    parser.add_argument(
        "--data-file",
        type=Path,
        default=config.STORAGE_PATH,
        help=f"storage file (default: {config.STORAGE_PATH})",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="enable debug logging",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="suppress non-error output",
    )
    parser.add_argument(
        "--progress",
        action="store_true",
        help="show a spinner while reading import files",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("list", help="list conversations, newest first")

    new = commands.add_parser("new", help="start a new conversation")
    new.add_argument("title", nargs="?", default=None, help="conversation title")

    rename = commands.add_parser("rename", help="rename a conversation")
    rename.add_argument("id", help="conversation id")
    rename.add_argument("title", help="new title")

    delete = commands.add_parser("delete", help="delete one or all conversations")
    target = delete.add_mutually_exclusive_group(required=True)
    target.add_argument("id", nargs="?", default=None, help="conversation id")
    target.add_argument("--all", action="store_true", help="delete every conversation")

    import_cmd = commands.add_parser("import", help="merge conversations from a JSON file")
    import_cmd.add_argument("source", help="JSON file with one conversation or an array")

    layout = commands.add_parser("layout", help="show or change layout preferences")
    layout.add_argument(
        "--panel-width",
        type=float,
        default=None,
        help=f"chat panel width in percent ({config.MIN_PANEL_PERCENT:g}-{config.MAX_PANEL_PERCENT:g})",
    )
    fullscreen = layout.add_mutually_exclusive_group()
    fullscreen.add_argument(
        "--fullscreen",
        dest="fullscreen",
        action="store_true",
        help="open the notepad fullscreen",
    )
    fullscreen.add_argument(
        "--windowed",
        dest="fullscreen",
        action="store_false",
        help="open the notepad beside the chat",
    )
    layout.set_defaults(fullscreen=None)

    export = commands.add_parser("export", help="export conversations to a file")
    export.add_argument(
        "--format",
        default="json",
        choices=["json", "txt", "text", "html"],
        help="output format (default: json)",
    )
    export.add_argument("--id", default=None, help="export a single conversation")
    export.add_argument("--out", type=Path, default=Path("."), help="output directory")
    export.add_argument(
        "--markdown",
        action="store_true",
        help="render message text and notepads as Markdown in HTML output",
    )
    export.add_argument(
        "--dry-run",
        action="store_true",
        help="report the target file without writing it",
    )
    export.add_argument(
        "--overwrite",
        action="store_true",
        help="replace an existing file with the same name",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    main entry point for dualchat CLI.

    Args:
        argv: command line arguments (defaults to sys.argv[1:])

    Returns:
        exit code (0 success, 1 rejected request, 2 fatal error)
    """
    args = _build_parser().parse_args(argv)

    # configures logging
    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="[%(levelname)s] %(message)s",
    )

    with ProgressHandler(quiet=args.quiet, show_progress=args.progress) as handler:
        store = ConversationStore(
            JsonFileStorage(args.data_file),
            on_write_error=lambda e: handler.log_warning(f"Changes not saved: {e}"),
        ).open()
        try:
            return _run(args, store, handler)
        except Exception as e:  # pylint: disable=broad-except
            logger.error("Fatal error: %s", e)
            return 2


def _run(args: argparse.Namespace, store: ConversationStore, handler: ProgressHandler) -> int:
    if args.command == "list":
        for conv in store.conversations:
            marker = "*" if conv.id == store.current_id else " "
            handler.log_info(
                f"{marker} {conv.id}  {display(conv.updated_at)}  "
                f"{len(conv.messages):>4} msg  {escape(conv.title)}"
            )
        return 0

    if args.command == "new":
        conv = store.create(args.title)
        handler.log_info(f"Created {conv.id}: {escape(conv.title)}")
        return 0

    if args.command == "rename":
        if not store.rename(args.id, args.title):
            handler.log_error(f"Cannot rename {args.id}")
            return 1
        return 0

    if args.command == "delete":
        if args.all:
            store.delete_all()
            return 0
        if not store.delete(args.id):
            handler.log_error(f"Unknown conversation: {args.id}")
            return 1
        return 0

    if args.command == "layout":
        prefs = store.preferences
        if args.panel_width is not None or args.fullscreen is not None:
            store.save_preferences(
                Preferences(
                    chat_panel_width_percent=(
                        prefs.chat_panel_width_percent if args.panel_width is None else args.panel_width
                    ),
                    notepad_fullscreen=prefs.notepad_fullscreen if args.fullscreen is None else args.fullscreen,
                )
            )
            prefs = store.preferences
        handler.log_info(f"Chat panel width: {prefs.chat_panel_width_percent:g}%")
        handler.log_info(f"Notepad fullscreen: {'yes' if prefs.notepad_fullscreen else 'no'}")
        return 0

    if args.command == "import":
        try:
            result = import_file(store, Path(args.source), handler)
        except ImportFailedError as e:
            handler.log_error(f"Import failed: {e}")
            return 1
        handler.finish_import(result)
        return 0

    if args.command == "export":
        try:
            path = export_conversations(
                store,
                args.out,
                fmt=args.format,
                conversation_id=args.id,
                dry_run=args.dry_run,
                overwrite=args.overwrite,
                render_markdown=args.markdown,
            )
        except KeyError as e:
            handler.log_error(str(e.args[0]) if e.args else str(e))
            return 1
        handler.finish_export(path)
        return 0

    return 2
