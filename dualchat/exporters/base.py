"""base exporter interface."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union

from dualchat.core.models import ChatConversation
from dualchat.exporters.filenames import ALL_CONVERSATIONS_STEM, export_filename

logger = logging.getLogger(__name__)


@dataclass
class RenderContext:
    """options passed to exporters during rendering."""

    render_markdown: bool = False


class Exporter(ABC):
    """abstract base class for conversation formatters."""

    format_name: str
    extension: str

    @abstractmethod
    def render(self, conversation: ChatConversation, ctx: RenderContext) -> str:
        """renders a single conversation."""

    @abstractmethod
    def render_all(self, conversations: Sequence[ChatConversation], ctx: RenderContext) -> str:
        """renders conversations in the given order as one document."""

    def export(
        self,
        conversations: Sequence[ChatConversation],
        destination: Union[str, Path],
        dry_run: bool = False,
        overwrite: bool = False,
        ctx: Optional[RenderContext] = None,
    ) -> Optional[Path]:
        """
        Export conversations to a file in destination.

        a single conversation is rendered on its own and named after its
        title and id; several are rendered as one collection document.

        Args:
            conversations: conversations to export, in output order
            destination: output directory
            dry_run: If True, don't actually write anything
            overwrite: If True, replace an existing file with the same name

        Returns:
            path written, or None for dry runs and skipped files
        """
        ctx = ctx or RenderContext()
        if len(conversations) == 1:
            conversation = conversations[0]
            filename = export_filename(conversation.title, self.extension, conversation.id)
        else:
            filename = export_filename(ALL_CONVERSATIONS_STEM, self.extension)
        output_path = Path(destination) / filename

        if dry_run:
            logger.info("Would write to: %s", output_path)
            return None

        if output_path.exists() and not overwrite:
            logger.info("Skipping existing file: %s", output_path)
            return None

        if len(conversations) == 1:
            content = self.render(conversations[0], ctx)
        else:
            content = self.render_all(conversations, ctx)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")
        return output_path
