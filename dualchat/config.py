"""Central configuration for paths, storage keys and constants."""

import os
from pathlib import Path

# Data directory, override with DUALCHAT_DATA_DIR env var
DATA_DIR = Path(os.environ.get("DUALCHAT_DATA_DIR", str(Path.home() / ".dualchat")))

# Key-value file backing the persistence boundary
STORAGE_PATH = DATA_DIR / "storage.json"

# Storage keys
CONVERSATIONS_KEY = "dualAiChat.conversations"
ACTIVE_CONVERSATION_KEY = "dualAiChat.activeConversationId"
CHAT_PANEL_WIDTH_KEY = "dualAiChat.chatPanelWidthPercent"
NOTEPAD_FULLSCREEN_KEY = "dualAiChat.isNotepadFullscreen"

# Notepad history bound (snapshots kept per notepad)
MAX_NOTEPAD_HISTORY = 100

# Chat panel width, percent of the split layout
MIN_PANEL_PERCENT = 20.0
MAX_PANEL_PERCENT = 80.0
DEFAULT_PANEL_PERCENT = 60.0

# Default titles
DEFAULT_CONVERSATION_TITLE = "New conversation"
IMPORTED_CONVERSATION_TITLE = "Imported conversation"
DEFAULT_NOTEPAD_TITLE = "Notebook"
