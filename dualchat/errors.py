"""exception types raised across dualchat."""


class DualChatError(Exception):
    """base class for dualchat errors."""


class ImportFailedError(DualChatError):
    """import source unreadable, not JSON, or without any usable conversation."""


class PersistenceError(DualChatError):
    """write to the persistence boundary failed."""
