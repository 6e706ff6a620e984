"""display labels for message senders, purposes and attachments."""

from dualchat.core.models import Purpose, Sender, StoredChatMessage


def sender_label(sender: Sender) -> str:
    """returns the display name of a sender."""
    if sender is Sender.USER:
        return "User"
    if sender is Sender.COGNITO:
        return "Cognito"
    if sender is Sender.MUSE:
        return "Muse"
    raise ValueError(f"unhandled sender: {sender!r}")


def purpose_label(purpose: Purpose) -> str:
    """returns the display tag of a message purpose."""
    if purpose is Purpose.USER_INPUT:
        return "user-input"
    if purpose is Purpose.SYSTEM_NOTIFICATION:
        return "system-notification"
    if purpose is Purpose.COGNITO_TO_MUSE:
        return "cognito-to-muse"
    if purpose is Purpose.MUSE_TO_COGNITO:
        return "muse-to-cognito"
    if purpose is Purpose.FINAL_RESPONSE:
        return "final-response"
    if purpose is Purpose.CANCELLED:
        return "cancelled"
    raise ValueError(f"unhandled purpose: {purpose!r}")


def attachment_markers(message: StoredChatMessage) -> list[str]:
    """returns bracket-less markers such as 'attachment: notes.txt'."""
    markers = []
    if message.text_attachment is not None:
        markers.append(f"attachment: {message.text_attachment.name}")
    if message.image is not None:
        markers.append(f"image: {message.image.name}")
    return markers
