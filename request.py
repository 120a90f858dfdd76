"""Projects conversation history plus the active image into the model's wire format.

The shape is the Anthropic Messages format that Bedrock's ``invoke_model``
expects: a list of ``{"role", "content"}`` entries whose content is a list of
typed blocks. The image block precedes the text block it grounds.
"""

from dataclasses import dataclass

from attachments import Attachment
from store import WELCOME_ID, Role, Turn

DEFAULT_IMAGE_PROMPT = "I've uploaded an image, please help me with this"

ROLE_NAMES = {
    Role.USER: "user",
    Role.MODEL: "assistant",
}


@dataclass(frozen=True)
class RemoteRequest:
    messages: tuple[dict, ...]


def build(history: tuple[Turn, ...] | list[Turn], new_message_text: str, attachment: Attachment | None) -> RemoteRequest:
    """Build the outbound request for the next user turn. Pure: no I/O, no mutation."""
    text = new_message_text.strip()
    if not text:
        if attachment is None:
            raise ValueError("empty message with no image")
        text = DEFAULT_IMAGE_PROMPT

    messages = [
        {"role": ROLE_NAMES[turn.role], "content": [{"type": "text", "text": turn.text}]}
        for turn in history
        if turn.id != WELCOME_ID
    ]

    content: list[dict] = []
    if attachment is not None:
        content.append({
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": attachment.mime_type,
                "data": attachment.encoded_payload,
            },
        })
    content.append({"type": "text", "text": text})
    messages.append({"role": "user", "content": content})

    return RemoteRequest(messages=tuple(messages))
