"""
Message persistence and fan-out shared by the socket handlers and the REST API.

Each write (message row + chat last-message pointer, or file + message +
pointer) is committed as one transaction before anything is emitted, so a
failed write never reaches any participant. Delivery afterwards is
best-effort: participants without a registered connection are skipped and
nothing is queued for them.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Optional

from ....extensions import db
from ....helpers.ws import emit_to_users
from ....lib.utils import commit_with_retry, now_ms
from ....models import DELETED_PLACEHOLDER, Chat, File, Message

FILE_DELETED_PLACEHOLDER = "[File deleted]"


def clean_text(data: dict) -> tuple[Optional[str], Optional[str]]:
    text = data.get("text")
    if not isinstance(text, str) or not text.strip():
        return None, "text is required"
    return text, None


def decode_file_payload(data: dict, max_size: int) -> tuple[Optional[dict], Optional[str]]:
    """Validate a ``sendFile`` payload and decode its base64 body.

    Returns ({filename, content_type, raw}, None) or (None, error).
    """
    filename = data.get("filename")
    if not isinstance(filename, str) or not filename.strip():
        return None, "filename is required"
    encoded = data.get("data")
    if not isinstance(encoded, str) or not encoded:
        return None, "data is required"

    declared_size = data.get("size")
    if isinstance(declared_size, (int, float)) and declared_size > max_size:
        return None, f"File size exceeds the maximum allowed ({max_size} bytes)"

    # Browsers send data URLs; keep only the payload after the comma
    if encoded.startswith("data:") and "," in encoded:
        encoded = encoded.split(",", 1)[1]
    try:
        raw = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        return None, "data is not valid base64"
    if len(raw) > max_size:
        return None, f"File size exceeds the maximum allowed ({max_size} bytes)"

    content_type = data.get("contentType") or "application/octet-stream"
    if not isinstance(content_type, str):
        return None, "contentType must be a string"
    return {"filename": filename.strip(), "content_type": content_type, "raw": raw}, None


def persist_message(
    chat: Chat, sender_id: int, text: str, file: Optional[File] = None
) -> Message:
    """Insert a message and move the chat's last-message pointer in a single commit."""
    created_at = chat.next_message_timestamp()
    message = Message(
        chat_id=chat.id,
        sender_id=sender_id,
        text=text,
        file=file,
        created_at=created_at,
        updated_at=created_at,
    )
    db.session.add(message)
    # Assign the id before the pointer references it
    db.session.flush()
    chat.point_to(message)
    commit_with_retry(db.session)
    return message


def persist_file_message(chat: Chat, sender_id: int, upload: dict) -> Message:
    file = File(
        filename=upload["filename"],
        content_type=upload["content_type"],
        size=len(upload["raw"]),
        data=upload["raw"],
        uploaded_by_id=sender_id,
    )
    db.session.add(file)
    return persist_message(chat, sender_id, f"File: {upload['filename']}", file=file)


def fan_out(chat: Chat, event: str, payload: dict) -> list[int]:
    """Emit ``event`` to every participant currently registered; returns who was reached."""
    return emit_to_users(chat.participant_ids(), event, payload)


def fan_out_message(chat: Chat, message: Message) -> list[int]:
    return fan_out(chat, "message", message.to_dict())


def edit_message(message: Message, text: str) -> Message:
    message.text = text
    message.edited = True
    message.updated_at = now_ms()
    commit_with_retry(db.session)
    fan_out(message.chat, "messageUpdated", message.to_dict())
    return message


def soft_delete_message(message: Message) -> Message:
    chat = message.chat
    message.deleted = True
    message.updated_at = now_ms()
    db.session.flush()
    chat.refresh_last_message()
    commit_with_retry(db.session)
    fan_out(
        chat,
        "messageDeleted",
        {
            "id": message.id,
            "chatId": chat.id,
            "deleted": True,
            "text": DELETED_PLACEHOLDER,
            "timestamp": message.updated_at,
        },
    )
    return message


def delete_file(file: File) -> Optional[int]:
    """Remove a file and the message carrying it; returns the affected chat id."""
    file_id = file.id
    message = db.session.query(Message).filter_by(file_id=file_id).first()
    chat = message.chat if message else None
    message_id = message.id if message else None
    if message:
        db.session.delete(message)
        db.session.flush()
        chat.refresh_last_message()
    db.session.delete(file)
    commit_with_retry(db.session)

    if chat is None:
        return None
    logging.info("delete_file: file %s removed with message %s from chat %s", file_id, message_id, chat.id)
    fan_out(
        chat,
        "messageDeleted",
        {
            "id": message_id,
            "chatId": chat.id,
            "deleted": True,
            "text": FILE_DELETED_PLACEHOLDER,
            "timestamp": now_ms(),
        },
    )
    return chat.id
