from __future__ import annotations

import logging

from flask import current_app

from ....extensions import db, socketio
from ....helpers.ws import emit_to_sender
from ....models import Chat
from ...middleware import require_chat_member
from .common import decode_file_payload, fan_out_message, persist_file_message


def register() -> None:
    @socketio.on("sendFile")
    @require_chat_member
    def _on_send_file(chat: Chat, user_id: int, data: dict):
        upload, error = decode_file_payload(data, current_app.config["MAX_FILE_SIZE"])
        if error:
            return emit_to_sender("error", error)
        try:
            message = persist_file_message(chat, user_id, upload)
        except Exception:
            logging.exception("sendFile handler error (user=%s, chat=%s)", user_id, chat.id)
            db.session.rollback()
            return emit_to_sender("error", "Error sending file")

        logging.info(
            "sendFile: %s (%d bytes) stored as file %s in chat %s",
            upload["filename"],
            len(upload["raw"]),
            message.file_id,
            chat.id,
        )
        fan_out_message(chat, message)
