from __future__ import annotations

import io
import logging

from flask import Blueprint, current_app, g, jsonify, request, send_file

from ...extensions import db
from ...models import File, Message
from ..middleware import NOT_PARTICIPANT, parse_id, require_auth
from ..ws.messages.common import (
    decode_file_payload,
    delete_file as delete_file_and_message,
    fan_out_message,
    persist_file_message,
)
from .chats import load_member_chat

files_bp = Blueprint("files", __name__, url_prefix="/api/files")


@files_bp.route("", methods=["POST"])
@require_auth
def upload_file():
    data = request.get_json(silent=True) or {}
    chat_id = parse_id(data.get("chatId"))
    if chat_id is None:
        return jsonify({"error": "chatId is required"}), 400
    upload, upload_error = decode_file_payload(data, current_app.config["MAX_FILE_SIZE"])
    if upload_error:
        return jsonify({"error": upload_error}), 400
    chat, error = load_member_chat(chat_id)
    if error:
        return error

    message = persist_file_message(chat, g.user_id, upload)
    logging.info("upload_file: file %s saved for chat %s", message.file_id, chat.id)
    fan_out_message(chat, message)
    return jsonify(message.to_dict()), 201


@files_bp.route("/<int:file_id>", methods=["GET"])
@require_auth
def get_file(file_id: int):
    file = db.session.get(File, file_id)
    if not file:
        return jsonify({"error": "File not found"}), 404
    message = db.session.query(Message).filter_by(file_id=file.id).first()
    if not message:
        return jsonify({"error": "Message not found for this file"}), 404
    if not message.chat.is_participant(g.user_id):
        return jsonify({"error": NOT_PARTICIPANT}), 403

    return send_file(
        io.BytesIO(file.data),
        mimetype=file.content_type,
        as_attachment=True,
        download_name=file.filename,
    )


@files_bp.route("/<int:file_id>", methods=["DELETE"])
@require_auth
def delete_file(file_id: int):
    file = db.session.get(File, file_id)
    if not file:
        return jsonify({"error": "File not found"}), 404
    if file.uploaded_by_id != g.user_id:
        return jsonify({"error": "You can only delete your own files"}), 403

    delete_file_and_message(file)
    return jsonify({"message": "File deleted successfully", "fileId": file_id})
