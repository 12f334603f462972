from __future__ import annotations

import logging

from flask import Blueprint, g, jsonify, request

from ...extensions import db
from ...lib.utils import commit_with_retry
from ...models import Message
from ..middleware import parse_id, require_auth
from ..ws.messages.common import (
    clean_text,
    edit_message,
    fan_out_message,
    persist_message,
    soft_delete_message,
)
from .chats import load_member_chat

messages_bp = Blueprint("messages", __name__, url_prefix="/api/messages")


def load_own_message(message_id: int, action: str):
    message = db.session.get(Message, message_id)
    if not message or message.deleted:
        return None, (jsonify({"error": "Message not found"}), 404)
    if message.sender_id != g.user_id:
        return None, (jsonify({"error": f"You can only {action} your own messages"}), 403)
    return message, None


@messages_bp.route("/<int:chat_id>", methods=["GET"])
@require_auth
def get_messages(chat_id: int):
    chat, error = load_member_chat(chat_id)
    if error:
        return error
    messages = Message.history(chat.id)
    payload = [message.to_dict() for message in messages]
    # Fetching history counts as reading it
    Message.mark_read(chat.id, g.user_id)
    commit_with_retry(db.session)
    logging.debug("get_messages: %d messages for chat %s (user=%s)", len(payload), chat.id, g.user_id)
    return jsonify(payload)


@messages_bp.route("", methods=["POST"])
@require_auth
def send_message():
    data = request.get_json(silent=True) or {}
    chat_id = parse_id(data.get("chatId"))
    if chat_id is None:
        return jsonify({"error": "chatId is required"}), 400
    text, text_error = clean_text(data)
    if text_error:
        return jsonify({"error": text_error}), 400
    chat, error = load_member_chat(chat_id)
    if error:
        return error

    message = persist_message(chat, g.user_id, text)
    fan_out_message(chat, message)
    return jsonify(message.to_dict()), 201


@messages_bp.route("/<int:message_id>", methods=["PUT"])
@require_auth
def update_message(message_id: int):
    data = request.get_json(silent=True) or {}
    text, text_error = clean_text(data)
    if text_error:
        return jsonify({"error": text_error}), 400
    message, error = load_own_message(message_id, "edit")
    if error:
        return error
    edit_message(message, text)
    return jsonify(message.to_dict())


@messages_bp.route("/<int:message_id>", methods=["DELETE"])
@require_auth
def delete_message(message_id: int):
    message, error = load_own_message(message_id, "delete")
    if error:
        return error
    soft_delete_message(message)
    return jsonify({"message": "Message deleted", "messageId": message_id})
