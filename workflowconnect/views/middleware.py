from __future__ import annotations

import logging
from functools import wraps
from typing import Callable, Optional

from flask import g, jsonify

from .. import get_user_id_from_auth_header
from ..extensions import db
from ..helpers.ws import emit_to_sender, get_user_id_from_socket
from ..models import Chat, Message

NOT_PARTICIPANT = "You are not a participant in this chat"
LOOKUP_FAILED = "Error processing request"


def parse_id(value) -> Optional[int]:
    """Coerce a client-supplied identifier to int, or None when it is not one."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def require_socket_user(handler: Callable) -> Callable:
    """
    Decorator for socket handlers that need the authenticated user.

    Passes (user_id, data) to the handler; emits ``error`` to the sender and
    returns early when the socket carries no identity.
    """
    @wraps(handler)
    def wrapper(data: Optional[dict] = None):
        user_id = get_user_id_from_socket()
        if not user_id:
            logging.warning("require_socket_user: no user_id (handler=%s)", handler.__name__)
            return emit_to_sender("error", "Authentication required")
        return handler(user_id, data if isinstance(data, dict) else {})
    return wrapper


def require_chat_member(handler: Callable) -> Callable:
    """
    Decorator for socket handlers acting on a chat identified by ``chatId``.

    Resolves the chat and checks that the socket's user participates in it,
    then passes (chat, user_id, data) to the handler. Every failure is reported
    to the sender only and nothing is persisted.

    Usage:
        @socketio.on("sendMessage")
        @require_chat_member
        def _on_send_message(chat, user_id, data):
            ...
    """
    @wraps(handler)
    @require_socket_user
    def wrapper(user_id: int, data: dict):
        chat_id = parse_id(data.get("chatId"))
        if chat_id is None:
            return emit_to_sender("error", "chatId is required")
        try:
            chat = db.session.get(Chat, chat_id)
            is_member = bool(chat) and chat.is_participant(user_id)
        except Exception:
            logging.exception(
                "require_chat_member: lookup failed for chat %s (handler=%s)",
                chat_id,
                handler.__name__,
            )
            db.session.rollback()
            return emit_to_sender("error", LOOKUP_FAILED)
        if not chat:
            return emit_to_sender("error", "Chat not found")
        if not is_member:
            logging.info(
                "require_chat_member: user %s rejected from chat %s (handler=%s)",
                user_id,
                chat_id,
                handler.__name__,
            )
            return emit_to_sender("error", NOT_PARTICIPANT)
        return handler(chat, user_id, data)
    return wrapper


def require_own_message(action: str) -> Callable:
    """
    Decorator factory for socket handlers that modify a message by ``messageId``.

    Only the sender may ``action`` (edit/delete) a message. Passes
    (message, user_id, data) to the handler.
    """
    def decorator(handler: Callable) -> Callable:
        @wraps(handler)
        @require_socket_user
        def wrapper(user_id: int, data: dict):
            message_id = parse_id(data.get("messageId"))
            if message_id is None:
                return emit_to_sender("error", "messageId is required")
            try:
                message = db.session.get(Message, message_id)
            except Exception:
                logging.exception("require_own_message: lookup failed for message %s", message_id)
                db.session.rollback()
                return emit_to_sender("error", LOOKUP_FAILED)
            if not message or message.deleted:
                return emit_to_sender("error", "Message not found")
            if message.sender_id != user_id:
                return emit_to_sender("error", f"You can only {action} your own messages")
            return handler(message, user_id, data)
        return wrapper
    return decorator


def require_auth(view: Callable) -> Callable:
    """Decorator for HTTP views: resolve the bearer token into ``g.user_id`` or answer 401."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        user_id = get_user_id_from_auth_header()
        if not user_id:
            return jsonify({"error": "unauthorized"}), 401
        g.user_id = user_id
        return view(*args, **kwargs)
    return wrapper
