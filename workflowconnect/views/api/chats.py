from __future__ import annotations

import logging

from flask import Blueprint, g, jsonify, request

from ...extensions import db
from ...lib.utils import commit_with_retry
from ...models import Chat, ChatParticipant, File, Message, User
from ..middleware import NOT_PARTICIPANT, parse_id, require_auth

chats_bp = Blueprint("chats", __name__, url_prefix="/api/chats")


def load_member_chat(chat_id: int):
    """Return (chat, None) for a chat the caller belongs to, else (None, error response)."""
    chat = db.session.get(Chat, chat_id)
    if not chat:
        return None, (jsonify({"error": "Chat not found"}), 404)
    if not chat.is_participant(g.user_id):
        return None, (jsonify({"error": NOT_PARTICIPANT}), 403)
    return chat, None


def _existing_user_ids(user_ids) -> list[int]:
    wanted = {uid for uid in (parse_id(u) for u in user_ids) if uid is not None}
    if not wanted:
        return []
    rows = db.session.query(User.id).filter(User.id.in_(wanted)).all()
    return [user_id for (user_id,) in rows]


@chats_bp.route("", methods=["GET"])
@require_auth
def list_chats():
    return jsonify([chat.to_dict() for chat in Chat.for_user(g.user_id)])


@chats_bp.route("/private", methods=["POST"])
@require_auth
def create_private_chat():
    data = request.get_json(silent=True) or {}
    other_id = parse_id(data.get("userId"))
    if other_id is None:
        return jsonify({"error": "userId is required"}), 400
    if other_id == g.user_id:
        return jsonify({"error": "Cannot create chat with yourself"}), 400
    if db.session.get(User, other_id) is None:
        return jsonify({"error": "User not found"}), 404

    chat = Chat.find_private(g.user_id, other_id)
    if chat:
        return jsonify(chat.to_dict()), 200

    chat = Chat(is_group=False)
    db.session.add(chat)
    db.session.flush()
    for user_id in (g.user_id, other_id):
        db.session.add(ChatParticipant(chat_id=chat.id, user_id=user_id))
    commit_with_retry(db.session)
    logging.info("create_private_chat: chat %s between %s and %s", chat.id, g.user_id, other_id)
    return jsonify(chat.to_dict()), 201


@chats_bp.route("/group", methods=["POST"])
@require_auth
def create_group_chat():
    data = request.get_json(silent=True) or {}
    name = (data.get("name") or "").strip()
    if not name:
        return jsonify({"error": "Group name is required"}), 400
    participants = data.get("participants") or []
    if not isinstance(participants, list) or not participants:
        return jsonify({"error": "At least one participant is required"}), 400

    member_ids = set(_existing_user_ids(participants))
    member_ids.add(g.user_id)

    chat = Chat(name=name, is_group=True, admin_id=g.user_id)
    db.session.add(chat)
    db.session.flush()
    for user_id in sorted(member_ids):
        db.session.add(ChatParticipant(chat_id=chat.id, user_id=user_id))
    commit_with_retry(db.session)
    logging.info("create_group_chat: chat %s with %d participants", chat.id, len(member_ids))
    return jsonify(chat.to_dict()), 201


@chats_bp.route("/<int:chat_id>/users", methods=["POST"])
@require_auth
def add_users(chat_id: int):
    data = request.get_json(silent=True) or {}
    user_ids = data.get("userIds") or []
    if not isinstance(user_ids, list) or not user_ids:
        return jsonify({"error": "No users provided to add"}), 400

    chat, error = load_member_chat(chat_id)
    if error:
        return error
    if not chat.is_group:
        return jsonify({"error": "Can only add users to group chats"}), 400

    for user_id in _existing_user_ids(user_ids):
        chat.add_participant(user_id)
    commit_with_retry(db.session)
    db.session.refresh(chat)
    return jsonify(chat.to_dict())


@chats_bp.route("/<int:chat_id>/leave", methods=["POST"])
@require_auth
def leave_chat(chat_id: int):
    chat, error = load_member_chat(chat_id)
    if error:
        return error
    if not chat.is_group:
        return jsonify({"error": "Can only leave group chats"}), 400

    chat.remove_participant(g.user_id)
    commit_with_retry(db.session)
    return jsonify({"message": "Successfully left the chat", "chatId": chat_id})


@chats_bp.route("/<int:chat_id>", methods=["DELETE"])
@require_auth
def delete_chat(chat_id: int):
    chat, error = load_member_chat(chat_id)
    if error:
        return error
    if chat.is_group and chat.admin_id != g.user_id:
        return jsonify({"error": "Only the admin can delete a group chat"}), 403

    # Attachments belong to the conversation; drop them with it
    file_ids = [m.file_id for m in chat.messages if m.file_id]
    db.session.delete(chat)
    db.session.flush()
    if file_ids:
        db.session.query(File).filter(File.id.in_(file_ids)).delete(synchronize_session=False)
    commit_with_retry(db.session)
    logging.info("delete_chat: chat %s deleted by user %s", chat_id, g.user_id)
    return jsonify({"message": "Chat deleted successfully", "chatId": chat_id})


@chats_bp.route("/<int:chat_id>/read", methods=["PUT"])
@require_auth
def mark_read(chat_id: int):
    chat, error = load_member_chat(chat_id)
    if error:
        return error
    updated = Message.mark_read(chat.id, g.user_id)
    commit_with_retry(db.session)
    return jsonify({"success": True, "updatedCount": updated})
