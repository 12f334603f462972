from __future__ import annotations

from flask import Blueprint, g, jsonify

from ...extensions import db
from ...models import User
from ..middleware import require_auth

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.route("", methods=["GET"])
@require_auth
def list_users():
    users = (
        db.session.query(User)
        .filter(User.id != g.user_id)
        .order_by(User.name.asc())
        .all()
    )
    return jsonify([user.to_dict() for user in users])


@users_bp.route("/<int:user_id>", methods=["GET"])
@require_auth
def get_user(user_id: int):
    user = db.session.get(User, user_id)
    if not user:
        return jsonify({"error": "User not found"}), 404
    return jsonify(user.to_dict())
