from __future__ import annotations

import logging
from typing import Iterable, Optional

from flask import request, session

from ..extensions import socketio
from .auth import decode_user_id
from .registry import get_connection_registry


def get_token_from_handshake(auth: Optional[dict] = None) -> Optional[str]:
    """Read the bearer token from the Socket.IO auth payload, falling back to ?token=."""
    token = None
    if isinstance(auth, dict):
        token = auth.get("token")
    if not token:
        token = request.args.get("token")
    if token and token.lower().startswith("bearer "):
        token = token.split(" ", 1)[1].strip()
    return token


def authenticate_socket(auth: Optional[dict] = None) -> Optional[int]:
    return decode_user_id(get_token_from_handshake(auth))


def get_user_id_from_socket() -> Optional[int]:
    """User id bound to the current socket by the connect handler."""
    user_id = session.get("user_id")
    return int(user_id) if user_id is not None else None


def emit_to_sender(event: str, data) -> None:
    socketio.emit(event, data, to=request.sid)


def emit_to_users(user_ids: Iterable[int], event: str, data: dict) -> list[int]:
    """Deliver ``event`` to each user's registered connection.

    Users without a registration are skipped. Returns the ids that were reached.
    """
    registry = get_connection_registry()
    delivered: list[int] = []
    for user_id in user_ids:
        sid = registry.lookup(user_id)
        if not sid:
            continue
        socketio.emit(event, data, to=sid)
        delivered.append(user_id)
    logging.debug("emit_to_users: %s delivered to %s", event, delivered)
    return delivered
