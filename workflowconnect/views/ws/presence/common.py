from __future__ import annotations

import logging
import time

from ....extensions import db, socketio
from ....lib.utils import commit_with_retry
from ....models import User

ONLINE = "online"
OFFLINE = "offline"


def persist_presence(user_id: int, online: bool) -> bool:
    """Write the online flag (and last-seen on the way out). Returns False on failure."""
    try:
        user = db.session.get(User, user_id)
        if not user:
            logging.warning("persist_presence: unknown user %s", user_id)
            return False
        user.is_online = online
        if not online:
            user.last_seen = int(time.time())
        commit_with_retry(db.session)
        return True
    except Exception:
        # Presence is best-effort; the connection lifecycle carries on regardless
        logging.exception("persist_presence: failed to store status for user %s", user_id)
        db.session.rollback()
        return False


def emit_presence(user_id: int, status: str) -> None:
    socketio.emit("userStatusChanged", {"userId": user_id, "status": status})


def set_presence(user_id: int, online: bool) -> None:
    persist_presence(user_id, online)
    emit_presence(user_id, ONLINE if online else OFFLINE)
