from __future__ import annotations

import logging

from flask import request, session

from ....extensions import db, socketio
from ....helpers.registry import get_connection_registry
from ....helpers.ws import authenticate_socket
from ....models import User
from .common import set_presence


def register() -> None:
    @socketio.on("connect")
    def _on_connect(auth=None):
        try:
            user_id = authenticate_socket(auth)
            if not user_id:
                logging.info("connect: rejected socket without a valid token sid=%s", request.sid)
                return False
            if db.session.get(User, user_id) is None:
                logging.warning("connect: token for unknown user %s sid=%s", user_id, request.sid)
                return False

            # Bind identity to this socket for later events
            session["user_id"] = user_id
            get_connection_registry().register(user_id, request.sid)
            logging.info("connect: user %s registered on sid=%s", user_id, request.sid)
        except Exception:
            logging.exception("connect handler error")
            return False

        set_presence(user_id, True)
