from __future__ import annotations

import logging

from flask import request

from ....extensions import socketio
from ....helpers.registry import get_connection_registry
from ....helpers.ws import get_user_id_from_socket
from .common import set_presence


def register() -> None:
    @socketio.on("disconnect")
    def _on_disconnect(*_args):
        try:
            user_id = get_user_id_from_socket()
            if not user_id:
                logging.debug("disconnect: no user_id found for disconnected socket")
                return

            if not get_connection_registry().unregister(user_id, request.sid):
                # A newer connection replaced this one; the user is still online there
                logging.info(
                    "disconnect: user %s stale sid=%s closed, keeping current connection",
                    user_id,
                    request.sid,
                )
                return

            logging.info("disconnect: user %s went offline (sid=%s)", user_id, request.sid)
        except Exception:
            logging.exception("disconnect handler error")
            return

        set_presence(user_id, False)
