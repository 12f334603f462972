# Entry point for gunicorn (see gunicorn.conf.py) and `python -m workflowconnect.wsgi`
from __future__ import annotations

import os

from . import create_app
from .extensions import socketio

# Instantiate the application at import time for WSGI servers
app = create_app()


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    socketio.run(app, host="0.0.0.0", port=port)
