from __future__ import annotations

from flask_sqlalchemy import SQLAlchemy
from flask_socketio import SocketIO

# Shared extension objects; bound to an application inside create_app()
db = SQLAlchemy()
socketio = SocketIO()
