from flask import Flask

from .chats import chats_bp
from .files import files_bp
from .messages import messages_bp
from .users import users_bp

__all__ = ["register_blueprints", "chats_bp", "files_bp", "messages_bp", "users_bp"]


def register_blueprints(app: Flask) -> None:
    for blueprint in (users_bp, chats_bp, messages_bp, files_bp):
        # Blueprints are module-level singletons; each app registers them once
        if blueprint.name not in app.blueprints:
            app.register_blueprint(blueprint)
