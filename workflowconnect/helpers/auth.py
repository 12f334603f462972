from __future__ import annotations

import logging
import time
from typing import Optional

import jwt
from flask import current_app


def create_access_token(user_id: int, expires_in: Optional[int] = None) -> str:
    """Sign an HS256 access token whose subject is the user id."""
    now = int(time.time())
    ttl = expires_in if expires_in is not None else current_app.config["ACCESS_TOKEN_EXPIRES"]
    payload = {"sub": str(user_id), "iat": now, "exp": now + int(ttl)}
    return jwt.encode(payload, current_app.config["JWT_SECRET"], algorithm="HS256")


def decode_user_id(token: Optional[str]) -> Optional[int]:
    """Return the user id carried by ``token`` or None when it is missing or invalid."""
    if not token or not token.strip():
        return None
    try:
        payload = jwt.decode(token, current_app.config["JWT_SECRET"], algorithms=["HS256"])
    except jwt.ExpiredSignatureError:
        logging.info("access token expired")
        return None
    except jwt.InvalidTokenError:
        logging.warning("access token rejected")
        return None
    sub = payload.get("sub")
    try:
        return int(sub) if sub is not None else None
    except (TypeError, ValueError):
        logging.warning("access token carries a non-numeric subject")
        return None
