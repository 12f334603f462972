# Enable postponed annotations for forward references
from __future__ import annotations

import logging
import sqlite3
import time
from typing import Optional
from urllib.parse import urlparse

import redis
from flask import current_app
from sqlalchemy.exc import OperationalError as SAOperationalError


# Return current epoch time in milliseconds
def now_ms() -> int:
    return int(time.time() * 1000)


# Commit a SQLAlchemy session with retries to mitigate SQLite 'database is locked' errors
def commit_with_retry(
    session, retries: int = 5, initial_delay: float = 0.05, backoff: float = 2.0
) -> None:
    """Commit the SQLAlchemy session with retries for SQLite 'database is locked'.

    Rolls back between attempts and uses exponential backoff. Any other error
    rolls the session back and propagates to the caller.
    """
    delay = float(initial_delay)
    last_exc: Exception | None = None
    for _ in range(retries):
        try:
            session.commit()
            return
        except (sqlite3.OperationalError, SAOperationalError) as e:
            # Only retry for lock-related errors
            if "database is locked" not in str(e).lower():
                session.rollback()
                raise
            session.rollback()
            time.sleep(delay)
            delay *= backoff
            last_exc = e
        except Exception:
            session.rollback()
            raise
    # If we exhausted retries, re-raise the last lock error to the caller
    if last_exc:
        raise last_exc


def get_redis_client() -> Optional[redis.Redis]:
    """
    Get a Redis client using the same connection as the SocketIO message queue.
    Returns None if Redis is not configured or not reachable.
    """
    message_queue_url = current_app.config.get("SOCKETIO_MESSAGE_QUEUE", "")
    if not message_queue_url:
        return None
    if urlparse(message_queue_url).scheme not in ("redis", "rediss"):
        logging.warning("SOCKETIO_MESSAGE_QUEUE is not a redis url, shared registry disabled")
        return None

    try:
        redis_client = redis.Redis.from_url(
            message_queue_url,
            decode_responses=True,
            socket_connect_timeout=2,
        )
        # Test connection
        redis_client.ping()
        return redis_client
    except redis.RedisError as e:
        logging.warning("Failed to connect to Redis: %s", e)
        return None
