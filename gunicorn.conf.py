import os

# Bind address; put a reverse proxy in front for TLS
bind = os.getenv("BIND", "0.0.0.0:5000")
# Socket.IO requires a single worker unless SOCKETIO_MESSAGE_QUEUE points at Redis
workers = int(os.getenv("WEB_WORKERS", "1"))
# Time to gracefully stop workers on restart/shutdown
graceful_timeout = 5
# Use Gevent WebSocket worker to support Flask-SocketIO
worker_class = "geventwebsocket.gunicorn.workers.GeventWebSocketWorker"
# WSGI app module path for Gunicorn to load
wsgi_app = "workflowconnect.wsgi:app"

# Kill and restart workers that block beyond this many seconds
timeout = 120
# Logging level for Gunicorn (defaults to INFO, can be overridden via LOG_LEVEL env var)
loglevel = os.getenv("LOG_LEVEL", "info").lower()
# Capture stdout/stderr of workers into Gunicorn logs
capture_output = True
