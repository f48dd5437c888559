"""
Service settings, read from the environment (a local .env is loaded first).

The analyzer itself has no configuration; these only shape the HTTP/WebSocket
surface around it.
"""

import os
from dotenv import load_dotenv

load_dotenv()

HOST = os.getenv("STRUDEL_LINT_HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 3000))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Upper bound on source length accepted by the router
MAX_SOURCE_CHARS = int(os.getenv("STRUDEL_LINT_MAX_SOURCE_CHARS", 1_000_000))
