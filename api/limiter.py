"""
api/limiter.py -- Process-wide slowapi limiter and the OrderDesk rate limits.

api/main.py mounts the limiter through SlowAPIMiddleware; api/routes/v1/auth.py
decorates POST /auth/login with LOGIN_LIMIT. Keys are the client IP.

Counters live in process memory, so the limit is per worker and resets on
restart. Every route must decorate with this one instance or its hits are
counted in a separate store.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

# Brute-force ceiling for password guessing against /auth/login.
LOGIN_LIMIT = "10/minute"

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")
