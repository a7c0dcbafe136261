"""
Shared slowapi limiter.

Routes decorate with ``@limiter.limit(...)`` and main.py mounts the same
instance on ``app.state.limiter``; separate instances would keep separate
counters.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from tarot42.core.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://",
    enabled=settings.ENABLE_RATE_LIMITING,
)
