"""
Shared slowapi limiter.

Imported by main.py (exception handler, app.state) and by the route modules
that apply per-route limits with @limiter.limit(). One instance so every
route shares the same counter store.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from civic_auth.config import settings

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
