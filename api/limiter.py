"""
api/limiter.py -- Shared slowapi rate limiter instance.

Imported by api/main.py (mounted as middleware) and by api/routes/v1/auth.py
(the login route applies get_settings().login_rate_limit with @limiter.limit()).

Counters live in RATE_LIMIT_STORAGE_URI. The default "memory://" counts per
process; several instances behind a load balancer can only enforce the login
limit together through a shared backend such as "redis://host:6379".
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import get_settings

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=get_settings().rate_limit_storage_uri,
)
