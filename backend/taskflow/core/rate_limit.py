# Rate limiting configuration for Taskflow (slowapi, keyed by client address)

from slowapi import Limiter
from slowapi.util import get_remote_address

from taskflow.core.settings import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)

RATE_LIMITS = {
    # Registration / login attempts per client
    "auth_operations": "20/minute",
}

__all__ = ["limiter", "RATE_LIMITS"]
