"""Shared rate limiter (slowapi); endpoints decorate with ``@limiter.limit``"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from academy.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)
