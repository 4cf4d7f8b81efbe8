# phm/core/rate_limit.py
from slowapi import Limiter
from slowapi.util import get_remote_address

from phm.core.settings import settings

# One shared Limiter for the whole app
limiter = Limiter(key_func=get_remote_address)


def auth_rate_limit() -> str:
    return settings.AUTH_RATE_LIMIT
