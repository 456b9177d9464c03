from slowapi import Limiter
from slowapi.util import get_remote_address

from hiring.core.config import settings

# Shared limiter; routers decorate endpoints with @limiter.limit(...)
limiter = Limiter(
    key_func=get_remote_address,
    enabled=settings.rate_limit_enabled,
)
