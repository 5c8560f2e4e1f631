from slowapi import Limiter
from slowapi.util import get_remote_address

from warden.core.config import settings


# ============================================================================
# Rate Limiter Setup
# ============================================================================
# Redis storage when REDIS_URL is set, in-process memory otherwise
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.rate_limit_storage_uri,
    enabled=settings.rate_limit_enabled,
)
