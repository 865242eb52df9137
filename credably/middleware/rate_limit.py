"""
Shared slowapi limiter.

Routes that call OpenAI or third-party platform APIs carry a per-IP
@limiter.limit(...) decorator; RATE_LIMIT_ENABLED=false turns every limit off.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from credably.config import get_settings

AI_LIMIT = "10/minute"
SYNC_LIMIT = "20/hour"

limiter = Limiter(key_func=get_remote_address, enabled=get_settings().rate_limit_enabled)
