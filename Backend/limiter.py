"""
Rate limiter configuration using SlowAPI.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

import config

# Keyed by client IP; RATE_LIMIT_ENABLED=false turns every limit off
limiter = Limiter(key_func=get_remote_address, enabled=config.RATE_LIMIT_ENABLED)

GENERATION_LIMIT = "10/minute"
SAVE_LIMIT = "5/minute"
READ_LIMIT = "60/minute"
