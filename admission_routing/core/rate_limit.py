from slowapi import Limiter
from slowapi.util import get_remote_address

# Keyed by client IP; only the public submission endpoint is limited
limiter = Limiter(key_func=get_remote_address)
