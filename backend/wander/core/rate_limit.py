from slowapi import Limiter
from slowapi.util import get_remote_address

from wander.core.settings import get_settings

_settings = get_settings()

# Shared by every router; registered on app.state in wander.main
limiter = Limiter(key_func=get_remote_address, enabled=_settings.ENABLE_RATE_LIMITING)

RATE_LIMIT_GENERATE = _settings.RATE_LIMIT_GENERATE
RATE_LIMIT_READ = _settings.RATE_LIMIT_READ
RATE_LIMIT_LIST = _settings.RATE_LIMIT_LIST
RATE_LIMIT_WRITE = _settings.RATE_LIMIT_WRITE
RATE_LIMIT_CHAT = _settings.RATE_LIMIT_CHAT
