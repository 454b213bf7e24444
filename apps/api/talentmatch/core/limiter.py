from slowapi import Limiter
from slowapi.util import get_remote_address

from talentmatch.core.config import get_settings

# No auth in this service, so limits are keyed per client address.
limiter = Limiter(key_func=get_remote_address, enabled=get_settings().rate_limit_enabled)
