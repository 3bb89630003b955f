# app/services/rate_limiter.py
import redis
from redis.exceptions import RedisError

from app.utils.retry import redis_retry
from app.utils.settings import REDIS_URL
from app.utils.logging import get_logger

logger = get_logger(__name__)

#LUA INCR + EXPIRE jako jedna operacja
#bez tego klucz moglby zostac bez TTL gdyby proces padl miedzy INCR a EXPIRE
_HIT_LUA = """
local current = redis.call('INCR', KEYS[1])
if current == 1 then
    redis.call('EXPIRE', KEYS[1], ARGV[1])
end
return current
"""


class RateLimiter:
    """
    -licznik zapytan w oknie czasowym (fixed window)
    -atomowosc przy pomocy lua
    -jak redis nie dziala to przepuszczamy (fail-open)
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @redis_retry()
    def hit(self, key: str, window_seconds: int) -> int:
        return int(self.redis.eval(_HIT_LUA, 1, key, window_seconds))

    def allow(self, scope: str, subject, limit: int, window_seconds: int) -> bool:
        key = f"ratelimit:{scope}:{subject}"
        try:
            count = self.hit(key, window_seconds)
        except RedisError as e:
            logger.warning(f"Rate limiter unavailable, allowing request for {key}: {e}")
            return True

        if count > limit:
            logger.info(f"Rate limit exceeded for {key} ({count}/{limit})")
            return False
        return True
