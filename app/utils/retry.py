# app/utils/retry.py
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception
import requests
import redis

from app.utils.logging import get_logger

logger = get_logger(__name__)


def _log_retry(retry_state):
    logger.warning(
        f"Retrying {retry_state.fn.__qualname__} "
        f"(attempt {retry_state.attempt_number}): {retry_state.outcome.exception()!r}"
    )


def _is_transient_http(exc: BaseException) -> bool:
    # 4xx nie ma sensu powtarzac, 5xx i bledy sieci tak
    if isinstance(exc, requests.HTTPError):
        return exc.response is None or exc.response.status_code >= 500
    return isinstance(exc, requests.RequestException)


def http_retry(attempts: int = 3):
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception(_is_transient_http),
        before_sleep=_log_retry,
    )


def redis_retry(attempts: int = 3):
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception(lambda e: isinstance(e, redis.RedisError)),
        before_sleep=_log_retry,
    )
