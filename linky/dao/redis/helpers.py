import logging
import functools
from collections.abc import Callable

import redis

from linky.dao.exceptions import DataStoreError


__all__ = []

logger = logging.getLogger(__name__)

# Failures where the link store cannot be reached at all
UNREACHABLE = (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError)
# Commands Redis received and refused (OOM, READONLY replica, WRONGTYPE, ...)
REJECTED = redis.exceptions.ResponseError


def describe_connection(client: redis.Redis) -> str:
    info = client.connection_pool.connection_kwargs
    return f'{info.get("host")}:{info.get("port")}/{info.get("db")}'


def handle_redis_connection_error[**P, R](method: Callable[P, R]) -> Callable[P, R]:
    """Translate Redis connectivity failures and refused commands of a DAO method into DataStoreError

    The decorated method must belong to an object exposing the client as `self.redis`.

    Example:
        >>> @handle_redis_connection_error
        ... def get(self, slug):
        ...     return self.redis.get(slug)
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except UNREACHABLE as e:
            where = describe_connection(self.redis)
            logger.warning('Redis unreachable.', extra={'redis': where, 'operation': method.__name__})
            raise DataStoreError(f"Can't connect to Redis at {where}.") from e
        except REJECTED as e:
            where = describe_connection(self.redis)
            logger.warning('Redis refused command.', extra={'redis': where, 'operation': method.__name__, 'reason': str(e)})
            raise DataStoreError(f'Redis at {where} refused {method.__name__}: {e}') from e

    return wrapper
