from linky.dao.base import LinkBaseDAO
from linky.dao.redis import LinkRedisDAO


__all__ = [
    'LinkBaseDAO',
    'LinkRedisDAO',
]
