from linky.dao.redis.redis_key_schema import RedisKeySchema
from linky.dao.redis.mixins import RedisClientMixin
from linky.dao.redis.link_redis_dao import LinkRedisDAO


__all__ = [
    'RedisKeySchema',
    'RedisClientMixin',
    'LinkRedisDAO',
]
