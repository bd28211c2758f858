import functools
from collections.abc import Callable


__all__ = ['RedisKeySchema']  # hide internal decorator prefix_key from imports


def prefix_key(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs) -> str:
        key = func(self, *args, **kwargs)
        return f'{self.prefix}:{key}' if self.prefix is not None else key

    return wrapper


class RedisKeySchema:
    """Provide standardized Redis keys for storing link records.

    An optional prefix can be provided to namespace all generated keys.
    It is highly encouraged to set a custom prefix for each app and environment,
    e.g. "linky:prod" or "linky:dev".
    """

    def __init__(self, prefix: str | None = None):
        if prefix is not None and not isinstance(prefix, str):
            raise TypeError(f'Prefix must be of type string (given type: {type(prefix)}).')

        self.prefix = prefix

    @prefix_key
    def link_key(self, slug: str) -> str:
        return f'links:{slug}'

    @prefix_key
    def link_pattern(self) -> str:
        return 'links:*'

    def slug_from_key(self, key: str | bytes) -> str | None:
        """Invert link_key(): strip the namespace and 'links:' segment.

        SCAN returns raw bytes. Keys that aren't UTF-8 can't name a slug: None.
        """
        if isinstance(key, bytes):
            try:
                key = key.decode('utf-8')
            except UnicodeDecodeError:
                return None
        return key.removeprefix(self.link_key(''))
