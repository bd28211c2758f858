"""Data Access Object (DAO) implementation for managing link records in Redis

This module provides a Redis-based implementation of LinkBaseDAO. Every link is
a single Redis string holding the JSON document produced by `linky.dao.codec`.

Responsibilities:
    - Read, write and delete link records by slug;
    - Enumerate all link records by following the SCAN cursor;
    - Hide corrupt values (including non-UTF-8 and non-string values) and reserved operator keys from callers;
    - Translate Redis connectivity failures and refused commands into DataStoreError.

Classes:
    LinkRedisDAO:
        DAO for storing and retrieving LinkRecord in a Redis datastore.

Example:
    >>> from linky.models import LinkRecord
    >>> from linky.dao.redis import LinkRedisDAO

    >>> dao = LinkRedisDAO(prefix="linky:dev")

    >>> link = LinkRecord(slug='abc123', target_url='https://example.com/page', created_at_utc=1760486400000)
    >>> dao.put(link)
    <LinkRedisDAO>

    >>> dao.get('abc123').target_url
    'https://example.com/page'
    >>> [link.slug for link in dao.list_all()]
    ['abc123']
"""

import logging

import redis
from beartype import beartype

from linky.constants import Slug, Store
from linky.models import LinkRecord
from linky.dao.base import LinkBaseDAO
from linky.dao.codec import encode_record, decode_record
from linky.dao.redis.mixins import RedisClientMixin
from linky.dao.redis.helpers import handle_redis_connection_error


logger = logging.getLogger(__name__)


class LinkRedisDAO(RedisClientMixin, LinkBaseDAO):
    """Redis-based Data Access Object (DAO) for link records

    This class implements the LinkBaseDAO interface using Redis as a data store.

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.

    Methods:
        get(slug: str, **kwargs) -> LinkRecord | None:
            GET and decode a link. None when absent or corrupt.

        put(link: LinkRecord, only_if_exists: bool = False, **kwargs) -> LinkRedisDAO:
            SET the encoded link, overwriting any previous value (XX: only an existing one).

        delete(slug: str, **kwargs) -> bool:
            DEL a link. Deleting an absent slug is a no-op returning False.

        list_all(page_size: int = Store.SCAN_PAGE_SIZE, **kwargs) -> list[LinkRecord]:
            SCAN all link keys and MGET their values page by page.

    All methods raise DataStoreError on connectivity issues with Redis or when Redis
    refuses a command (e.g. OOM).
    """

    @handle_redis_connection_error
    @beartype
    def get(self, slug: str, **kwargs) -> LinkRecord | None:
        """Retrieve a link record by slug

        Args:
            slug (str):
                The slug identifier of the link.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            LinkRecord | None:
                The decoded link, or None if the key is absent or its value is malformed.

        Raises:
            DataStoreError:
                If Redis connectivity issues occur.

        Example:
            >>> dao.get('abc123')
            LinkRecord(slug='abc123', target_url='https://example.com', ...)
        """
        try:
            raw = self.redis.get(self.keys.link_key(slug))
        except redis.exceptions.ResponseError as e:
            # Another client wrote a hash, list, ... under the link key
            if not str(e).startswith('WRONGTYPE'):
                raise
            logger.warning('Ignoring non-string value under link key.', extra={'slug': slug})
            return None
        if raw is None:
            return None

        result = decode_record(slug, raw)
        if not result.ok:
            logger.warning('Ignoring malformed link record.', extra={'slug': slug, 'reason': result.error})
        return result.record

    @handle_redis_connection_error
    @beartype
    def put(self, link: LinkRecord, only_if_exists: bool = False, **kwargs) -> 'LinkRedisDAO':
        """Write a link record under its slug

        NOTE: Writes carry no version. Concurrent read-modify-write cycles
              on the same slug (e.g. two redirects incrementing clicks) resolve
              as last writer wins:

              (lambda 1): GET <app>:links:<slug>  => clicks=N
              (lambda 2): GET <app>:links:<slug>  => clicks=N
              (lambda 1): SET <app>:links:<slug>  <- clicks=N+1
              (lambda 2): SET <app>:links:<slug>  <- clicks=N+1

              One click is lost. Click counts are best effort.

        NOTE: A delete may land between the GET and the SET of such a cycle:

              (lambda 1): GET <app>:links:<slug>  => clicks=N
              (lambda 2): DEL <app>:links:<slug>
              (lambda 1): SET <app>:links:<slug>  <- clicks=N+1

              A plain SET would bring the deleted link back. Updates of an
              existing link pass `only_if_exists=True` (SET ... XX), which
              leaves a deleted key deleted.

        Args:
            link (LinkRecord):
                LinkRecord to be stored.
            only_if_exists (bool):
                If True, write only when the slug key still exists.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            LinkRedisDAO: self (for method chaining)

        Raises:
            DataStoreError:
                If a Redis connection issue occurs.
        """
        written = self.redis.set(self.keys.link_key(link.slug), encode_record(link), xx=only_if_exists)
        if not written:
            logger.info('Link vanished before update. Write skipped.', extra={'slug': link.slug})
        return self

    @handle_redis_connection_error
    @beartype
    def delete(self, slug: str, **kwargs) -> bool:
        """Delete a link record

        Args:
            slug (str):
                The slug identifier of the link.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            bool:
                True if a key was removed, False if it didn't exist.

        Raises:
            DataStoreError:
                If a Redis connection issue occurs.
        """
        return self.redis.delete(self.keys.link_key(slug)) > 0

    @handle_redis_connection_error
    @beartype
    def list_all(self, page_size: int = Store.SCAN_PAGE_SIZE, **kwargs) -> list[LinkRecord]:
        """Enumerate all link records

        Follows the SCAN cursor until Redis reports it exhausted (cursor 0).
        SCAN may return the same key more than once and gives no ordering
        guarantee, so keys are de-duplicated. Keys deleted between SCAN and
        MGET, and keys holding a non-string value, come back as None and are
        skipped. So are keys that are not UTF-8.

        Args:
            page_size (int):
                COUNT hint passed to SCAN.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            list[LinkRecord]:
                All decodable links except reserved slugs, in no particular order.

        Raises:
            DataStoreError:
                If a Redis connection issue occurs.
        """
        links: list[LinkRecord] = []
        seen: set[str] = set()
        cursor = 0

        while True:
            cursor, keys = self.redis.scan(cursor=cursor, match=self.keys.link_pattern(), count=page_size)

            slugs = []
            for key in keys:
                slug = self.keys.slug_from_key(key)
                if slug is None or slug in seen or slug in Slug.RESERVED:
                    continue
                seen.add(slug)
                slugs.append(slug)

            if slugs:
                values = self.redis.mget([self.keys.link_key(slug) for slug in slugs])
                for slug, raw in zip(slugs, values, strict=True):
                    if raw is None:
                        continue
                    result = decode_record(slug, raw)
                    if result.ok:
                        links.append(result.record)
                    else:
                        logger.warning('Skipping malformed link record.', extra={'slug': slug, 'reason': result.error})

            if int(cursor) == 0:
                return links
