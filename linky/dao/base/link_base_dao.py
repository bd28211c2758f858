"""Abstract base class for link data access objects (DAOs).

This class establishes a consistent contract for all link DAO implementations,
regardless of the underlying key-value store (e.g., Redis, DynamoDB, Workers KV).

Responsibilities:
    - Provide an interface for reading, writing, deleting and enumerating LinkRecord objects.
    - Report absent and corrupt records the same way (None), never as an exception.
    - Standardize error handling across multiple data store implementations.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from linky.models import LinkRecord
        >>> from linky.dao import LinkRedisDAO

        >>> dao = LinkRedisDAO(...)

        >>> link = LinkRecord(slug='a1b2c3', target_url='https://example.com/blog', created_at_utc=1760486400000)
        >>> dao.put(link)

        >>> dao.get('a1b2c3').target_url
        'https://example.com/blog'

        >>> dao.delete('a1b2c3')
        True
        >>> dao.delete('a1b2c3')
        False
"""

from abc import ABC, abstractmethod

from linky.models import LinkRecord


class LinkBaseDAO(ABC):
    """Interface for link data access objects (DAOs).

    Methods:
        get(slug: str, **kwargs) -> LinkRecord | None:
            Retrieve a LinkRecord by slug. None if absent or malformed.
            Raises DataStoreError on connection or read failure.

        put(link: LinkRecord, only_if_exists: bool = False, **kwargs) -> LinkBaseDAO:
            Write a LinkRecord under its slug, overwriting any previous value.
            With only_if_exists, a slug deleted in the meantime stays deleted.
            Raises DataStoreError on connection or write failure.

        delete(slug: str, **kwargs) -> bool:
            Delete a LinkRecord. Idempotent: deleting an absent slug returns False.
            Raises DataStoreError on connection or write failure.

        list_all(**kwargs) -> list[LinkRecord]:
            Enumerate every stored, decodable LinkRecord in no particular order.
            Reserved slugs are never yielded.
            Raises DataStoreError on connection or read failure.

    NOTE:
        - Writes carry no concurrency token. Two concurrent read-modify-write
          cycles on the same slug resolve as last writer wins.
        - Deletes always win over such cycles: the write-back passes
          only_if_exists=True.
    """

    @abstractmethod
    def get(self, slug: str, **kwargs) -> LinkRecord | None:
        """Retrieve a LinkRecord from the data store by its slug.

        Args:
            slug (str):
                The slug of the link to be retrieved.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            LinkRecord | None: The LinkRecord if found and decodable, otherwise None.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def put(self, link: LinkRecord, only_if_exists: bool = False, **kwargs) -> 'LinkBaseDAO':
        """Write a LinkRecord into the data store.

        Args:
            link (LinkRecord):
                The LinkRecord to be written under `link.slug`.

            only_if_exists (bool):
                If True, skip the write when no record is stored under `link.slug`.
                Updates of a link read earlier use it so they cannot resurrect
                a link deleted in between.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            LinkBaseDAO: self (for method chaining)

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def delete(self, slug: str, **kwargs) -> bool:
        """Delete a LinkRecord from the data store.

        Args:
            slug (str):
                The slug of the link to be deleted.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            bool: True if a record was removed, False if none existed.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def list_all(self, **kwargs) -> list[LinkRecord]:
        """Enumerate all links in the data store.

        Args:
            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            list[LinkRecord]: every decodable, non-reserved link.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass
