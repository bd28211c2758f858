from unittest.mock import MagicMock

import bcrypt
import pytest
import redis
from pytest import MonkeyPatch

from linky.dao.base import LinkBaseDAO
from linky.models import LinkRecord
from linky.constants import Slug


class InMemoryLinkDAO(LinkBaseDAO):
    """Dictionary-backed LinkBaseDAO recording every write for assertions."""

    def __init__(self):
        self.links: dict[str, LinkRecord] = {}
        self.puts: list[LinkRecord] = []
        self.deletes: list[str] = []

    def get(self, slug: str, **kwargs) -> LinkRecord | None:
        return self.links.get(slug)

    def put(self, link: LinkRecord, only_if_exists: bool = False, **kwargs) -> 'InMemoryLinkDAO':
        if only_if_exists and link.slug not in self.links:
            return self
        self.puts.append(link)
        self.links[link.slug] = link
        return self

    def delete(self, slug: str, **kwargs) -> bool:
        self.deletes.append(slug)
        return self.links.pop(slug, None) is not None

    def list_all(self, **kwargs) -> list[LinkRecord]:
        return [link for slug, link in self.links.items() if slug not in Slug.RESERVED]


@pytest.fixture
def memory_dao() -> InMemoryLinkDAO:
    return InMemoryLinkDAO()


@pytest.fixture
def app_prefix() -> str:
    return 'testapp:test'


@pytest.fixture
def redis_client() -> redis.Redis:
    """Mock a Redis pipeline-compatible client."""
    client = MagicMock(spec=redis.client.Pipeline)
    client.connection_pool = MagicMock(
        spec=redis.ConnectionPool,
        connection_kwargs={'host': 'redis.test', 'port': 6379, 'db': 0},
    )
    client.pipeline.return_value = client
    client.__enter__.return_value = client
    client.__exit__.return_value = None
    client.get.return_value = None
    return client


@pytest.fixture(autouse=True)
def _fast_bcrypt(monkeypatch: MonkeyPatch) -> None:
    """Use the cheapest bcrypt cost factor so hashing doesn't dominate test time."""
    gensalt = bcrypt.gensalt
    monkeypatch.setattr(bcrypt, 'gensalt', lambda rounds=4, prefix=b'2b': gensalt(rounds=rounds, prefix=prefix))
