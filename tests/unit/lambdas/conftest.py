from collections.abc import Callable
from types import ModuleType
from typing import cast
from unittest.mock import MagicMock

import pytest
from pytest import MonkeyPatch

from linky.types import LambdaConfiguration, LambdaContext, OperatorCredentials


NOW = 1_760_486_400_000  # 2025-10-15T00:00:00Z
API_KEY = 'my-api-key'
SUPER_SECRET = 'my-super-secret'  # noqa: S105


@pytest.fixture
def context() -> LambdaContext:
    return cast(LambdaContext, {'function_name': 'linky'})


@pytest.fixture
def config() -> LambdaConfiguration:
    return cast(LambdaConfiguration, {'redis': {'host': 'redis.test', 'port': 6379, 'db': 0}})


@pytest.fixture
def credentials() -> OperatorCredentials:
    return (API_KEY, SUPER_SECRET)


@pytest.fixture
def patch_handler(monkeypatch: MonkeyPatch, config, credentials, memory_dao) -> Callable[[ModuleType], MagicMock]:
    """Wire a lambda `app` module to in-memory collaborators.

    Returns the LinkRedisDAO constructor mock so tests can inspect its kwargs.
    """

    def _patch(app: ModuleType) -> MagicMock:
        monkeypatch.setattr(app, 'load_config', lambda lambda_name: config)
        if hasattr(app, 'load_operator_credentials'):
            monkeypatch.setattr(app, 'load_operator_credentials', lambda: credentials)
        if hasattr(app, 'now_ms'):
            monkeypatch.setattr(app, 'now_ms', lambda: NOW)
        monkeypatch.setattr(app, 'app_prefix', lambda: 'testapp:test')
        dao_cls = MagicMock(return_value=memory_dao)
        monkeypatch.setattr(app, 'LinkRedisDAO', dao_cls)
        return dao_cls

    return _patch


@pytest.fixture
def operator_headers() -> Callable[..., dict[str, str]]:
    """Build request headers carrying the operator API key and, optionally, the super secret."""

    def _headers(api_key: str | None = API_KEY, super_secret: str | None = None) -> dict[str, str]:
        headers = {}
        if api_key is not None:
            headers['Authorization'] = f'Bearer {api_key}'
        if super_secret is not None:
            headers['X-Super-Secret'] = super_secret
        return headers

    return _headers
