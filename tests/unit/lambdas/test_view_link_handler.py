"""Unit tests for the view_link lambda handler"""

import json
from typing import cast

import pytest

from linky.dao.exceptions import DataStoreError
from linky.lambdas.view_link import app
from linky.lifecycle.passwords import hash_password
from linky.models import LinkRecord
from linky.types import LambdaEvent


NOW = 1_760_486_400_000


def _event(slug: str | None, headers: dict) -> LambdaEvent:
    return cast(
        LambdaEvent,
        {
            'resource': '/api/links/{slug}',
            'httpMethod': 'GET',
            'pathParameters': {'slug': slug} if slug else None,
            'headers': headers,
        },
    )


class TestViewLinkHandler:
    @pytest.fixture(autouse=True)
    def setup(self, patch_handler, memory_dao):
        self.dao_cls = patch_handler(app)
        memory_dao.links = {
            'abc123': LinkRecord(slug='abc123', target_url='https://example.com', created_at_utc=NOW, clicks=9),
            'secure': LinkRecord(
                slug='secure',
                target_url='https://example.com/private',
                created_at_utc=NOW,
                password=hash_password('secret'),
            ),
            'old': LinkRecord(slug='old', target_url='https://example.com/old', created_at_utc=0, expires_at_utc=NOW - 1),
        }

    def test_view_link(self, context, operator_headers):
        response = app.lambda_handler(_event('abc123', operator_headers()), context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 200
        assert body['slug'] == 'abc123'
        assert body['clicks'] == 9
        assert body['metadata']['created'] == '2025-10-15T00:00:00.000Z'

    def test_view_link_does_not_count_click(self, context, memory_dao, operator_headers):
        app.lambda_handler(_event('abc123', operator_headers()), context)

        assert memory_dao.links['abc123'].clicks == 9
        assert memory_dao.puts == []

    def test_view_protected_link_requires_super_secret(self, context, operator_headers):
        hidden = app.lambda_handler(_event('secure', operator_headers()), context)
        shown = app.lambda_handler(_event('secure', operator_headers(super_secret='my-super-secret')), context)

        assert hidden['statusCode'] == 404
        assert shown['statusCode'] == 200
        assert json.loads(shown['body'])['passwordHash'].startswith('$2b$')

    def test_view_expired_link_purges_it(self, context, memory_dao, operator_headers):
        response = app.lambda_handler(_event('old', operator_headers()), context)

        assert response['statusCode'] == 404
        assert 'old' not in memory_dao.links

    def test_view_missing_link(self, context, operator_headers):
        response = app.lambda_handler(_event('missing', operator_headers()), context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 404
        assert body == {'message': "Not Found (slug 'missing' not found)", 'errorCode': 'LINK_NOT_FOUND'}

    def test_view_without_slug(self, context, operator_headers):
        response = app.lambda_handler(_event(None, operator_headers()), context)

        assert response['statusCode'] == 400

    def test_view_unauthorized_before_slug_check(self, context):
        response = app.lambda_handler(_event(None, {}), context)

        assert response['statusCode'] == 401

    def test_view_store_unavailable(self, context, operator_headers):
        self.dao_cls.side_effect = DataStoreError('down')

        response = app.lambda_handler(_event('abc123', operator_headers()), context)

        assert response['statusCode'] == 500
