"""Unit tests for the redirect_url lambda handler

Test coverage includes:

1. Open links redirect with 302 and count the click.
2. Password protected links: prompt, wrong password, form and bearer credentials.
3. Missing and expired links (404, 410).
4. Bad requests and infrastructure failures (400, 500).
"""

import base64
import json
from typing import cast

import pytest
from freezegun import freeze_time

from linky.dao.exceptions import DataStoreError
from linky.exceptions import AppConfigError
from linky.lambdas.redirect_url import app
from linky.lifecycle.passwords import hash_password
from linky.models import LinkRecord, PasswordLegacy, PasswordHashed
from linky.types import LambdaEvent
from linky.utils.helpers import now_ms


NOW = 1_760_486_400_000


def _event(slug: str | None = 'abc123', headers: dict | None = None, body: str | None = None, method: str = 'GET') -> LambdaEvent:
    return cast(
        LambdaEvent,
        {
            'resource': '/{slug}',
            'httpMethod': method,
            'path': f'/{slug}',
            'pathParameters': {'slug': slug} if slug else None,
            'headers': headers or {},
            'body': body,
            'requestContext': {'domainName': 'lnk.example.com', 'stage': 'Prod'},
        },
    )


def _form_event(password: str, slug: str = 'secure') -> LambdaEvent:
    return _event(
        slug,
        headers={'Content-Type': 'application/x-www-form-urlencoded'},
        body=f'password={password}',
        method='POST',
    )


class TestRedirectUrlHandler:
    @pytest.fixture(autouse=True)
    def setup(self, patch_handler, memory_dao):
        self.dao_cls = patch_handler(app)
        memory_dao.links = {
            'abc123': LinkRecord(slug='abc123', target_url='https://example.com/my-page', created_at_utc=NOW - 10),
            'secure': LinkRecord(
                slug='secure',
                target_url='https://example.com/private',
                created_at_utc=NOW - 10,
                password=hash_password('secret'),
            ),
            'old': LinkRecord(
                slug='old',
                target_url='https://example.com/old',
                created_at_utc=NOW - 10,
                expires_at_utc=NOW - 1,
            ),
        }

    # -------------------------------
    # 1. Open links
    # -------------------------------

    def test_redirect(self, context, memory_dao):
        response = app.lambda_handler(_event(), context)

        assert response['statusCode'] == 302
        assert response['headers']['Location'] == 'https://example.com/my-page'
        assert memory_dao.links['abc123'].clicks == 1
        self.dao_cls.assert_called_once_with(redis_host='redis.test', redis_port=6379, redis_db=0, prefix='testapp:test')

    def test_redirect_ignores_credential_for_open_link(self, context):
        response = app.lambda_handler(_event(headers={'Authorization': 'Bearer whatever'}), context)

        assert response['statusCode'] == 302

    # -------------------------------
    # 2. Password protected links
    # -------------------------------

    def test_password_prompt(self, context, memory_dao):
        response = app.lambda_handler(_event('secure'), context)

        assert response['statusCode'] == 200
        assert response['headers']['Content-Type'].startswith('text/html')
        assert 'Enter password' in response['body']
        assert 'action="/secure"' in response['body']
        assert memory_dao.links['secure'].clicks == 0

    def test_wrong_password(self, context, memory_dao):
        response = app.lambda_handler(_form_event('wrong'), context)

        assert response['statusCode'] == 401
        assert 'Incorrect password' in response['body']
        assert memory_dao.links['secure'].clicks == 0

    def test_correct_password_from_form(self, context, memory_dao):
        response = app.lambda_handler(_form_event('secret'), context)

        assert response['statusCode'] == 302
        assert response['headers']['Location'] == 'https://example.com/private'
        assert memory_dao.links['secure'].clicks == 1

    def test_correct_password_from_base64_form(self, context):
        event = _form_event('ignored')
        event['body'] = base64.b64encode(b'password=secret').decode('ascii')
        event['isBase64Encoded'] = True

        response = app.lambda_handler(event, context)

        assert response['statusCode'] == 302

    def test_correct_password_from_bearer_token(self, context):
        response = app.lambda_handler(_event('secure', headers={'Authorization': 'Bearer secret'}), context)

        assert response['statusCode'] == 302

    def test_legacy_password_is_upgraded(self, context, memory_dao):
        memory_dao.links['legacy'] = LinkRecord(
            slug='legacy',
            target_url='https://example.com/legacy',
            created_at_utc=0,
            password=PasswordLegacy(password='secret'),
        )

        response = app.lambda_handler(_form_event('secret', slug='legacy'), context)

        assert response['statusCode'] == 302
        assert isinstance(memory_dao.links['legacy'].password, PasswordHashed)

    def test_password_prompt_escapes_slug(self, context, memory_dao):
        memory_dao.links['a"b'] = LinkRecord(
            slug='a"b',
            target_url='https://example.com',
            created_at_utc=0,
            password=hash_password('secret'),
        )

        response = app.lambda_handler(_event('a"b'), context)

        assert 'action="/a&quot;b"' in response['body']

    # -------------------------------
    # 3. Missing and expired links
    # -------------------------------

    def test_link_not_found(self, context):
        response = app.lambda_handler(_event('missing'), context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 404
        assert body['errorCode'] == 'LINK_NOT_FOUND'
        assert 'https://lnk.example.com/missing' in body['message']

    def test_link_expired_is_deleted(self, context, memory_dao):
        response = app.lambda_handler(_event('old'), context)

        assert response['statusCode'] == 410
        assert json.loads(response['body'])['errorCode'] == 'LINK_EXPIRED'
        assert 'old' not in memory_dao.links

        assert app.lambda_handler(_event('old'), context)['statusCode'] == 404

    @freeze_time('2025-10-15T00:00:00Z')
    def test_real_clock_is_used(self, context, monkeypatch, memory_dao):
        monkeypatch.setattr(app, 'now_ms', now_ms)
        memory_dao.links['edge'] = LinkRecord(slug='edge', target_url='https://example.com', created_at_utc=0, expires_at_utc=NOW)

        assert app.lambda_handler(_event('edge'), context)['statusCode'] == 410

    # -------------------------------
    # 4. Bad requests and failures
    # -------------------------------

    def test_missing_slug(self, context):
        response = app.lambda_handler(_event(slug=None), context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 400
        assert body == {'message': "Bad Request (missing 'slug' in path)", 'errorCode': 'MISSING_SLUG'}

    def test_undecodable_base64_form(self, context, memory_dao):
        event = _form_event('ignored')
        event['body'] = base64.b64encode(b'password=\xff').decode('ascii')
        event['isBase64Encoded'] = True

        response = app.lambda_handler(event, context)

        assert response['statusCode'] == 400
        assert json.loads(response['body'])['errorCode'] == 'INVALID_REQUEST_BODY'
        assert memory_dao.links['secure'].clicks == 0

    def test_config_failure(self, context, monkeypatch):
        def failing_config(lambda_name):
            raise AppConfigError('no section')

        monkeypatch.setattr(app, 'load_config', failing_config)

        response = app.lambda_handler(_event(), context)

        assert response['statusCode'] == 500

    def test_store_unreachable(self, context):
        self.dao_cls.side_effect = DataStoreError("Can't connect to Redis at redis.test:6379/0.")

        response = app.lambda_handler(_event(), context)

        assert response['statusCode'] == 500
        assert json.loads(response['body'])['errorCode'] == 'STORAGE_UNAVAILABLE'

    def test_store_failure_during_resolution(self, context, memory_dao, monkeypatch):
        def failing_get(slug):
            raise DataStoreError('down')

        monkeypatch.setattr(memory_dao, 'get', failing_get)

        response = app.lambda_handler(_event(), context)

        assert response['statusCode'] == 500
        assert json.loads(response['body'])['errorCode'] == 'STORAGE_UNAVAILABLE'

    def test_unexpected_error(self, context, monkeypatch, memory_dao):
        def broken_get(slug):
            raise RuntimeError('boom')

        monkeypatch.setattr(memory_dao, 'get', broken_get)

        response = app.lambda_handler(_event(), context)

        assert response['statusCode'] == 500
        assert json.loads(response['body'])['errorCode'] == 'UNKNOWN_INTERNAL_SERVER_ERROR'
