"""API Gateway (Lambda proxy) response builders."""

import json
from typing import Any

from linky.types import LambdaResponse


JSON_HEADERS = {'Content-Type': 'application/json'}
HTML_HEADERS = {'Content-Type': 'text/html; charset=utf-8'}


def response_200(body: Any) -> LambdaResponse:
    return {
        'statusCode': 200,
        'headers': dict(JSON_HEADERS),
        'body': json.dumps(body),
    }


def response_html(html: str, status_code: int = 200) -> LambdaResponse:
    return {
        'statusCode': status_code,
        'headers': dict(HTML_HEADERS),
        'body': html,
    }


def response_302(*, location: str) -> LambdaResponse:
    return {
        'statusCode': 302,
        'headers': {'Location': location},
        'body': json.dumps({}),  # no body needed for redirects
    }


def _error(status_code: int, base: str, message: str | None, error_code: str | None) -> LambdaResponse:
    body = {'message': base if not message else f'{base} ({message})'}
    if error_code:
        body['errorCode'] = error_code
    return {
        'statusCode': status_code,
        'headers': dict(JSON_HEADERS),
        'body': json.dumps(body),
    }


def response_400(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    return _error(400, 'Bad Request', message, error_code)


def response_401(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    return _error(401, 'Unauthorized', message, error_code)


def response_403(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    return _error(403, 'Forbidden', message, error_code)


def response_404(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    return _error(404, 'Not Found', message, error_code)


def response_410(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    return _error(410, 'Gone', message, error_code)


def response_500(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    return _error(500, 'Internal Server Error', message, error_code)
