"""Helper utilities for AWS lambda functions.

Functions:
    base_url(event) -> str
        Extract correct public base URL from API Gateway event
    get_short_url(slug, event) -> str
        Get string representation of short URL for a given slug
    now_ms() -> int
        Current time as epoch milliseconds (UTC)
    format_epoch_ms(value) -> str | None
        Render epoch milliseconds as an ISO-8601 UTC string
    parse_expiration(value, now) -> int | None
        Normalize a user-supplied expiration into epoch milliseconds
    header(event, name) -> str | None
        Case-insensitive request header lookup
    bearer_token(event) -> str | None
        Extract the token of an `Authorization: Bearer <token>` header
    request_body(event) -> str
        Return the raw request body, decoding base64 payloads
    form_field(event, name) -> str | None
        Read a field from an application/x-www-form-urlencoded body
    require_environment(*names: str) -> Callable
        Decorator: Ensure required environment variables are present
    guarantee_500_response(handler) -> Callable
        Decorator: turn unexpected handler errors into a 500 response

Example:
    Typical usage inside a Lambda handler:

        >>> from linky.utils.helpers import base_url
        >>> event = {
        ...     "requestContext": {
        ...         "domainName": "abc123.execute-api.us-east-1.amazonaws.com",
        ...         "stage": "Prod"
        ...     }
        ... }
        >>> base_url(event)
        'https://abc123.execute-api.us-east-1.amazonaws.com/Prod'

        >>> base_url({})
        'http://localhost:3000'
"""

import os
import re
import base64
import binascii
import logging
import functools
from datetime import datetime, timedelta, UTC
from typing import Any
from collections.abc import Callable
from urllib.parse import parse_qs

from linky.constants import UNKNOWN_INTERNAL_SERVER_ERROR, Headers, Time
from linky.exceptions import MissingEnvironmentVariableError, ValidationError
from linky.types import LambdaEvent
from linky.utils.responses import response_500


logger = logging.getLogger(__name__)

_EPOCH_MS = re.compile(r'\d+', re.ASCII)
_DURATION = re.compile(r'(\d+)\s*([mhdw])', re.ASCII)
_UNIT_MS = {
    'm': 60_000,
    'h': 3_600_000,
    'd': 86_400_000,
    'w': 604_800_000,
}


def base_url(event: dict[str, Any]) -> str:
    """Extract public base URL from API Gateway event

    Works seamlessly with both custom and default AWS API Gateway domains.
    If a custom domain is configured, the stage name is omitted.
    If using the default AWS execute-api domain, the stage name is included.

    Args:
        event (dict): API Gateway event object passed to Lambda handler

    Returns:
        str: Base URL, e.g.:
             - "https://lnk.example.com"
             - "https://abc123.execute-api.us-east-1.amazonaws.com/Prod"
    """
    request_context = event.get('requestContext', {})
    domain = request_context.get('domainName', '')
    stage = request_context.get('stage', '')

    if domain and 'execute-api' not in domain:
        # If the domain is a custom domain (no execute-api), skip stage
        return f'https://{domain}'
    elif domain:
        # Otherwise include the stage (for AWS default domains)
        return f'https://{domain}/{stage}'
    else:
        # Fallback: local invocation (SAM CLI, tests, etc.)
        return 'http://localhost:3000'


def get_short_url(slug: str, event: dict[str, Any]) -> str:
    return f'{base_url(event).rstrip("/")}/{slug}'


def now_ms() -> int:
    return int(datetime.now(UTC).timestamp() * 1000)


def format_epoch_ms(value: int | None) -> str | None:
    """Render epoch milliseconds as ISO-8601 UTC, e.g. '2025-10-15T00:00:00.000Z'."""
    if value is None:
        return None
    # fmt: off
    return (Time.EPOCH + timedelta(milliseconds=value)) \
               .isoformat(timespec='milliseconds') \
               .replace('+00:00', 'Z')
    # fmt: on


def _representable(value: Any, moment: int) -> int:
    if not 0 <= moment <= Time.MAX_EPOCH_MS:
        raise ValidationError(f'Invalid expiration {value!r}: must fall between 1970-01-01 and 9999-12-31 (UTC)')
    return moment


def parse_expiration(value: Any, now: int) -> int | None:
    """Normalize a user-supplied expiration into epoch milliseconds

    Accepted forms:
        - None or empty string: never expires
        - int: absolute epoch milliseconds
        - ASCII digit string: absolute epoch milliseconds
        - '<n>m' | '<n>h' | '<n>d' | '<n>w': relative to `now`
        - ISO-8601 date or datetime; naive values are taken as UTC

    Whatever the form, the result must land between the epoch and the end of
    year 9999 (UTC) so it can always be rendered back as a date.

    Args:
        value (Any): raw expiration input from the request body
        now (int): current time in epoch milliseconds

    Returns:
        int | None: expiration in epoch milliseconds, None for never.

    Raises:
        ValidationError: if the value is not a valid point in time.

    Example:
        >>> parse_expiration('2d', now=0)
        172800000
        >>> parse_expiration('2025-10-15T00:00:00Z', now=0)
        1760486400000
    """
    if value is None or value == '':
        return None

    if isinstance(value, bool):
        raise ValidationError(f'Invalid expiration {value!r}')

    if isinstance(value, int):
        return _representable(value, value)

    if not isinstance(value, str):
        raise ValidationError(f'Invalid expiration {value!r}')

    text = value.strip()
    try:
        if _EPOCH_MS.fullmatch(text):
            return _representable(value, int(text))

        if match := _DURATION.fullmatch(text):
            amount, unit = match.groups()
            return _representable(value, now + int(amount) * _UNIT_MS[unit])

        moment = datetime.fromisoformat(text)
    except ValueError as e:
        # int() also refuses digit strings longer than sys.get_int_max_str_digits()
        raise ValidationError(f'Invalid expiration {value!r}') from e

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return _representable(value, (moment - Time.EPOCH) // timedelta(milliseconds=1))


def header(event: LambdaEvent, name: str) -> str | None:
    headers = event.get('headers') or {}
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def bearer_token(event: LambdaEvent) -> str | None:
    value = header(event, Headers.AUTHORIZATION)
    if not value:
        return None
    scheme, _, token = value.partition(' ')
    if scheme.lower() != 'bearer' or not token:
        return None
    return token


def request_body(event: LambdaEvent) -> str:
    """Raw request body, base64-decoded when API Gateway flags it.

    Raises:
        ValidationError: if a base64 body does not decode to UTF-8 text.
    """
    body = event.get('body') or ''
    if event.get('isBase64Encoded'):
        try:
            body = base64.b64decode(body).decode('utf-8')
        except (binascii.Error, UnicodeDecodeError) as e:
            raise ValidationError('request body is not valid base64-encoded UTF-8') from e
    return body


def form_field(event: LambdaEvent, name: str) -> str | None:
    content_type = header(event, Headers.CONTENT_TYPE) or ''
    if 'application/x-www-form-urlencoded' not in content_type.lower():
        return None
    values = parse_qs(request_body(event)).get(name)
    return values[0] if values else None


def require_environment(*names: str) -> Callable:
    """Decorator ensuring required environment variables are present.

    Args:
        *names (str):
            Names of required environment variables.

    Raises:
        MissingEnvironmentVariableError:
            If any required environment variable is missing or empty.

    Example:
        >>> @require_environment('OPERATOR_SECRET')
        ... def my_function():
        ...     pass
        >>> my_function()
        MissingEnvironmentVariableError: Missing required environment variables: 'OPERATOR_SECRET'
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            missing = [name for name in names if not os.environ.get(name)]
            if missing:
                missing_list = ', '.join(f"'{name}'" for name in missing)
                raise MissingEnvironmentVariableError(f'Missing required environment variables: {missing_list}')
            return func(*args, **kwargs)

        return wrapper

    return decorator


def guarantee_500_response(handler: Callable) -> Callable:
    """Decorator: respond with 500 instead of crashing the Lambda on unexpected errors."""

    @functools.wraps(handler)
    def wrapper(event: LambdaEvent, context: Any) -> dict:
        try:
            return handler(event, context)
        except Exception:
            logger.exception(
                'Unhandled error in lambda handler. Responding with 500.',
                extra={'event': UNKNOWN_INTERNAL_SERVER_ERROR},
            )
            return response_500(error_code=UNKNOWN_INTERNAL_SERVER_ERROR)

    return wrapper
