import json
import logging
from typing import Any

from linky.constants import INVALID_API_KEY, STORAGE_UNAVAILABLE
from linky.dao.redis import LinkRedisDAO
from linky.dao.exceptions import DataStoreError
from linky.exceptions import ConfigurationError, InfrastructureError, ValidationError
from linky.lifecycle import LinkLifecycleEngine
from linky.lambdas.common import operator_access
from linky.utils import load_config, load_operator_credentials, get_short_url, app_prefix, now_ms
from linky.utils.helpers import guarantee_500_response, request_body
from linky.utils.responses import response_200, response_400, response_401, response_500
from linky.lambdas.shorten_url.constants import INVALID_JSON_BODY, INVALID_LINK, LINK_CREATED


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Handle incoming API Gateway requests to create short links

    This Lambda handler follows this procedure to create links:
    - Step 1: Check the operator API key
    - Step 2: Extract link fields from request body
    - Step 3: Validate and store the link (via the lifecycle engine)
    - Step 4: Respond to operator with 200 success

    Request body (JSON):
        url: destination URL (required)
        slug: custom slug (optional, generated when absent)
        password: plaintext password (optional)
        expiration | expiresAt: epoch ms, ISO-8601 datetime or '<n>m|h|d|w' (optional, never expires when absent)

    HTTP responses:
        200: Link created
            slug, shortUrl, url, expiresAtUtc, passwordProtected
        400: Bad client request
            message: invalid JSON body or invalid link fields
        401: Unauthorized
            message: missing or wrong API key
        500: Internal server error
            message: configuration or link store unavailable

    Example:
        >>> event = {
        ...     'headers': {'Authorization': 'Bearer my-api-key'},
        ...     'body': '{"url": "https://example.com"}',
        ... }
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        200
        >>> json.loads(response['body'])['slug']
        'q3ZtB9'
    """
    # 0- Get application's config
    try:
        app_config = load_config('shorten_url')
        credentials = load_operator_credentials()
    except (ConfigurationError, InfrastructureError):
        logger.exception('Failed to load configuration for shorten URL function. Responding with 500.')
        return response_500()
    else:
        redis_config = {f'redis_{k}': v for k, v in app_config['redis'].items()}

    # 1- Check the operator API key
    if not operator_access(event, credentials).authorized:
        logger.info('Missing or invalid API key. Responding with 401.', extra={'event': INVALID_API_KEY})
        return response_401(message='missing or invalid API key', error_code=INVALID_API_KEY)

    # 2- Extract link fields from request body
    try:
        request = json.loads(request_body(event) or '{}')
    except (json.JSONDecodeError, ValidationError):
        request = None
    if not isinstance(request, dict):
        logger.info('Request body is not a JSON object. Responding with 400.', extra={'event': INVALID_JSON_BODY})
        return response_400(message='invalid JSON body', error_code=INVALID_JSON_BODY)

    # 3- Validate and store the link
    try:
        link_dao = LinkRedisDAO(**redis_config, prefix=app_prefix())
        link = LinkLifecycleEngine(link_dao).create(
            request.get('url'),
            now=now_ms(),
            expiration=request.get('expiration', request.get('expiresAt')),
            slug=request.get('slug'),
            password=request.get('password'),
        )
    except ValidationError as e:
        logger.info('Invalid link fields. Responding with 400.', extra={'event': INVALID_LINK, 'reason': str(e)})
        return response_400(message=str(e), error_code=INVALID_LINK)
    except DataStoreError:
        logger.exception('Link store unavailable. Responding with 500.', extra={'event': STORAGE_UNAVAILABLE})
        return response_500(message='link store unavailable', error_code=STORAGE_UNAVAILABLE)

    # 4- Return successful response to operator
    short_url = get_short_url(link.slug, event)
    logger.info('Created short link. Responding with 200.', extra={'slug': link.slug, 'event': LINK_CREATED})
    return response_200(
        {
            'message': f'Successfully shortened {link.target_url} to {short_url}',
            'slug': link.slug,
            'shortUrl': short_url,
            'url': link.target_url,
            'expiresAtUtc': link.expires_at_utc,
            'passwordProtected': link.password_protected,
        }
    )
