import logging
from typing import Any

from linky.constants import STORAGE_UNAVAILABLE
from linky.dao.redis import LinkRedisDAO
from linky.dao.exceptions import DataStoreError
from linky.exceptions import ConfigurationError, InfrastructureError, ValidationError
from linky.lifecycle import LinkLifecycleEngine
from linky.models import Outcome
from linky.utils import load_config, get_short_url, app_prefix, now_ms
from linky.utils.helpers import bearer_token, form_field, guarantee_500_response
from linky.utils.responses import response_302, response_400, response_404, response_410, response_500, response_html
from linky.lambdas.redirect_url.templates import render_password_prompt
from linky.lambdas.redirect_url.constants import (
    MISSING_SLUG,
    INVALID_REQUEST_BODY,
    LINK_NOT_FOUND,
    LINK_EXPIRED,
    PASSWORD_REQUIRED,
    PASSWORD_INVALID,
    REDIRECT_SUCCESS,
)


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: dict, context: Any) -> dict:
    """Handle incoming API Gateway requests to redirect short links

    This Lambda handler follows this procedure to redirect links:
    - Step 1: Extract slug from request path
    - Step 2: Extract password (form field or bearer token), if any
    - Step 3: Resolve the link against the store
    - Step 4: Translate the resolution into an HTTP response

    HTTP responses:
        302: Successful redirect
            headers:
                Location: target URL destination
        200: Password protected link, no password supplied
            body: HTML password prompt
        400: Bad client request
            message: missing slug in path parameters, or a body that can't be decoded
        401: Wrong password
            body: HTML password prompt with an error notice
        404: Link does not exist
        410: Link expired (and has been deleted)
        500: Internal server error
            message: configuration or link store unavailable

    Args:
        event (dict):
            API Gateway event payload containing the slug path parameter.
        context (LambdaContext):
            AWS Lambda runtime context object (not used directly).

    Returns:
        dict:
            API Gateway-compatible response including statusCode, headers, and body.

    Example:
        >>> event = {'pathParameters': {'slug': 'Gh71TC'}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        302
        >>> response['headers']['Location']
        'https://example.com/my-page'
    """
    # 0- Get application's config
    try:
        app_config = load_config('redirect_url')
    except (ConfigurationError, InfrastructureError):
        logger.exception('Failed to load AppConfig for redirect URL function. Responding with 500.')
        return response_500()
    else:
        logger.debug('Assuming Redis as the backend database for links')
        redis_config = {f'redis_{k}': v for k, v in app_config['redis'].items()}

    # 1- Extract slug from request's path
    slug = (event.get('pathParameters') or {}).get('slug')
    if not slug:
        logger.info(
            'Missing "slug" in path. Responding with 400.',
            extra={'event': MISSING_SLUG},
        )
        return response_400(message="missing 'slug' in path", error_code=MISSING_SLUG)
    logger.debug('Client requested short URL %s.', get_short_url(slug, event))

    # 2- Extract password: HTML form submission first, then bearer token
    try:
        credential = form_field(event, 'password') or bearer_token(event)
    except ValidationError as e:
        logger.info(
            'Request body cannot be decoded. Responding with 400.',
            extra={'slug': slug, 'event': INVALID_REQUEST_BODY, 'reason': str(e)},
        )
        return response_400(message=str(e), error_code=INVALID_REQUEST_BODY)

    # 3- Resolve the link
    try:
        link_dao = LinkRedisDAO(**redis_config, prefix=app_prefix())
    except DataStoreError:
        logger.exception('Link store unavailable. Responding with 500.', extra={'event': STORAGE_UNAVAILABLE})
        return response_500(message='link store unavailable', error_code=STORAGE_UNAVAILABLE)

    resolution = LinkLifecycleEngine(link_dao).resolve(slug, now_ms(), credential)

    # 4- Respond
    match resolution.outcome:
        case Outcome.REDIRECT:
            logger.info(
                'Redirecting client to target URL. Responding with 302.',
                extra={'slug': slug, 'event': REDIRECT_SUCCESS},
            )
            return response_302(location=resolution.target_url)

        case Outcome.CHALLENGE:
            logger.info(
                'Link is password protected. Responding with password prompt.',
                extra={'slug': slug, 'event': PASSWORD_REQUIRED},
            )
            return response_html(render_password_prompt(slug))

        case Outcome.UNAUTHORIZED:
            logger.info(
                'Incorrect password for link. Responding with 401.',
                extra={'slug': slug, 'event': PASSWORD_INVALID},
            )
            return response_html(render_password_prompt(slug, incorrect=True), status_code=401)

        case Outcome.GONE:
            logger.info(
                'Link expired and was deleted. Responding with 410.',
                extra={'slug': slug, 'event': LINK_EXPIRED},
            )
            return response_410(message=f'short url {get_short_url(slug, event)} has expired', error_code=LINK_EXPIRED)

        case Outcome.NOT_FOUND:
            logger.info(
                'Link not found in database. Responding with 404.',
                extra={'slug': slug, 'event': LINK_NOT_FOUND},
            )
            return response_404(message=f"short url {get_short_url(slug, event)} doesn't exist", error_code=LINK_NOT_FOUND)

        case _:
            logger.error(
                'Link store failed while resolving link. Responding with 500.',
                extra={'slug': slug, 'event': STORAGE_UNAVAILABLE, 'reason': resolution.reason},
            )
            return response_500(message='link store unavailable', error_code=STORAGE_UNAVAILABLE)
