import logging
from typing import Any

from linky.constants import INVALID_API_KEY, STORAGE_UNAVAILABLE
from linky.dao.redis import LinkRedisDAO
from linky.dao.exceptions import DataStoreError
from linky.exceptions import ConfigurationError, InfrastructureError
from linky.lifecycle import LinkLifecycleEngine, link_payload
from linky.lambdas.common import operator_access
from linky.utils import load_config, load_operator_credentials, app_prefix, now_ms
from linky.utils.helpers import guarantee_500_response
from linky.utils.responses import response_200, response_400, response_401, response_404, response_500
from linky.lambdas.view_link.constants import MISSING_SLUG, LINK_NOT_FOUND, LINK_VIEWED


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Handle incoming API Gateway requests to view a single link

    Applies the same visibility rules as listing: expired links are purged and
    reported as missing, password protected links are missing for callers
    without the super secret.

    HTTP responses:
        200: the link
        400: missing slug in path parameters
        401: missing or wrong API key
        404: link does not exist (or is not visible to the caller)
        500: configuration or link store unavailable
    """
    # 0- Get application's config
    try:
        app_config = load_config('view_link')
        credentials = load_operator_credentials()
    except (ConfigurationError, InfrastructureError):
        logger.exception('Failed to load configuration for view link function. Responding with 500.')
        return response_500()
    else:
        redis_config = {f'redis_{k}': v for k, v in app_config['redis'].items()}

    # 1- Check operator credentials
    access = operator_access(event, credentials)
    if not access.authorized:
        logger.info('Missing or invalid API key. Responding with 401.', extra={'event': INVALID_API_KEY})
        return response_401(message='missing or invalid API key', error_code=INVALID_API_KEY)

    # 2- Extract slug from request's path
    slug = (event.get('pathParameters') or {}).get('slug')
    if not slug:
        logger.info('Missing "slug" in path. Responding with 400.', extra={'event': MISSING_SLUG})
        return response_400(message="missing 'slug' in path", error_code=MISSING_SLUG)

    # 3- Look the link up
    try:
        link_dao = LinkRedisDAO(**redis_config, prefix=app_prefix())
        link = LinkLifecycleEngine(link_dao).inspect(slug, now_ms(), is_privileged=access.privileged)
    except DataStoreError:
        logger.exception('Link store unavailable. Responding with 500.', extra={'event': STORAGE_UNAVAILABLE})
        return response_500(message='link store unavailable', error_code=STORAGE_UNAVAILABLE)

    if link is None:
        logger.info('Link not found. Responding with 404.', extra={'slug': slug, 'event': LINK_NOT_FOUND})
        return response_404(message=f"slug '{slug}' not found", error_code=LINK_NOT_FOUND)

    logger.info('Viewed link. Responding with 200.', extra={'slug': slug, 'event': LINK_VIEWED})
    return response_200(link_payload(link, is_privileged=access.privileged))
