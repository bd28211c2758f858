import json
import logging
from typing import Any

from linky.constants import INVALID_API_KEY, STORAGE_UNAVAILABLE, SUPER_SECRET_REQUIRED
from linky.dao.redis import LinkRedisDAO
from linky.dao.exceptions import DataStoreError
from linky.exceptions import ConfigurationError, InfrastructureError, PrivilegeRequiredError, ValidationError
from linky.lifecycle import LinkLifecycleEngine
from linky.lambdas.common import operator_access
from linky.utils import load_config, load_operator_credentials, app_prefix
from linky.utils.helpers import guarantee_500_response, request_body
from linky.utils.responses import response_200, response_400, response_401, response_403, response_500
from linky.lambdas.delete_link.constants import MISSING_SLUG, INVALID_JSON_BODY, LINK_DELETED


logger = logging.getLogger(__name__)


def _slug_from_request(event: dict[str, Any]) -> str | None:
    """Slug from `DELETE /api/links/{slug}`, or from the `POST /api/delete` JSON body."""
    slug = (event.get('pathParameters') or {}).get('slug')
    if slug:
        return slug
    request = json.loads(request_body(event) or '{}')
    return request.get('slug') if isinstance(request, dict) else None


@guarantee_500_response
def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Handle incoming API Gateway requests to delete a link

    Deletion is idempotent: deleting a slug that does not exist succeeds.
    When a super secret is configured, it must be presented in `X-Super-Secret`.

    HTTP responses:
        200: link deleted (or already absent)
            slug, deleted (false when nothing was stored)
        400: missing slug / invalid JSON body
        401: missing or wrong API key
        403: super secret required
        500: configuration or link store unavailable
    """
    # 0- Get application's config
    try:
        app_config = load_config('delete_link')
        credentials = load_operator_credentials()
    except (ConfigurationError, InfrastructureError):
        logger.exception('Failed to load configuration for delete link function. Responding with 500.')
        return response_500()
    else:
        redis_config = {f'redis_{k}': v for k, v in app_config['redis'].items()}

    # 1- Check operator credentials
    access = operator_access(event, credentials)
    if not access.authorized:
        logger.info('Missing or invalid API key. Responding with 401.', extra={'event': INVALID_API_KEY})
        return response_401(message='missing or invalid API key', error_code=INVALID_API_KEY)

    # 2- Extract slug
    try:
        slug = _slug_from_request(event)
    except (json.JSONDecodeError, ValidationError):
        logger.info('Request body is not valid JSON. Responding with 400.', extra={'event': INVALID_JSON_BODY})
        return response_400(message='invalid JSON body', error_code=INVALID_JSON_BODY)
    if not slug or not isinstance(slug, str):
        logger.info('Missing "slug" in request. Responding with 400.', extra={'event': MISSING_SLUG})
        return response_400(message="missing 'slug'", error_code=MISSING_SLUG)

    # 3- Delete the link
    try:
        link_dao = LinkRedisDAO(**redis_config, prefix=app_prefix())
        deleted = LinkLifecycleEngine(link_dao).remove(
            slug,
            is_privileged=access.privileged,
            privilege_configured=access.privilege_configured,
        )
    except PrivilegeRequiredError:
        logger.info('Super secret required to delete links. Responding with 403.', extra={'event': SUPER_SECRET_REQUIRED})
        return response_403(message='super secret required', error_code=SUPER_SECRET_REQUIRED)
    except DataStoreError:
        logger.exception('Link store unavailable. Responding with 500.', extra={'event': STORAGE_UNAVAILABLE})
        return response_500(message='link store unavailable', error_code=STORAGE_UNAVAILABLE)

    logger.info('Deleted link. Responding with 200.', extra={'slug': slug, 'event': LINK_DELETED, 'deleted': deleted})
    return response_200({'message': f'Deleted slug: {slug}', 'slug': slug, 'deleted': deleted})
