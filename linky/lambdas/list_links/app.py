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
from linky.utils.responses import response_200, response_401, response_500
from linky.lambdas.list_links.constants import LINKS_LISTED


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Handle incoming API Gateway requests to list all links

    - Step 1: Check the operator API key (and super secret, if presented)
    - Step 2: List live links, purging expired ones on the way
    - Step 3: Respond with the visible links

    Password protected links are only listed for callers presenting the
    super secret in `X-Super-Secret`. Everyone else does not see them at all.

    HTTP responses:
        200: JSON array of links (newest first)
        401: Unauthorized
            message: missing or wrong API key
        500: Internal server error
            message: configuration or link store unavailable
    """
    # 0- Get application's config
    try:
        app_config = load_config('list_links')
        credentials = load_operator_credentials()
    except (ConfigurationError, InfrastructureError):
        logger.exception('Failed to load configuration for list links function. Responding with 500.')
        return response_500()
    else:
        redis_config = {f'redis_{k}': v for k, v in app_config['redis'].items()}

    # 1- Check operator credentials
    access = operator_access(event, credentials)
    if not access.authorized:
        logger.info('Missing or invalid API key. Responding with 401.', extra={'event': INVALID_API_KEY})
        return response_401(message='missing or invalid API key', error_code=INVALID_API_KEY)

    # 2- List live links
    try:
        link_dao = LinkRedisDAO(**redis_config, prefix=app_prefix())
        links = LinkLifecycleEngine(link_dao).list_links(now_ms(), is_privileged=access.privileged)
    except DataStoreError:
        logger.exception('Link store unavailable. Responding with 500.', extra={'event': STORAGE_UNAVAILABLE})
        return response_500(message='link store unavailable', error_code=STORAGE_UNAVAILABLE)

    # 3- Respond
    logger.info(
        'Listed links. Responding with 200.',
        extra={'event': LINKS_LISTED, 'count': len(links), 'privileged': access.privileged},
    )
    return response_200([link_payload(link, is_privileged=access.privileged) for link in links])
