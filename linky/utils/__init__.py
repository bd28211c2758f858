from linky.utils.config import app_env, app_name, project_root, app_prefix, load_config, load_operator_credentials
from linky.utils.helpers import base_url, get_short_url, now_ms, format_epoch_ms, parse_expiration, require_environment
from linky.utils.shortener import generate_slug
from linky.utils.logging import initialize_logging


__all__ = [
    'generate_slug',
    'app_env',
    'app_name',
    'app_prefix',
    'project_root',
    'load_config',
    'load_operator_credentials',
    'base_url',
    'get_short_url',
    'now_ms',
    'format_epoch_ms',
    'parse_expiration',
    'require_environment',
    'initialize_logging',
]
