import string
from enum import StrEnum
from datetime import datetime, timedelta, UTC


class Slug:
    """Slug generation and validation parameters."""

    ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits
    LENGTH = 6  # ~62^6 generated slugs, no collision check
    PATTERN = r'^[A-Za-z0-9_-]{1,64}$'  # caller-supplied slugs
    # Operator configuration stored next to links by earlier deployments
    RESERVED = frozenset({'SUPER_SECRET_KEY'})


class Password:
    """Password constraints."""

    MAX_BYTES = 72  # bcrypt input limit


class Store:
    """Link store parameters."""

    SCAN_PAGE_SIZE = 500  # SCAN COUNT hint per cursor page


class Time:
    """Epoch millisecond bounds of stored timestamps."""

    EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
    MAX_EPOCH_MS = (datetime.max.replace(tzinfo=UTC) - EPOCH) // timedelta(milliseconds=1)  # 9999-12-31T23:59:59.999Z


class Headers(StrEnum):
    AUTHORIZATION = 'authorization'
    SUPER_SECRET = 'x-super-secret'  # noqa: S105
    CONTENT_TYPE = 'content-type'


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        PROJECT_ROOT = 'PROJECT_ROOT'
        AWS_SAM_LOCAL = 'AWS_SAM_LOCAL'
        LOG_LEVEL = 'LOG_LEVEL'

    class AppConfig(StrEnum):
        APP_ID = 'APPCONFIG_APP_ID'
        ENV_ID = 'APPCONFIG_ENV_ID'
        PROFILE_ID = 'APPCONFIG_PROFILE_ID'
        AGENT_URL = 'APPCONFIG_AGENT_URL'
        PROFILE_NAME = 'APPCONFIG_PROFILE_NAME'

    class Operator(StrEnum):
        # Secrets Manager name holding credentials JSON: {"api_key": "...", "super_secret": "..."}
        SECRET = 'OPERATOR_SECRET'  # noqa: S105

    class LocalStack(StrEnum):
        ENDPOINT = 'LOCALSTACK_ENDPOINT'  # usually http://localstack:4566


# Error codes
UNKNOWN_INTERNAL_SERVER_ERROR = 'UNKNOWN_INTERNAL_SERVER_ERROR'
STORAGE_UNAVAILABLE = 'STORAGE_UNAVAILABLE'
INVALID_API_KEY = 'INVALID_API_KEY'
SUPER_SECRET_REQUIRED = 'SUPER_SECRET_REQUIRED'  # noqa: S105
