"""Application configuration for the link lambdas.

Two sources are read:

1. AWS AppConfig holds the non-secret runtime settings. One JSON document per
   environment (`APP_ENV`) is deployed under the AppConfig application named by
   `APP_NAME`. Every lambda reads its own section for the active backend:

    {
        "build": 7,
        "active_backend": "redis",
        "configs": {
            "redirect_url": {"redis": {"host": "...", "port": 6379, "db": 0}},
            "shorten_url":  {"redis": {...}},
            "list_links":   {"redis": {...}},
            "view_link":    {"redis": {...}},
            "delete_link":  {"redis": {...}}
        }
    }

   `load_config('redirect_url')` returns `{"redis": {...}}`.

2. AWS Secrets Manager holds the operator credentials, in the secret named by
   `OPERATOR_SECRET`. They never share the link key space:

    {"api_key": "...", "super_secret": "..."}

   `super_secret` is optional. Without it no caller is privileged.

Under SAM local the AppConfig document is read from a local AppConfig Agent
(`APPCONFIG_AGENT_URL`) and Secrets Manager is reached through LocalStack.
"""

import os
import json
import functools
import urllib.parse
import urllib.request
import logging
from pathlib import Path
from collections.abc import Callable

import boto3

from linky.types import AppConfig, LambdaConfiguration, OperatorCredentials, SecretsManagerClient
from linky.constants import ENV
from linky.utils.helpers import require_environment
from linky.utils.runtime import running_locally
from linky.exceptions import AppConfigError, BadConfigurationError, MalformedResponseError


logger = logging.getLogger(__name__)

_AGENT_HOSTS = frozenset({'localhost', '127.0.0.1', 'host.docker.internal', 'appconfig-agent'})
_AGENT_PORTS = frozenset({2772, None})


def app_env() -> str:
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    return os.environ.get(ENV.App.APP_NAME)


def project_root() -> Path:
    return Path(os.environ.get(ENV.App.PROJECT_ROOT, os.path.dirname(__file__)))


def app_prefix() -> str | None:
    """Redis key namespace, '<app>:<env>'. None when APP_NAME is unset."""
    return None if app_name() is None else f'{app_name()}:{app_env()}'


def _parse_document(content: bytes | str) -> AppConfig:
    try:
        document = json.loads(content)
    except json.JSONDecodeError as e:
        raise MalformedResponseError('AppConfig returned invalid JSON') from e
    if not isinstance(document, dict):
        raise MalformedResponseError('AppConfig document must be a JSON object')
    return document


def _lambda_section(document: AppConfig, lambda_name: str) -> LambdaConfiguration:
    try:
        backend = document['active_backend']
        return {backend: document['configs'][lambda_name][backend]}
    except (KeyError, TypeError) as e:
        raise AppConfigError(f"AppConfig document has no '{lambda_name}' section for the active backend") from e


def _local_agent_url() -> str | None:
    """APPCONFIG_AGENT_URL, refusing anything but a local agent."""
    url = os.getenv(ENV.AppConfig.AGENT_URL)
    if not url:
        return None

    components = urllib.parse.urlparse(url)
    if components.scheme not in {'http', 'https'}:
        raise BadConfigurationError(f'Bad scheme {url}')
    if components.hostname not in _AGENT_HOSTS:
        raise BadConfigurationError(f'Bad host {url}')
    if components.port not in _AGENT_PORTS:
        raise BadConfigurationError(f'Bad port {url}')
    return url.rstrip('/')


def _sam_load_local_appconfig(func: Callable) -> Callable:  # pragma: no cover
    """Decorator: under SAM local with an agent configured, read AppConfig from the agent."""

    @functools.wraps(func)
    def wrapper(lambda_name: str) -> LambdaConfiguration:
        agent_url = _local_agent_url()
        if not running_locally() or agent_url is None:
            return func(lambda_name)

        profile_name = os.getenv(ENV.AppConfig.PROFILE_NAME, 'backend-config')
        url = f'{agent_url}/applications/{app_name()}/environments/{app_env()}/configurations/{profile_name}'
        logger.debug('Loading AppConfig from local agent.', extra={'agentUrl': url, 'lambdaName': lambda_name})

        with urllib.request.urlopen(url, timeout=5) as r:  # noqa: S310
            document = _parse_document(r.read())
        return _lambda_section(document, lambda_name)

    return wrapper


@_sam_load_local_appconfig
@require_environment(ENV.AppConfig.APP_ID, ENV.AppConfig.ENV_ID, ENV.AppConfig.PROFILE_ID)
def load_config(lambda_name: str) -> LambdaConfiguration:
    """Load the AppConfig section of one lambda (e.g. 'shorten_url').

    Raises:
        MissingEnvironmentVariableError: if the APPCONFIG_* identifiers are not set.
        MalformedResponseError: if the document is not a JSON object.
        AppConfigError: if the document lacks this lambda's section.
        botocore.exceptions.ClientError: if AppConfig rejects the request.
    """
    appconfig = boto3.client('appconfigdata')
    session = appconfig.start_configuration_session(
        ApplicationIdentifier=os.environ[ENV.AppConfig.APP_ID],
        EnvironmentIdentifier=os.environ[ENV.AppConfig.ENV_ID],
        ConfigurationProfileIdentifier=os.environ[ENV.AppConfig.PROFILE_ID],
    )
    response = appconfig.get_latest_configuration(ConfigurationToken=session['InitialConfigurationToken'])
    document = _parse_document(response['Configuration'].read())

    logger.debug('Loaded AppConfig.', extra={'lambdaName': lambda_name, 'build': document.get('build')})
    return _lambda_section(document, lambda_name)


@require_environment(ENV.Operator.SECRET)
def load_operator_credentials(secrets_client: SecretsManagerClient | None = None) -> OperatorCredentials:
    """Resolve the operator API key and optional super secret.

    Args:
        secrets_client (BaseClient | None):
            Pre-initialized Secrets Manager client. If None, a new client is created
            (pointing at LocalStack when running locally).

    Returns:
        tuple[str, str | None]: (api_key, super_secret)

    Raises:
        MissingEnvironmentVariableError: if `OPERATOR_SECRET` is not set.
        MalformedResponseError: if the secret payload is not a JSON object.
        BadConfigurationError: if the secret has no non-empty "api_key".
    """
    if secrets_client is None:
        # fmt: off
        client_kwargs = {
            'endpoint_url': os.environ.get(ENV.LocalStack.ENDPOINT, 'http://localhost:4566'),
        } if running_locally() else {}
        # fmt: on
        secrets_client = boto3.client('secretsmanager', **client_kwargs)

    secret = secrets_client.get_secret_value(SecretId=os.environ[ENV.Operator.SECRET])
    try:
        payload = json.loads(secret.get('SecretString') or '{}')
    except json.JSONDecodeError as e:
        raise MalformedResponseError('Invalid JSON in operator secret payload') from e
    if not isinstance(payload, dict):
        raise MalformedResponseError('Operator secret payload must be a JSON object')

    api_key = payload.get('api_key')
    if not api_key:
        raise BadConfigurationError('Operator secret must contain a non-empty "api_key" field')
    return api_key, payload.get('super_secret') or None
