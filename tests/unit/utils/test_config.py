"""Unit tests for configuration utilities in config.py

Test coverage includes:

1. Environment variable resolution
   - Ensures app_env(), app_name(), app_prefix() correctly read environment variables.

2. Project root resolution

3. Configuration loading behavior
   - Ensures load_config() returns this lambda's section of the AppConfig document.
   - Ensures AppConfig client errors propagate.
   - Ensures missing sections and invalid JSON raise InfrastructureError subclasses.

4. Operator credentials
   - Ensures load_operator_credentials() parses the Secrets Manager payload.
   - Ensures missing or malformed secrets raise descriptive errors.
"""

import os
import json
from io import BytesIO
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import botocore

from linky.utils import config
from linky.exceptions import (
    AppConfigError,
    BadConfigurationError,
    MalformedResponseError,
    MissingEnvironmentVariableError,
)


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture(autouse=True)
def _env(monkeypatch):
    """Set up environment variables for testing."""
    monkeypatch.setenv('APP_ENV', 'test')
    monkeypatch.setenv('APPCONFIG_APP_ID', 'app123')
    monkeypatch.setenv('APPCONFIG_ENV_ID', 'env123')
    monkeypatch.setenv('APPCONFIG_PROFILE_ID', 'prof123')
    monkeypatch.setenv('OPERATOR_SECRET', 'linky/test/operator')
    monkeypatch.delenv('AWS_SAM_LOCAL', raising=False)
    monkeypatch.delenv('APPCONFIG_AGENT_URL', raising=False)


@pytest.fixture
def appconfig_payload():
    """Provide a default AppConfig payload used by multiple tests."""
    # fmt: off
    return {
        'build': 42,
        'active_backend': 'redis',
        'configs': {
            'test_lambda': {
                'redis': {
                    'host': 'monkey',
                    'port': 659595,
                    'db': 3
                }
            }
        },
    }
    # fmt: on


@pytest.fixture
def mock_appconfig(monkeypatch, appconfig_payload):
    """Mock AppConfig Data client returning `appconfig_payload`."""
    client = MagicMock()
    client.start_configuration_session.return_value = {'InitialConfigurationToken': 'monkey_token'}
    client.get_latest_configuration.return_value = {
        'Configuration': BytesIO(json.dumps(appconfig_payload).encode('utf-8')),
    }
    monkeypatch.setattr(config.boto3, 'client', lambda service, **kwargs: client)
    return client


def _secrets_client(secret_string: str | None) -> MagicMock:
    client = MagicMock()
    client.get_secret_value.return_value = {'SecretString': secret_string}
    return client


# -------------------------------
# 1. Environment variable resolution
# -------------------------------


def test_app_env(monkeypatch):
    monkeypatch.setitem(os.environ, 'APP_ENV', 'TEST')
    assert config.app_env() == 'test'


def test_app_env_defaults_to_local(monkeypatch):
    monkeypatch.delitem(os.environ, 'APP_ENV', raising=False)
    assert config.app_env() == 'local'


def test_app_name(monkeypatch):
    monkeypatch.setitem(os.environ, 'APP_NAME', 'linky')
    assert config.app_name() == 'linky'


def test_app_prefix(monkeypatch):
    monkeypatch.setitem(os.environ, 'APP_NAME', 'linky')
    assert config.app_prefix() == 'linky:test'


def test_app_prefix_without_app_name(monkeypatch):
    monkeypatch.delitem(os.environ, 'APP_NAME', raising=False)
    assert config.app_prefix() is None


# -------------------------------
# 2. Project root resolution
# -------------------------------


def test_project_root(monkeypatch):
    monkeypatch.setitem(os.environ, 'PROJECT_ROOT', '/monkey/path')
    assert config.project_root() == Path('/monkey/path')


# -------------------------------
# 3. Configuration loading behavior
# -------------------------------


def test_load_config(mock_appconfig):
    result = config.load_config('test_lambda')

    assert result == {'redis': {'host': 'monkey', 'port': 659595, 'db': 3}}
    mock_appconfig.start_configuration_session.assert_called_once_with(
        ApplicationIdentifier='app123',
        EnvironmentIdentifier='env123',
        ConfigurationProfileIdentifier='prof123',
    )
    mock_appconfig.get_latest_configuration.assert_called_once_with(ConfigurationToken='monkey_token')


def test_load_config_without_lambda_section(mock_appconfig):
    with pytest.raises(AppConfigError, match="no 'unknown_lambda' section"):
        config.load_config('unknown_lambda')


def test_load_config_with_invalid_json(mock_appconfig):
    mock_appconfig.get_latest_configuration.return_value = {'Configuration': BytesIO(b'{not json')}

    with pytest.raises(MalformedResponseError):
        config.load_config('test_lambda')


def test_load_config_propagates_client_error(mock_appconfig):
    mock_appconfig.start_configuration_session.side_effect = botocore.exceptions.ClientError(
        {'Error': {'Code': 'ResourceNotFoundException'}}, 'StartConfigurationSession'
    )

    with pytest.raises(botocore.exceptions.ClientError):
        config.load_config('test_lambda')


def test_load_config_without_appconfig_ids(monkeypatch, mock_appconfig):
    monkeypatch.delenv('APPCONFIG_PROFILE_ID')

    with pytest.raises(MissingEnvironmentVariableError, match='APPCONFIG_PROFILE_ID'):
        config.load_config('test_lambda')

    mock_appconfig.start_configuration_session.assert_not_called()


# -------------------------------
# 4. Operator credentials
# -------------------------------


def test_load_operator_credentials():
    client = _secrets_client(json.dumps({'api_key': 'my-api-key', 'super_secret': 'shh'}))

    assert config.load_operator_credentials(client) == ('my-api-key', 'shh')
    client.get_secret_value.assert_called_once_with(SecretId='linky/test/operator')


@pytest.mark.parametrize('payload', [{'api_key': 'my-api-key'}, {'api_key': 'my-api-key', 'super_secret': ''}])
def test_load_operator_credentials_without_super_secret(payload):
    client = _secrets_client(json.dumps(payload))

    assert config.load_operator_credentials(client) == ('my-api-key', None)


def test_load_operator_credentials_creates_client(monkeypatch):
    client = _secrets_client(json.dumps({'api_key': 'my-api-key'}))
    boto3_client = MagicMock(return_value=client)
    monkeypatch.setattr(config.boto3, 'client', boto3_client)

    config.load_operator_credentials()

    boto3_client.assert_called_once_with('secretsmanager')


def test_load_operator_credentials_uses_localstack_locally(monkeypatch):
    monkeypatch.setenv('APP_ENV', 'local')
    monkeypatch.setenv('LOCALSTACK_ENDPOINT', 'http://localstack:4566')
    boto3_client = MagicMock(return_value=_secrets_client(json.dumps({'api_key': 'my-api-key'})))
    monkeypatch.setattr(config.boto3, 'client', boto3_client)

    config.load_operator_credentials()

    boto3_client.assert_called_once_with('secretsmanager', endpoint_url='http://localstack:4566')


@pytest.mark.parametrize('secret_string', ['{not json', '["my-api-key"]'])
def test_load_operator_credentials_with_malformed_secret(secret_string):
    with pytest.raises(MalformedResponseError):
        config.load_operator_credentials(_secrets_client(secret_string))


@pytest.mark.parametrize('secret_string', [None, '{}', '{"api_key": ""}', '{"super_secret": "shh"}'])
def test_load_operator_credentials_without_api_key(secret_string):
    with pytest.raises(BadConfigurationError, match='api_key'):
        config.load_operator_credentials(_secrets_client(secret_string))


def test_load_operator_credentials_without_secret_name(monkeypatch):
    monkeypatch.delenv('OPERATOR_SECRET')

    with pytest.raises(MissingEnvironmentVariableError):
        config.load_operator_credentials(_secrets_client('{}'))
