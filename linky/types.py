from typing import Any

from botocore.client import BaseClient


# Lambda proxy integration payloads and JSON documents
type LambdaEvent = dict[str, Any]
type LambdaContext = Any
type LambdaResponse = dict[str, Any]
type LambdaConfiguration = dict[str, Any]
type AppConfig = dict[str, Any]
type LinkPayload = dict[str, Any]

# boto3 clients
type SecretsManagerClient = BaseClient

# (api key, super secret)
type OperatorCredentials = tuple[str, str | None]
