"""Shared request checks for the administrative API lambdas."""

from dataclasses import dataclass

from linky.constants import Headers
from linky.lifecycle.auth import api_key_matches, is_privileged
from linky.types import LambdaEvent, OperatorCredentials
from linky.utils.helpers import bearer_token, header


@dataclass(frozen=True)
class OperatorAccess:
    authorized: bool                # caller presented the API key
    privileged: bool                # caller presented the super secret
    privilege_configured: bool      # a super secret exists at all


def operator_access(event: LambdaEvent, credentials: OperatorCredentials) -> OperatorAccess:
    api_key, super_secret = credentials
    return OperatorAccess(
        authorized=api_key_matches(bearer_token(event), api_key),
        privileged=is_privileged(header(event, Headers.SUPER_SECRET), super_secret),
        privilege_configured=super_secret is not None,
    )
