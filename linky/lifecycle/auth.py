"""Operator credential checks.

Both checks compare in constant time. Secrets are passed in by the caller,
never looked up here.
"""

import hmac


def _matches(supplied: str | None, expected: str | None) -> bool:
    if not supplied or not expected:
        return False
    return hmac.compare_digest(supplied.encode('utf-8'), expected.encode('utf-8'))


def api_key_matches(supplied: str | None, api_key: str | None) -> bool:
    return _matches(supplied, api_key)


def is_privileged(supplied: str | None, super_secret: str | None) -> bool:
    """True when the caller presented the configured super secret.

    No caller is privileged when no super secret is configured.
    """
    return _matches(supplied, super_secret)
