"""Serialization of LinkRecord to and from the stored JSON document.

Stored layout (one value per slug key):

    {
        "url": "https://example.com",
        "clicks": 3,
        "passwordHash": "$2b$12$...",        # PasswordHashed only
        "password": "hunter2",               # PasswordLegacy only
        "metadata": {
            "createdAtUtc": 1760486400000,
            "expiresAtUtc": null,
            "passwordProtected": true
        }
    }

The earliest deployments stored `{"url", "password", "expiresAt"}` without
metadata or a click counter. Those documents are still readable.

Presentation fields written by older deployments (`formattedCreated`,
`formattedExpiration`) are ignored and never written back.

Functions:
    encode_record(record: LinkRecord) -> str
    decode_record(slug: str, raw: str | bytes | None) -> DecodeResult

Example:
    >>> result = decode_record('abc123', '{"url": "https://example.com"}')
    >>> result.ok
    True
    >>> decode_record('abc123', 'not json').error
    'value is not valid JSON'
"""

import json
from dataclasses import dataclass
from typing import Any

from linky.constants import Time
from linky.models import LinkRecord, Public, PasswordHashed, PasswordLegacy


@dataclass(frozen=True)
class DecodeResult:
    record: LinkRecord | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.record is not None


class _CorruptRecord(ValueError):
    pass


def encode_record(record: LinkRecord) -> str:
    document: dict[str, Any] = {
        'url': record.target_url,
        'clicks': record.clicks,
        'metadata': {
            'createdAtUtc': record.created_at_utc,
            'expiresAtUtc': record.expires_at_utc,
            'passwordProtected': record.password_protected,
        },
    }
    match record.password:
        case PasswordHashed(password_hash=password_hash):
            document['passwordHash'] = password_hash
        case PasswordLegacy(password=password):
            document['password'] = password
    return json.dumps(document)


def decode_record(slug: str, raw: str | bytes | None) -> DecodeResult:
    """Decode a stored value into a LinkRecord.

    Absent values and corrupt values both produce a result without a record.
    This function never raises for bad input.
    """
    if raw is None:
        return DecodeResult(error='value is absent')

    try:
        document = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return DecodeResult(error='value is not valid JSON')

    try:
        return DecodeResult(record=_to_record(slug, document))
    except _CorruptRecord as e:
        return DecodeResult(error=str(e))


def _to_record(slug: str, document: Any) -> LinkRecord:
    if not isinstance(document, dict):
        raise _CorruptRecord('value is not a JSON object')

    target_url = document.get('url')
    if not isinstance(target_url, str) or not target_url:
        raise _CorruptRecord("missing or empty 'url'")

    clicks = document.get('clicks', 0)
    if not _is_int(clicks) or clicks < 0:
        raise _CorruptRecord("'clicks' must be a non-negative integer")

    metadata = document.get('metadata')
    if metadata is None:
        # Earliest layout: expiry at top level, no creation time
        created_at_utc = 0
        expires_at_utc = document.get('expiresAt')
        protected = None
    elif isinstance(metadata, dict):
        created_at_utc = metadata.get('createdAtUtc', 0)
        expires_at_utc = metadata.get('expiresAtUtc')
        protected = metadata.get('passwordProtected')
    else:
        raise _CorruptRecord("'metadata' is not a JSON object")

    if not _is_epoch_ms(created_at_utc):
        raise _CorruptRecord("'createdAtUtc' must be epoch milliseconds")
    if expires_at_utc is not None and not _is_epoch_ms(expires_at_utc):
        raise _CorruptRecord("'expiresAtUtc' must be epoch milliseconds or null")

    return LinkRecord(
        slug=slug,
        target_url=target_url,
        created_at_utc=created_at_utc,
        expires_at_utc=expires_at_utc,
        clicks=clicks,
        password=_to_password(document, protected),
    )


def _to_password(document: dict[str, Any], protected: Any) -> Public | PasswordHashed | PasswordLegacy:
    password_hash = document.get('passwordHash')
    password = document.get('password')

    # Credential presence wins over the stored flag
    if isinstance(password_hash, str) and password_hash:
        return PasswordHashed(password_hash=password_hash)
    if isinstance(password, str) and password:
        return PasswordLegacy(password=password)
    if protected is True:
        raise _CorruptRecord('password protected record without a credential')
    return Public()


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_epoch_ms(value: Any) -> bool:
    """Integer epoch milliseconds that render as a date (year 1970 to 9999)."""
    return _is_int(value) and 0 <= value <= Time.MAX_EPOCH_MS
