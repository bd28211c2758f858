"""Link domain models.

Classes:
    Public, PasswordHashed, PasswordLegacy:
        Tagged variants describing how (and whether) a link is password protected.
    LinkRecord:
        One stored link keyed by its slug.
    Outcome:
        Result space of a link lookup.
    Resolution:
        Outcome of a lookup plus the redirect target (if any).

Example:
    >>> record = LinkRecord(slug='abc123', target_url='https://example.com', created_at_utc=1760486400000)
    >>> record.password_protected
    False
    >>> record.is_expired(now=1760486400001)
    False
"""

from dataclasses import dataclass, field, replace
from enum import StrEnum


@dataclass(frozen=True)
class Public:
    """Link without a password."""


@dataclass(frozen=True)
class PasswordHashed:
    """Link protected by a password digest (bcrypt, or SHA-256 hex from older deployments)."""

    password_hash: str


@dataclass(frozen=True)
class PasswordLegacy:
    """Link protected by a plaintext password, stored before hashing was introduced."""

    password: str


type PasswordState = Public | PasswordHashed | PasswordLegacy


# fmt: off
@dataclass(frozen=True)
class LinkRecord:
    slug: str                               # Unique short identifier, also the store key
    target_url: str                         # Destination of redirects
    created_at_utc: int                     # Epoch milliseconds, immutable
    expires_at_utc: int | None = None       # Epoch milliseconds, None means never expires
    clicks: int = 0                         # Successful redirects (best effort)
    password: PasswordState = field(default_factory=Public)
# fmt: on

    @property
    def password_protected(self) -> bool:
        return not isinstance(self.password, Public)

    def is_expired(self, now: int) -> bool:
        return self.expires_at_utc is not None and self.expires_at_utc <= now

    def clicked(self) -> 'LinkRecord':
        return replace(self, clicks=self.clicks + 1)

    def with_password(self, password: PasswordState) -> 'LinkRecord':
        return replace(self, password=password)


class Outcome(StrEnum):
    NOT_FOUND = 'NOT_FOUND'
    GONE = 'GONE'
    REDIRECT = 'REDIRECT'
    CHALLENGE = 'CHALLENGE'
    UNAUTHORIZED = 'UNAUTHORIZED'
    STORAGE_ERROR = 'STORAGE_ERROR'


@dataclass(frozen=True)
class Resolution:
    outcome: Outcome
    slug: str
    target_url: str | None = None
    reason: str | None = None  # populated for STORAGE_ERROR
