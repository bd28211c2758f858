"""Link lifecycle decisions.

The engine owns every rule about how a stored link moves between its states:

    ABSENT        no record, or the stored value is malformed      -> NOT_FOUND
    EXPIRED       expires_at_utc <= now                            -> delete, GONE
    ALIVE_OPEN    not expired, no password                         -> click, REDIRECT
    ALIVE_LOCKED  not expired, password protected
                    no credential                                  -> CHALLENGE
                    wrong credential                               -> UNAUTHORIZED
                    correct credential                             -> click (+ rehash), REDIRECT

Expired records are purged lazily: whenever a lookup, listing or inspection
observes one, it is deleted on the spot. There is no background sweep.

The engine holds no state of its own besides the DAO. Every call reads the
store, decides, and writes at most one mutation back. Concurrent calls on the
same slug may race (see LinkBaseDAO): click counts may under-count, purges
and password upgrades may be applied twice. Both are harmless. The write-back
of a click or upgrade never recreates a link deleted since it was read.

Example:
    >>> engine = LinkLifecycleEngine(dao)
    >>> link = engine.create('https://example.com', now=1760486400000)
    >>> engine.resolve(link.slug, now=1760486400001).outcome
    <Outcome.REDIRECT: 'REDIRECT'>
"""

import re
import logging
from typing import Any
from urllib.parse import urlparse

from linky.constants import Slug
from linky.dao.base import LinkBaseDAO
from linky.dao.exceptions import DataStoreError
from linky.exceptions import PrivilegeRequiredError, ValidationError
from linky.lifecycle.passwords import can_hash, hash_password, needs_upgrade, verify_password
from linky.models import LinkRecord, Outcome, PasswordHashed, PasswordLegacy, Public, Resolution
from linky.types import LinkPayload
from linky.utils.helpers import format_epoch_ms, parse_expiration
from linky.utils.shortener import generate_slug


logger = logging.getLogger(__name__)

_SLUG = re.compile(Slug.PATTERN)


class LinkLifecycleEngine:
    """Resolve, create, list, inspect and remove links against a LinkBaseDAO.

    Methods:
        resolve(slug, now, credential=None, is_privileged=False) -> Resolution
        create(target_url, now, expiration=None, slug=None, password=None) -> LinkRecord
        list_links(now, is_privileged=False) -> list[LinkRecord]
        inspect(slug, now, is_privileged=False) -> LinkRecord | None
        remove(slug, is_privileged=False, privilege_configured=False) -> bool
    """

    def __init__(self, dao: LinkBaseDAO):
        self.dao = dao

    def resolve(self, slug: str, now: int, credential: str | None = None, is_privileged: bool = False) -> Resolution:
        """Decide what a visitor of `slug` gets.

        Privilege does not unlock password protected links: `is_privileged`
        is accepted so all lookups share one signature, and is not consulted.

        An empty credential counts as no credential.

        Returns:
            Resolution: one of NOT_FOUND, GONE, REDIRECT, CHALLENGE,
            UNAUTHORIZED, or STORAGE_ERROR when the store failed.
        """
        try:
            return self._resolve(slug, now, credential or None)
        except DataStoreError as e:
            logger.error('Link store failed while resolving link.', extra={'slug': slug, 'reason': str(e)})
            return Resolution(Outcome.STORAGE_ERROR, slug, reason=str(e))

    def _resolve(self, slug: str, now: int, credential: str | None) -> Resolution:
        record = self.dao.get(slug)
        if record is None:
            return Resolution(Outcome.NOT_FOUND, slug)

        if record.is_expired(now):
            self._purge(record)
            return Resolution(Outcome.GONE, slug)

        if not record.password_protected:
            self.dao.put(record.clicked(), only_if_exists=True)
            return Resolution(Outcome.REDIRECT, slug, target_url=record.target_url)

        if credential is None:
            return Resolution(Outcome.CHALLENGE, slug)

        if not verify_password(record.password, credential):
            return Resolution(Outcome.UNAUTHORIZED, slug)

        updated = record.clicked()
        if needs_upgrade(record.password) and can_hash(credential):
            logger.info('Upgrading stored password to bcrypt.', extra={'slug': slug})
            updated = updated.with_password(hash_password(credential))
        self.dao.put(updated, only_if_exists=True)
        return Resolution(Outcome.REDIRECT, slug, target_url=record.target_url)

    def create(
        self,
        target_url: Any,
        now: int,
        expiration: Any = None,
        slug: Any = None,
        password: Any = None,
    ) -> LinkRecord:
        """Validate input and store a new link.

        Every field is validated before the store is touched, so a rejected
        request never leaves a partial write behind. Creating a link under an
        existing slug overwrites it.

        Args:
            target_url: destination URL, required (http or https).
            now: creation time in epoch milliseconds.
            expiration: None for never, or anything `parse_expiration()` accepts.
            slug: caller-chosen slug, or None to generate one.
            password: plaintext password, or None/'' for a public link.

        Returns:
            LinkRecord: the stored link.

        Raises:
            ValidationError: if any input is missing or invalid.
            DataStoreError: if the store failed.
        """
        target_url = self._validate_url(target_url)
        expires_at_utc = parse_expiration(expiration, now)
        slug = self._validate_slug(slug) if slug else generate_slug()
        password_state = self._validate_password(password)

        record = LinkRecord(
            slug=slug,
            target_url=target_url,
            created_at_utc=now,
            expires_at_utc=expires_at_utc,
            password=password_state,
        )
        self.dao.put(record)
        logger.info(
            'Created link.',
            extra={'slug': slug, 'expiresAtUtc': expires_at_utc, 'passwordProtected': record.password_protected},
        )
        return record

    def list_links(self, now: int, is_privileged: bool = False) -> list[LinkRecord]:
        """Return every live link the caller may see, newest first.

        Expired links are purged on the way. Password protected links are
        omitted entirely for non-privileged callers.
        """
        visible = []
        for record in self.dao.list_all():
            if record.is_expired(now):
                self._purge(record)
                continue
            if record.password_protected and not is_privileged:
                continue
            visible.append(record)
        return sorted(visible, key=lambda record: record.created_at_utc, reverse=True)

    def inspect(self, slug: str, now: int, is_privileged: bool = False) -> LinkRecord | None:
        """Administrative single-link lookup with the same visibility rules as list_links()."""
        record = self.dao.get(slug)
        if record is None:
            return None
        if record.is_expired(now):
            self._purge(record)
            return None
        if record.password_protected and not is_privileged:
            return None
        return record

    def remove(self, slug: str, is_privileged: bool = False, privilege_configured: bool = False) -> bool:
        """Delete a link. Idempotent.

        Raises:
            PrivilegeRequiredError: if a super secret is configured and the caller lacks it.
            DataStoreError: if the store failed.
        """
        if privilege_configured and not is_privileged:
            raise PrivilegeRequiredError('Deleting links requires the super secret')
        removed = self.dao.delete(slug)
        logger.info('Removed link.', extra={'slug': slug, 'existed': removed})
        return removed

    def _purge(self, record: LinkRecord) -> None:
        self.dao.delete(record.slug)
        logger.info('Purged expired link.', extra={'slug': record.slug, 'expiresAtUtc': record.expires_at_utc})

    @staticmethod
    def _validate_url(target_url: Any) -> str:
        if not isinstance(target_url, str) or not target_url.strip():
            raise ValidationError("missing 'url'")
        target_url = target_url.strip()
        components = urlparse(target_url)
        if components.scheme not in {'http', 'https'} or not components.netloc:
            raise ValidationError(f"invalid 'url' {target_url!r}: expected an absolute http(s) URL")
        return target_url

    @staticmethod
    def _validate_slug(slug: Any) -> str:
        if not isinstance(slug, str) or not _SLUG.match(slug):
            raise ValidationError(f"invalid 'slug' {slug!r}: use 1-64 letters, digits, '-' or '_'")
        if slug in Slug.RESERVED:
            raise ValidationError(f"'slug' {slug!r} is reserved")
        return slug

    @staticmethod
    def _validate_password(password: Any) -> Public | PasswordHashed:
        if password is None or password == '':
            return Public()
        if not isinstance(password, str):
            raise ValidationError("'password' must be a string")
        if not can_hash(password):
            raise ValidationError("'password' must be at most 72 bytes")
        return hash_password(password)


def link_payload(record: LinkRecord, is_privileged: bool = False) -> LinkPayload:
    """Render a link for the administrative API.

    Human-readable dates are derived from the epoch fields at read time.
    Privileged callers also receive the stored credential: the plaintext
    password when it is still recoverable (legacy links), and the hash.
    """
    payload: LinkPayload = {
        'slug': record.slug,
        'url': record.target_url,
        'clicks': record.clicks,
        'passwordProtected': record.password_protected,
        'metadata': {
            'createdAtUtc': record.created_at_utc,
            'expiresAtUtc': record.expires_at_utc,
            'created': format_epoch_ms(record.created_at_utc),
            'expires': format_epoch_ms(record.expires_at_utc) or 'Never',
        },
    }
    if is_privileged:
        match record.password:
            case PasswordLegacy(password=password):
                payload['password'] = password
                payload['passwordHash'] = None
            case PasswordHashed(password_hash=password_hash):
                payload['password'] = None
                payload['passwordHash'] = password_hash
    return payload
