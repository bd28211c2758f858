"""Password hashing and verification for protected links.

New passwords are hashed with bcrypt. Two older credential formats are still
verified so existing links keep working:

    - plaintext passwords (PasswordLegacy), from before hashing existed;
    - unsalted SHA-256 hex digests (PasswordHashed), from the first hashing release.

Both are upgraded to bcrypt on the first successful verification
(see `needs_upgrade()`).

Example:
    >>> state = hash_password('hunter2')
    >>> verify_password(state, 'hunter2')
    True
    >>> verify_password(state, 'wrong')
    False
    >>> needs_upgrade(PasswordLegacy(password='hunter2'))
    True
"""

import hashlib
import hmac
import re

import bcrypt

from linky.constants import Password
from linky.models import PasswordHashed, PasswordLegacy, PasswordState, Public


_SHA256_HEX = re.compile(r'^[0-9a-f]{64}$')


def hash_password(password: str) -> PasswordHashed:
    digest = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt())
    return PasswordHashed(password_hash=digest.decode('ascii'))


def verify_password(state: PasswordState, supplied: str) -> bool:
    """Check a supplied password against a link's password state.

    All comparisons are constant-time. A Public link never matches.
    """
    match state:
        case PasswordHashed(password_hash=password_hash) if _is_sha256(password_hash):
            supplied_digest = hashlib.sha256(supplied.encode('utf-8')).hexdigest()
            return hmac.compare_digest(supplied_digest, password_hash)
        case PasswordHashed(password_hash=password_hash):
            try:
                return bcrypt.checkpw(supplied.encode('utf-8'), password_hash.encode('ascii'))
            except ValueError:
                # Unrecognized digest format: nothing can match it
                return False
        case PasswordLegacy(password=password):
            return hmac.compare_digest(supplied.encode('utf-8'), password.encode('utf-8'))
        case Public():
            return False


def needs_upgrade(state: PasswordState) -> bool:
    """True when a verified credential should be rewritten as a bcrypt hash."""
    match state:
        case PasswordLegacy():
            return True
        case PasswordHashed(password_hash=password_hash):
            return _is_sha256(password_hash)
        case _:
            return False


def _is_sha256(password_hash: str) -> bool:
    return _SHA256_HEX.match(password_hash) is not None


def can_hash(password: str) -> bool:
    """bcrypt only accepts inputs up to 72 bytes."""
    return len(password.encode('utf-8')) <= Password.MAX_BYTES
