MISSING_SLUG = 'MISSING_SLUG'
LINK_NOT_FOUND = 'LINK_NOT_FOUND'
LINK_EXPIRED = 'LINK_EXPIRED'
PASSWORD_REQUIRED = 'PASSWORD_REQUIRED'  # noqa: S105
PASSWORD_INVALID = 'PASSWORD_INVALID'  # noqa: S105
REDIRECT_SUCCESS = 'REDIRECT_SUCCESS'
INVALID_REQUEST_BODY = 'INVALID_REQUEST_BODY'
