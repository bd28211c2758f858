MISSING_SLUG = 'MISSING_SLUG'
INVALID_JSON_BODY = 'INVALID_JSON_BODY'
LINK_DELETED = 'LINK_DELETED'
