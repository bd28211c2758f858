INVALID_JSON_BODY = 'INVALID_JSON_BODY'
INVALID_LINK = 'INVALID_LINK'
LINK_CREATED = 'LINK_CREATED'
