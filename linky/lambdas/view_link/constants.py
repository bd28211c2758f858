MISSING_SLUG = 'MISSING_SLUG'
LINK_NOT_FOUND = 'LINK_NOT_FOUND'
LINK_VIEWED = 'LINK_VIEWED'
