LINKS_LISTED = 'LINKS_LISTED'
