from linky.lifecycle.engine import LinkLifecycleEngine, link_payload
from linky.lifecycle.auth import api_key_matches, is_privileged


__all__ = [
    'LinkLifecycleEngine',
    'link_payload',
    'api_key_matches',
    'is_privileged',
]
