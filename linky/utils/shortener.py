"""Slug generation utility

Functions:
    generate_slug(length=6) -> str:
        Draw a random Base62 slug from the OS CSPRNG.

Example:
    >>> from linky.utils import generate_slug
    >>> generate_slug()
    'q3ZtB9'

NOTE:
    - There is no collision check. With 62^6 (~5.7e10) possible slugs the
      chance of overwriting an existing link is negligible for small stores,
      and an overwrite follows the store's last-writer-wins rule.
"""

import secrets

from linky.constants import Slug


def generate_slug(length: int = Slug.LENGTH) -> str:
    if not isinstance(length, int):
        raise TypeError(f'Length must be of type integer (given type: {type(length)}).')
    if length <= 0:
        raise ValueError(f'Length must be a positive integer (given value: {length}).')

    return ''.join(secrets.choice(Slug.ALPHABET) for _ in range(length))
