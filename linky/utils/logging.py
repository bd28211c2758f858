"""Application-wide logging initialization

IMPORTANT: Call `initialize_logging()` in the lambda handler's `__init__.py` file
before any other logging is done.

Every record is written to stdout as one JSON object. Keys passed through
`extra=` are merged into the top level, so handlers log structured events:

    >>> logger.info('Created link.', extra={'slug': 'abc123', 'event': 'LINK_CREATED'})

    {"timestamp": "2025-10-15T00:00:00.000Z", "level": "INFO", "logger": "linky.lambdas.shorten_url.app",
     "message": "Created link.", "slug": "abc123", "event": "LINK_CREATED"}

The level comes from `LOG_LEVEL` (default INFO).
"""

import os
import json
import logging
import logging.config
from datetime import datetime, UTC

from linky.constants import ENV


# Attributes every LogRecord carries; anything else came in through `extra=`
_RESERVED = frozenset(vars(logging.LogRecord('', logging.NOTSET, '', 0, '', (), None))) | {'message', 'asctime'}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=UTC)
        entry = {
            'timestamp': created.isoformat(timespec='milliseconds').replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        entry.update({key: value for key, value in vars(record).items() if key not in _RESERVED})

        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def initialize_logging() -> None:
    logging.config.dictConfig(
        {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {'json': {'()': JsonFormatter}},
            'handlers': {
                'stdout': {
                    'class': 'logging.StreamHandler',
                    'formatter': 'json',
                    'stream': 'ext://sys.stdout',
                },
            },
            'root': {
                'level': os.getenv(ENV.App.LOG_LEVEL, 'INFO').upper(),
                'handlers': ['stdout'],
            },
        }
    )
