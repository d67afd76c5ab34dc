"""JSON logging for the L.U.M.A service.

`configure_logging` installs a stdout handler that renders each record as a
single JSON line; modules log through ``logging.getLogger(__name__)``.
"""

import json
import logging
import sys
import time


class JSONFormatter(logging.Formatter):
    """Render a log record as compact JSON."""

    def format(self, record: logging.LogRecord) -> str:
        base = {
            'level': record.levelname,
            'ts': round(time.time(), 3),
            'logger': record.name,
            'msg': record.getMessage(),
        }
        if record.exc_info:
            base['exc_info'] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False)


def configure_logging(level='INFO') -> logging.Logger:
    """Route the ``luma`` logger tree to stdout with the JSON formatter."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())

    logger = logging.getLogger('luma')
    logger.handlers = [handler]
    logger.setLevel(level)

    # Quiet chatty client libraries
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('google').setLevel(logging.WARNING)
    return logger
