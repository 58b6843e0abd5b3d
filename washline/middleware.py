"""
Request tracing: every request carries an id that is echoed in the
X-Request-ID response header and stamped on each log record.
"""
import logging
import uuid

from flask import has_request_context, request

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s'

REQUEST_ID_ENVIRON_KEY = 'washline.request_id'
REQUEST_ID_HEADER = 'X-Request-ID'
MAX_REQUEST_ID_LENGTH = 128


def _incoming_request_id(environ):
    """Client-supplied id if it is usable, else None"""
    value = (environ.get('HTTP_X_REQUEST_ID') or '').strip()
    if not value or len(value) > MAX_REQUEST_ID_LENGTH or not value.isprintable():
        return None
    return value


class RequestIdMiddleware:
    """WSGI wrapper that assigns the request id before Flask sees the request"""

    def __init__(self, wsgi_app):
        self.wsgi_app = wsgi_app

    def __call__(self, environ, start_response):
        request_id = _incoming_request_id(environ) or uuid.uuid4().hex
        environ[REQUEST_ID_ENVIRON_KEY] = request_id

        def start_with_request_id(status, headers, exc_info=None):
            headers = [(k, v) for k, v in headers if k.lower() != REQUEST_ID_HEADER.lower()]
            headers.append((REQUEST_ID_HEADER, request_id))
            return start_response(status, headers, exc_info)

        return self.wsgi_app(environ, start_with_request_id)


class RequestIdFilter(logging.Filter):
    """Stamp log records with the current request ID ("-" outside requests)"""

    def filter(self, record):
        request_id = '-'
        if has_request_context():
            request_id = request.environ.get(REQUEST_ID_ENVIRON_KEY, '-')
        record.request_id = request_id
        return True


def configure_logging(level):
    """
    Configure the root logger once

    Args:
        level (str): Logging level name, e.g. "INFO"
    """
    root = logging.getLogger()
    if any(isinstance(f, RequestIdFilter) for h in root.handlers for f in h.filters):
        root.setLevel(level.upper())
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    handler.addFilter(RequestIdFilter())
    root.addHandler(handler)
    root.setLevel(level.upper())
