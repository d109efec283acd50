"""Structured logging configuration.

Purpose: JSON-formatted logs with request tracing for the client and mock backend.

Pattern: structlog with standard library integration.
"""
import logging
import sys
import uuid

import structlog

# Event keys that must never reach the log output
SECRET_KEYS = frozenset({"token", "password", "confirm_password", "authorization"})


def drop_secrets(logger, method_name, event_dict):
    """Remove credential fields from an event before it is rendered."""
    for key in [k for k in event_dict if k.lower() in SECRET_KEYS]:
        del event_dict[key]
    return event_dict


def setup_structured_logging(log_level: str = "INFO"):
    """
    Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            drop_secrets,
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Logs go to stderr so they never interleave with terminal client output
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper())
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get logger instance with structured logging.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def generate_request_id() -> str:
    """Generate unique request ID."""
    return f"req-{uuid.uuid4().hex[:12]}"


class RequestIDMiddleware:
    """WSGI middleware that tags every response with an X-Request-ID header."""

    def __init__(self, app):
        self.app = app

    def __call__(self, environ, start_response):
        request_id = generate_request_id()
        environ['REQUEST_ID'] = request_id

        def custom_start_response(status, headers, exc_info=None):
            headers.append(('X-Request-ID', request_id))
            return start_response(status, headers, exc_info)

        return self.app(environ, custom_start_response)
