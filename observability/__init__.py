"""Observability package for the docs corpus builder and query server."""

from .logging import setup_logging, JSONFormatter, ColoredFormatter

__all__ = [
    'setup_logging',
    'JSONFormatter',
    'ColoredFormatter'
]
