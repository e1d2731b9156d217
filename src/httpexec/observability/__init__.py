"""Observability helpers: structured logging."""

from httpexec.observability.logging import configure_logging


__all__ = ["configure_logging"]
