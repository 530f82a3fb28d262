"""Event adapters - Observability sinks."""

from .log_publisher import LoggingEventPublisher

__all__ = ["LoggingEventPublisher"]
