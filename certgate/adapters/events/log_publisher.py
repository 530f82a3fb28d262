"""
Logging event publisher adapter - Implements EventPublisher protocol.

Writes every domain event to the log. Failure events go out at WARNING
so they stand out in docker-compose logs; everything else at INFO.
"""

import logging
from dataclasses import asdict

from certgate.domain.events import Event, IssuanceFailed, VerificationTransportFailed

logger = logging.getLogger(__name__)

_WARNING_EVENTS = (IssuanceFailed, VerificationTransportFailed)


class LoggingEventPublisher:
    """
    Implements EventPublisher protocol via logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def publish(self, event: Event) -> None:
        level = logging.WARNING if isinstance(event, _WARNING_EVENTS) else logging.INFO
        logger.log(level, "[EVENT] %s %s", type(event).__name__, asdict(event))
