"""
Console verification transport adapter - Implements VerificationTransport protocol.

This module provides a console-based implementation of the domain's
transport port. It mints correlation handles and logs the query so an
operator (or a test harness) can run the verification and post the
result back to POST /v1/callbacks/{handle}.
"""

import logging
import secrets
import threading

from certgate.domain.ports import VerificationQuery

logger = logging.getLogger(__name__)


class ConsoleVerificationTransport:
    """
    Implements VerificationTransport protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Handles are 32 random bytes, hex encoded with a 0x prefix, and are
    never handed out twice by the same instance.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._issued: set[str] = set()

    def submit(self, query: VerificationQuery) -> str:
        """
        Mint a handle for query and log it.

        Args:
            query: Verification source and its arguments

        Returns:
            Fresh correlation handle
        """
        with self._lock:
            handle = self._new_handle()
            while handle in self._issued:
                handle = self._new_handle()
            self._issued.add(handle)

        logger.info(
            "[VERIFICATION] Handle: %s Source: %s Args: %s",
            handle,
            query.source,
            list(query.args),
        )
        return handle

    def _new_handle(self) -> str:
        return "0x" + secrets.token_hex(32)
