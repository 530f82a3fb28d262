"""
Console certificate issuer adapter - Implements IssuanceDelegate protocol.

Stands in for the certificate token ledger: assigns sequential token ids
per target and logs each issuance. Ownership and transfer semantics
belong to the real ledger and are not modeled here.
"""

import logging
import threading

from certgate.domain.ports import IssuanceResult

logger = logging.getLogger(__name__)


class ConsoleCertificateIssuer:
    """
    Implements IssuanceDelegate protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, target: str) -> None:
        """
        Args:
            target: Identifier of the ledger certificates are issued on
        """
        self.target = target
        self._lock = threading.Lock()
        self._next_token_id = 0
        self._issued: dict[int, tuple[str, str]] = {}

    def issue(self, recipient: str, content_reference: str) -> IssuanceResult:
        """
        Record a certificate for recipient and log it at INFO level.

        Returns:
            IssuanceResult carrying the new token id
        """
        with self._lock:
            token_id = self._next_token_id
            self._next_token_id += 1
            self._issued[token_id] = (recipient, content_reference)

        logger.info(
            "[ISSUANCE] Target: %s Token: %d Recipient: %s Content: %s",
            self.target,
            token_id,
            recipient,
            content_reference,
        )
        return IssuanceResult.success(token_id)

    def owner_of(self, token_id: int) -> str | None:
        with self._lock:
            entry = self._issued.get(token_id)
        return entry[0] if entry is not None else None

    def content_of(self, token_id: int) -> str | None:
        with self._lock:
            entry = self._issued.get(token_id)
        return entry[1] if entry is not None else None
