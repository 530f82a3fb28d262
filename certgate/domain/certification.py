"""
Certification domain service - verification request initiation.

This module contains the orchestrator side of the oracle-gated issuance
flow: it validates a request, hands the verification query to the
transport and records a PENDING request under the returned handle.
The certificate is never issued from here; see fulfillment.py for the
callback side.

Request lifecycle (forward-only)
================================

    UNKNOWN -> PENDING    (initiate)
    PENDING -> FULFILLED  (first accepted callback, terminal)

Fulfilled requests are retained in the store for audit; nothing ever
deletes them.

The service also owns the administrative switches: verification source,
issuance delegate and the pause flag for new requests. All of them are
gated through the AccessControl port.
"""

import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from .events import RequestInitiated
from .exceptions import (
    DuplicateRequestID,
    InvalidArguments,
    InvalidConfiguration,
    ServicePaused,
)
from .ports import (
    AccessControl,
    EventPublisher,
    IssuanceDelegate,
    RequestStore,
    Role,
    VerificationQuery,
    VerificationRequest,
    VerificationTransport,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class ConfigurationSnapshot:
    """Point-in-time copy of OracleConfiguration."""

    verification_source: str
    issuer: IssuanceDelegate | None
    paused: bool


class OracleConfiguration:
    """
    Administrative state shared by the orchestrator and the callback handler.

    Reads go through snapshot() so a single operation never observes a
    half-applied change.
    """

    def __init__(
        self,
        verification_source: str = "",
        issuer: IssuanceDelegate | None = None,
        paused: bool = False,
    ) -> None:
        self._lock = threading.Lock()
        self._verification_source = verification_source
        self._issuer = issuer
        self._paused = paused

    def snapshot(self) -> ConfigurationSnapshot:
        with self._lock:
            return ConfigurationSnapshot(
                verification_source=self._verification_source,
                issuer=self._issuer,
                paused=self._paused,
            )

    def set_verification_source(self, source: str) -> None:
        with self._lock:
            self._verification_source = source

    def set_issuer(self, issuer: IssuanceDelegate | None) -> None:
        with self._lock:
            self._issuer = issuer

    def set_paused(self, paused: bool) -> None:
        with self._lock:
            self._paused = paused


@dataclass
class CertificationService:
    """
    Domain service for starting certificate verifications.

    Orchestrates the initiation flow: access and pause checks, argument
    and configuration validation, transport submission and request
    persistence.
    """

    store: RequestStore
    transport: VerificationTransport
    events: EventPublisher
    access_control: AccessControl
    configuration: OracleConfiguration
    clock: Callable[[], datetime] = field(default=_utcnow)

    def initiate(
        self, caller: str, subject: str, recipient: str, content_reference: str
    ) -> str:
        """
        Start verification of subject; issue to recipient if it passes.

        Every check runs before the transport is contacted, so a failed
        call leaves no trace in the transport or the store.

        Args:
            caller: Authenticated identity making the request
            subject: Laboratory identifier to verify
            recipient: Identity receiving the certificate on success
            content_reference: Pointer to the certificate content

        Returns:
            Correlation handle minted by the transport

        Raises:
            NotAuthorized: caller lacks the REQUESTER role
            ServicePaused: new requests are paused
            InvalidArguments: subject, recipient or content_reference is blank
            InvalidConfiguration: no verification source or no issuer is set
            DuplicateRequestID: transport returned a handle already in use
        """
        self.access_control.require(caller, Role.REQUESTER)
        config = self.configuration.snapshot()
        if config.paused:
            raise ServicePaused("new verification requests are paused")

        subject = subject.strip()
        recipient = recipient.strip()
        content_reference = content_reference.strip()
        if not subject or not content_reference or not recipient:
            raise InvalidArguments("subject, recipient and content reference are required")
        if not config.verification_source.strip():
            raise InvalidConfiguration("Verification source not configured")
        if config.issuer is None:
            raise InvalidConfiguration("Issuer not configured")

        handle = self.transport.submit(
            VerificationQuery(source=config.verification_source, args=(subject,))
        )
        request = VerificationRequest(
            handle=handle,
            created_at=self.clock(),
            subject=subject,
            recipient=recipient,
            content_reference=content_reference,
        )
        if not self.store.create(request):
            raise DuplicateRequestID(handle)

        logger.info("Verification requested: handle=%s subject=%s", handle, subject)
        self.events.publish(RequestInitiated(handle))
        return handle

    def initiate_from_args(self, caller: str, args: Sequence[str]) -> str:
        """
        Argument-list form of initiate: args[0] is the subject,
        args[1] the content reference and the caller is the recipient.
        """
        if len(args) < 2:
            raise InvalidArguments("expected [subject, content_reference]")
        return self.initiate(caller, args[0], caller, args[1])

    def get_request(self, handle: str) -> VerificationRequest | None:
        return self.store.get(handle)

    def require_admin(self, caller: str) -> None:
        self.access_control.require(caller, Role.ADMIN)

    def set_verification_source(self, caller: str, source: str) -> None:
        self.access_control.require(caller, Role.ADMIN)
        self.configuration.set_verification_source(source)
        logger.info("Verification source updated by %s", caller)

    def set_issuer(self, caller: str, issuer: IssuanceDelegate | None) -> None:
        self.access_control.require(caller, Role.ADMIN)
        self.configuration.set_issuer(issuer)
        logger.info("Issuance delegate updated by %s", caller)

    def pause(self, caller: str) -> None:
        self.access_control.require(caller, Role.ADMIN)
        self.configuration.set_paused(True)
        logger.warning("New verification requests paused by %s", caller)

    def unpause(self, caller: str) -> None:
        self.access_control.require(caller, Role.ADMIN)
        self.configuration.set_paused(False)
        logger.info("New verification requests resumed by %s", caller)
