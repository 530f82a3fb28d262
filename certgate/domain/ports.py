"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the data types the domain works with and the
interfaces (ports) that the domain requires from infrastructure.
Adapters implement these protocols.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Protocol

from .events import Event


class RequestState(str, Enum):
    """
    Lifecycle states of a verification request.

    State Transitions (forward-only):
    - UNKNOWN -> PENDING (initiate)
    - PENDING -> FULFILLED (first accepted callback)

    FULFILLED is terminal. UNKNOWN is never stored; it is what a lookup
    of a handle that was never created reports.
    """

    UNKNOWN = "UNKNOWN"
    PENDING = "PENDING"
    FULFILLED = "FULFILLED"


class Role(str, Enum):
    """Roles checked by the access-control collaborator."""

    ADMIN = "ADMIN"
    REQUESTER = "REQUESTER"
    TRANSPORT = "TRANSPORT"


class DeliveryOutcome(Enum):
    """
    What a delivered callback led to.

    Returned by CallbackHandler.deliver() so callers can report the
    branch taken without inspecting emitted events.
    """

    ISSUED = "issued"
    ISSUANCE_FAILED = "issuance_failed"
    REJECTED = "rejected"
    TRANSPORT_FAILED = "transport_failed"


@dataclass(frozen=True)
class VerificationRequest:
    """
    A request awaiting (or having received) its verification callback.

    recipient and content_reference are captured at initiation and never
    change. result and fulfilled change once, together, in the store's
    mark_fulfilled transition.
    """

    handle: str
    created_at: datetime
    subject: str
    recipient: str
    content_reference: str
    result: int | None = None
    fulfilled: bool = False

    @property
    def state(self) -> RequestState:
        return RequestState.FULFILLED if self.fulfilled else RequestState.PENDING


@dataclass(frozen=True)
class VerificationQuery:
    """Query handed to the transport: the logic to run and its arguments."""

    source: str
    args: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class IssuanceResult:
    """
    Outcome of an issuance attempt.

    Exactly one of token_id / error is set. Delegates may return a failed
    result or raise; the callback handler treats both the same way.
    """

    token_id: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.token_id is not None

    @classmethod
    def success(cls, token_id: int) -> "IssuanceResult":
        return cls(token_id=token_id)

    @classmethod
    def failure(cls, error: str) -> "IssuanceResult":
        return cls(error=error)


class RequestStore(Protocol):
    """Port interface for verification request persistence."""

    def create(self, request: VerificationRequest) -> bool:
        """
        Insert a new PENDING request.

        Args:
            request: Request record with fulfilled=False and result=None

        Returns:
            True if stored, False if the handle already exists
        """
        ...

    def get(self, handle: str) -> VerificationRequest | None:
        """
        Look up a request by handle.

        Returns:
            The stored record, or None if the handle was never created
        """
        ...

    def mark_fulfilled(self, handle: str, result: int | None) -> VerificationRequest:
        """
        Atomically transition a request from PENDING to FULFILLED.

        The check that the request is not yet fulfilled and the write of
        fulfilled=True happen without a race window: of two concurrent
        calls for the same handle exactly one succeeds.

        Args:
            handle: Correlation handle
            result: Decoded outcome, or None when the transport reported an error

        Returns:
            The updated record

        Raises:
            UnexpectedRequestID: Handle was never created
            RequestAlreadyFulfilled: Handle was already fulfilled
        """
        ...


class VerificationTransport(Protocol):
    """Port interface for the external verification system."""

    def submit(self, query: VerificationQuery) -> str:
        """
        Submit a verification query.

        The transport later delivers exactly one callback for the
        returned handle, carrying either a response or an error.

        Returns:
            A fresh, never reused correlation handle
        """
        ...


class IssuanceDelegate(Protocol):
    """Port interface for certificate issuance."""

    def issue(self, recipient: str, content_reference: str) -> IssuanceResult:
        """
        Issue a certificate to recipient pointing at content_reference.

        May raise; callers must contain the failure.
        """
        ...


class EventPublisher(Protocol):
    """Port interface for observability events."""

    def publish(self, event: Event) -> None:
        ...


class AccessControl(Protocol):
    """Port interface for role checks."""

    def require(self, identity: str, role: Role) -> None:
        """
        Raises:
            NotAuthorized: identity does not hold role
        """
        ...
