"""
Callback handler - at-most-once fulfillment of verification requests.

The verification transport calls deliver() exactly once per handle with
either a response payload or an error payload. The handler:

1. rejects callers that are not the transport,
2. rejects unknown handles (UnexpectedRequestID) and handles that were
   already fulfilled (RequestAlreadyFulfilled),
3. decodes the response before touching state, so a malformed payload
   leaves the request PENDING,
4. marks the request FULFILLED through the store's atomic transition,
5. only then dispatches: issuance on outcome 1, rejection otherwise,
   or a transport failure event on the error path.

Step 4 precedes step 5 so that a reentrant or concurrent delivery for
the same handle fails the store's check instead of racing the dispatch.

The issuance call is a fault-isolation boundary: whatever the delegate
does (raise, return a failed IssuanceResult, or not be configured at
all) is turned into an IssuanceFailed event and deliver() still returns
normally. Events published after the transition are contained the same
way. There is no retry; re-initiating is the operator's call.
"""

import logging
from dataclasses import dataclass

from .certification import OracleConfiguration
from .codec import SUCCESS_SENTINEL, decode_uint256
from .events import (
    Event,
    IssuanceFailed,
    SubjectRejected,
    VerificationRecorded,
    VerificationTransportFailed,
)
from .exceptions import MalformedResponse, RequestAlreadyFulfilled, UnexpectedRequestID
from .ports import (
    AccessControl,
    DeliveryOutcome,
    EventPublisher,
    IssuanceResult,
    RequestStore,
    Role,
    VerificationRequest,
)

logger = logging.getLogger(__name__)


@dataclass
class CallbackHandler:
    """Applies transport callbacks to stored verification requests."""

    store: RequestStore
    events: EventPublisher
    access_control: AccessControl
    configuration: OracleConfiguration

    def deliver(
        self, caller: str, handle: str, response: bytes, error: bytes | str
    ) -> DeliveryOutcome:
        """
        Apply the single callback for handle.

        Args:
            caller: Authenticated identity invoking the callback
            handle: Correlation handle returned by the transport at submission
            response: ABI-encoded uint256 outcome, empty on the error path
            error: Transport error payload, empty on the response path

        Returns:
            DeliveryOutcome describing the branch taken

        Raises:
            NotAuthorized: caller is not the verification transport
            UnexpectedRequestID: handle was never created
            RequestAlreadyFulfilled: handle already received its callback
            MalformedResponse: response is not a 32-byte uint256
        """
        self.access_control.require(caller, Role.TRANSPORT)

        existing = self.store.get(handle)
        if existing is None:
            raise UnexpectedRequestID(handle)
        if existing.fulfilled:
            raise RequestAlreadyFulfilled(handle)

        result: int | None = None
        if response:
            try:
                result = decode_uint256(response)
            except ValueError as e:
                raise MalformedResponse(handle, str(e)) from e

        request = self.store.mark_fulfilled(handle, result)

        if result is None:
            message = _as_text(error)
            logger.warning("Verification transport failed: handle=%s error=%s", handle, message)
            self._publish(VerificationTransportFailed(handle, message))
            return DeliveryOutcome.TRANSPORT_FAILED

        self._publish(VerificationRecorded(handle, result))

        if result != SUCCESS_SENTINEL:
            reason = f"subject {request.subject} not active (outcome={result})"
            logger.info("Subject rejected: handle=%s %s", handle, reason)
            self._publish(SubjectRejected(handle, reason))
            return DeliveryOutcome.REJECTED

        if self._issue(request):
            return DeliveryOutcome.ISSUED

        self._publish(IssuanceFailed(handle))
        return DeliveryOutcome.ISSUANCE_FAILED

    def _publish(self, event: Event) -> None:
        # The transition is already committed; a failing sink must not
        # stop the dispatch that follows it.
        try:
            self.events.publish(event)
        except Exception:
            logger.exception("Event publication failed: %r", event)

    def _issue(self, request: VerificationRequest) -> bool:
        """
        Call the issuance delegate, containing every failure.

        Returns:
            True if the delegate reported a successful issuance
        """
        issuer = self.configuration.snapshot().issuer
        if issuer is None:
            logger.error("Issuance skipped, no issuer configured: handle=%s", request.handle)
            return False

        try:
            outcome = issuer.issue(request.recipient, request.content_reference)
        except Exception:
            logger.exception("Issuance raised: handle=%s", request.handle)
            return False

        if not isinstance(outcome, IssuanceResult) or not outcome.ok:
            logger.error("Issuance failed: handle=%s outcome=%r", request.handle, outcome)
            return False

        logger.info(
            "Certificate issued: handle=%s recipient=%s token_id=%s",
            request.handle,
            request.recipient,
            outcome.token_id,
        )
        return True


def _as_text(payload: bytes | str) -> str:
    if isinstance(payload, bytes):
        return payload.decode("utf-8", errors="replace")
    return payload
