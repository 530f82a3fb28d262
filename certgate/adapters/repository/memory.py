"""
In-memory repository adapter - Implements RequestStore protocol.

Single-process store used for development and tests. A lock serializes
every mutation so that mark_fulfilled is a true compare-and-set: two
concurrent callbacks for the same handle cannot both see fulfilled=False.
The lock is held only for the dictionary operations, never while the
caller dispatches issuance.
"""

import threading
from dataclasses import replace

from certgate.domain.exceptions import RequestAlreadyFulfilled, UnexpectedRequestID
from certgate.domain.ports import VerificationRequest


class InMemoryRequestStore:
    """
    Implements RequestStore protocol with a dict guarded by a lock.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Records are frozen dataclasses, so handing them out never exposes
    the store's own state to mutation.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._requests: dict[str, VerificationRequest] = {}

    def create(self, request: VerificationRequest) -> bool:
        with self._lock:
            if request.handle in self._requests:
                return False
            self._requests[request.handle] = request
            return True

    def get(self, handle: str) -> VerificationRequest | None:
        with self._lock:
            return self._requests.get(handle)

    def mark_fulfilled(self, handle: str, result: int | None) -> VerificationRequest:
        with self._lock:
            current = self._requests.get(handle)
            if current is None:
                raise UnexpectedRequestID(handle)
            if current.fulfilled:
                raise RequestAlreadyFulfilled(handle)
            updated = replace(current, result=result, fulfilled=True)
            self._requests[handle] = updated
            return updated

    def ping(self) -> None:
        """Always reachable."""

    def __len__(self) -> int:
        with self._lock:
            return len(self._requests)
