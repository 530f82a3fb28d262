"""
Domain events - Observability records emitted by the orchestration.

Events are plain frozen dataclasses handed to the EventPublisher port.
They carry only the correlation handle and the outcome details; the
request record itself stays in the RequestStore.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RequestInitiated:
    handle: str


@dataclass(frozen=True)
class VerificationRecorded:
    handle: str
    result: int


@dataclass(frozen=True)
class VerificationTransportFailed:
    handle: str
    error: str


@dataclass(frozen=True)
class SubjectRejected:
    handle: str
    reason: str


@dataclass(frozen=True)
class IssuanceFailed:
    handle: str


Event = (
    RequestInitiated
    | VerificationRecorded
    | VerificationTransportFailed
    | SubjectRejected
    | IssuanceFailed
)
