"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- Fake collaborators (transport, event publisher, access control)
- Wired domain services over an in-memory request store
"""

import itertools
from datetime import UTC, datetime
from unittest.mock import Mock

import pytest

from certgate.adapters.repository.memory import InMemoryRequestStore
from certgate.domain.certification import CertificationService, OracleConfiguration
from certgate.domain.fulfillment import CallbackHandler
from certgate.domain.ports import IssuanceResult, VerificationQuery

FIXED_NOW = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)


class RecordingEvents:
    """EventPublisher that keeps every published event in order."""

    def __init__(self) -> None:
        self.published: list[object] = []

    def publish(self, event: object) -> None:
        self.published.append(event)

    def of_type(self, event_type: type) -> list:
        return [e for e in self.published if isinstance(e, event_type)]


class SequentialTransport:
    """VerificationTransport that mints predictable handles."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self.queries: list[VerificationQuery] = []

    def submit(self, query: VerificationQuery) -> str:
        self.queries.append(query)
        return f"0x{next(self._counter):064x}"


@pytest.fixture
def store() -> InMemoryRequestStore:
    return InMemoryRequestStore()


@pytest.fixture
def transport() -> SequentialTransport:
    return SequentialTransport()


@pytest.fixture
def events() -> RecordingEvents:
    return RecordingEvents()


@pytest.fixture
def access_control() -> Mock:
    """Access control that grants every role."""
    return Mock()


@pytest.fixture
def issuer() -> Mock:
    issuer = Mock()
    issuer.issue.return_value = IssuanceResult.success(7)
    return issuer


@pytest.fixture
def configuration(issuer: Mock) -> OracleConfiguration:
    return OracleConfiguration(verification_source="laboratory-status.js", issuer=issuer)


@pytest.fixture
def service(
    store: InMemoryRequestStore,
    transport: SequentialTransport,
    events: RecordingEvents,
    access_control: Mock,
    configuration: OracleConfiguration,
) -> CertificationService:
    return CertificationService(
        store=store,
        transport=transport,
        events=events,
        access_control=access_control,
        configuration=configuration,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def handler(
    store: InMemoryRequestStore,
    events: RecordingEvents,
    access_control: Mock,
    configuration: OracleConfiguration,
) -> CallbackHandler:
    return CallbackHandler(
        store=store,
        events=events,
        access_control=access_control,
        configuration=configuration,
    )
