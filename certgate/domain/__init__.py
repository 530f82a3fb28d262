"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core of the oracle-gated certificate issuance
flow: request initiation, at-most-once callback fulfillment and the
fault-isolated issuance dispatch. It defines its own port interfaces
for infrastructure abstraction.
"""

from .certification import CertificationService, ConfigurationSnapshot, OracleConfiguration
from .exceptions import (
    AccessError,
    CertificationError,
    ConfigurationError,
    DuplicateRequestID,
    InvalidArguments,
    InvalidConfiguration,
    IssuanceError,
    MalformedResponse,
    NotAuthorized,
    ProtocolError,
    RequestAlreadyFulfilled,
    ServicePaused,
    UnexpectedRequestID,
    ValidationError,
)
from .fulfillment import CallbackHandler
from .ports import (
    AccessControl,
    DeliveryOutcome,
    EventPublisher,
    IssuanceDelegate,
    IssuanceResult,
    RequestState,
    RequestStore,
    Role,
    VerificationQuery,
    VerificationRequest,
    VerificationTransport,
)

__all__ = [
    "AccessControl",
    "AccessError",
    "CallbackHandler",
    "CertificationError",
    "CertificationService",
    "ConfigurationError",
    "ConfigurationSnapshot",
    "DeliveryOutcome",
    "DuplicateRequestID",
    "EventPublisher",
    "InvalidArguments",
    "InvalidConfiguration",
    "IssuanceDelegate",
    "IssuanceError",
    "IssuanceResult",
    "MalformedResponse",
    "NotAuthorized",
    "OracleConfiguration",
    "ProtocolError",
    "RequestAlreadyFulfilled",
    "RequestState",
    "RequestStore",
    "Role",
    "ServicePaused",
    "UnexpectedRequestID",
    "ValidationError",
    "VerificationQuery",
    "VerificationRequest",
    "VerificationTransport",
]
