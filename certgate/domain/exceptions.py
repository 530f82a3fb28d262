"""
Domain exceptions - Semantic error types for certificate orchestration.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.

Validation, configuration, access and protocol errors are fail-fast:
they abort the operation before any state is mutated. IssuanceError is
the only error that is contained inside the domain (see fulfillment.py).
"""


class CertificationError(Exception):
    """Base class for certification domain errors."""

    pass


class ValidationError(CertificationError):
    """Bad or missing arguments to initiate."""

    pass


class InvalidArguments(ValidationError):
    """Subject or content reference is missing or blank."""

    pass


class ConfigurationError(CertificationError):
    """Verification logic or issuance target is not configured."""

    pass


class InvalidConfiguration(ConfigurationError):
    """No verification source or no issuer has been set."""

    pass


class AccessError(CertificationError):
    """Caller may not perform the requested operation right now."""

    pass


class NotAuthorized(AccessError):
    """Caller does not hold the role required by the operation."""

    def __init__(self, identity: str, role: str) -> None:
        super().__init__(f"{identity!r} lacks role {role}")
        self.identity = identity
        self.role = role


class ServicePaused(AccessError):
    """New verification requests are paused by an administrator."""

    pass


class ProtocolError(CertificationError):
    """Callback or transport contract violation. State is left untouched."""

    def __init__(self, handle: str) -> None:
        super().__init__(handle)
        self.handle = handle


class UnexpectedRequestID(ProtocolError):
    """No request was ever created for this handle."""

    pass


class RequestAlreadyFulfilled(ProtocolError):
    """The request already received its one callback."""

    pass


class DuplicateRequestID(ProtocolError):
    """The transport returned a handle that is already in use."""

    pass


class MalformedResponse(ProtocolError):
    """Response payload does not decode to an unsigned 256-bit integer."""

    def __init__(self, handle: str, reason: str) -> None:
        super().__init__(handle)
        self.reason = reason

    def __str__(self) -> str:
        return f"{self.handle}: {self.reason}"


class IssuanceError(CertificationError):
    """Raised by issuance delegates. Never escapes CallbackHandler.deliver."""

    pass
