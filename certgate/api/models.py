"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from certgate.domain.ports import DeliveryOutcome, RequestState


class InitiateRequest(BaseModel):
    """Request model for starting a certificate verification."""

    args: list[str] = Field(
        ...,
        description="[subject, content_reference]: laboratory identifier and "
        "certificate content pointer",
        examples=[["LAB-001", "ipfs://cert-1"]],
    )


class InitiateResponse(BaseModel):
    """Response model for an accepted verification request."""

    handle: str
    state: RequestState


class RequestStatusResponse(BaseModel):
    """Response model for a stored verification request."""

    handle: str
    state: RequestState
    created_at: datetime
    subject: str
    recipient: str
    content_reference: str
    result: int | None
    fulfilled: bool


class CallbackRequest(BaseModel):
    """
    Request model for the transport callback.

    Exactly one of response / error is expected to be non-empty.
    response is the hex-encoded uint256 outcome, with or without 0x.
    """

    response: str = Field(default="", description="Hex-encoded uint256 outcome")
    error: str = Field(default="", description="Transport error message")

    @field_validator("response")
    @classmethod
    def response_is_hex(cls, value: str) -> str:
        digits = value[2:] if value.startswith(("0x", "0X")) else value
        try:
            bytes.fromhex(digits)
        except ValueError:
            raise ValueError("response must be hex encoded") from None
        return value

    def response_bytes(self) -> bytes:
        value = self.response
        digits = value[2:] if value.startswith(("0x", "0X")) else value
        return bytes.fromhex(digits)


class CallbackResponse(BaseModel):
    """Response model for an applied callback."""

    handle: str
    state: RequestState
    outcome: DeliveryOutcome


class VerificationSourceRequest(BaseModel):
    """Request model for replacing the verification source."""

    source: str = Field(..., min_length=1)


class IssuerRequest(BaseModel):
    """Request model for pointing issuance at a certificate ledger."""

    target: str = Field(..., min_length=1)


class ConfigurationResponse(BaseModel):
    """Response model for current administrative configuration."""

    verification_source: str
    issuer_target: str | None
    paused: bool


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
