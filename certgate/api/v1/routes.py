"""
API v1 routes.

Defines REST endpoints for oracle-gated certificate issuance:
request initiation, the transport callback, request inspection and
administrative configuration.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from certgate.adapters.issuance import ConsoleCertificateIssuer
from certgate.api.dependencies import (
    get_callback_handler,
    get_caller,
    get_certification_service,
)
from certgate.api.models import (
    CallbackRequest,
    CallbackResponse,
    ConfigurationResponse,
    ErrorResponse,
    InitiateRequest,
    InitiateResponse,
    IssuerRequest,
    RequestStatusResponse,
    VerificationSourceRequest,
)
from certgate.domain.certification import CertificationService
from certgate.domain.exceptions import (
    DuplicateRequestID,
    InvalidArguments,
    InvalidConfiguration,
    MalformedResponse,
    NotAuthorized,
    RequestAlreadyFulfilled,
    ServicePaused,
    UnexpectedRequestID,
)
from certgate.domain.fulfillment import CallbackHandler
from certgate.domain.ports import RequestState

router = APIRouter(tags=["v1"])

_FORBIDDEN = {403: {"model": ErrorResponse, "description": "Caller lacks the required role"}}


def _forbidden() -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


@router.post(
    "/requests",
    response_model=InitiateResponse,
    status_code=status.HTTP_202_ACCEPTED,
    responses={
        **_FORBIDDEN,
        422: {"model": ErrorResponse, "description": "Invalid arguments"},
        502: {"model": ErrorResponse, "description": "Transport reused a handle"},
        503: {"model": ErrorResponse, "description": "Paused or not configured"},
    },
    summary="Request a calibration certificate",
    description="Submit [subject, content_reference]. The subject is verified "
    "asynchronously; the certificate is issued to the caller only if "
    "verification succeeds.",
)
async def initiate(
    request_data: InitiateRequest,
    caller: str = Depends(get_caller),
    service: CertificationService = Depends(get_certification_service),
) -> InitiateResponse:
    """
    Start verification of a laboratory.

    - **args**: `[subject, content_reference]`

    Returns the correlation handle to poll with GET /v1/requests/{handle}.
    """
    try:
        handle = service.initiate_from_args(caller, request_data.args)
    except NotAuthorized:
        raise _forbidden() from None
    except InvalidArguments as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)
        ) from None
    except ServicePaused:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Verification requests are paused",
        ) from None
    except InvalidConfiguration as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)
        ) from None
    except DuplicateRequestID:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Verification transport returned a duplicate handle",
        ) from None
    return InitiateResponse(handle=handle, state=RequestState.PENDING)


@router.get(
    "/requests/{handle}",
    response_model=RequestStatusResponse,
    responses={404: {"model": ErrorResponse, "description": "Unknown handle"}},
    summary="Inspect a verification request",
)
async def get_request(
    handle: str,
    caller: str = Depends(get_caller),
    service: CertificationService = Depends(get_certification_service),
) -> RequestStatusResponse:
    """Return the stored request; fulfilled requests are kept for audit."""
    record = service.get_request(handle)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown request")
    return RequestStatusResponse(
        handle=record.handle,
        state=record.state,
        created_at=record.created_at,
        subject=record.subject,
        recipient=record.recipient,
        content_reference=record.content_reference,
        result=record.result,
        fulfilled=record.fulfilled,
    )


@router.post(
    "/callbacks/{handle}",
    response_model=CallbackResponse,
    responses={
        **_FORBIDDEN,
        404: {"model": ErrorResponse, "description": "Unexpected request id"},
        409: {"model": ErrorResponse, "description": "Request already fulfilled"},
        422: {"description": "Malformed response payload"},
    },
    summary="Deliver a verification result",
    description="Called once per handle by the verification transport with "
    "either a hex-encoded uint256 response or an error message.",
)
async def deliver(
    handle: str,
    request_data: CallbackRequest,
    caller: str = Depends(get_caller),
    handler: CallbackHandler = Depends(get_callback_handler),
) -> CallbackResponse:
    """
    Apply the transport callback for handle.

    Issuance failures do not fail this call; they are reported through
    the IssuanceFailed event and the `issuance_failed` outcome.
    """
    try:
        outcome = handler.deliver(
            caller, handle, request_data.response_bytes(), request_data.error
        )
    except NotAuthorized:
        raise _forbidden() from None
    except UnexpectedRequestID:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Unexpected request id"
        ) from None
    except RequestAlreadyFulfilled:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Request already fulfilled"
        ) from None
    except MalformedResponse as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.reason
        ) from None
    return CallbackResponse(handle=handle, state=RequestState.FULFILLED, outcome=outcome)


def _configuration_response(service: CertificationService) -> ConfigurationResponse:
    config = service.configuration.snapshot()
    return ConfigurationResponse(
        verification_source=config.verification_source,
        issuer_target=getattr(config.issuer, "target", None),
        paused=config.paused,
    )


@router.get(
    "/admin/configuration",
    response_model=ConfigurationResponse,
    responses=_FORBIDDEN,
    summary="Show administrative configuration",
)
async def get_configuration(
    caller: str = Depends(get_caller),
    service: CertificationService = Depends(get_certification_service),
) -> ConfigurationResponse:
    try:
        service.require_admin(caller)
    except NotAuthorized:
        raise _forbidden() from None
    return _configuration_response(service)


@router.put(
    "/admin/verification-source",
    response_model=ConfigurationResponse,
    responses=_FORBIDDEN,
    summary="Replace the verification source",
)
async def set_verification_source(
    request_data: VerificationSourceRequest,
    caller: str = Depends(get_caller),
    service: CertificationService = Depends(get_certification_service),
) -> ConfigurationResponse:
    try:
        service.set_verification_source(caller, request_data.source)
    except NotAuthorized:
        raise _forbidden() from None
    return _configuration_response(service)


@router.put(
    "/admin/issuer",
    response_model=ConfigurationResponse,
    responses=_FORBIDDEN,
    summary="Point issuance at a certificate ledger",
)
async def set_issuer(
    request_data: IssuerRequest,
    caller: str = Depends(get_caller),
    service: CertificationService = Depends(get_certification_service),
) -> ConfigurationResponse:
    try:
        service.set_issuer(caller, ConsoleCertificateIssuer(request_data.target))
    except NotAuthorized:
        raise _forbidden() from None
    return _configuration_response(service)


@router.post(
    "/admin/pause",
    response_model=ConfigurationResponse,
    responses=_FORBIDDEN,
    summary="Pause new verification requests",
)
async def pause(
    caller: str = Depends(get_caller),
    service: CertificationService = Depends(get_certification_service),
) -> ConfigurationResponse:
    try:
        service.pause(caller)
    except NotAuthorized:
        raise _forbidden() from None
    return _configuration_response(service)


@router.post(
    "/admin/unpause",
    response_model=ConfigurationResponse,
    responses=_FORBIDDEN,
    summary="Resume new verification requests",
)
async def unpause(
    caller: str = Depends(get_caller),
    service: CertificationService = Depends(get_certification_service),
) -> ConfigurationResponse:
    try:
        service.unpause(caller)
    except NotAuthorized:
        raise _forbidden() from None
    return _configuration_response(service)
