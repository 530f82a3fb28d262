"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
Long-lived collaborators (store, transport, configuration) live on
app.state and are set up by the application lifespan.
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from certgate.adapters.access import StaticAccessControl
from certgate.domain.certification import CertificationService, OracleConfiguration
from certgate.domain.fulfillment import CallbackHandler
from certgate.domain.ports import EventPublisher, RequestStore, VerificationTransport


def get_store(request: Request) -> RequestStore:
    """Get the request store created during app lifespan startup."""
    return request.app.state.store


def get_transport(request: Request) -> VerificationTransport:
    return request.app.state.transport


def get_events(request: Request) -> EventPublisher:
    return request.app.state.events


def get_access_control(request: Request) -> StaticAccessControl:
    return request.app.state.access_control


def get_configuration(request: Request) -> OracleConfiguration:
    return request.app.state.configuration


def get_certification_service(request: Request) -> CertificationService:
    """
    Create certification service with injected dependencies.

    Wires together the store, transport, event publisher, access control
    and shared configuration for the domain service.
    """
    return CertificationService(
        store=get_store(request),
        transport=get_transport(request),
        events=get_events(request),
        access_control=get_access_control(request),
        configuration=get_configuration(request),
    )


def get_callback_handler(request: Request) -> CallbackHandler:
    """Create callback handler sharing the service's store and configuration."""
    return CallbackHandler(
        store=get_store(request),
        events=get_events(request),
        access_control=get_access_control(request),
        configuration=get_configuration(request),
    )


# HTTP BASIC AUTH security scheme for OpenAPI documentation
http_basic = HTTPBasic()


def get_caller(
    credentials: HTTPBasicCredentials = Depends(http_basic),
    access_control: StaticAccessControl = Depends(get_access_control),
) -> str:
    """
    Authenticate the caller from the HTTP BASIC AUTH header.

    FastAPI's HTTPBasic already answers 401 for a missing or malformed
    header; this adds the password check against configured principals.

    Returns:
        Authenticated username, used as the caller identity
    """
    username = credentials.username.strip()
    if not access_control.authenticate(username, credentials.password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    return username
