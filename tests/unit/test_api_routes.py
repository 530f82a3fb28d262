"""
Unit tests for API v1 routes.

Tests endpoint responses against an in-memory store and real adapters,
plus mocked services for error mapping.
"""

from base64 import b64encode
from unittest.mock import MagicMock

import bcrypt
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from certgate.adapters.repository.memory import InMemoryRequestStore
from certgate.api.dependencies import get_callback_handler, get_certification_service
from certgate.api.main import init_app_state
from certgate.api.v1.routes import router
from certgate.config.settings import Settings
from certgate.domain.certification import CertificationService
from certgate.domain.codec import encode_uint256
from certgate.domain.exceptions import DuplicateRequestID
from certgate.domain.fulfillment import CallbackHandler
from certgate.domain.ports import DeliveryOutcome

PASSWORDS = {"root": "root-secret", "alice": "alice-secret", "oracle": "oracle-secret"}


def basic_auth_header(username: str, password: str | None = None) -> dict:
    """Create HTTP BASIC AUTH header for testing."""
    if password is None:
        password = PASSWORDS[username]
    encoded = b64encode(f"{username}:{password}".encode()).decode()
    return {"Authorization": f"Basic {encoded}"}


@pytest.fixture
def app() -> FastAPI:
    """Create test FastAPI application with in-memory state."""
    settings = Settings(
        principals={
            name: bcrypt.hashpw(pw.encode(), bcrypt.gensalt(4)).decode()
            for name, pw in PASSWORDS.items()
        },
        admin_principals=["root"],
        transport_principal="oracle",
        verification_source="laboratory-status.js",
        issuer_target="calibra-ledger",
    )
    test_app = FastAPI()
    test_app.include_router(router, prefix="/v1")
    init_app_state(test_app, settings, InMemoryRequestStore())
    return test_app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create test client for the application."""
    return TestClient(app)


def initiate(client: TestClient, args: list[str] | None = None) -> str:
    response = client.post(
        "/v1/requests",
        json={"args": args if args is not None else ["LAB-001", "ipfs://cert-1"]},
        headers=basic_auth_header("alice"),
    )
    assert response.status_code == 202
    return response.json()["handle"]


def callback(client: TestClient, handle: str, response: str = "", error: str = ""):
    return client.post(
        f"/v1/callbacks/{handle}",
        json={"response": response, "error": error},
        headers=basic_auth_header("oracle"),
    )


class TestAuthentication:
    """HTTP BASIC AUTH is required on every endpoint."""

    def test_missing_credentials_returns_401(self, client: TestClient) -> None:
        response = client.post("/v1/requests", json={"args": ["LAB-001", "ipfs://c"]})
        assert response.status_code == 401

    def test_wrong_password_returns_401(self, client: TestClient) -> None:
        response = client.post(
            "/v1/requests",
            json={"args": ["LAB-001", "ipfs://c"]},
            headers=basic_auth_header("alice", "wrong"),
        )
        assert response.status_code == 401
        assert response.json() == {"detail": "Invalid credentials"}


class TestInitiateEndpoint:
    """Tests for POST /v1/requests."""

    def test_initiate_returns_202_with_handle(self, client: TestClient) -> None:
        response = client.post(
            "/v1/requests",
            json={"args": ["LAB-001", "ipfs://cert-1"]},
            headers=basic_auth_header("alice"),
        )

        assert response.status_code == 202
        body = response.json()
        assert body["state"] == "PENDING"
        assert body["handle"].startswith("0x")

    def test_caller_becomes_recipient(self, client: TestClient) -> None:
        handle = initiate(client)

        response = client.get(f"/v1/requests/{handle}", headers=basic_auth_header("alice"))

        assert response.status_code == 200
        body = response.json()
        assert body["recipient"] == "alice"
        assert body["subject"] == "LAB-001"
        assert body["content_reference"] == "ipfs://cert-1"
        assert body["fulfilled"] is False
        assert body["result"] is None

    @pytest.mark.parametrize("args", [[], ["LAB-001"], ["", "ipfs://c"]])
    def test_invalid_arguments_returns_422(self, client: TestClient, args: list[str]) -> None:
        response = client.post(
            "/v1/requests", json={"args": args}, headers=basic_auth_header("alice")
        )
        assert response.status_code == 422

    def test_paused_returns_503(self, client: TestClient) -> None:
        client.post("/v1/admin/pause", headers=basic_auth_header("root"))

        response = client.post(
            "/v1/requests",
            json={"args": ["LAB-001", "ipfs://c"]},
            headers=basic_auth_header("alice"),
        )

        assert response.status_code == 503
        assert response.json() == {"detail": "Verification requests are paused"}

    def test_unconfigured_source_returns_503(self, client: TestClient, app: FastAPI) -> None:
        app.state.configuration.set_verification_source("")

        response = client.post(
            "/v1/requests",
            json={"args": ["LAB-001", "ipfs://c"]},
            headers=basic_auth_header("alice"),
        )

        assert response.status_code == 503
        assert response.json() == {"detail": "Verification source not configured"}

    def test_unconfigured_issuer_returns_503(self, client: TestClient, app: FastAPI) -> None:
        app.state.configuration.set_issuer(None)

        response = client.post(
            "/v1/requests",
            json={"args": ["LAB-001", "ipfs://c"]},
            headers=basic_auth_header("alice"),
        )

        assert response.status_code == 503
        assert response.json() == {"detail": "Issuer not configured"}
        assert len(app.state.store) == 0

    def test_duplicate_handle_returns_502(self, app: FastAPI) -> None:
        mock_service = MagicMock(spec=CertificationService)
        mock_service.initiate_from_args.side_effect = DuplicateRequestID("0xsame")
        app.dependency_overrides[get_certification_service] = lambda: mock_service
        client = TestClient(app)

        try:
            response = client.post(
                "/v1/requests",
                json={"args": ["LAB-001", "ipfs://c"]},
                headers=basic_auth_header("alice"),
            )
            assert response.status_code == 502
        finally:
            app.dependency_overrides.clear()


class TestGetRequestEndpoint:
    """Tests for GET /v1/requests/{handle}."""

    def test_unknown_handle_returns_404(self, client: TestClient) -> None:
        response = client.get("/v1/requests/0xmissing", headers=basic_auth_header("alice"))
        assert response.status_code == 404

    def test_fulfilled_request_is_retained(self, client: TestClient) -> None:
        handle = initiate(client)
        callback(client, handle, response=encode_uint256(1).hex())

        response = client.get(f"/v1/requests/{handle}", headers=basic_auth_header("alice"))

        assert response.status_code == 200
        assert response.json()["state"] == "FULFILLED"
        assert response.json()["result"] == 1


class TestCallbackEndpoint:
    """Tests for POST /v1/callbacks/{handle}."""

    def test_success_issues_certificate(self, client: TestClient, app: FastAPI) -> None:
        handle = initiate(client)

        response = callback(client, handle, response="0x" + encode_uint256(1).hex())

        assert response.status_code == 200
        assert response.json() == {"handle": handle, "state": "FULFILLED", "outcome": "issued"}
        issuer = app.state.configuration.snapshot().issuer
        assert issuer.owner_of(0) == "alice"
        assert issuer.content_of(0) == "ipfs://cert-1"

    def test_rejection(self, client: TestClient, app: FastAPI) -> None:
        handle = initiate(client)

        response = callback(client, handle, response=encode_uint256(0).hex())

        assert response.json()["outcome"] == "rejected"
        assert app.state.configuration.snapshot().issuer.owner_of(0) is None

    def test_transport_error(self, client: TestClient) -> None:
        handle = initiate(client)

        response = callback(client, handle, error="transport timeout")

        assert response.status_code == 200
        assert response.json()["outcome"] == "transport_failed"

    def test_unknown_handle_returns_404(self, client: TestClient) -> None:
        response = callback(client, "0xunknown")
        assert response.status_code == 404
        assert response.json() == {"detail": "Unexpected request id"}

    def test_second_callback_returns_409(self, client: TestClient) -> None:
        handle = initiate(client)
        callback(client, handle, response=encode_uint256(1).hex())

        response = callback(client, handle, response=encode_uint256(1).hex())

        assert response.status_code == 409
        assert response.json() == {"detail": "Request already fulfilled"}

    def test_non_transport_caller_returns_403(self, client: TestClient) -> None:
        handle = initiate(client)

        response = client.post(
            f"/v1/callbacks/{handle}",
            json={"response": encode_uint256(1).hex(), "error": ""},
            headers=basic_auth_header("alice"),
        )

        assert response.status_code == 403

    def test_non_hex_response_returns_422(self, client: TestClient) -> None:
        handle = initiate(client)
        response = callback(client, handle, response="not-hex")
        assert response.status_code == 422

    def test_wrong_length_response_returns_422(self, client: TestClient) -> None:
        handle = initiate(client)

        response = callback(client, handle, response="01")

        assert response.status_code == 422
        assert "32 bytes" in response.json()["detail"]

    def test_issuance_failure_still_returns_200(self, app: FastAPI) -> None:
        mock_handler = MagicMock(spec=CallbackHandler)
        mock_handler.deliver.return_value = DeliveryOutcome.ISSUANCE_FAILED
        app.dependency_overrides[get_callback_handler] = lambda: mock_handler
        client = TestClient(app)

        try:
            response = callback(client, "0xabc", response=encode_uint256(1).hex())
            assert response.status_code == 200
            assert response.json()["outcome"] == "issuance_failed"
            mock_handler.deliver.assert_called_once_with(
                "oracle", "0xabc", encode_uint256(1), ""
            )
        finally:
            app.dependency_overrides.clear()


class TestAdminEndpoints:
    """Tests for /v1/admin/*."""

    def test_configuration_requires_admin(self, client: TestClient) -> None:
        response = client.get("/v1/admin/configuration", headers=basic_auth_header("alice"))
        assert response.status_code == 403

    def test_show_configuration(self, client: TestClient) -> None:
        response = client.get("/v1/admin/configuration", headers=basic_auth_header("root"))

        assert response.status_code == 200
        assert response.json() == {
            "verification_source": "laboratory-status.js",
            "issuer_target": "calibra-ledger",
            "paused": False,
        }

    def test_set_verification_source(self, client: TestClient) -> None:
        response = client.put(
            "/v1/admin/verification-source",
            json={"source": "v2.js"},
            headers=basic_auth_header("root"),
        )
        assert response.status_code == 200
        assert response.json()["verification_source"] == "v2.js"

    def test_set_issuer(self, client: TestClient) -> None:
        response = client.put(
            "/v1/admin/issuer",
            json={"target": "ledger-v2"},
            headers=basic_auth_header("root"),
        )
        assert response.status_code == 200
        assert response.json()["issuer_target"] == "ledger-v2"

    def test_pause_and_unpause(self, client: TestClient) -> None:
        paused = client.post("/v1/admin/pause", headers=basic_auth_header("root"))
        assert paused.json()["paused"] is True

        resumed = client.post("/v1/admin/unpause", headers=basic_auth_header("root"))
        assert resumed.json()["paused"] is False

    @pytest.mark.parametrize(
        ("method", "path", "body"),
        [
            ("put", "/v1/admin/verification-source", {"source": "x.js"}),
            ("put", "/v1/admin/issuer", {"target": "x"}),
            ("post", "/v1/admin/pause", None),
            ("post", "/v1/admin/unpause", None),
        ],
    )
    def test_non_admin_returns_403(
        self, client: TestClient, method: str, path: str, body: dict | None
    ) -> None:
        response = client.request(method, path, json=body, headers=basic_auth_header("alice"))
        assert response.status_code == 403

    def test_paused_service_still_accepts_callbacks(self, client: TestClient) -> None:
        """Pausing stops new requests only; pending ones can still complete."""
        handle = initiate(client)
        client.post("/v1/admin/pause", headers=basic_auth_header("root"))

        response = callback(client, handle, response=encode_uint256(1).hex())

        assert response.status_code == 200
        assert response.json()["outcome"] == "issued"
