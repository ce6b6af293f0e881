"""
Unit tests for server exception handlers.

Covers the mapping of domain errors to status codes and the catch-all 500
handler.
"""

import json
from unittest.mock import Mock, patch

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from httpx import ASGITransport, AsyncClient

from level.core.errors import FieldError, ForbiddenError, LevelError, NotFoundError, UnauthorizedError, ValidationError
from level.server.exception_handlers import (
    domain_exception_handler,
    global_exception_handler,
    setup_exception_handlers,
)


@pytest.fixture
def mock_request():
    request = Mock(spec=Request)
    request.method = "POST"
    request.url.path = "/api/v1/users"
    request.query_params = {}
    request.client = Mock()
    request.client.host = "127.0.0.1"
    return request


def _body(response: JSONResponse) -> dict:
    return json.loads(response.body.decode())


class TestDomainExceptionHandler:
    @pytest.mark.parametrize(
        "exc,status_code",
        [
            (UnauthorizedError(), 401),
            (ForbiddenError(), 403),
            (NotFoundError("Space"), 404),
            (ValidationError.single("slug", "is invalid"), 422),
            (LevelError("odd"), 400),
        ],
    )
    async def test_status_codes(self, mock_request, exc, status_code):
        response = await domain_exception_handler(mock_request, exc)

        assert response.status_code == status_code
        assert _body(response)["detail"] == str(exc)

    async def test_validation_errors_are_listed(self, mock_request):
        exc = ValidationError([FieldError("email", "is invalid"), FieldError("handle", "can't be blank")])

        response = await domain_exception_handler(mock_request, exc)

        assert _body(response)["errors"] == [
            {"attribute": "email", "message": "is invalid"},
            {"attribute": "handle", "message": "can't be blank"},
        ]

    async def test_unauthorized_challenges_bearer(self, mock_request):
        response = await domain_exception_handler(mock_request, UnauthorizedError())

        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert _body(response) == {"detail": "You must be logged in"}

    async def test_not_found_has_no_challenge(self, mock_request):
        response = await domain_exception_handler(mock_request, NotFoundError("Post"))

        assert "WWW-Authenticate" not in response.headers
        assert _body(response) == {"detail": "Post not found"}


class TestGlobalExceptionHandler:
    async def test_logs_error(self, mock_request):
        exc = ValueError("Test error")

        with patch("level.server.exception_handlers.global_handler.logger") as mock_logger:
            await global_exception_handler(mock_request, exc)

        mock_logger.error.assert_called_once()
        call_args = mock_logger.error.call_args
        assert "Unhandled exception" in call_args[0][0]
        assert call_args[1]["extra"]["error_type"] == "ValueError"
        assert call_args[1]["extra"]["client"] == "127.0.0.1"

    async def test_returns_500_with_error_id(self, mock_request):
        with patch("level.server.exception_handlers.global_handler.logger"):
            response = await global_exception_handler(mock_request, RuntimeError("boom"))

        assert isinstance(response, JSONResponse)
        assert response.status_code == 500
        body = _body(response)
        assert body["detail"] == "Internal server error"
        assert body["error_type"] == "RuntimeError"
        assert len(body["error_id"]) == 12

    async def test_error_ids_are_unique(self, mock_request):
        with patch("level.server.exception_handlers.global_handler.logger"):
            first = await global_exception_handler(mock_request, RuntimeError("a"))
            second = await global_exception_handler(mock_request, RuntimeError("b"))

        assert _body(first)["error_id"] != _body(second)["error_id"]

    async def test_missing_client(self, mock_request):
        mock_request.client = None

        with patch("level.server.exception_handlers.global_handler.logger") as mock_logger:
            await global_exception_handler(mock_request, RuntimeError("boom"))

        assert mock_logger.error.call_args[1]["extra"]["client"] == "unknown"


class TestSetupExceptionHandlers:
    async def test_registered_on_app(self):
        app = FastAPI()
        setup_exception_handlers(app)

        @app.get("/missing")
        async def missing():
            raise NotFoundError("Thing")

        @app.get("/broken")
        async def broken():
            raise RuntimeError("boom")

        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://localhost") as client:
            missing_response = await client.get("/missing")
            broken_response = await client.get("/broken")

        assert missing_response.status_code == 404
        assert missing_response.json() == {"detail": "Thing not found"}
        assert broken_response.status_code == 500
        assert broken_response.json()["detail"] == "Internal server error"
