"""
Unit tests for the request logging middleware.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import Request
from starlette.responses import Response

from level.server.middleware import RequestLoggingMiddleware


@pytest.fixture
def mock_request():
    request = AsyncMock(spec=Request)
    request.method = "POST"
    request.url.path = "/graphql"
    request.state = MagicMock()
    return request


class TestRequestLoggingMiddleware:
    async def test_records_successful_request(self, mock_request):
        async def call_next(request):
            return Response(content="ok", status_code=200)

        middleware = RequestLoggingMiddleware(app=AsyncMock())

        with patch("level.server.middleware.request_logging.log_api_request") as mock_log:
            response = await middleware.dispatch(mock_request, call_next)

        assert response.status_code == 200
        assert float(response.headers["X-Process-Time"]) >= 0
        mock_log.assert_called_once()
        assert mock_log.call_args[1]["method"] == "POST"
        assert mock_log.call_args[1]["path"] == "/graphql"
        assert mock_log.call_args[1]["status_code"] == 200

    async def test_slow_request_warns(self, mock_request):
        async def call_next(request):
            return Response(status_code=204)

        middleware = RequestLoggingMiddleware(app=AsyncMock())

        with (
            patch("level.server.middleware.request_logging.log_api_request"),
            patch("level.server.middleware.request_logging.SLOW_REQUEST_MS", -1),
            patch("level.server.middleware.request_logging.logger") as mock_logger,
        ):
            await middleware.dispatch(mock_request, call_next)

        mock_logger.warning.assert_called_once()
        assert "Slow API request" in mock_logger.warning.call_args[0][0]

    async def test_failed_request_is_recorded_and_reraised(self, mock_request):
        async def call_next(request):
            raise RuntimeError("boom")

        middleware = RequestLoggingMiddleware(app=AsyncMock())

        with (
            patch("level.server.middleware.request_logging.log_api_request") as mock_log,
            patch("level.server.middleware.request_logging.logger") as mock_logger,
        ):
            with pytest.raises(RuntimeError):
                await middleware.dispatch(mock_request, call_next)

        assert mock_log.call_args[1]["status_code"] == 500
        mock_logger.error.assert_called_once()
