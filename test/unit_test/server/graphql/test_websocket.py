import json

import pytest
from starlette.testclient import TestClient
from strawberry.subscriptions import GRAPHQL_TRANSPORT_WS_PROTOCOL, GRAPHQL_WS_PROTOCOL

from level.core.database.session import get_session
from level.server.main import app
from level.server.services import Broker, get_broker


@pytest.fixture
def ws_client():
    """Synchronous client for the WebSocket transport; no lifespan, no database access."""

    async def no_session():
        yield None

    app.dependency_overrides[get_session] = no_session
    app.dependency_overrides[get_broker] = lambda: Broker(queue_capacity=5)
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_graphql_transport_ws_requires_a_token(ws_client):
    with ws_client.websocket_connect("/graphql", subprotocols=[GRAPHQL_TRANSPORT_WS_PROTOCOL]) as ws:
        ws.send_json({"type": "connection_init", "payload": {}})
        assert ws.receive_json()["type"] == "connection_ack"

        ws.send_json({"id": "1", "type": "subscribe", "payload": {"query": "subscription { userEvents { type } }"}})
        message = ws.receive_json()

        assert message["id"] == "1"
        assert message["type"] in ("next", "error")
        assert "You must be logged in" in json.dumps(message)


def test_legacy_graphql_ws_protocol_is_accepted(ws_client):
    with ws_client.websocket_connect("/graphql", subprotocols=[GRAPHQL_WS_PROTOCOL]) as ws:
        ws.send_json({"type": "connection_init", "payload": {}})
        assert ws.receive_json()["type"] == "connection_ack"
