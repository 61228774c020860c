"""
Unit tests for HTTP and WebSocket endpoints.

The TestClient is used without its context manager, so the background
tick loop never runs and session timers stay put.
"""

import pytest
from fastapi.testclient import TestClient

from reverse_auction.api.app import create_app
from reverse_auction.config import Settings


@pytest.fixture
def client() -> TestClient:
    """Client for an app whose sessions accept bids immediately."""
    return TestClient(create_app(Settings(start_countdown=0)))


def join(ws, session_id: str = "lot-1", user_id: str = "alice", username: str = "Alice") -> None:
    ws.send_json({"type": "join", "session_id": session_id, "user_id": user_id, "username": username})


class TestHttpEndpoints:
    """Test health and session summary routes."""

    def test_health_empty(self, client: TestClient) -> None:
        """Test health check with no sessions."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "version": "0.1.0",
            "sessions": 0,
            "active_sessions": 0,
        }

    def test_unknown_session_404(self, client: TestClient) -> None:
        """Test that an unknown session id maps to 404 with an error body."""
        response = client.get("/api/sessions/missing")

        assert response.status_code == 404
        assert response.json()["code"] == "UNKNOWN_SESSION"

    def test_summaries_after_join(self, client: TestClient) -> None:
        """Test that joined sessions appear in summaries and health counts."""
        with client.websocket_connect("/ws") as ws:
            join(ws)
            ws.receive_json()
            ws.receive_json()
            ws.send_json({"type": "place_bid", "session_id": "lot-1", "amount": 900})
            ws.receive_json()
            ws.receive_json()

            summaries = client.get("/api/sessions").json()
            snapshot = client.get("/api/sessions/lot-1").json()
            health = client.get("/health").json()

        assert summaries == [
            {
                "session_id": "lot-1",
                "state": "active",
                "participants": 1,
                "active_users": 1,
                "bids": 1,
                "current_bid": 900.0,
            }
        ]
        assert snapshot["leaderboard"][0]["amount"] == 900.0
        assert health["sessions"] == 1
        assert health["active_sessions"] == 1


class TestWebSocket:
    """Test the auction WebSocket protocol."""

    def test_join_receives_state(self, client: TestClient) -> None:
        """Test that a joining client gets the snapshot then the user count."""
        with client.websocket_connect("/ws") as ws:
            join(ws)
            state = ws.receive_json()
            users = ws.receive_json()

        assert state["event"] == "auction_state"
        assert state["data"]["is_active"] is True
        assert state["data"]["current_bid"] == 1000.0
        assert users == {"event": "active_users", "data": {"session_id": "lot-1", "active_users": 1}}

    def test_bid_flow(self, client: TestClient) -> None:
        """Test accepted and rejected bids over the socket."""
        with client.websocket_connect("/ws") as ws:
            join(ws)
            ws.receive_json()
            ws.receive_json()

            ws.send_json({"type": "place_bid", "session_id": "lot-1", "amount": 900})
            update = ws.receive_json()
            state = ws.receive_json()

            ws.send_json({"type": "place_bid", "session_id": "lot-1", "amount": 950})
            error = ws.receive_json()

        assert update["event"] == "bid_update"
        assert update["data"]["bid"]["amount"] == 900.0
        assert update["data"]["cooldown_remaining"] == 30
        assert state["data"]["current_bid"] == 900.0
        assert error["event"] == "bid_error"
        assert error["data"]["code"] == "BID_TOO_HIGH"

    def test_broadcast_reaches_other_viewers(self, client: TestClient) -> None:
        """Test that bids by one viewer are broadcast to another."""
        with client.websocket_connect("/ws") as alice, client.websocket_connect("/ws") as bob:
            join(alice)
            alice.receive_json()
            alice.receive_json()
            join(bob, user_id="bob", username="Bob")
            bob.receive_json()
            assert bob.receive_json()["data"]["active_users"] == 2
            assert alice.receive_json()["data"]["active_users"] == 2

            bob.send_json({"type": "place_bid", "session_id": "lot-1", "amount": 800})
            update = alice.receive_json()

        assert update["event"] == "bid_update"
        assert update["data"]["bid"]["bidder_user_id"] == "bob"

    def test_same_user_counts_once(self, client: TestClient) -> None:
        """Test that two sockets for one user report one active user."""
        with client.websocket_connect("/ws") as tab1, client.websocket_connect("/ws") as tab2:
            join(tab1)
            tab1.receive_json()
            tab1.receive_json()
            join(tab2)
            tab2.receive_json()
            users = tab2.receive_json()

        assert users["data"]["active_users"] == 1

    def test_disconnect_updates_count(self, client: TestClient) -> None:
        """Test that closing a socket leaves its sessions."""
        with client.websocket_connect("/ws") as alice:
            join(alice)
            alice.receive_json()
            alice.receive_json()
            with client.websocket_connect("/ws") as bob:
                join(bob, user_id="bob", username="Bob")
                bob.receive_json()
                bob.receive_json()
                alice.receive_json()
            users = alice.receive_json()

        assert users == {"event": "active_users", "data": {"session_id": "lot-1", "active_users": 1}}

    def test_malformed_frame(self, client: TestClient) -> None:
        """Test that invalid frames produce a command_error and keep the socket open."""
        with client.websocket_connect("/ws") as ws:
            ws.send_text("not json")
            error = ws.receive_json()
            ws.send_json({"type": "heartbeat"})
            ack = ws.receive_json()

        assert error["event"] == "command_error"
        assert error["data"]["code"] == "INVALID_COMMAND"
        assert ack["event"] == "heartbeat_ack"

    def test_bid_on_unknown_session(self, client: TestClient) -> None:
        """Test that bidding without joining reports UNKNOWN_SESSION."""
        with client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "place_bid", "session_id": "nope", "amount": 5})
            error = ws.receive_json()

        assert error["data"]["code"] == "UNKNOWN_SESSION"

    def test_leave(self, client: TestClient) -> None:
        """Test that leave removes the viewer from the session."""
        with client.websocket_connect("/ws") as ws:
            join(ws)
            ws.receive_json()
            ws.receive_json()
            ws.send_json({"type": "leave", "session_id": "lot-1"})
            ws.send_json({"type": "heartbeat"})
            ack = ws.receive_json()

            snapshot = client.get("/api/sessions/lot-1").json()

        assert ack["event"] == "heartbeat_ack"
        assert snapshot["active_users"] == 0
