"""
HTTP Tests for the Faucet API

Tests cover:
1. Read endpoints (config, token, balance, eligibility)
2. Claims and the error codes returned on rejection
3. Admin endpoints
4. Transfers and the event feed
"""

import pytest
from fastapi.testclient import TestClient

from faucet.api import create_app
from faucet.clock import ManualClock
from faucet.deployment import deploy
from faucet.events import EventLog
from faucet.models import WEI_PER_TOKEN, FaucetConfig


# Test constants
OWNER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
FAUCET = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
USER1 = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
USER2 = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"
CLAIM_AMOUNT = str(10 * WEI_PER_TOKEN)


def make_client(clock=None):
    clock = clock or ManualClock(start=1_700_000_000)
    deployment = deploy(FaucetConfig(owner=OWNER, faucet_address=FAUCET), clock=clock)
    return TestClient(create_app(deployment)), clock


class TestReadEndpoints:
    """Tests for the read surface."""

    def test_health(self):
        """Test the health check."""
        client, _ = make_client()

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_config_amounts_are_strings(self):
        """Test that base-unit amounts are serialized as strings."""
        client, _ = make_client()

        body = client.get("/config").json()

        assert body["claim_amount"] == CLAIM_AMOUNT
        assert body["lifetime_cap"] == str(100 * WEI_PER_TOKEN)
        assert body["cooldown"] == 86400

    def test_token_info(self):
        """Test token metadata."""
        client, _ = make_client()

        body = client.get("/token").json()

        assert body["name"] == "Faucet Token"
        assert body["symbol"] == "FCT"
        assert body["decimals"] == 18
        assert body["total_supply"] == "0"
        assert body["issuer"] == FAUCET
        assert body["paused"] is False

    def test_fresh_address_eligibility(self):
        """Test eligibility of an address that never claimed."""
        client, _ = make_client()

        body = client.get(f"/users/{USER1}/eligibility").json()

        assert body["can_claim"] is True
        assert body["state"] == "NEVER_CLAIMED"
        assert body["time_until_next_claim"] == 0
        assert body["remaining_allowance"] == str(100 * WEI_PER_TOKEN)


class TestClaimEndpoint:
    """Tests for POST /claims."""

    def test_claim_success(self):
        """Test a successful claim over HTTP."""
        client, _ = make_client()

        response = client.post("/claims", headers={"X-Caller": USER1})

        assert response.status_code == 201
        body = response.json()
        assert body["amount"] == CLAIM_AMOUNT
        assert body["balance"] == CLAIM_AMOUNT
        assert body["timestamp"] == 1_700_000_000
        assert body["next_claim_at"] == 1_700_000_000 + 86400

        balance = client.get(f"/users/{USER1}/balance").json()
        assert balance["balance"] == CLAIM_AMOUNT

    def test_cooldown_returns_429(self):
        """Test the cooldown error code and Retry-After header."""
        client, clock = make_client()
        client.post("/claims", headers={"X-Caller": USER1})
        clock.advance(60)

        response = client.post("/claims", headers={"X-Caller": USER1})

        assert response.status_code == 429
        assert response.headers["Retry-After"] == str(86400 - 60)
        assert response.json()["detail"]["code"] == "CooldownActive"

    def test_missing_caller_header(self):
        """Test that the caller header is required."""
        client, _ = make_client()

        response = client.post("/claims")

        assert response.status_code == 422

    def test_paused_returns_503(self):
        """Test the paused error code."""
        client, _ = make_client()
        client.post("/admin/pause", json={"paused": True}, headers={"X-Caller": OWNER})

        response = client.post("/claims", headers={"X-Caller": USER1})

        assert response.status_code == 503
        assert response.json()["detail"]["code"] == "FaucetPaused"


class TestAdminEndpoints:
    """Tests for owner-only endpoints."""

    def test_owner_pauses_and_resumes(self):
        """Test toggling the pause switch."""
        client, _ = make_client()

        assert client.post("/admin/pause", json={"paused": True}, headers={"X-Caller": OWNER}).json() == {"paused": True}
        assert client.get("/token").json()["paused"] is True
        assert client.post("/admin/pause", json={"paused": False}, headers={"X-Caller": OWNER}).json() == {"paused": False}

    def test_non_owner_forbidden(self):
        """Test that strangers get 403 on admin endpoints."""
        client, _ = make_client()

        pause = client.post("/admin/pause", json={"paused": True}, headers={"X-Caller": USER1})
        issuer = client.post("/admin/issuer", json={"issuer": USER1}, headers={"X-Caller": USER1})

        assert pause.status_code == 403
        assert pause.json()["detail"]["code"] == "Unauthorized"
        assert issuer.status_code == 403
        assert client.get("/token").json()["issuer"] == FAUCET

    def test_empty_issuer_rejected(self):
        """Test validation of the issuer address."""
        client, _ = make_client()

        response = client.post("/admin/issuer", json={"issuer": ""}, headers={"X-Caller": OWNER})

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "InvalidArgument"


class TestTransfersAndEvents:
    """Tests for transfers and the event feed."""

    def test_transfer_between_addresses(self):
        """Test sending claimed tokens to another address."""
        client, _ = make_client()
        client.post("/claims", headers={"X-Caller": USER1})

        response = client.post(
            "/transfers",
            json={"to": USER2, "amount": str(5 * WEI_PER_TOKEN)},
            headers={"X-Caller": USER1},
        )

        assert response.status_code == 200
        assert response.json()["balance"] == str(5 * WEI_PER_TOKEN)
        assert client.get(f"/users/{USER2}/balance").json()["balance"] == str(5 * WEI_PER_TOKEN)

    def test_overdrawn_transfer_returns_409(self):
        """Test transferring more than the balance."""
        client, _ = make_client()

        response = client.post("/transfers", json={"to": USER2, "amount": "1"}, headers={"X-Caller": USER1})

        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "InsufficientBalance"

    def test_event_feed(self):
        """Test the event listing after a claim."""
        client, _ = make_client()
        client.post("/claims", headers={"X-Caller": USER1})

        body = client.get("/events").json()
        names = [e["name"] for e in body["events"]]

        assert names == ["IssuerUpdated", "Transfer", "Claimed"]
        assert body["total_count"] == 3

        claimed = client.get("/events", params={"name": "Claimed"}).json()
        assert claimed["events"][0]["identity"] == USER1
        assert claimed["events"][0]["amount"] == CLAIM_AMOUNT

    def test_negative_paging_rejected(self):
        """Test that the event feed refuses negative limit and offset."""
        client, _ = make_client()

        assert client.get("/events", params={"limit": -1}).status_code == 422
        assert client.get("/events", params={"offset": -1}).status_code == 422

        with pytest.raises(ValueError):
            EventLog().history(limit=-1)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
