"""Results API tests."""

from datetime import timedelta
from unittest.mock import patch

import pytest
from httpx import AsyncClient

from trustlink.models import VerificationSession, VerificationType, utcnow


async def _complete(client: AsyncClient, token: str, *references: tuple[str, str]) -> None:
    await client.post(f"/api/verify/{token}/start")
    await client.post(
        f"/api/verify/{token}/identity",
        json={"id_number": "8001015009087", "full_name": "Jane Doe"},
    )
    for path, reference in references:
        await client.post(f"/api/verify/{token}/{path}", json={"reference": reference})


@pytest.mark.asyncio
async def test_results_before_completion(client: AsyncClient, pending_session: VerificationSession):
    response = await client.get(f"/api/results/{pending_session.session_token}")
    assert response.status_code == 200
    data = response.json()
    assert data["result"] is None
    assert data["fully_verified"] is False
    assert data["badges"] == []
    assert data["session"]["status"] == "pending"


@pytest.mark.asyncio
async def test_results_fully_verified(client: AsyncClient, pending_session: VerificationSession):
    token = pending_session.session_token
    await _complete(client, token, ("property", "ERF 1234"))

    response = await client.get(f"/api/results/{token}")
    assert response.status_code == 200
    data = response.json()
    assert data["fully_verified"] is True
    assert data["result"]["completed_at"] is not None
    assert data["result"]["id_verification_status"] == "verified"
    # Only digests leave the server
    assert data["result"]["id_hash"] != "8001015009087"
    assert len(data["result"]["id_hash"]) == 64
    assert [badge["label"] for badge in data["badges"]] == [
        "ID Verified",
        "Name Match Confirmed",
        "Property Verified",
        "Ownership Confirmed",
    ]


@pytest.mark.asyncio
async def test_results_both_with_vehicle_mismatch(client: AsyncClient, make_session, provider):
    verification = await make_session(verification_type=VerificationType.BOTH)
    token = verification.session_token
    provider.vehicle_match = False
    await _complete(client, token, ("property", "ERF 1234"), ("vehicle", "VIN123"))

    response = await client.get(f"/api/results/{token}")
    data = response.json()
    assert data["fully_verified"] is False
    labels = [badge["label"] for badge in data["badges"]]
    assert "Vehicle Verified" in labels
    assert "Vehicle Ownership Not Confirmed" in labels


@pytest.mark.asyncio
async def test_results_name_mismatch(client: AsyncClient, make_session, provider):
    verification = await make_session(verification_type=VerificationType.ID_NUMBER)
    provider.name_match = False
    await _complete(client, verification.session_token)

    data = (await client.get(f"/api/results/{verification.session_token}")).json()
    assert data["fully_verified"] is False
    assert {"check": "identity", "label": "Name Mismatch", "passed": False} in data["badges"]


@pytest.mark.asyncio
async def test_results_view_is_idempotent(client: AsyncClient, pending_session: VerificationSession):
    token = pending_session.session_token
    await _complete(client, token, ("property", "ERF 1234"))

    first = (await client.get(f"/api/results/{token}")).json()
    second = (await client.get(f"/api/results/{token}")).json()

    assert first == second


@pytest.mark.asyncio
async def test_results_ignore_expiry(client: AsyncClient, make_session):
    verification = await make_session(expires_in=timedelta(minutes=-10))
    response = await client.get(f"/api/results/{verification.session_token}")
    assert response.status_code == 200
    assert response.json()["session"]["expired"] is True


@pytest.mark.asyncio
async def test_results_not_found(client: AsyncClient):
    response = await client.get("/api/results/unknown-token")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_completed_results_unchanged_after_expiry(
    client: AsyncClient, pending_session: VerificationSession
):
    token = pending_session.session_token
    await _complete(client, token, ("property", "ERF 1234"))
    before = (await client.get(f"/api/results/{token}")).json()

    later = utcnow() + timedelta(days=1)
    with patch("trustlink.services.lifecycle.utcnow", return_value=later):
        after = (await client.get(f"/api/results/{token}")).json()

    assert after == before
    assert after["session"]["expired"] is False
