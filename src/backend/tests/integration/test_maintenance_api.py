"""
Integration tests for the maintenance API.

Listing is public; create, update, delete and resolve need a bearer token.
"""

from datetime import timedelta

import pytest
import pytest_asyncio

from db import utcnow
from tests.factories import MaintenanceFactory

NEW_TICKET = {
    "title": "Replace float sensor",
    "machineId": "VB-0001",
    "location": "Barangay 171",
    "scheduledDate": "2026-11-02T08:30:00+08:00",
    "priority": "High",
}


@pytest_asyncio.fixture
async def ticket(db_session):
    ticket = MaintenanceFactory.create(title="Filter cleaning")
    db_session.add(ticket)
    await db_session.commit()
    await db_session.refresh(ticket)
    return ticket


class TestListMaintenance:
    """Tests for GET /api/maintenance."""

    @pytest.mark.asyncio
    async def test_list_is_public(self, client, ticket):
        response = await client.get("/api/maintenance")

        assert response.status_code == 200
        assert [t["title"] for t in response.json()["data"]] == ["Filter cleaning"]

    @pytest.mark.asyncio
    async def test_latest_scheduled_first(self, client, db_session):
        now = utcnow()
        for days, title in ((1, "soon"), (30, "later"), (7, "next week")):
            db_session.add(MaintenanceFactory.create(title=title, scheduled_date=now + timedelta(days=days)))
        await db_session.commit()

        response = await client.get("/api/maintenance")

        assert [t["title"] for t in response.json()["data"]] == ["later", "next week", "soon"]

    @pytest.mark.asyncio
    async def test_filter_by_status(self, client, db_session):
        db_session.add(MaintenanceFactory.create(title="open"))
        db_session.add(MaintenanceFactory.create(title="done", status="Resolved"))
        await db_session.commit()

        response = await client.get("/api/maintenance", params={"status": "Resolved"})

        assert [t["title"] for t in response.json()["data"]] == ["done"]

    @pytest.mark.asyncio
    async def test_invalid_status_filter(self, client):
        response = await client.get("/api/maintenance", params={"status": "Pending"})

        assert response.status_code == 400


class TestCreateMaintenance:
    """Tests for POST /api/maintenance."""

    @pytest.mark.asyncio
    async def test_create(self, client, verified_user, auth_headers):
        response = await client.post("/api/maintenance", json=NEW_TICKET, headers=auth_headers)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["status"] == "Scheduled"
        assert data["priority"] == "High"
        assert data["createdBy"] == str(verified_user.id)
        # Stored and returned in UTC
        assert data["scheduledDate"] == "2026-11-02T00:30:00Z"

    @pytest.mark.asyncio
    async def test_create_defaults_to_low_priority(self, client, auth_headers):
        body = {"title": "Inspect valve", "machineId": "VB-0002"}

        response = await client.post("/api/maintenance", json=body, headers=auth_headers)

        assert response.json()["data"]["priority"] == "Low"

    @pytest.mark.asyncio
    async def test_create_requires_auth(self, client):
        response = await client.post("/api/maintenance", json=NEW_TICKET)

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_create_requires_title(self, client, auth_headers):
        body = {k: v for k, v in NEW_TICKET.items() if k != "title"}

        response = await client.post("/api/maintenance", json=body, headers=auth_headers)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_create_rejects_unknown_priority(self, client, auth_headers):
        response = await client.post(
            "/api/maintenance", json={**NEW_TICKET, "priority": "Urgent"}, headers=auth_headers
        )

        assert response.status_code == 400


class TestChangeMaintenance:
    """Tests for update, resolve and delete."""

    @pytest.mark.asyncio
    async def test_update(self, client, ticket, auth_headers):
        response = await client.put(
            f"/api/maintenance/{ticket.id}",
            json={"priority": "Medium", "status": "Canceled"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["priority"] == "Medium"
        assert data["status"] == "Canceled"
        assert data["title"] == "Filter cleaning"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["title", "machineId", "priority", "status"])
    async def test_update_rejects_null_for_required_field(self, client, ticket, auth_headers, field):
        response = await client.put(
            f"/api/maintenance/{ticket.id}", json={field: None}, headers=auth_headers
        )
        listing = await client.get("/api/maintenance")

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert listing.json()["data"][0]["title"] == "Filter cleaning"

    @pytest.mark.asyncio
    async def test_update_allows_clearing_location(self, client, ticket, auth_headers):
        response = await client.put(
            f"/api/maintenance/{ticket.id}", json={"location": None}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["data"]["location"] is None

    @pytest.mark.asyncio
    async def test_update_unknown_ticket(self, client, auth_headers):
        response = await client.put(
            "/api/maintenance/00000000-0000-0000-0000-000000000000",
            json={"priority": "Medium"},
            headers=auth_headers,
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Maintenance record not found"

    @pytest.mark.asyncio
    async def test_resolve(self, client, ticket, auth_headers):
        response = await client.post(f"/api/maintenance/{ticket.id}/resolve", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "Resolved"

    @pytest.mark.asyncio
    async def test_delete(self, client, ticket, auth_headers):
        response = await client.delete(f"/api/maintenance/{ticket.id}", headers=auth_headers)
        listing = await client.get("/api/maintenance")

        assert response.status_code == 200
        assert listing.json()["data"] == []

    @pytest.mark.asyncio
    async def test_changes_require_auth(self, client, ticket):
        update = await client.put(f"/api/maintenance/{ticket.id}", json={"priority": "High"})
        resolve = await client.post(f"/api/maintenance/{ticket.id}/resolve")
        delete = await client.delete(f"/api/maintenance/{ticket.id}")

        assert update.status_code == resolve.status_code == delete.status_code == 401

    @pytest.mark.asyncio
    async def test_malformed_ticket_id(self, client, auth_headers):
        response = await client.delete("/api/maintenance/not-a-uuid", headers=auth_headers)

        assert response.status_code == 400
