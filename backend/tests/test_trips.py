"""
Integration tests for the trip lifecycle.

start -> location -> sos -> complete, ownership scoping, state guards and
the SMS side effect of every transition.
"""

import logging

import pytest
from sqlalchemy import select, func

from backend.app.core.config import settings
from backend.app.models.location_update import LocationUpdate
from backend.app.models.trip import Trip

MISSING_TRIP = "00000000-0000-0000-0000-000000000000"


async def _history_count(db_session, trip_id):
    return await db_session.scalar(
        select(func.count()).select_from(LocationUpdate).where(LocationUpdate.trip_id == trip_id)
    )


@pytest.mark.asyncio
async def test_start_trip(client, user, start_payload, sms):
    response = await client.post("/api/trips/start", json=start_payload, headers=user["headers"])
    assert response.status_code == 201
    data = response.json()

    assert data["id"]
    assert data["activityType"] == "hiking"
    assert data["status"] == "active"
    assert data["endTime"] is None
    assert data["lastLatitude"] == "40.7128"
    assert data["lastLongitude"] == "-74.0060"
    assert data["startLatitude"] == "40.7128"
    assert data["startLongitude"] == "-74.0060"
    assert data["emergencyContact"] == {"name": "John Doe", "phoneNumber": "+1234567890"}

    assert len(sms.sent) == 1
    to_number, body = sms.sent[0]
    assert to_number == "+1234567890"
    assert body.startswith("SAFETY ALERT: Trip started")
    assert "Activity: hiking" in body
    assert "Clothing: Red jacket" in body
    assert "Vehicle: Blue pickup" in body
    assert "40.7128, -74.0060" in body


@pytest.mark.asyncio
async def test_start_trip_accepts_numeric_coordinates(client, user, start_payload):
    start_payload.update({"latitude": 40.758, "longitude": -73.9855})
    response = await client.post("/api/trips/start", json=start_payload, headers=user["headers"])
    assert response.status_code == 201
    assert response.json()["lastLatitude"] == "40.7580"
    assert response.json()["lastLongitude"] == "-73.9855"


@pytest.mark.asyncio
async def test_start_trip_with_foreign_contact_fails(client, other_user, start_payload, db_session, sms):
    response = await client.post("/api/trips/start", json=start_payload, headers=other_user["headers"])
    assert response.status_code == 400
    assert response.json()["error"] == "Emergency contact not found"

    assert await db_session.scalar(select(func.count()).select_from(Trip)) == 0
    assert sms.sent == []


@pytest.mark.asyncio
async def test_start_trip_missing_fields(client, user, contact):
    response = await client.post(
        "/api/trips/start",
        json={"emergencyContactId": contact["id"], "activityType": "hiking"},
        headers=user["headers"],
    )
    assert response.status_code == 400
    assert "error" in response.json()


@pytest.mark.asyncio
async def test_start_trip_rejects_out_of_range_coordinates(client, user, start_payload):
    start_payload["latitude"] = "91.0"
    response = await client.post("/api/trips/start", json=start_payload, headers=user["headers"])
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_second_active_trip_is_rejected(client, user, start_payload, active_trip, caplog):
    caplog.set_level(logging.WARNING, logger="trailsafe.errors")
    response = await client.post("/api/trips/start", json=start_payload, headers=user["headers"])
    assert response.status_code == 409
    assert response.json() == {
        "error": "You already have an active trip. Complete it before starting another.",
        "error_code": "ERR_CONFLICT_001",
    }

    # The conflicting trip id goes to the log, not the response body
    records = [r for r in caplog.records if getattr(r, "error_code", None) == "ERR_CONFLICT_001"]
    assert records[-1].details == {"active_trip_id": active_trip["id"]}


@pytest.mark.asyncio
async def test_second_active_trip_allowed_when_not_enforced(client, user, start_payload, active_trip, monkeypatch):
    monkeypatch.setattr(settings, "enforce_single_active_trip", False)
    response = await client.post("/api/trips/start", json=start_payload, headers=user["headers"])
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_get_active_trip(client, user, active_trip):
    response = await client.get("/api/trips/active", headers=user["headers"])
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == active_trip["id"]
    assert data["status"] == "active"
    assert data["emergencyContact"]["name"] == "John Doe"


@pytest.mark.asyncio
async def test_timestamps_are_utc_on_every_read(client, user, active_trip):
    response = await client.put(
        f"/api/trips/{active_trip['id']}/location",
        json={"latitude": "40.7580", "longitude": "-73.9855"},
        headers=user["headers"],
    )
    updated = response.json()

    fetched = (await client.get(f"/api/trips/{active_trip['id']}", headers=user["headers"])).json()
    assert fetched["startTime"] == active_trip["startTime"]
    assert fetched["lastLocationUpdate"] == updated["lastLocationUpdate"]
    assert fetched["startTime"].endswith("Z")

    history = (await client.get(f"/api/trips/{active_trip['id']}/locations", headers=user["headers"])).json()
    assert history[0]["timestamp"] == updated["lastLocationUpdate"]

    contacts = (await client.get("/api/emergency-contacts", headers=user["headers"])).json()
    assert contacts[0]["createdAt"].endswith("Z")


@pytest.mark.asyncio
async def test_get_active_trip_none(client, user):
    response = await client.get("/api/trips/active", headers=user["headers"])
    assert response.status_code == 200
    assert response.json() is None


@pytest.mark.asyncio
async def test_update_location(client, user, active_trip, db_session, sms):
    response = await client.put(
        f"/api/trips/{active_trip['id']}/location",
        json={"latitude": "40.75800000", "longitude": "-73.98550000"},
        headers=user["headers"],
    )
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == active_trip["id"]
    assert data["lastLatitude"] == "40.7580"
    assert data["lastLongitude"] == "-73.9855"
    # Start position is untouched
    assert data["startLatitude"] == "40.7128"

    assert await _history_count(db_session, active_trip["id"]) == 1

    body = sms.bodies()[-1]
    assert body.startswith("Location update: 40.7580, -73.9855")
    assert "Clothing" not in body


@pytest.mark.asyncio
async def test_location_history_endpoint(client, user, active_trip):
    for lat, lng in (("40.7580", "-73.9855"), ("40.7600", "-73.9800")):
        await client.put(
            f"/api/trips/{active_trip['id']}/location",
            json={"latitude": lat, "longitude": lng},
            headers=user["headers"],
        )

    response = await client.get(f"/api/trips/{active_trip['id']}/locations", headers=user["headers"])
    assert response.status_code == 200
    points = [(p["latitude"], p["longitude"]) for p in response.json()]
    assert points == [("40.7580", "-73.9855"), ("40.7600", "-73.9800")]


@pytest.mark.asyncio
async def test_trigger_sos(client, user, active_trip, db_session, sms):
    response = await client.put(
        f"/api/trips/{active_trip['id']}/sos",
        json={"latitude": "40.7500", "longitude": "-73.9900"},
        headers=user["headers"],
    )
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "sos"
    assert data["lastLatitude"] == "40.7500"
    assert data["lastLongitude"] == "-73.9900"

    assert await _history_count(db_session, active_trip["id"]) == 1

    to_number, body = sms.sent[-1]
    assert to_number == "+1234567890"
    assert "SOS EMERGENCY ALERT" in body
    assert "URGENT" in body
    assert "Clothing: Red jacket" in body
    assert "Vehicle: Blue pickup" in body
    assert "Current Location: 40.7500, -73.9900" in body

    # An SOS trip is no longer the active trip
    response = await client.get("/api/trips/active", headers=user["headers"])
    assert response.json() is None


@pytest.mark.asyncio
async def test_complete_trip(client, user, active_trip, sms):
    response = await client.put(f"/api/trips/{active_trip['id']}/complete", json={}, headers=user["headers"])
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == active_trip["id"]
    assert data["status"] == "completed"
    assert data["endTime"] is not None

    body = sms.bodies()[-1]
    assert body == "Trip completed and tracking stopped."


@pytest.mark.asyncio
async def test_completed_trip_refuses_further_transitions(client, user, active_trip, db_session):
    await client.put(f"/api/trips/{active_trip['id']}/complete", json={}, headers=user["headers"])

    response = await client.put(
        f"/api/trips/{active_trip['id']}/location",
        json={"latitude": "40.7580", "longitude": "-73.9855"},
        headers=user["headers"],
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Trip is not active"

    response = await client.put(
        f"/api/trips/{active_trip['id']}/sos",
        json={"latitude": "40.7580", "longitude": "-73.9855"},
        headers=user["headers"],
    )
    assert response.status_code == 400

    response = await client.put(f"/api/trips/{active_trip['id']}/complete", json={}, headers=user["headers"])
    assert response.status_code == 400

    assert await _history_count(db_session, active_trip["id"]) == 0


@pytest.mark.asyncio
async def test_sos_trip_refuses_location_updates(client, user, active_trip):
    await client.put(
        f"/api/trips/{active_trip['id']}/sos",
        json={"latitude": "40.7500", "longitude": "-73.9900"},
        headers=user["headers"],
    )
    response = await client.put(
        f"/api/trips/{active_trip['id']}/location",
        json={"latitude": "40.7580", "longitude": "-73.9855"},
        headers=user["headers"],
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_repeated_sos_sends_fresh_alert(client, user, active_trip, db_session, sms):
    first = await client.put(
        f"/api/trips/{active_trip['id']}/sos",
        json={"latitude": "40.7500", "longitude": "-73.9900"},
        headers=user["headers"],
    )
    second = await client.put(
        f"/api/trips/{active_trip['id']}/sos",
        json={"latitude": "40.7600", "longitude": "-73.9800"},
        headers=user["headers"],
    )
    assert first.status_code == 200
    assert second.status_code == 200
    data = second.json()
    assert data["status"] == "sos"
    assert data["lastLatitude"] == "40.7600"
    assert data["lastLongitude"] == "-73.9800"

    assert await _history_count(db_session, active_trip["id"]) == 2

    sos_bodies = [body for body in sms.bodies() if "SOS EMERGENCY ALERT" in body]
    assert len(sos_bodies) == 2
    assert "Current Location: 40.7500, -73.9900" in sos_bodies[0]
    assert "Current Location: 40.7600, -73.9800" in sos_bodies[1]


@pytest.mark.asyncio
@pytest.mark.parametrize("method, suffix, body", [
    ("put", "location", {"latitude": "40.7580", "longitude": "-73.9855"}),
    ("put", "sos", {"latitude": "40.7580", "longitude": "-73.9855"}),
    ("put", "complete", {}),
    ("get", "locations", None),
])
async def test_unknown_and_foreign_trips_are_not_found(client, user, other_user, active_trip, method, suffix, body):
    kwargs = {"json": body} if body is not None else {}

    response = await getattr(client, method)(f"/api/trips/{MISSING_TRIP}/{suffix}", headers=user["headers"], **kwargs)
    assert response.status_code == 404
    assert response.json()["error"] == "Trip not found"

    response = await getattr(client, method)(
        f"/api/trips/{active_trip['id']}/{suffix}", headers=other_user["headers"], **kwargs
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_trips_are_scoped_to_owner(client, user, other_user, active_trip):
    response = await client.get("/api/trips", headers=other_user["headers"])
    assert response.json() == []

    response = await client.get("/api/trips/active", headers=other_user["headers"])
    assert response.json() is None

    response = await client.get(f"/api/trips/{active_trip['id']}", headers=other_user["headers"])
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_trips_newest_first_and_bounded(client, user, start_payload, monkeypatch):
    monkeypatch.setattr(settings, "recent_trips_limit", 3)
    ids = []
    for activity in ("hiking", "biking", "horseback", "utv"):
        start_payload["activityType"] = activity
        response = await client.post("/api/trips/start", json=start_payload, headers=user["headers"])
        ids.append(response.json()["id"])
        await client.put(f"/api/trips/{ids[-1]}/complete", json={}, headers=user["headers"])

    response = await client.get("/api/trips", headers=user["headers"])
    data = response.json()
    assert [t["id"] for t in data] == list(reversed(ids))[:3]
    assert data[0]["activityType"] == "utv"
    assert data[0]["emergencyContact"] == {"name": "John Doe", "phoneNumber": "+1234567890"}


@pytest.mark.asyncio
async def test_sms_failure_does_not_affect_trip(client, user, start_payload, sms):
    sms.fail = True
    response = await client.post("/api/trips/start", json=start_payload, headers=user["headers"])
    assert response.status_code == 201

    response = await client.get("/api/trips/active", headers=user["headers"])
    assert response.json()["id"]


@pytest.mark.asyncio
async def test_full_trip_scenario(client, user, sms):
    """contact -> start -> location -> sos -> complete leaves one sos trip with an end time."""
    response = await client.post(
        "/api/emergency-contacts",
        json={"name": "John Doe", "phoneNumber": "+1234567890"},
        headers=user["headers"],
    )
    contact_id = response.json()["id"]

    response = await client.post(
        "/api/trips/start",
        json={
            "emergencyContactId": contact_id,
            "activityType": "hiking",
            "latitude": "40.7128",
            "longitude": "-74.0060",
        },
        headers=user["headers"],
    )
    trip_id = response.json()["id"]

    response = await client.put(
        f"/api/trips/{trip_id}/location",
        json={"latitude": "40.7580", "longitude": "-73.9855"},
        headers=user["headers"],
    )
    assert response.status_code == 200

    response = await client.put(
        f"/api/trips/{trip_id}/sos",
        json={"latitude": "40.7500", "longitude": "-73.9900"},
        headers=user["headers"],
    )
    assert response.status_code == 200

    response = await client.put(f"/api/trips/{trip_id}/complete", json={}, headers=user["headers"])
    assert response.status_code == 200

    response = await client.get("/api/trips", headers=user["headers"])
    trips = response.json()
    assert len(trips) == 1
    assert trips[0]["status"] == "sos"
    assert trips[0]["endTime"] is not None
    assert trips[0]["lastLatitude"] == "40.7500"

    response = await client.get(f"/api/trips/{trip_id}/locations", headers=user["headers"])
    assert len(response.json()) == 2

    assert len(sms.sent) == 4


@pytest.mark.asyncio
async def test_trips_require_authentication(client, start_payload):
    assert (await client.get("/api/trips")).status_code == 401
    assert (await client.get("/api/trips/active")).status_code == 401
    response = await client.post("/api/trips/start", json=start_payload)
    assert response.status_code == 401
