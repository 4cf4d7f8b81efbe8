import json
from decimal import Decimal

import pytest

from phm.services.observations import get_extractor
from phm.services.transcription_stream import format_sse, transcription_events


def _transcript(client, auth, visit, **overrides):
    body = {
        "visitSessionId": visit["id"],
        "transcriptText": "The customer has a Worcester Bosch boiler, about fifteen years old.",
        "confidence": "0.92",
        "durationSeconds": 41,
    }
    body.update(overrides)
    r = client.post("/api/transcription/upload", json=body, headers=auth)
    assert r.status_code == 201, r.text
    return r.json()["data"]


def test_upload_transcription(client, auth, visit):
    t = _transcript(client, auth, visit)
    assert t["language"] == "en-GB"
    assert Decimal(t["confidence"]) == Decimal("0.92")
    assert t["processedAt"]

    r = client.get(f"/api/visits/{visit['id']}/transcriptions", headers=auth)
    assert [row["id"] for row in r.json()["data"]] == [t["id"]]


def test_transcription_confidence_range(client, auth, visit):
    r = client.post(
        "/api/transcription/upload",
        json={"visitSessionId": visit["id"], "transcriptText": "x", "confidence": "1.5"},
        headers=auth,
    )
    assert r.status_code == 400


def test_transcription_on_foreign_visit(client, other_auth, visit):
    r = client.post(
        "/api/transcription/upload",
        json={"visitSessionId": visit["id"], "transcriptText": "hello"},
        headers=other_auth,
    )
    assert r.status_code == 404


def test_extract_observations(client, auth, visit):
    t = _transcript(client, auth, visit)
    r = client.post(
        "/api/transcription/extract-observations",
        json={"visitSessionId": visit["id"], "transcriptionId": t["id"]},
        headers=auth,
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["message"] == "Extracted 2 observations"
    assert body["data"]["count"] == 2
    values = {o["key"]: o["value"] for o in body["data"]["observations"]}
    assert values["existing_boiler_manufacturer"] == "Worcester Bosch"
    assert all(o["transcriptionId"] == t["id"] for o in body["data"]["observations"])

    r = client.get(f"/api/transcription/observations/{visit['id']}", headers=auth)
    assert len(r.json()["data"]) == 2


def test_extract_with_transcript_from_another_visit(client, auth, customer, visit):
    other_visit = client.post(
        "/api/visits", json={"customerId": customer["id"], "surveyType": "boiler"}, headers=auth
    ).json()["data"]
    t = _transcript(client, auth, other_visit)
    r = client.post(
        "/api/transcription/extract-observations",
        json={"visitSessionId": visit["id"], "transcriptionId": t["id"]},
        headers=auth,
    )
    assert r.status_code == 404
    assert r.json()["message"] == "Transcription not found"


def test_observation_crud(client, auth, visit):
    r = client.post(
        "/api/transcription/observations",
        json={
            "visitSessionId": visit["id"],
            "observationType": "hazard",
            "category": "hazard",
            "key": "asbestos_suspected",
            "value": "Artex ceiling in hallway",
            "confidence": "medium",
        },
        headers=auth,
    )
    assert r.status_code == 201, r.text
    obs = r.json()["data"]

    r = client.put(
        f"/api/transcription/observations/{obs['id']}",
        json={"confidence": "confirmed"},
        headers=auth,
    )
    assert r.status_code == 200
    assert r.json()["data"]["confidence"] == "confirmed"
    assert r.json()["data"]["value"] == "Artex ceiling in hallway"

    r = client.put(f"/api/transcription/observations/{obs['id']}", json={"value": None}, headers=auth)
    assert r.status_code == 400

    assert client.delete(f"/api/transcription/observations/{obs['id']}", headers=auth).status_code == 200
    assert client.get(f"/api/transcription/observations/{visit['id']}", headers=auth).json()["data"] == []


def test_observation_category_is_checked(client, auth, visit):
    r = client.post(
        "/api/transcription/observations",
        json={
            "visitSessionId": visit["id"],
            "observationType": "x",
            "category": "gossip",
            "key": "k",
            "value": "v",
        },
        headers=auth,
    )
    assert r.status_code == 400


def test_observation_of_other_account_is_hidden(client, auth, other_auth, visit):
    obs = client.post(
        "/api/transcription/observations",
        json={
            "visitSessionId": visit["id"],
            "observationType": "boiler_make",
            "category": "equipment",
            "key": "make",
            "value": "Vaillant",
        },
        headers=auth,
    ).json()["data"]
    r = client.put(f"/api/transcription/observations/{obs['id']}", json={"value": "Ideal"}, headers=other_auth)
    assert r.status_code == 404
    assert client.delete(f"/api/transcription/observations/{obs['id']}", headers=other_auth).status_code == 404


def test_stream_on_foreign_visit(client, other_auth, visit):
    r = client.get(f"/api/transcription/stream/{visit['id']}", headers=other_auth)
    assert r.status_code == 404


def test_placeholder_extractor_is_stable():
    first = get_extractor().extract("anything")
    assert [o.key for o in first] == ["existing_boiler_manufacturer", "existing_boiler_age"]
    assert first == get_extractor().extract("something else")


# --- SSE ---
def test_format_sse():
    assert format_sse("ping", {"type": "ping"}) == 'event: ping\ndata: {"type": "ping"}\n\n'


def _parse(chunk):
    event_line, data_line = chunk.strip().split("\n")
    return event_line[len("event: "):], json.loads(data_line[len("data: "):])


@pytest.mark.anyio
async def test_stream_greets_then_stops_on_disconnect():
    calls = {"n": 0}

    async def is_disconnected():
        calls["n"] += 1
        return calls["n"] > 1

    chunks = [c async for c in transcription_events(7, is_disconnected, heartbeat_seconds=0)]
    events = [_parse(c) for c in chunks]

    assert events[0] == ("connected", {"type": "connected", "visitSessionId": 7})
    assert events[1][0] == "transcription"
    assert events[1][1]["isFinal"] is False
    assert len(events) == 2


@pytest.mark.anyio
async def test_stream_sends_heartbeats_while_connected():
    calls = {"n": 0}

    async def is_disconnected():
        calls["n"] += 1
        # stays up for one heartbeat
        return calls["n"] > 2

    chunks = [c async for c in transcription_events(1, is_disconnected, heartbeat_seconds=0)]
    assert [_parse(c)[0] for c in chunks] == ["connected", "transcription", "ping"]
