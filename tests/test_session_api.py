from __future__ import annotations

import json

from fastapi.testclient import TestClient

from kiwidex.api.models import MAX_SAVE_CHARS


def _new_session(client: TestClient) -> str:
    r = client.post("/session")
    assert r.status_code == 201, r.text
    return r.json()["session_id"]


def _set_mode(client: TestClient, sid: str, mode: str, animal_id: str | None = None) -> dict:
    r = client.post(f"/session/{sid}/mode", json={"mode": mode, "animal_id": animal_id})
    assert r.status_code == 200, r.text
    return r.json()


def test_healthcheck_and_info(client: TestClient) -> None:
    assert client.get("/healthcheck").json() == {"status": "ok"}
    assert client.get("/info").json()["name"] == "kiwidex"


def test_create_and_fetch_session(client: TestClient) -> None:
    sid = _new_session(client)

    data = client.get(f"/session/{sid}").json()
    assert data["mode"] == "map"
    assert data["epoch"] == 0
    assert data["progress"]["total_animals"] == 4
    assert len(data["animals"]) == 4


def test_unknown_session_is_404(client: TestClient) -> None:
    r = client.get("/session/00000000-0000-0000-0000-000000000000")
    assert r.status_code == 404


def test_delete_session(client: TestClient) -> None:
    sid = _new_session(client)
    assert client.delete(f"/session/{sid}").json() == {"ok": True}
    assert client.get(f"/session/{sid}").status_code == 404


def test_region_encounter_capture_and_feed(client: TestClient) -> None:
    sid = _new_session(client)

    denied = _set_mode(client, sid, "encounter")
    assert denied["accepted"] is False
    assert denied["reason"] == "NoRegionSelected"

    assert client.post(f"/session/{sid}/region", json={"region": "both"}).status_code == 422
    r = client.post(f"/session/{sid}/region", json={"region": "north"})
    assert r.json()["progress"]["current_region"] == "north"

    north = client.get(f"/session/{sid}/animals", params={"region": "north"}).json()
    assert {a["id"] for a in north} == {"kiwi", "tuatara"}

    encounter = _set_mode(client, sid, "encounter")
    assert encounter["accepted"] is True
    animal_id = encounter["animal_id"]
    assert animal_id in {"kiwi", "tuatara"}

    assert client.post(f"/session/{sid}/capture/{animal_id}").json() == {"ok": True}
    assert client.post(f"/session/{sid}/capture/{animal_id}").json() == {"ok": False}

    foods = client.get(f"/session/{sid}/foods/{animal_id}").json()
    fed = client.post(f"/session/{sid}/feed", json={"animal_id": animal_id, "food_id": foods[0]["id"]}).json()
    assert fed["accepted"] is True
    assert fed["tier"] == "PREFERRED"
    assert fed["intimacy"] == 1 + fed["intimacy_delta"]

    assert _set_mode(client, sid, "map")["accepted"] is True


def test_feed_edge_cases(client: TestClient) -> None:
    sid = _new_session(client)

    assert client.post(f"/session/{sid}/feed", json={"animal_id": "kiwi", "food_id": "pizza"}).status_code == 422

    unknown = client.post(f"/session/{sid}/feed", json={"animal_id": "moa", "food_id": "fish"}).json()
    assert unknown["accepted"] is False

    uncaptured = client.post(f"/session/{sid}/feed", json={"animal_id": "kiwi", "food_id": "worms"}).json()
    assert uncaptured["accepted"] is False
    assert uncaptured["intimacy"] == 0


def test_collection_and_minigame_flow(client: TestClient) -> None:
    sid = _new_session(client)
    client.post(f"/session/{sid}/capture/kakapo")

    assert _set_mode(client, sid, "minigame", "kakapo")["reason"] == "IllegalTransition"

    assert _set_mode(client, sid, "collection")["accepted"] is True
    collection = client.get(f"/session/{sid}/collection", params={"sort": "intimacy"}).json()
    assert [a["id"] for a in collection] == ["kakapo"]

    assert _set_mode(client, sid, "minigame", "kiwi")["reason"] == "AnimalNotCaptured"
    started = _set_mode(client, sid, "minigame", "kakapo")
    assert started["accepted"] is True
    assert started["animal_id"] == "kakapo"

    # Plant and feed until the ecosystem is healthy, then keep the kakapo safe.
    view = client.post(f"/session/{sid}/minigame/safe").json()
    for _ in range(3):
        view = client.post(f"/session/{sid}/minigame/plant").json()
    assert view["won"] is False
    view = client.post(f"/session/{sid}/minigame/safe").json()
    while not view["won"]:
        view = client.post(f"/session/{sid}/minigame/feed").json()
        if view["environment"] < 80:
            view = client.post(f"/session/{sid}/minigame/safe").json()
    assert view["message"] == "Perfect ecosystem achieved!"

    data = client.get(f"/session/{sid}").json()
    assert data["mode"] == "collection"
    assert data["progress"]["achievements"] == ["eco-guardian"]
    kakapo = next(a for a in data["animals"] if a["id"] == "kakapo")
    assert kakapo["intimacy"] == 2

    assert client.post(f"/session/{sid}/minigame/plant").status_code == 422


def test_save_and_load(client: TestClient) -> None:
    sid = _new_session(client)
    client.post(f"/session/{sid}/capture/kiwi")
    client.post(f"/session/{sid}/region", json={"region": "south"})
    blob = client.get(f"/session/{sid}/save").json()["blob"]

    other = _new_session(client)
    assert client.post(f"/session/{other}/load", json={"blob": "{oops"}).status_code == 422
    assert client.get(f"/session/{other}").json()["progress"]["discovered_ids"] == []

    loaded = client.post(f"/session/{other}/load", json={"blob": blob}).json()
    assert loaded["progress"]["discovered_ids"] == ["kiwi"]
    assert loaded["progress"]["current_region"] == "south"
    assert loaded["mode"] == "map"


def test_content_endpoints_use_fallback_content(client: TestClient) -> None:
    sid = _new_session(client)

    facts = client.get(f"/session/{sid}/animals/kiwi/facts", params={"level": 6}).json()
    assert facts["epoch"] == 0
    assert len(facts["items"]) == 4

    quiz = client.get(f"/session/{sid}/animals/kiwi/quiz", params={"difficulty": "beginner"}).json()
    assert len(quiz["questions"]) == 2
    assert client.get(f"/session/{sid}/animals/kiwi/quiz", params={"difficulty": "7"}).json()["questions"]
    assert client.get(f"/session/{sid}/animals/kiwi/quiz", params={"difficulty": "expert"}).status_code == 422

    chat = client.post(f"/session/{sid}/animals/kiwi/chat", json={"question": "What do you eat?"}).json()
    assert "Insects" in chat["answer"]

    assert client.get(f"/session/{sid}/animals/moa/facts").status_code == 404

    tips = client.get(f"/session/{sid}/recommendations").json()
    assert tips == ["Start exploring the North or South Island to discover your first animal!"]


def test_load_rejects_deeply_nested_and_oversized_blobs(client: TestClient) -> None:
    sid = _new_session(client)
    assert client.post(f"/session/{sid}/load", json={"blob": "[" * 200000}).status_code == 422
    assert client.post(f"/session/{sid}/load", json={"blob": " " * (MAX_SAVE_CHARS + 1)}).status_code == 422
    assert client.get(f"/session/{sid}").json()["progress"]["discovered_ids"] == []


def test_recent_collection_after_loading_a_naive_timestamp(client: TestClient) -> None:
    sid = _new_session(client)
    client.post(f"/session/{sid}/capture/kiwi")
    client.post(f"/session/{sid}/capture/kakapo")
    data = json.loads(client.get(f"/session/{sid}/save").json()["blob"])
    next(a for a in data["animals"] if a["id"] == "kiwi")["last_interaction_at"] = "2024-01-01T00:00:00"

    assert client.post(f"/session/{sid}/load", json={"blob": json.dumps(data)}).status_code == 200
    r = client.get(f"/session/{sid}/collection", params={"sort": "recent"})
    assert r.status_code == 200
    assert [a["id"] for a in r.json()] == ["kakapo", "kiwi"]
