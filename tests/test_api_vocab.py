"""FastAPI 経由で単語追加・採点・due 取得・集計が動作することを検証する。"""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from vocab_srs.main import create_app
from vocab_srs.routers.vocab import get_clock
from vocab_srs.store import InMemoryVocabStore, get_store


@pytest.fixture()
def store() -> InMemoryVocabStore:
    return InMemoryVocabStore()


@pytest.fixture()
def client(store, frozen_clock) -> TestClient:
    """ストアと時計を差し替えたアプリを各テストに配布する。"""

    app = create_app()
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_clock] = lambda: frozen_clock
    with TestClient(app) as test_client:
        yield test_client


def _add(client: TestClient, word: str = "converge", **extra) -> dict:
    payload = {"word": word, "translation": "to come together", "example": "Paths converge.", "phonetic": ""}
    payload.update(extra)
    response = client.post("/api/vocab/", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_healthz(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.headers["X-Request-ID"]


def test_add_word_returns_new_item_view(client, frozen_clock):
    body = _add(client)

    item = body["item"]
    assert item["word"] == "converge"
    assert item["easeFactor"] == 2.5
    assert item["interval"] == 0
    assert item["repetitions"] == 0
    assert datetime.fromisoformat(item["nextReview"]) == frozen_clock()
    assert body["mastery"] == {"level": "new", "label": "New"}
    assert body["intervalText"] == "New"


def test_adding_same_word_refreshes_text_without_duplicating(client):
    first = _add(client, "Robust")
    second = _add(client, "robust", translation="strong and healthy")

    assert second["item"]["id"] == first["item"]["id"]
    assert second["item"]["translation"] == "strong and healthy"
    listing = client.get("/api/vocab/").json()
    assert listing["total"] == 1


def test_review_with_button_schedules_next_day(client, frozen_clock):
    item_id = _add(client)["item"]["id"]

    response = client.post(f"/api/vocab/{item_id}/review", json={"button": "good"})

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["quality"] == 4
    assert body["totalReviewsCompleted"] == 1
    reviewed = body["item"]["item"]
    assert (reviewed["interval"], reviewed["repetitions"]) == (1, 1)
    assert datetime.fromisoformat(reviewed["nextReview"]) == frozen_clock() + timedelta(days=1)
    assert body["item"]["mastery"]["level"] == "learning"


def test_review_with_raw_quality(client):
    item_id = _add(client)["item"]["id"]
    body = client.post(f"/api/vocab/{item_id}/review", json={"quality": 0}).json()
    assert body["item"]["item"]["repetitions"] == 0
    assert body["item"]["item"]["interval"] == 1


@pytest.mark.parametrize("quality", [-1, 6, 99])
def test_out_of_range_quality_is_a_bad_request(client, quality):
    item_id = _add(client)["item"]["id"]

    response = client.post(f"/api/vocab/{item_id}/review", json={"quality": quality})

    assert response.status_code == 400
    assert response.json()["detail"]["reason_code"] == "INVALID_ARGUMENT"
    # 失敗した採点は保存されない。
    assert client.get(f"/api/vocab/{item_id}").json()["item"]["repetitions"] == 0


@pytest.mark.parametrize("quality", [True, 4.0, "4"])
def test_non_integer_quality_is_rejected_without_review(client, quality):
    item_id = _add(client)["item"]["id"]

    response = client.post(f"/api/vocab/{item_id}/review", json={"quality": quality})

    assert response.status_code == 422
    assert client.get(f"/api/vocab/{item_id}").json()["item"]["repetitions"] == 0


def test_total_reviews_completed_accumulates_across_requests(client, store):
    first = _add(client, "alpha")["item"]["id"]
    second = _add(client, "beta")["item"]["id"]

    totals = [
        client.post(f"/api/vocab/{item_id}/review", json=payload).json()["totalReviewsCompleted"]
        for item_id, payload in (
            (first, {"button": "good"}),
            (second, {"quality": 2}),
            (first, {"button": "easy"}),
        )
    ]

    assert totals == [1, 2, 3]
    assert store.load_deck("default").total_reviews_completed == 3
    # 累計はユーザーごとに独立している。
    headers = {"X-User-Id": "someone-else"}
    other = client.post("/api/vocab/", json={"word": "gamma"}, headers=headers).json()["item"]["id"]
    response = client.post(f"/api/vocab/{other}/review", json={"button": "good"}, headers=headers)
    assert response.json()["totalReviewsCompleted"] == 1


@pytest.mark.parametrize(
    "payload",
    [{}, {"quality": 4, "button": "good"}, {"button": "perfect"}],
)
def test_review_payload_validation(client, payload):
    item_id = _add(client)["item"]["id"]
    response = client.post(f"/api/vocab/{item_id}/review", json=payload)
    assert response.status_code == 422


def test_unknown_item_is_not_found(client):
    response = client.post("/api/vocab/vocab_missing/review", json={"button": "easy"})
    assert response.status_code == 404
    assert response.json()["detail"]["reason_code"] == "NOT_FOUND"
    assert client.get("/api/vocab/vocab_missing").status_code == 404
    assert client.delete("/api/vocab/vocab_missing").status_code == 404


def test_due_queue_follows_the_schedule(client, frozen_clock):
    item_id = _add(client)["item"]["id"]
    assert [v["item"]["id"] for v in client.get("/api/vocab/due").json()["items"]] == [item_id]

    client.post(f"/api/vocab/{item_id}/review", json={"button": "easy"})
    assert client.get("/api/vocab/due").json()["total"] == 0
    assert client.get("/api/vocab/due", params={"scope": "today"}).json()["total"] == 0

    frozen_clock.advance(days=1)
    assert client.get("/api/vocab/due").json()["total"] == 1


def test_due_limit_caps_queue(client):
    for word in ("alpha", "beta", "gamma"):
        _add(client, word)
    body = client.get("/api/vocab/due", params={"limit": 2}).json()
    assert body["total"] == 2


def test_stats_endpoint(client):
    first = _add(client, "alpha")["item"]["id"]
    _add(client, "beta")
    client.post(f"/api/vocab/{first}/review", json={"button": "good"})

    stats = client.get("/api/vocab/stats").json()

    assert stats["total"] == 2
    assert stats["dueToday"] == 1
    assert stats["overdue"] == 0
    assert stats["byMastery"] == {"new": 1, "learning": 1, "familiar": 0, "mastered": 0}


def test_edit_word_changes_text_only(client):
    created = _add(client)["item"]
    response = client.patch(f"/api/vocab/{created['id']}", json={"example": "Rivers converge here."})

    assert response.status_code == 200
    edited = response.json()["item"]
    assert edited["example"] == "Rivers converge here."
    assert edited["translation"] == created["translation"]
    assert edited["nextReview"] == created["nextReview"]


def test_delete_word(client):
    item_id = _add(client)["item"]["id"]
    assert client.delete(f"/api/vocab/{item_id}").status_code == 204
    assert client.get("/api/vocab/").json()["total"] == 0


def test_users_are_isolated_by_header(client):
    _add(client, "alpha")
    response = client.get("/api/vocab/", headers={"X-User-Id": "someone-else"})
    assert response.json()["total"] == 0


def test_list_sorted_by_mastery(client):
    newer = _add(client, "alpha")["item"]["id"]
    practiced = _add(client, "beta")["item"]["id"]
    client.post(f"/api/vocab/{practiced}/review", json={"button": "good"})

    ids = [v["item"]["id"] for v in client.get("/api/vocab/", params={"sort": "mastery"}).json()["items"]]

    assert ids == [practiced, newer]
