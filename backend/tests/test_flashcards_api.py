"""HTTP tests for flashcard CRUD and Leitner review submissions."""

from datetime import datetime, timedelta, timezone

import aiosqlite

from conftest import T0, parse_ts, register


def _create(client, headers, question="2 + 2?", answer="4", **extra):
    res = client.post(
        "/flashcards", json={"question": question, "answer": answer, **extra}, headers=headers
    )
    assert res.status_code == 201, res.text
    return res.json()


def _review(client, headers, card_id, **body):
    return client.put(f"/flashcards/{card_id}", json=body, headers=headers)


def test_requires_auth(client):
    assert client.get("/flashcards").status_code == 401
    assert client.post("/flashcards", json={"question": "q", "answer": "a"}).status_code == 401


def test_create_starts_in_box_one(client, auth_headers):
    card = _create(client, auth_headers)
    assert card["box"] == 1
    assert parse_ts(card["nextReviewDate"]) == T0 + timedelta(days=1)
    assert parse_ts(card["createdAt"]) == T0
    assert card["lastReviewedAt"] is None
    assert card["question"] == "2 + 2?"


def test_create_in_explicit_box(client, auth_headers):
    card = _create(client, auth_headers, box=4)
    assert card["box"] == 4
    assert parse_ts(card["nextReviewDate"]) == T0 + timedelta(days=14)


def test_create_validation(client, auth_headers):
    assert client.post(
        "/flashcards", json={"question": "q"}, headers=auth_headers
    ).status_code == 422
    assert client.post(
        "/flashcards", json={"question": "q", "answer": "a", "box": 6}, headers=auth_headers
    ).status_code == 422
    assert client.post(
        "/flashcards", json={"question": "q", "answer": "a", "box": 0}, headers=auth_headers
    ).status_code == 422


def test_review_scenario(client, auth_headers, clock):
    card = _create(client, auth_headers)

    res = _review(client, auth_headers, card["id"], correct=True)
    assert res.status_code == 200
    body = res.json()
    assert body["box"] == 2
    assert parse_ts(body["nextReviewDate"]) == T0 + timedelta(days=3)
    assert parse_ts(body["lastReviewedAt"]) == T0

    clock.advance(days=3)
    body = _review(client, auth_headers, card["id"], correct=False).json()
    assert body["box"] == 1
    assert parse_ts(body["nextReviewDate"]) == clock.now() + timedelta(days=1)
    assert parse_ts(body["lastReviewedAt"]) == clock.now()


def test_review_at_top_box_stays(client, auth_headers):
    card = _create(client, auth_headers, box=5)
    body = _review(client, auth_headers, card["id"], correct=True).json()
    assert body["box"] == 5
    assert parse_ts(body["nextReviewDate"]) == T0 + timedelta(days=30)


def test_review_override_wins(client, auth_headers, clock):
    card = _create(client, auth_headers)
    clock.advance(hours=2)
    target = "2026-05-01T12:00:00Z"
    body = _review(
        client, auth_headers, card["id"], correct=False, box=3, nextReviewDate=target
    ).json()
    assert body["box"] == 3
    assert parse_ts(body["nextReviewDate"]) == datetime(2026, 5, 1, 12, tzinfo=timezone.utc)
    assert parse_ts(body["lastReviewedAt"]) == T0 + timedelta(hours=2)


def test_review_partial_override_uses_outcome(client, auth_headers):
    card = _create(client, auth_headers)
    body = _review(client, auth_headers, card["id"], correct=True, box=4).json()
    assert body["box"] == 2
    assert parse_ts(body["nextReviewDate"]) == T0 + timedelta(days=3)


def test_review_override_out_of_range(client, auth_headers):
    card = _create(client, auth_headers)
    res = _review(
        client, auth_headers, card["id"], box=7, nextReviewDate="2026-05-01T00:00:00Z"
    )
    assert res.status_code == 422
    unchanged = client.get(f"/flashcards/{card['id']}", headers=auth_headers).json()
    assert unchanged["box"] == 1
    assert unchanged["lastReviewedAt"] is None


def test_review_without_outcome_or_override(client, auth_headers):
    card = _create(client, auth_headers)
    res = _review(client, auth_headers, card["id"])
    assert res.status_code == 422


def test_review_unknown_card(client, auth_headers):
    res = _review(client, auth_headers, "missing", correct=True)
    assert res.status_code == 404
    assert res.json()["detail"] == "Flashcard not found"


def test_other_users_cards_are_invisible(client, auth_headers):
    card = _create(client, auth_headers)
    other = register(client, email="bob@example.com", name="Bob")
    bob = {"Authorization": f"Bearer {other['token']}"}

    assert client.get(f"/flashcards/{card['id']}", headers=bob).status_code == 404
    assert _review(client, bob, card["id"], correct=True).status_code == 404
    assert client.patch(
        f"/flashcards/{card['id']}", json={"question": "mine now"}, headers=bob
    ).status_code == 404
    assert client.delete(f"/flashcards/{card['id']}", headers=bob).status_code == 404
    assert client.get("/flashcards", headers=bob).json() == {"items": [], "total": 0}

    mine = client.get(f"/flashcards/{card['id']}", headers=auth_headers).json()
    assert mine["question"] == "2 + 2?"
    assert mine["box"] == 1


def test_list_cards(client, auth_headers):
    for i in range(3):
        _create(client, auth_headers, question=f"Q{i}")
    body = client.get("/flashcards", headers=auth_headers).json()
    assert body["total"] == 3
    assert [c["question"] for c in body["items"]] == ["Q0", "Q1", "Q2"]

    page = client.get("/flashcards?offset=2&limit=5", headers=auth_headers).json()
    assert page["total"] == 3
    assert [c["question"] for c in page["items"]] == ["Q2"]


def test_edit_card_keeps_schedule(client, auth_headers):
    card = _create(client, auth_headers)
    res = client.patch(
        f"/flashcards/{card['id']}", json={"answer": "four"}, headers=auth_headers
    )
    assert res.status_code == 200
    body = res.json()
    assert body["answer"] == "four"
    assert body["question"] == card["question"]
    assert body["nextReviewDate"] == card["nextReviewDate"]


def test_delete_card(client, auth_headers):
    card = _create(client, auth_headers)
    res = client.delete(f"/flashcards/{card['id']}", headers=auth_headers)
    assert res.status_code == 200
    assert res.json() == {"message": "Flashcard deleted successfully"}
    assert client.get(f"/flashcards/{card['id']}", headers=auth_headers).status_code == 404
    assert client.delete(f"/flashcards/{card['id']}", headers=auth_headers).status_code == 404


def test_due_queue_order_and_counters(client, auth_headers, clock):
    late_box2 = _create(client, auth_headers, question="box2")
    early_box1 = _create(client, auth_headers, question="box1")
    _create(client, auth_headers, question="fresh")
    _review(client, auth_headers, late_box2["id"], box=2,
            nextReviewDate=(T0 + timedelta(days=1)).isoformat())
    _review(client, auth_headers, early_box1["id"], box=1,
            nextReviewDate=(T0 + timedelta(days=2)).isoformat())

    body = client.get("/flashcards/due", headers=auth_headers).json()
    assert body["cards"] == []
    assert body["total"] == 3
    assert body["boxCounts"] == [2, 1, 0, 0, 0]
    assert body["dueToday"] == 0

    clock.advance(days=3)
    body = client.get("/flashcards/due", headers=auth_headers).json()
    # "fresh" (box 1, due T0+1d) precedes "box1" (box 1, due T0+2d); box 2 last.
    assert [c["question"] for c in body["cards"]] == ["fresh", "box1", "box2"]
    assert body["dueToday"] == 3


def test_intervals(client):
    res = client.get("/flashcards/intervals")
    assert res.status_code == 200
    assert res.json() == {"intervals": {"1": 1, "2": 3, "3": 7, "4": 14, "5": 30}}


def test_storage_failure_is_reported(client, auth_headers, monkeypatch):
    from qubrain.routers import flashcards

    async def broken(*args, **kwargs):
        raise aiosqlite.OperationalError("disk I/O error")

    monkeypatch.setattr(flashcards, "list_flashcards", broken)
    res = client.get("/flashcards", headers=auth_headers)
    assert res.status_code == 500
    assert res.json() == {"detail": "Storage failure"}


def test_review_override_date_out_of_range(client, auth_headers):
    card = _create(client, auth_headers)
    res = _review(
        client, auth_headers, card["id"], box=3, nextReviewDate="9999-12-31T23:00:00-05:00"
    )
    assert res.status_code == 422
    unchanged = client.get(f"/flashcards/{card['id']}", headers=auth_headers).json()
    assert unchanged["box"] == 1


def test_review_override_date_normalised_to_utc(client, auth_headers):
    card = _create(client, auth_headers)
    body = _review(
        client, auth_headers, card["id"], box=2, nextReviewDate="2026-05-01T07:00:00-05:00"
    ).json()
    assert body["box"] == 2
    assert parse_ts(body["nextReviewDate"]) == datetime(2026, 5, 1, 12, tzinfo=timezone.utc)
