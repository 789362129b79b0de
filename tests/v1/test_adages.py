# tests/v1/test_adages.py
"""Tests for the adage archive endpoints."""

import csv
import io
import json
from datetime import timedelta

from fastapi import status

from adages_society.db.time import utcnow
from adages_society.models import ActivityLog, Adage, AdageVersion, Citation


def test_list_adages_filters(client, make_adage) -> None:
    make_adage("Haste makes waste", tags=["time"])
    make_adage("Actions speak louder than words", tags=["deeds"], definition="Doing counts.")
    make_adage("Hidden one", hidden_at=utcnow())

    response = client.get("/api/v1/adages")
    assert response.status_code == status.HTTP_200_OK
    page = response.json()["data"]
    assert page["total"] == 2
    assert {item["adage"] for item in page["items"]} == {
        "Haste makes waste",
        "Actions speak louder than words",
    }

    by_tag = client.get("/api/v1/adages", params={"tag": "deeds"}).json()["data"]
    assert [item["adage"] for item in by_tag["items"]] == ["Actions speak louder than words"]

    by_search = client.get("/api/v1/adages", params={"search": "haste"}).json()["data"]
    assert by_search["total"] == 1


def test_tag_filter_matches_accents_and_literal_wildcards(client, make_adage) -> None:
    make_adage("C'est la vie", tags=["français"])
    make_adage("Fifty-fifty", tags=["50%_off"])
    make_adage("Other", tags=["50xyoff", "francais"])

    def _tagged(tag):
        page = client.get("/api/v1/adages", params={"tag": tag}).json()["data"]
        return [item["adage"] for item in page["items"]]

    assert _tagged("français") == ["C'est la vie"]
    assert _tagged("50%_off") == ["Fifty-fifty"]
    assert _tagged("50%") == []


def test_list_adages_shows_hidden_to_admin(client, make_adage, admin_token) -> None:
    make_adage("Visible")
    make_adage("Hidden", hidden_at=utcnow())
    page = client.get("/api/v1/adages", headers=admin_token).json()["data"]
    assert page["total"] == 2


def test_list_adages_pagination(client, make_adage) -> None:
    for i in range(5):
        make_adage(f"Adage {i}")
    page = client.get("/api/v1/adages", params={"limit": 2, "offset": 2}).json()["data"]
    assert page["total"] == 5
    assert len(page["items"]) == 2
    assert page["limit"] == 2
    assert page["offset"] == 2


def test_get_adage_detail_counts_view(client, db_session, adage, test_user, auth_token) -> None:
    db_session.add(
        Citation(adage_id=adage.id, source_text="Poor Richard's Almanack", verified=True)
    )
    db_session.add(Citation(adage_id=adage.id, source_text="Unverified source"))
    db_session.commit()

    first = client.get(f"/api/v1/adages/{adage.id}", headers=auth_token)
    assert first.status_code == status.HTTP_200_OK
    data = first.json()["data"]
    assert data["views_count"] == 1
    assert data["user_vote"] == 0
    assert data["saved"] is False
    assert [c["source_text"] for c in data["citations"]] == ["Poor Richard's Almanack"]

    second = client.get(f"/api/v1/adages/{adage.id}").json()["data"]
    assert second["views_count"] == 2


def test_get_missing_or_hidden_adage(client, make_adage) -> None:
    hidden = make_adage("Hidden", hidden_at=utcnow())
    assert client.get("/api/v1/adages/9999").status_code == status.HTTP_404_NOT_FOUND
    response = client.get(f"/api/v1/adages/{hidden.id}")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"success": False, "error": "Adage not found"}


def test_create_adage_requires_admin(client, auth_token) -> None:
    payload = {"adage": "Waste not, want not", "definition": "Thrift pays."}
    assert client.post("/api/v1/adages", json=payload).status_code == 401
    assert client.post("/api/v1/adages", json=payload, headers=auth_token).status_code == 403


def test_create_adage_logs_activity(client, db_session, admin_user, admin_token) -> None:
    response = client.post(
        "/api/v1/adages",
        json={
            "adage": "Waste not, want not",
            "definition": "Thrift pays.",
            "tags": ["Thrift", "thrift", " money "],
        },
        headers=admin_token,
    )
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()["data"]
    assert data["created_by"] == admin_user.id
    assert data["published_at"] is not None

    log = db_session.query(ActivityLog).filter(ActivityLog.action == "create_adage").one()
    assert log.target_id == data["id"]


def test_update_adage_snapshots_version(client, db_session, adage, admin_token) -> None:
    original = adage.adage
    for text in ("First edit", "Second edit"):
        response = client.put(
            f"/api/v1/adages/{adage.id}", json={"adage": text}, headers=admin_token
        )
        assert response.status_code == status.HTTP_200_OK

    versions = client.get(f"/api/v1/adages/{adage.id}/versions", headers=admin_token)
    items = versions.json()["data"]
    assert [v["version_number"] for v in items] == [2, 1]
    assert items[-1]["adage"] == original
    assert items[0]["adage"] == "First edit"
    assert db_session.query(AdageVersion).count() == 2


def test_hide_and_unhide_adage(client, db_session, adage, admin_token) -> None:
    client.put(f"/api/v1/adages/{adage.id}", json={"hidden": True}, headers=admin_token)
    db_session.refresh(adage)
    assert adage.hidden_at is not None
    assert client.get(f"/api/v1/adages/{adage.id}").status_code == 404

    client.put(f"/api/v1/adages/{adage.id}", json={"hidden": False}, headers=admin_token)
    db_session.refresh(adage)
    assert adage.hidden_at is None


def test_delete_adage_is_soft(client, db_session, make_adage, admin_token) -> None:
    adage = make_adage("Going away", featured=True)
    response = client.delete(f"/api/v1/adages/{adage.id}", headers=admin_token)
    assert response.status_code == status.HTTP_200_OK

    row = db_session.get(Adage, adage.id)
    db_session.refresh(row)
    assert row.deleted_at is not None
    assert row.featured is False
    assert client.get(f"/api/v1/adages/{adage.id}").status_code == 404


def test_set_featured_replaces_current(client, db_session, make_adage, admin_token) -> None:
    current = make_adage("Current", featured=True, featured_until=utcnow() + timedelta(days=3))
    target = make_adage("Next up")

    response = client.post(
        f"/api/v1/adages/{target.id}/set-featured",
        json={"reason": "Anniversary"},
        headers=admin_token,
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["featured"] is True

    db_session.refresh(current)
    assert current.featured is False

    featured = client.get("/api/v1/adages/featured").json()["data"]
    assert [item["id"] for item in featured] == [target.id]
    assert featured[0]["featured_reason"] == "Anniversary"


def test_set_featured_rejects_past_date(client, adage, admin_token) -> None:
    response = client.post(
        f"/api/v1/adages/{adage.id}/set-featured",
        json={"featured_until": (utcnow() - timedelta(days=1)).isoformat()},
        headers=admin_token,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_rotate_featured_requires_cron_credentials(client, adage) -> None:
    assert client.post("/api/v1/adages/rotate-featured").status_code == 401
    wrong = client.post(
        "/api/v1/adages/rotate-featured", headers={"Authorization": "Bearer wrong"}
    )
    assert wrong.status_code == 401


def test_rotate_featured_with_secret(client, make_adage, admin_user, outbox) -> None:
    first = make_adage("Oldest")
    make_adage("Newer")

    response = client.post(
        "/api/v1/adages/rotate-featured",
        headers={"Authorization": "Bearer test-cron-secret"},
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["adage_id"] == first.id
    assert data["cycle_restarted"] is False
    assert any(mail["to"] == admin_user.email for mail in outbox.sent)

    history = client.get("/api/v1/adages/featured/history").json()["data"]
    assert [entry["adage_id"] for entry in history] == [first.id]


def test_rotate_featured_with_trigger_header(client, adage) -> None:
    response = client.post("/api/v1/adages/rotate-featured", headers={"x-cron-trigger": "1"})
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["adage_id"] == adage.id


def test_rotate_featured_with_empty_archive(client) -> None:
    response = client.post("/api/v1/adages/rotate-featured", headers={"x-cron-trigger": "true"})
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_export_csv(client, make_adage, admin_token) -> None:
    make_adage("Haste makes waste", tags=["time", "speed"])
    response = client.get("/api/v1/adages/export", params={"format": "csv"}, headers=admin_token)
    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment" in response.headers["content-disposition"]

    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0][:3] == ["ID", "Adage", "Definition"]
    assert rows[1][1] == "Haste makes waste"
    assert rows[1][4] == "time, speed"


def test_export_json(client, adage, admin_token) -> None:
    response = client.get("/api/v1/adages/export", params={"format": "json"}, headers=admin_token)
    payload = json.loads(response.text)
    assert payload["count"] == 1
    assert payload["adages"][0]["adage"] == adage.adage


def test_export_rejects_unknown_format(client, admin_token) -> None:
    response = client.get("/api/v1/adages/export", params={"format": "xml"}, headers=admin_token)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
