# tests/v1/test_lore.py
"""Tests for adage variants, translations, usage examples, timeline and related adages."""

from fastapi import status

from adages_society.db.time import utcnow
from adages_society.models import ActivityLog, AdageUsageExample, AdageVariant, RelatedAdage


def test_variant_lifecycle(client, db_session, adage, admin_token) -> None:
    base = f"/api/v1/adages/{adage.id}/variants"
    created = client.post(
        base, json={"variant_text": " A stitch in time saves nine stitches ", "notes": "Older form"},
        headers=admin_token,
    )
    assert created.status_code == status.HTTP_201_CREATED
    variant = created.json()["data"]
    assert variant["variant_text"] == "A stitch in time saves nine stitches"
    assert db_session.query(ActivityLog).filter(ActivityLog.action == "create_variant").count() == 1

    updated = client.put(
        f"{base}/{variant['id']}", json={"notes": "Seventeenth century"}, headers=admin_token
    )
    assert updated.json()["data"]["notes"] == "Seventeenth century"
    assert updated.json()["data"]["variant_text"] == variant["variant_text"]

    listed = client.get(base).json()["data"]
    assert [item["id"] for item in listed] == [variant["id"]]

    deleted = client.delete(f"{base}/{variant['id']}", headers=admin_token)
    assert deleted.json()["message"] == "Variant deleted"
    assert client.get(base).json()["data"] == []
    assert db_session.get(AdageVariant, variant["id"]).deleted_at is not None


def test_variant_writes_require_admin(client, adage, auth_token) -> None:
    base = f"/api/v1/adages/{adage.id}/variants"
    assert client.post(base, json={"variant_text": "x"}).status_code == 401
    assert client.post(base, json={"variant_text": "x"}, headers=auth_token).status_code == 403


def test_variant_requires_text(client, adage, admin_token) -> None:
    response = client.post(
        f"/api/v1/adages/{adage.id}/variants", json={"variant_text": ""}, headers=admin_token
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_child_routes_check_parent_adage(client, make_adage, admin_token) -> None:
    first = make_adage("First")
    second = make_adage("Second")
    variant = client.post(
        f"/api/v1/adages/{first.id}/variants", json={"variant_text": "1st"}, headers=admin_token
    ).json()["data"]

    wrong_parent = client.put(
        f"/api/v1/adages/{second.id}/variants/{variant['id']}",
        json={"variant_text": "moved"},
        headers=admin_token,
    )
    assert wrong_parent.status_code == status.HTTP_404_NOT_FOUND
    assert wrong_parent.json()["error"] == "Variant not found"
    assert client.get("/api/v1/adages/9999/variants").status_code == status.HTTP_404_NOT_FOUND


def test_translations_sorted_by_language(client, adage, admin_token) -> None:
    base = f"/api/v1/adages/{adage.id}/translations"
    for code, text in (("FR", "Un point à temps en vaut cent"), ("de", "Ein Stich zur rechten Zeit")):
        response = client.post(
            base, json={"language_code": code, "translated_text": text}, headers=admin_token
        )
        assert response.status_code == status.HTTP_201_CREATED

    listed = client.get(base).json()["data"]
    assert [item["language_code"] for item in listed] == ["de", "fr"]

    updated = client.put(
        f"{base}/{listed[0]['id']}", json={"translator_notes": "Idiomatic"}, headers=admin_token
    ).json()["data"]
    assert updated["translator_notes"] == "Idiomatic"

    client.delete(f"{base}/{listed[0]['id']}", headers=admin_token)
    assert [item["language_code"] for item in client.get(base).json()["data"]] == ["fr"]


def test_usage_examples_hide_and_source(
    client, db_session, adage, admin_user, admin_token
) -> None:
    base = f"/api/v1/adages/{adage.id}/usage-examples"
    official = client.post(
        base, json={"example_text": "She mended the tear at once."}, headers=admin_token
    ).json()["data"]
    assert official["source_type"] == "official"
    assert official["created_by"] == admin_user.id

    community = client.post(
        base,
        json={"example_text": "Fix the roof now.", "source_type": "community"},
        headers=admin_token,
    ).json()["data"]

    hidden = client.put(f"{base}/{community['id']}", json={"hidden": True}, headers=admin_token)
    assert hidden.json()["data"]["hidden_at"] is not None
    assert [item["id"] for item in client.get(base).json()["data"]] == [official["id"]]

    bad_source = client.post(
        base, json={"example_text": "Hm.", "source_type": "rumour"}, headers=admin_token
    )
    assert bad_source.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    client.delete(f"{base}/{official['id']}", headers=admin_token)
    assert db_session.get(AdageUsageExample, official["id"]).deleted_at is not None


def test_timeline_ordered_by_period(client, adage, admin_token) -> None:
    base = f"/api/v1/adages/{adage.id}/timeline"
    later = client.post(
        base,
        json={
            "time_period_start": "1900-01-01",
            "popularity_level": "ubiquitous",
            "sources": ["Newspapers"],
        },
        headers=admin_token,
    )
    assert later.status_code == status.HTTP_201_CREATED
    client.post(
        base,
        json={
            "time_period_start": "1732-01-01",
            "time_period_end": "1800-12-31",
            "popularity_level": "rare",
            "primary_location": "England",
        },
        headers=admin_token,
    )

    listed = client.get(base).json()["data"]
    assert [item["time_period_start"] for item in listed] == ["1732-01-01", "1900-01-01"]
    assert listed[1]["sources"] == ["Newspapers"]

    bad_level = client.post(
        base,
        json={"time_period_start": "1800-01-01", "popularity_level": "everywhere"},
        headers=admin_token,
    )
    assert bad_level.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    backwards = client.put(
        f"{base}/{listed[1]['id']}", json={"time_period_end": "1850-01-01"}, headers=admin_token
    )
    assert backwards.status_code == status.HTTP_400_BAD_REQUEST

    client.delete(f"{base}/{listed[0]['id']}", headers=admin_token)
    assert len(client.get(base).json()["data"]) == 1


def test_related_adages(client, db_session, make_adage, admin_token) -> None:
    source = make_adage("Haste makes waste")
    target = make_adage("He who hesitates is lost", definition="Act quickly.")
    base = f"/api/v1/adages/{source.id}/related"

    created = client.post(
        base,
        json={"related_adage_id": target.id, "relationship_type": "opposing"},
        headers=admin_token,
    )
    assert created.status_code == status.HTTP_201_CREATED
    link = created.json()["data"]
    assert link["related_adage"] == {
        "id": target.id,
        "adage": "He who hesitates is lost",
        "definition": "Act quickly.",
    }

    duplicate = client.post(
        base,
        json={"related_adage_id": target.id, "relationship_type": "opposing"},
        headers=admin_token,
    )
    assert duplicate.status_code == status.HTTP_400_BAD_REQUEST
    assert duplicate.json()["error"] == "This relationship already exists"

    itself = client.post(
        base,
        json={"related_adage_id": source.id, "relationship_type": "similar"},
        headers=admin_token,
    )
    assert itself.json()["error"] == "An adage cannot be related to itself"

    updated = client.put(
        f"{base}/{link['id']}", json={"relationship_type": "commonly_paired"}, headers=admin_token
    )
    assert updated.json()["data"]["relationship_type"] == "commonly_paired"

    listed = client.get(base).json()["data"]
    assert [item["related_adage_id"] for item in listed] == [target.id]

    target.hidden_at = utcnow()
    db_session.commit()
    assert client.get(base).json()["data"] == []

    client.delete(f"{base}/{link['id']}", headers=admin_token)
    assert db_session.get(RelatedAdage, link["id"]) is None
