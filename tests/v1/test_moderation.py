# tests/v1/test_moderation.py
"""Tests for reader challenges, comment reports, appeals and the deleted-items queue."""

from fastapi import status

from adages_society.models import Comment, ContactMessage, Notification, ReaderChallenge


def _comment(db_session, author, adage, content="An opinion worth reporting"):
    comment = Comment(user_id=author.id, target_type="adage", target_id=adage.id, content=content)
    db_session.add(comment)
    db_session.commit()
    db_session.refresh(comment)
    return comment


def _report(client, headers, comment_id, reason="Rude and off topic"):
    response = client.post(
        "/api/v1/comments/report",
        json={"comment_id": comment_id, "reason": reason},
        headers=headers,
    )
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()["data"]


def _notifications(db_session, user, kind):
    return (
        db_session.query(Notification)
        .filter(Notification.user_id == user.id, Notification.type == kind)
        .all()
    )


def test_create_challenge_notifies_admins(
    client, db_session, adage, auth_token, admin_user
) -> None:
    response = client.post(
        "/api/v1/challenges",
        json={
            "target_type": "adage",
            "target_id": adage.id,
            "challenge_reason": "The attribution is wrong",
        },
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()["data"]
    assert data["status"] == "pending"
    assert data["target_title"] == adage.adage
    assert data["appeal_allowed"] is True
    assert len(_notifications(db_session, admin_user, "system")) == 1


def test_challenge_missing_target(client, auth_token) -> None:
    response = client.post(
        "/api/v1/challenges",
        json={"target_type": "blog", "target_id": 555, "challenge_reason": "Wrong date"},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_list_challenges_admin_only(client, adage, auth_token, admin_token) -> None:
    client.post(
        "/api/v1/challenges",
        json={"target_type": "adage", "target_id": adage.id, "challenge_reason": "Dubious"},
        headers=auth_token,
    )
    assert client.get("/api/v1/challenges", headers=auth_token).status_code == 403
    listed = client.get(
        "/api/v1/challenges", params={"status": "pending"}, headers=admin_token
    ).json()["data"]
    assert len(listed) == 1


def test_reviewed_status_keeps_challenge_open(
    client, db_session, adage, auth_token, admin_token
) -> None:
    challenge = client.post(
        "/api/v1/challenges",
        json={"target_type": "adage", "target_id": adage.id, "challenge_reason": "Dubious"},
        headers=auth_token,
    ).json()["data"]
    response = client.patch(
        f"/api/v1/challenges/{challenge['id']}",
        json={"status": "reviewed", "admin_notes": "Looking into it"},
        headers=admin_token,
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["status"] == "reviewed"
    assert data["deleted_at"] is None
    assert data["admin_notes"] == "Looking into it"


def test_accepting_reviewed_report_closes_it(
    client, db_session, adage, test_user, other_user, other_auth_token, admin_token
) -> None:
    comment = _comment(db_session, test_user, adage)
    challenge = _report(client, other_auth_token, comment.id)
    path = f"/api/v1/challenges/{challenge['id']}"
    client.patch(path, json={"status": "reviewed"}, headers=admin_token)

    response = client.patch(path, json={"status": "accepted"}, headers=admin_token)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["deleted_at"] is not None

    db_session.refresh(comment)
    assert comment.deleted_at is not None
    assert len(_notifications(db_session, other_user, "report_accepted")) == 1
    assert len(_notifications(db_session, test_user, "report_warning")) == 1

    queue = client.get("/api/v1/admin/deleted-items", headers=admin_token).json()["data"]
    assert any(
        item["type"] == "challenge" and item["id"] == challenge["id"] for item in queue
    )


def test_reject_challenge_closes_and_notifies(
    client, db_session, adage, test_user, auth_token, admin_token
) -> None:
    challenge = client.post(
        "/api/v1/challenges",
        json={"target_type": "adage", "target_id": adage.id, "challenge_reason": "Dubious"},
        headers=auth_token,
    ).json()["data"]
    response = client.patch(
        f"/api/v1/challenges/{challenge['id']}", json={"status": "rejected"}, headers=admin_token
    )
    assert response.json()["data"]["deleted_at"] is not None
    assert len(_notifications(db_session, test_user, "report_rejected")) == 1

    # Closed challenges drop out of the open queue.
    again = client.patch(
        f"/api/v1/challenges/{challenge['id']}", json={"status": "accepted"}, headers=admin_token
    )
    assert again.status_code == status.HTTP_404_NOT_FOUND


def test_accepting_comment_report_removes_comment_and_warns_author(
    client, db_session, adage, test_user, other_user, other_auth_token, admin_token
) -> None:
    comment = _comment(db_session, test_user, adage)
    challenge = _report(client, other_auth_token, comment.id)

    response = client.patch(
        f"/api/v1/challenges/{challenge['id']}", json={"status": "accepted"}, headers=admin_token
    )
    assert response.status_code == status.HTTP_200_OK

    db_session.refresh(comment)
    assert comment.deleted_at is not None
    assert len(_notifications(db_session, other_user, "report_accepted")) == 1
    warnings = _notifications(db_session, test_user, "report_warning")
    assert [w.related_id for w in warnings] == [challenge["id"]]


def test_appeal_flow_accepted_restores_comment(
    client, db_session, adage, test_user, auth_token, other_auth_token, admin_token
) -> None:
    comment = _comment(db_session, test_user, adage)
    challenge = _report(client, other_auth_token, comment.id)
    client.patch(
        f"/api/v1/challenges/{challenge['id']}", json={"status": "accepted"}, headers=admin_token
    )
    warning = _notifications(db_session, test_user, "report_warning")[0]

    appeal = client.post(
        "/api/v1/appeals",
        json={"notification_id": warning.id, "message": "I was quoting the adage itself."},
        headers=auth_token,
    )
    assert appeal.status_code == status.HTTP_201_CREATED
    result = appeal.json()["data"]
    assert result["challenge_id"] == challenge["id"]
    assert result["appeal_decision"] is None

    message = db_session.get(ContactMessage, result["contact_message_id"])
    assert message.category == "correction"
    assert message.challenge_id == challenge["id"]

    second = client.post(
        "/api/v1/appeals",
        json={"notification_id": warning.id, "message": "Please look again at this one."},
        headers=auth_token,
    )
    assert second.status_code == status.HTTP_400_BAD_REQUEST
    assert second.json()["error"] == "You have already used your appeal for this decision"

    decided = client.patch(
        f"/api/v1/admin/appeals/{result['contact_message_id']}",
        json={"decision": "accepted"},
        headers=admin_token,
    )
    assert decided.status_code == status.HTTP_200_OK
    assert decided.json()["data"]["appeal_decision"] == "accepted"

    row = db_session.get(ReaderChallenge, challenge["id"])
    db_session.refresh(row)
    db_session.refresh(comment)
    assert row.status == "pending"
    assert row.deleted_at is None
    assert row.appeal_allowed is False
    assert comment.deleted_at is None

    twice = client.patch(
        f"/api/v1/admin/appeals/{result['contact_message_id']}",
        json={"decision": "rejected"},
        headers=admin_token,
    )
    assert twice.status_code == status.HTTP_400_BAD_REQUEST


def test_rejected_appeal_notifies_reporter(
    client, db_session, adage, test_user, auth_token, other_user, other_auth_token, admin_token
) -> None:
    comment = _comment(db_session, test_user, adage)
    challenge = _report(client, other_auth_token, comment.id)
    client.patch(
        f"/api/v1/challenges/{challenge['id']}", json={"status": "accepted"}, headers=admin_token
    )
    warning = _notifications(db_session, test_user, "report_warning")[0]
    appeal = client.post(
        "/api/v1/appeals",
        json={"notification_id": warning.id, "message": "This removal was a mistake."},
        headers=auth_token,
    ).json()["data"]

    client.patch(
        f"/api/v1/admin/appeals/{appeal['contact_message_id']}",
        json={"decision": "rejected", "response_message": "The decision stands."},
        headers=admin_token,
    )
    assert len(_notifications(db_session, other_user, "report_rejected")) == 1
    responses = _notifications(db_session, test_user, "appeal_response")
    assert any(n.message == "The decision stands." for n in responses)

    db_session.refresh(comment)
    assert comment.deleted_at is not None


def test_appeal_requires_own_warning(
    client, db_session, adage, test_user, other_auth_token, admin_token
) -> None:
    comment = _comment(db_session, test_user, adage)
    challenge = _report(client, other_auth_token, comment.id)
    client.patch(
        f"/api/v1/challenges/{challenge['id']}", json={"status": "accepted"}, headers=admin_token
    )
    warning = _notifications(db_session, test_user, "report_warning")[0]

    response = client.post(
        "/api/v1/appeals",
        json={"notification_id": warning.id, "message": "Not mine but let me try."},
        headers=other_auth_token,
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_appeal_message_too_short(client, auth_token) -> None:
    response = client.post(
        "/api/v1/appeals", json={"notification_id": 1, "message": "short"}, headers=auth_token
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_deleted_items_and_restore(
    client, db_session, make_adage, test_user, admin_token
) -> None:
    adage = make_adage("Removed wisdom")
    comment = _comment(db_session, test_user, adage)
    client.delete(f"/api/v1/adages/{adage.id}", headers=admin_token)
    client.delete(f"/api/v1/comments/{comment.id}", headers=admin_token)

    items = client.get("/api/v1/admin/deleted-items", headers=admin_token).json()["data"]
    assert {(item["type"], item["id"]) for item in items} == {
        ("adage", adage.id),
        ("comment", comment.id),
    }

    restored = client.post(
        f"/api/v1/admin/deleted-items/adage/{adage.id}/restore", headers=admin_token
    )
    assert restored.status_code == status.HTTP_200_OK
    assert client.get(f"/api/v1/adages/{adage.id}").status_code == status.HTTP_200_OK

    missing = client.post(
        f"/api/v1/admin/deleted-items/adage/{adage.id}/restore", headers=admin_token
    )
    assert missing.status_code == status.HTTP_404_NOT_FOUND

    bogus = client.post("/api/v1/admin/deleted-items/widget/1/restore", headers=admin_token)
    assert bogus.status_code == status.HTTP_400_BAD_REQUEST
