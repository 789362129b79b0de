# tests/v1/test_comments.py
"""Tests for comment endpoints."""

from fastapi import status

from adages_society.models import ActivityLog, Comment, Friendship


def _post_comment(client, headers, target_id, content="Well said, and true.", **extra):
    return client.post(
        "/api/v1/comments",
        json={"target_type": "adage", "target_id": target_id, "content": content, **extra},
        headers=headers,
    )


def test_create_and_list_comments(client, adage, test_user, auth_token) -> None:
    response = _post_comment(client, auth_token, adage.id)
    assert response.status_code == status.HTTP_201_CREATED
    comment = response.json()["data"]
    assert comment["user_id"] == test_user.id
    assert comment["is_commendation"] is False

    listed = client.get(
        "/api/v1/comments", params={"target_type": "adage", "target_id": adage.id}
    ).json()["data"]
    assert [c["id"] for c in listed] == [comment["id"]]
    assert listed[0]["author"]["username"] == test_user.username


def test_comment_length_is_enforced(client, adage, auth_token) -> None:
    short = _post_comment(client, auth_token, adage.id, content="  hi  ")
    assert short.status_code == status.HTTP_400_BAD_REQUEST
    assert short.json()["error"] == "Comment must be at least 3 characters"

    long = _post_comment(client, auth_token, adage.id, content="x" * 5001)
    assert long.status_code == status.HTTP_400_BAD_REQUEST


def test_comment_on_missing_target(client, auth_token) -> None:
    response = _post_comment(client, auth_token, 424242)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_reply_requires_parent_on_same_target(client, make_adage, auth_token) -> None:
    first = make_adage("First")
    second = make_adage("Second")
    parent = _post_comment(client, auth_token, first.id).json()["data"]

    ok = _post_comment(client, auth_token, first.id, parent_id=parent["id"])
    assert ok.status_code == status.HTTP_201_CREATED
    assert ok.json()["data"]["parent_id"] == parent["id"]

    wrong = _post_comment(client, auth_token, second.id, parent_id=parent["id"])
    assert wrong.status_code == status.HTTP_404_NOT_FOUND


def test_commendation_flag_only_for_moderators(
    client, adage, auth_token, moderator_token
) -> None:
    member = _post_comment(client, auth_token, adage.id, is_commendation=True)
    assert member.json()["data"]["is_commendation"] is False

    staff = _post_comment(client, moderator_token, adage.id, is_commendation=True)
    assert staff.json()["data"]["is_commendation"] is True


def test_private_profile_comments_need_friendship(
    client, db_session, make_user, headers_for
) -> None:
    owner = make_user(profile_private=True)
    stranger = make_user()
    friend = make_user()
    db_session.add(Friendship(user_id=friend.id, friend_id=owner.id, status="accepted"))
    db_session.commit()

    payload = {"target_type": "user", "target_id": owner.id, "content": "Hello there!"}
    denied = client.post("/api/v1/comments", json=payload, headers=headers_for(stranger))
    assert denied.status_code == status.HTTP_403_FORBIDDEN

    allowed = client.post("/api/v1/comments", json=payload, headers=headers_for(friend))
    assert allowed.status_code == status.HTTP_201_CREATED

    own = client.post("/api/v1/comments", json=payload, headers=headers_for(owner))
    assert own.status_code == status.HTTP_201_CREATED


def test_update_own_comment_only(client, adage, auth_token, other_auth_token) -> None:
    comment = _post_comment(client, auth_token, adage.id).json()["data"]

    forbidden = client.put(
        f"/api/v1/comments/{comment['id']}",
        json={"content": "Hijacked text"},
        headers=other_auth_token,
    )
    assert forbidden.status_code == status.HTTP_403_FORBIDDEN

    updated = client.put(
        f"/api/v1/comments/{comment['id']}",
        json={"content": "Edited thought"},
        headers=auth_token,
    )
    assert updated.status_code == status.HTTP_200_OK
    assert updated.json()["data"]["content"] == "Edited thought"


def test_owner_cannot_edit_commendation(
    client, db_session, adage, test_user, auth_token, moderator_token
) -> None:
    comment = Comment(
        user_id=test_user.id,
        target_type="adage",
        target_id=adage.id,
        content="Commended words",
        is_commendation=True,
    )
    db_session.add(comment)
    db_session.commit()

    response = client.put(
        f"/api/v1/comments/{comment.id}", json={"content": "Changed"}, headers=auth_token
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["error"] == "Only moderators can modify commendations"

    staff = client.delete(f"/api/v1/comments/{comment.id}", headers=moderator_token)
    assert staff.status_code == status.HTTP_200_OK


def test_members_cannot_delete_commendations(
    client, db_session, adage, test_user, auth_token, other_auth_token
) -> None:
    comment = Comment(
        user_id=test_user.id,
        target_type="adage",
        target_id=adage.id,
        content="Commended words",
        is_commendation=True,
    )
    db_session.add(comment)
    db_session.commit()

    for headers in (other_auth_token, auth_token):
        response = client.delete(f"/api/v1/comments/{comment.id}", headers=headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    db_session.refresh(comment)
    assert comment.deleted_at is None

def test_deleted_comment_visible_only_to_author(
    client, db_session, adage, auth_token, other_auth_token
) -> None:
    comment = _post_comment(client, auth_token, adage.id).json()["data"]
    response = client.delete(f"/api/v1/comments/{comment['id']}", headers=auth_token)
    assert response.status_code == status.HTTP_200_OK

    params = {"target_type": "adage", "target_id": adage.id}
    mine = client.get("/api/v1/comments", params=params, headers=auth_token).json()["data"]
    assert [c["id"] for c in mine] == [comment["id"]]
    assert mine[0]["deleted_at"] is not None

    theirs = client.get("/api/v1/comments", params=params, headers=other_auth_token)
    assert theirs.json()["data"] == []

    log = db_session.query(ActivityLog).filter(ActivityLog.action == "delete_comment").one()
    assert log.details["by_owner"] is True


def test_comment_rate_limit(client, adage, auth_token) -> None:
    for i in range(10):
        assert _post_comment(client, auth_token, adage.id, content=f"Comment {i}").status_code == 201
    response = _post_comment(client, auth_token, adage.id, content="One too many")
    assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS


def test_report_comment(client, adage, test_user, auth_token, other_user, other_auth_token) -> None:
    comment = _post_comment(client, auth_token, adage.id).json()["data"]

    self_report = client.post(
        "/api/v1/comments/report",
        json={"comment_id": comment["id"], "reason": "Mine"},
        headers=auth_token,
    )
    assert self_report.status_code == status.HTTP_400_BAD_REQUEST

    response = client.post(
        "/api/v1/comments/report",
        json={"comment_id": comment["id"], "reason": "Offensive remark"},
        headers=other_auth_token,
    )
    assert response.status_code == status.HTTP_201_CREATED
    challenge = response.json()["data"]
    assert challenge["challenge_reason"] == "Comment Report: Offensive remark"
    assert challenge["reporter_role"] == "user"
    assert challenge["reported_user_id"] == test_user.id
    assert challenge["reported_user_role"] == "user"
    assert challenge["challenger_id"] == other_user.id
