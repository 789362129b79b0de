# tests/v1/test_forum.py
"""Tests for forum sections, threads and replies."""

from datetime import timedelta

import pytest
from fastapi import status

from adages_society.db.time import utcnow
from adages_society.models import ForumReply, ForumSection, ForumThread, Notification


@pytest.fixture()
def section(db_session) -> ForumSection:
    row = ForumSection(title="General Discussion", slug="general-discussion")
    db_session.add(row)
    db_session.commit()
    db_session.refresh(row)
    return row


@pytest.fixture()
def thread(db_session, section, other_user) -> ForumThread:
    row = ForumThread(
        section_id=section.id,
        author_id=other_user.id,
        title="Favourite sayings",
        slug="favourite-sayings",
        content="Share yours.",
        created_at=utcnow() - timedelta(hours=1),
    )
    db_session.add(row)
    db_session.commit()
    db_session.refresh(row)
    return row


def _thread_payload(section_id, title="Where does 'a penny saved' come from?"):
    return {"section_id": section_id, "title": title, "content": "Curious about the origin."}


def test_create_section_admin_only(client, auth_token, admin_token) -> None:
    payload = {"title": "Origins & Etymology"}
    assert client.post("/api/v1/forum/sections", json=payload, headers=auth_token).status_code == 403

    response = client.post("/api/v1/forum/sections", json=payload, headers=admin_token)
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["data"]["slug"] == "origins-etymology"

    clash = client.post("/api/v1/forum/sections", json=payload, headers=admin_token)
    assert clash.status_code == status.HTTP_400_BAD_REQUEST


def test_list_sections_counts_live_threads(client, db_session, section, thread) -> None:
    db_session.add(
        ForumThread(
            section_id=section.id,
            author_id=thread.author_id,
            title="Hidden",
            slug="hidden",
            content="x",
            hidden_at=utcnow(),
        )
    )
    db_session.commit()
    sections = client.get("/api/v1/forum/sections").json()["data"]
    assert [(s["slug"], s["thread_count"]) for s in sections] == [("general-discussion", 1)]


def test_create_thread_slugifies_title(client, section, auth_token) -> None:
    response = client.post(
        "/api/v1/forum/threads", json=_thread_payload(section.id), headers=auth_token
    )
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()["data"]
    assert data["slug"] == "where-does-a-penny-saved-come-from"
    assert data["author"]["id"] == data["author_id"]


def test_thread_slug_suffix_stays_unique(
    client, db_session, monkeypatch, section, other_user, auth_token
) -> None:
    now = utcnow().replace(microsecond=0)
    monkeypatch.setattr("adages_society.services.forum.utcnow", lambda: now)
    stamp = int(now.timestamp())
    for slug in ("penny-wise", f"penny-wise-{stamp}"):
        db_session.add(
            ForumThread(
                section_id=section.id,
                author_id=other_user.id,
                title="Penny wise",
                slug=slug,
                content="Earlier thread.",
                created_at=now - timedelta(days=1),
            )
        )
    db_session.commit()

    response = client.post(
        "/api/v1/forum/threads", json=_thread_payload(section.id, "Penny wise"), headers=auth_token
    )
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["data"]["slug"] == f"penny-wise-{stamp}-2"

def test_thread_cooldown(client, section, auth_token) -> None:
    client.post("/api/v1/forum/threads", json=_thread_payload(section.id), headers=auth_token)
    second = client.post(
        "/api/v1/forum/threads",
        json=_thread_payload(section.id, "Another question entirely"),
        headers=auth_token,
    )
    assert second.status_code == status.HTTP_429_TOO_MANY_REQUESTS


def test_locked_section_admits_moderators_only(
    client, db_session, section, auth_token, moderator_token
) -> None:
    section.locked = True
    db_session.commit()

    member = client.post(
        "/api/v1/forum/threads", json=_thread_payload(section.id), headers=auth_token
    )
    assert member.status_code == status.HTTP_403_FORBIDDEN
    assert member.json()["error"] == "This section is locked"

    staff = client.post(
        "/api/v1/forum/threads", json=_thread_payload(section.id), headers=moderator_token
    )
    assert staff.status_code == status.HTTP_201_CREATED


@pytest.mark.parametrize("role", ["restricted", "banned"])
def test_restricted_members_cannot_post(client, make_user, headers_for, section, role) -> None:
    user = make_user(role)
    response = client.post(
        "/api/v1/forum/threads", json=_thread_payload(section.id), headers=headers_for(user)
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_get_thread_with_replies(client, db_session, section, thread, auth_token) -> None:
    reply = client.post(
        "/api/v1/forum/replies",
        json={"thread_id": thread.id, "content": "Waste not, want not."},
        headers=auth_token,
    )
    assert reply.status_code == status.HTTP_201_CREATED

    response = client.get(f"/api/v1/forum/threads/{section.slug}/{thread.slug}")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["views_count"] == 1
    assert data["replies_count"] == 1
    assert data["last_reply_at"] is not None
    assert data["section"]["slug"] == section.slug
    assert [r["content"] for r in data["replies"]] == ["Waste not, want not."]


def test_get_thread_missing(client, section) -> None:
    response = client.get(f"/api/v1/forum/threads/{section.slug}/nope")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert client.get("/api/v1/forum/sections/nope").status_code == 404


def test_section_detail_orders_pinned_first(client, db_session, section, thread, make_user) -> None:
    author = make_user()
    pinned = ForumThread(
        section_id=section.id,
        author_id=author.id,
        title="Read me first",
        slug="read-me-first",
        content="Rules.",
        pinned=True,
        created_at=utcnow() - timedelta(days=3),
    )
    db_session.add(pinned)
    db_session.commit()

    detail = client.get(f"/api/v1/forum/sections/{section.slug}").json()["data"]
    assert [t["slug"] for t in detail["threads"]] == ["read-me-first", "favourite-sayings"]
    assert detail["thread_count"] == 2


@pytest.mark.parametrize("flag", ["locked", "frozen"])
def test_closed_threads_reject_replies(client, thread, auth_token, moderator_token, flag) -> None:
    updated = client.patch(
        f"/api/v1/forum/threads/{thread.id}", json={flag: True}, headers=moderator_token
    )
    assert updated.json()["data"][flag] is True

    response = client.post(
        "/api/v1/forum/replies",
        json={"thread_id": thread.id, "content": "Too late?"},
        headers=moderator_token,
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_moderate_thread_requires_moderator(client, thread, auth_token) -> None:
    response = client.patch(
        f"/api/v1/forum/threads/{thread.id}", json={"pinned": True}, headers=auth_token
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_hidden_thread_is_not_served(client, section, thread, moderator_token) -> None:
    client.patch(f"/api/v1/forum/threads/{thread.id}", json={"hidden": True}, headers=moderator_token)
    response = client.get(f"/api/v1/forum/threads/{section.slug}/{thread.slug}")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_reply_cooldown(client, thread, auth_token) -> None:
    client.post(
        "/api/v1/forum/replies",
        json={"thread_id": thread.id, "content": "First"},
        headers=auth_token,
    )
    second = client.post(
        "/api/v1/forum/replies",
        json={"thread_id": thread.id, "content": "Second"},
        headers=auth_token,
    )
    assert second.status_code == status.HTTP_429_TOO_MANY_REQUESTS


def test_edit_and_delete_reply(
    client, db_session, thread, test_user, auth_token, other_auth_token
) -> None:
    reply = client.post(
        "/api/v1/forum/replies",
        json={"thread_id": thread.id, "content": "Original"},
        headers=auth_token,
    ).json()["data"]

    # other_user authored the thread but not the reply.
    foreign = client.put(
        f"/api/v1/forum/replies/{reply['id']}", json={"content": "Edited"}, headers=other_auth_token
    )
    assert foreign.status_code == status.HTTP_403_FORBIDDEN

    edited = client.put(
        f"/api/v1/forum/replies/{reply['id']}", json={"content": " Edited "}, headers=auth_token
    )
    assert edited.json()["data"]["content"] == "Edited"

    deleted = client.delete(f"/api/v1/forum/replies/{reply['id']}", headers=auth_token)
    assert deleted.status_code == status.HTTP_200_OK
    db_session.refresh(thread)
    assert thread.replies_count == 0
    assert db_session.get(ForumReply, reply["id"]).deleted_at is not None


def test_delete_thread_owner_or_moderator(client, thread, auth_token, other_auth_token) -> None:
    assert client.delete(f"/api/v1/forum/threads/{thread.id}", headers=auth_token).status_code == 403
    response = client.delete(f"/api/v1/forum/threads/{thread.id}", headers=other_auth_token)
    assert response.status_code == status.HTTP_200_OK


def _reply(db_session, thread, author, content="A pointed remark"):
    reply = ForumReply(thread_id=thread.id, author_id=author.id, content=content)
    db_session.add(reply)
    thread.replies_count += 1
    db_session.commit()
    db_session.refresh(reply)
    return reply


def test_report_reply_rules(client, db_session, thread, test_user, auth_token, other_auth_token) -> None:
    reply = _reply(db_session, thread, test_user)
    body = {"reply_id": reply.id, "reason": "Personal attack"}

    own = client.post("/api/v1/forum/replies/report", json=body, headers=auth_token)
    assert own.status_code == status.HTTP_400_BAD_REQUEST
    assert own.json()["error"] == "You cannot report your own reply"

    first = client.post("/api/v1/forum/replies/report", json=body, headers=other_auth_token)
    assert first.status_code == status.HTTP_201_CREATED
    data = first.json()["data"]
    assert data["target_type"] == "forum_reply"
    assert data["challenge_reason"] == "Forum Reply Report: Personal attack"

    again = client.post("/api/v1/forum/replies/report", json=body, headers=other_auth_token)
    assert again.json()["error"] == "You have already reported this reply"

    reply.hidden_at = utcnow()
    db_session.commit()
    other = client.post(
        "/api/v1/forum/replies/report", json={"reply_id": reply.id, "reason": "Spam"}, headers=auth_token
    )
    assert other.status_code == status.HTTP_404_NOT_FOUND
    assert client.post("/api/v1/forum/replies/report", json=body).status_code == 401


def test_accepted_reply_report_removes_reply(
    client, db_session, thread, test_user, other_auth_token, admin_token
) -> None:
    reply = _reply(db_session, thread, test_user)
    challenge = client.post(
        "/api/v1/forum/replies/report",
        json={"reply_id": reply.id, "reason": "Off topic rant"},
        headers=other_auth_token,
    ).json()["data"]

    client.patch(
        f"/api/v1/challenges/{challenge['id']}", json={"status": "accepted"}, headers=admin_token
    )
    db_session.refresh(reply)
    db_session.refresh(thread)
    assert reply.deleted_at is not None
    assert thread.replies_count == 0

    warnings = (
        db_session.query(Notification)
        .filter(Notification.user_id == test_user.id, Notification.type == "report_warning")
        .all()
    )
    assert [w.title for w in warnings] == ["Your Forum Reply Was Removed"]
