# tests/v1/test_votes.py
"""Tests for vote-related endpoints."""

import pytest
from fastapi import status


def _vote(client, headers, target_id, value, target_type="adage"):
    return client.post(
        "/api/v1/votes",
        json={"target_type": target_type, "target_id": target_id, "value": value},
        headers=headers,
    )


def test_cast_upvote(client, auth_token, adage) -> None:
    response = _vote(client, auth_token, adage.id, 1)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"] == {"score": 1, "vote_count": 1, "user_vote": 1}


def test_same_vote_twice_toggles_off(client, auth_token, adage) -> None:
    _vote(client, auth_token, adage.id, 1)
    response = _vote(client, auth_token, adage.id, 1)
    assert response.json()["data"] == {"score": 0, "vote_count": 0, "user_vote": 0}


def test_opposite_vote_flips(client, auth_token, other_auth_token, adage) -> None:
    _vote(client, other_auth_token, adage.id, 1)
    _vote(client, auth_token, adage.id, 1)
    response = _vote(client, auth_token, adage.id, -1)
    assert response.json()["data"] == {"score": 0, "vote_count": 2, "user_vote": -1}


def test_zero_clears_vote(client, auth_token, adage) -> None:
    _vote(client, auth_token, adage.id, -1)
    response = _vote(client, auth_token, adage.id, 0)
    assert response.json()["data"]["user_vote"] == 0
    # Clearing when nothing is cast is a no-op.
    again = _vote(client, auth_token, adage.id, 0)
    assert again.json()["data"]["vote_count"] == 0


def test_vote_invalid_value(client, auth_token, adage) -> None:
    response = _vote(client, auth_token, adage.id, 2)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_vote_nonexistent_target(client, auth_token) -> None:
    response = _vote(client, auth_token, 9999, 1)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_vote_requires_auth(client, adage) -> None:
    response = client.post(
        "/api/v1/votes", json={"target_type": "adage", "target_id": adage.id, "value": 1}
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"success": False, "error": "Unauthorized"}


def test_unverified_user_cannot_vote(client, make_user, headers_for, adage) -> None:
    user = make_user(verified=False)
    response = _vote(client, headers_for(user), adage.id, 1)
    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.parametrize("role", ["restricted", "banned"])
def test_restricted_roles_cannot_vote(client, make_user, headers_for, adage, role) -> None:
    user = make_user(role)
    response = _vote(client, headers_for(user), adage.id, 1)
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_get_votes_reports_caller_vote(client, auth_token, adage) -> None:
    _vote(client, auth_token, adage.id, -1)
    anonymous = client.get(
        "/api/v1/votes", params={"target_type": "adage", "target_id": adage.id}
    ).json()["data"]
    assert anonymous == {"score": -1, "vote_count": 1, "user_vote": 0}

    mine = client.get(
        "/api/v1/votes",
        params={"target_type": "adage", "target_id": adage.id},
        headers=auth_token,
    ).json()["data"]
    assert mine["user_vote"] == -1
