# tests/services/test_rotation.py
"""Tests for the featured adage rotation service."""

from datetime import timedelta

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError

from adages_society.db.time import as_utc, utcnow
from adages_society.models import Adage, FeaturedAdageHistory
from adages_society.services.rotation import (
    ROTATION_REASON,
    ROTATION_RESTART_REASON,
    featured_adages,
    featured_history,
    rotate_featured,
    set_featured,
)


def _history(db_session):
    return (
        db_session.query(FeaturedAdageHistory)
        .order_by(FeaturedAdageHistory.id)
        .all()
    )


def _failing_commit() -> None:
    raise SQLAlchemyError("database unavailable")

def test_rotation_features_oldest_unfeatured_adage(db_session, make_adage) -> None:
    first = make_adage("First")
    make_adage("Second")
    now = utcnow()

    outcome = rotate_featured(db_session, now)

    assert outcome.adage.id == first.id
    assert outcome.cycle_restarted is False
    assert outcome.featured_until == now + timedelta(days=7)
    assert first.featured is True
    [entry] = _history(db_session)
    assert entry.adage_id == first.id
    assert entry.reason == ROTATION_REASON


def test_consecutive_rotations_move_through_archive(db_session, make_adage) -> None:
    first = make_adage("First")
    second = make_adage("Second")

    rotate_featured(db_session)
    outcome = rotate_featured(db_session)

    assert outcome.adage.id == second.id
    db_session.refresh(first)
    assert first.featured is False
    assert [a.id for a in db_session.query(Adage).filter(Adage.featured.is_(True))] == [second.id]


def test_expired_feature_is_cleared(db_session, make_adage) -> None:
    fresh = make_adage("Fresh")
    stale = make_adage("Stale", featured=True, featured_until=utcnow() - timedelta(hours=1))

    outcome = rotate_featured(db_session)

    assert outcome.adage.id == fresh.id
    assert outcome.unfeatured_count >= 1
    db_session.refresh(stale)
    assert stale.featured is False


def test_cycle_restarts_when_everything_was_featured(db_session, make_adage) -> None:
    only = make_adage("Only one")
    rotate_featured(db_session)
    # Let the first feature lapse so the adage is eligible again.
    later = utcnow() + timedelta(days=8)

    outcome = rotate_featured(db_session, later)

    assert outcome.adage.id == only.id
    assert outcome.cycle_restarted is True
    retired, current = _history(db_session)
    assert retired.deleted_at is not None
    assert current.deleted_at is None
    assert current.reason == ROTATION_RESTART_REASON


def test_hidden_and_deleted_adages_are_skipped(db_session, make_adage) -> None:
    make_adage("Hidden", hidden_at=utcnow())
    make_adage("Deleted", deleted_at=utcnow())
    visible = make_adage("Visible")

    assert rotate_featured(db_session).adage.id == visible.id


def test_empty_archive_raises_and_rolls_back(db_session, make_adage) -> None:
    make_adage("Gone", deleted_at=utcnow())
    with pytest.raises(HTTPException) as excinfo:
        rotate_featured(db_session)
    assert excinfo.value.status_code == 404
    assert _history(db_session) == []


def test_database_error_rolls_back_every_step(db_session, make_adage, monkeypatch) -> None:
    make_adage("Fresh")
    stale = make_adage("Stale", featured=True, featured_until=utcnow() - timedelta(hours=1))

    monkeypatch.setattr(db_session, "commit", _failing_commit)
    with pytest.raises(SQLAlchemyError):
        rotate_featured(db_session)
    monkeypatch.undo()

    db_session.refresh(stale)
    assert stale.featured is True
    assert db_session.query(Adage).filter(Adage.featured.is_(True)).count() == 1
    assert _history(db_session) == []


def test_failed_cycle_restart_keeps_history(db_session, make_adage, monkeypatch) -> None:
    make_adage("Only one")
    rotate_featured(db_session)
    later = utcnow() + timedelta(days=8)

    monkeypatch.setattr(db_session, "commit", _failing_commit)
    with pytest.raises(SQLAlchemyError):
        rotate_featured(db_session, later)
    monkeypatch.undo()

    (entry,) = _history(db_session)
    db_session.refresh(entry)
    assert entry.deleted_at is None

def test_set_featured_records_manual_window(db_session, make_adage, admin_user) -> None:
    current = make_adage("Current", featured=True)
    target = make_adage("Target")
    until = utcnow() + timedelta(days=2)

    set_featured(db_session, target, user_id=admin_user.id, featured_until=until, reason="Holiday")

    db_session.refresh(current)
    assert current.featured is False
    assert as_utc(target.featured_until) == until
    [entry] = _history(db_session)
    assert (entry.reason, entry.created_by) == ("Holiday", admin_user.id)


def test_set_featured_rejects_past_window(db_session, adage) -> None:
    with pytest.raises(HTTPException) as excinfo:
        set_featured(db_session, adage, user_id=None, featured_until=utcnow() - timedelta(1))
    assert excinfo.value.status_code == 400


def test_featured_listing_and_history(db_session, make_adage) -> None:
    first = make_adage("First")
    second = make_adage("Second")
    rotate_featured(db_session)
    rotate_featured(db_session)

    listed = featured_adages(db_session)
    assert [item.id for item in listed] == [second.id]

    history = featured_history(db_session)
    assert {entry.adage_id for entry in history} == {first.id, second.id}
