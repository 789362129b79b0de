# tests/services/test_versioning.py
"""Tests for edit-history snapshots."""

from adages_society.models import AdageVersion, BlogPost
from adages_society.services.versioning import (
    apply_changes,
    next_version_number,
    snapshot_adage,
    snapshot_blog_post,
)


def test_adage_snapshots_are_numbered(db_session, adage, admin_user) -> None:
    first = snapshot_adage(db_session, adage, admin_user.id)
    db_session.flush()
    second = snapshot_adage(db_session, adage, admin_user.id)
    db_session.commit()

    assert (first.version_number, second.version_number) == (1, 2)
    assert next_version_number(db_session, AdageVersion, AdageVersion.adage_id, adage.id) == 3
    assert first.changed_by == admin_user.id


def test_snapshot_keeps_previous_state(db_session, adage) -> None:
    version = snapshot_adage(db_session, adage, None)
    changed = apply_changes(adage, {"adage": "A stitch in time", "tags": ["thrift"]})
    db_session.commit()

    assert sorted(changed) == ["adage", "tags"]
    assert version.adage == "A stitch in time saves nine"
    assert version.tags == ["time", "thrift"]


def test_apply_changes_skips_equal_values(adage) -> None:
    assert apply_changes(adage, {"adage": adage.adage, "origin": "Proverb"}) == ["origin"]
    assert adage.origin == "Proverb"


def test_blog_post_snapshot(db_session) -> None:
    post = BlogPost(title="Old", slug="old", content="Body", tags=["news"])
    db_session.add(post)
    db_session.commit()

    version = snapshot_blog_post(db_session, post, None)
    post.title = "New"
    db_session.commit()

    assert (version.post_id, version.version_number, version.title) == (post.id, 1, "Old")
