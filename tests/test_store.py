from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from livetranslate.config.exception import StorageUnavailable
from livetranslate.database import build_session_factory
from livetranslate.sessions.store import OPERATION_POLICIES, SessionStore, StorePolicy


def test_create_session_starts_active(store, owner):
    session_id = store.create_session(owner.id, "Demo", "en", "zh-Hant", "medical")
    session = store.get_session(session_id)

    assert session.user_id == owner.id
    assert session.status == "active"
    assert session.ended_at is None
    assert session.scenario == "medical"


def test_list_sessions_scoped_to_owner_in_start_order(store, owner, stranger):
    first = store.create_session(owner.id, "First", "en", "ja")
    store.create_session(stranger.id, "Other", "en", "ja")
    second = store.create_session(owner.id, "Second", "ja", "en")

    assert [s.id for s in store.list_sessions(owner.id)] == [first, second]


def test_transcripts_listed_in_timestamp_order(store, owner):
    session_id = store.create_session(owner.id, "Demo", "en", "fr")
    for i in range(5):
        store.append_transcript(session_id, f"line {i}", f"ligne {i}", confidence=80 + i)

    transcripts = store.list_transcripts(session_id)
    timestamps = [t.timestamp for t in transcripts]
    assert [t.original_text for t in transcripts] == [f"line {i}" for i in range(5)]
    assert timestamps == sorted(timestamps)
    assert transcripts[0].confidence == 80


def test_duplicate_transcripts_are_kept(store, owner):
    session_id = store.create_session(owner.id, "Demo", "en", "fr")
    store.append_transcript(session_id, "same", "même")
    store.append_transcript(session_id, "same", "même")

    assert len(store.list_transcripts(session_id)) == 2


def test_ended_at_required_for_closed_status(store, owner):
    session_id = store.create_session(owner.id, "Demo", "en", "fr")

    with pytest.raises(IntegrityError):
        store.update_session(session_id, status="completed")

    store.update_session(session_id, status="completed", ended_at=datetime.now(timezone.utc))
    session = store.get_session(session_id)
    assert session.status == "completed"
    assert session.ended_at is not None


def test_update_session_only_touches_lifecycle_fields(store, owner):
    session_id = store.create_session(owner.id, "Demo", "en", "fr")

    with pytest.raises(ValueError):
        store.update_session(session_id, title="Renamed")


def test_summary_is_unique_per_session(store, owner):
    session_id = store.create_session(owner.id, "Demo", "en", "fr")

    first = store.upsert_summary(session_id, "first")
    second = store.upsert_summary(session_id, "second")

    assert second.id == first.id
    assert store.get_summary(session_id).summary_text == "first"


def test_upsert_user_creates_then_refreshes_sign_in(store):
    earlier = datetime(2026, 1, 1, tzinfo=timezone.utc)
    user = store.upsert_user("abc", name="Ann", email="ann@example.com", signed_in_at=earlier)
    assert user.role == "user"

    again = store.upsert_user("abc", signed_in_at=earlier + timedelta(hours=1))
    assert again.id == user.id
    assert again.name == "Ann"
    assert again.last_signed_in.replace(tzinfo=timezone.utc) == earlier + timedelta(hours=1)

    stale = store.upsert_user("abc", signed_in_at=earlier)
    assert stale.last_signed_in.replace(tzinfo=timezone.utc) == earlier + timedelta(hours=1)


def test_reads_and_writes_have_declared_policies():
    for name, policy in OPERATION_POLICIES.items():
        assert getattr(SessionStore, name).policy is policy
    assert SessionStore.get_session.policy is StorePolicy.DEGRADE
    assert SessionStore.append_transcript.policy is StorePolicy.FAIL


@pytest.mark.parametrize(
    "unavailable_store",
    [
        SessionStore(None),
        SessionStore(build_session_factory("sqlite:////nonexistent-dir/livetranslate.db")),
    ],
    ids=["not-configured", "connection-error"],
)
def test_unavailable_storage_degrades_reads_and_fails_writes(unavailable_store):
    assert unavailable_store.get_session(1) is None
    assert unavailable_store.list_sessions(1) == []
    assert unavailable_store.list_transcripts(1) == []
    assert unavailable_store.get_summary(1) is None

    with pytest.raises(StorageUnavailable):
        unavailable_store.create_session(1, "Demo", "en", "fr")
    with pytest.raises(StorageUnavailable):
        unavailable_store.append_transcript(1, "a", "b")
    with pytest.raises(StorageUnavailable):
        unavailable_store.update_session(1, status="completed", ended_at=datetime.now(timezone.utc))
    with pytest.raises(StorageUnavailable):
        unavailable_store.upsert_summary(1, "text")
    with pytest.raises(StorageUnavailable):
        unavailable_store.upsert_user("abc")
