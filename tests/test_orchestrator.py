import asyncio

import pytest

from livetranslate.config.exception import AppException, UpstreamFailed
from livetranslate.models.session import SessionStatus


def run(coro):
    return asyncio.run(coro)


def test_demo_scenario(orchestrator, store, owner, translator, summarizer):
    session_id = orchestrator.create_session(owner.id, "Demo", "en", "zh-Hant")

    result = run(orchestrator.submit_utterance(owner.id, session_id, "Hello", 93))
    assert result.translated_text == "你好"

    transcripts = orchestrator.list_transcripts(owner.id, session_id)
    assert [(t.original_text, t.translated_text) for t in transcripts] == [("Hello", "你好")]

    orchestrator.end_session(owner.id, session_id)
    session = orchestrator.get_session(owner.id, session_id)
    assert session.status == SessionStatus.COMPLETED.value
    assert session.ended_at is not None

    first = run(orchestrator.generate_summary(owner.id, session_id))
    second = run(orchestrator.generate_summary(owner.id, session_id))

    assert first.summary_text
    assert second.summary_text == first.summary_text
    assert second.id == first.id
    assert summarizer.calls == [["Hello → 你好"]]
    assert orchestrator.get_summary(owner.id, session_id).id == first.id


def test_persisted_confidence_is_recognition_confidence(orchestrator, owner):
    session_id = orchestrator.create_session(owner.id, "Demo", "en", "zh-Hant")

    result = run(orchestrator.submit_utterance(owner.id, session_id, "Hello", 42))

    assert result.confidence == 0.91
    assert orchestrator.list_transcripts(owner.id, session_id)[0].confidence == 42


def test_scenario_is_passed_to_translator(orchestrator, owner, translator):
    session_id = orchestrator.create_session(owner.id, "Clinic", "en", "ja", "medical")

    run(orchestrator.submit_utterance(owner.id, session_id, "Where does it hurt?"))

    assert translator.calls == [("Where does it hurt?", "en", "ja", "medical")]


@pytest.mark.parametrize("title", ["", "   "])
def test_blank_title_rejected(orchestrator, owner, title):
    with pytest.raises(AppException) as exc:
        orchestrator.create_session(owner.id, title, "en", "fr")
    assert exc.value.code == "TITLE_REQUIRED"


def test_other_users_session_is_not_found(orchestrator, owner, stranger):
    session_id = orchestrator.create_session(owner.id, "Private", "en", "fr")
    run(orchestrator.submit_utterance(owner.id, session_id, "Hello"))

    operations = [
        lambda: orchestrator.get_session(stranger.id, session_id),
        lambda: orchestrator.list_transcripts(stranger.id, session_id),
        lambda: orchestrator.end_session(stranger.id, session_id),
        lambda: orchestrator.get_summary(stranger.id, session_id),
        lambda: run(orchestrator.submit_utterance(stranger.id, session_id, "Hi")),
        lambda: run(orchestrator.generate_summary(stranger.id, session_id)),
    ]
    for operation in operations:
        with pytest.raises(AppException) as exc:
            operation()
        assert exc.value.status_code == 404
        assert exc.value.code == "SESSION_NOT_FOUND"

    missing = session_id + 100
    with pytest.raises(AppException) as exc:
        orchestrator.get_session(owner.id, missing)
    assert exc.value.code == "SESSION_NOT_FOUND"
    assert orchestrator.get_session(owner.id, session_id).status == "active"


def test_summary_without_transcripts_fails_and_persists_nothing(orchestrator, store, owner, summarizer):
    session_id = orchestrator.create_session(owner.id, "Empty", "en", "fr")

    with pytest.raises(AppException) as exc:
        run(orchestrator.generate_summary(owner.id, session_id))

    assert exc.value.code == "NO_TRANSCRIPTS"
    assert summarizer.calls == []
    assert store.get_summary(session_id) is None


def test_empty_summary_is_not_persisted(orchestrator, store, owner, summarizer):
    summarizer.text = "  "
    session_id = orchestrator.create_session(owner.id, "Demo", "en", "fr")
    run(orchestrator.submit_utterance(owner.id, session_id, "Hello"))

    with pytest.raises(UpstreamFailed) as exc:
        run(orchestrator.generate_summary(owner.id, session_id))

    assert exc.value.code == "SUMMARY_FAILED"
    assert store.get_summary(session_id) is None


def test_summary_provider_crash_surfaces_generic_failure(orchestrator, store, owner, summarizer):
    async def explode(lines):
        raise ValueError("provider said something internal")

    summarizer.summarize = explode
    session_id = orchestrator.create_session(owner.id, "Demo", "en", "fr")
    run(orchestrator.submit_utterance(owner.id, session_id, "Hello"))

    with pytest.raises(UpstreamFailed) as exc:
        run(orchestrator.generate_summary(owner.id, session_id))
    assert "internal" not in exc.value.message


def test_end_session_twice_restamps(orchestrator, store, owner):
    session_id = orchestrator.create_session(owner.id, "Demo", "en", "fr")

    orchestrator.end_session(owner.id, session_id)
    first_end = store.get_session(session_id).ended_at
    orchestrator.end_session(owner.id, session_id)
    second = store.get_session(session_id)

    assert second.status == "completed"
    assert second.ended_at >= first_end


def test_archived_session_cannot_be_reopened(orchestrator, store, owner):
    session_id = orchestrator.create_session(owner.id, "Demo", "en", "fr")
    orchestrator.end_session(owner.id, session_id)
    store.update_session(session_id, status="archived", ended_at=store.get_session(session_id).ended_at)

    with pytest.raises(AppException) as exc:
        orchestrator.end_session(owner.id, session_id)
    assert exc.value.code == "SESSION_ARCHIVED"
    assert store.get_session(session_id).status == "archived"


def test_utterance_after_end_is_rejected(orchestrator, store, owner, translator):
    session_id = orchestrator.create_session(owner.id, "Demo", "en", "fr")
    orchestrator.end_session(owner.id, session_id)

    with pytest.raises(AppException) as exc:
        run(orchestrator.submit_utterance(owner.id, session_id, "Too late"))

    assert exc.value.code == "SESSION_NOT_ACTIVE"
    assert translator.calls == []
    assert store.list_transcripts(session_id) == []


def test_translation_failure_persists_nothing(orchestrator, store, owner, translator):
    async def fail(*args, **kwargs):
        raise UpstreamFailed("Translation failed", code="TRANSLATION_FAILED")

    translator.translate = fail
    session_id = orchestrator.create_session(owner.id, "Demo", "en", "fr")

    with pytest.raises(UpstreamFailed):
        run(orchestrator.submit_utterance(owner.id, session_id, "Hello"))
    assert store.list_transcripts(session_id) == []


def test_status_transitions_only_move_forward():
    assert SessionStatus.ACTIVE.can_transition_to(SessionStatus.COMPLETED)
    assert SessionStatus.COMPLETED.can_transition_to(SessionStatus.COMPLETED)
    assert SessionStatus.COMPLETED.can_transition_to(SessionStatus.ARCHIVED)
    assert not SessionStatus.COMPLETED.can_transition_to(SessionStatus.ACTIVE)
    assert not SessionStatus.ARCHIVED.can_transition_to(SessionStatus.COMPLETED)
