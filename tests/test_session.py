from __future__ import annotations

from datetime import datetime, timezone

import pytest

from config.settings import Settings
from runtime.session import SessionClosedError, SessionOrchestrator
from voice.lexicon import KOREAN
from voice.models import SessionMessage
from voice.profile import MasterProfileManager

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def _orchestrator(settings: Settings) -> SessionOrchestrator:
    return SessionOrchestrator(settings, lexicon=KOREAN)


def test_only_user_messages_are_analyzed(settings: Settings) -> None:
    orchestrator = _orchestrator(settings)
    session = orchestrator.start("user-1", conversation_id="conv-1", now=T0)

    orchestrator.add_message(session, "브랜드 고민이 있어요", ai_response="어떤 브랜드인가요?", now=T0)
    orchestrator.add_message(session, SessionMessage("a1", "assistant", "좋은 질문이네요."), ai_response="무시됨")

    assert [message.role for message in session.messages] == ["user", "assistant", "assistant"]
    assert session.messages[1].content == "어떤 브랜드인가요?"
    assert len(session.analyses) == 1
    assert session.ai_responses == ["어떤 브랜드인가요?", "좋은 질문이네요."]
    assert session.user_messages() == ["브랜드 고민이 있어요"]
    assert session.conversation_id == "conv-1"


def test_ai_turns_feed_conversation_context(settings: Settings) -> None:
    orchestrator = _orchestrator(settings)
    profile = MasterProfileManager(settings, lexicon=KOREAN).create_new_profile("user-1", now=T0)
    session = orchestrator.start("user-1", now=T0)
    orchestrator.add_message(session, "브랜드 고민이 있어요", ai_response="어떤 브랜드인가요? 타겟도 알려주세요.", now=T0)
    orchestrator.add_message(session, "카페 브랜드예요", ai_response="좋아요. 오픈은 언제인가요?", now=T0)

    context = orchestrator.context_analyzer.analyze(session.messages)
    assert context.previous_questions == ["어떤 브랜드인가요?", "오픈은 언제인가요?"]
    assert context.conversation_length == 4
    assert context.is_first_time is False

    outcome = orchestrator.complete(session, profile, now=T0)
    assert outcome.summary.total_messages == 4
    assert outcome.summary.user_message_count == 2
    assert outcome.summary.ai_response_count == 2


def test_satisfaction_from_feedback(settings: Settings) -> None:
    orchestrator = _orchestrator(settings)
    session = orchestrator.start("user-1", now=T0)
    orchestrator.add_message(session, "안녕하세요", now=T0)
    for verdict in ("HELPFUL", "very_helpful", "HELPFUL", "NOT_HELPFUL"):
        orchestrator.add_feedback(session, "m1", verdict, now=T0)

    summary = orchestrator.summarize(session)
    assert summary.satisfaction == 75
    assert session.feedback[1].verdict == "VERY_HELPFUL"


def test_unknown_verdict_is_rejected(settings: Settings) -> None:
    orchestrator = _orchestrator(settings)
    session = orchestrator.start("user-1", now=T0)
    with pytest.raises(ValueError):
        orchestrator.add_feedback(session, "m1", "MEH")


def test_engagement_level(settings: Settings) -> None:
    orchestrator = _orchestrator(settings)
    session = orchestrator.start("user-1", now=T0)
    for _ in range(10):
        orchestrator.add_message(session, "질문 있어요?", now=T0)

    summary = orchestrator.summarize(session)
    assert summary.engagement_level == 72
    assert "asks_questions_often" in summary.learned_patterns
    assert "frequent_ending:요" in summary.learned_patterns
    assert "prefers_concise_communication" in summary.key_insights


def test_contextual_progress_tags(settings: Settings) -> None:
    orchestrator = _orchestrator(settings)
    session = orchestrator.start("user-1", now=T0)
    orchestrator.add_message(session, "드디어 런칭 완료했어요", now=T0)

    summary = orchestrator.summarize(session)
    assert summary.contextual_progress == ["progress:런칭", "achievement:완료"]


def test_empty_session_completes(settings: Settings) -> None:
    orchestrator = _orchestrator(settings)
    profile = MasterProfileManager(settings, lexicon=KOREAN).create_new_profile("user-1", now=T0)
    session = orchestrator.start("user-1", now=T0)

    outcome = orchestrator.complete(session, profile, now=T0)

    assert outcome.updated_profile.version == 2
    assert outcome.summary.engagement_level == 0
    assert outcome.summary.satisfaction == 50
    assert outcome.summary.key_insights == []
    assert outcome.learning_delta.tone_shifts == {"formality": 0, "enthusiasm": 0, "directness": 0, "politeness": 0}
    assert outcome.learning_delta.response_preferences == []
    assert outcome.learning_delta.consistency_score == 100
    assert outcome.learning_delta.data_richness_increase == 0
    assert session.completed_at == T0


def test_completed_session_rejects_changes(settings: Settings) -> None:
    orchestrator = _orchestrator(settings)
    profile = MasterProfileManager(settings, lexicon=KOREAN).create_new_profile("user-1", now=T0)
    session = orchestrator.start("user-1", now=T0)
    orchestrator.add_message(session, "안녕하세요", now=T0)
    orchestrator.complete(session, profile, now=T0)

    assert not session.is_open
    with pytest.raises(SessionClosedError):
        orchestrator.add_message(session, "하나 더요")
    with pytest.raises(SessionClosedError):
        orchestrator.add_feedback(session, "m1", "HELPFUL")
    with pytest.raises(SessionClosedError):
        orchestrator.complete(session, profile)


def test_learning_delta(settings: Settings) -> None:
    orchestrator = _orchestrator(settings)
    profile = MasterProfileManager(settings, lexicon=KOREAN).create_new_profile("user-1", now=T0)
    session = orchestrator.start("user-1", now=T0)
    messages = ["고객 분석 좋아요 😊😊", "목표는 매출 두 배예요"] + ["고객 분석 좋아요 😊😊"] * 10
    for message in messages:
        orchestrator.add_message(session, message, now=T0)
    orchestrator.add_feedback(session, "m1", "HELPFUL")

    delta = orchestrator.learning_delta(session, profile)

    assert "고객" in delta.new_vocabulary
    assert "started_using_emojis" in delta.pattern_changes
    assert delta.emerging_patterns == ["increased_emoji_usage"]
    assert delta.engagement_patterns == ["concise_communication"]
    assert delta.response_preferences == ["current_response_style_preferred"]
    assert delta.new_preferences == ["고객 분석 좋아요 😊😊"]
    assert delta.updated_goals == ["목표는 매출 두 배예요"]
    assert delta.data_richness_increase == 10
    assert delta.prediction_improvement == 5
    assert set(delta.tone_shifts) == {"formality", "enthusiasm", "directness", "politeness"}


def test_consistency_drops_with_tone_swings(settings: Settings) -> None:
    orchestrator = _orchestrator(settings)
    profile = MasterProfileManager(settings, lexicon=KOREAN).create_new_profile("user-1", now=T0)
    steady = orchestrator.start("user-1", now=T0)
    for _ in range(3):
        orchestrator.add_message(steady, "좋은 아침입니다", now=T0)

    swinging = orchestrator.start("user-1", now=T0)
    orchestrator.add_message(swinging, "감사합니다 드립니다 바로 확실히!", now=T0)
    orchestrator.add_message(swinging, "아마 혹시 해 거야", now=T0)

    assert orchestrator.learning_delta(steady, profile).consistency_score == 100
    assert orchestrator.learning_delta(swinging, profile).consistency_score < 100
