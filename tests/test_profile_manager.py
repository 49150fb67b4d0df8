from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone

from config.settings import Settings
from voice.lexicon import KOREAN
from voice.models import FeedbackEntry, MasterProfile
from voice.profile import MasterProfileManager, StyleUpdatePolicy, profile_quality_report

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def _manager(settings: Settings, policy: str | None = None) -> MasterProfileManager:
    return MasterProfileManager(settings, lexicon=KOREAN, policy=policy)


def _fresh(manager: MasterProfileManager) -> MasterProfile:
    return manager.create_new_profile("user-1", now=T0)


def test_new_profile_defaults(settings: Settings) -> None:
    profile = _fresh(_manager(settings))

    assert profile.version == 1
    assert profile.created_at == T0
    assert profile.business_profile.completion_level == 0
    assert profile.writing_style.total_messages_analyzed == 0
    assert profile.learned_patterns.interaction_style == "professional"
    assert profile.profile_quality.consistency_score == 100
    assert profile.profile_quality.prediction_accuracy == 50


def test_update_bumps_version_and_leaves_input_untouched(settings: Settings) -> None:
    manager = _manager(settings)
    profile = _fresh(manager)

    updated = manager.update_from_conversation(profile, ["브랜드 전략이 궁금해요!"], [], now=T0)

    assert updated.version == 2
    assert updated.last_updated == T0
    assert profile.version == 1
    assert profile.writing_style.total_messages_analyzed == 0
    assert profile.conversation_summary.total_messages == 0
    assert updated.conversation_summary.total_messages == 1
    assert updated.conversation_summary.top_discussed_topics == {"브랜딩": 1, "전략": 1}


def test_versions_increase_by_one_per_update(settings: Settings) -> None:
    manager = _manager(settings)
    profile = _fresh(manager)
    for step in range(5):
        profile = manager.update_from_conversation(profile, [f"메시지 {step}"], [], now=T0 + timedelta(hours=step))
    assert profile.version == 6
    assert profile.conversation_summary.total_conversations == 5


def test_replace_policy_drops_previous_vocabulary(settings: Settings) -> None:
    manager = _manager(settings)
    assert manager.policy is StyleUpdatePolicy.REPLACE

    first = manager.update_from_conversation(_fresh(manager), ["사과 바나나 포도"], [], now=T0)
    second = manager.update_from_conversation(first, ["자동차 기차 비행기"], [], now=T0 + timedelta(hours=1))

    assert set(second.writing_style.frequent_words) == {"자동차", "기차", "비행기"}
    assert second.writing_style.total_messages_analyzed == 1


def test_blend_policy_keeps_previous_vocabulary(settings: Settings) -> None:
    manager = _manager(replace(settings, style_update_policy="blend"))
    assert manager.policy is StyleUpdatePolicy.BLEND

    first = manager.update_from_conversation(_fresh(manager), ["사과 바나나 포도"], [], now=T0)
    second = manager.update_from_conversation(first, ["자동차 기차 비행기"], [], now=T0 + timedelta(hours=1))

    assert {"사과", "자동차"} <= set(second.writing_style.frequent_words)
    assert second.writing_style.total_messages_analyzed == 2


def test_empty_batch_keeps_style(settings: Settings) -> None:
    manager = _manager(settings)
    first = manager.update_from_conversation(_fresh(manager), ["해 봐 거야"], [], now=T0)
    second = manager.update_from_conversation(first, [], [], now=T0 + timedelta(days=10))

    assert second.version == first.version + 1
    assert second.writing_style == first.writing_style
    assert second.learned_patterns == first.learned_patterns
    assert len(second.conversation_summary.conversation_evolution) == 1


def test_learned_patterns_follow_tone(settings: Settings) -> None:
    manager = _manager(settings)
    updated = manager.update_from_conversation(_fresh(manager), ["해 봐 거야", "그거 해"], [], now=T0)

    assert updated.learned_patterns.preferred_response_length == "short"
    assert updated.learned_patterns.interaction_style == "casual"


def test_feedback_records_leading_phrases(settings: Settings) -> None:
    manager = _manager(settings)
    responses = ["첫 문장입니다. 두번째 문장이에요! 세번째?"]

    liked = manager.update_from_conversation(
        _fresh(manager), ["좋네요"], responses, feedback=[FeedbackEntry("m1", "HELPFUL")], now=T0
    )
    assert liked.learned_patterns.feedback_patterns.positive_responses == ["첫 문장입니다", "두번째 문장이에요"]
    assert liked.learned_patterns.feedback_patterns.negative_indicators == []

    disliked = manager.update_from_conversation(
        _fresh(manager), ["별로네요"], responses, feedback=[FeedbackEntry("m1", "NOT_HELPFUL")], now=T0
    )
    assert disliked.learned_patterns.feedback_patterns.negative_indicators == ["첫 문장입니다", "두번째 문장이에요"]


def test_insights_capture_motivation_and_pain(settings: Settings) -> None:
    manager = _manager(settings)
    updated = manager.update_from_conversation(_fresh(manager), ["성장 목표 고민"], [], now=T0)

    insights = updated.personalization_insights
    assert insights.motivation_factors == ["성장", "목표"]
    assert insights.pain_points == ["고민"]


def test_project_extraction(settings: Settings) -> None:
    manager = _manager(settings)
    assert manager.extract_project_name("새로운 카페 오픈 준비 중이에요") == "카페"
    assert manager.extract_project_name("프로젝트 이야기") is None
    assert manager.extract_project_name("그냥 잡담") is None


def test_project_mentions_are_refreshed_not_duplicated(settings: Settings) -> None:
    manager = _manager(settings)
    first = manager.update_from_conversation(_fresh(manager), ["카페 오픈 준비 중이에요"], [], now=T0)
    later = T0 + timedelta(days=1)
    second = manager.update_from_conversation(first, ["카페 오픈 준비 중이에요"], [], now=later)

    projects = list(second.context_memory.ongoing_projects)
    assert [project.name for project in projects] == ["카페"]
    assert projects[0].created_at == T0
    assert projects[0].last_mentioned == later


def test_context_memory_is_bounded(settings: Settings) -> None:
    manager = _manager(settings)
    projects = [f"알파{i} 프로젝트 시작합니다" for i in range(15)]
    references = [f"저는 메뉴{i}를 좋아해요" for i in range(25)]

    updated = manager.update_from_conversation(_fresh(manager), projects + references, [], now=T0)

    memory = updated.context_memory
    assert len(memory.ongoing_projects) == 10
    assert memory.ongoing_projects[-1].name == "알파14"
    assert len(memory.personal_references) == 20
    assert all(reference.kind == "preference" for reference in memory.personal_references)


def test_repeated_reference_bumps_frequency(settings: Settings) -> None:
    manager = _manager(settings)
    message = "저는 짧은 답변이 싫어요"
    updated = manager.update_from_conversation(_fresh(manager), [message, message], [], now=T0)

    references = list(updated.context_memory.personal_references)
    assert len(references) == 1
    assert references[0].frequency == 2
    assert references[0].kind == "constraint"


def test_evolution_points_respect_interval(settings: Settings) -> None:
    manager = _manager(settings)
    profile = manager.update_from_conversation(_fresh(manager), ["좋아요 😊😊 정말요?"], [], now=T0)

    history = profile.conversation_summary.conversation_evolution
    assert len(history) == 1
    assert "increased_emoji_usage" in history[0].new_patterns
    assert "started_using_emojis" in history[0].new_patterns
    assert "more_questions" in history[0].new_patterns

    profile = manager.update_from_conversation(profile, ["다음 이야기"], [], now=T0 + timedelta(days=1))
    assert len(profile.conversation_summary.conversation_evolution) == 1

    profile = manager.update_from_conversation(profile, ["다음 이야기"], [], now=T0 + timedelta(days=8))
    assert len(profile.conversation_summary.conversation_evolution) == 2


def test_quality_report_for_fresh_profile(settings: Settings) -> None:
    report = profile_quality_report(_fresh(_manager(settings)))

    assert report.overall == 0
    assert len(report.recommendations) == 4
    assert set(report.to_dict()["breakdown"]) == {
        "business_profile",
        "writing_style",
        "conversation_history",
        "context_memory",
    }


def test_quality_report_scores(settings: Settings) -> None:
    manager = _manager(settings)
    profile = _fresh(manager)
    profile.business_profile.completion_level = 60
    messages = [f"알파{i} 프로젝트 시작합니다" for i in range(2)] + ["저는 메뉴를 좋아해요"] * 18
    profile = manager.update_from_conversation(profile, messages, [], now=T0)

    report = profile_quality_report(profile)
    assert report.business_profile == 60
    assert report.writing_style == 40
    assert report.conversation_history == 20
    assert report.context_memory == 45
    assert report.overall == 41
    assert report.recommendations == []
