from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
import random
from typing import Any, Sequence

import pytest

from config.settings import Settings
from runtime.personalization import PersonalizationEngine, PersonalizedResult, WritingRequest, confidence_score
from voice.lexicon import ENGLISH, KOREAN
from voice.models import (
    ContextProject,
    ContextReference,
    LinguisticTraits,
    MasterProfile,
    StyleProfile,
    ToneScores,
    WritingPatterns,
)

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


class FixedRandom(random.Random):
    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value

    def choice(self, seq: Sequence[Any]) -> Any:
        return seq[0]


class FailingCasualEngine(PersonalizationEngine):
    def render(self, request: WritingRequest, profile: MasterProfile) -> PersonalizedResult:
        if request.tone == "casual":
            raise RuntimeError("casual rendering unavailable")
        return super().render(request, profile)


def _profile(**style: Any) -> MasterProfile:
    values: dict[str, Any] = {"average_message_length": 100, "sentence_complexity": "moderate"}
    values.update(style)
    return MasterProfile(user_id="user-1", created_at=T0, last_updated=T0, writing_style=StyleProfile(**values))


def _engine(settings: Settings, rng: random.Random | None = None) -> PersonalizationEngine:
    return PersonalizationEngine(settings, lexicon=KOREAN, rng=rng or FixedRandom(0.99))


def test_request_validation() -> None:
    with pytest.raises(ValueError):
        WritingRequest("안녕", purpose="essay")
    with pytest.raises(ValueError):
        WritingRequest("안녕", tone="angry")
    with pytest.raises(ValueError):
        WritingRequest("안녕", length="huge")


def test_neutral_profile_leaves_text_alone(settings: Settings) -> None:
    result = _engine(settings).render(WritingRequest("내일 해요"), _profile())

    assert result.personalized_content == "내일 해요"
    assert result.original_content == "내일 해요"
    assert result.alternatives == []


def test_formal_profile_applies_formal_register(settings: Settings) -> None:
    profile = _profile(tone=ToneScores(formality=80))
    result = _engine(settings).render(WritingRequest("내일 해요"), profile)

    assert result.personalized_content == "내일 합니다"
    assert "formal register applied" in result.style_application.tone_adjustments


def test_casual_tone_overrides_formal_profile(settings: Settings) -> None:
    profile = _profile(tone=ToneScores(formality=80))
    result = _engine(settings).render(WritingRequest("좋은 것입니다", tone="casual"), profile)

    assert result.personalized_content == "좋은 거예요"


def test_professional_tone_only_changes_register(settings: Settings) -> None:
    result = _engine(settings).render(WritingRequest("정말 좋아요!", tone="professional"), _profile())

    assert result.personalized_content == "정말 좋아요."
    assert result.style_application.tone_adjustments == ["formal register applied"]


def test_professional_tone_ignores_profile_enthusiasm(settings: Settings) -> None:
    profile = _profile(tone=ToneScores(enthusiasm=10, directness=10))
    result = _engine(settings).render(WritingRequest("정말 좋아요!", tone="professional"), profile)

    assert result.personalized_content == "정말 좋아요."
    assert "enthusiasm reduced" not in result.style_application.tone_adjustments


def test_personal_synonyms_replace_standard_words(settings: Settings) -> None:
    profile = _profile(frequent_words={"훌륭한": 3})
    result = _engine(settings).render(WritingRequest("좋은 방법이에요"), profile)

    assert result.personalized_content == "훌륭한 방법이에요"
    assert "좋은 -> 훌륭한" in result.style_application.vocabulary_matches


def test_english_synonyms_match_whole_words(settings: Settings) -> None:
    engine = PersonalizationEngine(settings, lexicon=ENGLISH, rng=FixedRandom(0.99))
    result = engine.render(WritingRequest("good plan and goodness"), _profile(frequent_words={"great": 2}))

    assert result.personalized_content == "great plan and goodness"


def test_short_length_truncates_words(settings: Settings) -> None:
    content = "매우 하나 둘 셋 넷 다섯 여섯 일곱 여덟 아홉 열 열하나 열둘 열셋 열넷"
    result = _engine(settings).render(WritingRequest(content, length="short"), _profile())

    assert result.personalized_content == "하나 둘 셋 넷 다섯 여섯 일곱 여덟 아홉 열 열하나 열둘"
    assert "condensed for brevity" in result.style_application.structural_changes


def test_simple_style_splits_clauses(settings: Settings) -> None:
    result = _engine(settings).render(WritingRequest("첫째, 둘째; 셋째"), _profile(sentence_complexity="simple"))
    assert result.personalized_content == "첫째. 둘째. 셋째"


def test_preferred_ending_is_applied(settings: Settings) -> None:
    result = _engine(settings).render(WritingRequest("좋아요"), _profile(frequent_endings={"죠": 3, "요": 1}))
    assert result.personalized_content == "좋아죠"


def test_emoji_injection_respects_request(settings: Settings) -> None:
    profile = _profile(writing_patterns=WritingPatterns(uses_emojis=True, preferred_emojis=["😊"]))
    engine = _engine(settings, rng=FixedRandom(0.0))

    assert engine.render(WritingRequest("알겠어요"), profile).personalized_content == "알겠어요 😊"
    blocked = engine.render(WritingRequest("알겠어요", include_emojis=False), profile)
    assert "😊" not in blocked.personalized_content


def test_context_references_are_appended(settings: Settings) -> None:
    profile = _profile()
    profile.context_memory.ongoing_projects.append(
        ContextProject(project_id="proj_1", name="카페", description="카페 오픈", created_at=T0, last_mentioned=T0)
    )
    profile.context_memory.personal_references.append(
        ContextReference(reference_id="ref_1", kind="preference", content="짧은 답변이 좋아요", last_used=T0)
    )

    result = _engine(settings).render(WritingRequest("짧은 답변이 좋아요", context="카페 오픈 관련"), profile)

    assert result.personalized_content == (
        "짧은 답변이 좋아요"
        + KOREAN.preference_note
        + KOREAN.project_template.format(name="카페")
    )
    assert "project reference: 카페" in result.style_application.structural_changes


def test_confidence_score() -> None:
    profile = _profile(total_messages_analyzed=50)
    profile.profile_quality.data_richness = 100
    profile.profile_quality.consistency_score = 100

    assert confidence_score(profile, "response") == 100
    assert confidence_score(profile, "suggestion") == 95
    assert confidence_score(profile, "draft") == 90
    assert confidence_score(_profile(), "draft") == 20


def test_alternatives_cover_other_tones(settings: Settings) -> None:
    engine = _engine(settings)
    result = engine.personalize(WritingRequest("정말 좋아요!"), _profile())
    assert len(result.alternatives) == 2

    professional = engine.personalize(WritingRequest("정말 좋아요!", tone="professional"), _profile())
    assert len(professional.alternatives) == 1

    single = engine.personalize(WritingRequest("정말 좋아요!", generate_alternatives=False), _profile())
    assert single.alternatives == []


def test_failed_alternate_does_not_fail_primary(settings: Settings) -> None:
    engine = FailingCasualEngine(settings, lexicon=KOREAN, rng=FixedRandom(0.99))
    result = engine.render_with_alternatives(WritingRequest("정말 좋아요!"), _profile())

    assert result.personalized_content == "정말 좋아요!"
    assert result.alternatives == ["정말 좋아요."]


def test_seeded_rewrites_are_reproducible(settings: Settings) -> None:
    profile = _profile(
        writing_patterns=WritingPatterns(uses_emojis=True, preferred_emojis=["😊", "🔥"], uses_ellipsis=True),
        linguistic_traits=LinguisticTraits(preferred_fillers=["뭔가"]),
    )
    requests = [WritingRequest(f"{index}번째 답변입니다.") for index in range(10)]

    first = PersonalizationEngine(settings, lexicon=KOREAN, rng=random.Random(7))
    second = PersonalizationEngine(settings, lexicon=KOREAN, rng=random.Random(7))
    assert [first.render(r, profile).personalized_content for r in requests] == [
        second.render(r, profile).personalized_content for r in requests
    ]

    seeded = replace(settings, rewrite_seed=11)
    third = PersonalizationEngine(seeded, lexicon=KOREAN)
    fourth = PersonalizationEngine(seeded, lexicon=KOREAN)
    assert [third.personalize(r, profile).to_dict() for r in requests] == [
        fourth.personalize(r, profile).to_dict() for r in requests
    ]
