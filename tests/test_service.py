from __future__ import annotations

import gc
import json
from pathlib import Path
import random
import threading

from config.settings import Settings
from runtime.personalization import WritingRequest
from runtime.service import VoiceProfileService
from voice.lexicon import KOREAN


def _service(settings: Settings) -> VoiceProfileService:
    return VoiceProfileService(settings, lexicon=KOREAN, rng=random.Random(3))


def test_learning_updates_and_persists_profile(settings: Settings) -> None:
    service = _service(settings)

    outcome, stats = service.learn_from_messages(
        "user-1",
        ["브랜드 전략이 궁금해요", "카페 오픈 준비 중이에요"],
        ai_responses=["좋은 질문이에요. 타겟부터 볼까요?"],
        feedback=[("m1", "HELPFUL")],
    )

    assert stats.version == 2
    assert stats.messages_learned == 2
    assert outcome.summary.satisfaction == 100
    assert outcome.updated_profile.learned_patterns.feedback_patterns.positive_responses == [
        "좋은 질문이에요",
        "타겟부터 볼까요",
    ]
    assert service.load_profile("user-1").version == 2
    assert service.store.fetch_recent_messages("user-1") == ["브랜드 전략이 궁금해요", "카페 오픈 준비 중이에요"]


def test_concurrent_learning_serializes_per_user(settings: Settings) -> None:
    service = _service(settings)
    errors: list[BaseException] = []

    def learn(index: int) -> None:
        try:
            service.learn_from_messages("user-1", [f"{index}번째 메시지예요"])
        except BaseException as exc:
            errors.append(exc)

    threads = [threading.Thread(target=learn, args=(index,)) for index in range(5)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    profile = service.load_profile("user-1")
    assert profile.version == 6
    assert profile.conversation_summary.total_conversations == 5


def test_rewrite_uses_stored_profile(settings: Settings) -> None:
    service = _service(settings)
    service.learn_from_messages("user-1", ["카페 오픈 준비 중이에요"])

    result = service.rewrite(
        "user-1",
        WritingRequest("메뉴 구성을 먼저 정해요", context="카페 메뉴", generate_alternatives=False),
    )

    assert result.original_content == "메뉴 구성을 먼저 정해요"
    assert "카페" in result.personalized_content
    assert result.alternatives == []


def test_quality_report_for_new_user(settings: Settings) -> None:
    report = _service(settings).quality_report("user-1")
    assert report.overall == 0
    assert report.recommendations


def test_export_writes_json(settings: Settings, tmp_path: Path) -> None:
    service = _service(settings)
    service.learn_from_messages("user-1", ["안녕하세요 반가워요 😊"])

    default_path = service.export_profile("user-1")
    assert default_path == settings.export_dir / "user-1.json"
    document = json.loads(default_path.read_text(encoding="utf-8"))
    assert document["user_id"] == "user-1"
    assert document["version"] == 2
    assert "😊" in default_path.read_text(encoding="utf-8")

    custom = service.export_profile("user-1", tmp_path / "out" / "profile.json")
    assert custom.exists()


def test_session_report_writes_summary_and_delta(settings: Settings, tmp_path: Path) -> None:
    service = _service(settings)
    outcome, _stats = service.learn_from_messages(
        "user-1",
        ["브랜드 전략이 궁금해요", "카페 오픈 준비 중이에요"],
        ai_responses=["좋은 질문이에요. 타겟부터 볼까요?"],
        feedback=[("m1", "HELPFUL")],
    )

    path = service.export_session_report(outcome, tmp_path / "reports" / "session.json")
    document = json.loads(path.read_text(encoding="utf-8"))

    assert document["user_id"] == "user-1"
    assert document["profile_version"] == 2
    assert document["summary"]["total_messages"] == 3
    assert document["summary"]["ai_response_count"] == 1
    assert document["summary"]["satisfaction"] == 100
    assert document["learning_delta"] == outcome.learning_delta.to_dict()
    assert set(document["learning_delta"]["tone_shifts"]) == {"formality", "enthusiasm", "directness", "politeness"}


def test_user_locks_are_shared_while_held_and_released_after(settings: Settings) -> None:
    service = _service(settings)

    lock = service._lock_for("user-1")
    assert service._lock_for("user-1") is lock
    assert service._lock_for("user-2") is not lock

    del lock
    gc.collect()
    assert "user-1" not in service._locks

    for index in range(3):
        service.learn_from_messages(f"user-{index + 10}", ["안녕하세요"])
    gc.collect()
    assert len(service._locks) == 0
