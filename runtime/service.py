from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import json
import logging
from pathlib import Path
import random
import threading
from typing import Iterable
import weakref

from config.settings import Settings, get_settings
from runtime.personalization import PersonalizationEngine, PersonalizedResult, WritingRequest
from runtime.session import SessionOrchestrator
from voice.lexicon import Lexicon, get_lexicon
from voice.models import ConversationContext, ConversationSession, MasterProfile, SessionOutcome
from voice.profile import MasterProfileManager, ProfileQualityReport, profile_quality_report
from voice.storage.sqlite_store import ProfileStore, SQLiteProfileStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LearningStats:
    user_id: str
    messages_learned: int = 0
    version: int = 0
    data_richness: int = 0
    richness_increase: int = 0
    new_patterns: int = 0


class VoiceProfileService:
    def __init__(
        self,
        settings: Settings | None = None,
        store: ProfileStore | None = None,
        lexicon: Lexicon | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.lexicon = lexicon or get_lexicon(self.settings.locale)
        self.manager = MasterProfileManager(self.settings, lexicon=self.lexicon)
        self.store = store or SQLiteProfileStore(self.settings.sqlite_path, manager=self.manager)
        self.orchestrator = SessionOrchestrator(self.settings, lexicon=self.lexicon, manager=self.manager)
        self.engine = PersonalizationEngine(self.settings, lexicon=self.lexicon, rng=rng)
        self._guard = threading.Lock()
        # entries drop out once no caller holds the lock
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = weakref.WeakValueDictionary()

    def _lock_for(self, user_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[user_id] = lock
            return lock

    def load_profile(self, user_id: str) -> MasterProfile:
        with self._lock_for(user_id):
            return self.store.load(user_id)

    def learn_from_messages(
        self,
        user_id: str,
        messages: list[str],
        ai_responses: list[str] | None = None,
        feedback: Iterable[tuple[str, str]] | None = None,
        context: ConversationContext | None = None,
        now: datetime | None = None,
    ) -> tuple[SessionOutcome, LearningStats]:
        responses = ai_responses or []
        session = self.orchestrator.start(user_id, now=now)
        for index, content in enumerate(messages):
            response = responses[index] if index < len(responses) else None
            self.orchestrator.add_message(session, content, ai_response=response, now=now)
        for message_id, verdict in feedback or []:
            self.orchestrator.add_feedback(session, message_id, verdict, now=now)

        outcome = self.complete_session(session, context=context, now=now)
        self.store.record_messages(user_id, messages)

        profile = outcome.updated_profile
        stats = LearningStats(
            user_id=user_id,
            messages_learned=len(session.analyses),
            version=profile.version,
            data_richness=profile.profile_quality.data_richness,
            richness_increase=outcome.learning_delta.data_richness_increase,
            new_patterns=len(outcome.learning_delta.pattern_changes),
        )
        return outcome, stats

    def complete_session(
        self,
        session: ConversationSession,
        context: ConversationContext | None = None,
        now: datetime | None = None,
    ) -> SessionOutcome:
        with self._lock_for(session.user_id):
            current = self.store.load(session.user_id)
            outcome = self.orchestrator.complete(session, current, context=context, now=now)
            self.store.save(outcome.updated_profile)
        logger.info(
            "Learned from session user=%s version=%s confidence=%s",
            session.user_id,
            outcome.updated_profile.version,
            outcome.updated_profile.writing_style.confidence_score,
        )
        return outcome

    def rewrite(self, user_id: str, request: WritingRequest) -> PersonalizedResult:
        profile = self.load_profile(user_id)
        return self.engine.personalize(request, profile)

    def quality_report(self, user_id: str) -> ProfileQualityReport:
        return profile_quality_report(self.load_profile(user_id))

    def export_profile(self, user_id: str, output_path: Path | None = None) -> Path:
        profile = self.load_profile(user_id)
        path = output_path or self.settings.export_dir / f"{user_id}.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(profile.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
        logger.info("Profile exported user=%s path=%s", user_id, path)
        return path

    def export_session_report(self, outcome: SessionOutcome, output_path: Path) -> Path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json.dumps(outcome.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
        logger.info("Session report written user=%s path=%s", outcome.updated_profile.user_id, output_path)
        return output_path
