from __future__ import annotations

from collections import Counter
from datetime import datetime
import logging
import uuid

from config.settings import Settings, get_settings
from runtime.context import ContextAnalyzer, KeywordContextAnalyzer
from voice.aggregator import build_style_profile, round_half_up
from voice.analyzer import MessageAnalyzer
from voice.lexicon import Lexicon, get_lexicon
from voice.models import (
    FEEDBACK_VERDICTS,
    SESSION_COMPLETED,
    ConversationContext,
    ConversationSession,
    FeedbackEntry,
    LearningDelta,
    MasterProfile,
    MessageAnalysis,
    SessionMessage,
    SessionOutcome,
    SessionSummary,
    utc_now,
)
from voice.profile import MasterProfileManager

logger = logging.getLogger(__name__)

TOPIC_LIMIT = 5
INSIGHT_LIMIT = 5
PROGRESS_LIMIT = 3
VOCABULARY_LIMIT = 10
SNIPPET_LIMIT = 50
SNIPPET_COUNT = 3
QUALITY_STEP_LIMIT = 10
PREDICTION_STEP_LIMIT = 5


class SessionClosedError(RuntimeError):
    pass


def _mean(values: list[float]) -> float:
    return sum(values) / max(1, len(values))


class SessionOrchestrator:
    def __init__(
        self,
        settings: Settings | None = None,
        lexicon: Lexicon | None = None,
        analyzer: MessageAnalyzer | None = None,
        manager: MasterProfileManager | None = None,
        context_analyzer: ContextAnalyzer | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.lexicon = lexicon or get_lexicon(self.settings.locale)
        self.analyzer = analyzer or MessageAnalyzer(self.lexicon)
        self.manager = manager or MasterProfileManager(self.settings, lexicon=self.lexicon, analyzer=self.analyzer)
        self.context_analyzer = context_analyzer or KeywordContextAnalyzer(self.lexicon)

    def start(self, user_id: str, conversation_id: str | None = None, now: datetime | None = None) -> ConversationSession:
        session = ConversationSession(
            session_id=f"session_{uuid.uuid4().hex[:12]}",
            user_id=user_id,
            started_at=now or utc_now(),
            conversation_id=conversation_id,
        )
        logger.debug("Session started id=%s user=%s", session.session_id, user_id)
        return session

    def add_message(
        self,
        session: ConversationSession,
        message: SessionMessage | str,
        ai_response: str | None = None,
        now: datetime | None = None,
    ) -> SessionMessage:
        self._ensure_open(session)
        if isinstance(message, str):
            message = self._new_message("user", message, now)

        session.messages.append(message)
        if not message.is_user:
            session.ai_responses.append(message.content)
            return message

        session.analyses.append(self.analyzer.analyze(message.content))
        if ai_response:
            session.messages.append(self._new_message("assistant", ai_response, now))
            session.ai_responses.append(ai_response)
        return message

    def _new_message(self, role: str, content: str, now: datetime | None) -> SessionMessage:
        return SessionMessage(
            message_id=f"msg_{uuid.uuid4().hex[:12]}",
            role=role,
            content=content,
            created_at=now or utc_now(),
        )

    def add_feedback(
        self,
        session: ConversationSession,
        message_id: str,
        verdict: str,
        now: datetime | None = None,
    ) -> FeedbackEntry:
        self._ensure_open(session)
        normalized = verdict.strip().upper()
        if normalized not in FEEDBACK_VERDICTS:
            raise ValueError(f"Unknown feedback verdict: {verdict}")
        entry = FeedbackEntry(message_id=message_id, verdict=normalized, created_at=now or utc_now())
        session.feedback.append(entry)
        return entry

    def complete(
        self,
        session: ConversationSession,
        current_profile: MasterProfile,
        context: ConversationContext | None = None,
        now: datetime | None = None,
    ) -> SessionOutcome:
        self._ensure_open(session)
        now = now or utc_now()

        summary = self.summarize(session)
        delta = self.learning_delta(session, current_profile)
        if context is None:
            context = self.context_analyzer.analyze(session.messages)

        updated = self.manager.update_from_conversation(
            current_profile,
            session.user_messages(),
            list(session.ai_responses),
            context,
            feedback=list(session.feedback),
            now=now,
            analyses=list(session.analyses),
        )

        session.state = SESSION_COMPLETED
        session.completed_at = now
        logger.info(
            "Session completed id=%s user=%s messages=%s richness_increase=%s new_patterns=%s",
            session.session_id,
            session.user_id,
            len(session.analyses),
            delta.data_richness_increase,
            len(delta.pattern_changes),
        )
        return SessionOutcome(updated_profile=updated, learning_delta=delta, summary=summary)

    def _ensure_open(self, session: ConversationSession) -> None:
        if not session.is_open:
            raise SessionClosedError(f"Session {session.session_id} is already completed")

    def summarize(self, session: ConversationSession) -> SessionSummary:
        analyses = session.analyses
        count = len(analyses)
        topics = Counter(topic for analysis in analyses for topic in analysis.topics)

        avg_length = _mean([a.length for a in analyses])
        questions_per_message = _mean([a.patterns.questions for a in analyses])
        engagement = min(
            100,
            round_half_up(avg_length / 100 * 30 + count / 10 * 40 + questions_per_message * 30),
        )

        positive = sum(1 for entry in session.feedback if entry.is_positive)
        satisfaction = round_half_up(positive / len(session.feedback) * 100) if session.feedback else 50

        return SessionSummary(
            session_id=session.session_id,
            total_messages=len(session.messages),
            user_message_count=count,
            ai_response_count=len(session.ai_responses),
            main_topics=[topic for topic, _count in topics.most_common(TOPIC_LIMIT)],
            engagement_level=engagement,
            satisfaction=satisfaction,
            key_insights=self._key_insights(analyses),
            learned_patterns=self._session_patterns(analyses),
            contextual_progress=self._contextual_progress(session.user_messages()),
        )

    def _key_insights(self, analyses: list[MessageAnalysis]) -> list[str]:
        if not analyses:
            return []
        insights: list[str] = []
        formality = _mean([a.tone.formality for a in analyses])
        if formality > 70:
            insights.append("prefers_formal_communication")
        if formality < 30:
            insights.append("prefers_casual_communication")

        length = _mean([a.length for a in analyses])
        if length > 100:
            insights.append("gives_detailed_explanations")
        if length < 30:
            insights.append("prefers_concise_communication")

        unique_topics = {topic for a in analyses for topic in a.topics}
        if len(unique_topics) == 1:
            insights.append("focused_on_single_topic")
        if len(unique_topics) > 5:
            insights.append("interested_in_many_topics")
        return insights[:INSIGHT_LIMIT]

    def _session_patterns(self, analyses: list[MessageAnalysis]) -> list[str]:
        if not analyses:
            return []
        count = len(analyses)
        patterns: list[str] = []
        if sum(len(a.patterns.emojis) for a in analyses) > count:
            patterns.append("uses_emojis_actively")
        if sum(a.patterns.questions for a in analyses) > count * 0.5:
            patterns.append("asks_questions_often")

        endings = Counter(ending for a in analyses for ending in a.features.endings)
        if endings:
            ending, hits = endings.most_common(1)[0]
            if hits > 2:
                patterns.append(f"frequent_ending:{ending}")
        return patterns[:INSIGHT_LIMIT]

    def _contextual_progress(self, user_messages: list[str]) -> list[str]:
        progress: list[str] = []
        for message in user_messages:
            progress.extend(f"progress:{keyword}" for keyword in self.lexicon.progress_keywords if keyword in message)
        for message in user_messages:
            progress.extend(
                f"achievement:{keyword}" for keyword in self.lexicon.achievement_keywords if keyword in message
            )
        return list(dict.fromkeys(progress))[:PROGRESS_LIMIT]

    def learning_delta(self, session: ConversationSession, current_profile: MasterProfile) -> LearningDelta:
        analyses = session.analyses
        count = len(analyses)
        current_style = current_profile.writing_style
        session_style = build_style_profile(analyses, window=self.manager.window)

        if analyses:
            tone_shifts = {
                dimension: session_style.tone.to_dict()[dimension] - value
                for dimension, value in current_style.tone.to_dict().items()
            }
        else:
            tone_shifts = {dimension: 0 for dimension in current_style.tone.to_dict()}

        new_vocabulary = [
            word for word in session_style.frequent_words if word not in current_style.frequent_words
        ][:VOCABULARY_LIMIT]

        pattern_changes: list[str] = []
        if analyses:
            if session_style.writing_patterns.uses_emojis and not current_style.writing_patterns.uses_emojis:
                pattern_changes.append("started_using_emojis")
            if session_style.sentence_complexity != current_style.sentence_complexity:
                pattern_changes.append(
                    f"complexity:{current_style.sentence_complexity}->{session_style.sentence_complexity}"
                )

        unique_topics = {topic for a in analyses for topic in a.topics}
        topic_trends = ["diverse_topic_switching"] if len(unique_topics) > 3 else ["focused_topics"]
        engagement = (
            ["high_engagement"] if _mean([a.length for a in analyses]) > 100 else ["concise_communication"]
        )

        response_preferences: list[str] = []
        if session.feedback:
            positive = sum(1 for entry in session.feedback if entry.is_positive)
            if positive > len(session.feedback) * 0.7:
                response_preferences.append("current_response_style_preferred")
            else:
                response_preferences.append("response_style_needs_improvement")

        emerging = ["increased_emoji_usage"] if count and sum(len(a.patterns.emojis) for a in analyses) > count else []

        old_richness = current_profile.profile_quality.data_richness
        new_richness = min(100, old_richness + min(QUALITY_STEP_LIMIT, count))

        return LearningDelta(
            tone_shifts=tone_shifts,
            new_vocabulary=new_vocabulary,
            pattern_changes=pattern_changes,
            topic_shift_trends=topic_trends,
            engagement_patterns=engagement,
            response_preferences=response_preferences,
            new_preferences=self._snippets(session.user_messages(), self.lexicon.wish_keywords),
            updated_goals=self._snippets(session.user_messages(), self.lexicon.goal_keywords),
            emerging_patterns=emerging,
            data_richness_increase=new_richness - old_richness,
            consistency_score=self._consistency(analyses),
            prediction_improvement=min(PREDICTION_STEP_LIMIT, count),
        )

    def _snippets(self, messages: list[str], keywords: tuple[str, ...]) -> list[str]:
        snippets = [message[:SNIPPET_LIMIT] for message in messages for keyword in keywords if keyword in message]
        return list(dict.fromkeys(snippets))[:SNIPPET_COUNT]

    def _consistency(self, analyses: list[MessageAnalysis]) -> int:
        if len(analyses) < 2:
            return 100
        tones = [a.tone.to_dict() for a in analyses]
        averages = {key: _mean([tone[key] for tone in tones]) for key in tones[0]}
        variation = _mean([sum(abs(tone[key] - averages[key]) for key in averages) for tone in tones])
        return max(0, round_half_up(100 - variation * 2))
