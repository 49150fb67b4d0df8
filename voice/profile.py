from __future__ import annotations

from collections import deque
from copy import deepcopy
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
import logging
import re
from typing import Any
import uuid

from config.settings import Settings, get_settings
from voice.aggregator import (
    blend_style_profiles,
    build_style_profile,
    complexity_index,
    default_style_profile,
    round_half_up,
)
from voice.analyzer import MessageAnalyzer, clamp_score
from voice.lexicon import Lexicon, get_lexicon
from voice.models import (
    RECENT_UNIQUE_LIMIT,
    BusinessProfile,
    ContextProject,
    ContextReference,
    ConversationContext,
    EvolutionPoint,
    FeedbackEntry,
    LearnedPatterns,
    MasterProfile,
    MessageAnalysis,
    ProfileQuality,
    StyleProfile,
    utc_now,
)

logger = logging.getLogger(__name__)

SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")

RESPONSE_SENTENCE_LIMIT = 3
FEEDBACK_PHRASE_LIMIT = 2
DESCRIPTION_LIMIT = 100


class StyleUpdatePolicy(str, Enum):
    REPLACE = "replace"
    BLEND = "blend"


@dataclass(slots=True)
class ProfileQualityReport:
    overall: int
    business_profile: int
    writing_style: int
    conversation_history: int
    context_memory: int
    recommendations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall": self.overall,
            "breakdown": {
                "business_profile": self.business_profile,
                "writing_style": self.writing_style,
                "conversation_history": self.conversation_history,
                "context_memory": self.context_memory,
            },
            "recommendations": list(self.recommendations),
        }


def profile_quality_report(profile: MasterProfile) -> ProfileQualityReport:
    business = clamp_score(profile.business_profile.completion_level)
    writing = min(100, profile.writing_style.total_messages_analyzed * 2)
    conversation = min(100, profile.conversation_summary.total_messages)
    memory = profile.context_memory
    context = min(100, len(memory.ongoing_projects) * 20 + len(memory.personal_references) * 5)

    recommendations: list[str] = []
    if business < 50:
        recommendations.append("Share more details about your business.")
    if writing < 30:
        recommendations.append("Keep chatting so your writing style can be learned.")
    if conversation < 20:
        recommendations.append("Regular conversations will enrich your context.")
    if context < 30:
        recommendations.append("Mention ongoing projects or personal preferences.")

    return ProfileQualityReport(
        overall=round_half_up((business + writing + conversation + context) / 4),
        business_profile=business,
        writing_style=writing,
        conversation_history=conversation,
        context_memory=context,
        recommendations=recommendations,
    )


def _recent_unique(existing: list[str], additions: list[str], limit: int = RECENT_UNIQUE_LIMIT) -> list[str]:
    ordered: dict[str, None] = {}
    for item in [*existing, *additions]:
        ordered.pop(item, None)
        ordered[item] = None
    return list(ordered)[-limit:]


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


class MasterProfileManager:
    def __init__(
        self,
        settings: Settings | None = None,
        lexicon: Lexicon | None = None,
        analyzer: MessageAnalyzer | None = None,
        policy: StyleUpdatePolicy | str | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.lexicon = lexicon or get_lexicon(self.settings.locale)
        self.analyzer = analyzer or MessageAnalyzer(self.lexicon)
        self.policy = StyleUpdatePolicy(policy or self.settings.style_update_policy)
        self.window = self.settings.style_window
        self.evolution_interval = timedelta(days=self.settings.evolution_interval_days)

    def create_new_profile(self, user_id: str, now: datetime | None = None) -> MasterProfile:
        now = now or utc_now()
        return MasterProfile(
            user_id=user_id,
            created_at=now,
            last_updated=now,
            version=1,
            business_profile=BusinessProfile(completion_level=0, last_updated=now),
            writing_style=default_style_profile(),
            profile_quality=ProfileQuality(last_quality_check=now),
        )

    def update_from_conversation(
        self,
        profile: MasterProfile,
        user_messages: list[str],
        ai_responses: list[str],
        context: ConversationContext | None = None,
        feedback: list[FeedbackEntry] | None = None,
        now: datetime | None = None,
        analyses: list[MessageAnalysis] | None = None,
    ) -> MasterProfile:
        now = now or utc_now()
        context = context or ConversationContext()
        if analyses is None:
            analyses = self.analyzer.analyze_many(user_messages)

        updated = deepcopy(profile)
        previous_style = profile.writing_style

        updated.writing_style = self._next_style(previous_style, analyses)
        self._update_summary(updated, user_messages, analyses, now)
        updated.learned_patterns = self._learned_patterns(updated.learned_patterns, analyses, ai_responses, feedback)
        if analyses:
            self._update_insights(updated, analyses)
        self._update_context_memory(updated, user_messages, context, now)
        updated.profile_quality = self._quality(updated, now)
        self._record_evolution(updated, previous_style, analyses, now)

        updated.version = profile.version + 1
        updated.last_updated = now
        logger.info(
            "Profile updated user=%s version=%s messages=%s richness=%s",
            updated.user_id,
            updated.version,
            len(user_messages),
            updated.profile_quality.data_richness,
        )
        return updated

    def _next_style(self, previous: StyleProfile, analyses: list[MessageAnalysis]) -> StyleProfile:
        if not analyses:
            return deepcopy(previous)
        latest = build_style_profile(analyses, window=self.window)
        if self.policy is StyleUpdatePolicy.BLEND:
            return blend_style_profiles(previous, latest)
        return latest

    def _update_summary(
        self,
        profile: MasterProfile,
        user_messages: list[str],
        analyses: list[MessageAnalysis],
        now: datetime,
    ) -> None:
        summary = profile.conversation_summary
        count = len(user_messages)
        summary.total_conversations += 1
        summary.total_messages += count
        summary.average_session_length = (summary.average_session_length + count) / 2
        summary.last_conversation_date = now
        for analysis in analyses:
            for topic in analysis.topics:
                summary.top_discussed_topics[topic] = summary.top_discussed_topics.get(topic, 0) + 1

    def _learned_patterns(
        self,
        current: LearnedPatterns,
        analyses: list[MessageAnalysis],
        ai_responses: list[str],
        feedback: list[FeedbackEntry] | None,
    ) -> LearnedPatterns:
        patterns = deepcopy(current)

        if analyses:
            avg_length = _mean([a.length for a in analyses])
            if avg_length < 50:
                patterns.preferred_response_length = "short"
            elif avg_length > 150:
                patterns.preferred_response_length = "long"
            else:
                patterns.preferred_response_length = "medium"

            detail_words = set(self.lexicon.detail_words)
            detail_hits = sum(1 for a in analyses for word in a.words if word in detail_words)
            if detail_hits > 2:
                patterns.preferred_detail_level = "comprehensive"

            formality = _mean([a.tone.formality for a in analyses])
            politeness = _mean([a.tone.politeness for a in analyses])
            if formality > 70 and politeness > 70:
                patterns.interaction_style = "formal"
            elif formality < 30:
                patterns.interaction_style = "casual"
            elif politeness > 60:
                patterns.interaction_style = "friendly"
            else:
                patterns.interaction_style = "professional"

        if feedback:
            phrases = self._leading_phrases(ai_responses)
            feedback_patterns = patterns.feedback_patterns
            if any(entry.is_positive for entry in feedback):
                feedback_patterns.positive_responses = _recent_unique(feedback_patterns.positive_responses, phrases)
            if any(entry.verdict == "NOT_HELPFUL" for entry in feedback):
                feedback_patterns.negative_indicators = _recent_unique(feedback_patterns.negative_indicators, phrases)
        return patterns

    def _leading_phrases(self, ai_responses: list[str]) -> list[str]:
        phrases: list[str] = []
        for response in ai_responses:
            sentences = [part.strip() for part in SENTENCE_SPLIT_RE.split(response) if part.strip()]
            phrases.extend(sentences[:RESPONSE_SENTENCE_LIMIT])
        return phrases[:FEEDBACK_PHRASE_LIMIT]

    def _update_insights(self, profile: MasterProfile, analyses: list[MessageAnalysis]) -> None:
        insights = profile.personalization_insights
        words = [word for a in analyses for word in a.words]
        technical_hits = sum(1 for word in words if any(term in word for term in self.lexicon.technical_terms))
        creative_hits = sum(len(a.patterns.emojis) + (1 if a.patterns.exclamations > 0 else 0) for a in analyses)

        preferences = insights.communication_preferences
        preferences.directness = clamp_score(round_half_up(_mean([a.tone.directness for a in analyses])))
        preferences.supportiveness = clamp_score(round_half_up(_mean([a.tone.politeness for a in analyses])))
        preferences.technical_depth = clamp_score(technical_hits * 10)
        preferences.creativity_level = clamp_score(creative_hits * 5)

        motivation_keywords = set(self.lexicon.motivation_keywords)
        motivation = [word for word in words if word in motivation_keywords]
        pains = [word for word in words if any(pain in word for pain in self.lexicon.pain_keywords)]
        insights.motivation_factors = _recent_unique(insights.motivation_factors, motivation)
        insights.pain_points = _recent_unique(insights.pain_points, pains)

    def extract_project_name(self, message: str) -> str | None:
        words = message.split(" ")
        anchors = set(self.lexicon.project_anchors)
        for index, word in enumerate(words):
            if word in anchors:
                return words[index - 1] if index > 0 else None
        return None

    def _update_context_memory(
        self,
        profile: MasterProfile,
        user_messages: list[str],
        context: ConversationContext,
        now: datetime,
    ) -> None:
        memory = profile.context_memory
        lex = self.lexicon
        for message in user_messages:
            if any(trigger in message for trigger in lex.project_triggers):
                name = self.extract_project_name(message)
                if name:
                    self._touch_project(memory.ongoing_projects, name, message, context, now)

            if any(indicator in message for indicator in lex.preference_indicators):
                positive = any(indicator in message for indicator in lex.positive_preference_indicators)
                self._touch_reference(
                    memory.personal_references,
                    message,
                    "preference" if positive else "constraint",
                    now,
                )

    def _touch_project(
        self,
        projects: deque[ContextProject],
        name: str,
        message: str,
        context: ConversationContext,
        now: datetime,
    ) -> None:
        for project in list(projects):
            if project.name == name:
                project.last_mentioned = now
                projects.remove(project)
                projects.append(project)
                return
        projects.append(
            ContextProject(
                project_id=f"proj_{uuid.uuid4().hex[:12]}",
                name=name,
                description=message[:DESCRIPTION_LIMIT],
                created_at=now,
                last_mentioned=now,
                status="planning",
                related_topics=list(context.conversation_flow),
            )
        )

    def _touch_reference(self, references: deque[ContextReference], content: str, kind: str, now: datetime) -> None:
        for reference in list(references):
            if reference.content == content:
                reference.last_used = now
                reference.frequency += 1
                references.remove(reference)
                references.append(reference)
                return
        references.append(
            ContextReference(
                reference_id=f"ref_{uuid.uuid4().hex[:12]}",
                kind=kind,
                content=content,
                last_used=now,
            )
        )

    def _quality(self, profile: MasterProfile, now: datetime) -> ProfileQuality:
        memory = profile.context_memory
        business = clamp_score(profile.business_profile.completion_level)
        writing = min(100, profile.writing_style.total_messages_analyzed * 2)
        conversation = min(100, profile.conversation_summary.total_messages)
        context = min(
            100,
            len(memory.ongoing_projects) * 10
            + len(memory.personal_references) * 5
            + len(profile.personalization_insights.motivation_factors) * 10,
        )
        richness = round_half_up((business + writing + conversation + context) / 4)
        return ProfileQuality(
            data_richness=richness,
            consistency_score=clamp_score(profile.writing_style.confidence_score),
            prediction_accuracy=min(100, richness),
            last_quality_check=now,
        )

    def _record_evolution(
        self,
        profile: MasterProfile,
        previous_style: StyleProfile,
        analyses: list[MessageAnalysis],
        now: datetime,
    ) -> None:
        if not analyses:
            return
        history = profile.conversation_summary.conversation_evolution
        if history and now - history[-1].date < self.evolution_interval:
            return

        new_style = profile.writing_style
        history.append(
            EvolutionPoint(
                date=now,
                topics_shift=list(dict.fromkeys(topic for a in analyses for topic in a.topics)),
                formality_change=new_style.tone.formality - previous_style.tone.formality,
                enthusiasm_change=new_style.tone.enthusiasm - previous_style.tone.enthusiasm,
                complexity_change=complexity_index(new_style.sentence_complexity)
                - complexity_index(previous_style.sentence_complexity),
                new_patterns=self._new_patterns(previous_style, new_style, analyses),
            )
        )
        logger.debug("Evolution point recorded user=%s total=%s", profile.user_id, len(history))

    def _new_patterns(
        self,
        previous_style: StyleProfile,
        new_style: StyleProfile,
        analyses: list[MessageAnalysis],
    ) -> list[str]:
        count = len(analyses)
        patterns: list[str] = []
        if sum(len(a.patterns.emojis) for a in analyses) > count:
            patterns.append("increased_emoji_usage")
        if new_style.writing_patterns.uses_emojis and not previous_style.writing_patterns.uses_emojis:
            patterns.append("started_using_emojis")
        if sum(a.patterns.questions for a in analyses) > count * 0.5:
            patterns.append("more_questions")
        return patterns
