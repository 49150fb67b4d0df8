from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

PROJECT_LIMIT = 10
REFERENCE_LIMIT = 20
EVOLUTION_LIMIT = 20
RECENT_UNIQUE_LIMIT = 10

SENTENCE_COMPLEXITIES = ("simple", "moderate", "complex")
POSITIVE_VERDICTS = ("HELPFUL", "VERY_HELPFUL")
FEEDBACK_VERDICTS = ("HELPFUL", "VERY_HELPFUL", "NOT_HELPFUL")

SESSION_OPEN = "open"
SESSION_COMPLETED = "completed"

EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_ts(value: Any) -> datetime | None:
    if not value:
        return None
    parsed = value if isinstance(value, datetime) else datetime.fromisoformat(str(value))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item) for item in value]


def _count_map(value: Any) -> dict[str, int]:
    if not isinstance(value, dict):
        return {}
    return {str(key): _int(count) for key, count in value.items()}


@dataclass(slots=True)
class ToneScores:
    formality: int = 50
    enthusiasm: int = 50
    directness: int = 50
    politeness: int = 50

    def to_dict(self) -> dict[str, int]:
        return {
            "formality": self.formality,
            "enthusiasm": self.enthusiasm,
            "directness": self.directness,
            "politeness": self.politeness,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ToneScores:
        data = data or {}
        return cls(
            formality=_int(data.get("formality"), 50),
            enthusiasm=_int(data.get("enthusiasm"), 50),
            directness=_int(data.get("directness"), 50),
            politeness=_int(data.get("politeness"), 50),
        )


@dataclass(slots=True)
class MessagePatterns:
    emojis: list[str] = field(default_factory=list)
    exclamations: int = 0
    questions: int = 0
    ellipses: int = 0
    brackets: int = 0
    quotes: int = 0


@dataclass(slots=True)
class LinguisticFeatures:
    conjunctions: list[str] = field(default_factory=list)
    interjections: list[str] = field(default_factory=list)
    fillers: list[str] = field(default_factory=list)
    endings: list[str] = field(default_factory=list)


@dataclass(slots=True)
class MessageAnalysis:
    length: int
    sentence_count: int
    word_count: int
    vocabulary_richness: float
    tone: ToneScores
    patterns: MessagePatterns
    features: LinguisticFeatures
    words: list[str] = field(default_factory=list)
    phrases: list[str] = field(default_factory=list)
    topics: list[str] = field(default_factory=list)


@dataclass(slots=True)
class WritingPatterns:
    uses_emojis: bool = False
    emoji_frequency: float = 0.0
    preferred_emojis: list[str] = field(default_factory=list)
    uses_exclamation: bool = False
    uses_question: bool = False
    uses_ellipsis: bool = False
    uses_brackets: bool = False
    uses_quotes: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "uses_emojis": self.uses_emojis,
            "emoji_frequency": self.emoji_frequency,
            "preferred_emojis": list(self.preferred_emojis),
            "uses_exclamation": self.uses_exclamation,
            "uses_question": self.uses_question,
            "uses_ellipsis": self.uses_ellipsis,
            "uses_brackets": self.uses_brackets,
            "uses_quotes": self.uses_quotes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> WritingPatterns:
        data = data or {}
        return cls(
            uses_emojis=bool(data.get("uses_emojis", False)),
            emoji_frequency=float(data.get("emoji_frequency") or 0.0),
            preferred_emojis=_str_list(data.get("preferred_emojis")),
            uses_exclamation=bool(data.get("uses_exclamation", False)),
            uses_question=bool(data.get("uses_question", False)),
            uses_ellipsis=bool(data.get("uses_ellipsis", False)),
            uses_brackets=bool(data.get("uses_brackets", False)),
            uses_quotes=bool(data.get("uses_quotes", False)),
        )


@dataclass(slots=True)
class LinguisticTraits:
    preferred_conjunctions: list[str] = field(default_factory=list)
    preferred_interjections: list[str] = field(default_factory=list)
    preferred_fillers: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "preferred_conjunctions": list(self.preferred_conjunctions),
            "preferred_interjections": list(self.preferred_interjections),
            "preferred_fillers": list(self.preferred_fillers),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> LinguisticTraits:
        data = data or {}
        return cls(
            preferred_conjunctions=_str_list(data.get("preferred_conjunctions")),
            preferred_interjections=_str_list(data.get("preferred_interjections")),
            preferred_fillers=_str_list(data.get("preferred_fillers")),
        )


@dataclass(slots=True)
class TopicInterest:
    frequency: int = 0
    average_engagement: float = 0.0
    key_terms: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "frequency": self.frequency,
            "average_engagement": self.average_engagement,
            "key_terms": list(self.key_terms),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> TopicInterest:
        data = data or {}
        return cls(
            frequency=_int(data.get("frequency")),
            average_engagement=float(data.get("average_engagement") or 0.0),
            key_terms=_str_list(data.get("key_terms")),
        )


@dataclass(slots=True)
class StyleProfile:
    average_message_length: int = 0
    vocabulary_size: int = 0
    sentence_complexity: str = "simple"
    tone: ToneScores = field(default_factory=ToneScores)
    frequent_words: dict[str, int] = field(default_factory=dict)
    frequent_phrases: dict[str, int] = field(default_factory=dict)
    frequent_endings: dict[str, int] = field(default_factory=dict)
    writing_patterns: WritingPatterns = field(default_factory=WritingPatterns)
    linguistic_traits: LinguisticTraits = field(default_factory=LinguisticTraits)
    topic_interests: dict[str, TopicInterest] = field(default_factory=dict)
    total_messages_analyzed: int = 0
    confidence_score: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "average_message_length": self.average_message_length,
            "vocabulary_size": self.vocabulary_size,
            "sentence_complexity": self.sentence_complexity,
            "tone": self.tone.to_dict(),
            "frequent_words": dict(self.frequent_words),
            "frequent_phrases": dict(self.frequent_phrases),
            "frequent_endings": dict(self.frequent_endings),
            "writing_patterns": self.writing_patterns.to_dict(),
            "linguistic_traits": self.linguistic_traits.to_dict(),
            "topic_interests": {topic: interest.to_dict() for topic, interest in self.topic_interests.items()},
            "total_messages_analyzed": self.total_messages_analyzed,
            "confidence_score": self.confidence_score,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> StyleProfile:
        data = data or {}
        complexity = str(data.get("sentence_complexity") or "simple")
        interests = data.get("topic_interests") or {}
        return cls(
            average_message_length=_int(data.get("average_message_length")),
            vocabulary_size=_int(data.get("vocabulary_size")),
            sentence_complexity=complexity if complexity in SENTENCE_COMPLEXITIES else "simple",
            tone=ToneScores.from_dict(data.get("tone")),
            frequent_words=_count_map(data.get("frequent_words")),
            frequent_phrases=_count_map(data.get("frequent_phrases")),
            frequent_endings=_count_map(data.get("frequent_endings")),
            writing_patterns=WritingPatterns.from_dict(data.get("writing_patterns")),
            linguistic_traits=LinguisticTraits.from_dict(data.get("linguistic_traits")),
            topic_interests={str(topic): TopicInterest.from_dict(value) for topic, value in interests.items()},
            total_messages_analyzed=_int(data.get("total_messages_analyzed")),
            confidence_score=_int(data.get("confidence_score")),
        )


@dataclass(slots=True)
class BusinessProfile:
    completion_level: int = 0
    fields: dict[str, str] = field(default_factory=dict)
    last_updated: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "completion_level": self.completion_level,
            "fields": dict(self.fields),
            "last_updated": _iso(self.last_updated),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> BusinessProfile:
        data = data or {}
        raw_fields = data.get("fields") or {}
        return cls(
            completion_level=max(0, min(100, _int(data.get("completion_level")))),
            fields={str(key): str(value) for key, value in raw_fields.items()},
            last_updated=_parse_ts(data.get("last_updated")),
        )


@dataclass(slots=True)
class EvolutionPoint:
    date: datetime
    topics_shift: list[str] = field(default_factory=list)
    formality_change: int = 0
    enthusiasm_change: int = 0
    complexity_change: int = 0
    new_patterns: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": _iso(self.date),
            "topics_shift": list(self.topics_shift),
            "formality_change": self.formality_change,
            "enthusiasm_change": self.enthusiasm_change,
            "complexity_change": self.complexity_change,
            "new_patterns": list(self.new_patterns),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EvolutionPoint:
        return cls(
            date=_parse_ts(data.get("date")) or EPOCH,
            topics_shift=_str_list(data.get("topics_shift")),
            formality_change=_int(data.get("formality_change")),
            enthusiasm_change=_int(data.get("enthusiasm_change")),
            complexity_change=_int(data.get("complexity_change")),
            new_patterns=_str_list(data.get("new_patterns")),
        )


@dataclass(slots=True)
class ConversationSummary:
    total_conversations: int = 0
    total_messages: int = 0
    average_session_length: float = 0.0
    last_conversation_date: datetime | None = None
    top_discussed_topics: dict[str, int] = field(default_factory=dict)
    conversation_evolution: deque[EvolutionPoint] = field(default_factory=lambda: deque(maxlen=EVOLUTION_LIMIT))

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_conversations": self.total_conversations,
            "total_messages": self.total_messages,
            "average_session_length": self.average_session_length,
            "last_conversation_date": _iso(self.last_conversation_date),
            "top_discussed_topics": dict(self.top_discussed_topics),
            "conversation_evolution": [point.to_dict() for point in self.conversation_evolution],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ConversationSummary:
        data = data or {}
        points = [EvolutionPoint.from_dict(item) for item in data.get("conversation_evolution") or []]
        return cls(
            total_conversations=_int(data.get("total_conversations")),
            total_messages=_int(data.get("total_messages")),
            average_session_length=float(data.get("average_session_length") or 0.0),
            last_conversation_date=_parse_ts(data.get("last_conversation_date")),
            top_discussed_topics=_count_map(data.get("top_discussed_topics")),
            conversation_evolution=deque(points, maxlen=EVOLUTION_LIMIT),
        )


@dataclass(slots=True)
class FeedbackPatterns:
    positive_responses: list[str] = field(default_factory=list)
    negative_indicators: list[str] = field(default_factory=list)
    engagement_triggers: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "positive_responses": list(self.positive_responses),
            "negative_indicators": list(self.negative_indicators),
            "engagement_triggers": list(self.engagement_triggers),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> FeedbackPatterns:
        data = data or {}
        return cls(
            positive_responses=_str_list(data.get("positive_responses")),
            negative_indicators=_str_list(data.get("negative_indicators")),
            engagement_triggers=_str_list(data.get("engagement_triggers")),
        )


@dataclass(slots=True)
class LearnedPatterns:
    preferred_response_length: str = "medium"
    preferred_detail_level: str = "detailed"
    interaction_style: str = "professional"
    feedback_patterns: FeedbackPatterns = field(default_factory=FeedbackPatterns)

    def to_dict(self) -> dict[str, Any]:
        return {
            "preferred_response_length": self.preferred_response_length,
            "preferred_detail_level": self.preferred_detail_level,
            "interaction_style": self.interaction_style,
            "feedback_patterns": self.feedback_patterns.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> LearnedPatterns:
        data = data or {}
        return cls(
            preferred_response_length=str(data.get("preferred_response_length") or "medium"),
            preferred_detail_level=str(data.get("preferred_detail_level") or "detailed"),
            interaction_style=str(data.get("interaction_style") or "professional"),
            feedback_patterns=FeedbackPatterns.from_dict(data.get("feedback_patterns")),
        )


@dataclass(slots=True)
class CommunicationPreferences:
    directness: int = 50
    supportiveness: int = 50
    technical_depth: int = 50
    creativity_level: int = 50

    def to_dict(self) -> dict[str, int]:
        return {
            "directness": self.directness,
            "supportiveness": self.supportiveness,
            "technical_depth": self.technical_depth,
            "creativity_level": self.creativity_level,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> CommunicationPreferences:
        data = data or {}
        return cls(
            directness=_int(data.get("directness"), 50),
            supportiveness=_int(data.get("supportiveness"), 50),
            technical_depth=_int(data.get("technical_depth"), 50),
            creativity_level=_int(data.get("creativity_level"), 50),
        )


@dataclass(slots=True)
class PersonalizationInsights:
    communication_preferences: CommunicationPreferences = field(default_factory=CommunicationPreferences)
    motivation_factors: list[str] = field(default_factory=list)
    pain_points: list[str] = field(default_factory=list)
    success_patterns: list[str] = field(default_factory=list)
    avoidance_patterns: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "communication_preferences": self.communication_preferences.to_dict(),
            "motivation_factors": list(self.motivation_factors),
            "pain_points": list(self.pain_points),
            "success_patterns": list(self.success_patterns),
            "avoidance_patterns": list(self.avoidance_patterns),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> PersonalizationInsights:
        data = data or {}
        return cls(
            communication_preferences=CommunicationPreferences.from_dict(data.get("communication_preferences")),
            motivation_factors=_str_list(data.get("motivation_factors")),
            pain_points=_str_list(data.get("pain_points")),
            success_patterns=_str_list(data.get("success_patterns")),
            avoidance_patterns=_str_list(data.get("avoidance_patterns")),
        )


@dataclass(slots=True)
class ContextProject:
    project_id: str
    name: str
    description: str
    created_at: datetime
    last_mentioned: datetime
    status: str = "planning"
    related_topics: list[str] = field(default_factory=list)
    key_decisions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "project_id": self.project_id,
            "name": self.name,
            "description": self.description,
            "created_at": _iso(self.created_at),
            "last_mentioned": _iso(self.last_mentioned),
            "status": self.status,
            "related_topics": list(self.related_topics),
            "key_decisions": list(self.key_decisions),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ContextProject:
        created_at = _parse_ts(data.get("created_at")) or EPOCH
        return cls(
            project_id=str(data.get("project_id") or ""),
            name=str(data.get("name") or ""),
            description=str(data.get("description") or ""),
            created_at=created_at,
            last_mentioned=_parse_ts(data.get("last_mentioned")) or created_at,
            status=str(data.get("status") or "planning"),
            related_topics=_str_list(data.get("related_topics")),
            key_decisions=_str_list(data.get("key_decisions")),
        )


@dataclass(slots=True)
class ContextReference:
    reference_id: str
    kind: str
    content: str
    last_used: datetime
    relevance: int = 100
    frequency: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "reference_id": self.reference_id,
            "kind": self.kind,
            "content": self.content,
            "last_used": _iso(self.last_used),
            "relevance": self.relevance,
            "frequency": self.frequency,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ContextReference:
        return cls(
            reference_id=str(data.get("reference_id") or ""),
            kind=str(data.get("kind") or "preference"),
            content=str(data.get("content") or ""),
            last_used=_parse_ts(data.get("last_used")) or EPOCH,
            relevance=_int(data.get("relevance"), 100),
            frequency=_int(data.get("frequency"), 1),
        )


@dataclass(slots=True)
class ContextMemory:
    ongoing_projects: deque[ContextProject] = field(default_factory=lambda: deque(maxlen=PROJECT_LIMIT))
    personal_references: deque[ContextReference] = field(default_factory=lambda: deque(maxlen=REFERENCE_LIMIT))

    def to_dict(self) -> dict[str, Any]:
        return {
            "ongoing_projects": [project.to_dict() for project in self.ongoing_projects],
            "personal_references": [reference.to_dict() for reference in self.personal_references],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ContextMemory:
        data = data or {}
        projects = [ContextProject.from_dict(item) for item in data.get("ongoing_projects") or []]
        references = [ContextReference.from_dict(item) for item in data.get("personal_references") or []]
        return cls(
            ongoing_projects=deque(projects, maxlen=PROJECT_LIMIT),
            personal_references=deque(references, maxlen=REFERENCE_LIMIT),
        )


@dataclass(slots=True)
class ProfileQuality:
    data_richness: int = 0
    consistency_score: int = 100
    prediction_accuracy: int = 50
    last_quality_check: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "data_richness": self.data_richness,
            "consistency_score": self.consistency_score,
            "prediction_accuracy": self.prediction_accuracy,
            "last_quality_check": _iso(self.last_quality_check),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ProfileQuality:
        data = data or {}
        return cls(
            data_richness=_int(data.get("data_richness")),
            consistency_score=_int(data.get("consistency_score"), 100),
            prediction_accuracy=_int(data.get("prediction_accuracy"), 50),
            last_quality_check=_parse_ts(data.get("last_quality_check")),
        )


@dataclass(slots=True)
class MasterProfile:
    user_id: str
    created_at: datetime
    last_updated: datetime
    version: int = 1
    business_profile: BusinessProfile = field(default_factory=BusinessProfile)
    writing_style: StyleProfile = field(default_factory=StyleProfile)
    conversation_summary: ConversationSummary = field(default_factory=ConversationSummary)
    learned_patterns: LearnedPatterns = field(default_factory=LearnedPatterns)
    personalization_insights: PersonalizationInsights = field(default_factory=PersonalizationInsights)
    context_memory: ContextMemory = field(default_factory=ContextMemory)
    profile_quality: ProfileQuality = field(default_factory=ProfileQuality)

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "created_at": _iso(self.created_at),
            "last_updated": _iso(self.last_updated),
            "version": self.version,
            "business_profile": self.business_profile.to_dict(),
            "writing_style": self.writing_style.to_dict(),
            "conversation_summary": self.conversation_summary.to_dict(),
            "learned_patterns": self.learned_patterns.to_dict(),
            "personalization_insights": self.personalization_insights.to_dict(),
            "context_memory": self.context_memory.to_dict(),
            "profile_quality": self.profile_quality.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MasterProfile:
        created_at = _parse_ts(data.get("created_at")) or EPOCH
        return cls(
            user_id=str(data["user_id"]),
            created_at=created_at,
            last_updated=_parse_ts(data.get("last_updated")) or created_at,
            version=_int(data.get("version"), 0),
            business_profile=BusinessProfile.from_dict(data.get("business_profile")),
            writing_style=StyleProfile.from_dict(data.get("writing_style")),
            conversation_summary=ConversationSummary.from_dict(data.get("conversation_summary")),
            learned_patterns=LearnedPatterns.from_dict(data.get("learned_patterns")),
            personalization_insights=PersonalizationInsights.from_dict(data.get("personalization_insights")),
            context_memory=ContextMemory.from_dict(data.get("context_memory")),
            profile_quality=ProfileQuality.from_dict(data.get("profile_quality")),
        )


@dataclass(slots=True)
class ConversationContext:
    current_topic: str = "general"
    conversation_flow: list[str] = field(default_factory=list)
    user_intent: str = ""
    previous_questions: list[str] = field(default_factory=list)
    user_sentiment: str = "neutral"
    conversation_length: int = 0
    is_first_time: bool = True


@dataclass(slots=True)
class FeedbackEntry:
    message_id: str
    verdict: str
    created_at: datetime | None = None

    @property
    def is_positive(self) -> bool:
        return self.verdict in POSITIVE_VERDICTS


@dataclass(slots=True)
class SessionMessage:
    message_id: str
    role: str
    content: str
    created_at: datetime | None = None

    @property
    def is_user(self) -> bool:
        return self.role == "user"


@dataclass(slots=True)
class ConversationSession:
    session_id: str
    user_id: str
    started_at: datetime
    conversation_id: str | None = None
    state: str = SESSION_OPEN
    messages: list[SessionMessage] = field(default_factory=list)
    analyses: list[MessageAnalysis] = field(default_factory=list)
    ai_responses: list[str] = field(default_factory=list)
    feedback: list[FeedbackEntry] = field(default_factory=list)
    completed_at: datetime | None = None

    @property
    def is_open(self) -> bool:
        return self.state == SESSION_OPEN

    def user_messages(self) -> list[str]:
        return [message.content for message in self.messages if message.is_user]


@dataclass(slots=True)
class SessionSummary:
    session_id: str
    total_messages: int = 0
    user_message_count: int = 0
    ai_response_count: int = 0
    main_topics: list[str] = field(default_factory=list)
    engagement_level: int = 0
    satisfaction: int = 50
    key_insights: list[str] = field(default_factory=list)
    learned_patterns: list[str] = field(default_factory=list)
    contextual_progress: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "total_messages": self.total_messages,
            "user_message_count": self.user_message_count,
            "ai_response_count": self.ai_response_count,
            "main_topics": list(self.main_topics),
            "engagement_level": self.engagement_level,
            "satisfaction": self.satisfaction,
            "key_insights": list(self.key_insights),
            "learned_patterns": list(self.learned_patterns),
            "contextual_progress": list(self.contextual_progress),
        }


@dataclass(slots=True)
class LearningDelta:
    tone_shifts: dict[str, int] = field(default_factory=dict)
    new_vocabulary: list[str] = field(default_factory=list)
    pattern_changes: list[str] = field(default_factory=list)
    topic_shift_trends: list[str] = field(default_factory=list)
    engagement_patterns: list[str] = field(default_factory=list)
    response_preferences: list[str] = field(default_factory=list)
    new_preferences: list[str] = field(default_factory=list)
    updated_goals: list[str] = field(default_factory=list)
    emerging_patterns: list[str] = field(default_factory=list)
    data_richness_increase: int = 0
    consistency_score: int = 100
    prediction_improvement: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "tone_shifts": dict(self.tone_shifts),
            "new_vocabulary": list(self.new_vocabulary),
            "pattern_changes": list(self.pattern_changes),
            "topic_shift_trends": list(self.topic_shift_trends),
            "engagement_patterns": list(self.engagement_patterns),
            "response_preferences": list(self.response_preferences),
            "new_preferences": list(self.new_preferences),
            "updated_goals": list(self.updated_goals),
            "emerging_patterns": list(self.emerging_patterns),
            "data_richness_increase": self.data_richness_increase,
            "consistency_score": self.consistency_score,
            "prediction_improvement": self.prediction_improvement,
        }


@dataclass(slots=True)
class SessionOutcome:
    updated_profile: MasterProfile
    learning_delta: LearningDelta
    summary: SessionSummary

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.updated_profile.user_id,
            "profile_version": self.updated_profile.version,
            "summary": self.summary.to_dict(),
            "learning_delta": self.learning_delta.to_dict(),
        }
