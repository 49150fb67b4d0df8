from __future__ import annotations

from collections import Counter
from copy import deepcopy
import math

from voice.models import (
    SENTENCE_COMPLEXITIES,
    LinguisticTraits,
    MessageAnalysis,
    StyleProfile,
    ToneScores,
    TopicInterest,
    WritingPatterns,
)

DEFAULT_WINDOW = 50
FREQUENCY_LIMIT = 20
EMOJI_LIMIT = 10
TRAIT_LIMIT = 5
KEY_TERM_LIMIT = 10
EMOJI_USAGE_THRESHOLD = 0.3


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def top_counts(items: list[str], limit: int = FREQUENCY_LIMIT) -> dict[str, int]:
    # Counter keeps insertion order, so equal counts stay in first-seen order.
    return dict(Counter(items).most_common(limit))


def top_items(items: list[str], limit: int) -> list[str]:
    return [item for item, _count in Counter(items).most_common(limit)]


def complexity_for(words_per_sentence: float) -> str:
    if words_per_sentence < 8:
        return "simple"
    if words_per_sentence < 15:
        return "moderate"
    return "complex"


def complexity_index(complexity: str) -> int:
    return SENTENCE_COMPLEXITIES.index(complexity) if complexity in SENTENCE_COMPLEXITIES else 0


def default_style_profile() -> StyleProfile:
    return StyleProfile()


def build_style_profile(analyses: list[MessageAnalysis], window: int = DEFAULT_WINDOW) -> StyleProfile:
    if not analyses:
        return default_style_profile()

    total = len(analyses)
    recent = analyses[-max(1, window) :]
    count = len(recent)

    all_words = [word for analysis in recent for word in analysis.words]
    all_emojis = [item for analysis in recent for item in analysis.patterns.emojis]
    emoji_frequency = len(all_emojis) / count
    words_per_sentence = sum(a.word_count / max(1, a.sentence_count) for a in recent) / count

    return StyleProfile(
        average_message_length=round_half_up(sum(a.length for a in recent) / count),
        vocabulary_size=len(set(all_words)),
        sentence_complexity=complexity_for(words_per_sentence),
        tone=_average_tone(recent),
        frequent_words=top_counts(all_words),
        frequent_phrases=top_counts([phrase for a in recent for phrase in a.phrases]),
        frequent_endings=top_counts([ending for a in recent for ending in a.features.endings]),
        writing_patterns=WritingPatterns(
            uses_emojis=emoji_frequency > EMOJI_USAGE_THRESHOLD,
            emoji_frequency=round(emoji_frequency, 2),
            preferred_emojis=top_items(all_emojis, EMOJI_LIMIT),
            uses_exclamation=any(a.patterns.exclamations > 0 for a in recent),
            uses_question=any(a.patterns.questions > 0 for a in recent),
            uses_ellipsis=any(a.patterns.ellipses > 0 for a in recent),
            uses_brackets=any(a.patterns.brackets > 0 for a in recent),
            uses_quotes=any(a.patterns.quotes > 0 for a in recent),
        ),
        linguistic_traits=LinguisticTraits(
            preferred_conjunctions=top_items([c for a in recent for c in a.features.conjunctions], TRAIT_LIMIT),
            preferred_interjections=top_items([i for a in recent for i in a.features.interjections], TRAIT_LIMIT),
            preferred_fillers=top_items([f for a in recent for f in a.features.fillers], TRAIT_LIMIT),
        ),
        topic_interests=_topic_interests(recent),
        total_messages_analyzed=total,
        confidence_score=min(100, total * 2),
    )


def _average_tone(analyses: list[MessageAnalysis]) -> ToneScores:
    count = len(analyses)
    return ToneScores(
        formality=round_half_up(sum(a.tone.formality for a in analyses) / count),
        enthusiasm=round_half_up(sum(a.tone.enthusiasm for a in analyses) / count),
        directness=round_half_up(sum(a.tone.directness for a in analyses) / count),
        politeness=round_half_up(sum(a.tone.politeness for a in analyses) / count),
    )


def _topic_interests(analyses: list[MessageAnalysis]) -> dict[str, TopicInterest]:
    grouped: dict[str, list[MessageAnalysis]] = {}
    for analysis in analyses:
        for topic in analysis.topics:
            grouped.setdefault(topic, []).append(analysis)

    interests: dict[str, TopicInterest] = {}
    for topic, members in grouped.items():
        interests[topic] = TopicInterest(
            frequency=len(members),
            average_engagement=round(sum(m.length for m in members) / len(members), 2),
            key_terms=top_items([word for m in members for word in m.words], KEY_TERM_LIMIT),
        )
    return interests


def _merge_counts(first: dict[str, int], second: dict[str, int]) -> dict[str, int]:
    merged: Counter[str] = Counter()
    for source in (second, first):
        for key, value in source.items():
            merged[key] += value
    return dict(merged.most_common(FREQUENCY_LIMIT))


def _merge_unique(latest: list[str], previous: list[str], limit: int) -> list[str]:
    return list(dict.fromkeys([*latest, *previous]))[:limit]


def blend_style_profiles(previous: StyleProfile, latest: StyleProfile) -> StyleProfile:
    if previous.total_messages_analyzed == 0:
        return deepcopy(latest)
    if latest.total_messages_analyzed == 0:
        return deepcopy(previous)

    total = previous.total_messages_analyzed + latest.total_messages_analyzed
    emoji_frequency = round((previous.writing_patterns.emoji_frequency + latest.writing_patterns.emoji_frequency) / 2, 2)
    old_patterns = previous.writing_patterns
    new_patterns = latest.writing_patterns

    interests = {topic: deepcopy(value) for topic, value in latest.topic_interests.items()}
    for topic, value in previous.topic_interests.items():
        if topic not in interests:
            interests[topic] = deepcopy(value)
            continue
        current = interests[topic]
        frequency = current.frequency + value.frequency
        engagement = (
            current.average_engagement * current.frequency + value.average_engagement * value.frequency
        ) / max(1, frequency)
        interests[topic] = TopicInterest(
            frequency=frequency,
            average_engagement=round(engagement, 2),
            key_terms=_merge_unique(current.key_terms, value.key_terms, KEY_TERM_LIMIT),
        )

    return StyleProfile(
        average_message_length=round_half_up((previous.average_message_length + latest.average_message_length) / 2),
        vocabulary_size=max(previous.vocabulary_size, latest.vocabulary_size),
        sentence_complexity=latest.sentence_complexity,
        tone=ToneScores(
            formality=round_half_up((previous.tone.formality + latest.tone.formality) / 2),
            enthusiasm=round_half_up((previous.tone.enthusiasm + latest.tone.enthusiasm) / 2),
            directness=round_half_up((previous.tone.directness + latest.tone.directness) / 2),
            politeness=round_half_up((previous.tone.politeness + latest.tone.politeness) / 2),
        ),
        frequent_words=_merge_counts(previous.frequent_words, latest.frequent_words),
        frequent_phrases=_merge_counts(previous.frequent_phrases, latest.frequent_phrases),
        frequent_endings=_merge_counts(previous.frequent_endings, latest.frequent_endings),
        writing_patterns=WritingPatterns(
            uses_emojis=emoji_frequency > EMOJI_USAGE_THRESHOLD,
            emoji_frequency=emoji_frequency,
            preferred_emojis=_merge_unique(new_patterns.preferred_emojis, old_patterns.preferred_emojis, EMOJI_LIMIT),
            uses_exclamation=old_patterns.uses_exclamation or new_patterns.uses_exclamation,
            uses_question=old_patterns.uses_question or new_patterns.uses_question,
            uses_ellipsis=old_patterns.uses_ellipsis or new_patterns.uses_ellipsis,
            uses_brackets=old_patterns.uses_brackets or new_patterns.uses_brackets,
            uses_quotes=old_patterns.uses_quotes or new_patterns.uses_quotes,
        ),
        linguistic_traits=LinguisticTraits(
            preferred_conjunctions=_merge_unique(
                latest.linguistic_traits.preferred_conjunctions,
                previous.linguistic_traits.preferred_conjunctions,
                TRAIT_LIMIT,
            ),
            preferred_interjections=_merge_unique(
                latest.linguistic_traits.preferred_interjections,
                previous.linguistic_traits.preferred_interjections,
                TRAIT_LIMIT,
            ),
            preferred_fillers=_merge_unique(
                latest.linguistic_traits.preferred_fillers,
                previous.linguistic_traits.preferred_fillers,
                TRAIT_LIMIT,
            ),
        ),
        topic_interests=interests,
        total_messages_analyzed=total,
        confidence_score=min(100, total * 2),
    )
