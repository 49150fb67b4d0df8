from __future__ import annotations

from dataclasses import dataclass, field, replace
import logging
import random
import re
from typing import Any

from config.settings import Settings, get_settings
from voice.lexicon import Lexicon, RewriteRule, get_lexicon
from voice.models import MasterProfile, StyleProfile

logger = logging.getLogger(__name__)

PURPOSES = ("response", "suggestion", "draft", "example")
TONES = ("match_user", "professional", "casual", "enthusiastic")
LENGTHS = ("short", "medium", "long")
ALTERNATE_TONES = ("professional", "casual")
PURPOSE_BONUS = {"response": 10, "suggestion": 5}

FILLER_PROBABILITY = 0.3
EMOJI_PROBABILITY = 0.3
ELLIPSIS_PROBABILITY = 0.4
THUMBS_UP = "👍"
CLAUSE_SPLIT_RE = re.compile(r"[,;]")
TRAILING_PERIOD_RE = re.compile(r"\.$")


@dataclass(slots=True)
class WritingRequest:
    content: str
    purpose: str = "response"
    tone: str | None = None
    length: str | None = None
    include_emojis: bool | None = None
    context: str | None = None
    generate_alternatives: bool = True

    def __post_init__(self) -> None:
        if self.purpose not in PURPOSES:
            raise ValueError(f"Unsupported purpose: {self.purpose}")
        if self.tone is not None and self.tone not in TONES:
            raise ValueError(f"Unsupported tone: {self.tone}")
        if self.length is not None and self.length not in LENGTHS:
            raise ValueError(f"Unsupported length: {self.length}")


@dataclass(slots=True)
class StyleApplication:
    tone_adjustments: list[str] = field(default_factory=list)
    vocabulary_matches: list[str] = field(default_factory=list)
    pattern_applications: list[str] = field(default_factory=list)
    structural_changes: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "tone_adjustments": list(self.tone_adjustments),
            "vocabulary_matches": list(self.vocabulary_matches),
            "pattern_applications": list(self.pattern_applications),
            "structural_changes": list(self.structural_changes),
        }


@dataclass(slots=True)
class PersonalizedResult:
    original_content: str
    personalized_content: str
    style_application: StyleApplication
    confidence_score: int
    alternatives: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "original_content": self.original_content,
            "personalized_content": self.personalized_content,
            "style_application": self.style_application.to_dict(),
            "confidence_score": self.confidence_score,
            "alternatives": list(self.alternatives),
        }


def apply_rules(text: str, rules: tuple[RewriteRule, ...]) -> str:
    for pattern, replacement in rules:
        text = re.sub(pattern, replacement, text)
    return text


def confidence_score(profile: MasterProfile, purpose: str) -> int:
    quality = profile.profile_quality
    score = (
        min(40.0, quality.data_richness * 0.4)
        + min(30.0, profile.writing_style.total_messages_analyzed * 0.6)
        + min(20.0, quality.consistency_score * 0.2)
        + PURPOSE_BONUS.get(purpose, 0)
    )
    return int(min(100, max(0, round(score))))


class PersonalizationEngine:
    def __init__(
        self,
        settings: Settings | None = None,
        lexicon: Lexicon | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.lexicon = lexicon or get_lexicon(self.settings.locale)
        self.rng = rng or random.Random(self.settings.rewrite_seed)

    def personalize(self, request: WritingRequest, profile: MasterProfile) -> PersonalizedResult:
        if request.generate_alternatives:
            return self.render_with_alternatives(request, profile)
        return self.render(request, profile)

    def render_with_alternatives(self, request: WritingRequest, profile: MasterProfile) -> PersonalizedResult:
        result = self.render(request, profile)
        for tone in ALTERNATE_TONES:
            if request.tone == tone:
                continue
            try:
                alternate = self.render(replace(request, tone=tone, generate_alternatives=False), profile)
            except Exception:
                logger.warning("Alternate rewrite failed tone=%s user=%s", tone, profile.user_id, exc_info=True)
                continue
            result.alternatives.append(alternate.personalized_content)
        result.alternatives = result.alternatives[: len(ALTERNATE_TONES)]
        return result

    def render(self, request: WritingRequest, profile: MasterProfile) -> PersonalizedResult:
        style = profile.writing_style
        log = StyleApplication()

        text = request.content
        text = self._shape_length(text, style, request, log)
        text = self._shape_formality(text, style, request, log)
        text = self._shape_tone(text, style, request, log)
        text = self._shape_vocabulary(text, style, log)
        text = self._shape_structure(text, style, log)
        text = self._shape_patterns(text, style, request, log)
        text = self._shape_context(text, profile, request, log)

        if len(text) != len(request.content):
            direction = "expanded" if len(text) > len(request.content) else "condensed"
            log.structural_changes.append(f"length {direction} by {abs(len(text) - len(request.content))} chars")

        return PersonalizedResult(
            original_content=request.content,
            personalized_content=text,
            style_application=log,
            confidence_score=confidence_score(profile, request.purpose),
        )

    def _shape_length(self, text: str, style: StyleProfile, request: WritingRequest, log: StyleApplication) -> str:
        if request.length == "short" or (request.length is None and style.average_message_length < 50):
            log.structural_changes.append("condensed for brevity")
            return self._condense(text)
        if request.length == "long" or (request.length is None and style.average_message_length > 150):
            log.structural_changes.append("expanded for detail")
            return apply_rules(text, self.lexicon.expand_rules)
        return text

    def _condense(self, text: str) -> str:
        text = apply_rules(text, self.lexicon.concise_rules)
        separator = self.lexicon.sentence_separator
        limit = self.lexicon.concise_max_words
        return separator.join(" ".join(sentence.split(" ")[:limit]) for sentence in text.split(separator))

    def _shape_formality(self, text: str, style: StyleProfile, request: WritingRequest, log: StyleApplication) -> str:
        formality = style.tone.formality
        if request.tone == "professional" or (request.tone != "casual" and formality > 70):
            log.tone_adjustments.append("formal register applied")
            return apply_rules(text, self.lexicon.formal_rules)
        if request.tone == "casual" or (request.tone != "professional" and formality < 30):
            log.tone_adjustments.append("casual register applied")
            return apply_rules(text, self.lexicon.casual_rules)
        return text

    def _shape_tone(self, text: str, style: StyleProfile, request: WritingRequest, log: StyleApplication) -> str:
        lex = self.lexicon
        if request.tone == "enthusiastic":
            log.tone_adjustments.append("enthusiasm added")
            return apply_rules(text, lex.enthusiasm_rules)
        if request.tone not in (None, "match_user"):
            return text

        tone = style.tone
        if tone.enthusiasm > 70:
            text = apply_rules(text, lex.enthusiasm_rules)
            log.tone_adjustments.append("enthusiasm added")
        elif tone.enthusiasm < 30:
            text = apply_rules(text, lex.calm_rules)
            log.tone_adjustments.append("enthusiasm reduced")

        if tone.directness > 70:
            text = apply_rules(text, lex.direct_rules)
            log.tone_adjustments.append("direct phrasing applied")
        elif tone.directness < 30:
            text = apply_rules(text, lex.indirect_rules)
            log.tone_adjustments.append("indirect phrasing applied")

        if tone.politeness > 70:
            text = apply_rules(text, lex.polite_rules)
            log.tone_adjustments.append("polite phrasing applied")
        return text

    def _word_pattern(self, word: str) -> str:
        tail = "" if self.lexicon.attached_particles else r"(?!\w)"
        return rf"(?<!\w){re.escape(word)}{tail}"

    def _shape_vocabulary(self, text: str, style: StyleProfile, log: StyleApplication) -> str:
        for standard, synonyms in self.lexicon.synonym_groups:
            personal = next((word for word in style.frequent_words if word in synonyms), None)
            if personal is None:
                continue
            text, hits = re.subn(self._word_pattern(standard), personal, text, flags=re.IGNORECASE)
            if hits:
                log.vocabulary_matches.append(f"{standard} -> {personal}")

        preferred = style.linguistic_traits.preferred_conjunctions
        for original, replacement in self.lexicon.conjunction_swaps:
            if replacement not in preferred:
                continue
            text, hits = re.subn(self._word_pattern(original), replacement, text)
            if hits:
                log.vocabulary_matches.append(f"conjunction {original} -> {replacement}")

        fillers = style.linguistic_traits.preferred_fillers
        if fillers and self.rng.random() < FILLER_PROBABILITY:
            separator = self.lexicon.sentence_separator
            sentences = text.split(separator)
            sentences[0] = f"{fillers[0]}, {sentences[0]}"
            text = separator.join(sentences)
            log.vocabulary_matches.append(f"filler {fillers[0]} inserted")

        for word in list(style.frequent_words)[:5]:
            if word in text:
                log.vocabulary_matches.append(f"frequent word kept: {word}")
        return text

    def _shape_structure(self, text: str, style: StyleProfile, log: StyleApplication) -> str:
        separator = self.lexicon.sentence_separator
        if style.sentence_complexity == "simple":
            parts = [part.strip() for part in CLAUSE_SPLIT_RE.split(text) if part.strip()]
            simplified = separator.join(parts)
            if simplified != text:
                log.structural_changes.append("clauses split into short sentences")
            text = simplified
        elif style.sentence_complexity == "complex":
            suffix = self.lexicon.complexify_suffix
            text = separator.join(
                sentence + suffix if len(sentence) < 50 else sentence for sentence in text.split(separator)
            )
            log.structural_changes.append("sentences elaborated")

        if style.frequent_endings and self.lexicon.ending_anchor:
            counts = style.frequent_endings
            ending = max(counts, key=lambda key: counts[key])
            text, hits = re.subn(self.lexicon.ending_anchor, ending, text)
            if hits:
                log.structural_changes.append(f"preferred ending {ending} applied")
        return text

    def _shape_patterns(self, text: str, style: StyleProfile, request: WritingRequest, log: StyleApplication) -> str:
        patterns = style.writing_patterns
        emojis = patterns.preferred_emojis
        if patterns.uses_emojis and request.include_emojis is not False and emojis:
            if self.rng.random() < EMOJI_PROBABILITY:
                text = f"{text.strip()} {self.rng.choice(emojis)}"
                log.pattern_applications.append("emoji appended")
            if THUMBS_UP in emojis:
                for word in self.lexicon.positive_words:
                    if word in text:
                        text = text.replace(word, f"{word} {THUMBS_UP}", 1)
                        log.pattern_applications.append(f"emoji after {word}")

        if patterns.uses_exclamation and style.tone.enthusiasm > 60:
            exclaimed = apply_rules(text, self.lexicon.exclamation_rules)
            if exclaimed != text:
                log.pattern_applications.append("exclamations added")
            text = exclaimed

        if patterns.uses_ellipsis:
            separator = self.lexicon.sentence_separator
            sentences = text.split(separator)
            if self.rng.random() < ELLIPSIS_PROBABILITY:
                trailed = TRAILING_PERIOD_RE.sub("...", sentences[-1])
                if trailed != sentences[-1]:
                    log.pattern_applications.append("ellipsis added")
                sentences[-1] = trailed
            text = separator.join(sentences)

        if patterns.uses_brackets:
            for phrase in self.lexicon.explanatory_phrases:
                if phrase in text:
                    text = text.replace(phrase, f"({phrase})", 1)
                    log.pattern_applications.append(f"brackets around {phrase}")
        return text

    def _shape_context(self, text: str, profile: MasterProfile, request: WritingRequest, log: StyleApplication) -> str:
        lex = self.lexicon
        factors = profile.personalization_insights.motivation_factors
        factor = next(
            (item for item in factors if any(item in phrase for phrase in lex.motivational_phrases)),
            None,
        )
        if factor:
            text = lex.motivation_template.format(factor=factor, content=text)
            log.tone_adjustments.append(f"motivational framing: {factor}")

        lowered = text.lower()
        reference = next(
            (ref for ref in profile.context_memory.personal_references if ref.content[:10].lower() in lowered),
            None,
        )
        if reference is not None and reference.kind == "preference":
            text += lex.preference_note
            log.structural_changes.append("preference note appended")

        projects = profile.context_memory.ongoing_projects
        if request.context and projects:
            context = request.context.lower()
            project = next((item for item in projects if item.name.lower() in context), None)
            if project is not None:
                text += lex.project_template.format(name=project.name)
                log.structural_changes.append(f"project reference: {project.name}")
        return text
