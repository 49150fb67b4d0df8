from __future__ import annotations

from collections import Counter
import re

import emoji

from config.settings import get_settings
from voice.lexicon import Lexicon, Marker, get_lexicon
from voice.models import LinguisticFeatures, MessageAnalysis, MessagePatterns, ToneScores

SENTENCE_END_RE = re.compile(r"[.!?]+")
NON_WORD_RE = re.compile(r"[^\w\s]")
WHITESPACE_RE = re.compile(r"\s+")
ELLIPSIS_RE = re.compile(r"\.\.\.|…")
BRACKET_RE = re.compile(r"\([^)]*\)")
QUOTE_RE = re.compile(r"[\"'][^\"']*[\"']")

WORD_LIMIT = 20
PHRASE_LIMIT = 15
NEUTRAL_BASELINE = 50


def clamp_score(value: float) -> int:
    return int(max(0, min(100, value)))


def extract_emojis(text: str) -> list[str]:
    return [match["emoji"] for match in emoji.emoji_list(text)]


def split_words(text: str) -> list[str]:
    return [word for word in WHITESPACE_RE.split(NON_WORD_RE.sub(" ", text)) if word]


def _marker_score(text: str, markers: tuple[Marker, ...]) -> int:
    return sum(weight for marker, weight in markers if marker in text)


class MessageAnalyzer:
    def __init__(self, lexicon: Lexicon | None = None) -> None:
        self.lexicon = lexicon or get_lexicon(get_settings().locale)

    def analyze(self, text: str) -> MessageAnalysis:
        clean = (text or "").strip()
        return MessageAnalysis(
            length=len(clean),
            sentence_count=self._count_sentences(clean),
            word_count=max(1, len(split_words(clean))),
            vocabulary_richness=self._vocabulary_richness(clean),
            tone=self._tone(clean),
            patterns=self._patterns(clean),
            features=self._features(clean),
            words=self._significant_words(clean),
            phrases=self._phrases(clean),
            topics=self._topics(clean),
        )

    def analyze_many(self, texts: list[str]) -> list[MessageAnalysis]:
        return [self.analyze(text) for text in texts]

    def _count_sentences(self, text: str) -> int:
        return max(1, len(SENTENCE_END_RE.findall(text)))

    def _vocabulary_richness(self, text: str) -> float:
        words = [word for word in split_words(text) if len(word) > 1]
        if not words:
            return 0.0
        return round(len(set(words)) / len(words) * 100, 2)

    def _tone(self, text: str) -> ToneScores:
        lowered = text.lower()
        lex = self.lexicon
        formality = NEUTRAL_BASELINE + _marker_score(lowered, lex.formal_markers) - _marker_score(
            lowered, lex.informal_markers
        )
        directness = NEUTRAL_BASELINE + _marker_score(lowered, lex.direct_markers) - _marker_score(
            lowered, lex.indirect_markers
        )
        return ToneScores(
            formality=clamp_score(formality),
            enthusiasm=clamp_score(_marker_score(lowered, lex.enthusiasm_markers)),
            directness=clamp_score(directness),
            politeness=clamp_score(_marker_score(lowered, lex.polite_markers)),
        )

    def _patterns(self, text: str) -> MessagePatterns:
        return MessagePatterns(
            emojis=extract_emojis(text),
            exclamations=text.count("!"),
            questions=text.count("?"),
            ellipses=len(ELLIPSIS_RE.findall(text)),
            brackets=len(BRACKET_RE.findall(text)),
            quotes=len(QUOTE_RE.findall(text)),
        )

    def _features(self, text: str) -> LinguisticFeatures:
        lex = self.lexicon
        return LinguisticFeatures(
            conjunctions=[item for item in lex.conjunctions if item in text],
            interjections=[item for item in lex.interjections if item in text],
            fillers=[item for item in lex.fillers if item in text],
            endings=[item for item in lex.endings if item in text],
        )

    def _significant_words(self, text: str) -> list[str]:
        stop_words = self.lexicon.stop_words
        words = [
            word.lower()
            for word in split_words(text)
            if len(word) > 1 and word.lower() not in stop_words
        ]
        return [word for word, _count in Counter(words).most_common(WORD_LIMIT)]

    def _phrases(self, text: str) -> list[str]:
        phrases: list[str] = []
        for sentence in SENTENCE_END_RE.split(text):
            words = sentence.split()
            for start in range(len(words) - 1):
                for size in range(2, min(4, len(words) - start) + 1):
                    phrase = " ".join(words[start : start + size])
                    if 3 < len(phrase) < 20:
                        phrases.append(phrase)
        return [phrase for phrase, _count in Counter(phrases).most_common(PHRASE_LIMIT)]

    def _topics(self, text: str) -> list[str]:
        lowered = text.lower()
        return [
            topic
            for topic, keywords in self.lexicon.topic_keywords
            if any(keyword in lowered for keyword in keywords)
        ]
