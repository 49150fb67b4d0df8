from __future__ import annotations

import re
from typing import Protocol, Sequence

from config.settings import get_settings
from voice.lexicon import Lexicon, get_lexicon
from voice.models import ConversationContext, SessionMessage

QUESTION_SPLIT_RE = re.compile(r"(?<=[.!?？])\s+")

RECENT_USER_WINDOW = 3
QUESTION_LIMIT = 5
FIRST_TIME_LIMIT = 2


class ContextAnalyzer(Protocol):
    def analyze(self, messages: Sequence[SessionMessage]) -> ConversationContext:
        ...


class KeywordContextAnalyzer:
    def __init__(self, lexicon: Lexicon | None = None) -> None:
        self.lexicon = lexicon or get_lexicon(get_settings().locale)

    def analyze(self, messages: Sequence[SessionMessage]) -> ConversationContext:
        user_texts = [message.content for message in messages if message.is_user]
        ai_texts = [message.content for message in messages if not message.is_user]
        recent = " ".join(user_texts[-RECENT_USER_WINDOW:]).lower()

        return ConversationContext(
            current_topic=self._topic_of(recent) or self.lexicon.default_topic,
            conversation_flow=self._flow(messages),
            user_intent=self._intent(user_texts[-1].lower() if user_texts else ""),
            previous_questions=self._questions(ai_texts),
            user_sentiment=self._sentiment(recent),
            conversation_length=len(messages),
            is_first_time=len(messages) <= FIRST_TIME_LIMIT,
        )

    def _topic_of(self, text: str) -> str | None:
        for topic, keywords in self.lexicon.topic_keywords:
            if any(keyword in text for keyword in keywords):
                return topic
        return None

    def _flow(self, messages: Sequence[SessionMessage]) -> list[str]:
        flow: list[str] = []
        for message in messages:
            topic = self._topic_of(message.content.lower())
            if topic and (not flow or flow[-1] != topic):
                flow.append(topic)
        return flow

    def _intent(self, text: str) -> str:
        for intent, keywords in self.lexicon.intent_rules:
            if any(keyword in text for keyword in keywords):
                return intent
        return self.lexicon.default_intent

    def _questions(self, ai_texts: list[str]) -> list[str]:
        questions = [
            sentence.strip()
            for text in ai_texts
            for sentence in QUESTION_SPLIT_RE.split(text)
            if sentence.strip().endswith(("?", "？"))
        ]
        return questions[-QUESTION_LIMIT:]

    def _sentiment(self, text: str) -> str:
        positive = sum(1 for word in self.lexicon.positive_sentiment_words if word in text)
        negative = sum(1 for word in self.lexicon.negative_sentiment_words if word in text)
        if positive > negative:
            return "positive"
        if negative > positive:
            return "negative"
        return "neutral"
