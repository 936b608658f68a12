from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from prospect_fusion.lexicons import ACTIVITY_KEYWORDS, INTENT_KEYWORDS, PAIN_KEYWORDS, TOPIC_KEYWORDS, Lexicon


@dataclass(slots=True, frozen=True)
class ExtractedSignals:
    intent: tuple[str, ...] = ()
    pain: tuple[str, ...] = ()
    topics: tuple[str, ...] = ()
    activities: tuple[str, ...] = ()

    def is_empty(self) -> bool:
        return not (self.intent or self.pain or self.topics or self.activities)


class SignalExtractor:
    """Tag free text against the intent, pain, topic and activity lexicons."""

    def __init__(
        self,
        intent: Lexicon = INTENT_KEYWORDS,
        pain: Lexicon = PAIN_KEYWORDS,
        topics: Lexicon = TOPIC_KEYWORDS,
        activities: Lexicon = ACTIVITY_KEYWORDS,
    ) -> None:
        self._intent = intent
        self._pain = pain
        self._topics = topics
        self._activities = activities

    def extract(self, text: str | None, tags: Sequence[str] = ()) -> ExtractedSignals:
        text = text if isinstance(text, str) else ""
        tags = tuple(tag for tag in tags if isinstance(tag, str))
        return ExtractedSignals(
            intent=_phrases(self._intent, text, tags),
            pain=_phrases(self._pain, text, tags),
            topics=_phrases(self._topics, text, tags),
            activities=_phrases(self._activities, text, tags),
        )


def _phrases(lexicon: Lexicon, text: str, tags: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(entry.phrase for entry in lexicon.matches(text, tags))
