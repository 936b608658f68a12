"""
Keyword lexicons used for signal extraction and scoring.

Each lexicon is a static, versioned table of phrases tagged with the language
they are written in (``en`` English, ``tl`` Tagalog, ``taglish`` mixed). Matching
is case-insensitive substring containment, so phrases are stored lower-cased.
Bump ``version`` whenever entries change; it is reported with score factors.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class LexiconEntry:
    phrase: str
    language: str = "en"
    points: int = 0


@dataclass(frozen=True, slots=True)
class Lexicon:
    name: str
    version: str
    entries: tuple[LexiconEntry, ...]

    @property
    def phrases(self) -> tuple[str, ...]:
        return tuple(entry.phrase for entry in self.entries)

    def matches(self, text: str, tags: tuple[str, ...] = ()) -> list[LexiconEntry]:
        """Entries found in ``text`` or in any of ``tags``, in table order."""
        haystacks = [text.lower(), *(tag.lower() for tag in tags)]
        return [entry for entry in self.entries if any(entry.phrase in hay for hay in haystacks)]


def _table(name: str, version: str, rows: list[tuple[str, str, int]]) -> Lexicon:
    return Lexicon(
        name=name,
        version=version,
        entries=tuple(LexiconEntry(phrase=phrase, language=lang, points=points) for phrase, lang, points in rows),
    )


def _keywords(name: str, version: str, rows: list[tuple[str, str]]) -> Lexicon:
    return _table(name, version, [(phrase, lang, 0) for phrase, lang in rows])


# Signal extraction (unweighted).

INTENT_KEYWORDS = _keywords(
    "intent_keywords",
    "1",
    [
        ("extra income", "en"),
        ("negosyo", "tl"),
        ("insurance", "en"),
        ("side hustle", "en"),
        ("passive income", "en"),
        ("online selling", "en"),
        ("business", "en"),
        ("investment", "en"),
    ],
)

PAIN_KEYWORDS = _keywords(
    "pain_keywords",
    "1",
    [
        ("pagod", "tl"),
        ("kulang", "tl"),
        ("hirap", "tl"),
        ("stress", "en"),
        ("burnout", "en"),
        ("salary", "en"),
    ],
)

TOPIC_KEYWORDS = _keywords(
    "topic_keywords",
    "1",
    [
        ("call center", "en"),
        ("ofw", "taglish"),
        ("homebased", "taglish"),
        ("freelance", "en"),
        ("entrepreneur", "en"),
    ],
)

ACTIVITY_KEYWORDS = _keywords(
    "activity_keywords",
    "1",
    [
        ("looking for", "en"),
        ("interested in", "en"),
        ("ready to", "en"),
        ("want to", "en"),
    ],
)


# Scoring (weighted; points per matched phrase).

INTENT_PHRASES = _table(
    "intent_phrases",
    "5.0",
    [
        ("financial freedom", "en", 30),
        ("negosyo", "tl", 28),
        ("gusto mag business", "taglish", 28),
        ("business opportunity", "en", 27),
        ("passive income", "en", 26),
        ("extra income", "en", 25),
        ("side hustle", "en", 25),
        ("dagdag kita", "tl", 24),
        ("insurance", "en", 22),
        ("sideline", "taglish", 22),
        ("online selling", "en", 20),
        ("investment", "en", 20),
        ("part time", "en", 18),
        ("open for opportunities", "en", 18),
    ],
)

PAIN_PHRASES = _table(
    "pain_phrases",
    "5.0",
    [
        ("kailangan ng pera", "tl", 20),
        ("kulang ang sahod", "tl", 20),
        ("walang pera", "tl", 20),
        ("laid off", "en", 20),
        ("pagod sa trabaho", "tl", 18),
        ("need money", "en", 18),
        ("low salary", "en", 18),
        ("utang", "tl", 18),
        ("debt", "en", 18),
        ("burnout", "en", 16),
        ("broke", "en", 16),
        ("hirap", "tl", 15),
        ("stress", "en", 14),
        ("bills", "en", 14),
    ],
)

LIFE_EVENT_PHRASES = _table(
    "life_event_phrases",
    "5.0",
    [
        ("just got married", "en", 15),
        ("new baby", "en", 15),
        ("kasal", "tl", 15),
        ("new job", "en", 14),
        ("bagong trabaho", "tl", 14),
        ("graduated", "en", 13),
        ("graduation", "en", 13),
        ("relocating", "en", 13),
        ("engaged", "en", 12),
        ("moving to", "en", 12),
        ("new house", "en", 12),
        ("lipat bahay", "tl", 12),
        ("retired", "en", 12),
        ("promoted", "en", 11),
    ],
)

LEADERSHIP_TITLES = _keywords(
    "leadership_titles",
    "5.0",
    [
        ("director", "en"),
        ("manager", "en"),
        ("founder", "en"),
        ("owner", "en"),
        ("ceo", "en"),
        ("president", "en"),
        ("chief", "en"),
        ("head of", "en"),
        ("supervisor", "en"),
        ("team leader", "en"),
        ("vp", "en"),
    ],
)
