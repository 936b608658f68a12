from __future__ import annotations

import itertools
import logging
import uuid
from collections.abc import Iterable, Sequence

from prospect_fusion.interfaces import IdGenerator
from prospect_fusion.models import (
    CandidateRecord,
    Cluster,
    ContactInfo,
    ContactType,
    EngagementMetrics,
    MergedEntity,
    Platform,
    SocialLink,
    merge_confidence,
)
from prospect_fusion.steps.signals import SignalExtractor

logger = logging.getLogger(__name__)

_PLATFORM_MARKERS: tuple[tuple[Platform, tuple[str, ...]], ...] = (
    (Platform.FACEBOOK, ("facebook.com", "fb.com")),
    (Platform.INSTAGRAM, ("instagram.com",)),
    (Platform.LINKEDIN, ("linkedin.com",)),
    (Platform.TIKTOK, ("tiktok.com",)),
    # Last: "x.com" also occurs inside other hosts and paths.
    (Platform.TWITTER, ("twitter.com", "x.com")),
)


class SequentialIdGenerator:
    """Deterministic ids (``prospect_000001``, ...) for reproducible runs."""

    def __init__(self, prefix: str = "prospect") -> None:
        self._prefix = prefix
        self._counter = itertools.count(1)

    def __call__(self) -> str:
        return f"{self._prefix}_{next(self._counter):06d}"


class UuidIdGenerator:
    def __init__(self, prefix: str = "prospect") -> None:
        self._prefix = prefix

    def __call__(self) -> str:
        return f"{self._prefix}_{uuid.uuid4().hex}"


class ProfileMerger:
    """Fuse candidate records into merged entities.

    The canonical name is the first record's name in cluster order, which is
    input order for the seed grouper. List-like attributes are unioned in
    first-seen order.
    """

    def __init__(
        self,
        extractor: SignalExtractor | None = None,
        id_generator: IdGenerator | None = None,
    ) -> None:
        self._extractor = extractor or SignalExtractor()
        self._id_generator = id_generator or SequentialIdGenerator()

    def fuse(self, cluster: Cluster) -> MergedEntity:
        if cluster.size == 1:
            return self.convert(cluster.records[0])
        return self.merge(cluster.records)

    def merge(self, records: Sequence[CandidateRecord] | Cluster) -> MergedEntity:
        if isinstance(records, Cluster):
            records = records.records
        if not records:
            raise ValueError("Cannot merge an empty cluster")
        return self._build(list(records))

    def convert(self, record: CandidateRecord) -> MergedEntity:
        return self._build([record])

    def _build(self, records: list[CandidateRecord]) -> MergedEntity:
        occupations = _OrderedSet()
        interests = _OrderedSet()
        signals = _OrderedSet()
        sentiment = _OrderedSet()
        topics = _OrderedSet()
        activities = _OrderedSet()
        mentions = _OrderedSet()
        raw_sources: dict[str, list[dict]] = {}
        contacts: list[ContactInfo] = []
        links: list[SocialLink] = []
        metrics = EngagementMetrics()

        for record in records:
            mentions.add(record.channel)
            raw_sources.setdefault(record.channel.value, []).append(record.raw or {})

            if record.occupation:
                occupations.add(record.occupation)
            interests.add_all(record.interests or ())
            signals.add_all(record.signals or ())
            signals.add_all(record.keywords or ())

            if record.email:
                contacts.append(ContactInfo(type=ContactType.EMAIL, value=record.email))
            if record.phone:
                contacts.append(ContactInfo(type=ContactType.PHONE, value=record.phone))
            if record.location:
                contacts.append(ContactInfo(type=ContactType.LOCATION, value=record.location))
            if record.profile_url:
                links.append(SocialLink(platform=detect_platform(record.profile_url), url=record.profile_url))

            if record.metrics is not None:
                metrics = metrics.combine(record.metrics)

            text = record.text.lower() if isinstance(record.text, str) else ""
            extracted = self._extractor.extract(text, (*(record.keywords or ()), *(record.interests or ())))
            signals.add_all(extracted.intent)
            sentiment.add_all(extracted.pain)
            topics.add_all(extracted.topics)
            activities.add_all(extracted.activities)

        entity = MergedEntity(
            entity_id=self._id_generator(),
            name=records[0].name or "",
            mentions=tuple(mentions),
            raw_sources=raw_sources,
            merged_count=len(records),
            confidence=merge_confidence(len(records)),
            occupations=tuple(occupations),
            interests=tuple(interests),
            signals=tuple(signals),
            sentiment_indicators=tuple(sentiment),
            topics=tuple(topics),
            activities=tuple(activities),
            contact_info=dedupe_contacts(contacts),
            social_links=dedupe_social_links(links),
            metrics=metrics,
        )
        if len(records) > 1:
            logger.debug("Merged %d records into %s (%s)", len(records), entity.entity_id, entity.name)
        return entity


def detect_platform(url: str) -> Platform:
    lower = url.lower()
    for platform, markers in _PLATFORM_MARKERS:
        if any(marker in lower for marker in markers):
            return platform
    return Platform.UNKNOWN


def dedupe_contacts(contacts: Iterable[ContactInfo]) -> tuple[ContactInfo, ...]:
    seen: set[tuple[str, str]] = set()
    unique: list[ContactInfo] = []
    for contact in contacts:
        key = (contact.type.value, contact.value)
        if key in seen:
            continue
        seen.add(key)
        unique.append(contact)
    return tuple(unique)


def dedupe_social_links(links: Iterable[SocialLink]) -> tuple[SocialLink, ...]:
    seen: set[str] = set()
    unique: list[SocialLink] = []
    for link in links:
        if link.url in seen:
            continue
        seen.add(link.url)
        unique.append(link)
    return tuple(unique)


class _OrderedSet(dict):
    """Insertion-ordered set of strings."""

    def add(self, item: str) -> None:
        self[item] = None

    def add_all(self, items: Iterable[str]) -> None:
        for item in items:
            self[item] = None
