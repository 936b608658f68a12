from __future__ import annotations

import logging
import math
import re
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from prospect_fusion.datasets.profiles import CHANNEL_SCHEMAS, PROSPECT_SCHEMA
from prospect_fusion.errors import InvalidSourcesError
from prospect_fusion.models import CandidateRecord, EngagementMetrics
from prospect_fusion.schema import FieldTag, RecordSchema, SourceChannel

logger = logging.getLogger(__name__)

_COUNT_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)\s*([km])?\+?$")


class FusionSources(BaseModel):
    """Raw prospect payloads from one ingestion run, one list per channel.

    Accepts both the channel names and the camelCase keys used by the
    ingestion collaborators (``screenshotProspects`` and so on).
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    screenshot: list[dict[str, Any]] = Field(default_factory=list, alias="screenshotProspects")
    url_scrape: list[dict[str, Any]] = Field(default_factory=list, alias="urlProspects")
    csv_import: list[dict[str, Any]] = Field(default_factory=list, alias="csvProspects")
    fb_export: list[dict[str, Any]] = Field(default_factory=list, alias="fbExportProspects")
    linkedin_export: list[dict[str, Any]] = Field(default_factory=list, alias="linkedinExportProspects")
    scraper_api: list[dict[str, Any]] = Field(default_factory=list, alias="scrapers")
    manual_text: list[dict[str, Any]] = Field(default_factory=list, alias="textProspects")
    browser_capture: list[dict[str, Any]] = Field(default_factory=list, alias="browserCaptureProspects")

    @field_validator("*", mode="before")
    @classmethod
    def drop_non_mappings(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, list):
            return [item for item in v if isinstance(item, dict)]
        return v

    def by_channel(self) -> list[tuple[SourceChannel, list[dict[str, Any]]]]:
        return [(channel, getattr(self, channel.value)) for channel in SourceChannel]

    def total(self) -> int:
        return sum(len(payloads) for _, payloads in self.by_channel())


class SourceNormalizer:
    """Flatten per-channel payloads into uniform candidate records.

    ``tag_transforms`` are applied to the string value of a tag after it is read
    (for example lower-casing emails), mirroring a column cleaner.
    """

    def __init__(
        self,
        schema: RecordSchema = PROSPECT_SCHEMA,
        channel_schemas: Mapping[SourceChannel, RecordSchema] | None = None,
        tag_transforms: dict[FieldTag, Callable[[str], str]] | None = None,
    ) -> None:
        self._schema = schema
        self._channel_schemas = dict(CHANNEL_SCHEMAS if channel_schemas is None else channel_schemas)
        self._tag_transforms = tag_transforms or {}

    def normalize(self, sources: FusionSources | Mapping[str, Any]) -> list[CandidateRecord]:
        sources = coerce_sources(sources)
        records: list[CandidateRecord] = []
        for channel, payloads in sources.by_channel():
            for payload in payloads:
                record_id = f"rec_{len(records) + 1:06d}"
                records.append(self.to_record(record_id, channel, payload))
        logger.info("Normalized %d candidate records from %d channels", len(records), _active_channels(sources))
        return records

    def to_record(self, record_id: str, channel: SourceChannel, payload: Mapping[str, Any]) -> CandidateRecord:
        schema = self._channel_schemas.get(channel, self._schema)

        name = self._text(payload, schema, FieldTag.NAME) or self._transform(
            FieldTag.NAME, schema.joined_value(payload, FieldTag.NAME_PARTS)
        )
        text = " ".join(schema.values_for(payload, FieldTag.TEXT))

        return CandidateRecord(
            record_id=record_id,
            name=name,
            channel=channel,
            email=self._text(payload, schema, FieldTag.EMAIL) or None,
            phone=self._text(payload, schema, FieldTag.PHONE) or None,
            location=self._text(payload, schema, FieldTag.LOCATION) or None,
            occupation=self._text(payload, schema, FieldTag.OCCUPATION) or None,
            profile_url=self._text(payload, schema, FieldTag.URL) or None,
            interests=tuple(schema.list_values(payload, FieldTag.INTERESTS)),
            keywords=tuple(schema.list_values(payload, FieldTag.KEYWORDS)),
            signals=tuple(schema.list_values(payload, FieldTag.SIGNALS)),
            text=self._transform(FieldTag.TEXT, text),
            metrics=EngagementMetrics(
                followers=coerce_count(schema.raw_value(payload, FieldTag.FOLLOWERS)),
                engagement=coerce_count(schema.raw_value(payload, FieldTag.ENGAGEMENT)),
                mutual_connections=coerce_count(schema.raw_value(payload, FieldTag.MUTUAL_CONNECTIONS)),
                past_interactions=coerce_count(schema.raw_value(payload, FieldTag.INTERACTIONS)),
            ),
            raw=dict(payload),
        )

    def _text(self, payload: Mapping[str, Any], schema: RecordSchema, tag: FieldTag) -> str:
        return self._transform(tag, schema.first_value(payload, tag))

    def _transform(self, tag: FieldTag, value: str) -> str:
        transform = self._tag_transforms.get(tag)
        if transform is None or not value:
            return value
        return transform(value)


def coerce_sources(sources: FusionSources | Mapping[str, Any]) -> FusionSources:
    if isinstance(sources, FusionSources):
        return sources
    if not isinstance(sources, Mapping):
        raise InvalidSourcesError(f"Expected a mapping of channel lists, got {type(sources).__name__}")
    try:
        return FusionSources.model_validate(dict(sources))
    except ValidationError as exc:
        raise InvalidSourcesError(f"Invalid sources payload: {exc.error_count()} error(s)") from exc


def coerce_count(value: object) -> int:
    """Parse scraped counts such as ``1,204``, ``3.4k`` or ``2M+``; bad input is 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    if isinstance(value, (int, float)):
        return max(0, int(value))
    if not isinstance(value, str):
        return 0

    text = value.strip().lower().replace(",", "").replace(" ", "")
    match = _COUNT_PATTERN.match(text)
    if not match:
        return 0
    number = float(match.group(1))
    multiplier = {"k": 1_000, "m": 1_000_000}.get(match.group(2) or "", 1)
    return int(round(number * multiplier))


def _active_channels(sources: FusionSources) -> int:
    return sum(1 for _, payloads in sources.by_channel() if payloads)
