from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Mapping, Sequence


class SourceChannel(StrEnum):
    SCREENSHOT = "screenshot"
    URL_SCRAPE = "url_scrape"
    CSV_IMPORT = "csv_import"
    FB_EXPORT = "fb_export"
    LINKEDIN_EXPORT = "linkedin_export"
    SCRAPER_API = "scraper_api"
    MANUAL_TEXT = "manual_text"
    BROWSER_CAPTURE = "browser_capture"

    @property
    def source_type(self) -> str:
        return _SOURCE_TYPES[self]


_SOURCE_TYPES = {
    SourceChannel.SCREENSHOT: "screenshots",
    SourceChannel.URL_SCRAPE: "social_url",
    SourceChannel.CSV_IMPORT: "files_csv",
    SourceChannel.FB_EXPORT: "files_facebook_export",
    SourceChannel.LINKEDIN_EXPORT: "files_linkedin_export",
    SourceChannel.SCRAPER_API: "social_connect",
    SourceChannel.MANUAL_TEXT: "text",
    SourceChannel.BROWSER_CAPTURE: "browser_extension",
}


class FieldTag(StrEnum):
    NAME = "NAME"
    NAME_PARTS = "NAME_PARTS"
    EMAIL = "EMAIL"
    PHONE = "PHONE"
    LOCATION = "LOCATION"
    OCCUPATION = "OCCUPATION"
    INTERESTS = "INTERESTS"
    KEYWORDS = "KEYWORDS"
    SIGNALS = "SIGNALS"
    TEXT = "TEXT"
    URL = "URL"
    FOLLOWERS = "FOLLOWERS"
    ENGAGEMENT = "ENGAGEMENT"
    MUTUAL_CONNECTIONS = "MUTUAL_CONNECTIONS"
    INTERACTIONS = "INTERACTIONS"


@dataclass(frozen=True)
class RecordSchema:
    """Maps channel payload keys to stable semantic tags."""

    tag_to_columns: Mapping[FieldTag, tuple[str, ...]]

    @classmethod
    def from_mapping(cls, mapping: Mapping[FieldTag, Sequence[str]]) -> "RecordSchema":
        frozen = {tag: tuple(columns) for tag, columns in mapping.items()}
        return cls(tag_to_columns=frozen)

    def columns_for(self, tag: FieldTag) -> tuple[str, ...]:
        return self.tag_to_columns.get(tag, ())

    def values_for(self, attributes: Mapping[str, object], tag: FieldTag) -> list[str]:
        values: list[str] = []
        for column in self.columns_for(tag):
            value = attributes.get(column)
            if not isinstance(value, (str, int, float)) or isinstance(value, bool):
                continue
            text = str(value).strip()
            if text:
                values.append(text)
        return values

    def joined_value(self, attributes: Mapping[str, object], tag: FieldTag, sep: str = " ") -> str:
        return sep.join(self.values_for(attributes, tag)).strip()

    def first_value(self, attributes: Mapping[str, object], tag: FieldTag) -> str:
        values = self.values_for(attributes, tag)
        return values[0] if values else ""

    def raw_value(self, attributes: Mapping[str, object], tag: FieldTag) -> object:
        """First non-null value for the tag, uncoerced."""
        for column in self.columns_for(tag):
            value = attributes.get(column)
            if value is not None:
                return value
        return None

    def list_values(self, attributes: Mapping[str, object], tag: FieldTag) -> list[str]:
        """Collect list-like values; comma separated strings are split."""
        items: list[str] = []
        for column in self.columns_for(tag):
            value = attributes.get(column)
            if isinstance(value, str):
                candidates: Sequence[object] = value.split(",")
            elif isinstance(value, (list, tuple)):
                candidates = list(value)
            else:
                continue
            for candidate in candidates:
                if not isinstance(candidate, str):
                    continue
                text = candidate.strip()
                if text and text not in items:
                    items.append(text)
        return items
