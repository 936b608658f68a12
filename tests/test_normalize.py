import pytest

from prospect_fusion.errors import InvalidSourcesError
from prospect_fusion.schema import FieldTag, SourceChannel
from prospect_fusion.steps.normalize import FusionSources, SourceNormalizer, coerce_count


def test_camel_case_keys_and_channel_order() -> None:
    sources = {
        "textProspects": [{"name": "Ana Reyes"}],
        "screenshotProspects": [{"name": "Juan Dela Cruz"}, {"name": "Ky Wu"}],
    }

    records = SourceNormalizer().normalize(sources)

    assert [(r.record_id, r.name, r.channel) for r in records] == [
        ("rec_000001", "Juan Dela Cruz", SourceChannel.SCREENSHOT),
        ("rec_000002", "Ky Wu", SourceChannel.SCREENSHOT),
        ("rec_000003", "Ana Reyes", SourceChannel.MANUAL_TEXT),
    ]


def test_channel_names_are_accepted_too() -> None:
    sources = FusionSources.model_validate({"csv_import": [{"name": "A"}], "scrapers": [{"name": "B"}]})

    assert sources.total() == 2
    assert sources.csv_import == [{"name": "A"}]
    assert sources.scraper_api == [{"name": "B"}]


def test_field_aliases_and_list_values() -> None:
    payload = {
        "full_name": "Maria Santos",
        "email_address": "maria@mail.com",
        "job_title": "Nurse",
        "skills": "cooking, travel ,cooking",
        "tags": ["negosyo", 3, "sideline"],
        "content": "Looking for extra income",
        "social_url": "https://facebook.com/maria",
        "follower_count": "1.2k",
        "mutuals": "3,400",
        "interaction_count": -4,
    }

    (record,) = SourceNormalizer().normalize({"url_scrape": [payload]})

    assert record.name == "Maria Santos"
    assert record.email == "maria@mail.com"
    assert record.occupation == "Nurse"
    assert record.interests == ("cooking", "travel")
    assert record.keywords == ("negosyo", "sideline")
    assert record.text == "Looking for extra income"
    assert record.profile_url == "https://facebook.com/maria"
    assert record.metrics.followers == 1_200
    assert record.metrics.mutual_connections == 3_400
    assert record.metrics.past_interactions == 0
    assert record.raw == payload


def test_linkedin_export_joins_name_parts() -> None:
    payload = {"First Name": "Jose", "Last Name": "Rizal", "Position": "Team Leader", "Email Address": "j@r.ph"}

    (record,) = SourceNormalizer().normalize({"linkedinExportProspects": [payload]})

    assert record.name == "Jose Rizal"
    assert record.occupation == "Team Leader"
    assert record.email == "j@r.ph"


def test_bad_values_degrade_to_no_evidence() -> None:
    payloads = [{"name": 12345}, {"name": None, "followers": "lots"}, "not a record", {"name": ["x"]}]

    records = SourceNormalizer().normalize({"screenshot": payloads})

    assert [record.name for record in records] == ["12345", "", ""]
    assert all(record.metrics.followers == 0 for record in records)


def test_tag_transforms_apply_to_read_values() -> None:
    normalizer = SourceNormalizer(tag_transforms={FieldTag.EMAIL: lambda value: value.lower()})

    (record,) = normalizer.normalize({"csv_import": [{"name": "A", "email": "Ana@Mail.COM"}]})

    assert record.email == "ana@mail.com"


def test_missing_channels_default_to_empty() -> None:
    assert SourceNormalizer().normalize({"screenshotProspects": None}) == []
    assert SourceNormalizer().normalize({}) == []


def test_invalid_sources_raise() -> None:
    with pytest.raises(InvalidSourcesError):
        SourceNormalizer().normalize(["not", "a", "mapping"])
    with pytest.raises(InvalidSourcesError) as exc_info:
        SourceNormalizer().normalize({"screenshotProspects": "oops"})
    assert exc_info.value.__cause__ is not None


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, 0),
        (True, 0),
        (42, 42),
        (-3, 0),
        (12.7, 12),
        (float("nan"), 0),
        ("1,204", 1_204),
        ("3.4k", 3_400),
        ("2M+", 2_000_000),
        ("garbage", 0),
        ("-50", 0),
    ],
)
def test_coerce_count(value: object, expected: int) -> None:
    assert coerce_count(value) == expected
