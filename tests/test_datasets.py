from prospect_fusion.datasets import ProspectDatasetGenerator
from prospect_fusion.schema import SourceChannel
from prospect_fusion.steps import SourceNormalizer


def test_generator_is_seeded_and_sized() -> None:
    first = ProspectDatasetGenerator(seed=5).generate(size=50, duplicate_rate=0.2)
    second = ProspectDatasetGenerator(seed=5).generate(size=50, duplicate_rate=0.2)

    assert first == second
    assert set(first) == {channel.value for channel in SourceChannel}
    assert sum(len(payloads) for payloads in first.values()) == 50


def test_generated_payloads_normalize_to_named_records() -> None:
    sources = ProspectDatasetGenerator(seed=9).generate(size=30)

    records = SourceNormalizer().normalize(sources)

    assert len(records) == 30
    assert all(record.name for record in records)


def test_empty_size_yields_empty_channels() -> None:
    assert all(payloads == [] for payloads in ProspectDatasetGenerator().generate(size=0).values())
