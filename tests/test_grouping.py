import pytest

from prospect_fusion.models import CandidateRecord
from prospect_fusion.schema import SourceChannel
from prospect_fusion.steps.grouping import (
    BlockingIndex,
    SeedDuplicateGrouper,
    TransitiveDuplicateGrouper,
    build_grouper,
)


class TableMatcher:
    """Scores looked up by record id pair; unknown pairs score 0."""

    def __init__(self, table: dict[frozenset, float]) -> None:
        self._table = table
        self.calls = 0

    def match(self, left: CandidateRecord, right: CandidateRecord) -> float:
        self.calls += 1
        return self._table.get(frozenset({left.record_id, right.record_id}), 0.0)


def _record(record_id: str, name: str = "", email=None) -> CandidateRecord:
    return CandidateRecord(record_id=record_id, name=name, channel=SourceChannel.CSV_IMPORT, email=email)


_CHAIN = {frozenset({"a", "b"}): 0.9, frozenset({"b", "c"}): 0.9}


def test_every_record_lands_in_exactly_one_cluster() -> None:
    records = [
        _record("1", "Juan Dela Cruz"),
        _record("2", "juan dela cruz"),
        _record("3", "Ana Reyes"),
        _record("4", "Ky Wu"),
        _record("5", "ana reyes"),
    ]

    clusters = SeedDuplicateGrouper().group(records)
    ids = [record_id for cluster in clusters for record_id in cluster.record_ids]

    assert sorted(ids) == ["1", "2", "3", "4", "5"]
    assert [cluster.record_ids for cluster in clusters] == [["1", "2"], ["3", "5"], ["4"]]


def test_singletons_have_lowest_confidence() -> None:
    clusters = SeedDuplicateGrouper().group([_record("1", "Ana Reyes"), _record("2", "Ky Wu")])

    assert [cluster.size for cluster in clusters] == [1, 1]
    assert all(cluster.confidence == 0.70 for cluster in clusters)


def test_seed_grouping_links_through_seed_only() -> None:
    a, b, c = _record("a"), _record("b"), _record("c")

    # b is the seed and matches both; a and c never get compared.
    clusters = SeedDuplicateGrouper(TableMatcher(_CHAIN)).group([b, a, c])
    assert [cluster.record_ids for cluster in clusters] == [["b", "a", "c"]]
    # a is the seed, absorbs b, and c does not match a.
    assert [cl.record_ids for cl in SeedDuplicateGrouper(TableMatcher(_CHAIN)).group([a, c, b])] == [
        ["a", "b"],
        ["c"],
    ]


def test_transitive_grouping_closes_chains() -> None:
    a, b, c = _record("a"), _record("b"), _record("c")

    clusters = TransitiveDuplicateGrouper(TableMatcher(_CHAIN)).group([a, c, b])

    assert [cluster.record_ids for cluster in clusters] == [["a", "c", "b"]]
    assert clusters[0].scores == {"c": 0.9, "b": 0.9}


def test_cluster_keeps_member_scores() -> None:
    clusters = SeedDuplicateGrouper(TableMatcher({frozenset({"x", "y"}): 0.8})).group([_record("x"), _record("y")])

    assert clusters[0].scores == {"y": 0.8}


def test_threshold_is_inclusive() -> None:
    table = {frozenset({"x", "y"}): 0.75}

    assert len(SeedDuplicateGrouper(TableMatcher(table), threshold=0.75).group([_record("x"), _record("y")])) == 1
    assert len(SeedDuplicateGrouper(TableMatcher(table), threshold=0.76).group([_record("x"), _record("y")])) == 2


def test_blocking_skips_pairs_without_shared_keys() -> None:
    records = [_record("1", "Ana Reyes"), _record("2", "Ben Cruz"), _record("3", "Andres Lim")]
    always = TableMatcher({})
    always.match = lambda left, right: 1.0

    unblocked = SeedDuplicateGrouper(always).group(records)
    blocked = SeedDuplicateGrouper(always, blocking=True).group(records)

    assert [cluster.record_ids for cluster in unblocked] == [["1", "2", "3"]]
    assert [cluster.record_ids for cluster in blocked] == [["1", "3"], ["2"]]


def test_blocking_index_buckets_on_contact_data() -> None:
    records = [
        _record("1", "Ana Reyes", email="Shared@Mail.com"),
        _record("2", "Ben Cruz", email="shared@mail.com"),
        _record("3", "Carlo Ramos"),
    ]

    index = BlockingIndex(records)

    assert index.candidates(0) == [1]
    assert index.candidates(2) == []


def test_build_grouper_rejects_unknown_strategy() -> None:
    assert isinstance(build_grouper("seed"), SeedDuplicateGrouper)
    assert isinstance(build_grouper("transitive"), TransitiveDuplicateGrouper)
    with pytest.raises(ValueError):
        build_grouper("nearest")
