from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Sequence

from prospect_fusion.interfaces import IdentityScorer
from prospect_fusion.models import CandidateRecord, Cluster
from prospect_fusion.steps.matching import IdentityMatcher, clean_name, normalize_email, normalize_phone

logger = logging.getLogger(__name__)

DEFAULT_MATCH_THRESHOLD = 0.75


class BlockingIndex:
    """Cheap candidate pre-filter for large batches.

    Records are bucketed by the first two letters of their first name token,
    their normalized email and their normalized phone; only records sharing a
    bucket are compared. Names whose first two letters differ are never
    compared unless they share contact data.
    """

    def __init__(self, records: Sequence[CandidateRecord]) -> None:
        self._buckets: dict[str, list[int]] = defaultdict(list)
        self._keys: list[tuple[str, ...]] = []
        for idx, record in enumerate(records):
            keys = blocking_keys(record)
            self._keys.append(keys)
            for key in keys:
                self._buckets[key].append(idx)

    def candidates(self, idx: int) -> list[int]:
        """Indices after ``idx`` sharing at least one key with it, in input order."""
        found: set[int] = set()
        for key in self._keys[idx]:
            found.update(other for other in self._buckets[key] if other > idx)
        return sorted(found)


def blocking_keys(record: CandidateRecord) -> tuple[str, ...]:
    keys: list[str] = []
    name = clean_name(record.name).lower()
    if name:
        keys.append(f"name:{name.split()[0][:2]}")
    email = normalize_email(record.email)
    if email:
        keys.append(f"email:{email}")
    phone = normalize_phone(record.phone)
    if phone:
        keys.append(f"phone:{phone}")
    return tuple(keys)


class SeedDuplicateGrouper:
    """Single-pass grouping against each cluster's seed record.

    Each unprocessed record seeds a new cluster and absorbs every later
    unprocessed record that matches the seed at or above ``threshold``.
    Members are never compared with each other, so grouping is not transitive
    and depends on input order. O(n^2) comparisons without blocking.
    """

    def __init__(
        self,
        matcher: IdentityScorer | None = None,
        threshold: float = DEFAULT_MATCH_THRESHOLD,
        blocking: bool = False,
    ) -> None:
        self._matcher = matcher or IdentityMatcher()
        self._threshold = threshold
        self._blocking = blocking

    def group(self, records: Sequence[CandidateRecord]) -> list[Cluster]:
        index = BlockingIndex(records) if self._blocking else None
        processed = [False] * len(records)
        clusters: list[Cluster] = []
        comparisons = 0

        for i, seed in enumerate(records):
            if processed[i]:
                continue
            processed[i] = True
            cluster = Cluster(cluster_id=f"cluster_{len(clusters) + 1:06d}", records=[seed])

            others = index.candidates(i) if index else range(i + 1, len(records))
            for j in others:
                if processed[j]:
                    continue
                comparisons += 1
                score = self._matcher.match(seed, records[j])
                if score >= self._threshold:
                    cluster.records.append(records[j])
                    cluster.scores[records[j].record_id] = score
                    processed[j] = True
            clusters.append(cluster)

        _log_grouping(records, clusters, comparisons)
        return clusters


class TransitiveDuplicateGrouper:
    """Transitive closure over all above-threshold pairs (union-find).

    Clusters are ordered by their earliest member and members keep input
    order, so the first record of a cluster is still the first seen.
    """

    def __init__(
        self,
        matcher: IdentityScorer | None = None,
        threshold: float = DEFAULT_MATCH_THRESHOLD,
        blocking: bool = False,
    ) -> None:
        self._matcher = matcher or IdentityMatcher()
        self._threshold = threshold
        self._blocking = blocking

    def group(self, records: Sequence[CandidateRecord]) -> list[Cluster]:
        index = BlockingIndex(records) if self._blocking else None
        uf = _UnionFind(len(records))
        pair_scores: dict[int, float] = {}
        comparisons = 0

        for i in range(len(records)):
            others = index.candidates(i) if index else range(i + 1, len(records))
            for j in others:
                comparisons += 1
                score = self._matcher.match(records[i], records[j])
                if score >= self._threshold:
                    uf.union(i, j)
                    for idx in (i, j):
                        pair_scores[idx] = max(pair_scores.get(idx, 0.0), score)

        clusters: list[Cluster] = []
        for members in uf.groups():
            cluster = Cluster(
                cluster_id=f"cluster_{len(clusters) + 1:06d}",
                records=[records[idx] for idx in members],
            )
            for idx in members[1:]:
                cluster.scores[records[idx].record_id] = pair_scores.get(idx, 0.0)
            clusters.append(cluster)

        _log_grouping(records, clusters, comparisons)
        return clusters


def build_grouper(
    strategy: str,
    matcher: IdentityScorer | None = None,
    threshold: float = DEFAULT_MATCH_THRESHOLD,
    blocking: bool = False,
) -> SeedDuplicateGrouper | TransitiveDuplicateGrouper:
    if strategy == "transitive":
        return TransitiveDuplicateGrouper(matcher=matcher, threshold=threshold, blocking=blocking)
    if strategy == "seed":
        return SeedDuplicateGrouper(matcher=matcher, threshold=threshold, blocking=blocking)
    raise ValueError(f"Unknown grouping strategy: {strategy!r}")


class _UnionFind:
    def __init__(self, size: int) -> None:
        self._parent = list(range(size))

    def find(self, item: int) -> int:
        root = item
        while self._parent[root] != root:
            root = self._parent[root]
        while self._parent[item] != root:
            self._parent[item], item = root, self._parent[item]
        return root

    def union(self, left: int, right: int) -> None:
        root_left = self.find(left)
        root_right = self.find(right)
        if root_left == root_right:
            return
        # Keep the smaller index as root so roots are the earliest member.
        if root_right < root_left:
            root_left, root_right = root_right, root_left
        self._parent[root_right] = root_left

    def groups(self) -> list[list[int]]:
        grouped: dict[int, list[int]] = defaultdict(list)
        for item in range(len(self._parent)):
            grouped[self.find(item)].append(item)
        return [grouped[root] for root in sorted(grouped)]


def _log_grouping(records: Sequence[CandidateRecord], clusters: list[Cluster], comparisons: int) -> None:
    duplicates = sum(1 for cluster in clusters if cluster.size > 1)
    logger.info(
        "Grouped %d records into %d clusters (%d with duplicates) after %d comparisons",
        len(records),
        len(clusters),
        duplicates,
        comparisons,
    )
