"""
Tests for the recall evaluation engine.
"""

import threading
import time

import pytest

from cloneeval.database import CloneStore, MemoryCloneStore
from cloneeval.evaluation import DecisionCache, ToolEvaluator
from cloneeval.exceptions import RangeError, StoreError, ValidationError
from cloneeval.matchers import CoverageMatcher
from cloneeval.models import (
    CloneCount,
    CloneType,
    DetectedReport,
    EvaluationFilter,
    Locality,
    MatchResult,
    SimilarityType,
    UNDEFINED,
)
from cloneeval.query import CloneQuery, regions

from conftest import TOOL, StubMatcher, make_clone, make_fragment, report_for

NON_TYPE3 = [CloneType.TYPE1, CloneType.TYPE2, CloneType.TYPE2_BLIND, CloneType.TYPE2_CONSISTENT]


def evaluator_for(store, detected_ids=(), **kwargs):
    matcher = StubMatcher(TOOL.id, detected_ids)
    return ToolEvaluator(store, TOOL.id, matcher, **kwargs), matcher


class TestScenarios:
    """End-to-end evaluation scenarios."""

    def test_seven_of_ten_type1_detected(self, tool):
        clones = [make_clone(i, CloneType.TYPE1) for i in range(1, 11)]
        store = MemoryCloneStore(tools=[tool], clones=clones)
        evaluator, _ = evaluator_for(store, detected_ids=range(1, 8))

        query = CloneQuery.of_type(CloneType.TYPE1)
        assert evaluator.count(query) == CloneCount(7, 10)
        assert evaluator.recall(query) == 0.7

    def test_unknown_functionality_is_empty(self, memory_store):
        evaluator, _ = evaluator_for(memory_store, detected_ids=range(100))
        query = CloneQuery.of_type(CloneType.TYPE1, functionality_id=999)
        assert evaluator.count(query) == CloneCount(0, 0)
        assert evaluator.recall(query) is UNDEFINED

    def test_out_of_range_band_raises(self, memory_store):
        evaluator, _ = evaluator_for(memory_store)
        with pytest.raises(RangeError):
            evaluator.count(CloneQuery.type3(150, 200))

    def test_zero_recall_differs_from_undefined(self, memory_store):
        evaluator, _ = evaluator_for(memory_store, detected_ids=())
        assert evaluator.recall(CloneQuery.of_type(CloneType.TYPE1)) == 0.0
        assert evaluator.recall(CloneQuery.of_type(CloneType.TYPE1)) is not UNDEFINED

    def test_unknown_tool(self, memory_store):
        with pytest.raises(ValidationError):
            ToolEvaluator(memory_store, 42, StubMatcher(42))

    def test_coverage_matcher_end_to_end(self, tool):
        clones = [make_clone(i, CloneType.TYPE2) for i in range(1, 5)]
        partial = make_fragment(clones[3].fragment1.filename, 1, 6)
        reports = [report_for(i, clone) for i, clone in enumerate(clones[:3], start=1)]
        reports.append(DetectedReport(4, tool.id, partial, clones[3].fragment2))
        store = MemoryCloneStore(tools=[tool], clones=clones, reports=reports)
        evaluator = ToolEvaluator(store, tool.id, CoverageMatcher(tool.id, 0.7))
        assert evaluator.count(CloneQuery.of_type(CloneType.TYPE2)) == CloneCount(3, 4)

    def test_reports_of_other_tools_ignored(self, tool):
        clones = [make_clone(1, CloneType.TYPE1)]
        store = MemoryCloneStore(tools=[tool], clones=clones, reports=[report_for(1, clones[0], tool_id=2)])
        evaluator = ToolEvaluator(store, tool.id, CoverageMatcher(tool.id))
        assert evaluator.count(CloneQuery()) == CloneCount(0, 1)


class TestPartitionProperties:
    """Consistency of overlapping and disjoint partitions."""

    @pytest.fixture
    def evaluator(self, memory_store, mixed_clones):
        detected = [clone.id for clone in mixed_clones if clone.id % 3 != 0]
        return evaluator_for(memory_store, detected_ids=detected)[0]

    def test_detected_never_exceeds_total(self, evaluator):
        queries = [CloneQuery.of_type(t) for t in CloneType]
        queries += [CloneQuery.type3(lo, hi) for lo, hi in regions()]
        queries += [q.with_locality(loc) for q in list(queries) for loc in Locality]
        for query in queries:
            count = evaluator.count(query)
            assert count.total >= count.detected >= 0

    def test_recall_is_exact_ratio(self, evaluator):
        for clone_type in CloneType:
            count = evaluator.count(CloneQuery.of_type(clone_type))
            recall = evaluator.recall(CloneQuery.of_type(clone_type))
            if count.total == 0:
                assert recall is UNDEFINED
            else:
                assert recall == count.detected / count.total

    def test_type_partitions_sum_to_all(self, evaluator):
        parts = [evaluator.count(CloneQuery.of_type(t)) for t in NON_TYPE3]
        parts.append(evaluator.count(CloneQuery.type3(0, 100)))
        combined = sum(parts[1:], parts[0])
        assert combined.total == evaluator.count(CloneQuery()).total == evaluator.num_clones
        assert combined.detected == evaluator.count(CloneQuery()).detected

    @pytest.mark.parametrize("locality", [None, Locality.INTRA, Locality.INTER])
    def test_band_additivity(self, evaluator, locality):
        whole = evaluator.count(CloneQuery.type3(0, 100, locality=locality))
        for cuts in ([0, 100], [0, 50, 70, 90, 100], list(range(0, 101, 5)), [0, 33, 34, 99, 100]):
            parts = [evaluator.count(CloneQuery.type3(lo, hi, locality=locality))
                     for lo, hi in zip(cuts, cuts[1:])]
            assert sum(p.total for p in parts) == whole.total
            assert sum(p.detected for p in parts) == whole.detected

    @pytest.mark.parametrize("lo", range(0, 100, 5))
    def test_cumulative_equals_sum_of_regions(self, evaluator, lo):
        cumulative = evaluator.count(CloneQuery.type3(lo, 100))
        parts = [evaluator.count(CloneQuery.type3(start, end)) for start, end in regions(lo)]
        assert cumulative == sum(parts[1:], parts[0])

    def test_band_boundaries(self, evaluator):
        # Fixture similarities: 69.9 and 70 straddle the strong/moderate boundary.
        assert evaluator.count(CloneQuery.type3(70, 90)).total == 4
        assert evaluator.count(CloneQuery.type3(50, 70)).total == 3
        assert evaluator.count(CloneQuery.type3(95, 100)).total == 3
        assert evaluator.count(CloneQuery.type3(0, 50)).total == 4

    def test_locality_and_functionality_combine(self, evaluator, mixed_clones):
        query = CloneQuery.of_type(CloneType.TYPE1, locality=Locality.INTER, functionality_id=6)
        expected = [
            c for c in mixed_clones
            if c.clone_type is CloneType.TYPE1 and c.locality is Locality.INTER and c.functionality_id == 6
        ]
        assert evaluator.count(query).total == len(expected)
        inter = evaluator.count(CloneQuery.of_type(CloneType.TYPE1, locality=Locality.INTER))
        intra = evaluator.count(CloneQuery.of_type(CloneType.TYPE1, locality=Locality.INTRA))
        assert inter + intra == evaluator.count(CloneQuery.of_type(CloneType.TYPE1))

    def test_functionality_ids(self, evaluator):
        assert evaluator.functionality_ids() == [2, 6]


class TestScope:
    """Out-of-scope clones are excluded from every count."""

    def test_filter_excludes_small_and_internal_clones(self, tool):
        clones = [
            make_clone(1, CloneType.TYPE1),
            make_clone(2, CloneType.TYPE1, fragment1=make_fragment("S.java", 1, 3)),
            make_clone(3, CloneType.TYPE1, internal=True),
            make_clone(4, CloneType.TYPE1, judges=1),
        ]
        store = MemoryCloneStore(tools=[tool], clones=clones)
        evaluator, _ = evaluator_for(
            store, detected_ids=[1, 2, 3, 4],
            evaluation_filter=EvaluationFilter(min_lines=6, min_judges=0),
        )
        assert evaluator.count(CloneQuery()) == CloneCount(2, 2)

        evaluator, _ = evaluator_for(
            store, detected_ids=[1, 2, 3, 4],
            evaluation_filter=EvaluationFilter(min_judges=1, include_internal=True),
        )
        assert evaluator.count(CloneQuery()) == CloneCount(1, 1)

    def test_engine_applies_filter_to_store_results(self, tool):
        class LooseStore(MemoryCloneStore):
            def get_reference_clones(self, tool_id, evaluation_filter):
                return list(self._clones)

        clones = [make_clone(1), make_clone(2, internal=True)]
        evaluator, _ = evaluator_for(LooseStore(tools=[tool], clones=clones), detected_ids=[1, 2])
        assert evaluator.num_clones == 1


class TestSimilarityType:
    """Band queries read the selected similarity measure."""

    @pytest.fixture
    def store(self, tool):
        clones = [
            make_clone(1, CloneType.TYPE3, similarity=60, similarity_token=80),
            make_clone(2, CloneType.TYPE3, similarity=75, similarity_token=72),
        ]
        return MemoryCloneStore(tools=[tool], clones=clones)

    @pytest.mark.parametrize("similarity_type,expected", [
        (SimilarityType.LINE, 1),
        (SimilarityType.TOKEN, 2),
        (SimilarityType.AVG, 2),
        (SimilarityType.BOTH, 1),
    ])
    def test_strong_band(self, store, similarity_type, expected):
        evaluator, _ = evaluator_for(store, similarity_type=similarity_type)
        assert evaluator.count(CloneQuery.type3(70, 90)).total == expected


class TestMemoization:
    """Each clone is decided at most once per evaluator."""

    def test_decide_is_cached(self, memory_store, mixed_clones):
        evaluator, matcher = evaluator_for(memory_store, detected_ids=[1])
        clone = mixed_clones[0]
        first = evaluator.decide(clone)
        second = evaluator.decide(clone)
        assert first == second == MatchResult(detected=True)
        assert matcher.calls == 1

    def test_overlapping_queries_share_decisions(self, memory_store, mixed_clones):
        evaluator, matcher = evaluator_for(memory_store, detected_ids=[1, 2, 3])
        for lo, hi in regions():
            evaluator.count(CloneQuery.type3(lo, hi))
            evaluator.count(CloneQuery.type3(lo, 100))
            for locality in Locality:
                evaluator.count(CloneQuery.type3(lo, 100, locality=locality))
        for clone_type in CloneType:
            evaluator.count(CloneQuery.of_type(clone_type))
        evaluator.count(CloneQuery())
        assert matcher.calls == len(mixed_clones)

    def test_prime_decides_every_clone_once(self, memory_store, mixed_clones):
        evaluator, matcher = evaluator_for(memory_store)
        evaluator.prime(workers=4)
        evaluator.prime()
        evaluator.count(CloneQuery())
        assert matcher.calls == len(mixed_clones)

    def test_concurrent_first_access_is_single_flight(self):
        calls = []
        release = threading.Event()

        def slow_decide(clone):
            calls.append(clone.id)
            release.wait(timeout=5)
            return MatchResult(detected=True)

        cache = DecisionCache(slow_decide)
        clone = make_clone(1)
        results = []
        threads = [threading.Thread(target=lambda: results.append(cache.get(clone))) for _ in range(8)]
        for thread in threads:
            thread.start()
        time.sleep(0.05)
        release.set()
        for thread in threads:
            thread.join()

        assert calls == [1]
        assert len(results) == 8
        assert all(result.detected for result in results)
        assert cache.misses == 1

    def test_concurrent_queries(self, memory_store, mixed_clones):
        evaluator, matcher = evaluator_for(memory_store, detected_ids=range(0, 100, 2))
        expected = {fid: evaluator_for(memory_store, detected_ids=range(0, 100, 2))[0]
                    .count(CloneQuery(functionality_id=fid)) for fid in (2, 6)}

        results = {}

        def run(fid):
            results[fid] = evaluator.count(CloneQuery(functionality_id=fid))

        threads = [threading.Thread(target=run, args=(fid,)) for fid in (2, 6)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results == expected
        assert matcher.calls == len(mixed_clones)


class TestStoreFailures:
    """Store errors abort construction."""

    def test_store_error_propagates(self, tool):
        class BrokenStore(MemoryCloneStore):
            def get_detected_reports(self, tool_id):
                raise StoreError("connection lost")

        with pytest.raises(StoreError, match="connection lost"):
            ToolEvaluator(BrokenStore(tools=[tool]), tool.id, StubMatcher(tool.id))

    def test_store_interface_is_abstract(self):
        with pytest.raises(TypeError):
            CloneStore()
