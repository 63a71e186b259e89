"""
Recall evaluation engine.

``ToolEvaluator`` reads one snapshot of a tool's reference clones and
reported clone pairs from a clone store, then answers ``count`` and
``recall`` queries for any combination of clone type, Type-3 similarity
band, locality and functionality.
"""

import bisect
import logging
import threading
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional

from ..database.base import CloneStore
from ..exceptions import ValidationError
from ..matchers.base import CloneMatcher, ToolDetections
from ..models import (
    CloneCount,
    CloneType,
    EvaluationFilter,
    MatchResult,
    Recall,
    ReferenceClone,
    SimilarityType,
    Tool,
)
from ..query import CloneQuery
from .decision_cache import DecisionCache

logger = logging.getLogger(__name__)


class ToolEvaluator:
    """Measures the recall of one tool under one clone matcher.

    Args:
        store: Clone store to read the benchmark and the tool's results from
        tool_id: Tool under evaluation
        matcher: Clone-matching strategy
        similarity_type: Similarity measure read by Type-3 band queries
        evaluation_filter: Inclusion bounds applied before counting

    Raises:
        ValidationError: if the tool does not exist
        StoreError: if the store cannot be read; no evaluator is created
    """

    def __init__(
        self,
        store: CloneStore,
        tool_id: int,
        matcher: CloneMatcher,
        similarity_type: SimilarityType = SimilarityType.LINE,
        evaluation_filter: Optional[EvaluationFilter] = None,
    ):
        self.tool_id = tool_id
        self.matcher = matcher
        self.similarity_type = similarity_type
        self.filter = evaluation_filter or EvaluationFilter()

        tool = store.get_tool(tool_id)
        if tool is None:
            raise ValidationError(f"There is no such tool with ID {tool_id}.")
        self.tool: Tool = tool

        clones = [
            clone for clone in store.get_reference_clones(tool_id, self.filter)
            if self.filter.admits(clone)
        ]
        self.detections = ToolDetections(tool_id, store.get_detected_reports(tool_id))

        self._clones: List[ReferenceClone] = clones
        self._by_type: Dict[CloneType, List[ReferenceClone]] = defaultdict(list)
        for clone in clones:
            self._by_type[clone.clone_type].append(clone)

        # Type-3 clones sorted by similarity so that band queries bisect.
        type3 = sorted(self._by_type.get(CloneType.TYPE3, []),
                       key=lambda c: c.similarity(similarity_type))
        self._type3 = type3
        self._type3_keys = [c.similarity(similarity_type) for c in type3]

        self._decisions = DecisionCache(self._decide_uncached)
        self._counts: Dict[CloneQuery, CloneCount] = {}
        self._counts_lock = threading.Lock()

        logger.info(
            f"Loaded {len(clones)} in-scope reference clones and "
            f"{len(self.detections)} reported clone pairs for tool {tool_id}"
        )

    @property
    def num_clones(self) -> int:
        return len(self._clones)

    def functionality_ids(self) -> List[int]:
        """Functionalities represented among the in-scope clones."""
        return sorted({c.functionality_id for c in self._clones if c.functionality_id is not None})

    def _decide_uncached(self, clone: ReferenceClone) -> MatchResult:
        return self.matcher.decide(self.detections, clone)

    def decide(self, clone: ReferenceClone) -> MatchResult:
        """Matcher decision for ``clone``, evaluated at most once per evaluator."""
        return self._decisions.get(clone)

    def prime(self, workers: Optional[int] = None) -> None:
        """Decide every in-scope clone up front, optionally on a thread pool."""
        if workers and workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                list(executor.map(self.decide, self._clones))
        else:
            for clone in self._clones:
                self.decide(clone)
        logger.debug(f"Primed {len(self._decisions)} clone matcher decisions")

    def _candidates(self, query: CloneQuery) -> Iterable[ReferenceClone]:
        """Superset of the clones matching ``query``, narrowed by type and band."""
        if query.band is not None:
            lo, hi = query.band
            start = bisect.bisect_left(self._type3_keys, lo)
            # Keys at or below ``hi`` may still belong to a band closed at 100.
            end = bisect.bisect_right(self._type3_keys, hi)
            return self._type3[start:end]
        if query.clone_types:
            return [c for t in query.clone_types for c in self._by_type.get(t, [])]
        return self._clones

    def count(self, query: CloneQuery) -> CloneCount:
        """Detected and total in-scope reference clones selected by ``query``."""
        cached = self._counts.get(query)
        if cached is not None:
            return cached

        detected = total = 0
        for clone in self._candidates(query):
            if not query.matches(clone, self.similarity_type):
                continue
            total += 1
            if self.decide(clone):
                detected += 1

        result = CloneCount(detected=detected, total=total)
        with self._counts_lock:
            self._counts[query] = result
        return result

    def recall(self, query: CloneQuery) -> Recall:
        """``detected / total`` for ``query``, or ``UNDEFINED`` when total is 0."""
        return self.count(query).recall

    def get_similarity_type_string(self) -> str:
        return self.similarity_type.description
