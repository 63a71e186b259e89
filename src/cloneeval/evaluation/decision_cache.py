"""
Memoization of matcher decisions.

Decisions do not depend on the query being answered, so one entry per
reference clone serves every count. Concurrent first access to the same
clone evaluates the matcher once; other callers wait for that result.
"""

import logging
import threading
from typing import Callable, Dict

from ..models import MatchResult, ReferenceClone

logger = logging.getLogger(__name__)


class DecisionCache:
    """Single-flight cache of ``MatchResult`` keyed by reference clone id."""

    def __init__(self, compute: Callable[[ReferenceClone], MatchResult]):
        self._compute = compute
        self._results: Dict[int, MatchResult] = {}
        self._key_locks: Dict[int, threading.Lock] = {}
        self._lock = threading.Lock()
        self.misses = 0

    def get(self, clone: ReferenceClone) -> MatchResult:
        result = self._results.get(clone.id)
        if result is not None:
            return result

        with self._lock:
            key_lock = self._key_locks.setdefault(clone.id, threading.Lock())

        with key_lock:
            result = self._results.get(clone.id)
            if result is None:
                result = self._compute(clone)
                with self._lock:
                    self._results[clone.id] = result
                    self.misses += 1
                    self._key_locks.pop(clone.id, None)
        return result

    def __contains__(self, clone_id: int) -> bool:
        return clone_id in self._results

    def __len__(self) -> int:
        return len(self._results)
