"""Fixtures for cloneeval tests."""

import threading
from typing import Iterable, Optional

import pytest

from cloneeval.database import MemoryCloneStore, SQLiteCloneStore
from cloneeval.matchers.base import CloneMatcher, ToolDetections
from cloneeval.models import (
    CloneType,
    DetectedReport,
    Fragment,
    Functionality,
    Locality,
    MatchResult,
    ReferenceClone,
    Tool,
)

TOOL = Tool(1, "NiCad", "Near-miss clone detector")


def make_fragment(filename: str = "A.java", start: int = 1, end: int = 10,
                  directory: str = "selected", pretty_lines: Optional[int] = None,
                  tokens: int = 100) -> Fragment:
    lines = max(0, end - start + 1)
    return Fragment(
        directory=directory,
        filename=filename,
        start_line=start,
        end_line=end,
        pretty_lines=lines if pretty_lines is None else pretty_lines,
        tokens=tokens,
    )


def make_clone(clone_id: int, clone_type: CloneType = CloneType.TYPE1,
               similarity: Optional[float] = None, locality: Locality = Locality.INTER,
               functionality_id: Optional[int] = None, **kwargs) -> ReferenceClone:
    fragment1 = kwargs.pop("fragment1", None) or make_fragment(f"A{clone_id}.java")
    fragment2 = kwargs.pop("fragment2", None) or make_fragment(f"B{clone_id}.java")
    if clone_type is CloneType.TYPE3:
        if similarity is None:
            similarity = 80
        kwargs.setdefault("similarity_token", similarity)
    return ReferenceClone(
        id=clone_id,
        clone_type=clone_type,
        fragment1=fragment1,
        fragment2=fragment2,
        locality=locality,
        similarity_line=similarity,
        functionality_id=functionality_id,
        **kwargs,
    )


def report_for(report_id: int, clone: ReferenceClone, tool_id: int = TOOL.id) -> DetectedReport:
    """A reported pair that exactly matches ``clone``."""
    return DetectedReport(report_id, tool_id, clone.fragment1, clone.fragment2)


class StubMatcher(CloneMatcher):
    """Detects a fixed set of clone ids and counts its invocations."""

    name = "StubMatcher"

    def __init__(self, tool_id: int, detected_ids: Iterable[int] = ()):
        super().__init__(tool_id)
        self.detected_ids = set(detected_ids)
        self.calls = 0
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, tool_id: int, config: str) -> "StubMatcher":
        return cls(tool_id, [int(token) for token in config.split()])

    def decide(self, detections: ToolDetections, clone: ReferenceClone) -> MatchResult:
        with self._lock:
            self.calls += 1
        return MatchResult(detected=clone.id in self.detected_ids)

    def describe(self) -> str:
        return f"{self.name}: {sorted(self.detected_ids)}"


@pytest.fixture
def tool():
    return TOOL


@pytest.fixture
def functionalities():
    return [
        Functionality(2, "Copy a File", "Copy a file to a new location"),
        Functionality(6, "Bubble Sort", "Sort an array using bubble sort"),
    ]


@pytest.fixture
def mixed_clones():
    """Clones of every type with Type-3 similarities spread over [0, 100]."""
    clones = []
    next_id = 1
    for clone_type, count in [
        (CloneType.TYPE1, 4),
        (CloneType.TYPE2, 3),
        (CloneType.TYPE2_BLIND, 2),
        (CloneType.TYPE2_CONSISTENT, 2),
    ]:
        for i in range(count):
            locality = Locality.INTRA if i % 2 else Locality.INTER
            clones.append(make_clone(next_id, clone_type, locality=locality,
                                     functionality_id=2 if i % 3 else 6))
            next_id += 1
    for similarity in [0, 3, 12, 47.5, 50, 55, 69.9, 70, 82, 85, 89, 90, 95, 99, 100]:
        locality = Locality.INTRA if next_id % 2 else Locality.INTER
        clones.append(make_clone(next_id, CloneType.TYPE3, similarity=similarity,
                                 locality=locality, functionality_id=6))
        next_id += 1
    return clones


@pytest.fixture
def memory_store(tool, mixed_clones, functionalities):
    return MemoryCloneStore(
        tools=[tool],
        clones=mixed_clones,
        functionalities=functionalities,
        benchmark_version="test-1.0",
    )


@pytest.fixture
def sqlite_store(tmp_path, functionalities):
    store = SQLiteCloneStore(tmp_path / "benchmark.db")
    store.add_tool(TOOL.name, TOOL.description)
    for functionality in functionalities:
        store.add_functionality(functionality)
    store.set_benchmark_version("test-1.0")
    yield store
    store.close()
