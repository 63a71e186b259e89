"""
Data models for cloneeval.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Any, Union

from .exceptions import ValidationError, ConfigurationError


class CloneType(Enum):
    """Benchmark clone types. The tags partition the reference clones disjointly."""
    TYPE1 = "Type1"
    TYPE2 = "Type2"
    TYPE2_BLIND = "Type2Blind"
    TYPE2_CONSISTENT = "Type2Consistent"
    TYPE3 = "Type3"

    @property
    def label(self) -> str:
        return _TYPE_LABELS[self]


_TYPE_LABELS = {
    CloneType.TYPE1: "Type-1",
    CloneType.TYPE2: "Type-2",
    CloneType.TYPE2_BLIND: "Type-2 (blind)",
    CloneType.TYPE2_CONSISTENT: "Type-2 (consistent)",
    CloneType.TYPE3: "Type-3",
}


class Locality(Enum):
    """Whether both fragments of a clone come from the same project."""
    INTRA = "Intra"
    INTER = "Inter"


class SimilarityType(Enum):
    """Which syntactic similarity measure Type-3 band queries read."""
    LINE = "line"
    TOKEN = "token"
    AVG = "avg"
    BOTH = "both"

    @property
    def description(self) -> str:
        return _SIMILARITY_DESCRIPTIONS[self]


_SIMILARITY_DESCRIPTIONS = {
    SimilarityType.LINE: "Line (pretty-printed, normalized)",
    SimilarityType.TOKEN: "Token (normalized)",
    SimilarityType.AVG: "Average of line and token",
    SimilarityType.BOTH: "Both line and token",
}


@dataclass(frozen=True)
class Fragment:
    """A line range of one source file.

    ``start_line`` and ``end_line`` are inclusive. An extent whose end lies
    before its start is zero-length.
    """

    directory: str
    filename: str
    start_line: int
    end_line: int
    pretty_lines: int = 0
    tokens: int = 0

    @property
    def lines(self) -> int:
        return max(0, self.end_line - self.start_line + 1)

    def same_file(self, other: "Fragment") -> bool:
        return self.directory == other.directory and self.filename == other.filename

    def overlap(self, other: "Fragment") -> int:
        """Number of lines shared with ``other`` (0 when in another file)."""
        if not self.same_file(other) or self.lines == 0 or other.lines == 0:
            return 0
        start = max(self.start_line, other.start_line)
        end = min(self.end_line, other.end_line)
        return max(0, end - start + 1)


@dataclass(frozen=True)
class ReferenceClone:
    """A ground-truth clone pair of the benchmark."""

    id: int
    clone_type: CloneType
    fragment1: Fragment
    fragment2: Fragment
    locality: Locality
    similarity_line: Optional[float] = None
    similarity_token: Optional[float] = None
    judges: int = 0
    confidence: int = 0
    functionality_id: Optional[int] = None
    internal: bool = False

    def __post_init__(self):
        if self.clone_type is CloneType.TYPE3:
            if self.similarity_line is None:
                raise ValidationError(f"Type-3 clone {self.id} has no line similarity")
            if self.similarity_token is None:
                raise ValidationError(f"Type-3 clone {self.id} has no token similarity")
            for value in (self.similarity_line, self.similarity_token):
                if not 0 <= value <= 100:
                    raise ValidationError(
                        f"Type-3 clone {self.id} has similarity {value} outside [0, 100]"
                    )
        elif self.similarity_line is not None or self.similarity_token is not None:
            raise ValidationError(
                f"Clone {self.id} of type {self.clone_type.value} must not carry a similarity"
            )

    def similarity(self, similarity_type: SimilarityType) -> Optional[float]:
        """Similarity read by band queries; ``None`` for non Type-3 clones.

        ``BOTH`` yields the smaller of the two measures, which is the value
        that must clear a band's lower bound.
        """
        if self.clone_type is not CloneType.TYPE3:
            return None
        if similarity_type is SimilarityType.LINE:
            return self.similarity_line
        if similarity_type is SimilarityType.TOKEN:
            return self.similarity_token
        if similarity_type is SimilarityType.AVG:
            return (self.similarity_line + self.similarity_token) / 2.0
        return min(self.similarity_line, self.similarity_token)


@dataclass(frozen=True)
class DetectedReport:
    """A clone pair reported by the tool under evaluation."""

    id: int
    tool_id: int
    fragment1: Fragment
    fragment2: Fragment


@dataclass(frozen=True)
class Tool:
    id: int
    name: str
    description: str = ""


@dataclass(frozen=True)
class Functionality:
    id: int
    name: str
    description: str = ""


@dataclass(frozen=True)
class MatchResult:
    """Decision of a clone matcher for one reference clone."""

    detected: bool
    score: Optional[float] = None
    report_id: Optional[int] = None

    def __bool__(self) -> bool:
        return self.detected


@dataclass(frozen=True)
class EvaluationFilter:
    """Inclusion predicate applied before any counting.

    ``None`` upper bounds are unbounded. Size bounds apply to both fragments.
    """

    min_lines: int = 0
    max_lines: Optional[int] = None
    min_pretty_lines: int = 0
    max_pretty_lines: Optional[int] = None
    min_tokens: int = 0
    max_tokens: Optional[int] = None
    min_judges: int = 0
    min_confidence: int = 0
    include_internal: bool = False

    def __post_init__(self):
        bounds = [
            ("lines", self.min_lines, self.max_lines),
            ("pretty lines", self.min_pretty_lines, self.max_pretty_lines),
            ("tokens", self.min_tokens, self.max_tokens),
        ]
        for name, low, high in bounds:
            if low < 0 or (high is not None and high < 0):
                raise ConfigurationError(f"Bounds on {name} must be non-negative")
            if high is not None and low > high:
                raise ConfigurationError(f"Minimum {name} ({low}) exceeds maximum ({high})")
        if self.min_judges < 0:
            raise ConfigurationError("min_judges must be non-negative")
        if self.min_confidence < 0:
            raise ConfigurationError("min_confidence must be non-negative")

    @staticmethod
    def _within(value: int, low: int, high: Optional[int]) -> bool:
        return value >= low and (high is None or value <= high)

    def admits_fragment(self, fragment: Fragment) -> bool:
        return (
            self._within(fragment.lines, self.min_lines, self.max_lines)
            and self._within(fragment.pretty_lines, self.min_pretty_lines, self.max_pretty_lines)
            and self._within(fragment.tokens, self.min_tokens, self.max_tokens)
        )

    def admits(self, clone: ReferenceClone) -> bool:
        """Whether ``clone`` is in scope for evaluation."""
        if clone.internal and not self.include_internal:
            return False
        if clone.judges < self.min_judges or clone.confidence < self.min_confidence:
            return False
        return self.admits_fragment(clone.fragment1) and self.admits_fragment(clone.fragment2)


class UndefinedRecall:
    """Recall of an empty partition. Distinct from a true 0% recall."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __str__(self) -> str:
        return "n/a"


UNDEFINED = UndefinedRecall()

Recall = Union[float, UndefinedRecall]


def is_undefined(value: Any) -> bool:
    return value is UNDEFINED


@dataclass(frozen=True)
class CloneCount:
    """Detected and total reference clones of one partition."""

    detected: int
    total: int

    @property
    def recall(self) -> Recall:
        if self.total == 0:
            return UNDEFINED
        return self.detected / self.total

    def __add__(self, other: "CloneCount") -> "CloneCount":
        return CloneCount(self.detected + other.detected, self.total + other.total)
