"""
Dimension descriptors for evaluation queries.

A query selects reference clones by clone type, Type-3 similarity band,
locality and functionality. Every field is optional and the filters combine
with logical AND.
"""

from dataclasses import dataclass, replace
from typing import FrozenSet, Iterable, Optional, Tuple

from .exceptions import RangeError
from .models import CloneType, Locality, ReferenceClone, SimilarityType

MAX_SIMILARITY = 100
BAND_WIDTH = 5


def validate_band(lo: float, hi: float) -> Tuple[float, float]:
    """Check that ``[lo, hi)`` lies within [0, 100] and is not inverted."""
    if not 0 <= lo < hi <= MAX_SIMILARITY:
        raise RangeError(f"Invalid similarity band [{lo}, {hi}): expected 0 <= lo < hi <= 100")
    return lo, hi


def band_contains(lo: float, hi: float, value: float) -> bool:
    """Half-open membership; a band ending at 100 also holds 100 itself."""
    if value < lo:
        return False
    return value < hi or (hi == MAX_SIMILARITY and value == MAX_SIMILARITY)


def clone_in_band(clone: ReferenceClone, lo: float, hi: float,
                  similarity_type: SimilarityType) -> bool:
    if clone.clone_type is not CloneType.TYPE3:
        return False
    if similarity_type is SimilarityType.BOTH:
        return (band_contains(lo, hi, clone.similarity_line)
                and band_contains(lo, hi, clone.similarity_token))
    return band_contains(lo, hi, clone.similarity(similarity_type))


def regions(start: int = 0, width: int = BAND_WIDTH) -> Iterable[Tuple[int, int]]:
    """Contiguous bands ``[s, s + width)`` from ``start`` up to 100."""
    for lo in range(start, MAX_SIMILARITY, width):
        yield lo, min(lo + width, MAX_SIMILARITY)


@dataclass(frozen=True)
class CloneQuery:
    """Immutable, hashable selection of reference clones.

    An empty ``clone_types`` selects every type. A ``band`` implies Type-3.
    """

    clone_types: FrozenSet[CloneType] = frozenset()
    band: Optional[Tuple[float, float]] = None
    locality: Optional[Locality] = None
    functionality_id: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "clone_types", frozenset(self.clone_types))
        if self.band is not None:
            object.__setattr__(self, "band", validate_band(*self.band))

    @classmethod
    def of_type(cls, *clone_types: CloneType, **kwargs) -> "CloneQuery":
        return cls(clone_types=frozenset(clone_types), **kwargs)

    @classmethod
    def type3(cls, lo: float = 0, hi: float = MAX_SIMILARITY, **kwargs) -> "CloneQuery":
        return cls(clone_types=frozenset([CloneType.TYPE3]), band=(lo, hi), **kwargs)

    def with_locality(self, locality: Optional[Locality]) -> "CloneQuery":
        return replace(self, locality=locality)

    def with_functionality(self, functionality_id: Optional[int]) -> "CloneQuery":
        return replace(self, functionality_id=functionality_id)

    def selects_type(self, clone_type: CloneType) -> bool:
        if self.band is not None and clone_type is not CloneType.TYPE3:
            return False
        return not self.clone_types or clone_type in self.clone_types

    def matches(self, clone: ReferenceClone, similarity_type: SimilarityType) -> bool:
        """Closed-form membership test used by every count."""
        if not self.selects_type(clone.clone_type):
            return False
        if self.locality is not None and clone.locality is not self.locality:
            return False
        if self.functionality_id is not None and clone.functionality_id != self.functionality_id:
            return False
        if self.band is not None:
            return clone_in_band(clone, self.band[0], self.band[1], similarity_type)
        return True
