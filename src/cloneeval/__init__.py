"""cloneeval - Recall evaluation of code clone detectors against a clone benchmark."""

__version__ = "0.1.0"

from .exceptions import CloneEvalError, ConfigurationError, RangeError, StoreError, ValidationError
from .models import (
    CloneCount,
    CloneType,
    DetectedReport,
    EvaluationFilter,
    Fragment,
    Functionality,
    Locality,
    MatchResult,
    ReferenceClone,
    SimilarityType,
    Tool,
    UNDEFINED,
    is_undefined,
)
from .query import CloneQuery
from .matchers import CloneMatcher, CoverageMatcher, load as load_matcher, register_matcher
from .database import CloneStore, MemoryCloneStore, SQLiteCloneStore
from .evaluation import ToolEvaluator

__all__ = [
    "CloneEvalError",
    "ConfigurationError",
    "RangeError",
    "StoreError",
    "ValidationError",
    "CloneCount",
    "CloneType",
    "DetectedReport",
    "EvaluationFilter",
    "Fragment",
    "Functionality",
    "Locality",
    "MatchResult",
    "ReferenceClone",
    "SimilarityType",
    "Tool",
    "UNDEFINED",
    "is_undefined",
    "CloneQuery",
    "CloneMatcher",
    "CoverageMatcher",
    "load_matcher",
    "register_matcher",
    "CloneStore",
    "MemoryCloneStore",
    "SQLiteCloneStore",
    "ToolEvaluator",
]
