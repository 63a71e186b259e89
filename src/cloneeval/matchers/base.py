"""
Clone matcher interface and strategy registry.

A clone matcher decides whether the clone pairs reported by a tool count as
a detection of one reference clone. Strategies are selected by name and
configured with a free-text string that each strategy parses itself.
"""

import logging
import re
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Dict, Iterable, List, Tuple, Type

from ..exceptions import ConfigurationError
from ..models import DetectedReport, Fragment, MatchResult, ReferenceClone

logger = logging.getLogger(__name__)


class ToolDetections:
    """Read-only index of one tool's reported clone pairs, keyed by file."""

    def __init__(self, tool_id: int, reports: Iterable[DetectedReport]):
        self.tool_id = tool_id
        by_file: Dict[Tuple[str, str], List[DetectedReport]] = defaultdict(list)
        count = 0
        for report in reports:
            count += 1
            by_file[(report.fragment1.directory, report.fragment1.filename)].append(report)
            key2 = (report.fragment2.directory, report.fragment2.filename)
            # A report with both fragments in one file is indexed once.
            if not report.fragment2.same_file(report.fragment1):
                by_file[key2].append(report)
        self._by_file = dict(by_file)
        self._count = count

    def __len__(self) -> int:
        return self._count

    def candidates(self, fragment: Fragment) -> List[DetectedReport]:
        """Reports with at least one fragment in the same file as ``fragment``."""
        return self._by_file.get((fragment.directory, fragment.filename), [])


class CloneMatcher(ABC):
    """Base class for clone-matching strategies."""

    name: str = ""

    def __init__(self, tool_id: int):
        self.tool_id = tool_id

    @classmethod
    @abstractmethod
    def from_config(cls, tool_id: int, config: str) -> "CloneMatcher":
        """Build the matcher from its configuration string.

        Raises:
            ConfigurationError: if ``config`` is malformed
        """
        pass

    @abstractmethod
    def decide(self, detections: ToolDetections, clone: ReferenceClone) -> MatchResult:
        """Decide whether ``detections`` cover ``clone``. Must be side-effect free."""
        pass

    @abstractmethod
    def describe(self) -> str:
        """Human-readable description for report headers."""
        pass

    def __str__(self) -> str:
        return self.describe()


MATCHERS: Dict[str, Type[CloneMatcher]] = {}


def register_matcher(cls: Type[CloneMatcher]) -> Type[CloneMatcher]:
    """Class decorator adding a strategy to the registry under ``cls.name``."""
    if not cls.name:
        raise ConfigurationError(f"Matcher class {cls.__name__} has no name")
    existing = MATCHERS.get(cls.name)
    if existing is not None and existing is not cls:
        raise ConfigurationError(f"Matcher name already registered: {cls.name}")
    MATCHERS[cls.name] = cls
    logger.debug(f"Registered clone matcher: {cls.name}")
    return cls


def unregister_matcher(name: str) -> None:
    MATCHERS.pop(name, None)


def available_matchers() -> List[str]:
    return sorted(MATCHERS)


def parse_matcher_spec(spec: str) -> Tuple[str, str]:
    """Split ``"<strategyName> <config...>"`` into name and config text."""
    parts = re.split(r"\s+", spec.strip(), maxsplit=1)
    if not parts[0]:
        raise ConfigurationError("Empty clone matcher specification")
    config = parts[1] if len(parts) > 1 else ""
    return parts[0], config


def load(tool_id: int, strategy_name: str, config: str = "") -> CloneMatcher:
    """Resolve ``strategy_name`` in the registry and configure it.

    Raises:
        ConfigurationError: for an unknown strategy or a malformed configuration
    """
    matcher_cls = MATCHERS.get(strategy_name)
    if matcher_cls is None:
        known = ", ".join(available_matchers()) or "none"
        raise ConfigurationError(
            f"Unknown clone matcher '{strategy_name}' (available: {known})"
        )
    matcher = matcher_cls.from_config(tool_id, config)
    logger.info(f"Loaded clone matcher: {matcher.describe()}")
    return matcher


def load_spec(tool_id: int, spec: str) -> CloneMatcher:
    """Load a matcher from a combined ``"<strategyName> <config...>"`` string."""
    name, config = parse_matcher_spec(spec)
    return load(tool_id, name, config)


