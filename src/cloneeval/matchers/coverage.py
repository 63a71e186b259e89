"""
Coverage-threshold clone matcher.

A reference clone is detected when at least a threshold fraction of the
lines of both its fragments is covered by fragments the tool reported in
the same files. By default coverage is the union of every reported fragment
overlapping a reference fragment; the ``paired`` option requires one reported
clone pair to cover both reference fragments on its own.
"""

import logging
from typing import Iterable, Iterator, List, Optional, Tuple

from ..exceptions import ConfigurationError
from ..models import DetectedReport, Fragment, MatchResult, ReferenceClone
from .base import CloneMatcher, ToolDetections, register_matcher

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.70

OPTIONS = ("ordered", "paired")


def coverage(reference: Fragment, reported: Fragment) -> float:
    """Fraction of ``reference`` lines overlapped by ``reported``.

    A zero-length reference fragment has coverage 0.
    """
    if reference.lines == 0:
        return 0.0
    return reference.overlap(reported) / reference.lines


def union_coverage(reference: Fragment, reported: Iterable[Fragment]) -> float:
    """Fraction of ``reference`` lines overlapped by at least one of ``reported``."""
    if reference.lines == 0:
        return 0.0

    spans: List[Tuple[int, int]] = []
    for fragment in reported:
        if reference.overlap(fragment) == 0:
            continue
        spans.append((max(fragment.start_line, reference.start_line),
                      min(fragment.end_line, reference.end_line)))
    spans.sort()

    covered = 0
    current_start: Optional[int] = None
    current_end = 0
    for start, end in spans:
        if current_start is None or start > current_end + 1:
            if current_start is not None:
                covered += current_end - current_start + 1
            current_start, current_end = start, end
        else:
            current_end = max(current_end, end)
    if current_start is not None:
        covered += current_end - current_start + 1
    return covered / reference.lines


@register_matcher
class CoverageMatcher(CloneMatcher):
    """Matches when reported fragments cover both reference fragments.

    Configuration: ``"<threshold> [ordered] [paired]"`` with the threshold in
    (0, 1]. ``ordered`` only lets a report's first fragment cover the first
    reference fragment (and second the second). ``paired`` judges each
    reported clone pair on its own instead of combining reports.
    """

    name = "CoverageMatcher"

    def __init__(self, tool_id: int, threshold: float = DEFAULT_THRESHOLD,
                 ordered: bool = False, paired: bool = False):
        super().__init__(tool_id)
        if not 0 < threshold <= 1:
            raise ConfigurationError(
                f"{self.name}: coverage threshold {threshold} outside (0, 1]"
            )
        self.threshold = threshold
        self.ordered = ordered
        self.paired = paired

    @classmethod
    def from_config(cls, tool_id: int, config: str) -> "CoverageMatcher":
        tokens = config.split()
        if not tokens:
            return cls(tool_id)

        try:
            threshold = float(tokens[0])
        except ValueError:
            raise ConfigurationError(
                f"{cls.name}: invalid coverage threshold in configuration '{config}'"
            ) from None

        options = set()
        for token in tokens[1:]:
            if token.lower() not in OPTIONS:
                raise ConfigurationError(
                    f"{cls.name}: unknown option '{token}' in configuration '{config}'"
                )
            options.add(token.lower())
        return cls(tool_id, threshold=threshold,
                   ordered="ordered" in options, paired="paired" in options)

    def decide(self, detections: ToolDetections, clone: ReferenceClone) -> MatchResult:
        if self.paired:
            return self._decide_paired(detections, clone)

        score = min(
            union_coverage(clone.fragment1, self._reported_fragments(detections, clone.fragment1, 0)),
            union_coverage(clone.fragment2, self._reported_fragments(detections, clone.fragment2, 1)),
        )
        return MatchResult(detected=score >= self.threshold, score=score)

    def _reported_fragments(self, detections: ToolDetections, reference: Fragment,
                            position: int) -> Iterator[Fragment]:
        """Reported fragments in the file of ``reference``."""
        for report in detections.candidates(reference):
            sides = (report.fragment1, report.fragment2)
            if self.ordered:
                sides = (sides[position],)
            for fragment in sides:
                if fragment.same_file(reference):
                    yield fragment

    # Single-pair rule

    def _orientations(self, report: DetectedReport):
        yield report.fragment1, report.fragment2
        if not self.ordered:
            yield report.fragment2, report.fragment1

    def _pair_coverage(self, clone: ReferenceClone, report: DetectedReport) -> float:
        """Best min-coverage of both reference fragments by one report."""
        best = 0.0
        for reported1, reported2 in self._orientations(report):
            score = min(coverage(clone.fragment1, reported1),
                        coverage(clone.fragment2, reported2))
            best = max(best, score)
        return best

    def _decide_paired(self, detections: ToolDetections, clone: ReferenceClone) -> MatchResult:
        best_score = 0.0
        best_report: Optional[int] = None
        # Every matching report must touch the first fragment's file.
        for report in detections.candidates(clone.fragment1):
            score = self._pair_coverage(clone, report)
            if score > best_score:
                best_score, best_report = score, report.id
            if best_score >= 1.0:
                break
        detected = best_report is not None and best_score >= self.threshold
        return MatchResult(detected=detected, score=best_score, report_id=best_report)

    def describe(self) -> str:
        if self.paired:
            rule = "a single reported clone pair must cover"
        else:
            rule = "reported fragments in the same files must together cover"
        mode = "ordered fragments" if self.ordered else "fragments in either order"
        return (f"{self.name}: {rule} at least {self.threshold * 100:g}% of the lines "
                f"of both reference fragments ({mode}).")
