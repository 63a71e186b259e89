"""
Text report of a tool evaluation.

The writer only composes queries and formats results; every number comes
from ``ToolEvaluator.count``.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from io import StringIO
from typing import Iterable, List, Optional, TextIO

from . import __version__
from .database.base import CloneStore
from .evaluation.engine import ToolEvaluator
from .models import CloneCount, CloneType, Locality
from .query import CloneQuery, regions

logger = logging.getLogger(__name__)

RULE = "=" * 80

TYPE_ROWS = [
    ("              Type-1", CloneType.TYPE1),
    ("              Type-2", CloneType.TYPE2),
    ("      Type-2 (blind)", CloneType.TYPE2_BLIND),
    (" Type-2 (consistent)", CloneType.TYPE2_CONSISTENT),
]

# Named Type-3 similarity ranges, printed when the minimum similarity allows.
TYPE3_ROWS = [
    ("Very-Strongly Type-3", 90, 100),
    ("     Strongly Type-3", 70, 90),
    ("   Moderately Type-3", 50, 70),
    ("Weakly Type-3/Type-4", 0, 50),
]

LOCALITY_HEADINGS = [
    (None, "-- Recall Per Clone Type (type: numDetected / numClones = recall) --", ""),
    (Locality.INTER, "-- Inter-Project Recall Per Clone Type (type: numDetected / numClones = recall) --",
     " Inter-Project"),
    (Locality.INTRA, "-- Intra-Project Recall Per Clone Type (type: numDetected / numClones = recall) --",
     " Intra-Project"),
]


def format_count(count: CloneCount) -> str:
    return f"{count.detected} / {count.total} = {count.recall}"


class ReportWriter:
    """
    Writes the recall report for one evaluated tool.

    Args:
        evaluator: Evaluator answering the recall queries
        store: Store used for header data (report count, versions, functionality names)
        min_similarity: Lowest Type-3 similarity printed, multiple of 5
        functionality_ids: Functionalities to break down; defaults to all in scope
    """

    def __init__(
        self,
        evaluator: ToolEvaluator,
        store: CloneStore,
        min_similarity: int = 0,
        functionality_ids: Optional[Iterable[int]] = None,
    ):
        self.evaluator = evaluator
        self.store = store
        self.min_similarity = min_similarity
        if functionality_ids is None:
            functionality_ids = evaluator.functionality_ids()
        self.functionality_ids: List[int] = list(functionality_ids)

    def write(self, out: TextIO, workers: int = 1) -> None:
        out.write(self.render_header())
        out.write(self.render_section(None))

        if workers > 1 and len(self.functionality_ids) > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                sections = list(executor.map(self.render_section, self.functionality_ids))
        else:
            sections = [self.render_section(fid) for fid in self.functionality_ids]
        for section in sections:
            out.write(section)

    def render(self, workers: int = 1) -> str:
        buffer = StringIO()
        self.write(buffer, workers=workers)
        return buffer.getvalue()

    def render_header(self) -> str:
        te = self.evaluator
        tool = te.tool
        f = te.filter
        lines = [
            "-- Tool --",
            f"       Tool: {tool.id} - {tool.name}",
            f"Description: {tool.description}",
            f"    #Clones: {self.store.count_detected_reports(tool.id)}",
            "",
            "-- Versioning --",
            f"     cloneeval: {__version__}",
            f"     Benchmark: {self.store.get_benchmark_version() or 'unknown'}",
            "",
            "-- Selected Clones --",
            f"         Min Lines: {f.min_lines}",
            f"         Max Lines: {_bound(f.max_lines)}",
            f"        Min Tokens: {f.min_tokens}",
            f"        Max Tokens: {_bound(f.max_tokens)}",
            f"  Min Pretty Lines: {f.min_pretty_lines}",
            f"  Max Pretty Lines: {_bound(f.max_pretty_lines)}",
            f"        Min Judges: {f.min_judges}",
            f"    Min Confidence: {f.min_confidence}",
            f"  Include Internal: {f.include_internal}",
            f"          Sim Type: {te.get_similarity_type_string()}",
            f"Minimum Similarity: {self.min_similarity}",
            "",
            "-- Clone Matcher --",
            te.matcher.describe(),
            "",
            "-- Clone Types --",
            "Type-1",
            "Type-2",
            "Very-Strongly Type-3: Clone similarity in range [90,100) after pretty-printing and identifier/literal normalization.",
            "     Strongly Type-3: Clone similarity in range [70, 90) after pretty-printing and identifier/literal normalization.",
            "   Moderately Type-3: Clone similarity in range [50, 70) after pretty-printing and identifier/literal normalization.",
            "Weakly Type-3/Type-4: Clone similarity in range [ 0, 50) after pretty-printing and identifier/literal normalization.",
            "",
        ]
        return "\n".join(lines) + "\n"

    def render_section(self, functionality_id: Optional[int]) -> str:
        """Every breakdown for one functionality, or for all of them when ``None``."""
        logger.info(
            "Evaluating all functionalities..." if functionality_id is None
            else f"Evaluating functionality {functionality_id}..."
        )
        lines = [RULE]
        if functionality_id is None:
            lines.append("\tAll Functionalities")
        else:
            functionality = self.store.get_functionality(functionality_id)
            lines += [
                "Functionality",
                f"  id: {functionality_id}",
                f"name: {functionality.name if functionality else ''}",
                f"desc: {functionality.description if functionality else ''}",
            ]
        lines.append(RULE)

        for locality, heading, _ in LOCALITY_HEADINGS:
            lines.append(heading)
            lines += self._type_rows(locality, functionality_id)
            lines.append("")

        for locality, _, label in LOCALITY_HEADINGS:
            lines.append(f"-- Type-3{label} Recall per 5% Region ([start,end]: numDetected / numClones = recall) --")
            for lo, hi in regions(self.min_similarity):
                query = CloneQuery.type3(lo, hi, locality=locality, functionality_id=functionality_id)
                lines.append(f"[{lo},{hi}]: {format_count(self.evaluator.count(query))}")
            lines.append("")

        for locality, _, label in LOCALITY_HEADINGS:
            lines.append(f"-- Type-3{label} Recall Per Minimum Similarity --")
            for lo, _ in regions(self.min_similarity):
                query = CloneQuery.type3(lo, 100, locality=locality, functionality_id=functionality_id)
                lines.append(f"[{lo},100]: {format_count(self.evaluator.count(query))}")
            lines.append("")

        return "\n".join(lines) + "\n"

    def _type_rows(self, locality: Optional[Locality], functionality_id: Optional[int]) -> List[str]:
        rows = []
        for label, clone_type in TYPE_ROWS:
            query = CloneQuery.of_type(clone_type, locality=locality, functionality_id=functionality_id)
            rows.append(f"{label}: {format_count(self.evaluator.count(query))}")
        for label, lo, hi in TYPE3_ROWS:
            if self.min_similarity <= lo:
                query = CloneQuery.type3(lo, hi, locality=locality, functionality_id=functionality_id)
                rows.append(f"{label}: {format_count(self.evaluator.count(query))}")
        return rows


def _bound(value: Optional[int]) -> str:
    return "unbounded" if value is None else str(value)
