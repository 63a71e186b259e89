"""
In-memory clone store.
"""

from typing import Dict, Iterable, List, Optional

from ..models import DetectedReport, EvaluationFilter, Functionality, ReferenceClone, Tool
from .base import CloneStore


class MemoryCloneStore(CloneStore):
    """Clone store holding plain Python objects; filters with ``EvaluationFilter.admits``."""

    def __init__(
        self,
        tools: Iterable[Tool] = (),
        clones: Iterable[ReferenceClone] = (),
        reports: Iterable[DetectedReport] = (),
        functionalities: Iterable[Functionality] = (),
        benchmark_version: Optional[str] = None,
    ):
        self._tools: Dict[int, Tool] = {tool.id: tool for tool in tools}
        self._clones: List[ReferenceClone] = list(clones)
        self._reports: List[DetectedReport] = list(reports)
        self._functionalities: Dict[int, Functionality] = {f.id: f for f in functionalities}
        self._benchmark_version = benchmark_version

    def get_reference_clones(self, tool_id: int,
                             evaluation_filter: EvaluationFilter) -> List[ReferenceClone]:
        return [clone for clone in self._clones if evaluation_filter.admits(clone)]

    def get_detected_reports(self, tool_id: int) -> List[DetectedReport]:
        return [report for report in self._reports if report.tool_id == tool_id]

    def get_tool(self, tool_id: int) -> Optional[Tool]:
        return self._tools.get(tool_id)

    def get_functionality(self, functionality_id: int) -> Optional[Functionality]:
        return self._functionalities.get(functionality_id)

    def list_tools(self) -> List[Tool]:
        return sorted(self._tools.values(), key=lambda tool: tool.id)

    def get_benchmark_version(self) -> Optional[str]:
        return self._benchmark_version
