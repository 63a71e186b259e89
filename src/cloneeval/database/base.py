"""
Read interface of the reference clone store.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from ..models import DetectedReport, EvaluationFilter, Functionality, ReferenceClone, Tool


class CloneStore(ABC):
    """Source of benchmark clones and tool results consumed by the evaluator.

    Implementations raise ``StoreError`` when the underlying storage fails.
    """

    @abstractmethod
    def get_reference_clones(self, tool_id: int,
                             evaluation_filter: EvaluationFilter) -> Sequence[ReferenceClone]:
        """Reference clones admitted by ``evaluation_filter``."""
        pass

    @abstractmethod
    def get_detected_reports(self, tool_id: int) -> Sequence[DetectedReport]:
        pass

    @abstractmethod
    def get_tool(self, tool_id: int) -> Optional[Tool]:
        pass

    @abstractmethod
    def get_functionality(self, functionality_id: int) -> Optional[Functionality]:
        pass

    @abstractmethod
    def list_tools(self) -> List[Tool]:
        pass

    def count_detected_reports(self, tool_id: int) -> int:
        return len(self.get_detected_reports(tool_id))

    def get_benchmark_version(self) -> Optional[str]:
        return None
