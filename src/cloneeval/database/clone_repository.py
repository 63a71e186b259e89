"""
SQLite-backed clone store.
Reads reference clones, tools, functionalities and reported clone pairs.
"""

import logging
from pathlib import Path
from typing import Any, List, Optional, Tuple, Union

from ..exceptions import StoreError
from ..models import (
    CloneType,
    DetectedReport,
    EvaluationFilter,
    Fragment,
    Functionality,
    Locality,
    ReferenceClone,
    Tool,
)
from .base import CloneStore
from .connection_manager import DatabaseConnectionManager
from .decorators import with_retry
from .schema_manager import SchemaManager

logger = logging.getLogger(__name__)

_REFERENCE_COLUMNS = """
    id, clone_type,
    directory1, filename1, start_line1, end_line1, pretty_lines1, tokens1,
    directory2, filename2, start_line2, end_line2, pretty_lines2, tokens2,
    similarity_line, similarity_token, judges, confidence, locality,
    functionality_id, internal
"""

_REPORT_INSERT_COLUMNS = """
    tool_id,
    directory1, filename1, start_line1, end_line1,
    directory2, filename2, start_line2, end_line2
"""

_REPORT_COLUMNS = """
    id, tool_id,
    directory1, filename1, start_line1, end_line1,
    directory2, filename2, start_line2, end_line2
"""


def _size_bounds(column: str, low: int, high: Optional[int]) -> Tuple[List[str], List[Any]]:
    clauses, params = [], []
    for n in (1, 2):
        expr = column.format(n=n)
        clauses.append(f"{expr} >= ?")
        params.append(low)
        if high is not None:
            clauses.append(f"{expr} <= ?")
            params.append(high)
    return clauses, params


class SQLiteCloneStore(CloneStore):
    """
    Clone store over the benchmark SQLite database.

    Args:
        db_path: Database file, or ":memory:"
        create: Create missing tables; otherwise the schema must already exist
    """

    def __init__(self, db_path: Union[str, Path] = "cloneeval.db", create: bool = True):
        self.connection_manager = DatabaseConnectionManager(db_path)
        self.schema_manager = SchemaManager(self.connection_manager)
        if create:
            self.schema_manager.initialize_schema()
        elif self.schema_manager.needs_migration():
            raise StoreError(
                f"Database {db_path} has schema version "
                f"{self.schema_manager.get_schema_version()}, "
                f"expected {SchemaManager.SCHEMA_VERSION}"
            )

    def close(self):
        self.connection_manager.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # Reads

    @with_retry()
    def get_reference_clones(self, tool_id: int,
                             evaluation_filter: EvaluationFilter) -> List[ReferenceClone]:
        clauses, params = self._filter_clauses(evaluation_filter)
        where = " AND ".join(clauses) if clauses else "1"
        rows = self.connection_manager.fetch_all(
            f"SELECT {_REFERENCE_COLUMNS} FROM reference_clones WHERE {where} ORDER BY id",
            tuple(params),
        )
        clones = [self._row_to_reference_clone(row) for row in rows]
        logger.debug(f"Retrieved {len(clones)} reference clones for tool {tool_id}")
        return clones

    @staticmethod
    def _filter_clauses(f: EvaluationFilter) -> Tuple[List[str], List[Any]]:
        clauses: List[str] = ["judges >= ?", "confidence >= ?"]
        params: List[Any] = [f.min_judges, f.min_confidence]
        for column, low, high in (
            ("MAX(0, end_line{n} - start_line{n} + 1)", f.min_lines, f.max_lines),
            ("pretty_lines{n}", f.min_pretty_lines, f.max_pretty_lines),
            ("tokens{n}", f.min_tokens, f.max_tokens),
        ):
            more_clauses, more_params = _size_bounds(column, low, high)
            clauses += more_clauses
            params += more_params
        if not f.include_internal:
            clauses.append("internal = 0")
        return clauses, params

    @with_retry()
    def get_detected_reports(self, tool_id: int) -> List[DetectedReport]:
        rows = self.connection_manager.fetch_all(
            f"SELECT {_REPORT_COLUMNS} FROM detected_reports WHERE tool_id = ? ORDER BY id",
            (tool_id,),
        )
        return [self._row_to_detected_report(row) for row in rows]

    @with_retry()
    def count_detected_reports(self, tool_id: int) -> int:
        row = self.connection_manager.fetch_one(
            "SELECT COUNT(*) FROM detected_reports WHERE tool_id = ?", (tool_id,)
        )
        return row[0]

    @with_retry()
    def get_tool(self, tool_id: int) -> Optional[Tool]:
        row = self.connection_manager.fetch_one(
            "SELECT id, name, description FROM tools WHERE id = ?", (tool_id,)
        )
        return Tool(row['id'], row['name'], row['description']) if row else None

    @with_retry()
    def list_tools(self) -> List[Tool]:
        rows = self.connection_manager.fetch_all(
            "SELECT id, name, description FROM tools ORDER BY id"
        )
        return [Tool(row['id'], row['name'], row['description']) for row in rows]

    @with_retry()
    def get_functionality(self, functionality_id: int) -> Optional[Functionality]:
        row = self.connection_manager.fetch_one(
            "SELECT id, name, description FROM functionalities WHERE id = ?",
            (functionality_id,),
        )
        return Functionality(row['id'], row['name'], row['description']) if row else None

    @with_retry()
    def get_benchmark_version(self) -> Optional[str]:
        row = self.connection_manager.fetch_one(
            "SELECT value FROM database_info WHERE key = 'benchmark_version'"
        )
        return row['value'] if row else None

    # Row conversion

    @staticmethod
    def _row_fragment(row: Any, n: int, with_sizes: bool = True) -> Fragment:
        return Fragment(
            directory=row[f'directory{n}'],
            filename=row[f'filename{n}'],
            start_line=row[f'start_line{n}'],
            end_line=row[f'end_line{n}'],
            pretty_lines=row[f'pretty_lines{n}'] if with_sizes else 0,
            tokens=row[f'tokens{n}'] if with_sizes else 0,
        )

    def _row_to_reference_clone(self, row: Any) -> ReferenceClone:
        return ReferenceClone(
            id=row['id'],
            clone_type=CloneType(row['clone_type']),
            fragment1=self._row_fragment(row, 1),
            fragment2=self._row_fragment(row, 2),
            locality=Locality(row['locality']),
            similarity_line=row['similarity_line'],
            similarity_token=row['similarity_token'],
            judges=row['judges'],
            confidence=row['confidence'],
            functionality_id=row['functionality_id'],
            internal=bool(row['internal']),
        )

    def _row_to_detected_report(self, row: Any) -> DetectedReport:
        return DetectedReport(
            id=row['id'],
            tool_id=row['tool_id'],
            fragment1=self._row_fragment(row, 1, with_sizes=False),
            fragment2=self._row_fragment(row, 2, with_sizes=False),
        )

    # Single-row inserts, used to build small databases.

    def add_tool(self, name: str, description: str = "") -> Tool:
        with self.connection_manager.transaction():
            cursor = self.connection_manager.execute(
                "INSERT INTO tools (name, description) VALUES (?, ?)", (name, description)
            )
        return Tool(cursor.lastrowid, name, description)

    def add_functionality(self, functionality: Functionality) -> None:
        with self.connection_manager.transaction():
            self.connection_manager.execute(
                "INSERT INTO functionalities (id, name, description) VALUES (?, ?, ?)",
                (functionality.id, functionality.name, functionality.description),
            )

    def add_reference_clone(self, clone: ReferenceClone) -> None:
        f1, f2 = clone.fragment1, clone.fragment2
        with self.connection_manager.transaction():
            self.connection_manager.execute(
                f"INSERT INTO reference_clones ({_REFERENCE_COLUMNS}) "
                f"VALUES ({', '.join(['?'] * 21)})",
                (
                    clone.id, clone.clone_type.value,
                    f1.directory, f1.filename, f1.start_line, f1.end_line, f1.pretty_lines, f1.tokens,
                    f2.directory, f2.filename, f2.start_line, f2.end_line, f2.pretty_lines, f2.tokens,
                    clone.similarity_line, clone.similarity_token, clone.judges, clone.confidence,
                    clone.locality.value, clone.functionality_id, int(clone.internal),
                ),
            )

    def add_detected_report(self, tool_id: int, fragment1: Fragment, fragment2: Fragment) -> DetectedReport:
        with self.connection_manager.transaction():
            cursor = self.connection_manager.execute(
                f"INSERT INTO detected_reports ({_REPORT_INSERT_COLUMNS}) "
                f"VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    tool_id,
                    fragment1.directory, fragment1.filename, fragment1.start_line, fragment1.end_line,
                    fragment2.directory, fragment2.filename, fragment2.start_line, fragment2.end_line,
                ),
            )
        return DetectedReport(cursor.lastrowid, tool_id, fragment1, fragment2)

    def set_benchmark_version(self, version: str) -> None:
        with self.connection_manager.transaction():
            self.connection_manager.execute(
                "INSERT OR REPLACE INTO database_info (key, value) VALUES ('benchmark_version', ?)",
                (version,),
            )
