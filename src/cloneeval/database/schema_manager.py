"""
Database schema management.
Handles table creation, indexes, and schema versioning.
"""

import logging
from datetime import datetime
from typing import Optional

logger = logging.getLogger(__name__)


def _fragment_columns(n: int, with_sizes: bool) -> str:
    columns = [
        f"directory{n} TEXT NOT NULL",
        f"filename{n} TEXT NOT NULL",
        f"start_line{n} INTEGER NOT NULL",
        f"end_line{n} INTEGER NOT NULL",
    ]
    if with_sizes:
        columns += [
            f"pretty_lines{n} INTEGER NOT NULL DEFAULT 0",
            f"tokens{n} INTEGER NOT NULL DEFAULT 0",
        ]
    return ",\n                ".join(columns)


class SchemaManager:
    """
    Manages benchmark database schema creation.
    """

    SCHEMA_VERSION = "1.0"

    def __init__(self, connection_manager):
        """
        Initialize schema manager.

        Args:
            connection_manager: DatabaseConnectionManager instance
        """
        self.connection_manager = connection_manager

    def initialize_schema(self, benchmark_version: Optional[str] = None):
        """Create all database tables and indexes."""
        try:
            self._create_tables()
            self._create_indexes()
            self._initialize_metadata(benchmark_version)
            logger.info("Database schema initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize schema: {e}")
            raise

    def _create_tables(self):
        """Create all database tables."""
        tables = [
            self._get_tools_table_sql(),
            self._get_functionalities_table_sql(),
            self._get_reference_clones_table_sql(),
            self._get_detected_reports_table_sql(),
            self._get_database_info_table_sql(),
        ]

        for table_sql in tables:
            self.connection_manager.execute(table_sql)

    def _get_tools_table_sql(self) -> str:
        return """
            CREATE TABLE IF NOT EXISTS tools (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                description TEXT NOT NULL DEFAULT ''
            )
        """

    def _get_functionalities_table_sql(self) -> str:
        return """
            CREATE TABLE IF NOT EXISTS functionalities (
                id INTEGER PRIMARY KEY,
                name TEXT NOT NULL,
                description TEXT NOT NULL DEFAULT ''
            )
        """

    def _get_reference_clones_table_sql(self) -> str:
        """Get SQL for the ground-truth clone table."""
        return f"""
            CREATE TABLE IF NOT EXISTS reference_clones (
                id INTEGER PRIMARY KEY,
                clone_type TEXT NOT NULL,
                {_fragment_columns(1, with_sizes=True)},
                {_fragment_columns(2, with_sizes=True)},
                similarity_line REAL,
                similarity_token REAL,
                judges INTEGER NOT NULL DEFAULT 0,
                confidence INTEGER NOT NULL DEFAULT 0,
                locality TEXT NOT NULL,
                functionality_id INTEGER REFERENCES functionalities(id),
                internal INTEGER NOT NULL DEFAULT 0
            )
        """

    def _get_detected_reports_table_sql(self) -> str:
        """Get SQL for the clone pairs reported by tools."""
        return f"""
            CREATE TABLE IF NOT EXISTS detected_reports (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                tool_id INTEGER NOT NULL REFERENCES tools(id) ON DELETE CASCADE,
                {_fragment_columns(1, with_sizes=False)},
                {_fragment_columns(2, with_sizes=False)}
            )
        """

    def _get_database_info_table_sql(self) -> str:
        """Get SQL for creating database info table."""
        return """
            CREATE TABLE IF NOT EXISTS database_info (
                key TEXT PRIMARY KEY,
                value TEXT
            )
        """

    def _create_indexes(self):
        """Create database indexes for performance."""
        indexes = [
            ("idx_reference_clones_type", "reference_clones", "clone_type"),
            ("idx_reference_clones_functionality", "reference_clones", "functionality_id"),
            ("idx_detected_reports_tool", "detected_reports", "tool_id"),
        ]

        for index_name, table_name, column_name in indexes:
            sql = f"CREATE INDEX IF NOT EXISTS {index_name} ON {table_name}({column_name})"
            self.connection_manager.execute(sql)

    def _initialize_metadata(self, benchmark_version: Optional[str]):
        """Initialize database metadata."""
        self.connection_manager.execute("""
            INSERT OR REPLACE INTO database_info (key, value)
            VALUES ('schema_version', ?)
        """, (self.SCHEMA_VERSION,))

        self.connection_manager.execute("""
            INSERT OR IGNORE INTO database_info (key, value)
            VALUES ('created_at', ?)
        """, (datetime.now().isoformat(),))

        if benchmark_version is not None:
            self.connection_manager.execute("""
                INSERT OR REPLACE INTO database_info (key, value)
                VALUES ('benchmark_version', ?)
            """, (benchmark_version,))

        self.connection_manager.commit()

    def get_schema_version(self) -> Optional[str]:
        """Get current schema version from database."""
        row = self.connection_manager.fetch_one(
            "SELECT value FROM database_info WHERE key = 'schema_version'"
        )
        return row['value'] if row else None

    def needs_migration(self) -> bool:
        """Check if database needs schema migration."""
        return self.get_schema_version() != self.SCHEMA_VERSION
