"""
Base command interface for cloneeval CLI commands.
"""
import argparse
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from ..config import UnifiedConfig
from ..database import SQLiteCloneStore
from ..exceptions import StoreError


@dataclass
class CommandContext:
    """Context passed to command handlers."""
    config: UnifiedConfig
    args: argparse.Namespace


class BaseCommand(ABC):
    """Base class for all CLI commands."""

    def __init__(self, context: CommandContext):
        self.context = context
        self.config = context.config
        self.args = context.args

    def open_store(self) -> SQLiteCloneStore:
        """Open the benchmark database; it must already exist."""
        db_path = self.config.database.db_path
        if not Path(db_path).is_file():
            raise StoreError(f"Benchmark database not found: {db_path}")
        return SQLiteCloneStore(db_path, create=False)

    @abstractmethod
    def execute(self) -> int:
        """Execute the command.

        Returns:
            Exit code (0 for success)
        """
        pass

    @classmethod
    @abstractmethod
    def add_arguments(cls, parser: argparse.ArgumentParser):
        """Add command-specific arguments to the parser."""
        pass

    @classmethod
    @abstractmethod
    def help(cls) -> str:
        """Return help text for the command."""
        pass
