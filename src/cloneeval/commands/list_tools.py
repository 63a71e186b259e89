"""
List the tools registered in the benchmark database.
"""
import argparse
import json

from .base import BaseCommand


class ListToolsCommand(BaseCommand):
    """Command to list registered tools."""

    @classmethod
    def help(cls) -> str:
        return "List the tools registered in the benchmark database"

    @classmethod
    def add_arguments(cls, parser: argparse.ArgumentParser):
        parser.add_argument(
            "--format",
            choices=["table", "json"],
            default="table",
            help="Output format (default: table)"
        )

    def execute(self) -> int:
        with self.open_store() as store:
            tools = store.list_tools()

        if self.args.format == "json":
            print(json.dumps(
                [{"id": t.id, "name": t.name, "description": t.description} for t in tools],
                indent=2
            ))
            return 0

        if not tools:
            print("No tools registered.")
            return 0

        print(f"{'ID':<6} {'Name':<30} Description")
        print("-" * 80)
        for tool in tools:
            print(f"{tool.id:<6} {tool.name:<30} {tool.description}")
        return 0
