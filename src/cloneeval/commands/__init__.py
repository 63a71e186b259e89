"""
Command handlers for cloneeval CLI.
"""
from .base import BaseCommand, CommandContext
from .evaluate import EvaluateCommand
from .list_tools import ListToolsCommand

__all__ = [
    'BaseCommand',
    'CommandContext',
    'EvaluateCommand',
    'ListToolsCommand',
]

COMMAND_REGISTRY = {
    'evaluate': EvaluateCommand,
    'list-tools': ListToolsCommand,
}
