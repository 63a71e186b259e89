"""
Evaluate command: measures the recall of one tool and writes the report.
"""
import argparse
import dataclasses
import logging
import time

from ..config import EvaluationConfig
from ..evaluation import ToolEvaluator
from ..matchers import load_spec
from ..models import SimilarityType
from ..report import ReportWriter
from .base import BaseCommand

logger = logging.getLogger(__name__)

# Command-line destinations that override EvaluationConfig fields of the same name.
_OVERRIDABLE = [
    "matcher", "similarity_type", "min_similarity",
    "min_lines", "max_lines", "min_pretty_lines", "max_pretty_lines",
    "min_tokens", "max_tokens", "min_judges", "min_confidence",
    "include_internal", "workers",
]


class EvaluateCommand(BaseCommand):
    """Measures the recall of a tool based on the clones imported for it."""

    @classmethod
    def help(cls) -> str:
        return ("Measure the recall of a tool per clone type, inter- vs intra-project clones, "
                "functionality and Type-3 similarity region")

    @classmethod
    def add_arguments(cls, parser: argparse.ArgumentParser):
        parser.add_argument("-t", "--tool", type=int, required=True, help="ID of the tool to evaluate")
        parser.add_argument(
            "-m", "--matcher",
            help='Clone matcher as "<name> <config>" (default: "CoverageMatcher 0.7")'
        )
        parser.add_argument("-o", "--output", required=True, help="File to write the report to")

        bounds = parser.add_argument_group("clone selection")
        bounds.add_argument("--min-lines", type=int, help="Minimum fragment size in lines")
        bounds.add_argument("--max-lines", type=int, help="Maximum fragment size in lines")
        bounds.add_argument("--min-pretty", dest="min_pretty_lines", type=int,
                            help="Minimum fragment size in pretty-printed lines")
        bounds.add_argument("--max-pretty", dest="max_pretty_lines", type=int,
                            help="Maximum fragment size in pretty-printed lines")
        bounds.add_argument("--min-tokens", type=int, help="Minimum fragment size in tokens")
        bounds.add_argument("--max-tokens", type=int, help="Maximum fragment size in tokens")
        bounds.add_argument("--min-judges", type=int, help="Minimum number of judges")
        bounds.add_argument("--min-confidence", type=int, help="Minimum judge confidence")
        bounds.add_argument("--include-internal", action="store_true", default=None,
                            help="Also evaluate clones outside the published benchmark")

        parser.add_argument(
            "--similarity-type",
            choices=[s.value for s in SimilarityType],
            help="Similarity measure for Type-3 regions (default: line)"
        )
        parser.add_argument("--min-similarity", type=int,
                            help="Lowest Type-3 similarity reported, multiple of 5 (default: 0)")
        parser.add_argument("-f", "--functionality", type=int, action="append",
                            help="Functionality to break down (repeatable; default: all)")
        parser.add_argument("--workers", type=int,
                            help="Threads used to decide clones and render functionalities")

    def _evaluation_config(self) -> EvaluationConfig:
        overrides = {
            name: getattr(self.args, name)
            for name in _OVERRIDABLE
            if getattr(self.args, name, None) is not None
        }
        return dataclasses.replace(self.config.evaluation, **overrides)

    def execute(self) -> int:
        args = self.args
        settings = self._evaluation_config()

        with self.open_store() as store:
            tool = store.get_tool(args.tool)
            if tool is None:
                logger.error(f"There is no such tool with ID {args.tool}.")
                return 1

            matcher = load_spec(tool.id, settings.matcher)

            with open(args.output, "w") as out:
                print("Evaluating...")
                started = time.time()
                evaluator = ToolEvaluator(
                    store,
                    tool.id,
                    matcher,
                    similarity_type=settings.similarity_type,
                    evaluation_filter=settings.to_filter(),
                )
                evaluator.prime(workers=settings.workers)

                print(f"Writing report to {args.output}...")
                writer = ReportWriter(
                    evaluator,
                    store,
                    min_similarity=settings.min_similarity,
                    functionality_ids=args.functionality,
                )
                writer.write(out, workers=settings.workers)

        logger.info(f"\tElapsed Time: {time.time() - started:.3f}s")
        return 0
