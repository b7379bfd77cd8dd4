"""Command-line entrypoint for inspecting and exercising workflows."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from pydantic import ValidationError

from aistudio_workflows import __version__
from aistudio_workflows.core.config import AIStudioConfig
from aistudio_workflows.errors import AIServiceError
from aistudio_workflows.workflows.bootstrap import initialize_workflows
from aistudio_workflows.workflows.models import ResearchStreamOptions
from aistudio_workflows.workflows.registry import get_research_workflow

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="aistudio-workflows",
        description="Inspect and run AI Studio workflows",
    )
    parser.add_argument("--version", action="version", version=f"aistudio-workflows {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("workflows", help="Print registry statistics as JSON")

    research = subparsers.add_parser("research", help="Run a research query")
    research.add_argument("--query", required=True, help="Research question")
    research.add_argument(
        "--stream",
        action="store_true",
        help="Stream events as JSON lines instead of printing the final answer",
    )
    research.add_argument(
        "--workflow",
        default=None,
        help="Pin a research workflow id (defaults to the best available)",
    )
    research.add_argument("--notebook-id", default=None, help="Notebook to search")
    research.add_argument("--verbose", action="store_true", help="Request verbose tool events")
    research.add_argument("--search-web", action="store_true", help="Allow web search")

    return parser


def _print_json(payload: object) -> None:
    print(json.dumps(payload, ensure_ascii=False))


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = AIStudioConfig()
    except ValidationError as e:
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    config.setup_logging()

    try:
        registry = initialize_workflows(config)

        if args.command == "workflows":
            stats = registry.get_stats()
            _print_json({name: s.model_dump() for name, s in stats.items()})
            return 0

        if args.command == "research":
            workflow = get_research_workflow(registry, args.workflow)
            if workflow is None or not workflow.is_available():
                print(
                    f"Research workflow not available: {args.workflow or 'default'}",
                    file=sys.stderr,
                )
                return 4

            options = ResearchStreamOptions(
                query=args.query,
                notebook_id=args.notebook_id,
                verbose=args.verbose or None,
                search_web=args.search_web or None,
            )
            if not args.stream:
                _print_json(workflow.execute(options).to_wire())
                return 0

            exit_code = 0
            for event in workflow.execute_stream(options):
                _print_json(event.to_wire())
                if event.type == "error":
                    exit_code = 1
            return exit_code

        logger.error("Unknown command", extra={"command": args.command})
        return 2

    except AIServiceError as e:
        logger.error(e.message, extra={"code": e.code, "retryable": e.retryable})
        print(e.message, file=sys.stderr)
        return 3

    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
