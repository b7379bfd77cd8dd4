#!/usr/bin/env python3
"""Programmatic research example.

This demonstrates using the workflow registry directly:

* load settings from `.env`
* bootstrap the registry (builtins plus any configured webhook / ImageRouter)
* stream a research answer from whichever implementation is available

Without any configuration the builtin workflow answers offline.
"""

from __future__ import annotations

import argparse
from typing import Sequence

from aistudio_workflows.core.config import AIStudioConfig
from aistudio_workflows.workflows import get_research_workflow, initialize_workflows
from aistudio_workflows.workflows.models import ResearchStreamOptions


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Stream a research answer (example).")
    parser.add_argument("--query", required=True, help="Research question")
    parser.add_argument("--notebook-id", default=None, help="Notebook to search (optional)")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    config = AIStudioConfig()
    config.setup_logging()

    registry = initialize_workflows(config)
    workflow = get_research_workflow(registry)
    if workflow is None:
        print("No research workflow available")
        return 1

    print(f"Using {workflow.name}")
    options = ResearchStreamOptions(query=args.query, notebook_id=args.notebook_id)
    for event in workflow.execute_stream(options):
        if event.type == "delta":
            print(event.content or "", end="", flush=True)
        elif event.type == "status":
            print(f"[{event.status}]")
        elif event.type == "error":
            print(f"\nError: {event.error}")
            return 1
    print()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
