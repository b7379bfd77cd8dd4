"""FastAPI adapter exposing the workflow registry over HTTP."""

from __future__ import annotations

__all__ = ["create_app"]

from aistudio_workflows.server.app import create_app
