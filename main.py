"""Service Entry Point - Root Module.

This is the root-level entry point for `uvicorn main:app`.
It imports from the quakemonitor package.
"""

from quakemonitor.main import app

__all__ = [
    "app",
]
