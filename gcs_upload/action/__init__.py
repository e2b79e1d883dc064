"""
Action orchestration.

Ties input resolution, file collection and the uploader together and reports
the outcome to the GitHub Actions runner.
"""

from .action import main, run_action, run_upload

__all__ = [
    "main",
    "run_action",
    "run_upload",
]
