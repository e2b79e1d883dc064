"""
Utility modules for the upload action.

This package provides shared utilities used across the action:
- logging: Logging setup with workflow-command, JSON and text output
- workflow: GitHub Actions workflow commands and step outputs
- inputs: Typed resolution of INPUT_* variables
- config: The immutable ActionConfig
"""

from gcs_upload.utils.logging import get_logger, log_function_call

__all__ = ["get_logger", "log_function_call"]
