"""
GCS Upload Action

A GitHub Actions step that uploads files selected by a glob pattern (and/or a
single named file) to a Google Cloud Storage bucket, then publishes the list
of uploaded files as the step output ``files``.

This package provides one module per concern:
- collector: working directory and glob pattern resolution
- uploader: Google Cloud Storage upload client
- action: orchestration and runner reporting
- utils: logging, workflow commands, input resolution and configuration
"""

__version__ = "0.1.0"

# Package-level imports
from gcs_upload.utils.logging import setup_logging

# Initialize default logging configuration
setup_logging()
