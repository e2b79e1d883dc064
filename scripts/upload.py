#!/usr/bin/env python3
"""
Upload files to Google Cloud Storage from a CI step.

CLI wrapper around gcs_upload.action. Inputs come from INPUT_* environment
variables, exactly as the GitHub Actions runner provides them.

Usage:
    INPUT_ACCESSTOKEN=... INPUT_BUCKET=artifacts INPUT_DESTINATION=builds/42 \\
        INPUT_PATTERN='dist/*.zip' python scripts/upload.py
    python scripts/upload.py --log-format text --log-level DEBUG
"""

import sys
from pathlib import Path

# Add project root to path for imports (before other imports)
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from gcs_upload.action import main  # noqa: E402


if __name__ == "__main__":
    sys.exit(main())
