"""
Action configuration loader.

Builds the immutable ActionConfig from the step inputs (``INPUT_*``
environment variables). Local runs may keep those variables in a .env file.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from gcs_upload.exceptions import ConfigurationError
from gcs_upload.utils.inputs import get_inputs

DEFAULT_PART_SIZE_BYTES = 1024
DEFAULT_WORKING_DIRECTORY = "."

# Input name -> declared type, as listed in action.yml
INPUT_SCHEMA = {
    "accessToken": "string",
    "bucket": "string",
    "pattern": "string?",
    "file": "string?",
    "destination": "string",
    "displayProgress": "boolean?",
    "partSizeBytes": "number?",
    "workingDirectory": "string?",
}


@dataclass(frozen=True)
class ActionConfig:
    """
    Resolved action inputs.

    Attributes:
        access_token: OAuth2 access token for the storage API
        bucket: Target bucket name (without gs:// prefix)
        destination: Object path prefix within the bucket
        pattern: Glob pattern selecting files for the batch upload
        file: Single extra file to upload
        display_progress: Log every progress event, not only completions
        part_size_bytes: Read segment size for batch uploads
        working_directory: Directory that pattern and file are relative to
    """

    access_token: str = field(repr=False)
    bucket: str
    destination: str
    pattern: Optional[str] = None
    file: Optional[str] = None
    display_progress: bool = False
    part_size_bytes: int = DEFAULT_PART_SIZE_BYTES
    working_directory: str = DEFAULT_WORKING_DIRECTORY

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ActionConfig":
        """
        Load configuration from the step inputs.

        When reading the real process environment, a .env file in the current
        directory is loaded first. Explicitly passed mappings are used as-is.

        Args:
            environ: Environment mapping (default: os.environ)

        Returns:
            ActionConfig instance with defaults applied

        Raises:
            ConfigurationError: If a required input is missing or a value
                is malformed
        """
        if environ is None:
            env_path = Path.cwd() / ".env"
            if env_path.exists():
                load_dotenv(env_path)
            environ = os.environ

        inputs = get_inputs(INPUT_SCHEMA, environ)

        part_size = inputs["partSizeBytes"]
        if part_size is None:
            part_size = DEFAULT_PART_SIZE_BYTES
        if not isinstance(part_size, int) or part_size <= 0:
            raise ConfigurationError(
                f"partSizeBytes must be a positive integer, got {part_size!r}"
            )

        return cls(
            access_token=inputs["accessToken"],
            bucket=inputs["bucket"],
            destination=inputs["destination"],
            pattern=inputs["pattern"],
            file=inputs["file"],
            display_progress=bool(inputs["displayProgress"]),
            part_size_bytes=part_size,
            working_directory=inputs["workingDirectory"] or DEFAULT_WORKING_DIRECTORY,
        )
