"""
Action entry point.

Resolves the inputs, collects local files and forwards them to the storage
uploader, then publishes the uploaded file list as the step output ``files``.

Steps, in order; any fatal error ends the run:
    1. resolve inputs (fatal on error)
    2. resolve the working directory (non-fatal: falls back to the cwd)
    3. expand ``pattern`` and upload the batch, if a pattern was given
    4. upload ``file``, if one was given
    5. report the uploaded files
"""

import argparse
import json
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from gcs_upload.collector import expand_pattern, resolve_working_directory
from gcs_upload.exceptions import (
    ConfigurationError,
    DirectoryChangeError,
    UploaderBaseError,
)
from gcs_upload.uploader import StorageUploader, join_destination
from gcs_upload.utils import workflow
from gcs_upload.utils.config import ActionConfig
from gcs_upload.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def log_inputs(config: ActionConfig) -> None:
    with workflow.group("input args"):
        logger.info(f"bucket {config.bucket}")
        logger.info(f"pattern {config.pattern}")
        logger.info(f"file {config.file}")
        logger.info(f"destination {config.destination}")
        logger.info(f"displayProgress {'true' if config.display_progress else 'false'}")
        logger.info(f"partSizeBytes {config.part_size_bytes}")
        logger.info(f"workingDirectory {config.working_directory}")


def effective_directory(config: ActionConfig, base_dir: Optional[Path] = None) -> Path:
    """
    Resolve the working directory, keeping the starting one on failure.

    A bad workingDirectory is logged as an error but does not stop the run.
    """
    start = Path(base_dir) if base_dir is not None else Path.cwd()

    with workflow.group("working directory"):
        logger.info(f"Starting directory: {start}")
        try:
            directory = resolve_working_directory(config.working_directory, base=start)
        except DirectoryChangeError as error:
            logger.error(f"chdir: {error}")
            return start
        logger.info(f"New directory: {directory}")
        return directory


def upload_batch(
    config: ActionConfig,
    uploader: StorageUploader,
    directory: Path,
) -> List[str]:
    """
    Expand ``config.pattern`` and upload the matches under the destination.

    Returns the files whose progress reached 100%, in completion order.
    """
    uploaded: List[str] = []

    with workflow.group(f"uploading batch {config.pattern}"):
        files = expand_pattern(config.pattern, directory)
        logger.info(f"File list: {','.join(files)}")

        events = uploader.iter_upload_files(
            files,
            config.destination,
            part_size_bytes=config.part_size_bytes,
            base_dir=directory,
        )
        for event in events:
            if config.display_progress:
                logger.info(f"Uploading {event.percent}%: {event.file}")
            if event.percent == 100:
                logger.info(f"Uploaded: {event.file}")
                uploaded.append(event.file)

    return uploaded


def run_upload(
    config: ActionConfig,
    uploader: StorageUploader,
    base_dir: Optional[Path] = None,
) -> List[str]:
    """
    Run the upload steps for a resolved configuration.

    Args:
        config: Resolved action inputs
        uploader: Storage uploader to forward files to
        base_dir: Starting directory (default: process cwd)

    Returns:
        Uploaded file paths: batch files first, then the single file

    Raises:
        UploadError: If any upload fails; remaining steps are skipped
    """
    uploaded: List[str] = []

    log_inputs(config)
    directory = effective_directory(config, base_dir)

    if config.pattern:
        uploaded.extend(upload_batch(config, uploader, directory))

    if config.file:
        uploader.upload(
            config.file,
            join_destination(config.destination, config.file),
            base_dir=directory,
        )
        uploaded.append(config.file)

    return uploaded


def run_action(environ: Optional[Mapping[str, str]] = None) -> int:
    """
    Run the action and report the result to the runner.

    Args:
        environ: Environment mapping for inputs and GITHUB_OUTPUT
            (default: os.environ)

    Returns:
        Process exit code: 0 on success, 1 on any failure
    """
    try:
        config = ActionConfig.from_env(environ)
    except ConfigurationError as error:
        return workflow.set_failed(str(error))

    workflow.add_mask(config.access_token)

    try:
        uploader = StorageUploader.create(
            config.access_token,
            config.bucket,
            logger=get_logger("gcs_upload.uploader"),
        )
        files = run_upload(config, uploader)
    except UploaderBaseError as error:
        logger.debug("Upload run failed", exc_info=True)
        return workflow.set_failed(str(error))
    except Exception as error:
        logger.debug("Unexpected error", exc_info=True)
        return workflow.set_failed(f"Unexpected error: {error}")

    result = json.dumps(files)
    logger.info(f"Success {result}")
    workflow.set_output("files", result, environ=environ)
    return 0


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="gcs-upload-action",
        description="Upload files matching a glob pattern to Google Cloud Storage",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Inputs are read from INPUT_* environment variables (or a .env file):
  INPUT_ACCESSTOKEN       OAuth2 access token (required)
  INPUT_BUCKET            Target bucket (required)
  INPUT_DESTINATION       Object path prefix (required)
  INPUT_PATTERN           Glob pattern for the batch upload
  INPUT_FILE              Single extra file to upload
  INPUT_DISPLAYPROGRESS   Log every progress event (default: false)
  INPUT_PARTSIZEBYTES     Read segment size in bytes (default: 1024)
  INPUT_WORKINGDIRECTORY  Directory pattern and file are relative to (default: .)
        """,
    )

    parser.add_argument(
        "--log-level",
        help="Logging level (default: LOG_LEVEL or INFO)",
    )

    parser.add_argument(
        "--log-format",
        choices=["github", "json", "text"],
        help="Log output style (default: detected from the environment)",
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colorized text output",
    )

    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point: configure logging, then run the action."""
    args = parse_args(argv)
    setup_logging(
        level=args.log_level,
        enable_colors=not args.no_color,
        log_format=args.log_format,
    )
    return run_action()
