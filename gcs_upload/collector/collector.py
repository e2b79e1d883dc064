"""
Working directory and glob pattern resolution.

Nothing here changes the process-wide current directory: callers receive the
effective directory and pass it on explicitly.

Example usage:
    >>> root = resolve_working_directory("dist")
    >>> expand_pattern("**/*.zip", root)
    ['app.zip', 'docs/manual.zip']
"""

import glob
from pathlib import Path
from typing import List, Optional, Union

from gcs_upload.exceptions import DirectoryChangeError
from gcs_upload.utils.logging import get_logger, log_function_call

logger = get_logger(__name__)


@log_function_call
def resolve_working_directory(
    working_directory: Union[str, Path],
    base: Optional[Path] = None,
) -> Path:
    """
    Resolve the directory that patterns and file names are relative to.

    Args:
        working_directory: Requested directory, absolute or relative to base
        base: Starting directory (default: process cwd)

    Returns:
        Absolute path of the effective working directory

    Raises:
        DirectoryChangeError: If the directory does not exist or is not a
            directory
    """
    start = Path(base) if base is not None else Path.cwd()
    candidate = (start / working_directory).resolve()

    if not candidate.exists():
        raise DirectoryChangeError(f"no such file or directory: {working_directory}")
    if not candidate.is_dir():
        raise DirectoryChangeError(f"not a directory: {working_directory}")

    return candidate


@log_function_call
def expand_pattern(pattern: str, root: Union[str, Path]) -> List[str]:
    """
    Expand a glob pattern into matching regular files.

    ``**`` matches across directories. Hidden files are only matched when the
    pattern names them explicitly. Directories are skipped.

    Args:
        pattern: Glob pattern, relative to root
        root: Directory to expand the pattern in

    Returns:
        Matching paths relative to root, in the order the filesystem reports
        them. Empty when nothing matches.
    """
    root_path = Path(root)
    matches = glob.glob(pattern, root_dir=root_path, recursive=True)
    files = [match for match in matches if (root_path / match).is_file()]

    logger.debug(f"Pattern {pattern!r} matched {len(files)} file(s) in {root_path}")
    return files
