"""
Google Cloud Storage uploader implementation.

Wraps the google-cloud-storage SDK behind the two operations the action
needs: upload one file to an object path, and upload a batch of files under a
destination prefix while reporting progress. Transport, resumable sessions
and any SDK-level retries stay inside the SDK.

Example usage:
    >>> uploader = StorageUploader.create(access_token, "release-artifacts")
    >>> uploader.upload("dist/app.zip", "builds/42/dist/app.zip")
    'gs://release-artifacts/builds/42/dist/app.zip'
    >>> for event in uploader.iter_upload_files(["a.png"], "images"):
    ...     print(event.percent, event.file)
    100 a.png
"""

import functools
import logging
import os
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Sequence, Union

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import storage
from google.cloud.storage.exceptions import DataCorruption, InvalidResponse
from google.oauth2.credentials import Credentials

from gcs_upload.exceptions import UploadError
from gcs_upload.utils.logging import get_logger

# Module logger
logger = get_logger(__name__)

DEFAULT_PART_SIZE_BYTES = 1024

# Resumable upload chunks must be a multiple of 256 KiB
CHUNK_SIZE_MULTIPLE = 256 * 1024

# Failures surfaced as UploadError; requests' transport errors are OSErrors.
# The resumable writer raises InvalidResponse and DataCorruption unwrapped.
UPLOAD_ERRORS = (
    GoogleAPIError,
    GoogleAuthError,
    InvalidResponse,
    DataCorruption,
    OSError,
    ValueError,
)

ProgressCallback = Callable[[int, int, str], None]


@dataclass(frozen=True)
class ProgressEvent:
    """
    Progress of one file within a batch upload.

    Attributes:
        current: Bytes handed to the upload session so far
        total: Size of the file in bytes
        file: File path as given to the batch
    """

    current: int
    total: int
    file: str

    @property
    def percent(self) -> int:
        """Completed percentage, rounded down; 100 only once complete."""
        if self.total <= 0:
            return 100
        return min(self.current * 100 // self.total, 100)

    @property
    def complete(self) -> bool:
        return self.current >= self.total


def transfer_chunk_size(part_size_bytes: int) -> int:
    """
    Round a part size up to the chunk granularity of resumable uploads.

    Args:
        part_size_bytes: Requested part size, must be positive

    Returns:
        Smallest multiple of 256 KiB that is >= part_size_bytes

    Example:
        >>> transfer_chunk_size(1024)
        262144
        >>> transfer_chunk_size(300 * 1024)
        524288
    """
    if part_size_bytes <= 0:
        raise ValueError(f"part size must be positive, got {part_size_bytes}")
    chunks = -(-part_size_bytes // CHUNK_SIZE_MULTIPLE)
    return chunks * CHUNK_SIZE_MULTIPLE


def join_destination(destination: str, file: str) -> str:
    """
    Join a remote destination and a local relative path.

    Local separators become "/", the result is normalized and a leading
    slash on the file name does not discard the destination.

    Example:
        >>> join_destination("out/", "./a.txt")
        'out/a.txt'
    """
    relative = file.replace(os.sep, "/").lstrip("/")
    return posixpath.normpath(posixpath.join(destination, relative))


def object_name(destination: str) -> str:
    """Convert a destination path to a GCS object name (no leading slash)."""
    name = posixpath.normpath(destination).lstrip("/")
    if name in ("", "."):
        raise UploadError(f"Invalid destination object path: {destination!r}", destination)
    return name


class StorageUploader:
    """
    Uploads local files to one GCS bucket.

    The logger is a diagnostic sink only; nothing it receives changes the
    upload flow.
    """

    def __init__(
        self,
        client: storage.Client,
        bucket_name: str,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            client: Authenticated storage client
            bucket_name: Target bucket name (without gs:// prefix)
            logger: Diagnostic sink (default: this module's logger)
        """
        self._client = client
        self._bucket_name = bucket_name
        self._bucket = client.bucket(bucket_name)
        self._logger = logger or get_logger(__name__)

    @classmethod
    def create(
        cls,
        access_token: str,
        bucket_name: str,
        logger: Optional[logging.Logger] = None,
    ) -> "StorageUploader":
        """
        Build an uploader authenticated with an OAuth2 access token.

        No request is made here; an invalid token surfaces as UploadError on
        the first upload.
        """
        credentials = Credentials(token=access_token)
        client = storage.Client(project=None, credentials=credentials)
        return cls(client, bucket_name, logger=logger)

    @property
    def bucket_name(self) -> str:
        return self._bucket_name

    def uri(self, destination: str) -> str:
        return f"gs://{self._bucket_name}/{object_name(destination)}"

    def upload(
        self,
        file: str,
        destination: str,
        base_dir: Optional[Union[str, Path]] = None,
    ) -> str:
        """
        Upload exactly one file.

        Args:
            file: Local path, relative to base_dir
            destination: Object path within the bucket
            base_dir: Directory file is relative to (default: process cwd)

        Returns:
            The gs:// URI of the uploaded object

        Raises:
            UploadError: On any authentication, quota, network or local read
                failure
        """
        path = _local_path(file, base_dir)
        uri = self.uri(destination)
        blob = self._bucket.blob(object_name(destination))

        self._logger.debug(f"Uploading {path} -> {uri}")
        try:
            blob.upload_from_filename(str(path))
        except UPLOAD_ERRORS as error:
            raise UploadError(
                f"Upload of {file} to {uri} failed: {error}",
                destination=uri,
                cause=error,
            ) from error

        self._logger.info(f"Uploaded {file} to {uri}")
        return uri

    def iter_upload_files(
        self,
        files: Sequence[str],
        destination_dir: str,
        part_size_bytes: int = DEFAULT_PART_SIZE_BYTES,
        base_dir: Optional[Union[str, Path]] = None,
    ) -> Iterator[ProgressEvent]:
        """
        Upload files one after another, yielding progress as it happens.

        Each file is read in ``part_size_bytes`` segments and streamed into a
        resumable upload session whose chunk size is ``part_size_bytes``
        rounded up to 256 KiB. An event follows every segment below the file
        size; the final ``current == total`` event is only yielded once the
        session has been closed successfully.

        The first failing file raises UploadError and the remaining files
        are not attempted.

        Args:
            files: Local paths, relative to base_dir
            destination_dir: Object prefix; each file keeps its relative path
            part_size_bytes: Read segment size in bytes
            base_dir: Directory files are relative to (default: process cwd)

        Yields:
            ProgressEvent per segment and per completed file
        """
        chunk_size = transfer_chunk_size(part_size_bytes)
        if chunk_size != part_size_bytes:
            self._logger.debug(
                f"Part size {part_size_bytes} rounded to transfer chunk {chunk_size}"
            )

        for file in files:
            yield from self._iter_upload_one(
                file,
                join_destination(destination_dir, file),
                part_size_bytes,
                chunk_size,
                base_dir,
            )

    def upload_files(
        self,
        files: Sequence[str],
        destination_dir: str,
        on_progress: Optional[ProgressCallback] = None,
        part_size_bytes: int = DEFAULT_PART_SIZE_BYTES,
        base_dir: Optional[Union[str, Path]] = None,
    ) -> List[str]:
        """
        Callback flavour of iter_upload_files.

        Calls ``on_progress(current, total, file)`` for every event and
        returns the files that completed.
        """
        completed = []
        for event in self.iter_upload_files(
            files, destination_dir, part_size_bytes=part_size_bytes, base_dir=base_dir
        ):
            if on_progress is not None:
                on_progress(event.current, event.total, event.file)
            if event.complete:
                completed.append(event.file)
        return completed

    def _iter_upload_one(
        self,
        file: str,
        destination: str,
        part_size_bytes: int,
        chunk_size: int,
        base_dir: Optional[Union[str, Path]],
    ) -> Iterator[ProgressEvent]:
        path = _local_path(file, base_dir)
        uri = self.uri(destination)
        blob = self._bucket.blob(object_name(destination))

        self._logger.debug(f"Starting resumable upload {path} -> {uri}")
        try:
            total = path.stat().st_size
            sent = 0
            with path.open("rb") as source, blob.open(
                "wb", chunk_size=chunk_size, ignore_flush=True
            ) as sink:
                for segment in iter(functools.partial(source.read, part_size_bytes), b""):
                    sink.write(segment)
                    sent += len(segment)
                    if sent < total:
                        yield ProgressEvent(sent, total, file)
        except UPLOAD_ERRORS as error:
            raise UploadError(
                f"Upload of {file} to {uri} failed: {error}",
                destination=uri,
                cause=error,
            ) from error

        self._logger.debug(f"Finished resumable upload {uri} ({total} bytes)")
        yield ProgressEvent(total, total, file)


def _local_path(file: str, base_dir: Optional[Union[str, Path]]) -> Path:
    path = Path(file)
    if base_dir is not None and not path.is_absolute():
        path = Path(base_dir) / path
    return path
