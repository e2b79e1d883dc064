"""
Google Cloud Storage uploader module.

Provides the single-file and batch upload operations the action forwards
files to, plus the ProgressEvent records batch uploads report.
"""

from .uploader import (
    ProgressEvent,
    StorageUploader,
    join_destination,
    transfer_chunk_size,
)

__all__ = [
    "ProgressEvent",
    "StorageUploader",
    "join_destination",
    "transfer_chunk_size",
]
