"""
Local file collection.

Resolves the effective working directory and expands glob patterns into the
list of files handed to the uploader.
"""

from .collector import expand_pattern, resolve_working_directory

__all__ = [
    "expand_pattern",
    "resolve_working_directory",
]
