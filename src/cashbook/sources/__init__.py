"""
Import sources.

Each source is a context manager yielding a binary stream and releasing the
backing artifact (temporary file, HTTP response) exactly once on exit.
"""

from .base import ImportSource
from .file_source import FileImportSource
from .http_source import HttpImportSource

__all__ = [
    "ImportSource",
    "FileImportSource",
    "HttpImportSource",
]
