"""
Import from a local file (typically a temporary upload).
"""

import logging
from pathlib import Path
from typing import BinaryIO

from ..errors import SourceError
from .base import ImportSource

logger = logging.getLogger(__name__)


class FileImportSource(ImportSource):
    """
    Local file source.

    The file is deleted on release unless ``delete_on_release`` is False.
    A file that is already gone at release time is logged, not raised.
    """

    def __init__(self, path: Path | str, delete_on_release: bool = True):
        super().__init__()
        self.path = Path(path)
        self.delete_on_release = delete_on_release
        self._stream: BinaryIO | None = None

    @property
    def name(self) -> str:
        return str(self.path)

    def _open(self) -> BinaryIO:
        try:
            self._stream = open(self.path, "rb")
        except OSError as e:
            raise SourceError(f"Cannot open import file {self.path}: {e}") from e
        return self._stream

    def _release(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None

        if not self.delete_on_release:
            return

        try:
            self.path.unlink()
            logger.debug(f"Deleted import file {self.path}")
        except FileNotFoundError:
            logger.warning(f"Import file {self.path} was already removed")
        except OSError as e:
            raise SourceError(f"Cannot delete import file {self.path}: {e}") from e
