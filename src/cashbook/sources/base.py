"""
Import source interface.

A source hands the importer a readable byte stream and owns the artifact
behind it. Entering the source opens the stream; leaving it releases the
artifact exactly once, whether the import succeeded or failed.
"""

import logging
from abc import ABC, abstractmethod
from types import TracebackType
from typing import BinaryIO

logger = logging.getLogger(__name__)


class ImportSource(ABC):
    """Scoped acquisition of an import byte stream."""

    # Exceptions the byte stream may raise while it is being read
    read_errors: tuple[type[Exception], ...] = (OSError,)

    def __init__(self) -> None:
        self._opened = False
        self._released = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable identifier for logs."""
        pass

    @abstractmethod
    def _open(self) -> BinaryIO:
        """Open and return the byte stream."""
        pass

    @abstractmethod
    def _release(self) -> None:
        """Close the stream and dispose of the backing artifact."""
        pass

    @property
    def released(self) -> bool:
        return self._released

    def __enter__(self) -> BinaryIO:
        if self._opened:
            raise RuntimeError(f"Import source {self.name} can only be opened once")
        self._opened = True
        try:
            return self._open()
        except BaseException:
            self.release()
            raise

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            self.release()
        except Exception:
            if exc is None:
                raise
            # Keep the original import failure as the propagating error
            logger.exception(f"Failed to release import source {self.name}")

    def release(self) -> None:
        """Release the source. Subsequent calls are no-ops."""
        if self._released:
            return
        self._released = True
        logger.debug(f"Releasing import source {self.name}")
        self._release()
