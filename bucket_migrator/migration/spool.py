"""Spool file holding the object keys that still have to be transferred"""
import os
from typing import Iterator
import structlog

logger = structlog.get_logger()

PARTIAL_SUFFIX = ".partial"


class SpoolWriter:
    """
    Writes listed object keys, one per line, to a partial spool file.

    The partial file only becomes the real spool on commit(), so an existing
    spool always holds a complete listing.
    """

    def __init__(self, path: str):
        self.path = path
        self.partial_path = path + PARTIAL_SUFFIX
        self.count = 0
        self._file = open(self.partial_path, 'w', encoding='utf-8')

    def write(self, key: str) -> None:
        self._file.write(key + "\n")
        self._file.flush()
        self.count += 1

    def commit(self) -> str:
        """ Sync the partial file and move it into place. Returns the spool path. """
        self._sync_and_close()
        os.replace(self.partial_path, self.path)
        logger.info("spool.committed", path=self.path, keys=self.count)
        return self.path

    def close(self) -> str:
        """ Sync and close without committing. Returns the partial path. """
        self._sync_and_close()
        logger.warning("spool.left_partial", path=self.partial_path, keys=self.count)
        return self.partial_path

    def _sync_and_close(self) -> None:
        if self._file.closed:
            return
        self._file.flush()
        os.fsync(self._file.fileno())
        self._file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if not self._file.closed:
            self._file.close()


class SpoolReader:
    """Replays a spool file as a lazy sequence of object keys"""

    def __init__(self, path: str):
        self.path = path

    def __iter__(self) -> Iterator[str]:
        with open(self.path, 'r', encoding='utf-8') as f:
            for line in f:
                key = line.strip()
                if key:
                    yield key
