"""Append-only log of keys whose transfer failed"""
import os
import threading
import structlog

logger = structlog.get_logger()


class FailureSink:
    """
    Records failed object keys, one per line, in a file opened in append mode.

    Every record is flushed so the file can be tailed while the run is going.
    The file is only fsync'd on close().
    """

    def __init__(self, path: str):
        self.path = path
        self.lock = threading.Lock()
        self.count = 0
        self._file = open(path, 'a', encoding='utf-8')

    def record(self, key: str) -> None:
        with self.lock:
            self._file.write(key + "\n")
            self._file.flush()
            self.count += 1

        logger.warning("failure_sink.recorded", key=key, path=self.path)

    def close(self) -> None:
        with self.lock:
            if self._file.closed:
                return
            self._file.flush()
            os.fsync(self._file.fileno())
            self._file.close()

        logger.info("failure_sink.closed", path=self.path, recorded=self.count)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
