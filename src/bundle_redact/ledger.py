"""Concurrency-safe audit trail of every redaction performed."""
from __future__ import annotations

import queue
import threading
from typing import Dict, List, Optional

import structlog

from .models import Redaction, RedactionList

logger = structlog.get_logger(__name__)

_SentinelType = object
_STOP = _SentinelType()


class RedactionLedger:
    """Accumulates :class:`Redaction` records indexed by redactor and by file.

    ``append`` never blocks on the indices: records are queued and applied by a
    dedicated consumer thread. ``flush`` is the barrier that waits until every
    record queued before the call has been applied. ``snapshot`` and ``reset``
    both flush first, so a snapshot reflects every append issued before it and
    a reset never races with appends issued before it. Appends issued
    concurrently with a snapshot or reset may land on either side of it.
    """

    def __init__(self) -> None:
        self._queue: queue.Queue[object] = queue.Queue()
        self._lock = threading.Lock()
        self._consumer_lock = threading.Lock()
        self._consumer: Optional[threading.Thread] = None
        self._by_redactor: Dict[str, List[Redaction]] = {}
        self._by_file: Dict[str, List[Redaction]] = {}

    def append(self, redaction: Redaction) -> None:
        self._ensure_consumer()
        self._queue.put(redaction)

    def flush(self) -> None:
        self._queue.join()

    def snapshot(self) -> RedactionList:
        self.flush()
        with self._lock:
            return RedactionList(
                by_redactor={name: list(entries) for name, entries in self._by_redactor.items()},
                by_file={path: list(entries) for path, entries in self._by_file.items()},
            )

    def reset(self) -> None:
        self.flush()
        with self._lock:
            self._by_redactor = {}
            self._by_file = {}
        logger.debug("ledger.reset")

    def close(self) -> None:
        with self._consumer_lock:
            consumer = self._consumer
            self._consumer = None
        if consumer is None:
            return
        self._queue.put(_STOP)
        consumer.join()

    def _ensure_consumer(self) -> None:
        if self._consumer is not None:
            return
        with self._consumer_lock:
            if self._consumer is None:
                consumer = threading.Thread(target=self._drain, name="redaction-ledger", daemon=True)
                consumer.start()
                self._consumer = consumer

    def _drain(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self._apply(item)  # type: ignore[arg-type]
            finally:
                self._queue.task_done()

    def _apply(self, redaction: Redaction) -> None:
        with self._lock:
            self._by_redactor.setdefault(redaction.redactor_name, []).append(redaction)
            self._by_file.setdefault(redaction.file, []).append(redaction)


_DEFAULT_LEDGER = RedactionLedger()


def get_default_ledger() -> RedactionLedger:
    """Return the process-wide ledger."""

    return _DEFAULT_LEDGER


def get_redaction_list() -> RedactionList:
    return _DEFAULT_LEDGER.snapshot()


def reset_redaction_list() -> None:
    _DEFAULT_LEDGER.reset()


__all__ = [
    "RedactionLedger",
    "get_default_ledger",
    "get_redaction_list",
    "reset_redaction_list",
]
