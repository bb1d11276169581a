from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Iterator

from ..core.constants import DEFAULT_STORE_RETRIES
from ..core.exceptions import StoreError
from .model import ReconciliationResult, ScanRequest
from .service import ReconciliationEngine

logger = logging.getLogger(__name__)


@dataclass
class _UserLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class ScanDispatcher:
    """Run scans one at a time per user, retrying whole calls on store failures.

    Different users proceed concurrently; the engine stays stateless, the only
    state here is the per-user lock registry. A user's lock is dropped once no
    scan holds or waits on it.
    """

    def __init__(
        self,
        engine: ReconciliationEngine,
        *,
        retries: int = DEFAULT_STORE_RETRIES,
        backoff_seconds: float = 0.2,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._engine = engine
        self._retries = max(1, int(retries))
        self._backoff = float(backoff_seconds)
        self._sleep = sleep
        self._registry_lock = threading.Lock()
        self._user_locks: dict[str, _UserLock] = {}

    @property
    def tracked_users(self) -> int:
        with self._registry_lock:
            return len(self._user_locks)

    @contextmanager
    def _locked(self, user_id: str) -> Iterator[None]:
        with self._registry_lock:
            entry = self._user_locks.setdefault(user_id, _UserLock())
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._registry_lock:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._user_locks[user_id]

    def submit(self, scan: ScanRequest) -> ReconciliationResult:
        with self._locked(scan.user_id):
            attempt = 1
            while True:
                try:
                    return self._engine.reconcile(scan)
                except StoreError as e:
                    if attempt >= self._retries:
                        logger.error("scan for user %s failed after %d attempts: %s", scan.user_id, attempt, e)
                        raise
                    logger.warning("store error for user %s (attempt %d/%d): %s", scan.user_id, attempt, self._retries, e)
                    self._sleep(self._backoff * attempt)
                    attempt += 1
