"""
Client for the external metrics gateway and the best-effort task runner
that calls it.

Metrics placement mirrors the durable success flag of a healing result. It
is eventually consistent: calls run after the owning transaction commits, and
their failures are logged and recorded, never raised to the caller.
"""

import logging
import threading
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Deque, List, Optional, Set

import requests

from ..core.exceptions import MetricsGatewayError
from ..core.models import HealingResult, MetricsBucket

logger = logging.getLogger(__name__)


class MetricsGateway:
    """HTTP client for the remote metrics store."""

    def __init__(self, base_url: str, timeout: float = 5.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def upload_metrics(self, metrics: str, result: HealingResult, project: str, url: Optional[str]) -> None:
        """Upload the raw metrics payload of a healing, tagged with the used result."""
        self._post("/metrics", {
            "metrics": metrics,
            "healing_result": result.to_dict(),
            "project": project,
            "url": url
        })

    def move_metrics(self, source: MetricsBucket, target: MetricsBucket, result: HealingResult) -> None:
        """Move the telemetry of a result from one partition into another."""
        self._post("/metrics/move", {
            "source": source.value,
            "target": target.value,
            "healing_result": result.to_dict()
        })

    def _post(self, path: str, payload: dict) -> None:
        try:
            response = self.session.post(f"{self.base_url}{path}", json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise MetricsGatewayError(f"Metrics gateway call {path} failed: {e}") from e


@dataclass
class TaskFailure:
    """A best-effort task that raised."""
    operation: str
    error: str
    failed_at: datetime = field(default_factory=datetime.now)


class MetricsDispatcher:
    """Runs best-effort metrics calls on a small thread pool.

    Each task is fire-and-forget for the caller. A task that raises is logged
    at warning level and appended to ``failures``; nothing is propagated.
    """

    def __init__(self, max_workers: int = 2, failure_history: int = 100):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="metrics")
        self._lock = threading.Lock()
        self._pending: Set[Future] = set()
        self.failures: Deque[TaskFailure] = deque(maxlen=failure_history)

    def submit(self, operation: str, fn: Callable[..., Any], *args, **kwargs) -> Future:
        future = self._executor.submit(self._run, operation, fn, args, kwargs)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._on_done)
        return future

    def flush(self, timeout: Optional[float] = None) -> None:
        """Block until every task submitted so far has finished."""
        with self._lock:
            pending = list(self._pending)
        wait(pending, timeout=timeout)

    def recent_failures(self) -> List[TaskFailure]:
        with self._lock:
            return list(self.failures)

    def shutdown(self, wait_for_tasks: bool = True) -> None:
        self._executor.shutdown(wait=wait_for_tasks)

    def _run(self, operation: str, fn: Callable[..., Any], args: tuple, kwargs: dict) -> Any:
        # failures are recorded before the future resolves, so flush() observes them
        try:
            return fn(*args, **kwargs)
        except Exception as e:
            logger.warning(f"{operation} Error during metrics call: {e}")
            with self._lock:
                self.failures.append(TaskFailure(operation=operation, error=str(e)))
            return None

    def _on_done(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)
