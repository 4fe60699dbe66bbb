"""Threaded subnet scan coordinator and its event stream."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import closing
from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import threading
from typing import Callable, Iterator

from znetscan.errors import NoInterfaceFound, ScanInProgress

from .ip_utils import enumerate_subnet, local_ipv4_address, subnet_cidr
from .lan_mapper import probe_host
from .models import Device, ScanEvent, ScanSettings, ScanSummary

logger = logging.getLogger(__name__)

ProbeFn = Callable[..., "Device | None"]


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(slots=True)
class ScanCallbacks:
    """Consumer hooks; every hook is optional."""

    on_progress: Callable[[int], None] | None = None
    on_device_found: Callable[[Device], None] | None = None
    on_log: Callable[[str], None] | None = None
    on_scan_complete: Callable[[], None] | None = None
    on_fatal_error: Callable[[NoInterfaceFound], None] | None = None

    def log(self, message: str) -> None:
        logger.info(message)
        if self.on_log:
            self.on_log(message)


@dataclass(slots=True)
class ScanJob:
    """Background scan handle returned by :meth:`ScanCoordinator.start`."""

    _worker: threading.Thread
    summary: ScanSummary | None = None
    error: Exception | None = None

    @property
    def done(self) -> bool:
        return not self._worker.is_alive()

    def wait(self, timeout: float | None = None) -> bool:
        """Wait for the scan thread; returns ``True`` when it has finished."""
        self._worker.join(timeout)
        return self.done


class ScanCoordinator:
    """Fans one host probe per subnet address out to a worker pool.

    Results are consumed in submission order, so progress and discovery
    events follow ascending address order no matter which worker finishes
    first. A slow host delays the report of every host after it.

    A coordinator runs at most one scan at a time; each run starts from a
    fresh counter and a fresh pool. ``on_log`` may be called from worker
    threads.
    """

    def __init__(
        self,
        *,
        settings: ScanSettings | None = None,
        probe: ProbeFn = probe_host,
        local_address: Callable[[], str] = local_ipv4_address,
    ) -> None:
        self.settings = settings or ScanSettings()
        self._probe = probe
        self._local_address = local_address
        self._lock = threading.Lock()
        self._active = False

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._active

    def _claim(self) -> None:
        with self._lock:
            if self._active:
                raise ScanInProgress("A scan is already running")
            self._active = True

    def _release(self) -> None:
        with self._lock:
            self._active = False

    def _events(self, callbacks: ScanCallbacks, summary: ScanSummary) -> Iterator[ScanEvent]:
        local_ip = self._local_address()
        targets = enumerate_subnet(local_ip)
        summary.local_address = local_ip
        summary.subnet = subnet_cidr(local_ip)
        callbacks.log(f"Local IP: {local_ip}")
        callbacks.log(f"Scanning subnet: {summary.subnet}")

        settings = self.settings
        total = len(targets)
        completed = 0
        with ThreadPoolExecutor(max_workers=max(1, settings.max_workers), thread_name_prefix="host-probe") as pool:
            futures: list[Future] = [
                pool.submit(
                    self._probe,
                    host,
                    ports=settings.ports,
                    timeout=settings.timeout,
                    on_log=callbacks.log,
                )
                for host in targets
            ]
            for future in futures:
                try:
                    device = future.result()
                except Exception as exc:  # noqa: BLE001
                    callbacks.log(f"Error: {exc}")
                    device = None
                completed += 1
                summary.completed = completed
                yield ScanEvent(progress=completed * 100 // total, device=device)

    def iter_events(self, callbacks: ScanCallbacks | None = None) -> Iterator[ScanEvent]:
        """Run a scan, yielding one :class:`ScanEvent` per probed address.

        Raises :class:`NoInterfaceFound` before the first event when no
        usable interface exists.
        """
        self._claim()
        try:
            yield from self._events(callbacks or ScanCallbacks(), ScanSummary(started_at=_utc_now()))
        finally:
            self._release()

    def run(self, callbacks: ScanCallbacks | None = None) -> ScanSummary:
        """Run a full scan synchronously, reporting through ``callbacks``."""
        self._claim()
        try:
            return self._run(callbacks or ScanCallbacks())
        finally:
            self._release()

    def _run(self, callbacks: ScanCallbacks) -> ScanSummary:
        summary = ScanSummary(started_at=_utc_now())
        try:
            with closing(self._events(callbacks, summary)) as events:
                for event in events:
                    if event.device is not None:
                        summary.devices.append(event.device)
                        if callbacks.on_device_found:
                            callbacks.on_device_found(event.device)
                    if callbacks.on_progress:
                        callbacks.on_progress(event.progress)
        except NoInterfaceFound as exc:
            logger.error("Scan aborted: %s", exc)
            summary.error = str(exc)
            summary.finished_at = _utc_now()
            if callbacks.on_fatal_error:
                callbacks.on_fatal_error(exc)
            return summary

        summary.finished_at = _utc_now()
        if callbacks.on_scan_complete:
            callbacks.on_scan_complete()
        return summary

    def start(self, callbacks: ScanCallbacks | None = None) -> ScanJob:
        """Run :meth:`run` on a background thread."""
        self._claim()
        hooks = callbacks or ScanCallbacks()

        def worker() -> None:
            try:
                job.summary = self._run(hooks)
            except Exception as exc:  # noqa: BLE001
                job.error = exc
                logger.exception("Scan thread failed")
            finally:
                self._release()

        thread = threading.Thread(target=worker, daemon=True, name="scan-coordinator")
        job = ScanJob(_worker=thread)
        try:
            thread.start()
        except RuntimeError:
            self._release()
            raise
        return job
