import asyncio
import time
from pathlib import Path
from typing import Awaitable, Callable, Iterable

from ..logger import get_logger

logger = get_logger(__name__)


class RetentionScheduler:
    """Delete served artifacts after a retention delay.

    Every scheduled deletion is an asyncio task owned by the scheduler, so
    `stop()` cancels whatever is still pending when the app shuts down. With
    `artifact_ttl` set, `start()` also launches a sweeper that periodically
    removes files older than the TTL from `sweep_dirs`, which catches
    artifacts that were never downloaded and uploads left behind by failed
    conversions.

    `sleep` and `clock` are injectable so tests can fast-forward time.
    """

    def __init__(
        self,
        delay: float,
        *,
        sweep_dirs: Iterable[Path] = (),
        artifact_ttl: float | None = None,
        sweep_interval: float = 60.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._delay = delay
        self._sweep_dirs = [Path(d) for d in sweep_dirs]
        self._artifact_ttl = artifact_ttl
        self._sweep_interval = sweep_interval
        self._sleep = sleep
        self._clock = clock
        self._pending: dict[Path, asyncio.Task] = {}
        self._sweeper: asyncio.Task | None = None

    @property
    def delay(self) -> float:
        return self._delay

    def pending(self) -> list[Path]:
        return [p for p, t in self._pending.items() if not t.done()]

    def is_scheduled(self, path: Path) -> bool:
        task = self._pending.get(path)
        return task is not None and not task.done()

    def schedule(self, path: Path) -> bool:
        """Schedule deletion of `path` after the retention delay.

        Only the first call for a path starts the clock; calls made while a
        deletion is pending return False and leave the deadline unchanged.
        Must be called from a running event loop.
        """
        if self.is_scheduled(path):
            return False
        task = asyncio.create_task(self._remove_later(path), name=f"retention:{path.name}")
        self._pending[path] = task

        def _forget(done: asyncio.Task) -> None:
            if self._pending.get(path) is done:
                del self._pending[path]

        task.add_done_callback(_forget)
        logger.info("Scheduled deletion of %s in %.0fs", path.name, self._delay)
        return True

    async def _remove_later(self, path: Path) -> None:
        await self._sleep(self._delay)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.debug("Artifact %s already gone", path.name)
            return
        except OSError:
            logger.exception("Failed to delete artifact %s", path)
            return
        logger.info("Deleted artifact %s after retention delay", path.name)

    def sweep(self) -> list[Path]:
        """Remove files older than the TTL from the sweep directories."""
        if self._artifact_ttl is None:
            return []
        cutoff = self._clock() - self._artifact_ttl
        removed: list[Path] = []
        for d in self._sweep_dirs:
            if not d.is_dir():
                continue
            for entry in d.iterdir():
                try:
                    if not entry.is_file() or entry.stat().st_mtime > cutoff:
                        continue
                    entry.unlink()
                except FileNotFoundError:
                    continue
                removed.append(entry)
                logger.info("Swept expired file %s", entry)
        return removed

    async def _sweep_loop(self) -> None:
        while True:
            await self._sleep(self._sweep_interval)
            try:
                self.sweep()
            except OSError:
                logger.exception("Sweep of %s failed", ", ".join(str(d) for d in self._sweep_dirs))

    async def start(self) -> None:
        if self._artifact_ttl is not None and self._sweeper is None:
            self._sweeper = asyncio.create_task(self._sweep_loop(), name="retention-sweeper")
            logger.info(
                "Sweeper started: ttl=%.0fs interval=%.0fs", self._artifact_ttl, self._sweep_interval
            )

    async def stop(self) -> None:
        tasks = [t for t in self._pending.values() if not t.done()]
        if self._sweeper is not None:
            tasks.append(self._sweeper)
            self._sweeper = None
        for t in tasks:
            t.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info("Cancelled %d retention task(s)", len(tasks))
        self._pending.clear()
