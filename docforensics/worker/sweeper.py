import threading

from docforensics.logging.logger import Log
from docforensics.uploads.base import BaseChunkStore


class ChunkSweeper:
    """Poll loop: sweep expired uploads -> wait -> repeat."""

    def __init__(self, chunk_store: BaseChunkStore, interval_seconds: float) -> None:
        self._chunk_store = chunk_store
        self._interval_seconds = interval_seconds
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def run(self, max_cycles: int | None = None) -> None:
        """Sweep until stopped.

        If max_cycles is set, stop after that many sweeps (for testing).
        """
        Log.info("Chunk sweeper started", interval=self._interval_seconds)
        cycles = 0
        try:
            while not self._stop_event.is_set():
                self.sweep_once()
                cycles += 1
                if max_cycles is not None and cycles >= max_cycles:
                    break
                self._stop_event.wait(self._interval_seconds)
        except KeyboardInterrupt:
            Log.info("Chunk sweeper shutting down gracefully")

    def sweep_once(self) -> list[str]:
        """Delete expired uploads. Store errors are logged and retried next cycle."""
        try:
            expired = self._chunk_store.sweep_expired()
        except Exception as exc:
            Log.warning(f"Chunk sweep failed, will retry: {exc}")
            return []
        if expired:
            Log.info(f"Swept {len(expired)} expired upload(s)")
        return expired

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self.run, name="chunk-sweeper", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
