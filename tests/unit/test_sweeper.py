from unittest.mock import MagicMock

from docforensics.uploads.memory_store import MemoryChunkStore
from docforensics.worker.sweeper import ChunkSweeper


class TestChunkSweeper:
    def test_run_sweeps_each_cycle(self) -> None:
        store = MagicMock()
        store.sweep_expired.return_value = []
        ChunkSweeper(store, interval_seconds=0).run(max_cycles=3)
        assert store.sweep_expired.call_count == 3

    def test_sweep_once_returns_expired_ids(self) -> None:
        clock_now = [0.0]
        store = MemoryChunkStore(ttl_seconds=10, clock=lambda: clock_now[0])
        store.init_upload("u1", "a.pdf", 1, 1)
        clock_now[0] = 11.0
        assert ChunkSweeper(store, interval_seconds=60).sweep_once() == ["u1"]

    def test_store_error_is_retried_next_cycle(self) -> None:
        store = MagicMock()
        store.sweep_expired.side_effect = [Exception("db down"), ["u1"]]
        sweeper = ChunkSweeper(store, interval_seconds=0)
        assert sweeper.sweep_once() == []
        assert sweeper.sweep_once() == ["u1"]

    def test_start_and_stop_background_thread(self) -> None:
        store = MagicMock()
        store.sweep_expired.return_value = []
        sweeper = ChunkSweeper(store, interval_seconds=60)
        sweeper.start()
        sweeper.stop(timeout=5)
        assert store.sweep_expired.call_count >= 1
