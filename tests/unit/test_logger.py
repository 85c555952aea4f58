import logging

from docforensics.logging.logger import Log, _ContextFormatter


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        "docforensics", logging.INFO, __file__, 1, "Chunk received", None, None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestContextFormatter:
    def test_plain_message(self) -> None:
        formatter = _ContextFormatter("[%(levelname)s] %(message)s")
        assert formatter.format(_record()) == "[INFO] Chunk received"

    def test_appends_sorted_context(self) -> None:
        formatter = _ContextFormatter("%(message)s")
        line = formatter.format(_record(upload_id="abc", index=3))
        assert line == "Chunk received | index=3 upload_id=abc"


class TestLog:
    def test_kwargs_reach_record(self, caplog) -> None:  # type: ignore[no-untyped-def]
        with caplog.at_level(logging.INFO, logger="docforensics"):
            Log.info("Job queued", job_id="j1")
        assert caplog.records[-1].job_id == "j1"  # type: ignore[attr-defined]

    def test_configure_is_idempotent(self) -> None:
        Log.configure("debug")
        Log.configure("info")
        assert len(Log._logger.handlers) == 1
        assert Log._logger.level == logging.INFO
