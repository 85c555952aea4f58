import json
import time
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from docforensics.api.app import create_app
from docforensics.config.settings import Settings
from docforensics.indexing.builder import build_tree
from docforensics.indexing.serialization import serialize_tree
from docforensics.jobs.memory_store import MemoryJobStore
from docforensics.processor.processor import build_processor
from docforensics.uploads.memory_store import MemoryChunkStore
from docforensics.worker.dispatcher import JobDispatcher
from docforensics.worker.exceptions import QueueFullError
from docforensics.worker.job_runner import JobRunner

TREE_MARKDOWN = (
    "# Antecedentes\n"
    "El demandante presentó la demanda.\n"
    "## Hechos\n"
    + "Contrato firmado en marzo. " * 40
    + "\n# Fundamentos\nNormas aplicables.\n"
)


def _settings(**overrides: object) -> Settings:
    values: dict[str, object] = {
        "ocr_provider": "example",
        "max_chunk_size_bytes": 1024,
        "max_upload_size_bytes": 1024 * 1024,
        "worker_max_workers": 1,
        "worker_queue_size": 4,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def stores() -> tuple[MemoryChunkStore, MemoryJobStore]:
    return MemoryChunkStore(), MemoryJobStore()


@pytest.fixture
def client(stores):
    chunk_store, job_store = stores
    settings = _settings()
    processor = build_processor(settings, chunk_store, job_store)
    dispatcher = JobDispatcher(JobRunner(processor, job_store), max_workers=1, queue_size=4)
    app = create_app(settings, chunk_store, job_store, dispatcher)
    with TestClient(app) as test_client:
        yield test_client


def _wait_for_terminal(client: TestClient, job_id: str, timeout: float = 10.0) -> dict:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        body = client.get(f"/jobs/{job_id}").json()
        if body["status"] in ("completed", "failed"):
            return body
        time.sleep(0.05)
    raise AssertionError(f"Job {job_id} did not finish in {timeout}s")


def _post_chunk(client: TestClient, upload_id: str, index: int, total: int, data: bytes, size: int):
    return client.post(
        "/upload-chunk",
        files={"chunk": ("blob", data, "application/octet-stream")},
        data={
            "uploadId": upload_id,
            "chunkIndex": str(index),
            "totalChunks": str(total),
            "totalSize": str(size),
            "filename": "expediente.pdf",
        },
    )


class TestHealthEndpoint:
    def test_health_check(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "docforensics"}


class TestUploadChunkEndpoint:
    def test_reports_progress_and_completion(self, client: TestClient) -> None:
        first = _post_chunk(client, "u1", 1, 2, b"world", 10)
        assert first.status_code == 200
        assert first.json() == {
            "uploadId": "u1",
            "receivedChunks": 1,
            "totalChunks": 2,
            "complete": False,
        }
        second = _post_chunk(client, "u1", 0, 2, b"hello", 10)
        assert second.json()["complete"] is True

    def test_rejects_oversized_chunk(self, client: TestClient) -> None:
        response = _post_chunk(client, "u1", 0, 1, b"x" * 2048, 2048)
        assert response.status_code == 413
        assert "error" in response.json()

    def test_rejects_oversized_upload(self, client: TestClient) -> None:
        response = _post_chunk(client, "u1", 0, 1, b"x", 10 * 1024 * 1024)
        assert response.status_code == 413

    def test_rejects_index_out_of_range(self, client: TestClient) -> None:
        response = _post_chunk(client, "u1", 3, 2, b"x", 2)
        assert response.status_code == 400

    def test_received_bytes_cannot_exceed_declared_size(self, client: TestClient) -> None:
        statuses = [
            _post_chunk(client, "u1", index, 5, b"x" * 10, 1).status_code
            for index in range(5)
        ]
        assert statuses == [413] * 5

    def test_received_bytes_capped_by_upload_limit(self, stores) -> None:
        chunk_store, job_store = stores
        settings = _settings(max_chunk_size_bytes=10, max_upload_size_bytes=20)
        app = create_app(settings, chunk_store, job_store, MagicMock())
        with TestClient(app) as test_client:
            replies = [
                _post_chunk(test_client, "u1", index, 5, b"x" * 10, 20).status_code
                for index in range(5)
            ]
        assert replies == [200, 200, 413, 413, 413]
        assert chunk_store.get_info("u1").received_chunks == 2


class TestJobsEndpoint:
    def test_direct_file_job_completes(
        self, client: TestClient, multi_page_pdf_bytes: bytes
    ) -> None:
        response = client.post(
            "/jobs",
            files={"file": ("expediente.pdf", multi_page_pdf_bytes, "application/pdf")},
        )
        assert response.status_code == 202
        job_id = response.json()["jobId"]

        body = _wait_for_terminal(client, job_id)
        assert body["status"] == "completed", body["error"]
        result = body["result"]
        assert result["conversionId"] == job_id
        assert result["filename"] == "expediente.pdf"
        assert result["pageCount"] == 2
        assert "Pages 1-2" in result["markdown"]
        assert body["progress"] == {"total": 2, "current": 2}
        assert body["error"] is None

    def test_chunked_upload_job_with_ranges(
        self, client: TestClient, multi_page_pdf_bytes: bytes
    ) -> None:
        size = len(multi_page_pdf_bytes)
        # Fragments stay under the per-chunk limit.
        pieces = [multi_page_pdf_bytes[i:i + 1000] for i in range(0, size, 1000)]
        for index, piece in reversed(list(enumerate(pieces))):
            reply = _post_chunk(client, "up-1", index, len(pieces), piece, size)
            assert reply.status_code == 200

        ranges = json.dumps([{"name": "second", "from": 2, "to": 2}, {"from": 1, "to": 1}])
        response = client.post("/jobs", data={"uploadId": "up-1", "ranges": ranges})
        assert response.status_code == 202

        body = _wait_for_terminal(client, response.json()["jobId"])
        assert body["status"] == "completed", body["error"]
        extractions = body["result"]["extractions"]
        assert [e["name"] for e in extractions] == ["second", "range-2"]
        assert extractions[0]["from"] == 2
        assert "Pages 2-2" in extractions[0]["markdown"]
        assert body["result"]["filename"] == "expediente.pdf"

    def test_invalid_pdf_fails_job(self, client: TestClient) -> None:
        response = client.post(
            "/jobs", files={"file": ("broken.pdf", b"not a pdf", "application/pdf")}
        )
        assert response.status_code == 202
        body = _wait_for_terminal(client, response.json()["jobId"])
        assert body["status"] == "failed"
        assert body["error"]
        assert body["result"] is None

    def test_missing_file_returns_400(self, client: TestClient) -> None:
        response = client.post("/jobs", data={"filename": "x.pdf"})
        assert response.status_code == 400
        assert response.json() == {"error": "No file or uploadId provided"}

    def test_unknown_upload_returns_404(self, client: TestClient) -> None:
        response = client.post("/jobs", data={"uploadId": "missing"})
        assert response.status_code == 404

    def test_malformed_ranges_return_400(self, client: TestClient, sample_pdf_bytes: bytes) -> None:
        response = client.post(
            "/jobs",
            files={"file": ("a.pdf", sample_pdf_bytes, "application/pdf")},
            data={"ranges": "not json"},
        )
        assert response.status_code == 400

    def test_unknown_job_returns_404(self, client: TestClient) -> None:
        response = client.get("/jobs/does-not-exist")
        assert response.status_code == 404

    def test_queued_job_keeps_upload_past_ttl(self, stores, sample_pdf_bytes: bytes) -> None:
        chunk_store, job_store = stores
        settings = _settings(chunk_ttl_seconds=600, job_lease_seconds=900)
        app = create_app(settings, chunk_store, job_store, MagicMock())
        size = len(sample_pdf_bytes)
        with TestClient(app) as test_client:
            chunk_store.init_upload("up-1", "a.pdf", 1, size)
            chunk_store.add_chunk("up-1", 0, sample_pdf_bytes)
            response = test_client.post("/jobs", data={"uploadId": "up-1"})
        assert response.status_code == 202

        assert chunk_store.sweep_expired(now=time.monotonic() + 700) == []
        assert chunk_store.sweep_expired(now=time.monotonic() + 1600) == ["up-1"]

    def test_queue_full_returns_503(self, stores, sample_pdf_bytes: bytes) -> None:
        chunk_store, job_store = stores
        dispatcher = MagicMock()
        dispatcher.submit.side_effect = QueueFullError("Too many jobs in progress, try again later")
        app = create_app(_settings(), chunk_store, job_store, dispatcher)
        with TestClient(app) as test_client:
            response = test_client.post(
                "/jobs", files={"file": ("a.pdf", sample_pdf_bytes, "application/pdf")}
            )
        assert response.status_code == 503


class TestPageIndexEndpoints:
    @pytest.fixture
    def tree_serialized(self) -> str:
        return serialize_tree(build_tree(TREE_MARKDOWN, case_number="2024-12345"))

    def test_search_returns_matches(self, client: TestClient, tree_serialized: str) -> None:
        response = client.post(
            "/pageindex/search",
            json={"tree_serialized": tree_serialized, "query": "hechos"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["query"] == "hechos"
        assert body["results_count"] == 1
        hit = body["results"][0]
        assert hit["title"] == "Hechos"
        assert hit["level"] == 2
        assert hit["type"] == "subsection"
        assert hit["case_number"] == "2024-12345"
        assert len(hit["content"]) == 500

    def test_search_respects_max_results(self, client: TestClient, tree_serialized: str) -> None:
        response = client.post(
            "/pageindex/search",
            json={"tree_serialized": tree_serialized, "query": "a", "max_results": 1},
        )
        assert response.json()["results_count"] == 1

    def test_search_invalid_tree_returns_400(self, client: TestClient) -> None:
        response = client.post(
            "/pageindex/search", json={"tree_serialized": "{not json", "query": "x"}
        )
        assert response.status_code == 400
        assert "error" in response.json()

    def test_search_missing_query_is_rejected(
        self, client: TestClient, tree_serialized: str
    ) -> None:
        response = client.post("/pageindex/search", json={"tree_serialized": tree_serialized})
        assert response.status_code == 422

    def test_summary(self, client: TestClient, tree_serialized: str) -> None:
        response = client.post("/pageindex/summary", json={"tree_serialized": tree_serialized})
        assert response.status_code == 200
        body = response.json()
        assert "Case number: 2024-12345" in body["summary"]
        assert "- Antecedentes" in body["toc"]
        assert "  - Hechos" in body["toc"]


class TestDownloadExtraction:
    def test_returns_markdown_attachment(self, client: TestClient) -> None:
        response = client.post(
            "/download-extraction", json={"name": "demanda", "markdown": "# Demanda\n\ntexto"}
        )
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/markdown")
        assert response.headers["content-disposition"] == 'attachment; filename="demanda.md"'
        assert response.text == "# Demanda\n\ntexto"

    def test_strips_quotes_from_name(self, client: TestClient) -> None:
        response = client.post(
            "/download-extraction", json={"name": 'a"b', "markdown": "x"}
        )
        assert response.headers["content-disposition"] == 'attachment; filename="ab.md"'

    def test_empty_markdown_is_rejected(self, client: TestClient) -> None:
        response = client.post("/download-extraction", json={"name": "a", "markdown": ""})
        assert response.status_code == 422
