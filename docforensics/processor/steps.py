import time
from concurrent.futures import ThreadPoolExecutor

from docforensics.config.settings import Settings
from docforensics.indexing.builder import build_tree
from docforensics.jobs.base import BaseJobStore
from docforensics.logging.logger import Log
from docforensics.ocr.base import BaseOcrEngine
from docforensics.pdf.base import BasePdfTool, clamp_range
from docforensics.pdf.exceptions import PdfProcessingError
from docforensics.processor.exceptions import FileTooLargeError, NoFileProvidedError
from docforensics.processor.models import ExtractionRange, ExtractionResult
from docforensics.processor.pipeline import PipelineContext, PipelineStep
from docforensics.processor.planner import estimate_bytes_per_page, plan_chunks
from docforensics.uploads.base import BaseChunkStore
from docforensics.validation.certificate import generate_certificate
from docforensics.validation.validator import ForensicValidator, validation_score


class ResolveInputStep(PipelineStep):
    def __init__(
        self,
        chunk_store: BaseChunkStore,
        job_store: BaseJobStore,
        max_file_size_bytes: int,
    ) -> None:
        self._chunk_store = chunk_store
        self._job_store = job_store
        self._max_file_size_bytes = max_file_size_bytes

    def run(self, context: PipelineContext) -> PipelineContext:
        request = context.request
        for extraction_range in request.ranges:
            extraction_range.validate()
        if request.file_bytes is not None:
            raw_bytes = request.file_bytes
        elif request.upload_id:
            self._job_store.update_progress(context.job_id, step="Reassembling Chunks")
            raw_bytes = self._chunk_store.assemble(request.upload_id)
            Log.info(
                f"Job {context.job_id}: reassembled {len(raw_bytes)} bytes",
                upload_id=request.upload_id,
            )
        else:
            raise NoFileProvidedError("No file or uploadId provided")

        if len(raw_bytes) > self._max_file_size_bytes:
            raise FileTooLargeError(
                f"File size {len(raw_bytes)} exceeds limit of {self._max_file_size_bytes} bytes"
            )
        context.raw_bytes = raw_bytes
        return context


class CountPagesStep(PipelineStep):
    def __init__(self, pdf_tool: BasePdfTool, job_store: BaseJobStore) -> None:
        self._pdf_tool = pdf_tool
        self._job_store = job_store

    def run(self, context: PipelineContext) -> PipelineContext:
        self._job_store.update_progress(context.job_id, step="Analyzing PDF")
        total_pages = self._pdf_tool.page_count(context.raw_bytes)
        if total_pages < 1:
            raise PdfProcessingError("Document has no pages")
        context.total_pages = total_pages
        self._job_store.update_progress(context.job_id, total_pages=total_pages)
        Log.info(f"Job {context.job_id}: document has {total_pages} pages")
        return context


class PlanChunksStep(PipelineStep):
    def __init__(self, size_threshold_bytes: int, max_pages_per_chunk: int | None) -> None:
        self._size_threshold_bytes = size_threshold_bytes
        self._max_pages_per_chunk = max_pages_per_chunk

    def run(self, context: PipelineContext) -> PipelineContext:
        bytes_per_page = estimate_bytes_per_page(len(context.raw_bytes), context.total_pages)
        context.plan = plan_chunks(
            context.total_pages,
            self._size_threshold_bytes,
            bytes_per_page,
            self._max_pages_per_chunk,
        )
        Log.info(
            f"Job {context.job_id}: planned {len(context.plan)} OCR chunk(s)",
            bytes_per_page=round(bytes_per_page),
        )
        return context


class OcrChunksStep(PipelineStep):
    """Sends each planned page group to OCR in order and joins the Markdown."""

    def __init__(
        self,
        pdf_tool: BasePdfTool,
        ocr_engine: BaseOcrEngine,
        job_store: BaseJobStore,
    ) -> None:
        self._pdf_tool = pdf_tool
        self._ocr_engine = ocr_engine
        self._job_store = job_store

    def run(self, context: PipelineContext) -> PipelineContext:
        total = len(context.plan)
        parts: list[str] = []
        for number, entry in enumerate(context.plan, start=1):
            step = f"OCR Chunk {number}/{total} (Pages {entry.start_page}-{entry.end_page})"
            self._job_store.update_progress(context.job_id, step=step)
            if total > 1:
                payload = self._pdf_tool.extract_range(
                    context.raw_bytes, entry.start_page, entry.end_page
                )
            else:
                payload = context.raw_bytes
            Log.info(f"Job {context.job_id}: {step}", payload_bytes=len(payload))
            parts.append(
                self._ocr_engine.extract_markdown(
                    payload, first_page=entry.start_page, last_page=entry.end_page
                )
            )
            self._job_store.update_progress(context.job_id, processed_pages=entry.end_page)
        context.markdown = "\n\n".join(parts)
        return context


class ExtractRangesStep(PipelineStep):
    """OCRs each requested range on its own; results keep request order."""

    def __init__(
        self,
        pdf_tool: BasePdfTool,
        ocr_engine: BaseOcrEngine,
        job_store: BaseJobStore,
        concurrency: int,
    ) -> None:
        self._pdf_tool = pdf_tool
        self._ocr_engine = ocr_engine
        self._job_store = job_store
        self._concurrency = max(1, concurrency)

    def run(self, context: PipelineContext) -> PipelineContext:
        ranges = context.request.ranges
        if not ranges:
            return context
        self._job_store.update_progress(
            context.job_id, step=f"Extracting {len(ranges)} Range(s)"
        )
        workers = min(self._concurrency, len(ranges))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="range") as executor:
            context.extractions = list(
                executor.map(lambda r: self._extract(context, r), ranges)
            )
        return context

    def _extract(
        self, context: PipelineContext, extraction_range: ExtractionRange
    ) -> ExtractionResult:
        clamped = clamp_range(
            extraction_range.from_page, extraction_range.to_page, context.total_pages
        )
        if clamped is None:
            raise PdfProcessingError(
                f"Range '{extraction_range.name}' lies outside the document "
                f"({context.total_pages} pages)"
            )
        first, last = clamped
        payload = self._pdf_tool.extract_range(context.raw_bytes, first, last)
        Log.info(
            f"Job {context.job_id}: extracting range '{extraction_range.name}' "
            f"(Pages {first}-{last})"
        )
        markdown = self._ocr_engine.extract_markdown(payload, first_page=first, last_page=last)
        return ExtractionResult(
            name=extraction_range.name,
            from_page=extraction_range.from_page,
            to_page=extraction_range.to_page,
            markdown=markdown,
        )


class ValidateStep(PipelineStep):
    def __init__(
        self,
        validator: ForensicValidator,
        ocr_engine: BaseOcrEngine,
        job_store: BaseJobStore,
    ) -> None:
        self._validator = validator
        self._ocr_engine = ocr_engine
        self._job_store = job_store

    def run(self, context: PipelineContext) -> PipelineContext:
        self._job_store.update_progress(context.job_id, step="Validating")
        context.validation = self._validator.validate(context.markdown, context.raw_bytes)
        context.certificate = generate_certificate(
            context.validation, self._ocr_engine.engine_id
        )
        return context


class IndexStep(PipelineStep):
    def __init__(self, job_store: BaseJobStore) -> None:
        self._job_store = job_store

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.validation is None:
            raise ValueError("PipelineContext.validation must be set before indexing")
        self._job_store.update_progress(context.job_id, step="Indexing")
        legal = context.validation.legal_elements
        context.tree = build_tree(
            context.validation.cleaned_markdown,
            case_number=legal.case_number,
            court=legal.court,
        )
        Log.info(
            f"Job {context.job_id}: built page index",
            sections=context.tree.metadata.total_sections,
            depth=context.tree.metadata.depth,
        )
        return context


class CompleteStep(PipelineStep):
    def __init__(self, job_store: BaseJobStore, chunk_store: BaseChunkStore) -> None:
        self._job_store = job_store
        self._chunk_store = chunk_store

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.validation is None or context.certificate is None or context.tree is None:
            raise ValueError("PipelineContext is missing validation, certificate or tree")
        validation = context.validation
        context.result_data = {
            "conversionId": context.job_id,
            "filename": context.request.filename,
            "markdown": validation.cleaned_markdown,
            "extractions": [e.to_dict() for e in context.extractions],
            "certificate": context.certificate.summary(),
            "anomalies": validation.anomalies_payload(),
            "validationStatus": validation.validation_status,
            "validationScore": validation_score(validation.anomalies),
            "pageIndexTree": context.tree.to_dict(),
            "pageCount": context.total_pages,
            "processingTime": int((time.monotonic() - context.started_at) * 1000),
        }
        self._job_store.mark_completed(context.job_id, context.result_data)
        Log.info(
            f"Job {context.job_id} completed",
            status=validation.validation_status,
            pages=context.total_pages,
        )
        if context.request.upload_id:
            self._discard_upload(context.request.upload_id)
        return context

    def _discard_upload(self, upload_id: str) -> None:
        try:
            self._chunk_store.delete(upload_id)
        except Exception as exc:
            Log.warning(f"Could not discard upload after completion: {exc}", upload_id=upload_id)


def build_steps(
    settings: Settings,
    chunk_store: BaseChunkStore,
    job_store: BaseJobStore,
    pdf_tool: BasePdfTool,
    ocr_engine: BaseOcrEngine,
    validator: ForensicValidator,
) -> list[PipelineStep]:
    return [
        ResolveInputStep(chunk_store, job_store, settings.max_file_size_bytes),
        CountPagesStep(pdf_tool, job_store),
        PlanChunksStep(settings.ocr_size_threshold_bytes, settings.ocr_max_pages_per_chunk),
        OcrChunksStep(pdf_tool, ocr_engine, job_store),
        ExtractRangesStep(pdf_tool, ocr_engine, job_store, settings.extraction_range_concurrency),
        ValidateStep(validator, ocr_engine, job_store),
        IndexStep(job_store),
        CompleteStep(job_store, chunk_store),
    ]
