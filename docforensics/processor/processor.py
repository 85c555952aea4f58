from docforensics.config.settings import Settings
from docforensics.jobs.base import BaseJobStore
from docforensics.logging.logger import Log
from docforensics.ocr.factory import OcrEngineFactory
from docforensics.pdf.factory import PdfToolFactory
from docforensics.processor.exceptions import ProcessingFailedError, ProcessorError
from docforensics.processor.models import JobRequest
from docforensics.processor.pipeline import PipelineContext, PipelineStep
from docforensics.processor.steps import build_steps
from docforensics.uploads.base import BaseChunkStore
from docforensics.validation.validator import ForensicValidator


class Processor:
    """Runs one document through the conversion pipeline.

    Pipeline: resolve input -> count pages -> plan chunks -> OCR chunks ->
    extract ranges -> validate -> index -> complete.
    Errors propagate to the caller, which records them on the job.
    """

    def __init__(self, job_store: BaseJobStore, steps: list[PipelineStep]) -> None:
        self._job_store = job_store
        self._steps = steps

    def process(self, job_id: str, request: JobRequest) -> PipelineContext:
        Log.info(f"Processing job {job_id}", document=request.filename)
        self._job_store.mark_processing(job_id, "Initializing")
        context = PipelineContext(job_id=job_id, request=request)
        for step in self._steps:
            Log.debug(f"Job {job_id}: running {step.__class__.__name__}")
            try:
                context = step.run(context)
            except ProcessorError:
                raise
            except Exception as exc:
                raise ProcessingFailedError(str(exc) or exc.__class__.__name__) from exc
        return context


def build_processor(
    settings: Settings,
    chunk_store: BaseChunkStore,
    job_store: BaseJobStore,
) -> Processor:
    """Build a Processor with all required adapters."""
    pdf_tool = PdfToolFactory.create(settings)
    ocr_engine = OcrEngineFactory.create(settings)
    steps = build_steps(
        settings,
        chunk_store=chunk_store,
        job_store=job_store,
        pdf_tool=pdf_tool,
        ocr_engine=ocr_engine,
        validator=ForensicValidator(),
    )
    return Processor(job_store=job_store, steps=steps)
