from docforensics.ocr.base import BaseOcrEngine
from docforensics.ocr.factory import OcrEngineFactory
from docforensics.ocr.vlm_engine import VlmOcrEngine

__all__ = ["BaseOcrEngine", "OcrEngineFactory", "VlmOcrEngine"]
