from pathlib import Path

from docforensics.ocr.exceptions import ExternalServiceError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_prompt_template(path: Path | None = None) -> str:
    """Load the OCR prompt template from a file.

    Args:
        path: Path to the prompt template file.
              Defaults to the bundled ocr_prompt.txt.

    Returns:
        The raw template string with ``{first_page}`` and ``{last_page}``
        placeholders.

    Raises:
        ExternalServiceError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / "ocr_prompt.txt"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ExternalServiceError(f"Failed to load OCR prompt template: {exc}") from exc
