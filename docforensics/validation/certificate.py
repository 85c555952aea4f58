import hashlib
from datetime import datetime, timezone

from docforensics.validation.models import Certificate, ValidationResult

ALGORITHM_VERSION = "2.0"


def sha256_hex(data: bytes | str) -> str:
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def generate_certificate(
    result: ValidationResult,
    engine_id: str,
    now: datetime | None = None,
) -> Certificate:
    """Build the forensic certificate for a validation result.

    ``integrity_hash`` mixes in the generation time, so two certificates for
    the same content differ; it is a freshness nonce, not a content digest.
    """
    issued = now or datetime.now(timezone.utc)
    epoch_ms = int(issued.timestamp() * 1000)
    return Certificate(
        hash_original=result.hash_original,
        hash_markdown=result.hash_markdown,
        integrity_hash=sha256_hex(f"{result.hash_original}{result.hash_markdown}{epoch_ms}"),
        signing_key_id=f"docforensics-{issued.year}",
        vlm_used=engine_id,
        algorithm_version=ALGORITHM_VERSION,
        timestamp=issued.isoformat(),
        validation_status=result.validation_status,
        integrity_verified=result.validation_status != "FAILED",
        anomalies_count=len(result.anomalies),
        structure_preserved=result.structure_preserved,
        legal_elements=result.legal_elements,
    )
