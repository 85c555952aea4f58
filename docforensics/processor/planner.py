"""Partitions a document's pages into OCR sub-ranges under a payload limit."""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class ChunkPlanEntry:
    start_page: int
    end_page: int
    page_count: int

    def to_dict(self) -> dict[str, int]:
        return {
            "startPage": self.start_page,
            "endPage": self.end_page,
            "pageCount": self.page_count,
        }


def estimate_bytes_per_page(pdf_size: int, total_pages: int) -> float:
    """Estimate the base64 payload size of one page of the document."""
    if total_pages < 1:
        raise ValueError(f"total_pages must be >= 1, got {total_pages}")
    return math.ceil(pdf_size * 4 / 3) / total_pages


def plan_chunks(
    total_pages: int,
    size_threshold_bytes: int,
    estimated_bytes_per_page: float,
    max_pages_per_chunk: int | None = None,
) -> list[ChunkPlanEntry]:
    """Split ``[1, total_pages]`` into consecutive groups.

    Every page appears in exactly one group and every group holds at least
    one page. A group's estimated size stays within the threshold unless a
    single page alone exceeds it; pages are never split further.
    """
    if total_pages < 1:
        raise ValueError(f"total_pages must be >= 1, got {total_pages}")
    if size_threshold_bytes <= 0:
        raise ValueError(f"size_threshold_bytes must be positive, got {size_threshold_bytes}")
    if max_pages_per_chunk is not None and max_pages_per_chunk < 1:
        raise ValueError(f"max_pages_per_chunk must be >= 1, got {max_pages_per_chunk}")

    bytes_per_page = max(0.0, estimated_bytes_per_page)
    fits_whole = total_pages * bytes_per_page <= size_threshold_bytes
    within_cap = max_pages_per_chunk is None or total_pages <= max_pages_per_chunk
    if fits_whole and within_cap:
        return [ChunkPlanEntry(1, total_pages, total_pages)]

    if bytes_per_page > 0:
        group_size = max(1, math.floor(size_threshold_bytes / bytes_per_page))
        # Float division can round up across the boundary.
        while group_size > 1 and group_size * bytes_per_page > size_threshold_bytes:
            group_size -= 1
    else:
        group_size = total_pages
    if max_pages_per_chunk is not None:
        group_size = min(group_size, max_pages_per_chunk)

    entries: list[ChunkPlanEntry] = []
    for start in range(1, total_pages + 1, group_size):
        end = min(start + group_size - 1, total_pages)
        entries.append(ChunkPlanEntry(start, end, end - start + 1))
    return entries
