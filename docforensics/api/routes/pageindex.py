from fastapi import APIRouter
from fastapi.responses import Response

from docforensics.api.schemas import (
    DownloadExtractionRequest,
    SearchRequest,
    SearchResponse,
    SummaryRequest,
    SummaryResponse,
)
from docforensics.api.services import search_page_index
from docforensics.indexing.serialization import deserialize_tree
from docforensics.indexing.summary import tree_summary

router = APIRouter(tags=["pageindex"])


@router.post("/pageindex/search", response_model=SearchResponse)
def search(body: SearchRequest) -> SearchResponse:
    """Find sections of a serialized page index matching ``query``."""
    results = search_page_index(body.tree_serialized, body.query, body.max_results)
    return SearchResponse(query=body.query, results_count=len(results), results=results)


@router.post("/pageindex/summary", response_model=SummaryResponse)
def summary(body: SummaryRequest) -> SummaryResponse:
    result = tree_summary(deserialize_tree(body.tree_serialized))
    return SummaryResponse(summary=result.summary, toc=result.toc)


@router.post("/download-extraction")
def download_extraction(body: DownloadExtractionRequest) -> Response:
    """Return an extraction's Markdown as a file attachment."""
    safe_name = body.name.replace('"', "").replace("\r", "").replace("\n", "")
    return Response(
        content=body.markdown.encode("utf-8"),
        media_type="text/markdown; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{safe_name}.md"'},
    )
