import logging

from fastapi import APIRouter, Depends, Query

from voice_agent.api.deps import container_dep
from voice_agent.api.schemas.knowledge import ReloadResponse, SearchResponse, SearchResult
from voice_agent.core.config import settings
from voice_agent.core.container import Container
from voice_agent.services.knowledge_service import search

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/knowledge", tags=["knowledge"])


@router.get("/search", response_model=SearchResponse)
async def search_documents(
    q: str = Query(..., min_length=1),
    limit: int = Query(settings.search_limit, ge=1, le=20),
    container: Container = Depends(container_dep),
) -> SearchResponse:
    hits = search(q, container.corpus.current, limit=limit)
    return SearchResponse(
        query=q,
        results=[
            SearchResult(
                filename=h.document.filename,
                score=h.score,
                snippet=h.document.normalized_text[: settings.snippet_chars],
            )
            for h in hits
        ],
    )


@router.post("/reload", response_model=ReloadResponse)
async def reload_documents(container: Container = Depends(container_dep)) -> ReloadResponse:
    """Re-read the documents directory into a fresh snapshot."""
    corpus = await container.corpus.reload()
    logger.info("Knowledge base reloaded: %d docs", len(corpus))
    return ReloadResponse(documents=len(corpus), loaded_at=corpus.loaded_at)
