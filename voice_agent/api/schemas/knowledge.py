from datetime import datetime

from pydantic import BaseModel


class SearchResult(BaseModel):
    filename: str
    score: int
    snippet: str


class SearchResponse(BaseModel):
    query: str
    results: list[SearchResult]


class ReloadResponse(BaseModel):
    documents: int
    loaded_at: datetime
