from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field


class DocumentRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    filename: str
    normalized_text: str


class Corpus(BaseModel):
    """Immutable snapshot of the loaded documents."""

    model_config = ConfigDict(frozen=True)

    documents: tuple[DocumentRecord, ...] = ()
    loaded_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def __len__(self) -> int:
        return len(self.documents)


class SearchHit(BaseModel):
    model_config = ConfigDict(frozen=True)

    document: DocumentRecord
    score: int
