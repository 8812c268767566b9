import asyncio
import logging
import re
from pathlib import Path

from docx import Document as DocxDocument
from pypdf import PdfReader

from voice_agent.models.document import Corpus, DocumentRecord, SearchHit

logger = logging.getLogger(__name__)

MIN_TOKEN_LENGTH = 4  # shorter tokens are treated as stop words
SUPPORTED_SUFFIXES = (".pdf", ".docx", ".txt")

_WHITESPACE_RE = re.compile(r"\s+")


def query_tokens(query: str) -> list[str]:
    """Distinct lower-cased whitespace tokens longer than three characters, in query order."""
    seen: list[str] = []
    for word in query.lower().split():
        if len(word) >= MIN_TOKEN_LENGTH and word not in seen:
            seen.append(word)
    return seen


def score_document(tokens: list[str], document: DocumentRecord) -> int:
    """One point per token found anywhere in the text, however often it occurs."""
    text = document.normalized_text.lower()
    return sum(1 for token in tokens if token in text)


def search(query: str, corpus: Corpus, limit: int = 3) -> list[SearchHit]:
    """Rank documents by keyword overlap; ties keep corpus order, zero scores are dropped."""
    tokens = query_tokens(query)
    if not tokens or limit <= 0:
        return []
    hits = [
        SearchHit(document=doc, score=score)
        for doc in corpus.documents
        if (score := score_document(tokens, doc)) > 0
    ]
    # sorted() is stable, so equal scores stay in corpus order
    hits = sorted(hits, key=lambda h: h.score, reverse=True)
    return hits[:limit]


def normalize_text(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def extract_text(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix == ".pdf":
        reader = PdfReader(str(path))
        return "\n".join(page.extract_text() or "" for page in reader.pages)
    if suffix == ".docx":
        doc = DocxDocument(str(path))
        return "\n".join(p.text for p in doc.paragraphs)
    if suffix == ".txt":
        return path.read_text(encoding="utf-8", errors="replace")
    return ""


def load_corpus(documents_dir: str | Path) -> Corpus:
    """Read every supported file in the directory (sorted by name) into a new snapshot."""
    directory = Path(documents_dir)
    if not directory.exists():
        directory.mkdir(parents=True, exist_ok=True)
        logger.info("Created empty documents directory %s", directory)
    records: list[DocumentRecord] = []
    for path in sorted(directory.iterdir()):
        if not path.is_file() or path.suffix.lower() not in SUPPORTED_SUFFIXES:
            continue
        try:
            text = normalize_text(extract_text(path))
        except Exception as e:
            logger.warning("Could not read %s: %s", path.name, e)
            continue
        if text:
            records.append(DocumentRecord(filename=path.name, normalized_text=text))
        else:
            logger.debug("Skipping %s (no text)", path.name)
    logger.info("Loaded %d docs from %s", len(records), directory)
    return Corpus(documents=tuple(records))


class CorpusStore:
    """Owns the current corpus snapshot.

    ``reload()`` builds a complete new snapshot and swaps it in with a single
    assignment; searches already running keep the snapshot they were given.
    """

    def __init__(self, documents_dir: str | Path, corpus: Corpus | None = None) -> None:
        self._documents_dir = Path(documents_dir)
        self._corpus = corpus if corpus is not None else Corpus()

    @property
    def current(self) -> Corpus:
        return self._corpus

    async def reload(self) -> Corpus:
        corpus = await asyncio.to_thread(load_corpus, self._documents_dir)
        self._corpus = corpus
        return corpus
