"""Shared fixtures: in-memory providers and fake external services."""

import math
from copy import deepcopy
from pathlib import Path
from typing import Any, Literal

import pytest

from media_pipeline.application.repositories.chunks import TranscriptChunkRepository
from media_pipeline.application.repositories.jobs import JobRepository
from media_pipeline.application.repositories.media_entities import (
    MongoMediaEntityRepository,
)
from media_pipeline.commons.infrastructure.blob.base import HealthStatus
from media_pipeline.commons.infrastructure.blob.memory_provider import (
    InMemoryBlobStorage,
)
from media_pipeline.commons.infrastructure.documentdb.base import (
    DocumentDBBase,
    DuplicateDocumentError,
)
from media_pipeline.commons.infrastructure.vectordb.base import (
    SearchResult,
    VectorDBBase,
    VectorPoint,
)
from media_pipeline.domain.models.media import MediaEntity
from media_pipeline.infrastructure.embeddings.base import (
    EmbeddingResult,
    EmbeddingServiceBase,
)
from media_pipeline.infrastructure.media.base import MediaToolkitBase


def _matches(document: dict[str, Any], filters: dict[str, Any]) -> bool:
    for field, condition in filters.items():
        value = document.get(field)
        if isinstance(condition, dict):
            if "$in" in condition and value not in condition["$in"]:
                return False
        elif value != condition:
            return False
    return True


class InMemoryDocumentDB(DocumentDBBase):
    """Dict-backed document database supporting equality and ``$in``."""

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, dict[str, Any]]] = {}
        self.indexes: list[dict[str, Any]] = []

    def _docs(self, collection: str) -> dict[str, dict[str, Any]]:
        return self.collections.setdefault(collection, {})

    def _check_unique(self, collection: str, document: dict[str, Any]) -> None:
        for index in self.indexes:
            if index["collection"] != collection or not index["unique"]:
                continue
            partial = index["partial_filter"] or {}
            if not _matches(document, partial):
                continue
            key = [document.get(field) for field, _ in index["fields"]]
            for other in self._docs(collection).values():
                if other.get("id") == document.get("id"):
                    continue
                if _matches(other, partial) and [
                    other.get(field) for field, _ in index["fields"]
                ] == key:
                    raise DuplicateDocumentError(collection, index["name"] or "")

    async def insert(self, collection: str, document: dict[str, Any]) -> str:
        self._check_unique(collection, document)
        self._docs(collection)[document["id"]] = deepcopy(document)
        return document["id"]

    async def find_by_id(
        self, collection: str, document_id: str
    ) -> dict[str, Any] | None:
        document = self._docs(collection).get(document_id)
        return deepcopy(document) if document else None

    async def find(
        self,
        collection: str,
        filters: dict[str, Any],
        skip: int = 0,
        limit: int | None = None,
        sort: list[tuple[str, int]] | None = None,
    ) -> list[dict[str, Any]]:
        results = [
            deepcopy(document)
            for document in self._docs(collection).values()
            if _matches(document, filters)
        ]
        for field, direction in reversed(sort or []):
            results.sort(key=lambda d: d.get(field) or "", reverse=direction < 0)
        results = results[skip:]
        return results[:limit] if limit is not None else results

    async def find_one(
        self, collection: str, filters: dict[str, Any]
    ) -> dict[str, Any] | None:
        found = await self.find(collection, filters, limit=1)
        return found[0] if found else None

    async def update(
        self, collection: str, document_id: str, updates: dict[str, Any]
    ) -> bool:
        document = self._docs(collection).get(document_id)
        if document is None:
            return False
        document.update(deepcopy(updates))
        return True

    async def find_one_and_update(
        self,
        collection: str,
        filters: dict[str, Any],
        updates: dict[str, Any],
    ) -> dict[str, Any] | None:
        for document in self._docs(collection).values():
            if _matches(document, filters):
                document.update(deepcopy(updates))
                return deepcopy(document)
        return None

    async def delete(self, collection: str, document_id: str) -> bool:
        return self._docs(collection).pop(document_id, None) is not None

    async def delete_many(self, collection: str, filters: dict[str, Any]) -> int:
        docs = self._docs(collection)
        doomed = [key for key, document in docs.items() if _matches(document, filters)]
        for key in doomed:
            del docs[key]
        return len(doomed)

    async def count(
        self, collection: str, filters: dict[str, Any] | None = None
    ) -> int:
        return len(await self.find(collection, filters or {}))

    async def create_index(
        self,
        collection: str,
        fields: list[tuple[str, int]],
        unique: bool = False,
        name: str | None = None,
        partial_filter: dict[str, Any] | None = None,
    ) -> str:
        self.indexes.append(
            {
                "collection": collection,
                "fields": fields,
                "unique": unique,
                "name": name,
                "partial_filter": partial_filter,
            }
        )
        return name or "_".join(field for field, _ in fields)

    async def health_check(self) -> HealthStatus:
        return HealthStatus(healthy=True, latency_ms=0.0)


class InMemoryVectorDB(VectorDBBase):
    """Brute-force cosine vector store."""

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, VectorPoint]] = {}
        self.upsert_calls: list[int] = []

    async def create_collection(
        self,
        name: str,
        vector_size: int,
        distance_metric: Literal["cosine", "euclidean", "dot"] = "cosine",
        indexed_fields: list[str] | None = None,
    ) -> bool:
        if name in self.collections:
            return False
        self.collections[name] = {}
        return True

    async def collection_exists(self, name: str) -> bool:
        return name in self.collections

    async def upsert(self, collection: str, points: list[VectorPoint]) -> int:
        store = self.collections.setdefault(collection, {})
        for point in points:
            store[point.id] = point
        self.upsert_calls.append(len(points))
        return len(points)

    async def search(
        self,
        collection: str,
        query_vector: list[float],
        limit: int = 10,
        filters: dict[str, Any] | None = None,
        score_threshold: float | None = None,
    ) -> list[SearchResult]:
        def cosine(a: list[float], b: list[float]) -> float:
            norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
            return sum(x * y for x, y in zip(a, b, strict=True)) / norm if norm else 0.0

        scored = [
            SearchResult(id=p.id, score=cosine(query_vector, p.vector), payload=p.payload)
            for p in self.collections.get(collection, {}).values()
            if _matches(p.payload, filters or {})
        ]
        scored.sort(key=lambda result: result.score, reverse=True)
        return scored[:limit]

    async def scroll(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        batch_size: int = 256,
        with_vectors: bool = False,
    ) -> list[VectorPoint]:
        return [
            VectorPoint(
                id=p.id,
                vector=list(p.vector) if with_vectors else [],
                payload=dict(p.payload),
            )
            for p in self.collections.get(collection, {}).values()
            if _matches(p.payload, filters or {})
        ]

    async def delete_by_filter(self, collection: str, filters: dict[str, Any]) -> int:
        store = self.collections.get(collection, {})
        doomed = [key for key, p in store.items() if _matches(p.payload, filters)]
        for key in doomed:
            del store[key]
        return len(doomed)

    async def count(
        self, collection: str, filters: dict[str, Any] | None = None
    ) -> int:
        return len(await self.scroll(collection, filters))

    async def health_check(self) -> HealthStatus:
        return HealthStatus(healthy=True, latency_ms=0.0)


class FakeEmbeddingService(EmbeddingServiceBase):
    """Deterministic embeddings derived from letter frequencies."""

    def __init__(self, batch_size: int = 100) -> None:
        self._batch_size = batch_size
        self.calls: list[list[str]] = []

    @property
    def dimensions(self) -> int:
        return 4

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @staticmethod
    def vector_for(text: str) -> list[float]:
        lowered = text.lower()
        return [float(lowered.count(c)) + 0.01 for c in "aeio"]

    async def embed_text(self, text: str) -> EmbeddingResult:
        return (await self.embed_texts([text]))[0]

    async def embed_texts(self, texts: list[str]) -> list[EmbeddingResult]:
        self.calls.append(list(texts))
        return [
            EmbeddingResult(vector=self.vector_for(t), dimensions=4, model="fake")
            for t in texts
        ]


class FakeMediaToolkit(MediaToolkitBase):
    """Writes placeholder files instead of running ffmpeg."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.fail_qualities: set[str] = set()
        self.segment_count = 3

    async def extract_audio(self, video_path: Path, output_path: Path) -> Path:
        self.calls.append(("extract_audio", video_path))
        output_path.write_bytes(b"audio")
        return output_path

    async def split_audio(
        self, audio_path: Path, output_dir: Path, segment_seconds: int = 600
    ) -> list[Path]:
        self.calls.append(("split_audio", segment_seconds))
        paths = []
        for i in range(self.segment_count):
            path = output_dir / f"chunk-{i:03d}.mp3"
            path.write_bytes(b"segment")
            paths.append(path)
        return paths

    async def transcode(self, video_path: Path, output_path: Path, quality: str) -> Path:
        from media_pipeline.commons.errors import CommandFailedError

        self.calls.append(("transcode", quality))
        if quality in self.fail_qualities:
            raise CommandFailedError(["ffmpeg", "-i", str(video_path)], 1, "encoder error")
        output_path.write_bytes(f"video-{quality}".encode())
        return output_path

    async def extract_frame(
        self,
        video_path: Path,
        output_path: Path,
        seek_seconds: float = 1.0,
        width: int = 640,
    ) -> Path:
        self.calls.append(("extract_frame", (seek_seconds, width)))
        output_path.write_bytes(b"frame")
        return output_path

    async def to_progressive_jpeg(
        self, source_path: Path, output_path: Path, quality: int = 85
    ) -> Path:
        self.calls.append(("to_progressive_jpeg", quality))
        output_path.write_bytes(b"jpeg")
        return output_path


class WhitespaceTokenizer:
    """One token per whitespace-separated word."""

    def encode(self, text: str) -> list[int]:
        return [len(word) for word in text.split()]

    def decode(self, tokens: list[int]) -> str:
        return " ".join("x" * n for n in tokens)


class CharTokenizer:
    """One token per character."""

    def encode(self, text: str) -> list[int]:
        return [ord(c) for c in text]

    def decode(self, tokens: list[int]) -> str:
        return "".join(chr(t) for t in tokens)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def document_db() -> InMemoryDocumentDB:
    return InMemoryDocumentDB()


@pytest.fixture
def vector_db() -> InMemoryVectorDB:
    return InMemoryVectorDB()


@pytest.fixture
def blob_storage() -> InMemoryBlobStorage:
    return InMemoryBlobStorage()


@pytest.fixture
def job_repository(document_db: InMemoryDocumentDB) -> JobRepository:
    return JobRepository(document_db)


@pytest.fixture
def entity_repository(document_db: InMemoryDocumentDB) -> MongoMediaEntityRepository:
    return MongoMediaEntityRepository(document_db)


@pytest.fixture
def chunk_repository(vector_db: InMemoryVectorDB) -> TranscriptChunkRepository:
    return TranscriptChunkRepository(vector_db, dimensions=4)


@pytest.fixture
def embeddings() -> FakeEmbeddingService:
    return FakeEmbeddingService()


@pytest.fixture
def toolkit() -> FakeMediaToolkit:
    return FakeMediaToolkit()


@pytest.fixture
def whitespace_tokenizer() -> WhitespaceTokenizer:
    return WhitespaceTokenizer()


@pytest.fixture
def char_tokenizer() -> CharTokenizer:
    return CharTokenizer()


@pytest.fixture
def add_entity(document_db: InMemoryDocumentDB):
    """Insert a media entity document and return the model."""

    async def _add(**fields: Any) -> MediaEntity:
        entity = MediaEntity(**{"title": "Lesson", **fields})
        await document_db.insert("media_entities", entity.model_dump())
        return entity

    return _add
