"""Qdrant implementation of vector database."""

import time
from typing import Any, Literal

from qdrant_client import AsyncQdrantClient, models

from media_pipeline.commons.infrastructure.blob.base import HealthStatus
from media_pipeline.commons.infrastructure.vectordb.base import (
    SearchResult,
    VectorDBBase,
    VectorPoint,
)

_DISTANCES = {
    "cosine": models.Distance.COSINE,
    "euclidean": models.Distance.EUCLID,
    "dot": models.Distance.DOT,
}

_RANGE_OPERATORS = {"$gt": "gt", "$gte": "gte", "$lt": "lt", "$lte": "lte"}


def build_filter(filters: dict[str, Any]) -> models.Filter:
    """Translate a dict filter into a Qdrant ``Filter``.

    Supports equality, ``$in`` and range operators.
    """
    conditions: list[models.Condition] = []
    for key, value in filters.items():
        if not isinstance(value, dict):
            conditions.append(
                models.FieldCondition(key=key, match=models.MatchValue(value=value))
            )
            continue
        bounds: dict[str, Any] = {}
        for op, operand in value.items():
            if op == "$in":
                conditions.append(
                    models.FieldCondition(key=key, match=models.MatchAny(any=list(operand)))
                )
            elif op in _RANGE_OPERATORS:
                bounds[_RANGE_OPERATORS[op]] = operand
            else:
                raise ValueError(f"Unsupported filter operator: {op}")
        if bounds:
            conditions.append(models.FieldCondition(key=key, range=models.Range(**bounds)))
    return models.Filter(must=conditions)


class QdrantVectorDB(VectorDBBase):
    """Qdrant implementation of vector database.

    Supports both local Qdrant and Qdrant Cloud.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6333,
        grpc_port: int = 6334,
        api_key: str | None = None,
        url: str | None = None,
        prefer_grpc: bool = False,
    ) -> None:
        """Initialize Qdrant client.

        Args:
            host: Qdrant server host.
            port: Qdrant HTTP port.
            grpc_port: Qdrant gRPC port.
            api_key: API key for Qdrant Cloud.
            url: Full URL (overrides host/port, for Qdrant Cloud).
            prefer_grpc: Use gRPC for operations.
        """
        if url:
            self._client = AsyncQdrantClient(
                url=url, api_key=api_key, prefer_grpc=prefer_grpc
            )
        else:
            self._client = AsyncQdrantClient(
                host=host,
                port=port,
                grpc_port=grpc_port,
                api_key=api_key,
                prefer_grpc=prefer_grpc,
            )
        self._target = url or f"{host}:{port}"

    async def create_collection(
        self,
        name: str,
        vector_size: int,
        distance_metric: Literal["cosine", "euclidean", "dot"] = "cosine",
        indexed_fields: list[str] | None = None,
    ) -> bool:
        """Create the collection and keyword indexes on the given payload fields."""
        if await self.collection_exists(name):
            return False

        await self._client.create_collection(
            collection_name=name,
            vectors_config=models.VectorParams(
                size=vector_size,
                distance=_DISTANCES[distance_metric],
            ),
        )
        for field_name in indexed_fields or []:
            await self._client.create_payload_index(
                collection_name=name,
                field_name=field_name,
                field_schema=models.PayloadSchemaType.KEYWORD,
            )
        return True

    async def collection_exists(self, name: str) -> bool:
        """Check if collection exists."""
        return bool(await self._client.collection_exists(collection_name=name))

    async def upsert(self, collection: str, points: list[VectorPoint]) -> int:
        """Insert or update vectors."""
        if not points:
            return 0

        await self._client.upsert(
            collection_name=collection,
            points=[
                models.PointStruct(id=p.id, vector=p.vector, payload=p.payload)
                for p in points
            ],
            wait=True,
        )
        return len(points)

    async def search(
        self,
        collection: str,
        query_vector: list[float],
        limit: int = 10,
        filters: dict[str, Any] | None = None,
        score_threshold: float | None = None,
    ) -> list[SearchResult]:
        """Search for similar vectors."""
        response = await self._client.query_points(
            collection_name=collection,
            query=query_vector,
            limit=limit,
            query_filter=build_filter(filters) if filters else None,
            score_threshold=score_threshold,
            with_payload=True,
        )
        return [
            SearchResult(
                id=str(point.id),
                score=point.score or 0.0,
                payload=point.payload or {},
            )
            for point in response.points
        ]

    async def scroll(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        batch_size: int = 256,
        with_vectors: bool = False,
    ) -> list[VectorPoint]:
        """Read every matching point, following Qdrant's page offsets."""
        qdrant_filter = build_filter(filters) if filters else None
        points: list[VectorPoint] = []
        offset: Any = None
        while True:
            records, offset = await self._client.scroll(
                collection_name=collection,
                scroll_filter=qdrant_filter,
                limit=batch_size,
                offset=offset,
                with_payload=True,
                with_vectors=with_vectors,
            )
            for record in records:
                vector = record.vector if isinstance(record.vector, list) else []
                points.append(
                    VectorPoint(
                        id=str(record.id),
                        vector=[float(v) for v in vector] if with_vectors else [],
                        payload=record.payload or {},
                    )
                )
            if offset is None:
                return points

    async def delete_by_filter(self, collection: str, filters: dict[str, Any]) -> int:
        """Delete vectors matching filter."""
        count_before = await self.count(collection, filters)
        if count_before == 0:
            return 0

        await self._client.delete(
            collection_name=collection,
            points_selector=models.FilterSelector(filter=build_filter(filters)),
            wait=True,
        )
        return count_before

    async def count(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
    ) -> int:
        """Count vectors in collection."""
        result = await self._client.count(
            collection_name=collection,
            count_filter=build_filter(filters) if filters else None,
            exact=True,
        )
        return int(result.count)

    async def health_check(self) -> HealthStatus:
        """Check service health."""
        start = time.perf_counter()
        try:
            await self._client.get_collections()
        except Exception as e:
            return HealthStatus(
                healthy=False,
                latency_ms=(time.perf_counter() - start) * 1000,
                message=f"Qdrant health check failed: {e}",
                details={"target": self._target, "error": str(e)},
            )
        return HealthStatus(
            healthy=True,
            latency_ms=(time.perf_counter() - start) * 1000,
            message="Qdrant is healthy",
            details={"target": self._target},
        )

    async def close(self) -> None:
        """Close the client connection."""
        await self._client.close()
