"""
Document pipeline orchestrator.

Coordinates parsing, chunking, embedding and the optional vector upsert
for one document at a time. Failures are reported per document; a batch
never stops because one document failed.

Dependencies: All task modules, boundary.vdb
System role: Ingestion pipeline orchestration (coordinates only)
"""

import logging
import time
import uuid

from knowledge_assistant.boundary.vdb.vector_schemas import VectorMetadata, VectorRecord
from knowledge_assistant.boundary.vdb.vector_store_client import VectorIndex
from knowledge_assistant.core.document_processing.tasks import (
    ChunkingTask,
    DocumentParser,
    EmbeddingBatcher,
)
from knowledge_assistant.core.exceptions import (
    EmbeddingFailedError,
    KnowledgeAssistantException,
    ValidationError,
    VectorStoreError,
)
from knowledge_assistant.models.chunk import KnowledgeChunk
from knowledge_assistant.models.document import SourceFormat
from knowledge_assistant.models.ingestion import (
    IngestionRequest,
    IngestionResult,
    IngestionStatus,
)
from knowledge_assistant.observability.log_utils import (
    log_exception_with_context,
    log_with_context,
)

logger = logging.getLogger(__name__)


class DocumentPipeline:
    """Orchestrate document ingestion: parse -> chunk -> embed -> upsert."""

    def __init__(
        self,
        parser: DocumentParser,
        chunker: ChunkingTask,
        batcher: EmbeddingBatcher,
        vector_index: VectorIndex | None = None,
    ) -> None:
        """
        Initialize pipeline with its stages.

        Args:
            parser: Document parser
            chunker: Chunking task
            batcher: Embedding batcher
            vector_index: Index to upsert into; results only carry vectors if None
        """
        self._parser = parser
        self._chunker = chunker
        self._batcher = batcher
        self._vector_index = vector_index

    async def process(
        self,
        data: bytes,
        declared_format: SourceFormat | str,
        sector_id: str,
        source_id: str | None = None,
        timeout: float | None = None,
    ) -> IngestionResult:
        """
        Process one document through the full pipeline.

        Vectors are upserted only after every chunk embedded successfully.

        Args:
            data: Raw document bytes
            declared_format: Declared document format
            sector_id: Sector the document is indexed under
            source_id: Source identifier (generated if None)
            timeout: Optional embedding deadline in seconds

        Returns:
            IngestionResult: completed with chunks and embeddings, or failed
            with the error message and type
        """
        start_time = time.perf_counter()
        doc_id = source_id or str(uuid.uuid4())
        content_size = 0
        stage = "parse"

        try:
            if not sector_id or not sector_id.strip():
                raise ValidationError("sector_id cannot be blank", field="sector_id")

            parsed = self._parser.parse(data, declared_format, document_id=doc_id)
            content_size = len(parsed.content)

            stage = "chunk"
            chunks = self._chunker.chunk(parsed.content)

            stage = "embed"
            embeddings = await self._batcher.embed_many(
                [chunk.content for chunk in chunks],
                timeout=timeout,
            )
            if len(embeddings) != len(chunks):
                raise EmbeddingFailedError(
                    f"Expected {len(chunks)} embeddings, got {len(embeddings)}",
                    details={"document_id": doc_id},
                )

            if self._vector_index is not None:
                stage = "upsert"
                await self._upsert(doc_id, sector_id, chunks, embeddings)

        except KnowledgeAssistantException as e:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            log_exception_with_context(
                logger,
                f"{__name__}:process - Document ingestion failed",
                e,
                level=logging.WARNING,
                document_id=doc_id,
                sector_id=sector_id,
                stage=stage,
            )
            return IngestionResult(
                document_id=doc_id,
                status=IngestionStatus.FAILED,
                content_size=content_size,
                processing_time_ms=elapsed_ms,
                error=e.message,
                error_type=type(e).__name__,
            )

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        log_with_context(
            logger,
            logging.INFO,
            f"{__name__}:process - Document ingested",
            document_id=doc_id,
            sector_id=sector_id,
            chunk_count=len(chunks),
            processing_time_ms=round(elapsed_ms, 2),
        )
        return IngestionResult(
            document_id=doc_id,
            status=IngestionStatus.COMPLETED,
            chunk_count=len(chunks),
            content_size=content_size,
            processing_time_ms=elapsed_ms,
            chunks=chunks,
            embeddings=embeddings,
        )

    async def process_batch(
        self,
        documents: list[IngestionRequest],
        timeout: float | None = None,
    ) -> list[IngestionResult]:
        """
        Process multiple documents.

        Args:
            documents: Documents to ingest

        Returns:
            list[IngestionResult]: One result per document, in input order
        """
        results = []
        for document in documents:
            results.append(
                await self.process(
                    document.data,
                    document.declared_format,
                    document.sector_id,
                    source_id=document.source_id,
                    timeout=timeout,
                )
            )

        failed = sum(1 for result in results if not result.succeeded)
        logger.info(
            f"{__name__}:process_batch - Processed {len(results)} documents ({failed} failed)"
        )
        return results

    async def delete_source(self, source_id: str, sector_id: str) -> int:
        """
        Remove every vector of a source from the index.

        Raises:
            VectorStoreError: When no index is configured or deletion fails
        """
        if self._vector_index is None:
            raise VectorStoreError("No vector index configured", operation="delete")
        try:
            removed = await self._vector_index.delete_by_source(source_id, sector_id)
        except VectorStoreError:
            raise
        except Exception as e:
            raise VectorStoreError(
                f"Failed to delete vectors: {e}",
                operation="delete",
                details={"source_id": source_id, "sector_id": sector_id},
            ) from e
        logger.info(
            f"{__name__}:delete_source - Removed {removed} vectors for source {source_id}"
        )
        return removed

    async def _upsert(
        self,
        source_id: str,
        sector_id: str,
        chunks: list[KnowledgeChunk],
        embeddings: list[list[float]],
    ) -> None:
        records = [
            VectorRecord(
                id=VectorRecord.make_id(source_id, chunk.position),
                values=embedding,
                payload=VectorMetadata(
                    source_id=source_id,
                    sector_id=sector_id,
                    content=chunk.content,
                    position=chunk.position,
                    token_count=chunk.token_count,
                    start_index=chunk.start_index,
                    end_index=chunk.end_index,
                ).model_dump(),
            )
            for chunk, embedding in zip(chunks, embeddings)
        ]
        try:
            await self._vector_index.upsert(sector_id, records)
        except VectorStoreError:
            raise
        except Exception as e:
            raise VectorStoreError(
                f"Failed to upsert vectors: {e}",
                operation="upsert",
                details={"source_id": source_id, "vector_count": len(records)},
            ) from e
