"""Application services for job admission, processing, indexing and search."""

from media_pipeline.application.services.admission import JobAdmissionService
from media_pipeline.application.services.chunking import (
    TiktokenTokenizer,
    Tokenizer,
    TranscriptChunker,
)
from media_pipeline.application.services.handlers import (
    JobHandler,
    JobHandlerRegistry,
    MediaJobHandlers,
)
from media_pipeline.application.services.search import TranscriptSearchService
from media_pipeline.application.services.transcript import (
    SummaryService,
    TranscriptService,
)
from media_pipeline.application.services.vectorization import VectorizationService
from media_pipeline.application.services.worker import JobWorker

__all__ = [
    "JobAdmissionService",
    "JobHandler",
    "JobHandlerRegistry",
    "JobWorker",
    "MediaJobHandlers",
    "SummaryService",
    "TiktokenTokenizer",
    "Tokenizer",
    "TranscriptChunker",
    "TranscriptSearchService",
    "TranscriptService",
    "VectorizationService",
]
