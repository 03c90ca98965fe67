"""FastAPI dependencies wiring services to routes."""
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException

from exam_api.database import SessionLocal
from exam_api.errors import GenerationError
from exam_api.knowledge_base import KnowledgeBase, get_knowledge_base
from exam_api.services.ai import GeminiClient
from exam_api.services.blob_storage import LocalBlobStorage
from exam_api.services.test_storage import TestStorage


@lru_cache(maxsize=1)
def get_blob_storage() -> LocalBlobStorage:
    return LocalBlobStorage()


def get_test_storage(
    blobs: Annotated[LocalBlobStorage, Depends(get_blob_storage)],
) -> TestStorage:
    return TestStorage(SessionLocal, blobs)


@lru_cache(maxsize=1)
def _default_gemini_client() -> GeminiClient:
    return GeminiClient()


def get_gemini_client() -> GeminiClient:
    """Shared AI client; 503 when no API key is configured."""
    try:
        return _default_gemini_client()
    except GenerationError as exc:
        raise HTTPException(status_code=503, detail=exc.message) from exc


def get_kb() -> KnowledgeBase:
    return get_knowledge_base()


StorageDep = Annotated[TestStorage, Depends(get_test_storage)]
BlobsDep = Annotated[LocalBlobStorage, Depends(get_blob_storage)]
GeminiDep = Annotated[GeminiClient, Depends(get_gemini_client)]
KnowledgeDep = Annotated[KnowledgeBase, Depends(get_kb)]
