"""Serves stored blobs (images, audio)."""
from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from exam_api.dependencies import BlobsDep

router = APIRouter(prefix="/api/blobs", tags=["blobs"])


@router.get("/{blob_path:path}")
def get_blob(blob_path: str, blobs: BlobsDep) -> FileResponse:
    try:
        file_path = blobs.path_for(blob_path)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid blob path")

    if not file_path.exists() or not file_path.is_file():
        raise HTTPException(status_code=404, detail="Blob not found")

    return FileResponse(file_path)
