"""Test management endpoints."""
from fastapi import APIRouter, HTTPException, Response

from exam_api.dependencies import BlobsDep, StorageDep
from exam_api.models.api import DeleteResponse, TestSummary
from exam_api.models.document import Test
from exam_api.models.preview import TestPreview
from exam_api.services.docx_export import export_test_docx
from exam_api.services.preview_service import build_preview
from exam_api.services.test_storage import TestStorage
from exam_api.utils import validate_id

router = APIRouter(prefix="/api/tests", tags=["tests"])

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def _load_test(storage: TestStorage, test_id: str) -> Test:
    test = storage.get_by_id(validate_id("test_id", test_id))
    if test is None:
        raise HTTPException(status_code=404, detail="Test not found")
    return test


def _dump(test: Test) -> dict[str, object]:
    return test.to_document()


@router.get("")
def list_tests(storage: StorageDep) -> list[dict[str, object]]:
    """List saved tests, newest first."""
    return [
        TestSummary.from_test(test).model_dump(mode="json", by_alias=True)
        for test in storage.get_all()
    ]


@router.post("", status_code=201)
def create_test(test: Test, storage: StorageDep) -> dict[str, object]:
    """Save a new test; inline images and audio are moved to blob storage."""
    test_id = storage.save(test)
    return _dump(_load_test(storage, test_id))


@router.get("/{test_id}")
def get_test(test_id: str, storage: StorageDep) -> dict[str, object]:
    return _dump(_load_test(storage, test_id))


@router.put("/{test_id}")
def update_test(test_id: str, test: Test, storage: StorageDep) -> dict[str, object]:
    """Overwrite a saved test, keeping its creation time."""
    saved_id = storage.save(test, existing_id=validate_id("test_id", test_id))
    return _dump(_load_test(storage, saved_id))


@router.delete("/{test_id}")
def delete_test(test_id: str, storage: StorageDep) -> dict[str, object]:
    """Delete a test and its assets. Deleting a missing test is not an error."""
    test_id = validate_id("test_id", test_id)
    deleted = storage.delete(test_id)
    return DeleteResponse(id=test_id, deleted=deleted).model_dump(by_alias=True)


@router.get("/{test_id}/preview")
def preview_test(test_id: str, storage: StorageDep) -> dict[str, object]:
    preview: TestPreview = build_preview(_load_test(storage, test_id))
    return preview.to_document()


@router.get("/{test_id}/export.docx")
def export_test(test_id: str, storage: StorageDep, blobs: BlobsDep) -> Response:
    test = _load_test(storage, test_id)
    content = export_test_docx(test, blobs)
    return Response(
        content=content,
        media_type=DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{test.id}.docx"'},
    )
