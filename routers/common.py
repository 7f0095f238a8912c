from fastapi import HTTPException, UploadFile
from typing import Optional

from schemas.resources import check_semester
from services import documents
from services.backend_client import BackendClient, BackendError, RowNotFound

BUCKET = "documents"


# Student reads: query param na ho to profile ka semester
def reader_semester(profile, semester: Optional[str], allow_all: bool = False) -> str:
    try:
        return check_semester(semester, allow_all) or profile.semester
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def admin_semester(semester: Optional[str], allow_all: bool = False) -> Optional[str]:
    try:
        return check_semester(semester, allow_all)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def get_or_404(client: BackendClient, table: str, id: int, label: str):
    try:
        return client.get(table, id)
    except RowNotFound:
        raise HTTPException(status_code=404, detail=f"{label} not found")


def store_upload(client: BackendClient, folder: str, file: Optional[UploadFile], required: bool = True,
                 allowed: set = documents.PDF_TYPES, max_bytes: int = documents.MAX_DOCUMENT_BYTES,
                 kind: str = "PDF file"):
    if file is None or not file.filename:
        if required:
            raise HTTPException(status_code=400, detail=f"Please upload a {kind}")
        return None, None
    data = file.file.read()
    try:
        return documents.store(client, BUCKET, folder, file.filename, data, allowed, max_bytes, kind)
    except documents.InvalidUpload as e:
        raise HTTPException(status_code=400, detail=str(e))
    except BackendError as e:
        raise HTTPException(status_code=500, detail=str(e))


def insert_row(client: BackendClient, table: str, row: dict, stored_url: Optional[str] = None):
    try:
        return client.insert(table, row)
    except BackendError as e:
        # Row nahi bani to file bhi hata do
        if stored_url:
            documents.discard(client, BUCKET, stored_url)
        raise HTTPException(status_code=500, detail=str(e))


def update_row(client: BackendClient, table: str, id: int, patch: dict):
    try:
        return client.update(table, id, patch)
    except BackendError as e:
        raise HTTPException(status_code=500, detail=str(e))


def delete_row(client: BackendClient, table: str, id: int, label: str, file_column: str = "file_url"):
    row = get_or_404(client, table, id, label)
    file_url = getattr(row, file_column, None)
    try:
        client.delete(table, id)
        documents.discard(client, BUCKET, file_url)
    except BackendError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"status": "deleted"}
