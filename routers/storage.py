from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse
import os

from services.backend_client import BackendClient, BackendError

router = APIRouter(tags=["Storage"])


# Public URL jo upload_file deta hai: /storage/<bucket>/<path>
@router.get("/storage/{bucket}/{path:path}")
def serve_object(bucket: str, path: str):
    try:
        full_path = BackendClient(db=None).local_path(bucket, path)
    except BackendError:
        raise HTTPException(status_code=404, detail="Object not found")
    if not os.path.isfile(full_path):
        raise HTTPException(status_code=404, detail="Object not found")
    return FileResponse(full_path)
