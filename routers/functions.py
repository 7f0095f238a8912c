from fastapi import APIRouter, Body, Depends, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse
import base64
from typing import Optional

from security import get_client, get_current_user
from services.backend_client import AuthUser, BackendClient, BackendError, FunctionError
from services.documents import extension
from services.pyq_analyzer import AnalysisError

router = APIRouter(tags=["Server Functions"])

MAX_PYQ_BYTES = 10 * 1024 * 1024


def _invoke(client: BackendClient, name: str, payload: dict):
    try:
        return client.invoke_function(name, payload)
    except FunctionError as e:
        raise HTTPException(status_code=404, detail=str(e))


# ===============================
#  1. RAW FUNCTION ENDPOINTS
# ===============================

@router.post("/functions/analyze-pyq")
def analyze_pyq_function(
    payload: Optional[dict] = Body(None),
    user: AuthUser = Depends(get_current_user),
    client: BackendClient = Depends(get_client),
):
    try:
        return _invoke(client, "analyze-pyq", payload or {})
    except AnalysisError as e:
        print(f"Error in analyze-pyq function: {e}")
        return JSONResponse(status_code=500, content={"error": str(e)})


# Idempotent, credentials sirf env se aate hain
@router.post("/functions/setup-admin")
def setup_admin_function(client: BackendClient = Depends(get_client)):
    result = _invoke(client, "setup-admin", {})
    if not result.get("success"):
        return JSONResponse(status_code=500, content=result)
    return result


# ===============================
#  2. PYQ ANALYZER (file upload)
# ===============================

@router.post("/api/v1/pyq/analyze")
def analyze_pyq_upload(
    file: UploadFile = File(...),
    user: AuthUser = Depends(get_current_user),
    client: BackendClient = Depends(get_client),
):
    ext = extension(file.filename)
    if ext not in (".pdf", ".txt"):
        raise HTTPException(status_code=400, detail="Please upload a PDF or text file")

    data = file.file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    if len(data) > MAX_PYQ_BYTES:
        raise HTTPException(status_code=400, detail="File size must be less than 10MB")

    if ext == ".pdf":
        payload = {"pdfBase64": base64.b64encode(data).decode("ascii"), "isPdf": True}
    else:
        payload = {"extractedText": data.decode("utf-8", errors="replace")}

    try:
        return _invoke(client, "analyze-pyq", payload or {})
    except AnalysisError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except BackendError as e:
        raise HTTPException(status_code=500, detail=str(e))
