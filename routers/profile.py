from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional
import time

from routers.common import admin_semester, get_or_404, update_row
from security import get_client, get_profile, require_admin
from services import documents
from services.backend_client import AuthUser, BackendClient, BackendError, Order

router = APIRouter(prefix="/api/v1/profile", tags=["Profile"])

AVATAR_BUCKET = "avatars"


class ProfileSchema(BaseModel):
    id: int
    name: str
    college_email: str
    mobile_number: str
    semester: str
    avatar_url: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    mobile_number: Optional[str] = Field(None, min_length=1, max_length=15)
    semester: Optional[str] = None


# ===============================
#  1. MY PROFILE
# ===============================

@router.get("/me", response_model=ProfileSchema)
def my_profile(profile=Depends(get_profile)):
    return profile


@router.put("/me", response_model=ProfileSchema)
def update_my_profile(data: ProfileUpdate, profile=Depends(get_profile), client: BackendClient = Depends(get_client)):
    patch = data.model_dump(exclude_unset=True, exclude_none=True)
    if "semester" in patch:
        patch["semester"] = admin_semester(patch["semester"])
    for key in ("name", "mobile_number"):
        if key in patch:
            patch[key] = patch[key].strip()
    if not patch:
        return profile
    return update_row(client, "profiles", profile.id, patch)


@router.post("/me/avatar", response_model=ProfileSchema)
def upload_avatar(
    file: UploadFile = File(...),
    profile=Depends(get_profile),
    client: BackendClient = Depends(get_client),
):
    data = file.file.read()
    if not (file.content_type or "").startswith("image/"):
        raise HTTPException(status_code=400, detail="Please upload an image file")
    try:
        documents.check_upload(file.filename, data, documents.IMAGE_TYPES,
                               documents.MAX_AVATAR_BYTES, kind="image")
    except documents.InvalidUpload as e:
        raise HTTPException(status_code=400, detail=str(e))

    ext = documents.extension(file.filename).lstrip(".")
    path = f"{profile.id}/{int(time.time() * 1000)}.{ext}"
    old_url = profile.avatar_url
    try:
        url = client.upload_file(AVATAR_BUCKET, path, data)
    except BackendError as e:
        raise HTTPException(status_code=500, detail=str(e))

    try:
        updated = client.update("profiles", profile.id, {"avatar_url": url})
    except BackendError as e:
        documents.discard(client, AVATAR_BUCKET, url)
        raise HTTPException(status_code=500, detail=str(e))

    # Naya avatar save ho gaya, ab purana hatao
    documents.discard(client, AVATAR_BUCKET, old_url)
    return updated


# ===============================
#  2. ADMIN: USERS
# ===============================

@router.get("/users")
def list_users(admin: AuthUser = Depends(require_admin), client: BackendClient = Depends(get_client)):
    users = []
    for p in client.query("profiles", ordering=Order("created_at", descending=True)):
        row = ProfileSchema.model_validate(p).model_dump(mode="json")
        row["role"] = client.get_role(p.id) or "student"
        users.append(row)
    return users


@router.patch("/users/{user_id}/toggle", response_model=ProfileSchema)
def toggle_user(user_id: int, admin: AuthUser = Depends(require_admin), client: BackendClient = Depends(get_client)):
    if user_id == admin.id:
        raise HTTPException(status_code=400, detail="You cannot deactivate your own account")
    profile = get_or_404(client, "profiles", user_id, "User")
    return update_row(client, "profiles", user_id, {"is_active": not profile.is_active})
