from fastapi import APIRouter, Depends, HTTPException
from typing import List, Optional

from routers.common import admin_semester, get_or_404, insert_row, reader_semester, update_row
from schemas.resources import NotificationCreate, NotificationSchema, NotificationUpdate
from security import get_client, get_profile, require_admin
from services.backend_client import AnyOf, AuthUser, BackendClient, BackendError, Eq, IsNull, Order

router = APIRouter(prefix="/api/v1/notifications", tags=["Notifications"])

FEED_LIMIT = 20


# Student feed: active, semester NULL ya apna, naye pehle
@router.get("", response_model=List[NotificationSchema])
def notification_feed(semester: Optional[str] = None, profile=Depends(get_profile), client: BackendClient = Depends(get_client)):
    semester = reader_semester(profile, semester)
    return client.query(
        "notifications",
        [Eq("is_active", True), AnyOf(IsNull("semester"), Eq("semester", semester))],
        ordering=Order("created_at", descending=True),
        limit=FEED_LIMIT,
    )


@router.get("/all", response_model=List[NotificationSchema])
def list_all_notifications(admin: AuthUser = Depends(require_admin), client: BackendClient = Depends(get_client)):
    return client.query("notifications", ordering=Order("created_at", descending=True))


@router.post("", response_model=NotificationSchema)
def create_notification(data: NotificationCreate, admin: AuthUser = Depends(require_admin), client: BackendClient = Depends(get_client)):
    return insert_row(client, "notifications", {
        "title": data.title.strip(),
        "message": data.message.strip(),
        "type": data.type,
        "semester": admin_semester(data.semester),
        "is_active": data.is_active,
    })


@router.put("/{notification_id}", response_model=NotificationSchema)
def update_notification(notification_id: int, data: NotificationUpdate, admin: AuthUser = Depends(require_admin), client: BackendClient = Depends(get_client)):
    get_or_404(client, "notifications", notification_id, "Notification")
    patch = data.model_dump(exclude_unset=True)
    if patch.get("semester") is not None:
        patch["semester"] = admin_semester(patch["semester"])
    for key in ("title", "message", "type", "is_active"):
        if key in patch and patch[key] is None:
            patch.pop(key)
    return update_row(client, "notifications", notification_id, patch)


@router.patch("/{notification_id}/toggle", response_model=NotificationSchema)
def toggle_notification(notification_id: int, admin: AuthUser = Depends(require_admin), client: BackendClient = Depends(get_client)):
    item = get_or_404(client, "notifications", notification_id, "Notification")
    return update_row(client, "notifications", notification_id, {"is_active": not item.is_active})


@router.delete("/{notification_id}")
def delete_notification(notification_id: int, admin: AuthUser = Depends(require_admin), client: BackendClient = Depends(get_client)):
    get_or_404(client, "notifications", notification_id, "Notification")
    try:
        client.delete("notifications", notification_id)
    except BackendError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"status": "deleted"}
