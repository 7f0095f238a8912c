from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from datetime import datetime
from typing import List, Optional

from routers.common import (
    admin_semester, delete_row, get_or_404, insert_row, reader_semester, store_upload, update_row,
)
from schemas.resources import (
    EventSchema, EventUpdate, MarSupportCreate, MarSupportSchema, MarSupportUpdate,
    OrganizerSchema, OrganizerUpdate,
)
from security import get_client, get_profile, require_admin
from services import documents
from services.backend_client import AnyOf, AuthUser, BackendClient, Eq, IsNull, Order

router = APIRouter(prefix="/api/v1/campus", tags=["Campus"])


# ===============================
#  1. EVENTS
# ===============================

# Sirf active events, semester NULL (sab ke liye) ya apna semester, date ke hisaab se
@router.get("/events", response_model=List[EventSchema])
def list_events(semester: Optional[str] = None, profile=Depends(get_profile), client: BackendClient = Depends(get_client)):
    semester = reader_semester(profile, semester)
    return client.query(
        "events",
        [Eq("is_active", True), AnyOf(IsNull("semester"), Eq("semester", semester))],
        ordering=Order("event_date"),
    )


@router.get("/events/all", response_model=List[EventSchema])
def list_all_events(admin: AuthUser = Depends(require_admin), client: BackendClient = Depends(get_client)):
    return client.query("events", ordering=Order("event_date", descending=True))


@router.post("/events", response_model=EventSchema)
def add_event(
    title: str = Form(...),
    description: str = Form(...),
    event_date: str = Form(...),
    organizer: str = Form(...),
    event_time: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    semester: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    admin: AuthUser = Depends(require_admin),
    client: BackendClient = Depends(get_client),
):
    try:
        date_obj = datetime.strptime(event_date, "%Y-%m-%d").date()
    except ValueError:
        raise HTTPException(status_code=400, detail="event_date must be YYYY-MM-DD")
    semester = admin_semester(semester or None)

    image_url, _ = store_upload(
        client, "events", image, required=False,
        allowed=documents.IMAGE_TYPES, max_bytes=documents.MAX_IMAGE_BYTES, kind="image",
    )
    return insert_row(client, "events", {
        "title": title.strip(),
        "description": description.strip(),
        "event_date": date_obj,
        "event_time": event_time or None,
        "location": location or None,
        "organizer": organizer.strip(),
        "semester": semester,
        "image_url": image_url,
        "is_active": True,
        "created_by": admin.id,
    }, image_url)


@router.put("/events/{event_id}", response_model=EventSchema)
def update_event(event_id: int, data: EventUpdate, admin: AuthUser = Depends(require_admin), client: BackendClient = Depends(get_client)):
    get_or_404(client, "events", event_id, "Event")
    patch = data.model_dump(exclude_unset=True)
    # semester=None matlab "sabhi semesters", isliye yahan None allowed hai
    if patch.get("semester") is not None:
        patch["semester"] = admin_semester(patch["semester"])
    for key in ("title", "description", "event_date", "organizer", "is_active"):
        if key in patch and patch[key] is None:
            patch.pop(key)
    return update_row(client, "events", event_id, patch)


@router.patch("/events/{event_id}/toggle", response_model=EventSchema)
def toggle_event(event_id: int, admin: AuthUser = Depends(require_admin), client: BackendClient = Depends(get_client)):
    event = get_or_404(client, "events", event_id, "Event")
    return update_row(client, "events", event_id, {"is_active": not event.is_active})


@router.delete("/events/{event_id}")
def delete_event(event_id: int, admin: AuthUser = Depends(require_admin), client: BackendClient = Depends(get_client)):
    return delete_row(client, "events", event_id, "Event", file_column="image_url")


# ===============================
#  2. ORGANIZERS (file ya link)
# ===============================

@router.get("/organizers", response_model=List[OrganizerSchema])
def list_organizers(semester: Optional[str] = None, profile=Depends(get_profile), client: BackendClient = Depends(get_client)):
    return client.query(
        "organizers", [Eq("semester", reader_semester(profile, semester))],
        ordering=Order("created_at", descending=True),
    )


@router.post("/organizers", response_model=OrganizerSchema)
def add_organizer(
    title: str = Form(...),
    semester: str = Form(...),
    description: Optional[str] = Form(None),
    link_url: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    admin: AuthUser = Depends(require_admin),
    client: BackendClient = Depends(get_client),
):
    semester = admin_semester(semester)
    link_url = (link_url or "").strip() or None
    if (file is None or not file.filename) and not link_url:
        raise HTTPException(status_code=400, detail="Upload a PDF or provide a link")

    url, file_name = store_upload(client, f"organizers/{semester}", file, required=False)
    return insert_row(client, "organizers", {
        "title": title.strip(),
        "semester": semester,
        "description": description or None,
        "file_url": url,
        "file_name": file_name,
        "link_url": link_url,
        "created_by": admin.id,
    }, url)


@router.put("/organizers/{organizer_id}", response_model=OrganizerSchema)
def update_organizer(organizer_id: int, data: OrganizerUpdate, admin: AuthUser = Depends(require_admin), client: BackendClient = Depends(get_client)):
    get_or_404(client, "organizers", organizer_id, "Organizer")
    patch = data.model_dump(exclude_unset=True, exclude_none=True)
    if "semester" in patch:
        patch["semester"] = admin_semester(patch["semester"])
    return update_row(client, "organizers", organizer_id, patch)


@router.delete("/organizers/{organizer_id}")
def delete_organizer(organizer_id: int, admin: AuthUser = Depends(require_admin), client: BackendClient = Depends(get_client)):
    return delete_row(client, "organizers", organizer_id, "Organizer")


# ===============================
#  3. MAR SUPPORT (sirf links)
# ===============================

@router.get("/mar-support", response_model=List[MarSupportSchema])
def list_mar_support(semester: Optional[str] = None, profile=Depends(get_profile), client: BackendClient = Depends(get_client)):
    return client.query(
        "mar_support", [Eq("semester", reader_semester(profile, semester))],
        ordering=Order("created_at", descending=True),
    )


@router.post("/mar-support", response_model=MarSupportSchema)
def add_mar_support(data: MarSupportCreate, admin: AuthUser = Depends(require_admin), client: BackendClient = Depends(get_client)):
    return insert_row(client, "mar_support", {
        "title": data.title.strip(),
        "description": data.description or None,
        "link_url": data.link_url.strip(),
        "semester": admin_semester(data.semester),
        "created_by": admin.id,
    })


@router.put("/mar-support/{item_id}", response_model=MarSupportSchema)
def update_mar_support(item_id: int, data: MarSupportUpdate, admin: AuthUser = Depends(require_admin), client: BackendClient = Depends(get_client)):
    get_or_404(client, "mar_support", item_id, "MAR support item")
    patch = data.model_dump(exclude_unset=True, exclude_none=True)
    if "semester" in patch:
        patch["semester"] = admin_semester(patch["semester"])
    return update_row(client, "mar_support", item_id, patch)


@router.delete("/mar-support/{item_id}")
def delete_mar_support(item_id: int, admin: AuthUser = Depends(require_admin), client: BackendClient = Depends(get_client)):
    return delete_row(client, "mar_support", item_id, "MAR support item")
