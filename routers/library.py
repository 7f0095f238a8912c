from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from typing import List, Optional

from routers.common import (
    BUCKET, admin_semester, delete_row, get_or_404, insert_row, reader_semester, store_upload, update_row,
)
from schemas.resources import (
    FolderCreate, LabManualSchema, LabManualUpdate, NoteSchema, NoteUpdate, PaperUpdate,
    PyqFolderSchema, QuestionPaperSchema, SyllabusSchema, SyllabusUpdate,
)
from security import get_client, get_profile, require_admin
from services import documents
from services.backend_client import AnyOf, AuthUser, BackendClient, BackendError, Eq, Order

router = APIRouter(prefix="/api/v1/library", tags=["Library"])


# ===============================
#  1. QUESTION PAPERS (subject folders)
# ===============================

@router.get("/pyq/folders", response_model=List[PyqFolderSchema])
def list_folders(semester: Optional[str] = None, profile=Depends(get_profile), client: BackendClient = Depends(get_client)):
    return client.query("pyq_folders", [Eq("semester", reader_semester(profile, semester))], ordering=Order("subject_name"))


@router.get("/pyq/folders/{folder_id}", response_model=PyqFolderSchema)
def get_folder(folder_id: int, profile=Depends(get_profile), client: BackendClient = Depends(get_client)):
    return get_or_404(client, "pyq_folders", folder_id, "Folder")


@router.post("/pyq/folders", response_model=PyqFolderSchema)
def create_folder(data: FolderCreate, admin: AuthUser = Depends(require_admin), client: BackendClient = Depends(get_client)):
    semester = admin_semester(data.semester)
    name = data.subject_name.strip()
    if client.first("pyq_folders", [Eq("subject_name", name), Eq("semester", semester)]):
        raise HTTPException(status_code=400, detail="Folder already exists for this subject and semester")
    return insert_row(client, "pyq_folders", {"subject_name": name, "semester": semester, "created_by": admin.id})


# Folder delete = andar ke saare papers (aur unki files) bhi
@router.delete("/pyq/folders/{folder_id}")
def delete_folder(folder_id: int, admin: AuthUser = Depends(require_admin), client: BackendClient = Depends(get_client)):
    folder = get_or_404(client, "pyq_folders", folder_id, "Folder")
    file_urls = [p.file_url for p in folder.papers]
    try:
        client.delete("pyq_folders", folder_id)
        for url in file_urls:
            documents.discard(client, BUCKET, url)
    except BackendError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"status": "deleted", "papers_deleted": len(file_urls)}


@router.post("/pyq/papers", response_model=QuestionPaperSchema)
def upload_paper(
    folder_id: int = Form(...),
    title: str = Form(...),
    year: str = Form(...),
    file: UploadFile = File(...),
    admin: AuthUser = Depends(require_admin),
    client: BackendClient = Depends(get_client),
):
    folder = get_or_404(client, "pyq_folders", folder_id, "Folder")
    if not title.strip() or not year.strip():
        raise HTTPException(status_code=400, detail="Title and year are required")

    url, file_name = store_upload(client, f"question-papers/{folder.semester}", file)
    return insert_row(client, "question_papers", {
        "folder_id": folder.id,
        "title": title.strip(),
        "subject": folder.subject_name,
        "year": year.strip(),
        "semester": folder.semester,
        "file_url": url,
        "file_name": file_name,
        "uploaded_by": admin.id,
    }, url)


@router.put("/pyq/papers/{paper_id}", response_model=QuestionPaperSchema)
def update_paper(paper_id: int, data: PaperUpdate, admin: AuthUser = Depends(require_admin), client: BackendClient = Depends(get_client)):
    get_or_404(client, "question_papers", paper_id, "Question paper")
    return update_row(client, "question_papers", paper_id, data.model_dump(exclude_unset=True, exclude_none=True))


@router.delete("/pyq/papers/{paper_id}")
def delete_paper(paper_id: int, admin: AuthUser = Depends(require_admin), client: BackendClient = Depends(get_client)):
    return delete_row(client, "question_papers", paper_id, "Question paper")


# ===============================
#  2. NOTES
# ===============================

@router.get("/notes", response_model=List[NoteSchema])
def list_notes(
    semester: Optional[str] = None,
    subject: Optional[str] = None,
    profile=Depends(get_profile),
    client: BackendClient = Depends(get_client),
):
    filters = [Eq("semester", reader_semester(profile, semester))]
    if subject:
        filters.append(Eq("subject", subject))
    return client.query("notes", filters, ordering=Order("created_at", descending=True))


@router.post("/notes", response_model=NoteSchema)
def upload_note(
    title: str = Form(...),
    subject: str = Form(...),
    semester: str = Form(...),
    description: Optional[str] = Form(None),
    file: UploadFile = File(...),
    admin: AuthUser = Depends(require_admin),
    client: BackendClient = Depends(get_client),
):
    semester = admin_semester(semester)
    url, file_name = store_upload(client, f"notes/{semester}", file)
    return insert_row(client, "notes", {
        "title": title.strip(),
        "subject": subject.strip(),
        "semester": semester,
        "description": description or None,
        "file_url": url,
        "file_name": file_name,
        "uploaded_by": admin.id,
    }, url)


@router.put("/notes/{note_id}", response_model=NoteSchema)
def update_note(note_id: int, data: NoteUpdate, admin: AuthUser = Depends(require_admin), client: BackendClient = Depends(get_client)):
    get_or_404(client, "notes", note_id, "Note")
    patch = data.model_dump(exclude_unset=True, exclude_none=True)
    if "semester" in patch:
        patch["semester"] = admin_semester(patch["semester"])
    return update_row(client, "notes", note_id, patch)


@router.delete("/notes/{note_id}")
def delete_note(note_id: int, admin: AuthUser = Depends(require_admin), client: BackendClient = Depends(get_client)):
    return delete_row(client, "notes", note_id, "Note")


# ===============================
#  3. SYLLABUS
# ===============================

@router.get("/syllabus", response_model=List[SyllabusSchema])
def list_syllabus(
    semester: Optional[str] = None,
    type: Optional[str] = None,
    profile=Depends(get_profile),
    client: BackendClient = Depends(get_client),
):
    filters = [Eq("semester", reader_semester(profile, semester))]
    if type:
        filters.append(Eq("type", type))
    return client.query("syllabus", filters, ordering=Order("created_at", descending=True))


@router.post("/syllabus", response_model=SyllabusSchema)
def upload_syllabus(
    title: str = Form(...),
    semester: str = Form(...),
    academic_year: str = Form(...),
    type: str = Form("theory"),
    description: Optional[str] = Form(None),
    file: UploadFile = File(...),
    admin: AuthUser = Depends(require_admin),
    client: BackendClient = Depends(get_client),
):
    semester = admin_semester(semester)
    if type not in ("theory", "lab"):
        raise HTTPException(status_code=400, detail="Type must be 'theory' or 'lab'")
    url, file_name = store_upload(client, f"syllabus/{semester}", file)
    return insert_row(client, "syllabus", {
        "title": title.strip(),
        "semester": semester,
        "academic_year": academic_year.strip(),
        "type": type,
        "description": description or None,
        "file_url": url,
        "file_name": file_name,
        "uploaded_by": admin.id,
    }, url)


@router.put("/syllabus/{syllabus_id}", response_model=SyllabusSchema)
def update_syllabus(syllabus_id: int, data: SyllabusUpdate, admin: AuthUser = Depends(require_admin), client: BackendClient = Depends(get_client)):
    get_or_404(client, "syllabus", syllabus_id, "Syllabus")
    patch = data.model_dump(exclude_unset=True, exclude_none=True)
    if "semester" in patch:
        patch["semester"] = admin_semester(patch["semester"])
    return update_row(client, "syllabus", syllabus_id, patch)


@router.delete("/syllabus/{syllabus_id}")
def delete_syllabus(syllabus_id: int, admin: AuthUser = Depends(require_admin), client: BackendClient = Depends(get_client)):
    return delete_row(client, "syllabus", syllabus_id, "Syllabus")


# ===============================
#  4. LAB MANUALS (file ya link, semester 'ALL' bhi)
# ===============================

@router.get("/lab-manuals", response_model=List[LabManualSchema])
def list_lab_manuals(semester: Optional[str] = None, profile=Depends(get_profile), client: BackendClient = Depends(get_client)):
    semester = reader_semester(profile, semester, allow_all=True)
    return client.query(
        "lab_manuals",
        [AnyOf(Eq("semester", semester), Eq("semester", "ALL"))],
        ordering=Order("created_at", descending=True),
    )


@router.post("/lab-manuals", response_model=LabManualSchema)
def add_lab_manual(
    title: str = Form(...),
    semester: str = Form(...),
    description: Optional[str] = Form(None),
    link_url: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    admin: AuthUser = Depends(require_admin),
    client: BackendClient = Depends(get_client),
):
    semester = admin_semester(semester, allow_all=True)
    link_url = (link_url or "").strip() or None
    if (file is None or not file.filename) and not link_url:
        raise HTTPException(status_code=400, detail="Upload a PDF or provide a link")

    url, file_name = store_upload(client, f"lab-manuals/{semester}", file, required=False)
    return insert_row(client, "lab_manuals", {
        "title": title.strip(),
        "semester": semester,
        "description": description or None,
        "file_url": url,
        "file_name": file_name,
        "link_url": link_url,
        "uploaded_by": admin.id,
    }, url)


@router.put("/lab-manuals/{manual_id}", response_model=LabManualSchema)
def update_lab_manual(manual_id: int, data: LabManualUpdate, admin: AuthUser = Depends(require_admin), client: BackendClient = Depends(get_client)):
    get_or_404(client, "lab_manuals", manual_id, "Lab manual")
    patch = data.model_dump(exclude_unset=True, exclude_none=True)
    if "semester" in patch:
        patch["semester"] = admin_semester(patch["semester"], allow_all=True)
    return update_row(client, "lab_manuals", manual_id, patch)


@router.delete("/lab-manuals/{manual_id}")
def delete_lab_manual(manual_id: int, admin: AuthUser = Depends(require_admin), client: BackendClient = Depends(get_client)):
    return delete_row(client, "lab_manuals", manual_id, "Lab manual")
