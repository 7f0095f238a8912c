from pydantic import BaseModel, Field
from datetime import date as dt_date, datetime
from typing import List, Literal, Optional


# ===============================
#  1. LIBRARY (response models)
# ===============================

class QuestionPaperSchema(BaseModel):
    id: int
    folder_id: Optional[int] = None
    title: str
    subject: str
    year: str
    semester: str
    file_url: str
    file_name: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PyqFolderSchema(BaseModel):
    id: int
    subject_name: str
    semester: str
    created_at: Optional[datetime] = None
    papers: List[QuestionPaperSchema] = []

    class Config:
        from_attributes = True


class NoteSchema(BaseModel):
    id: int
    title: str
    subject: str
    semester: str
    description: Optional[str] = None
    file_url: str
    file_name: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SyllabusSchema(BaseModel):
    id: int
    title: str
    semester: str
    academic_year: str
    type: str
    description: Optional[str] = None
    file_url: str
    file_name: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LabManualSchema(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    semester: str
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    link_url: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ===============================
#  2. CAMPUS
# ===============================

class EventSchema(BaseModel):
    id: int
    title: str
    description: str
    event_date: dt_date
    event_time: Optional[str] = None
    location: Optional[str] = None
    organizer: str
    semester: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool

    class Config:
        from_attributes = True


class OrganizerSchema(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    semester: str
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    link_url: Optional[str] = None

    class Config:
        from_attributes = True


class MarSupportSchema(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    link_url: str
    semester: str

    class Config:
        from_attributes = True


class NotificationSchema(BaseModel):
    id: int
    title: str
    message: str
    type: str
    semester: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ===============================
#  3. ADMIN REQUEST BODIES
# ===============================

class FolderCreate(BaseModel):
    subject_name: str = Field(..., min_length=1, max_length=100)
    semester: str


class PaperUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    year: Optional[str] = Field(None, min_length=4, max_length=10)


class NoteUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    subject: Optional[str] = Field(None, min_length=1, max_length=100)
    semester: Optional[str] = None
    description: Optional[str] = None


class SyllabusUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    semester: Optional[str] = None
    academic_year: Optional[str] = None
    type: Optional[Literal["theory", "lab"]] = None
    description: Optional[str] = None


class LabManualUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    semester: Optional[str] = None
    description: Optional[str] = None
    link_url: Optional[str] = None


class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    event_date: Optional[dt_date] = None
    event_time: Optional[str] = None
    location: Optional[str] = None
    organizer: Optional[str] = None
    semester: Optional[str] = None
    is_active: Optional[bool] = None


class OrganizerUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    semester: Optional[str] = None
    link_url: Optional[str] = None


class MarSupportCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    link_url: str = Field(..., min_length=1, max_length=500)
    semester: str


class MarSupportUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    link_url: Optional[str] = Field(None, min_length=1, max_length=500)
    semester: Optional[str] = None


class NotificationCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
    type: Literal["info", "warning", "success", "urgent"] = "info"
    semester: Optional[str] = None  # None = sabhi semesters
    is_active: bool = True


class NotificationUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    message: Optional[str] = Field(None, min_length=1)
    type: Optional[Literal["info", "warning", "success", "urgent"]] = None
    semester: Optional[str] = None
    is_active: Optional[bool] = None


def check_semester(value: Optional[str], allow_all: bool = False) -> Optional[str]:
    """Raises ValueError for anything outside 1st..8th ('ALL' too when allowed)."""
    from config import SEMESTERS
    if value is None:
        return None
    if value in SEMESTERS or (allow_all and value == "ALL"):
        return value
    raise ValueError(f"Invalid semester '{value}'")
