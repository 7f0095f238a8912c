from pydantic import BaseModel, Field
from datetime import date as dt_date, datetime
from typing import List, Literal, Optional

ClassType = Literal["theory", "lab"]
Status = Literal["present", "absent", "late"]
Weekday = Literal["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


# 1. Subject schedule (student apne subjects add karta hai)
class ScheduleCreate(BaseModel):
    subject: str = Field(..., min_length=1, max_length=100)
    weekly_classes: int = Field(..., ge=1, le=20)
    class_type: ClassType = "theory"
    day_of_week: Optional[Weekday] = None
    semester: Optional[str] = None  # None = profile ka semester


class ScheduleUpdate(BaseModel):
    subject: Optional[str] = Field(None, min_length=1, max_length=100)
    weekly_classes: Optional[int] = Field(None, ge=1, le=20)
    class_type: Optional[ClassType] = None
    day_of_week: Optional[Weekday] = None


class ScheduleOut(BaseModel):
    id: int
    student_id: int
    subject: str
    weekly_classes: int
    class_type: str
    semester: str
    day_of_week: Optional[str] = None
    is_active: bool

    class Config:
        from_attributes = True


# 2. Marking
class MarkRequest(BaseModel):
    subject: str = Field(..., min_length=1, max_length=100)
    status: Status
    class_type: ClassType = "theory"
    date: Optional[dt_date] = None  # None = aaj
    semester: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=500)


class BulkMarkRequest(BaseModel):
    student_ids: List[int] = Field(..., min_length=1)
    subject: str = Field(..., min_length=1, max_length=100)
    status: Status
    class_type: ClassType = "theory"
    date: dt_date
    semester: str
    notes: Optional[str] = Field(None, max_length=500)


class AttendanceOut(BaseModel):
    id: int
    student_id: int
    subject: str
    date: dt_date
    status: str
    class_type: str
    semester: str
    marked_by: Optional[int] = None
    notes: Optional[str] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
