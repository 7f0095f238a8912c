from fastapi import APIRouter, Depends, HTTPException
from datetime import date as dt_date
from typing import List, Optional

from database import SessionLocal
from schemas.attendance import (
    AttendanceOut, BulkMarkRequest, MarkRequest, ScheduleCreate, ScheduleOut, ScheduleUpdate,
)
from security import get_client, get_current_user, get_profile, require_admin
from services import attendance as calc
from services.backend_client import AuthUser, BackendClient, BackendError, Eq, Order, RowNotFound

router = APIRouter(prefix="/api/v1/attendance", tags=["Attendance"])


# ===============================
#   HELPERS
# ===============================

def _semester(profile, semester: Optional[str]) -> str:
    return semester or profile.semester


def _active_schedules(client: BackendClient, student_id: int, semester: str, day: str = None):
    filters = [Eq("student_id", student_id), Eq("semester", semester), Eq("is_active", True)]
    if day:
        filters.append(Eq("day_of_week", day))
    return client.query("subject_schedules", filters, ordering=Order("subject"))


def _records(client: BackendClient, student_id: int, semester: str, on_date: dt_date = None):
    filters = [Eq("student_id", student_id), Eq("semester", semester)]
    if on_date:
        filters.append(Eq("date", on_date))
    return client.query("attendance", filters, ordering=Order("date", descending=True))


def _own_schedule(client: BackendClient, schedule_id: int, user: AuthUser):
    try:
        schedule = client.get("subject_schedules", schedule_id)
    except RowNotFound:
        raise HTTPException(status_code=404, detail="Schedule not found")
    if schedule.student_id != user.id or not schedule.is_active:
        raise HTTPException(status_code=404, detail="Schedule not found")
    return schedule


def _subject_breakdown(schedules, records, as_of: dt_date) -> list:
    # Ek subject ke kai schedule ho sakte hain (theory/lab, alag din): pehla wala ginti ke liye
    seen = {}
    for s in schedules:
        seen.setdefault(s.subject, s)

    result = []
    for subject, schedule in seen.items():
        stats = calc.compute_subject_stats(subject, schedule, records, as_of)
        row = {"subject": subject, "weekly_classes": schedule.weekly_classes, "class_type": schedule.class_type}
        row.update(stats.as_dict())
        row["badge"] = calc.attendance_badge(stats.percentage)
        result.append(row)
    return result


# ===============================
#   1. SUBJECT SCHEDULES
# ===============================

@router.get("/schedules", response_model=List[ScheduleOut])
def list_schedules(
    day: Optional[str] = None,
    semester: Optional[str] = None,
    user: AuthUser = Depends(get_current_user),
    profile=Depends(get_profile),
    client: BackendClient = Depends(get_client),
):
    if day and day.lower() not in calc.WEEKDAYS:
        raise HTTPException(status_code=400, detail="Invalid day of week")
    return _active_schedules(client, user.id, _semester(profile, semester), day.lower() if day else None)


@router.post("/schedules", response_model=ScheduleOut)
def add_schedule(
    data: ScheduleCreate,
    user: AuthUser = Depends(get_current_user),
    profile=Depends(get_profile),
    client: BackendClient = Depends(get_client),
):
    try:
        schedule = client.insert("subject_schedules", {
            "student_id": user.id,
            "subject": data.subject.strip(),
            "weekly_classes": data.weekly_classes,
            "class_type": data.class_type,
            "semester": _semester(profile, data.semester),
            "day_of_week": data.day_of_week,
            "is_active": True,
        })
    except BackendError as e:
        raise HTTPException(status_code=500, detail=str(e))
    calc.stats_cache.invalidate(user.id)
    return schedule


@router.put("/schedules/{schedule_id}", response_model=ScheduleOut)
def update_schedule(
    schedule_id: int,
    data: ScheduleUpdate,
    user: AuthUser = Depends(get_current_user),
    client: BackendClient = Depends(get_client),
):
    _own_schedule(client, schedule_id, user)
    patch = data.model_dump(exclude_unset=True)
    # day_of_week None = koi fixed din nahi; baaki fields null nahi ho sakte
    for key in ("subject", "weekly_classes", "class_type"):
        if key in patch and patch[key] is None:
            patch.pop(key)
    if "subject" in patch:
        patch["subject"] = patch["subject"].strip()
    try:
        schedule = client.update("subject_schedules", schedule_id, patch)
    except BackendError as e:
        raise HTTPException(status_code=500, detail=str(e))
    calc.stats_cache.invalidate(user.id)
    return schedule


# Remove = soft delete, purani attendance rows waise hi rehti hain
@router.delete("/schedules/{schedule_id}")
def remove_schedule(
    schedule_id: int,
    user: AuthUser = Depends(get_current_user),
    client: BackendClient = Depends(get_client),
):
    _own_schedule(client, schedule_id, user)
    try:
        client.update("subject_schedules", schedule_id, {"is_active": False})
    except BackendError as e:
        raise HTTPException(status_code=500, detail=str(e))
    calc.stats_cache.invalidate(user.id)
    return {"status": "success", "message": "Subject removed"}


# ===============================
#   2. MARKING
# ===============================

@router.post("/mark", response_model=AttendanceOut)
def mark(
    data: MarkRequest,
    user: AuthUser = Depends(get_current_user),
    profile=Depends(get_profile),
    client: BackendClient = Depends(get_client),
):
    try:
        return calc.mark_attendance(
            client, user.id, data.subject.strip(), data.date or dt_date.today(), data.status,
            data.class_type, _semester(profile, data.semester), marked_by=user.id, notes=data.notes,
        )
    except calc.ScheduleNotFound as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except BackendError as e:
        raise HTTPException(status_code=500, detail=str(e))


# ===============================
#   3. STATS (hamesha raw rows se)
# ===============================

@router.get("/daily", response_model=List[AttendanceOut])
def daily_records(
    date: Optional[dt_date] = None,
    semester: Optional[str] = None,
    user: AuthUser = Depends(get_current_user),
    profile=Depends(get_profile),
    client: BackendClient = Depends(get_client),
):
    return _records(client, user.id, _semester(profile, semester), date or dt_date.today())


@router.get("/today")
def today_stats(
    semester: Optional[str] = None,
    user: AuthUser = Depends(get_current_user),
    profile=Depends(get_profile),
    client: BackendClient = Depends(get_client),
):
    today = dt_date.today()
    semester = _semester(profile, semester)
    weekday = calc.WEEKDAYS[today.weekday()]

    def compute():
        schedules = _active_schedules(client, user.id, semester, weekday)
        records = _records(client, user.id, semester, today)
        stats = calc.compute_today_stats(schedules, records)
        result = stats.as_dict()
        result.update({"date": today.isoformat(), "day": weekday, "badge": calc.attendance_badge(stats.percentage)})
        return result

    return calc.stats_cache.get_or_compute(user.id, ("today", semester, today), compute)


@router.get("/subjects")
def subject_stats(
    semester: Optional[str] = None,
    user: AuthUser = Depends(get_current_user),
    profile=Depends(get_profile),
    client: BackendClient = Depends(get_client),
):
    today = dt_date.today()
    semester = _semester(profile, semester)

    def compute():
        schedules = _active_schedules(client, user.id, semester)
        records = _records(client, user.id, semester)
        return _subject_breakdown(schedules, records, today)

    return calc.stats_cache.get_or_compute(user.id, ("subjects", semester, today), compute)


@router.get("/overall")
def overall_stats(
    semester: Optional[str] = None,
    user: AuthUser = Depends(get_current_user),
    profile=Depends(get_profile),
    client: BackendClient = Depends(get_client),
):
    today = dt_date.today()
    semester = _semester(profile, semester)

    def compute():
        schedules = _active_schedules(client, user.id, semester)
        records = _records(client, user.id, semester)
        overall = calc.compute_overall_stats(records)
        result = overall.as_dict()
        result["badge"] = calc.attendance_badge(overall.percentage)
        result["subjects"] = _subject_breakdown(schedules, records, today)
        result["records"] = [AttendanceOut.model_validate(r).model_dump(mode="json") for r in records]
        return result

    return calc.stats_cache.get_or_compute(user.id, ("overall", semester, today), compute)


# ===============================
#   4. ADMIN
# ===============================

@router.post("/bulk")
def bulk_mark(data: BulkMarkRequest, admin: AuthUser = Depends(require_admin)):
    result = calc.bulk_mark_attendance(
        SessionLocal, data.student_ids, data.subject.strip(), data.date, data.status,
        data.class_type, data.semester, marked_by=admin.id, notes=data.notes,
    )
    if result.failed:
        raise HTTPException(status_code=500, detail="Failed to mark attendance for some students")
    return {"status": "success", "marked": result.marked}


@router.get("/by-date", response_model=List[AttendanceOut])
def records_by_date(
    date: dt_date,
    semester: Optional[str] = None,
    subject: Optional[str] = None,
    admin: AuthUser = Depends(require_admin),
    client: BackendClient = Depends(get_client),
):
    filters = [Eq("date", date)]
    if semester:
        filters.append(Eq("semester", semester))
    if subject:
        filters.append(Eq("subject", subject))
    return client.query("attendance", filters, ordering=Order("student_id"))
