"""
Attendance calculations.

Percentages are never stored: every view is recomputed from the raw
attendance rows. The only write is mark_attendance(), an upsert on
(student_id, subject, date, class_type).
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass
from datetime import date
from typing import Callable, Dict, Iterable, List, Optional

import config
from services.backend_client import BackendClient, BackendError, Eq

STATUSES = ("present", "absent", "late")
CLASS_TYPES = ("theory", "lab")
WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
ATTENDED = ("present", "late")

GOOD_THRESHOLD = 75
WARNING_THRESHOLD = 50

ATTENDANCE_KEY = ["student_id", "subject", "date", "class_type"]


class ScheduleNotFound(Exception):
    pass


@dataclass
class SubjectStats:
    present: int = 0
    absent: int = 0
    total: int = 0
    percentage: int = 0
    expected: int = 0

    def as_dict(self):
        return asdict(self)


@dataclass
class RatioStats:
    percentage: int = 0
    present: int = 0
    total: int = 0

    def as_dict(self):
        return asdict(self)


def _round_percent(numerator: int, denominator: int) -> int:
    # .5 rounds up (not to even)
    if denominator <= 0:
        return 0
    return int(numerator * 100 / denominator + 0.5)


def _field(record, name):
    return record[name] if isinstance(record, dict) else getattr(record, name)


def _as_date(value) -> date:
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    return value


def weeks_between(start: date, end: date) -> int:
    """Whole weeks from start to end, truncated toward zero."""
    days = (end - start).days
    return int(days / 7)


def attendance_badge(percentage: int) -> str:
    if percentage >= GOOD_THRESHOLD:
        return "good"
    if percentage >= WARNING_THRESHOLD:
        return "warning"
    return "critical"


def compute_subject_stats(subject: str, schedule, attendance_records: Iterable, as_of_date: date = None) -> SubjectStats:
    """
    present / absent / total count the marked rows for 'subject'.
    expected = weekly_classes * weeks elapsed since the earliest record
    (or the start of the current month when nothing is marked yet).
    percentage = present / expected, so unmarked classes pull it down.
    """
    as_of_date = as_of_date or date.today()
    if schedule is None:
        return SubjectStats()

    records = [r for r in attendance_records if _field(r, "subject") == subject]

    if records:
        anchor = min(_as_date(_field(r, "date")) for r in records)
    else:
        anchor = as_of_date.replace(day=1)
    weeks = max(1, weeks_between(anchor, as_of_date) + 1)
    expected = (_field(schedule, "weekly_classes") or 0) * weeks

    stats = SubjectStats(expected=expected)
    for r in records:
        status = _field(r, "status")
        stats.total += 1
        if status in ATTENDED:
            stats.present += 1
        elif status == "absent":
            stats.absent += 1

    stats.percentage = _round_percent(stats.present, expected)
    return stats


def compute_today_stats(schedules_for_today: Iterable, attendance_records_for_today: Iterable) -> RatioStats:
    total = len(list(schedules_for_today))
    present = sum(1 for r in attendance_records_for_today if _field(r, "status") in ATTENDED)
    return RatioStats(percentage=_round_percent(present, total), present=present, total=total)


def compute_overall_stats(all_attendance_records: Iterable) -> RatioStats:
    records = list(all_attendance_records)
    present = sum(1 for r in records if _field(r, "status") in ATTENDED)
    return RatioStats(percentage=_round_percent(present, len(records)), present=present, total=len(records))


# ===========================
#   PER-STUDENT STATS CACHE
# ===========================

class StatsCache:
    """
    Computed stat views per student. Any attendance write for a student drops
    theirs and bumps their generation, so a view computed across that write
    is never stored. Views from earlier days are dropped when the date changes.
    """

    def __init__(self, today: Callable[[], date] = date.today):
        self._views: Dict[int, Dict[tuple, object]] = {}
        self._generations: Dict[int, int] = {}
        self._today = today
        self._day = today()
        self._lock = threading.Lock()

    def _roll_day(self):
        day = self._today()
        if day != self._day:
            self._views.clear()
            self._day = day

    def get_or_compute(self, student_id: int, key: tuple, compute: Callable):
        with self._lock:
            self._roll_day()
            views = self._views.get(student_id)
            if views is not None and key in views:
                return views[key]
            generation = self._generations.get(student_id, 0)
        value = compute()
        with self._lock:
            # Beech mein write hua to yeh view purana hai, cache mat karo
            if self._generations.get(student_id, 0) == generation:
                self._views.setdefault(student_id, {})[key] = value
        return value

    def invalidate(self, student_id: int):
        with self._lock:
            self._views.pop(student_id, None)
            self._generations[student_id] = self._generations.get(student_id, 0) + 1

    def clear(self):
        with self._lock:
            self._views.clear()


stats_cache = StatsCache()


# ===========================
#          WRITES
# ===========================

def find_active_schedule(client: BackendClient, student_id: int, subject: str, semester: str, class_type: str):
    return client.first("subject_schedules", [
        Eq("student_id", student_id),
        Eq("subject", subject),
        Eq("semester", semester),
        Eq("class_type", class_type),
        Eq("is_active", True),
    ])


def mark_attendance(
    client: BackendClient,
    student_id: int,
    subject: str,
    date_value: date,
    status: str,
    class_type: str,
    semester: str,
    marked_by: Optional[int] = None,
    notes: Optional[str] = None,
):
    if status not in STATUSES:
        raise ValueError(f"Invalid status '{status}'")
    if class_type not in CLASS_TYPES:
        raise ValueError(f"Invalid class type '{class_type}'")

    if find_active_schedule(client, student_id, subject, semester, class_type) is None:
        raise ScheduleNotFound("Subject schedule not found")

    record = client.upsert("attendance", {
        "student_id": student_id,
        "subject": subject,
        "date": date_value,
        "status": status,
        "class_type": class_type,
        "semester": semester,
        "marked_by": marked_by if marked_by is not None else student_id,
        "notes": notes or None,
    }, ATTENDANCE_KEY)

    stats_cache.invalidate(student_id)
    return record


@dataclass
class BulkResult:
    marked: int
    failed: List[int]


def bulk_mark_attendance(
    session_factory: Callable,
    student_ids: List[int],
    subject: str,
    date_value: date,
    status: str,
    class_type: str,
    semester: str,
    marked_by: Optional[int] = None,
    notes: Optional[str] = None,
    max_workers: int = None,
) -> BulkResult:
    """
    Fire one mark per student at once, then wait for all of them.
    No atomicity across the batch: rows that made it stay written.
    """

    def mark_one(student_id):
        db = session_factory()
        try:
            mark_attendance(BackendClient(db), student_id, subject, date_value, status,
                            class_type, semester, marked_by=marked_by, notes=notes)
            return None
        except (BackendError, ScheduleNotFound, ValueError) as e:
            print(f"Bulk attendance: student {student_id} not marked ({e})")
            return student_id
        finally:
            db.close()

    if not student_ids:
        return BulkResult(marked=0, failed=[])

    workers = max(1, min(max_workers or config.BULK_MARK_WORKERS, len(student_ids)))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        results = list(executor.map(mark_one, student_ids))

    failed = [sid for sid in results if sid is not None]
    return BulkResult(marked=len(student_ids) - len(failed), failed=failed)
