from sqlalchemy import Column, Integer, String, Date, Boolean, DateTime, Text, ForeignKey, UniqueConstraint
from database import Base
from datetime import datetime

class SubjectSchedule(Base):
    __tablename__ = "subject_schedules"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    subject = Column(String(100), nullable=False)
    weekly_classes = Column(Integer, nullable=False, default=4)
    class_type = Column(String(10), nullable=False, default="theory")  # theory / lab
    semester = Column(String(10), nullable=False)
    day_of_week = Column(String(10), nullable=True)  # monday ... sunday

    # Removing a subject only flips this flag, old attendance rows stay
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class AttendanceRecord(Base):
    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("student_id", "subject", "date", "class_type", name="uq_attendance_key"),
    )

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    subject = Column(String(100), nullable=False)
    date = Column(Date, index=True, nullable=False)

    # Status: present / absent / late (late counts as attended)
    status = Column(String(10), nullable=False, default="present")
    class_type = Column(String(10), nullable=False, default="theory")
    semester = Column(String(10), nullable=False)
    marked_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
