from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, Text, ForeignKey
from database import Base
from datetime import datetime

class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    event_date = Column(Date, nullable=False)
    event_time = Column(String(20), nullable=True)
    location = Column(String(200), nullable=True)
    organizer = Column(String(200), nullable=False)
    semester = Column(String(10), nullable=True)  # NULL = sabhi semesters
    image_url = Column(String(500), nullable=True)
    is_active = Column(Boolean, default=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.now)


class Organizer(Base):
    __tablename__ = "organizers"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    semester = Column(String(10), nullable=False, index=True)
    file_url = Column(String(500), nullable=True)
    file_name = Column(String(255), nullable=True)
    link_url = Column(String(500), nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.now)


class MarSupport(Base):
    __tablename__ = "mar_support"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    link_url = Column(String(500), nullable=False)
    semester = Column(String(10), nullable=False, index=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.now)


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(10), nullable=False, default="info")  # info / warning / success / urgent
    semester = Column(String(10), nullable=True)  # NULL = sabhi semesters
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.now)
