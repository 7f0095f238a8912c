from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from database import Base
from datetime import datetime

# Login account (email + password hash). Profile data lives in 'profiles'.
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.now)

    profile = relationship("Profile", uselist=False, back_populates="user")
    role_val = relationship("UserRole", uselist=False)


class Profile(Base):
    __tablename__ = "profiles"

    # Same id as users.id (one profile per account)
    id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    name = Column(String(100), nullable=False)
    college_email = Column(String(255), nullable=False)
    mobile_number = Column(String(15), nullable=False, default="")
    semester = Column(String(10), nullable=False, default="1st")
    avatar_url = Column(String(500), nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    user = relationship("User", back_populates="profile")


class UserRole(Base):
    __tablename__ = "user_roles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    role = Column(String(20), nullable=False, default="student")  # 'admin' ya 'student'


# Signed-out tokens (jti) so a logged out JWT cannot be reused
class RevokedToken(Base):
    __tablename__ = "revoked_tokens"

    id = Column(Integer, primary_key=True, index=True)
    jti = Column(String(64), unique=True, index=True, nullable=False)
    revoked_at = Column(DateTime, default=datetime.now)
