"""
Backend Client
Single entry point for everything the portal keeps server side: table rows,
stored files, login accounts and the two server functions.

Routers and services never touch the ORM session for writes directly; they go
through a BackendClient so that every write commits (or rolls back) the same way
and every failure comes out as a BackendError.
"""

import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, NamedTuple, Optional, Union

from jose import JWTError, jwt
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

import config
from models.attendance import AttendanceRecord, SubjectSchedule
from models.campus import Event, MarSupport, Notification, Organizer
from models.library import LabManual, Note, PyqFolder, QuestionPaper, Syllabus
from models.users import Profile, RevokedToken, User, UserRole

TABLES = {
    "users": User,
    "profiles": Profile,
    "user_roles": UserRole,
    "subject_schedules": SubjectSchedule,
    "attendance": AttendanceRecord,
    "pyq_folders": PyqFolder,
    "question_papers": QuestionPaper,
    "notes": Note,
    "syllabus": Syllabus,
    "lab_manuals": LabManual,
    "events": Event,
    "organizers": Organizer,
    "mar_support": MarSupport,
    "notifications": Notification,
}

BUCKETS = {"documents", "avatars"}


# ===========================
#          ERRORS
# ===========================

class BackendError(Exception):
    """Any failure reported by the store, the file storage or a function."""


class RowNotFound(BackendError):
    pass


class AuthError(BackendError):
    pass


class FunctionError(BackendError):
    pass


# ===========================
#     FILTERS & ORDERING
# ===========================

class Eq(NamedTuple):
    column: str
    value: Any


class IsNull(NamedTuple):
    column: str


class AnyOf:
    """OR of the given clauses, e.g. AnyOf(IsNull("semester"), Eq("semester", "5th"))."""

    def __init__(self, *clauses):
        self.clauses = clauses


class Order(NamedTuple):
    column: str
    descending: bool = False


Filters = Union[Dict[str, Any], List[Any], None]


@dataclass
class AuthUser:
    id: int
    email: str


@dataclass
class AuthSession:
    access_token: str
    user: AuthUser
    role: str
    token_type: str = "bearer"


# ===========================
#          CLIENT
# ===========================

class BackendClient:
    def __init__(self, db: Session, storage_dir: str = None, public_base_url: str = None, token: str = None):
        self.db = db
        self.storage_dir = storage_dir or config.STORAGE_DIR
        self.public_base_url = (public_base_url or config.PUBLIC_BASE_URL).rstrip("/")
        self.token = token

    # --- helpers ---
    def _model(self, table: str):
        model = TABLES.get(table)
        if model is None:
            raise BackendError(f"Unknown table '{table}'")
        return model

    def _column(self, model, name: str):
        if name not in model.__table__.columns:
            raise BackendError(f"Unknown column '{name}' on '{model.__tablename__}'")
        return getattr(model, name)

    def _clause(self, model, item):
        if isinstance(item, Eq):
            col = self._column(model, item.column)
            return col.is_(None) if item.value is None else col == item.value
        if isinstance(item, IsNull):
            return self._column(model, item.column).is_(None)
        if isinstance(item, AnyOf):
            return or_(*[self._clause(model, c) for c in item.clauses])
        raise BackendError(f"Unsupported filter: {item!r}")

    def _where(self, model, filters: Filters):
        if not filters:
            return []
        if isinstance(filters, dict):
            filters = [Eq(k, v) for k, v in filters.items()]
        return [self._clause(model, f) for f in filters]

    def _check_keys(self, model, row: Dict[str, Any]):
        for key in row:
            self._column(model, key)

    def _commit(self):
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise BackendError(str(e.orig) if getattr(e, "orig", None) else str(e)) from e

    # ===========================
    #        TABLE ROWS
    # ===========================

    def query(self, table: str, filters: Filters = None, ordering=None, limit: int = None) -> list:
        model = self._model(table)
        q = self.db.query(model).filter(*self._where(model, filters))

        if ordering is not None:
            if isinstance(ordering, tuple) and not isinstance(ordering, Order):
                ordering = Order(ordering[0], str(ordering[1]).lower() == "desc")
            col = self._column(model, ordering.column)
            q = q.order_by(col.desc() if ordering.descending else col.asc())
        if limit:
            q = q.limit(limit)

        try:
            return q.all()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise BackendError(str(e)) from e

    def first(self, table: str, filters: Filters = None):
        rows = self.query(table, filters, limit=1)
        return rows[0] if rows else None

    def get(self, table: str, id: int):
        model = self._model(table)
        row = self.db.get(model, id)
        if row is None:
            raise RowNotFound(f"No row {id} in '{table}'")
        return row

    def insert(self, table: str, row: Dict[str, Any]):
        model = self._model(table)
        self._check_keys(model, row)
        obj = model(**row)
        self.db.add(obj)
        self._commit()
        self.db.refresh(obj)
        return obj

    def update(self, table: str, id: int, patch: Dict[str, Any]):
        model = self._model(table)
        self._check_keys(model, patch)
        obj = self.get(table, id)
        for key, value in patch.items():
            setattr(obj, key, value)
        self._commit()
        self.db.refresh(obj)
        return obj

    def upsert(self, table: str, row: Dict[str, Any], conflict_keys: List[str]):
        """
        Insert 'row', or overwrite the existing row that matches it on every
        conflict key. Two writers racing on the same key end up last-write-wins.
        """
        model = self._model(table)
        self._check_keys(model, row)
        key_filter = {k: row.get(k) for k in conflict_keys}

        existing = self.first(table, key_filter)
        if existing is None:
            obj = model(**row)
            self.db.add(obj)
            try:
                self.db.commit()
                self.db.refresh(obj)
                return obj
            except IntegrityError:
                # Someone else inserted the same key in between: overwrite theirs
                self.db.rollback()
                existing = self.first(table, key_filter)
                if existing is None:
                    raise BackendError(f"Upsert on '{table}' failed")

        for key, value in row.items():
            if key not in conflict_keys:
                setattr(existing, key, value)
        if "updated_at" in model.__table__.columns:
            existing.updated_at = datetime.now()
        self._commit()
        self.db.refresh(existing)
        return existing

    def delete(self, table: str, id: int):
        obj = self.get(table, id)
        self.db.delete(obj)
        self._commit()
        return obj

    # ===========================
    #        FILE STORAGE
    # ===========================

    def _object_path(self, bucket: str, path: str) -> str:
        if bucket not in BUCKETS:
            raise BackendError(f"Bucket not found: '{bucket}'")
        clean = os.path.normpath(path).replace("\\", "/")
        if not path or clean.startswith("/") or clean == ".." or clean.startswith("../"):
            raise BackendError(f"Invalid object path: '{path}'")
        return os.path.join(self.storage_dir, bucket, clean)

    def upload_file(self, bucket: str, path: str, data: bytes) -> str:
        full_path = self._object_path(bucket, path)
        if os.path.exists(full_path):
            raise BackendError("The resource already exists")
        try:
            os.makedirs(os.path.dirname(full_path), exist_ok=True)
            with open(full_path, "wb") as buffer:
                buffer.write(data)
        except OSError as e:
            raise BackendError(f"Upload failed: {e}") from e
        return self.get_public_url(bucket, path)

    def remove_file(self, bucket: str, path: str):
        full_path = self._object_path(bucket, path)
        try:
            os.remove(full_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise BackendError(f"Remove failed: {e}") from e

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self.public_base_url}/storage/{bucket}/{path.lstrip('/')}"

    def path_from_public_url(self, bucket: str, url: Optional[str]) -> Optional[str]:
        """Object path for a URL this storage handed out, None for outside links."""
        prefix = f"{self.public_base_url}/storage/{bucket}/"
        if url and url.startswith(prefix):
            return url[len(prefix):]
        return None

    def local_path(self, bucket: str, path: str) -> str:
        return self._object_path(bucket, path)

    # ===========================
    #           AUTH
    # ===========================

    def _create_token(self, user: User, role: str) -> str:
        expire = datetime.utcnow() + timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
        to_encode = {
            "sub": str(user.id),
            "email": user.email,
            "role": role,
            "jti": uuid.uuid4().hex,
            "exp": expire,
        }
        return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)

    def decode_token(self, token: str, verify_exp: bool = True) -> dict:
        try:
            payload = jwt.decode(
                token, config.SECRET_KEY, algorithms=[config.ALGORITHM],
                options={"verify_exp": verify_exp},
            )
        except JWTError as e:
            raise AuthError("Session expired, please login again") from e

        jti = payload.get("jti")
        if not jti or self.db.query(RevokedToken).filter(RevokedToken.jti == jti).first():
            raise AuthError("Session expired, please login again")
        return payload

    def sign_up(self, email: str, password: str, metadata: Dict[str, Any] = None) -> AuthUser:
        metadata = metadata or {}
        email = email.strip().lower()
        if self.db.query(User).filter(User.email == email).first():
            raise AuthError("User already registered")

        user = User(email=email, password_hash=generate_password_hash(password))
        self.db.add(user)
        try:
            self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise BackendError(str(e)) from e

        self.db.add(Profile(
            id=user.id,
            name=metadata.get("name") or email.split("@")[0],
            college_email=email,
            mobile_number=metadata.get("mobile_number") or "",
            semester=metadata.get("semester") or "1st",
        ))
        self.db.add(UserRole(user_id=user.id, role="student"))
        self._commit()
        return AuthUser(id=user.id, email=user.email)

    def sign_in(self, email: str, password: str) -> AuthSession:
        user = self.db.query(User).filter(User.email == email.strip().lower()).first()
        if not user or not check_password_hash(user.password_hash, password):
            raise AuthError("Invalid login credentials")

        role = self.get_role(user.id) or "student"
        self.token = self._create_token(user, role)
        return AuthSession(access_token=self.token, user=AuthUser(id=user.id, email=user.email), role=role)

    def sign_out(self):
        if not self.token:
            return
        try:
            payload = self.decode_token(self.token, verify_exp=False)
        except AuthError:
            # Already revoked or not ours: nothing left to sign out
            self.token = None
            return
        self.db.add(RevokedToken(jti=payload["jti"]))
        self._commit()
        self.token = None

    def get_current_user(self) -> Optional[AuthUser]:
        if not self.token:
            return None
        try:
            payload = self.decode_token(self.token)
        except AuthError:
            return None
        user = self.db.get(User, int(payload.get("sub", 0) or 0))
        if user is None:
            return None
        return AuthUser(id=user.id, email=user.email)

    def get_role(self, user_id: int) -> Optional[str]:
        row = self.db.query(UserRole).filter(UserRole.user_id == user_id).first()
        return row.role if row else None

    # ===========================
    #      SERVER FUNCTIONS
    # ===========================

    def invoke_function(self, name: str, payload: Dict[str, Any] = None) -> Dict[str, Any]:
        from services import admin_setup, pyq_analyzer

        handlers = {
            "analyze-pyq": pyq_analyzer.analyze_pyq,
            "setup-admin": admin_setup.setup_admin,
        }
        handler = handlers.get(name)
        if handler is None:
            raise FunctionError(f"Function not found: '{name}'")
        return handler(self, payload or {})
