from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, field_validator, model_validator

import config
from security import get_client, get_current_user
from services.backend_client import AuthError, AuthUser, BackendClient, BackendError

# ✅ Router setup with prefix
router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


# ✅ Request Models
class RegisterSchema(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    mobile_number: str = Field(..., min_length=1, max_length=15)
    semester: str
    password: str = Field(..., min_length=6)
    confirm_password: str

    @field_validator("email")
    @classmethod
    def email_shape(cls, v):
        v = v.strip().lower()
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError("Invalid email address")
        return v

    @field_validator("semester")
    @classmethod
    def known_semester(cls, v):
        if v not in config.SEMESTERS:
            raise ValueError(f"Semester must be one of {', '.join(config.SEMESTERS)}")
        return v

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class LoginSchema(BaseModel):
    email: str
    password: str


def _session_response(session) -> dict:
    return {
        "access_token": session.access_token,
        "token_type": session.token_type,
        "user": {"id": session.user.id, "email": session.user.email},
        "role": session.role,
    }


# 1. Register
@router.post("/register")
def register(data: RegisterSchema, client: BackendClient = Depends(get_client)):
    try:
        user = client.sign_up(data.email, data.password, {
            "name": data.name.strip(),
            "mobile_number": data.mobile_number.strip(),
            "semester": data.semester,
        })
    except AuthError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except BackendError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"status": "success", "message": "Registration successful", "user": {"id": user.id, "email": user.email}}


# 2. Student Login
@router.post("/login")
def login(data: LoginSchema, client: BackendClient = Depends(get_client)):
    try:
        session = client.sign_in(data.email, data.password)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e))

    profile = client.first("profiles", {"id": session.user.id})
    if profile is not None and profile.is_active is False:
        client.sign_out()
        raise HTTPException(status_code=403, detail="Account is deactivated")
    return _session_response(session)


# 3. Admin Login: same sign-in, phir role check (user_roles table se)
@router.post("/admin/login")
def admin_login(data: LoginSchema, client: BackendClient = Depends(get_client)):
    try:
        session = client.sign_in(data.email, data.password)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e))

    if session.role != "admin":
        client.sign_out()
        raise HTTPException(status_code=403, detail="Access denied. Admin privileges required.")
    return _session_response(session)


# 4. Logout: token revoke ho jata hai
@router.post("/logout")
def logout(user: AuthUser = Depends(get_current_user), client: BackendClient = Depends(get_client)):
    try:
        client.sign_out()
    except BackendError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"status": "success", "message": "Logged out"}


# 5. Current user
@router.get("/me")
def me(user: AuthUser = Depends(get_current_user), client: BackendClient = Depends(get_client)):
    profile = client.first("profiles", {"id": user.id})
    return {
        "id": user.id,
        "email": user.email,
        "role": client.get_role(user.id) or "student",
        "name": profile.name if profile else None,
        "semester": profile.semester if profile else None,
    }
