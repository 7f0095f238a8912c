from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from database import get_db
from services.backend_client import AuthError, AuthUser, BackendClient

bearer_scheme = HTTPBearer(auto_error=False)


# Har request ka apna client, caller ke token ke saath
def get_client(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> BackendClient:
    token = credentials.credentials if credentials else None
    return BackendClient(db, token=token)


def get_current_user(client: BackendClient = Depends(get_client)) -> AuthUser:
    if not client.token:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        client.decode_token(client.token)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e))

    user = client.get_current_user()
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")

    profile = client.first("profiles", {"id": user.id})
    if profile is not None and profile.is_active is False:
        raise HTTPException(status_code=403, detail="Account is deactivated")
    return user


def require_admin(user: AuthUser = Depends(get_current_user), client: BackendClient = Depends(get_client)) -> AuthUser:
    # Role hamesha user_roles table se, token ke claim se nahi
    if client.get_role(user.id) != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


def get_profile(user: AuthUser = Depends(get_current_user), client: BackendClient = Depends(get_client)):
    profile = client.first("profiles", {"id": user.id})
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile
