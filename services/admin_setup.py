"""
Admin bootstrap (server function 'setup-admin').
Makes sure the configured admin account exists and carries the admin role.
Safe to call any number of times.
"""

import config
from services.backend_client import AuthError, BackendError, Eq


def setup_admin(client, payload: dict = None) -> dict:
    email = config.ADMIN_EMAIL.strip().lower()
    if not config.ADMIN_PASSWORD:
        return {"success": False, "status": "failure", "error": "ADMIN_PASSWORD is not configured"}

    try:
        existing = client.first("users", {"email": email})
        if existing is not None:
            _ensure_admin_role(client, existing.id)
            return {
                "success": True,
                "status": "already-exists",
                "message": "Admin user already exists",
                "userId": existing.id,
            }

        user = client.sign_up(email, config.ADMIN_PASSWORD, {
            "name": config.ADMIN_NAME,
            "mobile_number": "0000000000",
        })
        _ensure_admin_role(client, user.id)
        return {
            "success": True,
            "status": "success",
            "message": "Admin user created successfully",
            "userId": user.id,
        }
    except (AuthError, BackendError) as e:
        print(f"Error in setup-admin: {e}")
        return {"success": False, "status": "failure", "error": str(e)}


def _ensure_admin_role(client, user_id: int):
    role = client.first("user_roles", [Eq("user_id", user_id)])
    if role is None:
        client.insert("user_roles", {"user_id": user_id, "role": "admin"})
    elif role.role != "admin":
        client.update("user_roles", role.id, {"role": "admin"})
