# app/utils/authz.py
from __future__ import annotations

import os

from fastapi import HTTPException, Request

ADMIN_EMAIL = (os.getenv("ADMIN_EMAIL") or "admin@localhost").strip().lower()


def require_admin(request: Request) -> None:
    """
    Guard for the admin API. Sign-in itself lives outside this app; it only
    has to leave {"email": ...} under "user" in the session.
    - No session user: 401
    - Signed in but not the admin email: 403
    """
    user = request.session.get("user")
    if not user:
        raise HTTPException(status_code=401, detail="Unauthorized")

    email = (user.get("email") or "").strip().lower()
    if email != ADMIN_EMAIL:
        raise HTTPException(status_code=403, detail="Forbidden")
