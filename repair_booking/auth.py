import secrets
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from .config import Settings
from .exceptions import Unauthorized

# auto_error=False so a missing header goes through our own 401 + challenge
security = HTTPBasic(realm="admin", auto_error=False)


def verify_credentials(username: str, password: str, settings: Settings) -> bool:
    """Check the admin username/password pair"""
    user_ok = secrets.compare_digest(username.encode("utf-8"), settings.admin_user.encode("utf-8"))
    pass_ok = secrets.compare_digest(password.encode("utf-8"), settings.admin_pass.encode("utf-8"))
    return user_ok and pass_ok


def get_current_admin(
    request: Request,
    credentials: Optional[HTTPBasicCredentials] = Depends(security),
) -> str:
    """Dependency for admin-only endpoints; returns the admin username"""
    settings: Settings = request.app.state.settings

    if credentials is None or not verify_credentials(credentials.username, credentials.password, settings):
        raise Unauthorized("Invalid admin credentials")

    return credentials.username
