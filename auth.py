import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from fastapi import Depends, Response
from fastapi.security import APIKeyCookie
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel

import config
import database
import schemas
from errors import InvalidInput, Unauthorized

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
cookie_scheme = APIKeyCookie(name=config.COOKIE_NAME, auto_error=False)


class Principal(BaseModel):
    id: str
    email: str
    role: str


# ---------------------- Passwords & tokens ----------------------
def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # stored value is not a hash passlib recognises
        return False


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(days=config.ACCESS_TOKEN_EXPIRE_DAYS))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.JWT_SECRET, algorithm=config.ALGORITHM)


def authenticate(token: Optional[str]) -> Principal:
    """
    Resolve a cookie token to the admin it was issued for.

    Missing, malformed, expired and orphaned tokens all raise the same
    Unauthorized so callers cannot tell them apart.
    """
    if not token:
        raise Unauthorized()
    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.ALGORITHM])
    except JWTError as exc:
        logger.warning("rejected admin token: %s", type(exc).__name__)
        raise Unauthorized()

    admin_id = database.as_object_id(payload.get("sub"))
    admin = database.get_collection("admin").find_one({"_id": admin_id}) if admin_id else None
    if not admin:
        logger.warning("admin token refers to no admin")
        raise Unauthorized()
    return Principal(id=str(admin["_id"]), email=admin["email"], role=admin.get("role", "admin"))


def login(email: str, password: str) -> Tuple[Principal, str]:
    admin = database.get_collection("admin").find_one({"email": email.lower()})
    if not admin or not verify_password(password, admin.get("password", "")):
        raise Unauthorized("Invalid credentials")
    principal = Principal(id=str(admin["_id"]), email=admin["email"], role=admin.get("role", "admin"))
    token = create_access_token({"sub": principal.id, "email": principal.email, "role": principal.role})
    logger.info("admin %s logged in", principal.email)
    return principal, token


def create_admin(email: str, password: str, role: str = "admin") -> Tuple[dict, bool]:
    """Insert an admin unless one with this email exists. Returns (admin, created)."""
    email = email.lower()
    existing = database.find_one("admin", {"email": email})
    if existing:
        return existing, False
    if len(password) < 6:
        raise InvalidInput("password must be at least 6 characters", field="password")
    admin = schemas.validate("admin", {"email": email, "password": get_password_hash(password), "role": role})
    return database.create_document("admin", admin), True


# ---------------------- Cookie ----------------------
def _cookie_attrs() -> dict:
    # logout must repeat these exactly or browsers keep the old cookie
    return {"path": "/", "secure": config.IS_PRODUCTION, "httponly": True, "samesite": "lax"}


def set_auth_cookie(response: Response, token: str) -> None:
    max_age = config.ACCESS_TOKEN_EXPIRE_DAYS * 24 * 60 * 60
    response.set_cookie(config.COOKIE_NAME, token, max_age=max_age, **_cookie_attrs())


def clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(config.COOKIE_NAME, **_cookie_attrs())


# ---------------------- Dependencies ----------------------
def get_current_admin(token: Optional[str] = Depends(cookie_scheme)) -> Principal:
    return authenticate(token)


def get_optional_admin(token: Optional[str] = Depends(cookie_scheme)) -> Optional[Principal]:
    try:
        return authenticate(token)
    except Unauthorized:
        return None
