from datetime import datetime, timedelta
from typing import Optional
import logging
import re
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from passlib.context import CryptContext
from motor.motor_asyncio import AsyncIOMotorDatabase
from bson import ObjectId

from .config import get_settings
from .db import get_db

logger = logging.getLogger(__name__)

settings = get_settings()
ALGO = "HS256"
pwd = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)

OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def hash_password(plain: str) -> str:
    return pwd.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    return pwd.verify(plain, hashed)


def create_access_token(user: dict, expires_hours: Optional[int] = None) -> str:
    """Signs a JWT for a user document (raw `_id` or already converted `id`)."""
    now = datetime.utcnow()
    expire = now + timedelta(hours=expires_hours or settings.jwt_expires_hours)
    payload = {
        "sub": str(user.get("_id") or user.get("id")),
        "user_name": user["user_name"],
        "role": user.get("role", "user"),
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGO)


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, settings.jwt_secret, algorithms=[ALGO])


def session_user(doc: dict) -> dict:
    """The subset of a user document stored in the session cookie."""
    return {
        "id": str(doc.get("_id") or doc.get("id")),
        "user_name": doc["user_name"],
        "first_name": doc.get("first_name", ""),
        "last_name": doc.get("last_name", ""),
        "email": doc["email"],
        "role": doc.get("role", "user"),
    }


def _from_session(request: Request) -> Optional[dict]:
    if "session" not in request.scope:
        return None
    user = request.session.get("user")
    if not isinstance(user, dict):
        return None
    if not user.get("id") or not user.get("email") or not user.get("role"):
        return None
    if not OBJECT_ID_RE.match(str(user["id"])):
        return None
    if not EMAIL_RE.match(str(user["email"])):
        return None
    return {
        "id": user["id"],
        "user_name": user.get("user_name", ""),
        "role": user["role"],
        "email": user["email"],
        "first_name": user.get("first_name"),
        "last_name": user.get("last_name"),
        "auth_method": "session",
    }


async def _from_jwt(
    credentials: Optional[HTTPAuthorizationCredentials],
    db: AsyncIOMotorDatabase,
) -> Optional[dict]:
    if credentials is None or credentials.scheme.lower() != "bearer":
        return None
    try:
        payload = decode_access_token(credentials.credentials)
    except JWTError:
        return None

    sub = payload.get("sub")
    if not sub or not payload.get("user_name") or not payload.get("role"):
        return None
    if not OBJECT_ID_RE.match(str(sub)):
        return None

    # deleted users lose access even with an unexpired token
    doc = await db.users.find_one({"_id": ObjectId(sub)}, {"password_hash": 0})
    if not doc:
        return None
    return {
        "id": str(doc["_id"]),
        "user_name": doc.get("user_name", payload["user_name"]),
        "role": doc.get("role", payload["role"]),
        "email": doc.get("email"),
        "first_name": doc.get("first_name"),
        "last_name": doc.get("last_name"),
        "auth_method": "jwt",
    }


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncIOMotorDatabase = Depends(get_db),
) -> dict:
    """
    Hybrid guard: a valid session wins, otherwise a valid bearer token,
    otherwise 401.
    """
    current = _from_session(request)
    if current is None:
        current = await _from_jwt(credentials, db)
    if current is None:
        raise HTTPException(
            status_code=401,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    request.state.user_id = current["id"]
    return current


async def require_admin(current: dict = Depends(get_current_user)) -> dict:
    if current.get("role") != "admin":
        logger.warning(f"User {current['id']} denied admin-only access")
        raise HTTPException(status_code=403, detail="Forbidden - Admin role required")
    return current
