# adoptme/services/auth.py
from typing import Any, Dict, Tuple
import logging

from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..schemas.user import UserRegister
from ..security import create_access_token, session_user, verify_password
from ..utils import log_business_event
from .users import UsersService

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.users = UsersService(db)

    async def register(self, payload: UserRegister) -> Tuple[Dict[str, Any], str]:
        """Returns (session user, access token) for the new account."""
        doc = await self.users.create(payload)
        log_business_event(logger, "user_registered", {"email": doc["email"]}, str(doc["_id"]))
        return session_user(doc), create_access_token(doc)

    async def login(self, email: str, password: str) -> Tuple[Dict[str, Any], str]:
        doc = await self.users.find_by_email(email)
        if not doc or not verify_password(password, doc.get("password_hash", "")):
            logger.warning(f"Failed login attempt for {email}")
            raise HTTPException(status_code=401, detail="Invalid credentials")

        await self.users.touch_last_connection(doc["_id"])
        log_business_event(logger, "user_login", {"email": doc["email"]}, str(doc["_id"]))
        return session_user(doc), create_access_token(doc)
