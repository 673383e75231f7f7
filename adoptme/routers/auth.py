from fastapi import APIRouter, Depends, status, Request
from motor.motor_asyncio import AsyncIOMotorDatabase
import logging

from ..db import get_db
from ..security import get_current_user
from ..services.auth import AuthService
from ..services.users import UsersService
from ..schemas.auth import Login, AuthOut, HybridCheck
from ..schemas.user import UserRegister, UserOut
from ..middleware.rate_limit import apply_rate_limit

logger = logging.getLogger(__name__)

router = APIRouter()


def get_auth_service(db: AsyncIOMotorDatabase = Depends(get_db)) -> AuthService:
    return AuthService(db)


@router.post("/register", response_model=AuthOut, status_code=status.HTTP_201_CREATED)
async def register(
    request: Request,
    payload: UserRegister,
    service: AuthService = Depends(get_auth_service),
):
    # 5 registrations per minute per IP
    apply_rate_limit(request, "5/minute")

    user, token = await service.register(payload)
    request.session["user"] = user
    return {"user": user, "access_token": token, "message": "User registered successfully"}


@router.post("/login", response_model=AuthOut)
async def login(
    request: Request,
    payload: Login,
    service: AuthService = Depends(get_auth_service),
):
    # 10 attempts per minute per IP
    apply_rate_limit(request, "10/minute")

    user, token = await service.login(payload.email, payload.password)
    request.session["user"] = user
    return {"user": user, "access_token": token, "message": "Login successful"}


@router.post("/logout")
async def logout(request: Request):
    user = request.session.get("user") if "session" in request.scope else None
    if "session" in request.scope:
        request.session.clear()
    if user:
        logger.info(f"User {user.get('id')} logged out")
    return {"message": "Logout successful"}


@router.get("/profile", response_model=UserOut)
async def profile(
    current=Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    return await UsersService(db).find_one(current["id"])


@router.get("/test-hybrid", response_model=HybridCheck)
async def test_hybrid(current=Depends(get_current_user)):
    return {
        "message": f"Authenticated via {current['auth_method']}",
        "auth_method": current["auth_method"],
        "user": current,
    }
