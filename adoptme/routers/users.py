# adoptme/routers/users.py
from fastapi import APIRouter, Depends, HTTPException, status, Query, Request, UploadFile, File
from typing import Optional, List
from motor.motor_asyncio import AsyncIOMotorDatabase
import logging

from ..db import get_db
from ..security import get_current_user, require_admin, session_user
from ..services.users import UsersService
from ..schemas.user import (
    UserCreate, UserUpdate, UserOut, UserPage, UserRole, UserDeleted, DocumentsUploaded,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_users_service(db: AsyncIOMotorDatabase = Depends(get_db)) -> UsersService:
    return UsersService(db)


def _ensure_self_or_admin(current: dict, user_id: str) -> None:
    if current["role"] != UserRole.admin.value and current["id"] != user_id:
        raise HTTPException(status_code=403, detail="You can only access your own account")


def _refresh_session(request: Request, current: dict, user: dict) -> None:
    """Keeps the session cookie in step with a profile edit."""
    if current.get("auth_method") == "session" and user.get("id") == current["id"]:
        request.session["user"] = session_user(user)


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreate,
    admin=Depends(require_admin),
    service: UsersService = Depends(get_users_service),
):
    doc = await service.create(payload)
    return await service.find_one(str(doc["_id"]))


@router.get("", response_model=UserPage)
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    role: Optional[UserRole] = None,
    admin=Depends(require_admin),
    service: UsersService = Depends(get_users_service),
):
    return await service.find_all(page, limit, role)


# -------- own profile --------

@router.get("/profile/me", response_model=UserOut)
async def get_my_profile(
    current=Depends(get_current_user),
    service: UsersService = Depends(get_users_service),
):
    return await service.find_one(current["id"])


@router.patch("/profile/me", response_model=UserOut)
@router.put("/profile/me", response_model=UserOut)
async def update_my_profile(
    request: Request,
    payload: UserUpdate,
    current=Depends(get_current_user),
    service: UsersService = Depends(get_users_service),
):
    user = await service.update(current["id"], payload)
    _refresh_session(request, current, user)
    return user


# -------- by id --------

@router.get("/{uid}", response_model=UserOut)
async def get_user(
    uid: str,
    current=Depends(get_current_user),
    service: UsersService = Depends(get_users_service),
):
    _ensure_self_or_admin(current, uid)
    return await service.find_one(uid)


@router.patch("/{uid}", response_model=UserOut)
@router.put("/{uid}", response_model=UserOut)
async def update_user(
    uid: str,
    request: Request,
    payload: UserUpdate,
    current=Depends(get_current_user),
    service: UsersService = Depends(get_users_service),
):
    _ensure_self_or_admin(current, uid)
    user = await service.update(uid, payload)
    _refresh_session(request, current, user)
    return user


@router.delete("/{uid}", response_model=UserDeleted)
async def delete_user(
    uid: str,
    admin=Depends(require_admin),
    service: UsersService = Depends(get_users_service),
):
    await service.remove(uid)
    return {"message": "User deleted successfully", "id": uid}


@router.post("/{uid}/documents", response_model=DocumentsUploaded)
async def upload_documents(
    uid: str,
    files: List[UploadFile] = File(...),
    current=Depends(get_current_user),
    service: UsersService = Depends(get_users_service),
):
    _ensure_self_or_admin(current, uid)
    user = await service.upload_documents(uid, files)
    return {
        "message": "Documents uploaded successfully",
        "documents_count": len(files),
        "user": user,
    }
