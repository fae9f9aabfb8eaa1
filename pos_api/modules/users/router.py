"""
Users Router - login plus admin user management.
"""

from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pos_api.core.db.engine import get_db_util
from pos_api.core.response_interceptor import CustomAPIRoute
from .service import UsersService
from .schemas import CreateUserDto, LoginRequest, LoginResponse, UserResponse
from .auth import get_current_user, TokenData, require_admin

auth_router = APIRouter(tags=["auth"], route_class=CustomAPIRoute)
router = APIRouter(prefix="/users", tags=["users"], route_class=CustomAPIRoute)


@auth_router.post("/login", response_model=LoginResponse)
async def login_user(login_dto: LoginRequest, db: AsyncSession = Depends(get_db_util)):
    """Login a user and receive a bearer token"""
    return await UsersService.login(db, login_dto)


@router.get("", response_model=List[UserResponse])
async def get_all_users(
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_admin),
):
    """Get all users (Admin only)"""
    return await UsersService.find_all(db)


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    dto: CreateUserDto,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_admin),
):
    """Create a staff account (Admin only)"""
    user = await UsersService.create(db, dto)
    await db.commit()
    return user


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user),
):
    """Get current user profile from JWT token."""
    return await UsersService.find_one(db, current_user.user_id)
