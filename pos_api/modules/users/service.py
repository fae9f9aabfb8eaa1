"""
UsersService - login and user management.
"""

from typing import List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pos_api.core.exceptions import ConflictError, NotFoundError, UnauthorizedError
from pos_api.modules.users.auth import AuthService
from .models import User
from .schemas import (
    CreateUserDto,
    LoginRequest,
    LoginResponse,
    TokenResponse,
    UserResponse,
)


class UsersService:
    """
    Users service. All methods are static and take the request session.
    """

    @staticmethod
    def _issue_token(user: User) -> TokenResponse:
        token_data = {
            "sub": user.username,
            "user_id": user.id,
            "role": user.role.value,
        }
        return TokenResponse(access_token=AuthService.create_access_token(token_data))

    @staticmethod
    async def create(db: AsyncSession, create_dto: CreateUserDto) -> User:
        """
        Create a new user.

        Raises:
            ConflictError: If the username is taken
        """
        existing_user = await db.scalar(
            select(User).where(User.username == create_dto.username)
        )
        if existing_user:
            raise ConflictError("User already exists with this username")

        user = User(
            username=create_dto.username,
            password=AuthService.get_password_hash(create_dto.password),
            name=create_dto.name,
            role=create_dto.role,
            phone=create_dto.phone,
        )
        db.add(user)
        await db.flush()
        return user

    @staticmethod
    async def login(db: AsyncSession, login_dto: LoginRequest) -> LoginResponse:
        """
        Check credentials and issue an access token.

        Raises:
            NotFoundError: Unknown or deleted username
            UnauthorizedError: Wrong password
        """
        user = await db.scalar(
            select(User).where(
                User.username == login_dto.username, User.deleted_at.is_(None)
            )
        )
        if not user:
            raise NotFoundError("User", login_dto.username)
        if not AuthService.verify_password(login_dto.password, user.password):
            raise UnauthorizedError("Incorrect password")

        return LoginResponse(
            user=UserResponse.model_validate(user),
            token=UsersService._issue_token(user),
        )

    @staticmethod
    async def find_all(db: AsyncSession) -> List[User]:
        """All active users, oldest first."""
        result = await db.execute(
            select(User).where(User.deleted_at.is_(None)).order_by(User.id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def find_one(db: AsyncSession, user_id: int) -> User:
        """
        Find a single active user by id.

        Raises:
            NotFoundError: If user not found or is soft-deleted
        """
        user = await db.scalar(
            select(User).where(User.id == user_id, User.deleted_at.is_(None))
        )
        if not user:
            raise NotFoundError("User", user_id)
        return user
