"""
User DTOs (Data Transfer Objects)
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from .models import Role


class UserResponse(BaseModel):
    """Response model for User entity"""

    id: int
    username: str
    name: str
    role: Role
    phone: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    message: str = "Login successful"
    user: UserResponse
    token: TokenResponse


class CreateUserDto(BaseModel):
    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=6, max_length=128)
    name: str = Field(..., min_length=1, max_length=255)
    role: Role = Role.CASHIER
    phone: Optional[str] = Field(None, max_length=50)
