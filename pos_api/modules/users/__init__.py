"""Users module"""

from .models import User, Role
from .service import UsersService
from .schemas import CreateUserDto, UserResponse
from .router import router, auth_router

__all__ = ["User", "Role", "UsersService", "CreateUserDto", "UserResponse", "router", "auth_router"]
