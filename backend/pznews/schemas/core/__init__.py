from pznews.schemas.core.user import UserCreate, UserUpdate, UserResponse, UserRole
from pznews.schemas.core.auth import LoginRequest

__all__ = ["UserCreate", "UserUpdate", "UserResponse", "UserRole", "LoginRequest"]
