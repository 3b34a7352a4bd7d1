"""
Core models: accounts
"""

from pznews.models.core.user import User, USER_ROLES

__all__ = ["User", "USER_ROLES"]
