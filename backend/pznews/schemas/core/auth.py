"""
Auth schemas
"""

from pydantic import Field

from pznews.schemas.common import RequestModel


class LoginRequest(RequestModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)
