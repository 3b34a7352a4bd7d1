"""
Shared schema pieces
Request bodies accept camelCase keys alongside snake_case field names.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class RequestModel(BaseModel):
    """Base for request bodies"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "ignore"


class ORMModel(BaseModel):
    """Base for responses built from ORM rows"""

    class Config:
        from_attributes = True
