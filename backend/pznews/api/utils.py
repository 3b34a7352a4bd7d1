"""
Response helpers shared by the routers
"""

from typing import Any, Dict, Type

from pydantic import BaseModel


def dump(schema: Type[BaseModel], obj: Any) -> Dict[str, Any]:
    return schema.model_validate(obj).model_dump(mode="json", by_alias=True)


def page(schema: Type[BaseModel], result: Dict[str, Any]) -> Dict[str, Any]:
    """Service list result -> {data, count, hasMore}"""
    return {
        "data": [dump(schema, item) for item in result["data"]],
        "count": result["count"],
        "hasMore": result["has_more"],
    }
